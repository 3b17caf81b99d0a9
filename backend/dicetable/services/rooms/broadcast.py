"""Fan-out of room state changes to every connection subscribed to a room."""

from typing import Optional

from dicetable import socketio
from dicetable.models import DiceResult, Player, Room


def channel(room_key: str) -> str:
    return f"room:{room_key}"


def _emit(room: Room, event: str, payload, namespace: str = '/', skip_sid: Optional[str] = None) -> None:
    socketio.emit(event, payload, to=channel(room.key), namespace=namespace, skip_sid=skip_sid)


def players_updated(room: Room, namespace: str = '/') -> None:
    _emit(room, 'updatePlayers', room.players_dict(), namespace)


def taken_chars(room: Room, namespace: str = '/') -> None:
    _emit(room, 'takenChars', room.taken_chars(), namespace)


def game_started(room: Room, namespace: str = '/') -> None:
    _emit(room, 'gameStarted', {
        'playerOrder': list(room.player_order),
        'currentTurn': room.current_turn,
    }, namespace)


def dice_rolled(room: Room, result: DiceResult, namespace: str = '/') -> None:
    _emit(room, 'diceRolled', result.to_dict(), namespace)


def turn_changed(room: Room, namespace: str = '/') -> None:
    _emit(room, 'turnChanged', {'currentTurn': room.current_turn}, namespace)


def game_reset(room: Room, reason: str, namespace: str = '/') -> None:
    _emit(room, 'gameReset', reason, namespace)


def player_moved(room: Room, player: Player, namespace: str = '/') -> None:
    # The mover already has the position locally
    _emit(room, 'playerMoved', {'id': player.sid, 'x': player.x, 'y': player.y},
          namespace, skip_sid=player.sid)
