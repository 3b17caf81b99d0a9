from flask_socketio import join_room, leave_room, emit
from flask import current_app, request
from dicetable import socketio
from dicetable.models import Room, parse_amount
from dicetable.services.rooms import RoomError, RoomNotFound, WrongPassword
from dicetable.services.rooms import broadcast
from typing import Optional, Tuple

GAME_RESET_REASON = 'Not enough players, game reset'


def _store():
    return current_app.extensions['rooms']


def _registry():
    return current_app.extensions['connections']


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _namespace() -> str:
    return getattr(request, 'namespace', None) or '/'


def _current_room() -> Tuple[Optional[Room], str]:
    sid = _get_sid()
    room_key = _registry().room_of(sid)
    if room_key is None:
        return None, sid
    room = _store().get_room(room_key)
    if room is None or room.closed:
        return None, sid
    return room, sid


def _reject(exc: RoomError) -> None:
    current_app.logger.warning(f"[room-reject] room={exc.room_key} sid={_get_sid()} code={exc.code}")
    emit('error', exc.to_dict())


def _payload(data) -> Tuple[Optional[str], str]:
    data = data if isinstance(data, dict) else {}
    room_key = data.get('roomId')
    if not isinstance(room_key, str) or not room_key:
        return None, ''
    password = data.get('password')
    return room_key, '' if password is None else str(password)


# ---- Join / departure sequences ----

def _join(room: Room) -> None:
    """Subscribe the caller to the room and send it the initial state.

    Runs under the room lock so no broadcast can land between the snapshot
    and the subscription.
    """
    sid = _get_sid()
    previous = _registry().room_of(sid)
    if previous is not None and previous != room.key:
        _depart(sid, previous, leave=True)

    with room.lock:
        if room.closed:
            raise RoomNotFound(room.key)
        join_room(broadcast.channel(room.key))
        _registry().bind(sid, room.key)
        emit('roomJoined', room.snapshot())
    current_app.logger.info(f"[room-join] room={room.key} sid={sid}")


def _depart(sid: str, room_key: str, leave: bool) -> None:
    registry = _registry()
    store = _store()
    room = store.get_room(room_key)
    if room is None:
        registry.unbind(sid)
        return

    ns = _namespace()
    min_players = current_app.config['MIN_PLAYERS']
    with room.lock:
        registry.unbind(sid)
        if leave:
            leave_room(broadcast.channel(room_key))
        departure = room.remove_player(sid, min_players)
        if departure.reset:
            current_app.logger.info(f"[game-reset] room={room_key} players={len(room.players)}")
            broadcast.game_reset(room, GAME_RESET_REASON, ns)
        elif departure.turn_changed:
            current_app.logger.info(f"[turn] room={room_key} current={room.current_turn} reason=departure")
            broadcast.turn_changed(room, ns)
        if departure.removed:
            broadcast.players_updated(room, ns)
            broadcast.taken_chars(room, ns)
        if registry.count(room_key) == 0:
            store.delete_room(room_key)
            current_app.logger.info(f"[room-delete] room={room_key}")
    current_app.logger.info(f"[room-leave] room={room_key} sid={sid} removed={departure.removed}")


# ---- Handlers ----

def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    room_key = _registry().room_of(sid)
    if room_key is None:
        return
    _depart(sid, room_key, leave=False)


def handle_create_room(data=None):
    room_key, password = _payload(data)
    if room_key is None:
        return
    try:
        # Leaving a previous room happens inside _join while the new room is locked
        with _store().creating(room_key, password) as room:
            current_app.logger.info(f"[room-create] room={room_key} sid={_get_sid()} protected={room.protected}")
            _join(room)
    except RoomError as exc:
        _reject(exc)


def handle_join_room(data=None):
    room_key, password = _payload(data)
    if room_key is None:
        return
    try:
        room = _store().get_room(room_key)
        if room is None:
            raise RoomNotFound(room_key)
        if not room.check_password(password):
            raise WrongPassword(room_key)
        _join(room)
    except RoomError as exc:
        _reject(exc)


def handle_leave_room(data=None):
    sid = _get_sid()
    room_key = _registry().room_of(sid)
    if room_key is None:
        return
    _depart(sid, room_key, leave=True)


def handle_select_character(char_id=None):
    room, sid = _current_room()
    if room is None:
        return
    config = current_app.config
    with room.lock:
        player = room.select_character(
            sid,
            char_id,
            spawn=(config['SPAWN_X'], config['SPAWN_Y']),
            starting_score=config['STARTING_SCORE'],
        )
        if player is None:
            return
        current_app.logger.info(f"[character] room={room.key} sid={sid} char={char_id}")
        broadcast.players_updated(room, _namespace())
        broadcast.taken_chars(room, _namespace())


def handle_start_game(data=None):
    room, sid = _current_room()
    if room is None:
        return
    with room.lock:
        if not room.start_game(current_app.config['MIN_PLAYERS']):
            return
        current_app.logger.info(f"[game-start] room={room.key} order={room.player_order}")
        broadcast.game_started(room, _namespace())


def handle_roll_dice(dice_count=None):
    room, sid = _current_room()
    if room is None:
        return
    count = parse_amount(dice_count)
    if count is None:
        return
    config = current_app.config
    with room.lock:
        result = room.roll_dice(sid, count, faces=config['DIE_FACES'], max_dice=config['MAX_DICE'])
        if result is None:
            return
        current_app.logger.info(f"[dice] room={room.key} sid={sid} roll={result.roll} details={result.details}")
        broadcast.dice_rolled(room, result, _namespace())


def handle_end_turn(data=None):
    room, sid = _current_room()
    if room is None:
        return
    with room.lock:
        if room.end_turn(sid) is None:
            return
        current_app.logger.info(f"[turn] room={room.key} current={room.current_turn}")
        broadcast.turn_changed(room, _namespace())


def _coordinate(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def handle_move_player(pos=None):
    room, sid = _current_room()
    if room is None or not isinstance(pos, dict):
        return
    x, y = pos.get('x'), pos.get('y')
    if not (_coordinate(x) and _coordinate(y)):
        return
    with room.lock:
        player = room.move_player(sid, x, y)
        if player is None:
            return
        broadcast.player_moved(room, player, _namespace())


def handle_change_score(amount=None):
    room, sid = _current_room()
    if room is None:
        return
    with room.lock:
        player = room.change_score(sid, amount)
        if player is None:
            return
        current_app.logger.debug(f"[score] room={room.key} sid={sid} score={player.score}")
        broadcast.players_updated(room, _namespace())


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the given namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('createRoom', handle_create_room, namespace=namespace)
    socketio.on_event('joinRoom', handle_join_room, namespace=namespace)
    socketio.on_event('leaveRoom', handle_leave_room, namespace=namespace)
    socketio.on_event('selectCharacter', handle_select_character, namespace=namespace)
    socketio.on_event('startGame', handle_start_game, namespace=namespace)
    socketio.on_event('rollDice', handle_roll_dice, namespace=namespace)
    socketio.on_event('endTurn', handle_end_turn, namespace=namespace)
    socketio.on_event('movePlayer', handle_move_player, namespace=namespace)
    socketio.on_event('changeScore', handle_change_score, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
