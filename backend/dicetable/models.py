import math
import random
import re
import threading
from typing import Any, Dict, List, Optional

LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_amount(value: Any) -> Optional[int]:
    """Coerce a client supplied score delta to int, or None if it isn't one.

    Strings are read up to the first non-digit, so "12.5" is 12 and "30px" is 30.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value)
    if isinstance(value, str):
        match = LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


class Player:
    def __init__(self, sid: str, char_id: Any, x: int, y: int, score: int):
        self.sid = sid
        self.char_id = char_id
        self.x = x
        self.y = y
        self.score = score

    def to_dict(self):
        return {
            'id': self.sid,
            'charId': self.char_id,
            'x': self.x,
            'y': self.y,
            'score': self.score,
        }


class DiceResult:
    def __init__(self, roll: int, details: List[int], player: str):
        self.roll = roll
        self.details = details
        self.player = player

    def to_dict(self):
        return {
            'roll': self.roll,
            'details': list(self.details),
            'player': self.player,
        }


def roll_dice(count: int, rng: random.Random, faces: int = 6) -> List[int]:
    return [rng.randint(1, faces) for _ in range(max(0, count))]


class Departure:
    """What happened to a room when a connection left it."""

    def __init__(self, removed: bool = False, reset: bool = False, turn_changed: bool = False):
        self.removed = removed
        self.reset = reset
        self.turn_changed = turn_changed


class Room:
    """Roster, turn order and dice cache of one game room.

    A room is in the lobby until ``start_game`` succeeds and goes back to the
    lobby when a departure leaves fewer than the minimum number of players.
    Methods return a falsy value when the request is ignored; callers hold
    ``lock`` around a call and the broadcast that follows it.
    """

    def __init__(self, key: str, password: Optional[str] = None):
        self.key = key
        self.password = password or ''
        self.players: Dict[str, Player] = {}
        self.player_order: List[str] = []
        self.current_turn_index = 0
        self.game_started = False
        self.last_dice_result: Optional[DiceResult] = None
        self.closed = False
        self.lock = threading.RLock()

    @property
    def protected(self) -> bool:
        return bool(self.password)

    def check_password(self, attempt: Optional[str]) -> bool:
        if not self.password:
            return True
        return self.password == (attempt or '')

    @property
    def current_turn(self) -> Optional[str]:
        if not self.game_started or not self.player_order:
            return None
        return self.player_order[self.current_turn_index]

    def taken_chars(self) -> List[Any]:
        return [p.char_id for p in self.players.values()]

    def players_dict(self):
        return {sid: p.to_dict() for sid, p in self.players.items()}

    def snapshot(self):
        return {
            'roomId': self.key,
            'players': self.players_dict(),
            'gameStarted': self.game_started,
            'currentTurn': self.current_turn,
            'takenChars': self.taken_chars(),
        }

    def _is_current(self, sid: str) -> bool:
        return self.game_started and sid == self.current_turn

    def select_character(self, sid: str, char_id: Any, spawn=(850, 850), starting_score: int = 1000) -> Optional[Player]:
        if self.game_started or char_id is None:
            return None
        for other_sid, other in self.players.items():
            # 1, 1.0 and True are different characters
            if other_sid != sid and type(other.char_id) is type(char_id) and other.char_id == char_id:
                return None
        player = Player(sid, char_id, spawn[0], spawn[1], starting_score)
        self.players[sid] = player
        return player

    def start_game(self, min_players: int = 2) -> bool:
        if self.game_started or len(self.players) < max(min_players, 2):
            return False
        self.player_order = list(self.players.keys())
        self.current_turn_index = 0
        self.game_started = True
        self.last_dice_result = None
        return True

    def roll_dice(self, sid: str, dice_count: Any, rng: Optional[random.Random] = None,
                  faces: int = 6, max_dice: int = 0) -> Optional[DiceResult]:
        if not self._is_current(sid):
            return None
        if isinstance(dice_count, bool) or not isinstance(dice_count, int):
            return None
        if max_dice and dice_count > max_dice:
            return None
        details = roll_dice(dice_count, rng or random, faces)
        self.last_dice_result = DiceResult(sum(details), details, sid)
        return self.last_dice_result

    def end_turn(self, sid: str) -> Optional[str]:
        if not self._is_current(sid):
            return None
        self.current_turn_index = (self.current_turn_index + 1) % len(self.player_order)
        self.last_dice_result = None
        return self.current_turn

    def move_player(self, sid: str, x: Any, y: Any) -> Optional[Player]:
        player = self.players.get(sid)
        if player is None:
            return None
        player.x = x
        player.y = y
        return player

    def change_score(self, sid: str, amount: Any) -> Optional[Player]:
        player = self.players.get(sid)
        if player is None:
            return None
        delta = parse_amount(amount)
        if delta is None:
            return None
        player.score += delta
        return player

    def remove_player(self, sid: str, min_players: int = 2) -> Departure:
        if self.players.pop(sid, None) is None:
            return Departure()
        if not self.game_started:
            return Departure(removed=True)

        if len(self.players) < max(min_players, 2):
            self.game_started = False
            self.player_order = []
            self.current_turn_index = 0
            self.last_dice_result = None
            return Departure(removed=True, reset=True)

        was_current = sid == self.current_turn
        idx = self.player_order.index(sid)
        self.player_order.pop(idx)
        if idx < self.current_turn_index:
            self.current_turn_index -= 1
        # Index now points at the player after the one who left
        self.current_turn_index %= len(self.player_order)
        if was_current:
            self.last_dice_result = None
        return Departure(removed=True, turn_changed=was_current)
