import threading
from typing import Dict, List, Optional


class ConnectionRegistry:
    """Connection id -> room key lookup used for routing and cleanup.

    A connection belongs to at most one room; binding it again moves it.
    """

    def __init__(self):
        self._room_of: Dict[str, str] = {}
        self._lock = threading.Lock()

    def bind(self, sid: str, room_key: str) -> Optional[str]:
        """Record the membership, returning the room the sid was in before."""
        with self._lock:
            previous = self._room_of.get(sid)
            self._room_of[sid] = room_key
            return previous

    def unbind(self, sid: str) -> Optional[str]:
        with self._lock:
            return self._room_of.pop(sid, None)

    def room_of(self, sid: str) -> Optional[str]:
        with self._lock:
            return self._room_of.get(sid)

    def members(self, room_key: str) -> List[str]:
        with self._lock:
            return [sid for sid, key in self._room_of.items() if key == room_key]

    def count(self, room_key: str) -> int:
        return len(self.members(room_key))
