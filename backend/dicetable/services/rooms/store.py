import threading
from contextlib import contextmanager
from typing import Dict, List, Optional

from dicetable.models import Room
from .errors import RoomAlreadyExists


class RoomStore:
    """Owns every live Room, keyed by the name its creator chose."""

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    @contextmanager
    def creating(self, room_key: str, password: Optional[str] = None):
        """Insert a new room and hold its lock until the block exits.

        Other connections can find the room but cannot join or leave it
        before the creator is in.
        """
        room = Room(room_key, password)
        with room.lock:
            with self._lock:
                if room_key in self._rooms:
                    raise RoomAlreadyExists(room_key)
                self._rooms[room_key] = room
            yield room

    def create_room(self, room_key: str, password: Optional[str] = None) -> Room:
        with self.creating(room_key, password) as room:
            return room

    def get_room(self, room_key: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(room_key)

    def delete_room(self, room_key: str) -> Optional[Room]:
        # Joiners holding a stale reference see the closed flag
        with self._lock:
            room = self._rooms.pop(room_key, None)
        if room is not None:
            room.closed = True
        return room

    def list_rooms(self) -> List[Room]:
        with self._lock:
            return list(self._rooms.values())

    def __contains__(self, room_key: str) -> bool:
        with self._lock:
            return room_key in self._rooms

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)
