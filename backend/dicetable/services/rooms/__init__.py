"""Room domain services: storage, membership and fan-out.

Socket handlers and HTTP routes go through these instead of touching
room state directly, keeping transport concerns separated from the
room state machine in ``dicetable.models``.
"""

from .errors import RoomError, RoomAlreadyExists, RoomNotFound, WrongPassword
from .registry import ConnectionRegistry
from .store import RoomStore

__all__ = [
    'RoomError',
    'RoomAlreadyExists',
    'RoomNotFound',
    'WrongPassword',
    'ConnectionRegistry',
    'RoomStore',
]
