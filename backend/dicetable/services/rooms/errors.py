class RoomError(Exception):
    """Rejection reported back to the connection that asked for it."""

    code = 'room_error'
    message = 'Room request rejected'

    def __init__(self, room_key: str, message: str = None):
        self.room_key = room_key
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self):
        return {'code': self.code, 'message': self.message, 'roomId': self.room_key}


class RoomAlreadyExists(RoomError):
    code = 'room_exists'
    message = 'Room already exists'


class RoomNotFound(RoomError):
    code = 'room_not_found'
    message = 'Room not found'


class WrongPassword(RoomError):
    code = 'wrong_password'
    message = 'Wrong password'
