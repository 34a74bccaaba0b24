class RoomError(Exception):
    """Base class for multiplayer errors reported back to the caller."""

    message = 'Room error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class RoomNotFoundError(RoomError):
    message = 'Room not found'


class RoomFullError(RoomError):
    message = 'Room is full'


class RoomNotWaitingError(RoomError):
    message = 'Room is not accepting players'


class InvalidTransitionError(RoomError):
    """Raised when a room operation is called in the wrong status."""

    message = 'Invalid room state'


class NotAuthenticatedError(RoomError):
    message = 'Not authenticated'


class InvalidPayloadError(RoomError):
    message = 'Invalid request'
