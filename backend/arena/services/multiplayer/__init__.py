"""Multiplayer domain services: matchmaking, rooms and the session gateway.

The queue, registry and room state machine are plain in-memory objects with
no Flask or Socket.IO imports. Transport concerns live in ``transport`` and
``gateway``, which adapt inbound socket events to these objects.
"""

from .errors import (
    RoomError,
    RoomNotFoundError,
    RoomFullError,
    RoomNotWaitingError,
    InvalidTransitionError,
    NotAuthenticatedError,
    InvalidPayloadError,
)
from .matchmaking import MatchmakingQueue
from .registry import RoomRegistry
from .room import GameRoom, PlayerRef, RoomPlayer, RoomSettings, RoomStatus, RoundAnswer
from .service import MultiplayerService
from .gateway import SessionGateway
