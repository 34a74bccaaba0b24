"""Outbound Socket.IO events.

Each event is its own frozen dataclass with a fixed ``name`` so the set of
messages a client can receive is closed and every payload has one shape.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional, Union

from .room import GameRoom, RoomPlayer


def _winner_dict(winner: Optional[RoomPlayer]) -> Optional[Dict[str, Any]]:
    return winner.to_dict() if winner is not None else None


@dataclass(frozen=True)
class Authenticated:
    name: ClassVar[str] = 'authenticated'
    success: bool = True

    def payload(self) -> Dict[str, Any]:
        return {'success': self.success}


@dataclass(frozen=True)
class Matchmaking:
    name: ClassVar[str] = 'matchmaking'
    status: str

    def payload(self) -> Dict[str, Any]:
        return {'status': self.status}


@dataclass(frozen=True)
class MatchFound:
    name: ClassVar[str] = 'matchFound'
    room: GameRoom

    def payload(self) -> Dict[str, Any]:
        return {'room': self.room.to_dict()}


@dataclass(frozen=True)
class RoomCreated:
    name: ClassVar[str] = 'roomCreated'
    room: GameRoom

    def payload(self) -> Dict[str, Any]:
        return {'room': self.room.to_dict(), 'inviteCode': self.room.invite_code}


@dataclass(frozen=True)
class PlayerJoined:
    name: ClassVar[str] = 'playerJoined'
    room: GameRoom

    def payload(self) -> Dict[str, Any]:
        return {'room': self.room.to_dict()}


@dataclass(frozen=True)
class PlayerReady:
    name: ClassVar[str] = 'playerReady'
    room: GameRoom

    def payload(self) -> Dict[str, Any]:
        return {'room': self.room.to_dict()}


@dataclass(frozen=True)
class SettingsUpdated:
    name: ClassVar[str] = 'settingsUpdated'
    room: GameRoom

    def payload(self) -> Dict[str, Any]:
        return {'room': self.room.to_dict()}


@dataclass(frozen=True)
class GameStart:
    name: ClassVar[str] = 'gameStart'
    room: GameRoom

    def payload(self) -> Dict[str, Any]:
        return {
            'room': self.room.to_dict(),
            'questions': self.room.content,
            'settings': self.room.settings.to_dict(),
        }


@dataclass(frozen=True)
class AnswerSubmitted:
    name: ClassVar[str] = 'answerSubmitted'
    player_id: str
    correct: bool
    room: GameRoom

    def payload(self) -> Dict[str, Any]:
        return {'playerId': self.player_id, 'correct': self.correct, 'room': self.room.to_dict()}


@dataclass(frozen=True)
class PlayerFinished:
    name: ClassVar[str] = 'playerFinished'
    player_id: str
    room: GameRoom

    def payload(self) -> Dict[str, Any]:
        return {'playerId': self.player_id, 'room': self.room.to_dict()}


@dataclass(frozen=True)
class NewRound:
    name: ClassVar[str] = 'newRound'
    room: GameRoom

    def payload(self) -> Dict[str, Any]:
        return {'room': self.room.to_dict()}


@dataclass(frozen=True)
class GameEnd:
    name: ClassVar[str] = 'gameEnd'
    room: GameRoom
    winner: Optional[RoomPlayer]

    def player_results(self) -> List[Dict[str, Any]]:
        return [
            {
                'id': p.id,
                'username': p.username,
                'score': p.score,
                'correctAnswers': p.correct_answers,
                'totalTime': p.total_time_ms,
                'isWinner': self.winner is not None and p.id == self.winner.id,
            }
            for p in self.room.players
        ]

    def payload(self) -> Dict[str, Any]:
        return {
            'room': self.room.to_dict(),
            'winner': _winner_dict(self.winner),
            'playerResults': self.player_results(),
        }


@dataclass(frozen=True)
class PlayerLeft:
    name: ClassVar[str] = 'playerLeft'
    room: GameRoom

    def payload(self) -> Dict[str, Any]:
        return {'room': self.room.to_dict()}


@dataclass(frozen=True)
class Error:
    name: ClassVar[str] = 'error'
    message: str

    def payload(self) -> Dict[str, Any]:
        return {'message': self.message}


OutboundEvent = Union[
    Authenticated, Matchmaking, MatchFound, RoomCreated, PlayerJoined, PlayerReady,
    SettingsUpdated, GameStart, AnswerSubmitted, PlayerFinished, NewRound, GameEnd,
    PlayerLeft, Error,
]

__all__ = [
    "Authenticated", "Matchmaking", "MatchFound", "RoomCreated", "PlayerJoined",
    "PlayerReady", "SettingsUpdated", "GameStart", "AnswerSubmitted", "PlayerFinished",
    "NewRound", "GameEnd", "PlayerLeft", "Error", "OutboundEvent",
]
