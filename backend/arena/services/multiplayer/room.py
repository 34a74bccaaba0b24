import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from arena.constants import MAX_ROOM_PLAYERS
from .errors import InvalidTransitionError, RoomFullError, RoomNotWaitingError
from .scoring import score_answers


class RoomStatus(str, Enum):
    WAITING = 'waiting'
    PLAYING = 'playing'
    FINISHED = 'finished'


@dataclass(frozen=True)
class RoomSettings:
    question_count: int = 5
    time_per_question: int = 15

    def to_dict(self) -> Dict[str, int]:
        return {
            'questionCount': self.question_count,
            'timePerQuestion': self.time_per_question,
        }


@dataclass(frozen=True)
class RoundAnswer:
    round_id: int
    value: Any
    correct: bool
    time_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'questionId': self.round_id,
            'answer': self.value,
            'correct': self.correct,
            'timeMs': self.time_ms,
        }


@dataclass(frozen=True)
class PlayerRef:
    """Identity of one authenticated connection."""

    user_id: str
    username: str
    sid: str


@dataclass
class RoomPlayer:
    id: str
    username: str
    sid: str
    score: int = 0
    ready: bool = False
    finished: bool = False
    answers: List[RoundAnswer] = field(default_factory=list)

    @classmethod
    def from_ref(cls, ref: PlayerRef) -> 'RoomPlayer':
        return cls(id=ref.user_id, username=ref.username, sid=ref.sid)

    @property
    def total_time_ms(self) -> int:
        return sum(a.time_ms for a in self.answers)

    @property
    def correct_answers(self) -> int:
        return sum(1 for a in self.answers if a.correct)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'username': self.username,
            'socketId': self.sid,
            'score': self.score,
            'ready': self.ready,
            'finished': self.finished,
            'answers': [a.to_dict() for a in self.answers],
        }


class GameRoom:
    """A live 2-player match and its round state machine.

    Status only moves waiting -> playing -> finished. Methods that mutate
    game progress raise ``InvalidTransitionError`` when called in the wrong
    status; lookups by connection id return None when the player is absent.
    """

    def __init__(self, room_id: str, game_type: str, settings: RoomSettings,
                 invite_code: Optional[str] = None, created_at: Optional[datetime] = None):
        self.id = room_id
        self.game_type = getattr(game_type, 'value', game_type)
        self.players: List[RoomPlayer] = []
        self.status = RoomStatus.WAITING
        self.current_round = 0
        self.settings = settings
        self.max_rounds = settings.question_count
        self.created_at = created_at or datetime.now(timezone.utc)
        self.last_active_at = self.created_at
        self.invite_code = invite_code
        self._content: Optional[Tuple[Dict[str, Any], ...]] = None

    def touch(self, now: Optional[datetime] = None) -> None:
        self.last_active_at = now or datetime.now(timezone.utc)

    # -------------------- Membership -------------------- #

    def player_by_sid(self, sid: str) -> Optional[RoomPlayer]:
        return next((p for p in self.players if p.sid == sid), None)

    def has_sid(self, sid: str) -> bool:
        return self.player_by_sid(sid) is not None

    def add_player(self, ref: PlayerRef) -> RoomPlayer:
        if self.status != RoomStatus.WAITING:
            raise RoomNotWaitingError()
        if len(self.players) >= MAX_ROOM_PLAYERS:
            raise RoomFullError()
        player = RoomPlayer.from_ref(ref)
        self.players.append(player)
        return player

    def remove_player(self, sid: str) -> Optional[RoomPlayer]:
        player = self.player_by_sid(sid)
        if player is not None:
            self.players.remove(player)
        return player

    @property
    def is_empty(self) -> bool:
        return not self.players

    # -------------------- Lobby -------------------- #

    def update_settings(self, settings: RoomSettings) -> None:
        if self.status != RoomStatus.WAITING:
            raise InvalidTransitionError('Settings can only change before the game starts')
        self.settings = settings
        self.max_rounds = settings.question_count

    def set_ready(self, sid: str) -> Optional[RoomPlayer]:
        if self.status != RoomStatus.WAITING:
            raise InvalidTransitionError('Game has already started')
        player = self.player_by_sid(sid)
        if player is not None:
            player.ready = True
        return player

    def all_ready(self) -> bool:
        return len(self.players) == MAX_ROOM_PLAYERS and all(p.ready for p in self.players)

    def start(self, content: Sequence[Dict[str, Any]]) -> None:
        """Move waiting -> playing at round 1 and freeze the round content."""
        if self.status != RoomStatus.WAITING:
            raise InvalidTransitionError('Game has already started')
        if not self.all_ready():
            raise InvalidTransitionError('Both players must be ready')
        self._content = tuple(copy.deepcopy(item) for item in content)
        self.status = RoomStatus.PLAYING
        self.current_round = 1

    @property
    def content(self) -> List[Dict[str, Any]]:
        """Copies of the round content, identical for every reader."""
        return copy.deepcopy(list(self._content or ()))

    # -------------------- Play -------------------- #

    def _require_playing(self) -> None:
        if self.status != RoomStatus.PLAYING:
            raise InvalidTransitionError('Game is not in progress')

    def add_score(self, sid: str, points: int) -> Optional[RoomPlayer]:
        self._require_playing()
        player = self.player_by_sid(sid)
        if player is not None:
            player.score += points
        return player

    def record_answer(self, sid: str, answer: RoundAnswer) -> Optional[RoomPlayer]:
        self._require_playing()
        player = self.player_by_sid(sid)
        if player is not None:
            player.answers.append(answer)
        return player

    def advance_round(self) -> 'GameRoom':
        self._require_playing()
        self.current_round += 1
        if self.current_round > self.max_rounds:
            self.status = RoomStatus.FINISHED
        return self

    def record_finish(self, sid: str, answers: Sequence[RoundAnswer]) -> Optional[RoomPlayer]:
        """Store a player's full answer list and score it with the game-type formula."""
        self._require_playing()
        player = self.player_by_sid(sid)
        if player is None:
            return None
        if player.finished:
            raise InvalidTransitionError('Player already finished')
        player.answers = list(answers)
        player.score = score_answers(self.game_type, player.answers)
        player.finished = True
        return player

    def all_finished(self) -> bool:
        return bool(self.players) and all(p.finished for p in self.players)

    def finish(self) -> None:
        self._require_playing()
        self.status = RoomStatus.FINISHED

    def compute_winner(self) -> Optional[RoomPlayer]:
        """Highest score wins; equal scores go to the lower total answer time.

        Returns None on an exact tie of score and time, or for an empty room.
        """
        if not self.players:
            return None
        ranked = sorted(self.players, key=lambda p: (-p.score, p.total_time_ms))
        if len(ranked) > 1:
            best, runner_up = ranked[0], ranked[1]
            if (best.score, best.total_time_ms) == (runner_up.score, runner_up.total_time_ms):
                return None
        return ranked[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'gameType': self.game_type,
            'players': [p.to_dict() for p in self.players],
            'status': self.status.value,
            'currentRound': self.current_round,
            'maxRounds': self.max_rounds,
            'createdAt': self.created_at.isoformat(),
            'inviteCode': self.invite_code,
            'settings': self.settings.to_dict(),
        }
