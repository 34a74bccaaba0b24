import logging
from functools import wraps
from typing import Any, Dict, List, Optional

from arena.constants import GameType, MULTIPLAYER_GAME_TYPES
from . import events
from .content import ContentProvider
from .errors import (
    InvalidPayloadError,
    InvalidTransitionError,
    NotAuthenticatedError,
    RoomError,
    RoomNotFoundError,
)
from .room import GameRoom, PlayerRef, RoomSettings, RoomStatus, RoundAnswer
from .service import MultiplayerService


def _handler(fn):
    """Serialize the handler under the service lock and report RoomError to the caller only."""

    @wraps(fn)
    def wrapper(self, sid, data=None):
        with self.service.lock:
            try:
                if data is not None and not isinstance(data, dict):
                    raise InvalidPayloadError()
                return fn(self, sid, data or {})
            except RoomError as exc:
                self.logger.info(f"[rejected] event={fn.__name__} sid={sid} reason={exc.message}")
                self.transport.send(sid, events.Error(exc.message))
                return None

    return wrapper


class SessionGateway:
    """Maps inbound socket events onto matchmaking and room operations.

    Owns the connection -> identity map. Every handler takes the caller's
    connection id and the raw event payload, and fans the resulting state out
    through the transport.
    """

    def __init__(self, service: MultiplayerService, transport, scores, content: Optional[ContentProvider] = None,
                 config: Optional[Dict[str, Any]] = None, logger: Optional[logging.Logger] = None):
        self.service = service
        self.transport = transport
        self.scores = scores
        self.content = content or ContentProvider()
        self.config = dict(config or {})
        self.logger = logger or logging.getLogger(__name__)
        self.identities: Dict[str, PlayerRef] = {}

    # -------------------- Helpers -------------------- #

    def _identity(self, sid: str) -> PlayerRef:
        ref = self.identities.get(sid)
        if ref is None:
            raise NotAuthenticatedError()
        return ref

    def _game_type(self, data) -> str:
        value = data.get('gameType')
        try:
            game_type = GameType(value)
        except ValueError:
            raise InvalidPayloadError(f'Unknown game type: {value}') from None
        if game_type not in MULTIPLAYER_GAME_TYPES:
            raise InvalidPayloadError(f'{game_type.value} has no multiplayer mode')
        return game_type.value

    def _settings(self, raw, base: Optional[RoomSettings] = None) -> RoomSettings:
        base = base or RoomSettings(
            question_count=int(self.config.get('DEFAULT_QUESTION_COUNT', 5)),
            time_per_question=int(self.config.get('DEFAULT_TIME_PER_QUESTION', 15)),
        )
        raw = raw if isinstance(raw, dict) else {}

        def pick(key, default, upper):
            value = raw.get(key)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                return default
            return min(value, upper)

        return RoomSettings(
            question_count=pick('questionCount', base.question_count,
                                int(self.config.get('MAX_QUESTION_COUNT', 30))),
            time_per_question=pick('timePerQuestion', base.time_per_question,
                                   int(self.config.get('MAX_TIME_PER_QUESTION', 120))),
        )

    @staticmethod
    def _text(data, key: str) -> str:
        value = data.get(key)
        if not isinstance(value, str):
            raise InvalidPayloadError(f'{key} must be a string')
        return value

    def _member_room(self, sid: str, data) -> GameRoom:
        room = self.service.rooms.get(self._text(data, 'roomId'))
        if room is None:
            raise RoomNotFoundError()
        if not room.has_sid(sid):
            raise InvalidTransitionError('You are not a player in this room')
        room.touch()
        return room

    @staticmethod
    def _time_ms(value) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            return 0
        return int(value)

    def _parse_answers(self, raw) -> List[RoundAnswer]:
        if not isinstance(raw, list):
            raise InvalidPayloadError('answers must be a list')
        answers = []
        for idx, item in enumerate(raw):
            if not isinstance(item, dict):
                raise InvalidPayloadError('Invalid answer entry')
            answers.append(RoundAnswer(
                round_id=item.get('questionId', idx),
                value=item.get('answer'),
                correct=bool(item.get('correct')),
                time_ms=self._time_ms(item.get('timeMs')),
            ))
        return answers

    def _start(self, room: GameRoom) -> None:
        room.start(self.content.generate_round_content(room.game_type, room.settings))
        self.logger.info(f"[game-start] room={room.id} game_type={room.game_type} rounds={room.max_rounds}")

    def _conclude(self, room: GameRoom) -> None:
        """Announce the result, persist scores without waiting, and dispose later."""
        winner = room.compute_winner()
        self.transport.broadcast(room.id, events.GameEnd(room, winner))
        self.logger.info(
            f"[game-end] room={room.id} winner={winner.id if winner else None} "
            f"scores={[(p.id, p.score) for p in room.players]}"
        )
        for player in room.players:
            self.scores.submit(
                player.id, player.username, room.game_type, player.score,
                is_multiplayer=True, is_winner=winner is not None and winner.id == player.id,
            )
        self._schedule_dispose(room.id)

    def _schedule_dispose(self, room_id: str) -> None:
        delay = float(self.config.get('ROOM_DISPOSE_DELAY_SEC', 10))

        def _runner(rid: str, wait: float):
            if wait > 0:
                self.transport.sleep(wait)
            self.dispose(rid)

        self.transport.start_task(_runner, room_id, delay)

    def dispose(self, room_id: str) -> None:
        with self.service.lock:
            room = self.service.rooms.get(room_id)
            if room is None:
                return
            for player in room.players:
                self.transport.leave(player.sid, room_id)
            self.service.rooms.dispose_room(room_id)
            self.logger.info(f"[room-dispose] room={room_id}")

    # -------------------- Connection lifecycle -------------------- #

    def connect(self, sid: str) -> None:
        self.logger.info(f"[connect] sid={sid}")

    def disconnect(self, sid: str) -> None:
        with self.service.lock:
            ref = self.identities.pop(sid, None)
            removed = self.service.queue.remove(sid)
            self.logger.info(f"[disconnect] sid={sid} user={ref.user_id if ref else None} dequeued={removed}")
        if ref is not None:
            self.scores.set_online(ref.user_id, ref.username, False)

    @_handler
    def authenticate(self, sid, data):
        user_id = data.get('userId')
        if not user_id:
            raise InvalidPayloadError('userId is required')
        username = data.get('username') or str(user_id)
        self.identities[sid] = PlayerRef(user_id=str(user_id), username=username, sid=sid)
        self.transport.send(sid, events.Authenticated(success=True))
        self.logger.info(f"[authenticate] sid={sid} user={user_id}")
        self.scores.set_online(str(user_id), username, True)

    # -------------------- Matchmaking -------------------- #

    @_handler
    def find_match(self, sid, data):
        player = self._identity(sid)
        game_type = self._game_type(data)
        self.service.queue.enqueue(game_type, player)
        self.transport.send(sid, events.Matchmaking('searching'))

        pair = self.service.queue.dequeue_pair(game_type)
        if pair is None:
            return None
        first, second = pair
        room = self.service.rooms.create_room(game_type, first, settings=self._settings(None))
        self.service.rooms.join_room(room.id, second)
        # Public matches skip the lobby: both players are readied and started together
        for ref in (first, second):
            # A seated player stops waiting for any other game type
            self.service.queue.remove(ref.sid)
            room.set_ready(ref.sid)
            self.transport.enter(ref.sid, room.id)
        self._start(room)
        self.logger.info(f"[match] game_type={game_type} room={room.id} players={first.user_id},{second.user_id}")
        for ref in (first, second):
            self.transport.send(ref.sid, events.MatchFound(room))
        self.transport.broadcast(room.id, events.GameStart(room))
        return room

    @_handler
    def cancel_matchmaking(self, sid, data):
        self.service.queue.remove(sid)
        self.transport.send(sid, events.Matchmaking('cancelled'))

    # -------------------- Private rooms -------------------- #

    @_handler
    def create_private_room(self, sid, data):
        player = self._identity(sid)
        game_type = self._game_type(data)
        room = self.service.rooms.create_room(game_type, player, is_private=True,
                                              settings=self._settings(data.get('settings')))
        self.transport.enter(sid, room.id)
        self.transport.send(sid, events.RoomCreated(room))
        self.logger.info(f"[room-create] room={room.id} game_type={game_type} code={room.invite_code}")
        return room

    @_handler
    def update_settings(self, sid, data):
        room = self._member_room(sid, data)
        settings = self._settings(data.get('settings'), base=room.settings)
        self.service.rooms.update_settings(room.id, settings)
        self.transport.broadcast(room.id, events.SettingsUpdated(room))
        return room

    @_handler
    def join_with_code(self, sid, data):
        player = self._identity(sid)
        room = self.service.rooms.find_by_invite_code(self._text(data, 'code'))
        if room is None:
            raise RoomNotFoundError('Invalid invite code')
        if room.has_sid(sid):
            raise InvalidTransitionError('You are already in this room')
        self.service.rooms.join_room(room.id, player)
        room.touch()
        self.transport.enter(sid, room.id)
        self.transport.broadcast(room.id, events.PlayerJoined(room))
        self.logger.info(f"[room-join] room={room.id} user={player.user_id}")
        return room

    # -------------------- Gameplay -------------------- #

    @_handler
    def ready(self, sid, data):
        room = self._member_room(sid, data)
        room.set_ready(sid)
        self.transport.broadcast(room.id, events.PlayerReady(room))
        if room.status == RoomStatus.WAITING and room.all_ready():
            self._start(room)
            self.transport.broadcast(room.id, events.GameStart(room))
        return room

    @_handler
    def submit_answer(self, sid, data):
        room = self._member_room(sid, data)
        correct = bool(data.get('correct'))
        points = data.get('points', 0)
        if isinstance(points, bool) or not isinstance(points, int):
            raise InvalidPayloadError('points must be an integer')
        room.record_answer(sid, RoundAnswer(
            round_id=room.current_round,
            value=data.get('answer'),
            correct=correct,
            time_ms=self._time_ms(data.get('timeMs')),
        ))
        if correct:
            room.add_score(sid, points)
        player = room.player_by_sid(sid)
        self.transport.broadcast(room.id, events.AnswerSubmitted(player.id, correct, room))
        return room

    @_handler
    def finish_game(self, sid, data):
        room = self._member_room(sid, data)
        answers = self._parse_answers(data.get('answers'))
        player = room.record_finish(sid, answers)
        self.transport.broadcast(room.id, events.PlayerFinished(player.id, room))
        if room.all_finished():
            room.finish()
            self._conclude(room)
        return room

    @_handler
    def next_round(self, sid, data):
        room = self._member_room(sid, data)
        room.advance_round()
        if room.status == RoomStatus.FINISHED:
            self._conclude(room)
        else:
            self.transport.broadcast(room.id, events.NewRound(room))
        return room

    @_handler
    def leave_room(self, sid, data):
        room = self._member_room(sid, data)
        room_id = room.id
        room = self.service.rooms.leave_room(room_id, sid)
        self.transport.leave(sid, room_id)
        if room is None:
            self.logger.info(f"[room-closed] room={room_id}")
            return None
        self.transport.broadcast(room_id, events.PlayerLeft(room))
        return room

    # -------------------- Housekeeping -------------------- #

    def sweep_stale_rooms(self, max_age_sec: float) -> int:
        with self.service.lock:
            stale = [room.id for room in self.service.rooms.stale_rooms(max_age_sec)]
            for room_id in stale:
                self.transport.broadcast(room_id, events.Error('Room closed due to inactivity'))
                self.dispose(room_id)
        return len(stale)

    def run_stale_room_reaper(self, max_age_sec: float, interval_sec: float) -> None:
        while True:
            self.transport.sleep(interval_sec)
            swept = self.sweep_stale_rooms(max_age_sec)
            if swept:
                self.logger.info(f"[reaper] disposed={swept} ttl={max_age_sec}s")
