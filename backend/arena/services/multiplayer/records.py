from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Optional

from arena import db
from arena.models import set_online_status, submit_score


@dataclass(frozen=True)
class ScoreResult:
    player_id: str
    game_type: str
    score: int
    is_winner: bool
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ScoreRecorder:
    """Writes final multiplayer scores and presence to the record store.

    Writes run as background tasks so the gateway never waits on the
    database. A failed write is logged and kept in ``failures``; it never
    changes room state. In TESTING mode writes run inline for determinism.
    """

    def __init__(self, app, start_task: Callable, history: int = 100):
        self.app = app
        self._start_task = start_task
        self.completed: Deque[ScoreResult] = deque(maxlen=history)
        self.failures: Deque[ScoreResult] = deque(maxlen=history)

    def _dispatch(self, target, *args) -> None:
        if self.app.config.get('TESTING'):
            target(*args)
        else:
            self._start_task(target, *args)

    def submit(self, player_id, username, game_type, score, is_multiplayer=True, is_winner=False) -> None:
        self._dispatch(self._write_score, player_id, username, game_type, score, is_multiplayer, is_winner)

    def set_online(self, user_id, username, online) -> None:
        self._dispatch(self._write_presence, user_id, username, online)

    def _write_score(self, player_id, username, game_type, score, is_multiplayer, is_winner):
        with self.app.app_context():
            try:
                submit_score(player_id, username, game_type, score,
                             is_multiplayer=is_multiplayer, is_winner=is_winner)
            except Exception as exc:
                db.session.rollback()
                self.app.logger.exception(f"[score-failed] player={player_id} game_type={game_type} score={score}")
                self.failures.append(ScoreResult(player_id, game_type, score, is_winner, error=str(exc)))
                return
            self.app.logger.info(f"[score-saved] player={player_id} game_type={game_type} score={score} winner={is_winner}")
            self.completed.append(ScoreResult(player_id, game_type, score, is_winner))

    def _write_presence(self, user_id, username, online):
        with self.app.app_context():
            try:
                set_online_status(user_id, username, online)
            except Exception:
                db.session.rollback()
                self.app.logger.exception(f"[presence-failed] user={user_id} online={online}")
