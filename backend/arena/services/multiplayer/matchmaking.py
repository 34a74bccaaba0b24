from collections import OrderedDict, deque
from typing import Deque, Dict, Optional, Tuple

from .room import PlayerRef


def _key(game_type) -> str:
    return getattr(game_type, 'value', game_type)


class MatchmakingQueue:
    """Per game-type FIFO of players waiting for a public opponent.

    A user id appears at most once per game-type queue. Pairing is strict
    arrival order; there is no skill matching.
    """

    def __init__(self):
        self._queues: Dict[str, Deque[PlayerRef]] = OrderedDict()

    def enqueue(self, game_type: str, player: PlayerRef) -> bool:
        """Queue ``player`` unless its user id is already waiting. Returns True if added."""
        queue = self._queues.setdefault(_key(game_type), deque())
        if any(p.user_id == player.user_id for p in queue):
            return False
        queue.append(player)
        return True

    def dequeue_pair(self, game_type: str) -> Optional[Tuple[PlayerRef, PlayerRef]]:
        queue = self._queues.get(_key(game_type))
        if not queue or len(queue) < 2:
            return None
        first = queue.popleft()
        second = queue.popleft()
        return first, second

    def remove(self, sid: str) -> int:
        """Drop every entry bound to connection ``sid``; returns how many were removed."""
        removed = 0
        for game_type, queue in self._queues.items():
            kept = deque(p for p in queue if p.sid != sid)
            removed += len(queue) - len(kept)
            self._queues[game_type] = kept
        return removed

    def waiting_count(self, game_type: str) -> int:
        return len(self._queues.get(_key(game_type), ()))

    def snapshot(self) -> Dict[str, int]:
        return {game_type: len(queue) for game_type, queue in self._queues.items()}

    def __contains__(self, sid) -> bool:
        return any(p.sid == sid for queue in self._queues.values() for p in queue)
