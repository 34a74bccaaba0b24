import random
import threading
from typing import Optional

from .matchmaking import MatchmakingQueue
from .registry import RoomRegistry


class MultiplayerService:
    """Process-wide matchmaking and room state, shared by the gateway.

    Socket.IO may dispatch events on several worker threads, so every
    mutation goes through ``lock``. Holding it per event keeps each room's
    events applied one at a time in arrival order.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.queue = MatchmakingQueue()
        self.rooms = RoomRegistry(rng=rng)
        self.lock = threading.RLock()

    def stats(self):
        with self.lock:
            return {
                'rooms': len(self.rooms),
                'waiting': self.queue.snapshot(),
            }
