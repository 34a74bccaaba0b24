import random
import string
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from arena.constants import INVITE_CODE_LENGTH
from .errors import RoomNotFoundError
from .room import GameRoom, PlayerRef, RoomSettings

INVITE_ALPHABET = string.ascii_uppercase + string.digits


class RoomRegistry:
    """Owns every live room and the invite-code -> room id index."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rooms: Dict[str, GameRoom] = {}
        self._invite_codes: Dict[str, str] = {}
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self._rooms)

    def __iter__(self):
        return iter(list(self._rooms.values()))

    def _new_room_id(self) -> str:
        return f"room_{uuid.uuid4().hex[:12]}"

    def _new_invite_code(self) -> str:
        """Generate a code that no live room is using."""
        while True:
            code = ''.join(self._rng.choices(INVITE_ALPHABET, k=INVITE_CODE_LENGTH))
            if code not in self._invite_codes:
                return code

    def create_room(self, game_type: str, first_player: PlayerRef, is_private: bool = False,
                    settings: Optional[RoomSettings] = None) -> GameRoom:
        room = GameRoom(self._new_room_id(), game_type, settings or RoomSettings())
        room.add_player(first_player)
        if is_private:
            room.invite_code = self._new_invite_code()
            self._invite_codes[room.invite_code] = room.id
        self._rooms[room.id] = room
        return room

    def get(self, room_id: str) -> Optional[GameRoom]:
        return self._rooms.get(room_id)

    def find_by_invite_code(self, code: str) -> Optional[GameRoom]:
        if not code:
            return None
        room_id = self._invite_codes.get(code.strip().upper())
        return self._rooms.get(room_id) if room_id else None

    def join_room(self, room_id: str, player: PlayerRef) -> GameRoom:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError()
        room.add_player(player)
        return room

    def update_settings(self, room_id: str, settings: RoomSettings) -> GameRoom:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError()
        room.update_settings(settings)
        return room

    def leave_room(self, room_id: str, sid: str) -> Optional[GameRoom]:
        """Remove the player on ``sid``. Returns None once the room is gone."""
        room = self._rooms.get(room_id)
        if room is None:
            return None
        room.remove_player(sid)
        if room.is_empty:
            self.dispose_room(room_id)
            return None
        return room

    def dispose_room(self, room_id: str) -> None:
        room = self._rooms.pop(room_id, None)
        if room is not None and room.invite_code:
            self._invite_codes.pop(room.invite_code, None)

    def rooms_for_sid(self, sid: str) -> List[GameRoom]:
        return [room for room in self._rooms.values() if room.has_sid(sid)]

    def stale_rooms(self, max_age_sec: float, now: Optional[datetime] = None) -> List[GameRoom]:
        now = now or datetime.now(timezone.utc)
        return [
            room for room in self._rooms.values()
            if (now - room.last_active_at).total_seconds() > max_age_sec
        ]
