import random
from typing import Callable, Dict, Iterator, Optional, Sequence

from minefield.models import Room


class RoomRegistry:
    """Owns every live Room, keyed by the client-supplied room id."""

    def __init__(self, choose_turn: Optional[Callable[[Sequence[int]], int]] = None):
        self._rooms: Dict[str, Room] = {}
        self.choose_turn = choose_turn or random.choice

    def get(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def get_or_create(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            # Late-bound so tests can swap the chooser on a running registry
            room = Room(room_id, choose_turn=lambda options: self.choose_turn(options))
            self._rooms[room_id] = room
        return room

    def destroy(self, room_id: str) -> bool:
        """Remove a room once it has no players. Returns True if removed."""
        room = self._rooms.get(room_id)
        if room is None or not room.is_empty:
            return False
        del self._rooms[room_id]
        return True

    def player_count(self) -> int:
        return sum(len(room.players) for room in self._rooms.values())

    def summaries(self):
        return [
            {'id': room_id, 'players': len(room.players), 'state': room.phase}
            for room_id, room in self._rooms.items()
        ]

    def __len__(self) -> int:
        return len(self._rooms)

    def __iter__(self) -> Iterator[Room]:
        return iter(list(self._rooms.values()))

    def __contains__(self, room_id) -> bool:
        return room_id in self._rooms
