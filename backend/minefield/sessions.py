from collections import namedtuple
from typing import Dict, Optional

Binding = namedtuple('Binding', ['room_id', 'player_index'])


class SessionBindings:
    """Maps a Socket.IO sid to the room and slot it plays in.

    Lets a disconnect find its room directly. A sid holds at most one
    binding at a time.
    """

    def __init__(self):
        self._by_sid: Dict[str, Binding] = {}

    def bind(self, sid: str, room_id: str, player_index: int) -> Binding:
        existing = self._by_sid.get(sid)
        if existing is not None and existing.room_id != room_id:
            raise ValueError(f"sid {sid} already bound to room {existing.room_id}")
        binding = Binding(room_id, player_index)
        self._by_sid[sid] = binding
        return binding

    def lookup(self, sid: str) -> Optional[Binding]:
        return self._by_sid.get(sid)

    def unbind(self, sid: str) -> Optional[Binding]:
        return self._by_sid.pop(sid, None)

    def rebind_room(self, room) -> None:
        # Slots shift down when an earlier player leaves
        for idx, player in enumerate(room.players):
            self._by_sid[player.session_id] = Binding(room.room_id, idx)

    def __contains__(self, sid) -> bool:
        return sid in self._by_sid

    def __len__(self) -> int:
        return len(self._by_sid)
