import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from minefield.grid import parse_coord
from minefield.models import GameError
from minefield.registry import RoomRegistry
from minefield.sessions import SessionBindings
from .chat import ChatLog


class Dispatch:
    """Ack for the caller plus the events a handler must emit afterwards."""

    def __init__(self, room_id: str, ack: Optional[Dict[str, Any]] = None):
        self.room_id = room_id
        self.ack = ack
        self.enter_room = False
        self.room_destroyed = False
        self.broadcasts: List[Tuple[str, tuple]] = []
        self.replies: List[Tuple[str, tuple]] = []

    def broadcast(self, event: str, *args) -> None:
        self.broadcasts.append((event, args))

    def reply(self, event: str, *args) -> None:
        self.replies.append((event, args))

    def events(self) -> List[str]:
        return [name for name, _ in self.broadcasts]


class Lobby:
    """Entry point for every game action.

    Resolves rooms through the registry, sessions through the bindings, runs
    the room operation and records what has to be sent where. All mutations
    are serialized on one lock.
    """

    def __init__(
        self,
        choose_turn: Optional[Callable[[Sequence[int]], int]] = None,
        chat_history_limit: int = 100,
        chat_max_length: int = 500,
    ):
        self.registry = RoomRegistry(choose_turn=choose_turn)
        self.sessions = SessionBindings()
        self.chat_history_limit = chat_history_limit
        self.chat_max_length = chat_max_length
        self._chats: Dict[str, ChatLog] = {}
        self._lock = threading.RLock()

    def chat(self, room_id: str) -> ChatLog:
        log = self._chats.get(room_id)
        if log is None:
            log = self._chats[room_id] = ChatLog(self.chat_history_limit, self.chat_max_length)
        return log

    def _notice(self, dispatch: Dispatch, text: str) -> None:
        dispatch.broadcast('newMessage', self.chat(dispatch.room_id).system(text))

    def _existing_room(self, room_id, reason='invalid_state'):
        room = self.registry.get(room_id) if isinstance(room_id, str) else None
        if room is None:
            raise GameError(reason)
        return room

    def join(self, sid: str, room_id, name, gender=None) -> Dispatch:
        if not isinstance(room_id, str) or not room_id or not isinstance(name, str) or not name:
            raise GameError('invalid_data')
        with self._lock:
            if sid in self.sessions:
                raise GameError('already_joined')
            room = self.registry.get_or_create(room_id)
            try:
                result = room.join(name, gender, sid)
            except GameError:
                self.registry.destroy(room_id)
                raise
            self.sessions.bind(sid, room_id, result.player_index)

            dispatch = Dispatch(room_id, {'ok': True, 'playerIndex': result.player_index})
            dispatch.enter_room = True
            dispatch.broadcast('playerJoined', name)
            dispatch.broadcast('roomUpdate', {'players': [p.to_dict() for p in room.players]})
            self._notice(dispatch, f"{name} joined the game")
            dispatch.reply('chatHistory', self.chat(room_id).history())
            if result.placing_started:
                dispatch.broadcast('startPlacing')
                self._notice(dispatch, "Both players are here! Start placing your bombs.")
            return dispatch

    def place_bomb(self, sid: str, room_id, coord_payload) -> Dispatch:
        with self._lock:
            room = self._existing_room(room_id)
            result = room.place_bomb(sid, parse_coord(coord_payload))

            coord = {'x': result.coord.x, 'y': result.coord.y}
            ack = {'ok': True, 'coord': coord, 'allPlayersPlaced': result.all_placed}
            dispatch = Dispatch(room_id, ack)
            if result.all_placed:
                ack['turnIndex'] = result.turn_index
                dispatch.broadcast('gameStarted', {'turnIndex': result.turn_index})
                self._notice(dispatch, "All bombs are placed! The game begins!")
            return dispatch

    def make_move(self, sid: str, room_id, coord_payload) -> Dispatch:
        with self._lock:
            room = self._existing_room(room_id)
            result = room.make_move(sid, parse_coord(coord_payload))

            dispatch = Dispatch(room_id)
            dispatch.broadcast('moveResult', {
                'by': result.by,
                'coord': {'x': result.coord.x, 'y': result.coord.y},
                'hit': result.hit,
                'balances': result.balances,
                'nextTurn': result.next_turn,
            })
            if result.hit:
                dispatch.ack = {'ok': True, 'result': 'hit'}
                dispatch.broadcast('gameOver', {'winnerIndex': result.winner_index})
                loser = room.players[result.by].name
                winner = room.players[result.winner_index].name
                self._notice(dispatch, f"{loser} stepped on a mine! Winner: {winner}!")
            else:
                dispatch.ack = {'ok': True, 'result': 'safe', 'reward': 1}
            return dispatch

    def send_message(self, sid: str, room_id, message) -> Dispatch:
        with self._lock:
            room = self._existing_room(room_id, reason='room_not_found')
            idx = room.index_of(sid)
            if idx == -1:
                raise GameError('player_not_found')
            entry = self.chat(room_id).post(room.players[idx], message)

            dispatch = Dispatch(room_id, {'ok': True})
            dispatch.broadcast('newMessage', entry)
            return dispatch

    def disconnect(self, sid: str) -> Optional[Dispatch]:
        """Remove a departing sid from its room, if it was in one."""
        with self._lock:
            binding = self.sessions.unbind(sid)
            if binding is None:
                return None
            room = self.registry.get(binding.room_id)
            result = room.leave(sid) if room is not None else None
            if result is None:
                return None

            dispatch = Dispatch(room.room_id)
            # Logged ahead of any forfeit notice, broadcast after it
            left_notice = self.chat(room.room_id).system(f"{result.player.name} left the game")
            if result.forfeit_winner_index is not None:
                dispatch.broadcast('gameOver', {'winnerIndex': result.forfeit_winner_index})
                survivor = room.players[result.forfeit_winner_index].name
                self._notice(dispatch, f"Game over. {survivor} wins because the opponent disconnected.")
            dispatch.broadcast('roomUpdate', {'players': [p.to_dict() for p in room.players]})
            dispatch.broadcast('playerLeft', result.player.name)
            dispatch.broadcast('newMessage', left_notice)

            if room.is_empty:
                dispatch.room_destroyed = self.registry.destroy(room.room_id)
                self._chats.pop(room.room_id, None)
            else:
                self.sessions.rebind_room(room)
            return dispatch

    # Read-only views for the diagnostics endpoints

    def health(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'status': 'ok',
                'rooms': len(self.registry),
                'timestamp': datetime.now(timezone.utc).isoformat(),
            }

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'totalRooms': len(self.registry),
                'totalPlayers': self.registry.player_count(),
                'rooms': self.registry.summaries(),
            }

    def room_summary(self, room_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            room = self.registry.get(room_id)
            return room.to_dict() if room is not None else None
