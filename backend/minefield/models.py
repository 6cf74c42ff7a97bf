import random
from collections import namedtuple
from typing import Callable, List, Optional, Sequence

from minefield.grid import MAX_BOMBS, Coord, is_valid

WAITING = 'waiting'
PLACING = 'placing'
STARTED = 'started'
FINISHED = 'finished'

MAX_PLAYERS = 2

JoinResult = namedtuple('JoinResult', ['player_index', 'placing_started'])
BombResult = namedtuple('BombResult', ['coord', 'all_placed', 'turn_index'])
MoveResult = namedtuple('MoveResult', ['by', 'coord', 'hit', 'balances', 'next_turn', 'winner_index'])
LeaveResult = namedtuple('LeaveResult', ['player', 'forfeit_winner_index'])


class GameError(Exception):
    """A request the room refused. ``reason`` is the code sent back in the ack."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

    def to_ack(self):
        return {'ok': False, 'reason': self.reason}


class Player:
    def __init__(self, session_id: str, name: str, gender=None):
        self.session_id = session_id
        self.name = name
        self.gender = gender
        self.bombs: List[Coord] = []
        self.score = 0

    def has_bomb_at(self, coord: Coord) -> bool:
        return coord in self.bombs

    def to_dict(self):
        # Bombs stay server side
        return {
            'id': self.session_id,
            'name': self.name,
            'gender': self.gender,
        }


class Room:
    """State of a single two-player game.

    Every operation checks all of its preconditions before touching any
    field, so a refused request (GameError) leaves the room unchanged.
    """

    def __init__(self, room_id: str, choose_turn: Optional[Callable[[Sequence[int]], int]] = None):
        self.room_id = room_id
        self.players: List[Player] = []
        self.phase = WAITING
        self.opened_cells: List[tuple] = []
        self.turn_index: Optional[int] = None
        self.winner_index: Optional[int] = None
        self._choose_turn = choose_turn or random.choice

    @property
    def is_empty(self) -> bool:
        return not self.players

    def index_of(self, session_id: str) -> int:
        for idx, player in enumerate(self.players):
            if player.session_id == session_id:
                return idx
        return -1

    def balances(self) -> List[int]:
        return [p.score for p in self.players]

    def is_opened(self, coord: Coord) -> bool:
        return any(cell == coord for cell, _ in self.opened_cells)

    def join(self, name: str, gender, session_id: str) -> JoinResult:
        if not name:
            raise GameError('invalid_data')
        if len(self.players) >= MAX_PLAYERS:
            raise GameError('room_full')
        if self.phase != WAITING:
            raise GameError('invalid_state')
        if any(p.name == name for p in self.players):
            raise GameError('name_taken')

        self.players.append(Player(session_id, name, gender))
        placing_started = len(self.players) == MAX_PLAYERS
        if placing_started:
            self.phase = PLACING
        return JoinResult(len(self.players) - 1, placing_started)

    def place_bomb(self, session_id: str, coord: Optional[Coord]) -> BombResult:
        if self.phase != PLACING:
            raise GameError('invalid_state')
        idx = self.index_of(session_id)
        if idx == -1:
            raise GameError('player_not_found')
        if coord is None or not is_valid(coord.x, coord.y):
            raise GameError('invalid_coordinates')
        player = self.players[idx]
        if player.has_bomb_at(coord):
            raise GameError('bomb_already_placed')
        if len(player.bombs) >= MAX_BOMBS:
            raise GameError('max_bombs_reached')

        # Counts as they will be once this bomb is recorded
        counts = [len(p.bombs) + (1 if p is player else 0) for p in self.players]
        all_placed = len(self.players) == MAX_PLAYERS and all(n == MAX_BOMBS for n in counts)
        turn = None
        if all_placed:
            turn = self._choose_turn([0, 1])
            if turn not in (0, 1):
                raise ValueError(f"turn chooser returned {turn!r}, expected 0 or 1")

        player.bombs.append(coord)
        if not all_placed:
            return BombResult(coord, False, None)

        self.phase = STARTED
        self.turn_index = turn
        return BombResult(coord, True, turn)

    def make_move(self, session_id: str, coord: Optional[Coord]) -> MoveResult:
        if self.phase != STARTED:
            raise GameError('invalid_state')
        idx = self.index_of(session_id)
        if idx == -1:
            raise GameError('player_not_found')
        if idx != self.turn_index:
            raise GameError('not_your_turn')
        if coord is None or not is_valid(coord.x, coord.y):
            raise GameError('invalid_coordinates')
        if self.is_opened(coord):
            raise GameError('cell_already_opened')

        opponent_idx = 1 - idx
        self.opened_cells.append((coord, session_id))
        hit = self.players[opponent_idx].has_bomb_at(coord)

        if hit:
            self.phase = FINISHED
            self.turn_index = None
            self.winner_index = opponent_idx
            return MoveResult(idx, coord, True, self.balances(), None, opponent_idx)

        self.players[idx].score += 1
        self.turn_index = opponent_idx
        return MoveResult(idx, coord, False, self.balances(), self.turn_index, None)

    def leave(self, session_id: str) -> Optional[LeaveResult]:
        """Drop a player; the survivor of an interrupted game wins by forfeit.

        Returns None if the session is not in this room.
        """
        idx = self.index_of(session_id)
        if idx == -1:
            return None
        player = self.players.pop(idx)

        forfeit_winner = None
        if self.phase in (PLACING, STARTED) and len(self.players) == 1:
            self.phase = FINISHED
            self.turn_index = None
            self.winner_index = forfeit_winner = 0
        return LeaveResult(player, forfeit_winner)

    def to_dict(self):
        return {
            'id': self.room_id,
            'state': self.phase,
            'players': [p.to_dict() for p in self.players],
            'turnIndex': self.turn_index,
            'openedCells': [{'x': c.x, 'y': c.y} for c, _ in self.opened_cells],
            'balances': self.balances(),
            'winnerIndex': self.winner_index,
        }
