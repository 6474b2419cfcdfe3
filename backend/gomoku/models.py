import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from gomoku.errors import (
    CellOccupied,
    GameNotFinished,
    GameNotInProgress,
    NotSeated,
    OutOfBounds,
    OutOfTurn,
    RoomFull,
    RoomLocked,
)

BLACK = 'black'
WHITE = 'white'
BOARD_SIZE = 15
WIN_LENGTH = 5
SEATS_PER_ROOM = 2

# Four line directions through a stone: horizontal, vertical, both diagonals
DIRECTIONS = ((1, 0), (0, 1), (1, 1), (1, -1))


def other_color(color: str) -> str:
    return WHITE if color == BLACK else BLACK


class Board:
    """Square grid of stones. Cells hold None, 'black' or 'white'."""

    def __init__(self, size: int = BOARD_SIZE):
        self.size = size
        self.cells: List[List[Optional[str]]] = [[None] * size for _ in range(size)]
        self.stones = 0

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def get(self, x: int, y: int) -> Optional[str]:
        if not self.in_bounds(x, y):
            raise OutOfBounds()
        return self.cells[y][x]

    def place(self, x: int, y: int, color: str) -> None:
        if not self.in_bounds(x, y):
            raise OutOfBounds()
        if self.cells[y][x] is not None:
            raise CellOccupied()
        self.cells[y][x] = color
        self.stones += 1

    def check_win(self, x: int, y: int, color: str) -> bool:
        """Return True if the stone at (x, y) completes a line of five or more.

        Only lines through (x, y) are scanned, so this must be called right
        after the placement it is judging.
        """
        for dx, dy in DIRECTIONS:
            count = 1
            for sign in (1, -1):
                cx, cy = x + sign * dx, y + sign * dy
                while self.in_bounds(cx, cy) and self.cells[cy][cx] == color:
                    count += 1
                    cx += sign * dx
                    cy += sign * dy
            if count >= WIN_LENGTH:
                return True
        return False

    def is_full(self) -> bool:
        return self.stones >= self.size * self.size

    def to_list(self):
        return [list(row) for row in self.cells]


@dataclass
class MoveResult:
    x: int
    y: int
    color: str
    next_turn: Optional[str]
    status: str
    winner: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != Game.IN_PROGRESS


class Game:
    IN_PROGRESS = 'in_progress'
    WON = 'won'
    DRAWN = 'drawn'

    def __init__(self, seat_colors: Dict[str, str], size: int = BOARD_SIZE):
        self.board = Board(size)
        self.seat_colors = dict(seat_colors)
        self.turn_color = BLACK
        self.status = self.IN_PROGRESS
        self.winner: Optional[str] = None
        self.rematch_votes: Set[str] = set()

    @classmethod
    def start_new(cls, seat_a: str, seat_b: str, randomize: bool = True,
                  rng: Optional[random.Random] = None, size: int = BOARD_SIZE) -> 'Game':
        # Black always moves first; the coin flip only decides who holds black
        if randomize and (rng or random).random() < 0.5:
            seat_a, seat_b = seat_b, seat_a
        return cls({seat_a: BLACK, seat_b: WHITE}, size=size)

    @property
    def seats(self) -> List[str]:
        return list(self.seat_colors)

    @property
    def is_finished(self) -> bool:
        return self.status != self.IN_PROGRESS

    def color_of(self, seat: str) -> Optional[str]:
        return self.seat_colors.get(seat)

    def seat_of(self, color: str) -> Optional[str]:
        for seat, seat_color in self.seat_colors.items():
            if seat_color == color:
                return seat
        return None

    def apply_move(self, seat: str, x: int, y: int) -> MoveResult:
        if self.status != self.IN_PROGRESS:
            raise GameNotInProgress()
        color = self.seat_colors.get(seat)
        if color is None:
            raise NotSeated()
        if color != self.turn_color:
            raise OutOfTurn()
        self.board.place(x, y, color)
        self.turn_color = other_color(color)
        if self.board.check_win(x, y, color):
            self.status = self.WON
            self.winner = color
        elif self.board.is_full():
            self.status = self.DRAWN
        if self.is_finished:
            self.rematch_votes.clear()
        return MoveResult(
            x=x,
            y=y,
            color=color,
            next_turn=None if self.is_finished else self.turn_color,
            status=self.status,
            winner=self.winner,
        )

    def vote_rematch(self, seat: str) -> bool:
        if not self.is_finished:
            raise GameNotFinished()
        if seat not in self.seat_colors:
            raise NotSeated()
        self.rematch_votes.add(seat)
        return self.rematch_votes >= set(self.seat_colors)

    def to_dict(self):
        return {
            'board': self.board.to_list(),
            'turn': self.turn_color if not self.is_finished else None,
            'status': self.status,
            'winner': self.winner,
            'rematch_votes': len(self.rematch_votes),
        }


class Room:
    EMPTY = 'empty'
    WAITING = 'waiting'
    PLAYING = 'playing'

    def __init__(self, room_id: int):
        self.id = room_id
        self.seats: List[str] = []
        self.locked = False
        self.game: Optional[Game] = None

    @property
    def state(self) -> str:
        # Derived on every read so it can never drift from seats/locked
        if not self.seats:
            return self.EMPTY
        if len(self.seats) == 1 and not self.locked:
            return self.WAITING
        return self.PLAYING

    @property
    def is_ready(self) -> bool:
        return self.locked and len(self.seats) == SEATS_PER_ROOM

    def has(self, participant: str) -> bool:
        return participant in self.seats

    def opponent_of(self, participant: str) -> Optional[str]:
        for seat in self.seats:
            if seat != participant:
                return seat
        return None

    def try_join(self, participant: str) -> int:
        """Seat a participant and return the seat index.

        A locked room rejects everyone, even with a free seat: once a match
        has started a departed player can not be replaced mid-game.
        """
        if self.locked:
            raise RoomLocked()
        if len(self.seats) >= SEATS_PER_ROOM:
            raise RoomFull()
        self.seats.append(participant)
        if len(self.seats) == SEATS_PER_ROOM:
            self.locked = True
        return len(self.seats) - 1

    def exit(self, participant: str) -> List[str]:
        """Soft exit: the participant keeps the seat. Returns who to notify."""
        if participant not in self.seats:
            return []
        return [seat for seat in self.seats if seat != participant]

    def leave(self, participant: str) -> bool:
        if participant not in self.seats:
            return False
        self.seats.remove(participant)
        if not self.seats:
            self.reset()
        return True

    def reset(self) -> None:
        self.seats = []
        self.locked = False
        self.game = None

    def snapshot(self):
        return {'id': self.id, 'state': self.state}

    def to_dict(self):
        return {
            'id': self.id,
            'state': self.state,
            'locked': self.locked,
            'occupancy': len(self.seats),
            'game': self.game.to_dict() if self.game else None,
        }
