"""
Board constants and the mutable game state shared by the rule engine and the search.
"""

from typing import NamedTuple

import numpy as np


BOARD_SIZE = 19
BOARD_CENTER = BOARD_SIZE // 2

EMPTY = 0
PLAYER1 = 1  # Human
PLAYER2 = 2  # AI

WIN_CAPTURES = 10

# 4 main axes: horizontal, vertical, diagonal (down-right), diagonal (up-right)
MAIN_DIRECTIONS = [(0, 1), (1, 0), (1, 1), (1, -1)]

ALL_DIRECTIONS = [
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
]


class Move(NamedTuple):
    x: int
    y: int

    def is_valid(self, board_size: int = BOARD_SIZE) -> bool:
        return 0 <= self.x < board_size and 0 <= self.y < board_size


INVALID_MOVE = Move(-1, -1)


def get_opponent(player: int) -> int:
    return PLAYER2 if player == PLAYER1 else PLAYER1


class GameState:
    """
    Board position plus the bookkeeping the engine needs.

    Attributes:
        board: (size, size) int8 array with EMPTY / PLAYER1 / PLAYER2
        current_player: Side to move
        turn_count: Number of stones played so far
        captures: Pairs captured, [PLAYER1, PLAYER2], capped at WIN_CAPTURES
        last_move: Last move of the opponent of the side to move
        zobrist_hash: Incrementally maintained 64-bit position key
    """

    def __init__(self, size: int = BOARD_SIZE):
        self.size = size
        self.board = np.zeros((size, size), dtype=np.int8)
        self.current_player = PLAYER1
        self.turn_count = 0
        self.captures = [0, 0]
        self.last_move = INVALID_MOVE
        self.zobrist_hash = 0

    @property
    def center(self) -> int:
        return self.size // 2

    def copy(self) -> 'GameState':
        clone = GameState.__new__(GameState)
        clone.size = self.size
        clone.board = self.board.copy()
        clone.current_player = self.current_player
        clone.turn_count = self.turn_count
        clone.captures = list(self.captures)
        clone.last_move = self.last_move
        clone.zobrist_hash = self.zobrist_hash
        return clone

    def is_valid(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def is_empty(self, x: int, y: int) -> bool:
        return self.is_valid(x, y) and self.board[x, y] == EMPTY

    def get_piece(self, x: int, y: int) -> int:
        """Cell value, or -1 when (x, y) is off the board."""
        if not self.is_valid(x, y):
            return -1
        return int(self.board[x, y])

    def captures_of(self, player: int) -> int:
        return self.captures[player - 1]

    def has_stones(self) -> bool:
        return bool(self.board.any())

    def __repr__(self) -> str:
        return (
            f"GameState(size={self.size}, current_player={self.current_player}, "
            f"turn_count={self.turn_count}, captures={self.captures}, "
            f"last_move={tuple(self.last_move)}, hash={self.zobrist_hash:#018x})"
        )
