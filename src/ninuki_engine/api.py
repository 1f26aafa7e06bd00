"""
Flat-board entry points for embedding the engine in a game front end.

Boards cross this boundary as a flat row-major sequence of ``size * size``
cells, cell (x, y) at index ``x * size + y``.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from ninuki_engine.config import SEARCH_CONFIG
from ninuki_engine.engine.alphabeta import AlphaBetaEngine
from ninuki_engine.engine.evaluator import evaluate_simple
from ninuki_engine.engine.zobrist import get_zobrist_hasher
from ninuki_engine.game.game_types import (
    BOARD_SIZE,
    EMPTY,
    INVALID_MOVE,
    PLAYER1,
    PLAYER2,
    GameState,
    Move,
    WIN_CAPTURES,
)

logger = logging.getLogger(__name__)


class InvalidBoardError(ValueError):
    """Raised when a flat board or its metadata cannot describe a position."""


def build_state(
    flat_board: Sequence[int],
    current_player: int,
    turn_count: int,
    captures_a: int,
    captures_b: int,
    last_move_x: int = -1,
    last_move_y: int = -1,
    board_size: int = BOARD_SIZE
) -> GameState:
    """
    Validate boundary input and build a hashed GameState.

    Args:
        flat_board: ``board_size * board_size`` cells of EMPTY/PLAYER1/PLAYER2
        current_player: Side to move
        turn_count: Stones played so far
        captures_a: Pairs captured by PLAYER1
        captures_b: Pairs captured by PLAYER2
        last_move_x, last_move_y: Opponent's last move, (-1, -1) if none
        board_size: Board edge length

    Raises:
        InvalidBoardError: On malformed input, before any search work
    """
    cells = np.asarray(flat_board)

    if cells.ndim != 1 or cells.size != board_size * board_size:
        raise InvalidBoardError(
            f"Expected {board_size * board_size} cells, got shape {cells.shape}"
        )
    if not np.isin(cells, (EMPTY, PLAYER1, PLAYER2)).all():
        raise InvalidBoardError("Board cells must be 0 (empty), 1 or 2")
    if current_player not in (PLAYER1, PLAYER2):
        raise InvalidBoardError(f"Unknown current player: {current_player}")
    if captures_a < 0 or captures_b < 0:
        raise InvalidBoardError("Capture counts must be non-negative")
    if turn_count < 0:
        raise InvalidBoardError("Turn count must be non-negative")

    state = GameState(size=board_size)
    state.board[:, :] = cells.reshape(board_size, board_size)
    state.current_player = current_player
    state.turn_count = turn_count
    state.captures = [min(captures_a, WIN_CAPTURES), min(captures_b, WIN_CAPTURES)]

    last_move = Move(last_move_x, last_move_y)
    state.last_move = last_move if last_move.is_valid(board_size) else INVALID_MOVE

    state.zobrist_hash = get_zobrist_hasher(board_size).compute_full_hash(state)
    return state


def get_best_move(
    flat_board: Sequence[int],
    current_player: int,
    turn_count: int,
    captures_a: int = 0,
    captures_b: int = 0,
    last_move_x: int = -1,
    last_move_y: int = -1,
    max_depth: Optional[int] = SEARCH_CONFIG['default_max_depth'],
    time_limit_ms: int = 0,
    engine: Optional[AlphaBetaEngine] = None
) -> Move:
    """
    Search the position and return the move to play.

    ``max_depth=None`` picks the depth from the game phase. Pass a long-lived
    ``engine`` to keep its transposition table between calls.

    Returns:
        Best move; board center or first legal cell if the search found none,
        INVALID_MOVE only when no cell is playable
    """
    state = build_state(
        flat_board, current_player, turn_count, captures_a, captures_b,
        last_move_x, last_move_y
    )

    if engine is None:
        engine = AlphaBetaEngine()

    result = engine.search(state, max_depth=max_depth, time_limit_ms=time_limit_ms)
    if result.best_move.is_valid(state.size):
        return result.best_move

    move = AlphaBetaEngine.fallback_move(state)
    if move.is_valid(state.size):
        logger.warning("Search returned no move, falling back to %s", tuple(move))
    return move


def evaluate_position(
    flat_board: Sequence[int],
    current_player: int,
    turn_count: int,
    captures_a: int = 0,
    captures_b: int = 0
) -> int:
    """Static score of the position, positive favours PLAYER2."""
    state = build_state(flat_board, current_player, turn_count, captures_a, captures_b)
    return evaluate_simple(state)
