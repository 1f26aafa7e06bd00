"""
Move suggestions (hints) for the side to move.

``get_suggestion`` runs the main search at a reduced depth; when that yields
nothing it falls back to ``get_quick_suggestion``, a one-ply heuristic that
ranks nearby cells by immediate tactical value.
"""

import logging

from ninuki_engine.config import SUGGESTION_CONFIG
from ninuki_engine.engine.alphabeta import AlphaBetaEngine
from ninuki_engine.game.game_types import (
    MAIN_DIRECTIONS,
    GameState,
    Move,
    get_opponent,
)
from ninuki_engine.game.rule_engine import check_win, find_captures, is_legal_move

logger = logging.getLogger(__name__)

IMMEDIATE_WIN = 10_000_000
BLOCK_WIN = 5_000_000
MAKE_FOUR = 500_000
BLOCK_FOUR = 300_000
MAKE_OPEN_THREE = 100_000
BLOCK_OPEN_THREE = 50_000
CAPTURE_PAIR = 10_000


class SuggestionEngine:
    """Hint generator built on the alpha-beta engine."""

    @staticmethod
    def get_suggestion(state: GameState, depth: int = SUGGESTION_CONFIG['default_depth']) -> Move:
        """
        Best move from a reduced-depth search, or the quick suggestion.

        Args:
            state: Position to advise on; not modified
            depth: Maximum iterative-deepening depth
        """
        engine = AlphaBetaEngine(tt_size_log2=16)
        result = engine.search(state, max_depth=depth)

        if result.best_move.is_valid(state.size) and is_legal_move(state, result.best_move):
            return result.best_move

        logger.debug("Search produced no move, using quick suggestion")
        return SuggestionEngine.get_quick_suggestion(state)

    @staticmethod
    def get_quick_suggestion(state: GameState) -> Move:
        """Highest heuristic score among legal cells near existing stones."""
        candidates = SuggestionEngine.generate_candidates(state)

        if not candidates:
            # Fallback: center of the board
            return Move(state.center, state.center)

        player = state.current_player
        return max(candidates, key=lambda move: SuggestionEngine.evaluate_move(state, move, player))

    @staticmethod
    def generate_candidates(state: GameState) -> list[Move]:
        """Legal empty cells within the suggestion radius of any stone, row-major."""
        radius = SUGGESTION_CONFIG['candidate_radius']
        candidates = []

        for x in range(state.size):
            for y in range(state.size):
                if not state.is_empty(x, y):
                    continue
                near_stone = any(
                    state.get_piece(x + dx, y + dy) > 0
                    for dx in range(-radius, radius + 1)
                    for dy in range(-radius, radius + 1)
                )
                if near_stone and is_legal_move(state, Move(x, y)):
                    candidates.append(Move(x, y))

        return candidates

    @staticmethod
    def evaluate_move(state: GameState, move: Move, player: int) -> int:
        opponent = get_opponent(player)

        mine = _with_stone(state, move, player)
        if check_win(mine, player):
            return IMMEDIATE_WIN

        theirs = _with_stone(state, move, opponent)
        if check_win(theirs, opponent):
            return BLOCK_WIN

        score = 0

        if _creates_four(mine, move, player):
            score += MAKE_FOUR
        if _creates_four(theirs, move, opponent):
            score += BLOCK_FOUR

        if _creates_open_three(mine, move, player):
            score += MAKE_OPEN_THREE
        if _creates_open_three(theirs, move, opponent):
            score += BLOCK_OPEN_THREE

        score += len(find_captures(state, move, player)) // 2 * CAPTURE_PAIR
        score += _line_value(mine, move, player)
        score += _connectivity(state, move, player)

        center_dist = max(abs(move.x - state.center), abs(move.y - state.center))
        score += (state.center - center_dist) * 10

        return score


def _with_stone(state: GameState, move: Move, player: int) -> GameState:
    """Copy of ``state`` with a bare stone placed (no captures, no turn change)."""
    placed = state.copy()
    placed.board[move.x, move.y] = player
    return placed


def _run_through(state: GameState, move: Move, dx: int, dy: int, player: int, limit: int) -> tuple[int, int, int]:
    """(run length through move, stones forward, stones backward), each side capped at ``limit``."""
    forward = 0
    while forward < limit and state.get_piece(move.x + (forward + 1) * dx, move.y + (forward + 1) * dy) == player:
        forward += 1

    backward = 0
    while backward < limit and state.get_piece(move.x - (backward + 1) * dx, move.y - (backward + 1) * dy) == player:
        backward += 1

    return 1 + forward + backward, forward, backward


def _ends_free(state: GameState, move: Move, dx: int, dy: int, forward: int, backward: int) -> tuple[bool, bool]:
    front_free = state.is_empty(move.x + (forward + 1) * dx, move.y + (forward + 1) * dy)
    back_free = state.is_empty(move.x - (backward + 1) * dx, move.y - (backward + 1) * dy)
    return front_free, back_free


def _creates_four(state: GameState, move: Move, player: int) -> bool:
    """Exactly four in a row through ``move`` with at least one free end."""
    for dx, dy in MAIN_DIRECTIONS:
        count, forward, backward = _run_through(state, move, dx, dy, player, 4)
        if count == 4 and any(_ends_free(state, move, dx, dy, forward, backward)):
            return True
    return False


def _creates_open_three(state: GameState, move: Move, player: int) -> bool:
    """Exactly three in a row through ``move`` with both ends free."""
    for dx, dy in MAIN_DIRECTIONS:
        count, forward, backward = _run_through(state, move, dx, dy, player, 3)
        if count == 3 and all(_ends_free(state, move, dx, dy, forward, backward)):
            return True
    return False


def _line_value(state: GameState, move: Move, player: int) -> int:
    score = 0
    for dx, dy in MAIN_DIRECTIONS:
        count, _, _ = _run_through(state, move, dx, dy, player, state.size)
        if count == 2:
            score += 100
        elif count == 1:
            score += 10
    return score


def _connectivity(state: GameState, move: Move, player: int) -> int:
    """Own stones within distance 2, closer ones weighted higher."""
    score = 0
    for dx in range(-2, 3):
        for dy in range(-2, 3):
            if (dx, dy) == (0, 0):
                continue
            if state.get_piece(move.x + dx, move.y + dy) == player:
                score += 30 if max(abs(dx), abs(dy)) == 1 else 10
    return score
