"""
Unit tests for the flat-board entry points.
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / 'src'))

from ninuki_engine.api import InvalidBoardError, build_state, evaluate_position, get_best_move
from ninuki_engine.engine.alphabeta import AlphaBetaEngine, SearchResult
from ninuki_engine.engine.zobrist import get_zobrist_hasher
from ninuki_engine.game.game_types import INVALID_MOVE, PLAYER1, PLAYER2, Move


def flat(p1=(), p2=(), size=19):
    cells = [0] * (size * size)
    for x, y in p1:
        cells[x * size + y] = PLAYER1
    for x, y in p2:
        cells[x * size + y] = PLAYER2
    return cells


class TestBuildState:
    """Validation and conversion of boundary input."""

    def test_row_major_layout(self):
        state = build_state(flat(p1=[(3, 7)], p2=[(7, 3)]), PLAYER2, 2, 0, 0)

        assert state.board[3, 7] == PLAYER1
        assert state.board[7, 3] == PLAYER2
        assert state.current_player == PLAYER2
        assert state.turn_count == 2

    def test_hash_initialised(self):
        state = build_state(flat(p1=[(9, 9)]), PLAYER2, 1, 1, 2)
        assert get_zobrist_hasher().verify_hash(state)
        assert state.captures == [1, 2]

    def test_last_move(self):
        state = build_state(flat(p1=[(9, 9)]), PLAYER2, 1, 0, 0, 9, 9)
        assert state.last_move == Move(9, 9)

        state = build_state(flat(p1=[(9, 9)]), PLAYER2, 1, 0, 0)
        assert state.last_move == INVALID_MOVE

    @pytest.mark.parametrize('kwargs', [
        {'flat_board': [0] * 360},
        {'flat_board': [0] * 360 + [3]},
        {'current_player': 0},
        {'captures_a': -1},
        {'turn_count': -5},
    ])
    def test_invalid_input_rejected(self, kwargs):
        args = {
            'flat_board': flat(),
            'current_player': PLAYER1,
            'turn_count': 0,
            'captures_a': 0,
            'captures_b': 0,
        }
        args.update(kwargs)

        with pytest.raises(InvalidBoardError):
            build_state(**args)

    def test_invalid_board_error_is_value_error(self):
        with pytest.raises(ValueError):
            get_best_move([1, 2, 3], PLAYER1, 0)


class TestEntryPoints:
    """get_best_move and evaluate_position."""

    def test_best_move_on_empty_board(self):
        assert get_best_move(flat(), PLAYER1, 0) == Move(9, 9)

    def test_best_move_completes_five(self):
        board = flat(p1=[(3, 3), (15, 15)], p2=[(9, 5), (9, 6), (9, 7), (9, 8)])
        move = get_best_move(board, PLAYER2, 20, max_depth=3)
        assert move in (Move(9, 4), Move(9, 9))

    def test_evaluate_empty_board(self):
        assert evaluate_position(flat(), PLAYER1, 0) == 0

    def test_evaluate_sign(self):
        assert evaluate_position(flat(p2=[(9, 7), (9, 8), (9, 9)]), PLAYER1, 3) > 0
        assert evaluate_position(flat(p1=[(9, 7), (9, 8), (9, 9)]), PLAYER2, 3) < 0


class EmptyHandedEngine(AlphaBetaEngine):
    """Engine whose search never produces a move."""

    def search(self, state, max_depth=None, time_limit_ms=0, context=None):
        return SearchResult()


class TestFallback:
    """get_best_move when the search comes back without a move."""

    def test_center_when_free(self, caplog):
        board = flat(p1=[(3, 3)], p2=[(3, 4)])

        with caplog.at_level('WARNING', logger='ninuki_engine.api'):
            move = get_best_move(board, PLAYER1, 2, engine=EmptyHandedEngine(tt_size_log2=8))

        assert move == Move(9, 9)
        assert 'falling back' in caplog.text

    def test_first_legal_cell_when_center_taken(self):
        board = flat(p1=[(9, 9)], p2=[(9, 10)])
        move = get_best_move(board, PLAYER1, 2, engine=EmptyHandedEngine(tt_size_log2=8))
        assert move == Move(0, 0)

    def test_full_board_has_no_move(self, caplog):
        board = [PLAYER1] * (19 * 19)

        with caplog.at_level('WARNING', logger='ninuki_engine.api'):
            move = get_best_move(board, PLAYER2, 361, engine=EmptyHandedEngine(tt_size_log2=8))

        assert move == INVALID_MOVE
        assert 'falling back' not in caplog.text


if __name__ == '__main__':
    print("Testing flat-board API...")
    test_build = TestBuildState()
    test_build.test_row_major_layout()
    test_build.test_hash_initialised()
    test_build.test_last_move()
    test_entry = TestEntryPoints()
    test_entry.test_best_move_on_empty_board()
    test_entry.test_best_move_completes_five()
    test_entry.test_evaluate_empty_board()
    test_entry.test_evaluate_sign()
    test_fallback = TestFallback()
    test_fallback.test_first_legal_cell_when_center_taken()
    print("✓ API tests passed")
