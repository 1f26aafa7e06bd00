"""
Unit tests for the transposition table.
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / 'src'))

from ninuki_engine.engine.evaluator import WIN
from ninuki_engine.engine.transposition_table import BoundType, TranspositionTable
from ninuki_engine.game.game_types import INVALID_MOVE, Move


class TestTranspositionTable:
    """Test transposition table functionality."""

    def test_store_and_probe(self):
        """Basic store and probe should work."""
        tt = TranspositionTable(size_log2=10)

        tt.store(12345, depth=5, score=100, bound=BoundType.EXACT, best_move=Move(3, 4))

        score, move = tt.probe(12345, depth=3, alpha=-1000, beta=1000)
        assert score == 100
        assert move == Move(3, 4)

    def test_miss_on_empty_slot(self):
        tt = TranspositionTable(size_log2=10)
        assert tt.probe(777, depth=1, alpha=-10, beta=10) == (None, INVALID_MOVE)
        assert tt.get_stats()['misses'] == 1

    def test_depth_requirement(self):
        """Too shallow for a score, but the move is still returned for ordering."""
        tt = TranspositionTable(size_log2=10)

        tt.store(12345, depth=3, score=50, bound=BoundType.EXACT, best_move=Move(2, 2))

        score, move = tt.probe(12345, depth=5, alpha=-1000, beta=1000)
        assert score is None
        assert move == Move(2, 2)

    def test_bound_types(self):
        """Different bound types should respect alpha-beta window."""
        tt = TranspositionTable(size_log2=10)

        # LOWER bound: usable only when score >= beta
        tt.store(1, depth=5, score=100, bound=BoundType.LOWER, best_move=Move(1, 1))
        assert tt.probe(1, depth=4, alpha=-1000, beta=90)[0] == 100
        assert tt.probe(1, depth=4, alpha=-1000, beta=110)[0] is None

        # UPPER bound: usable only when score <= alpha
        tt.store(2, depth=5, score=-100, bound=BoundType.UPPER, best_move=Move(1, 1))
        assert tt.probe(2, depth=4, alpha=-90, beta=1000)[0] == -100
        assert tt.probe(2, depth=4, alpha=-110, beta=1000)[0] is None

    def test_same_position_keeps_deeper_entry(self):
        tt = TranspositionTable(size_log2=10)

        tt.store(42, depth=6, score=10, bound=BoundType.EXACT, best_move=Move(1, 1))
        tt.store(42, depth=2, score=99, bound=BoundType.EXACT, best_move=Move(2, 2))

        assert tt.get_best_move(42) == Move(1, 1)

        tt.store(42, depth=6, score=20, bound=BoundType.EXACT, best_move=Move(3, 3))
        assert tt.get_best_move(42) == Move(3, 3)

    def test_collision_detected(self):
        tt = TranspositionTable(size_log2=4)

        tt.store(1, depth=8, score=5, bound=BoundType.EXACT, best_move=Move(1, 1))

        # 17 maps to the same slot as 1 in a 16-slot table
        assert tt.probe(17, depth=1, alpha=-10, beta=10) == (None, INVALID_MOVE)
        assert tt.get_best_move(17) == INVALID_MOVE
        assert tt.get_stats()['collisions'] == 1

    def test_collision_replacement_ages_out_deep_entries(self):
        tt = TranspositionTable(size_log2=4, age_weight=10)

        tt.store(1, depth=8, score=5, bound=BoundType.EXACT, best_move=Move(1, 1))

        # Same generation: a shallower colliding entry does not evict
        tt.store(17, depth=3, score=7, bound=BoundType.EXACT, best_move=Move(2, 2))
        assert tt.get_best_move(1) == Move(1, 1)
        assert tt.get_best_move(17) == INVALID_MOVE

        # One generation later the old entry's depth no longer protects it
        tt.new_search()
        tt.store(17, depth=3, score=7, bound=BoundType.EXACT, best_move=Move(2, 2))
        assert tt.get_best_move(17) == Move(2, 2)
        assert tt.get_best_move(1) == INVALID_MOVE

    def test_clear(self):
        tt = TranspositionTable(size_log2=6)
        tt.store(3, depth=1, score=0, bound=BoundType.EXACT, best_move=Move(0, 0))
        tt.new_search()

        tt.clear()

        assert len(tt) == 0
        assert tt.current_generation == 0
        assert tt.get_stats()['stores'] == 0

    def test_stats_and_fill_rate(self):
        tt = TranspositionTable(size_log2=4)
        tt.store(5, depth=2, score=1, bound=BoundType.EXACT, best_move=Move(0, 1))

        tt.probe(5, depth=1, alpha=-10, beta=10)   # hit
        tt.probe(6, depth=1, alpha=-10, beta=10)   # miss

        stats = tt.get_stats()
        assert stats['hits'] == 1
        assert stats['misses'] == 1
        assert stats['hit_rate'] == 0.5
        assert stats['size_entries'] == 16
        assert tt.get_fill_rate() == 100.0 / 16

    def test_mate_score_rebased_on_lookup_depth(self):
        """A win one ply below the node keeps its distance wherever it is looked up."""
        tt = TranspositionTable(size_log2=10)

        # Node at remaining depth 5, win one ply down: WIN + 5 - 1
        tt.store(111, depth=5, score=WIN + 4, bound=BoundType.EXACT, best_move=Move(1, 1))
        tt.store(222, depth=5, score=-(WIN + 4), bound=BoundType.EXACT, best_move=Move(2, 2))

        assert tt.probe(111, depth=2, alpha=-10, beta=10) == (WIN + 1, Move(1, 1))
        assert tt.probe(222, depth=2, alpha=-10, beta=10) == (-(WIN + 1), Move(2, 2))
        assert tt.probe(111, depth=5, alpha=-10, beta=10)[0] == WIN + 4

    def test_shorter_mate_outranks_longer_after_rebasing(self):
        tt = TranspositionTable(size_log2=10)

        # Win in 1 seen at depth 3, win in 3 seen at depth 6
        tt.store(111, depth=3, score=WIN + 2, bound=BoundType.EXACT, best_move=Move(1, 1))
        tt.store(222, depth=6, score=WIN + 3, bound=BoundType.EXACT, best_move=Move(2, 2))

        shorter, _ = tt.probe(111, depth=2, alpha=-10, beta=10)
        longer, _ = tt.probe(222, depth=2, alpha=-10, beta=10)

        assert shorter == WIN + 1
        assert longer == WIN - 1
        assert shorter > longer

    def test_mate_lower_bound_cutoff_uses_rebased_score(self):
        tt = TranspositionTable(size_log2=10)

        tt.store(111, depth=6, score=WIN + 3, bound=BoundType.LOWER, best_move=Move(1, 1))

        # Rebased to WIN - 1 at depth 2: not enough to cut a window above it
        assert tt.probe(111, depth=2, alpha=WIN - 5, beta=WIN)[0] is None
        assert tt.probe(111, depth=2, alpha=WIN - 5, beta=WIN - 1)[0] == WIN - 1


if __name__ == '__main__':
    print("Testing transposition table...")
    test_tt = TestTranspositionTable()
    test_tt.test_store_and_probe()
    test_tt.test_miss_on_empty_slot()
    test_tt.test_depth_requirement()
    test_tt.test_bound_types()
    test_tt.test_same_position_keeps_deeper_entry()
    test_tt.test_collision_detected()
    test_tt.test_collision_replacement_ages_out_deep_entries()
    test_tt.test_clear()
    test_tt.test_stats_and_fill_rate()
    test_tt.test_mate_score_rebased_on_lookup_depth()
    test_tt.test_shorter_mate_outranks_longer_after_rebasing()
    test_tt.test_mate_lower_bound_cutoff_uses_rebased_score()
    print("✓ Transposition table tests passed")
