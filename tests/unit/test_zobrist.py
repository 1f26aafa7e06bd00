"""
Unit tests for Zobrist hashing.

Tests verify:
1. Keys are reproducible and EMPTY never contributes
2. Incremental updates in the rule engine match full recomputation
3. Side to move and capture counts are part of the key
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / 'src'))

from ninuki_engine.engine.zobrist import ZobristHasher, get_zobrist_hasher
from ninuki_engine.game.game_types import EMPTY, PLAYER1, PLAYER2, GameState, Move
from ninuki_engine.game.rule_engine import apply_move, new_game


class TestZobristKeys:
    """Key table construction."""

    def test_same_seed_same_keys(self):
        a = ZobristHasher(19, seed=42)
        b = ZobristHasher(19, seed=42)

        assert a.piece_key(3, 4, PLAYER1) == b.piece_key(3, 4, PLAYER1)
        assert a.turn_key() == b.turn_key()
        assert a.capture_key(1, 7) == b.capture_key(1, 7)

    def test_empty_key_is_zero(self):
        hasher = ZobristHasher(19)
        assert hasher.piece_key(0, 0, EMPTY) == 0
        assert hasher.piece_key(18, 18, EMPTY) == 0

    def test_player_keys_differ(self):
        hasher = ZobristHasher(19)
        assert hasher.piece_key(9, 9, PLAYER1) != hasher.piece_key(9, 9, PLAYER2)
        assert hasher.piece_key(9, 9, PLAYER1) != hasher.piece_key(9, 10, PLAYER1)

    def test_capture_count_clamped(self):
        hasher = ZobristHasher(19)
        assert hasher.capture_key(0, 15) == hasher.capture_key(0, 10)

    def test_accessor_returns_one_instance_per_size(self):
        assert get_zobrist_hasher(19) is get_zobrist_hasher(19)
        assert get_zobrist_hasher(5) is not get_zobrist_hasher(19)
        assert get_zobrist_hasher(5).board_size == 5

    def test_size_mismatch_rejected(self):
        with pytest.raises(ValueError):
            get_zobrist_hasher(19).compute_full_hash(GameState(size=5))


class TestZobristHashing:
    """Test Zobrist hashing correctness."""

    def test_empty_board_hash(self):
        hasher = get_zobrist_hasher()
        state = GameState()

        expected = hasher.capture_key(0, 0) ^ hasher.capture_key(1, 0)
        assert hasher.compute_full_hash(state) == expected

    def test_turn_changes_hash(self):
        hasher = get_zobrist_hasher()
        state = GameState()
        state.board[9, 9] = PLAYER1

        h1 = hasher.compute_full_hash(state)
        state.current_player = PLAYER2
        h2 = hasher.compute_full_hash(state)

        assert h1 ^ h2 == hasher.turn_key()

    def test_incremental_hash_matches_full(self):
        """Incremental hash should match full recomputation after every move."""
        hasher = get_zobrist_hasher()
        state = new_game()

        moves = [Move(9, 9), Move(9, 10), Move(0, 0), Move(9, 11), Move(9, 12)]
        for move in moves:
            result = apply_move(state, move)
            assert result.success
            assert hasher.verify_hash(state)

        # The last move captured the pair (9, 10)-(9, 11)
        assert state.captures == [1, 0]
        assert state.board[9, 10] == EMPTY
        assert state.board[9, 11] == EMPTY

    def test_rejected_move_leaves_hash(self):
        state = new_game()
        apply_move(state, Move(9, 9))
        before = state.zobrist_hash

        result = apply_move(state, Move(9, 9))

        assert not result.success
        assert state.zobrist_hash == before

    def test_transposition_same_hash(self):
        """Same position reached by different move orders hashes equally."""
        a = new_game()
        for move in [Move(9, 9), Move(3, 3), Move(9, 11), Move(4, 4)]:
            apply_move(a, move)

        b = new_game()
        for move in [Move(9, 11), Move(4, 4), Move(9, 9), Move(3, 3)]:
            apply_move(b, move)

        assert a.zobrist_hash == b.zobrist_hash


if __name__ == '__main__':
    print("Testing Zobrist keys...")
    test_keys = TestZobristKeys()
    test_keys.test_same_seed_same_keys()
    test_keys.test_empty_key_is_zero()
    test_keys.test_player_keys_differ()
    test_keys.test_capture_count_clamped()
    test_keys.test_accessor_returns_one_instance_per_size()
    print("✓ Zobrist key tests passed")

    print("\nTesting Zobrist hashing...")
    test_hash = TestZobristHashing()
    test_hash.test_empty_board_hash()
    test_hash.test_turn_changes_hash()
    test_hash.test_incremental_hash_matches_full()
    test_hash.test_rejected_move_leaves_hash()
    test_hash.test_transposition_same_hash()
    print("✓ Zobrist hashing tests passed")
