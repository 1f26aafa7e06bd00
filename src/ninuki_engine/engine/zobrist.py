"""
Zobrist hashing for Ninuki-renju positions.

Zobrist hashing provides O(1) position lookup in transposition tables by
computing a fingerprint for each board state. The rule engine updates the
fingerprint incrementally after each move, so a full recomputation is only
needed when a search starts from a freshly built position.

Implementation:
- Pre-generate random 64-bit keys for each (x, y, piece) combination
  (piece EMPTY always maps to 0 so empty cells contribute nothing)
- One side-to-move key, XOR-ed in when PLAYER2 is to move
- One key per (player, capture count) for counts 0..10
- Hash = XOR of all keys implied by the position
"""

import threading
from typing import Optional

import numpy as np

from ninuki_engine.config import ZOBRIST_CONFIG
from ninuki_engine.game.game_types import BOARD_SIZE, EMPTY, PLAYER2, WIN_CAPTURES


class ZobristHasher:
    """
    Zobrist key table for one board size.

    19×19 board × 2 players = 722 piece keys, plus 1 turn key and
    2 × 11 capture-count keys.

    The table is immutable after construction; it never updates a state's
    hash itself.
    """

    def __init__(self, board_size: int = BOARD_SIZE, seed: int = ZOBRIST_CONFIG['seed']):
        """
        Initialize Zobrist hash table with random 64-bit keys.

        Args:
            board_size: Board edge length
            seed: Random seed for reproducibility
        """
        self.board_size = board_size

        # Use seeded RNG for reproducible hashes
        rng = np.random.RandomState(seed)

        # Generate zobrist keys: [x, y, piece], piece in {EMPTY, PLAYER1, PLAYER2}
        piece_keys = rng.randint(
            1, 2**63 - 1,
            size=(board_size, board_size, 3),
            dtype=np.uint64
        )
        piece_keys[:, :, EMPTY] = 0

        # Side-to-move hash (XOR this if PLAYER2 is to move)
        turn_key = rng.randint(1, 2**63 - 1, dtype=np.uint64)

        # Capture keys: [player_index, count 0..10]
        capture_keys = rng.randint(
            1, 2**63 - 1,
            size=(2, WIN_CAPTURES + 1),
            dtype=np.uint64
        )

        # Plain Python ints keep XOR arithmetic free of numpy scalar casting
        self._piece_keys = piece_keys.tolist()
        self._turn_key = int(turn_key)
        self._capture_keys = capture_keys.tolist()

    def piece_key(self, x: int, y: int, player: int) -> int:
        return self._piece_keys[x][y][player]

    def turn_key(self) -> int:
        return self._turn_key

    def capture_key(self, player_index: int, count: int) -> int:
        return self._capture_keys[player_index][min(count, WIN_CAPTURES)]

    def compute_full_hash(self, state) -> int:
        """
        Compute Zobrist hash for a game state from scratch.

        O(n²) over the board; the search only calls this once per entry point.

        Args:
            state: GameState whose board size matches this hasher

        Returns:
            64-bit hash value (int)
        """
        if state.size != self.board_size:
            raise ValueError(
                f"Hasher built for {self.board_size}x{self.board_size}, "
                f"state is {state.size}x{state.size}"
            )

        hash_value = 0

        # XOR all occupied squares
        xs, ys = np.nonzero(state.board)
        for x, y in zip(xs.tolist(), ys.tolist()):
            hash_value ^= self._piece_keys[x][y][int(state.board[x, y])]

        if state.current_player == PLAYER2:
            hash_value ^= self._turn_key

        hash_value ^= self.capture_key(0, state.captures[0])
        hash_value ^= self.capture_key(1, state.captures[1])

        return hash_value

    def verify_hash(self, state) -> bool:
        """
        Verify that the state's incremental hash matches a full recomputation.

        Useful for debugging desynchronised incremental updates.
        """
        return self.compute_full_hash(state) == state.zobrist_hash


# One hasher per board size, created at most once
_hashers: dict[int, ZobristHasher] = {}
_hashers_lock = threading.Lock()


def get_zobrist_hasher(board_size: int = BOARD_SIZE) -> ZobristHasher:
    """
    Get or create the process-wide Zobrist hasher for a board size.

    This ensures all components use the same zobrist table. Creation is
    guarded by a lock so concurrent first calls still build exactly one table.

    Args:
        board_size: Board edge length

    Returns:
        ZobristHasher instance
    """
    hasher: Optional[ZobristHasher] = _hashers.get(board_size)
    if hasher is not None:
        return hasher

    with _hashers_lock:
        hasher = _hashers.get(board_size)
        if hasher is None:
            hasher = ZobristHasher(board_size)
            _hashers[board_size] = hasher

    return hasher
