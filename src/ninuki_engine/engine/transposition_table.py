"""
Transposition table for caching alpha-beta search results.

The transposition table stores previously computed positions to avoid redundant
work during alpha-beta search. This provides massive speedups in iterative
deepening, as positions from depth D-1 are reused when searching depth D, and
it persists across consecutive root searches so that best moves found earlier
still seed move ordering.

Key concepts:
- Bound types: EXACT (PV node), LOWER (fail-high/beta cutoff), UPPER (fail-low/alpha cutoff)
- Power-of-two slot array indexed by the low bits of the Zobrist key
- Replacement policy: same position replaced by equal-or-deeper searches;
  a colliding position replaced when its depth, discounted by its age in
  generations, no longer outweighs the new entry
- Mate scores are stored relative to the node (distance to the win) and
  re-based on the remaining depth of the probing node
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ninuki_engine.config import TT_CONFIG
from ninuki_engine.game.game_types import INVALID_MOVE, Move

MATE_THRESHOLD = TT_CONFIG['mate_threshold']


def score_to_tt(score: int, depth: int) -> int:
    """
    Strip the remaining depth from a mate score before storing it.

    A mate ``n`` plies below a node with remaining depth ``depth`` scores
    ``WIN + depth - n``; the stored value ``WIN - n`` no longer depends on
    where in the tree the node was searched.
    """
    if score >= MATE_THRESHOLD:
        return score - depth
    if score <= -MATE_THRESHOLD:
        return score + depth
    return score


def score_from_tt(score: int, depth: int) -> int:
    """Inverse of ``score_to_tt`` for a node probed at remaining ``depth``."""
    # Stored mates are WIN - n with n <= max search depth, still above the threshold
    if score >= MATE_THRESHOLD:
        return score + depth
    if score <= -MATE_THRESHOLD:
        return score - depth
    return score


class BoundType(Enum):
    """Type of bound stored in transposition table entry."""
    EXACT = 0   # Exact value (PV node, searched with full window)
    LOWER = 1   # Lower bound (beta cutoff, actual value >= stored value)
    UPPER = 2   # Upper bound (alpha cutoff, actual value <= stored value)


@dataclass
class TTEntry:
    """
    Transposition table entry storing cached search results.

    Attributes:
        zobrist_hash: Full 64-bit hash for collision detection
        depth: Search depth when this entry was stored
        score: Evaluation score (or bound), mates node-relative (see score_to_tt)
        bound: Type of bound (EXACT/LOWER/UPPER)
        best_move: Best move found at this position
        generation: Root search counter when the entry was written
    """
    zobrist_hash: int
    depth: int
    score: int
    bound: BoundType
    best_move: Move
    generation: int = 0


class TranspositionTable:
    """
    Fixed-size transposition table with generation-aged replacement.

    Implementation:
    - Power-of-2 sized table for fast modulo via bit masking
    - One entry per slot; the stored key disambiguates collisions
    - Generation counter advanced once per root search
    """

    def __init__(self, size_log2: int = TT_CONFIG['size_log2'], age_weight: int = TT_CONFIG['age_weight']):
        """
        Initialize transposition table.

        Args:
            size_log2: Table holds 2**size_log2 slots
            age_weight: Depth penalty per generation an existing entry has aged
        """
        self.num_entries = 1 << size_log2
        self.index_mask = self.num_entries - 1
        self.age_weight = age_weight

        # Initialize table with None entries
        self.table: list[Optional[TTEntry]] = [None] * self.num_entries

        # Search generation for aging
        self.current_generation = 0

        # Statistics
        self.hits = 0
        self.misses = 0
        self.collisions = 0
        self.stores = 0

    def _get_index(self, zobrist_hash: int) -> int:
        """Get table index from zobrist hash (fast modulo via bit masking)."""
        return zobrist_hash & self.index_mask

    def probe(
        self,
        zobrist_hash: int,
        depth: int,
        alpha: int,
        beta: int
    ) -> tuple[Optional[int], Move]:
        """
        Probe transposition table for cached result.

        Returns a usable score if:
        1. Hash matches (no collision)
        2. Stored depth >= query depth (deeper search is more accurate)
        3. Bound type allows cutoff given current alpha-beta window

        The stored best move is returned whenever the key matches, even when
        the score cannot be used, so callers can still order moves with it.

        Args:
            zobrist_hash: Position hash
            depth: Current search depth
            alpha: Current alpha bound
            beta: Current beta bound

        Returns:
            (score or None, best_move or INVALID_MOVE)
        """
        entry = self.table[self._get_index(zobrist_hash)]

        if entry is None:
            self.misses += 1
            return None, INVALID_MOVE

        # Verify hash matches (collision detection)
        if entry.zobrist_hash != zobrist_hash:
            self.collisions += 1
            self.misses += 1
            return None, INVALID_MOVE

        if entry.depth >= depth:
            score = score_from_tt(entry.score, depth)
            if entry.bound == BoundType.EXACT:
                self.hits += 1
                return score, entry.best_move
            if entry.bound == BoundType.LOWER and score >= beta:
                self.hits += 1
                return score, entry.best_move
            if entry.bound == BoundType.UPPER and score <= alpha:
                self.hits += 1
                return score, entry.best_move

        self.misses += 1
        return None, entry.best_move

    def store(
        self,
        zobrist_hash: int,
        depth: int,
        score: int,
        bound: BoundType,
        best_move: Move
    ):
        """
        Store search result in transposition table.

        Args:
            zobrist_hash: Position hash
            depth: Search depth
            score: Evaluation or bound
            bound: Type of bound
            best_move: Best move found (INVALID_MOVE if none)
        """
        index = self._get_index(zobrist_hash)
        existing = self.table[index]

        if existing is not None:
            if existing.zobrist_hash == zobrist_hash:
                # Same position: don't replace deeper search with shallower
                if depth < existing.depth:
                    return
            else:
                # Collision: stale entries lose weight as generations pass
                age = self.current_generation - existing.generation
                if depth < existing.depth - age * self.age_weight:
                    return

        self.table[index] = TTEntry(
            zobrist_hash=zobrist_hash,
            depth=depth,
            score=score_to_tt(score, depth),
            bound=bound,
            best_move=best_move,
            generation=self.current_generation
        )
        self.stores += 1

    def get_best_move(self, zobrist_hash: int) -> Move:
        """
        Retrieve best move from TT without score checking.

        Useful for move ordering even when depth/bounds don't allow cutoff.

        Returns:
            Stored best move if the entry matches, INVALID_MOVE otherwise
        """
        entry = self.table[self._get_index(zobrist_hash)]

        if entry is not None and entry.zobrist_hash == zobrist_hash:
            return entry.best_move

        return INVALID_MOVE

    def clear(self):
        """Clear all entries (use between games)."""
        self.table = [None] * self.num_entries
        self.current_generation = 0
        self._reset_stats()

    def new_search(self):
        """Advance the generation counter for a new root search."""
        self.current_generation += 1

    def _reset_stats(self):
        """Reset statistics counters."""
        self.hits = 0
        self.misses = 0
        self.collisions = 0
        self.stores = 0

    def get_stats(self) -> dict:
        """
        Get transposition table statistics.

        Returns:
            Dictionary with hits, misses, hit rate, collisions
        """
        total_queries = self.hits + self.misses
        hit_rate = self.hits / total_queries if total_queries > 0 else 0.0

        return {
            'hits': self.hits,
            'misses': self.misses,
            'hit_rate': hit_rate,
            'collisions': self.collisions,
            'stores': self.stores,
            'size_entries': self.num_entries,
            'generation': self.current_generation,
        }

    def get_fill_rate(self) -> float:
        """
        Calculate percentage of table slots occupied.

        Returns:
            Fill rate as percentage (0-100)
        """
        occupied = sum(1 for entry in self.table if entry is not None)
        return (occupied / self.num_entries) * 100.0

    def __len__(self) -> int:
        return sum(1 for entry in self.table if entry is not None)
