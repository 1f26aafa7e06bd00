"""
Alpha-beta search engine for Ninuki-renju.

This module contains the engine components:
- Zobrist hashing for fast position lookup
- Transposition table for caching search results
- Static evaluation (line patterns, threats, captures)
- Move ordering heuristics
- Alpha-beta minimax search with iterative deepening
- Move suggestions built on the search
"""

# zobrist first: the rule engine imports it while the rest of this package loads
from ninuki_engine.engine.zobrist import ZobristHasher, get_zobrist_hasher
from ninuki_engine.engine.transposition_table import TranspositionTable, BoundType, TTEntry
from ninuki_engine.engine.move_ordering import MoveOrdering, generate_ordered_moves, quick_evaluate_move
from ninuki_engine.engine.evaluator import evaluate, evaluate_simple
from ninuki_engine.engine.alphabeta import AlphaBetaEngine, SearchContext, SearchResult
from ninuki_engine.engine.suggestion import SuggestionEngine

__all__ = [
    'ZobristHasher',
    'get_zobrist_hasher',
    'TranspositionTable',
    'BoundType',
    'TTEntry',
    'MoveOrdering',
    'generate_ordered_moves',
    'quick_evaluate_move',
    'evaluate',
    'evaluate_simple',
    'AlphaBetaEngine',
    'SearchContext',
    'SearchResult',
    'SuggestionEngine',
]
