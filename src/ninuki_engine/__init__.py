"""
Ninuki-renju (Gomoku with pair captures) move engine.
"""

from ninuki_engine.engine import AlphaBetaEngine, SearchResult, SuggestionEngine
from ninuki_engine.api import InvalidBoardError, build_state, evaluate_position, get_best_move

__version__ = "0.1"

__all__ = [
    'AlphaBetaEngine',
    'SearchResult',
    'SuggestionEngine',
    'InvalidBoardError',
    'build_state',
    'evaluate_position',
    'get_best_move',
]
