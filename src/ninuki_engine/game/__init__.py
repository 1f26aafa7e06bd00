"""
Board representation and Ninuki-renju rules.
"""

from ninuki_engine.game.game_types import GameState, Move, INVALID_MOVE, PLAYER1, PLAYER2, EMPTY

__all__ = ['GameState', 'Move', 'INVALID_MOVE', 'PLAYER1', 'PLAYER2', 'EMPTY']
