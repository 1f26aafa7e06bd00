"""
Ninuki-renju rules: move application, pair captures, win detection and the
double free-three restriction.

Every state mutation keeps ``state.zobrist_hash`` in sync with the position,
so ``ZobristHasher.compute_full_hash(state) == state.zobrist_hash`` holds
after any sequence of successful moves.
"""

from dataclasses import dataclass, field

import numpy as np

from ninuki_engine.engine.zobrist import get_zobrist_hasher
from ninuki_engine.game.game_types import (
    ALL_DIRECTIONS,
    BOARD_SIZE,
    EMPTY,
    MAIN_DIRECTIONS,
    WIN_CAPTURES,
    GameState,
    Move,
    get_opponent,
)

# Windows of five that count as a free three (P = player stone, . = empty)
_FREE_THREE_SHAPES = {
    'PPP..', 'PP.P.', 'PP..P', 'P.PP.', 'P.P.P',
    'P..PP', '.PPP.', '.PP.P', '.P.PP', '..PPP',
}


@dataclass
class MoveResult:
    """Outcome of apply_move."""
    success: bool = False
    creates_win: bool = False
    captured: list[Move] = field(default_factory=list)


def new_game(size: int = BOARD_SIZE) -> GameState:
    """Empty board, PLAYER1 to move, hash initialised."""
    state = GameState(size)
    state.zobrist_hash = get_zobrist_hasher(size).compute_full_hash(state)
    return state


def apply_move(state: GameState, move: Move) -> MoveResult:
    """
    Place a stone for the side to move, resolve captures and advance the turn.

    The state is mutated in place. A rejected move (occupied, off the board
    or a double free-three) returns ``success=False`` and leaves the state
    untouched.
    """
    result = MoveResult()
    x, y = move

    if not state.is_empty(x, y):
        return result

    player = state.current_player
    if creates_double_free_three(state, move, player):
        return result

    opponent = get_opponent(player)
    player_idx = player - 1
    old_captures = state.captures[player_idx]
    zobrist = get_zobrist_hasher(state.size)

    state.board[x, y] = player
    hash_value = state.zobrist_hash ^ zobrist.piece_key(x, y, player)

    captured = find_captures(state, move, player)
    for cx, cy in captured:
        state.board[cx, cy] = EMPTY
        hash_value ^= zobrist.piece_key(cx, cy, opponent)

    new_captures = min(old_captures + len(captured) // 2, WIN_CAPTURES)
    state.captures[player_idx] = new_captures
    hash_value ^= zobrist.capture_key(player_idx, old_captures)
    hash_value ^= zobrist.capture_key(player_idx, new_captures)

    # Turn switch
    hash_value ^= zobrist.turn_key()
    state.zobrist_hash = hash_value
    state.current_player = opponent
    state.turn_count += 1
    state.last_move = move

    result.success = True
    result.captured = captured
    result.creates_win = check_win(state, player)
    return result


def is_legal_move(state: GameState, move: Move) -> bool:
    if not state.is_empty(move.x, move.y):
        return False
    return not creates_double_free_three(state, move, state.current_player)


# ---------------------------------------------------------------------------
# Captures
# ---------------------------------------------------------------------------

def find_captures(state: GameState, move: Move, player: int) -> list[Move]:
    """
    Stones removed if ``player`` stands on ``move``.

    Pattern along any of the 8 directions: PLAYER-OPP-OPP-PLAYER, where the
    first PLAYER is ``move``. Returns the captured cells, two per pair.
    """
    opponent = get_opponent(player)
    captured = []

    for dx, dy in ALL_DIRECTIONS:
        x1, y1 = move.x + dx, move.y + dy
        x2, y2 = move.x + 2 * dx, move.y + 2 * dy
        x3, y3 = move.x + 3 * dx, move.y + 3 * dy

        if (state.get_piece(x1, y1) == opponent
                and state.get_piece(x2, y2) == opponent
                and state.get_piece(x3, y3) == player):
            captured.append(Move(x1, y1))
            captured.append(Move(x2, y2))

    return captured


def opponent_can_capture_next_turn(state: GameState, opponent: int) -> bool:
    for x, y in np.argwhere(state.board == EMPTY).tolist():
        if find_captures(state, Move(x, y), opponent):
            return True
    return False


# ---------------------------------------------------------------------------
# Win detection
# ---------------------------------------------------------------------------

def check_win(state: GameState, player: int) -> bool:
    """
    True if ``player`` has won: 10 captures, or a five-in-a-row that survives
    verification.

    A five does not count when the opponent could break it by capturing a
    pair touching its first five cells, or when the opponent sits at 8+
    captures and can capture on the next turn.
    """
    opponent = get_opponent(player)

    if state.captures_of(player) >= WIN_CAPTURES:
        return True

    for x, y in np.argwhere(state.board == player).tolist():
        start = Move(x, y)
        for dx, dy in MAIN_DIRECTIONS:
            if not _is_five_from(state, start, dx, dy, player):
                continue

            if can_break_line_by_capture(state, start, dx, dy, player):
                continue

            if (state.captures_of(opponent) >= WIN_CAPTURES - 2
                    and opponent_can_capture_next_turn(state, opponent)):
                return False

            return True

    return False


def _is_five_from(state: GameState, start: Move, dx: int, dy: int, player: int) -> bool:
    # Only count lines from their first stone
    if state.get_piece(start.x - dx, start.y - dy) == player:
        return False

    count = 1
    cx, cy = start.x + dx, start.y + dy
    while state.get_piece(cx, cy) == player:
        count += 1
        cx += dx
        cy += dy

    return count >= 5


def can_break_line_by_capture(
    state: GameState,
    line_start: Move,
    dx: int,
    dy: int,
    winning_player: int
) -> bool:
    """
    Whether the opponent can capture a pair that includes one of the first
    five stones of the line starting at ``line_start``.

    Only the first five cells are inspected; stones further along a longer
    line are not considered.
    """
    opponent = get_opponent(winning_player)

    for i in range(5):
        px, py = line_start.x + i * dx, line_start.y + i * dy

        for cdx, cdy in ALL_DIRECTIONS:
            sx, sy = px + cdx, py + cdy
            bx, by = px - cdx, py - cdy
            ax, ay = sx + cdx, sy + cdy

            if state.get_piece(sx, sy) != winning_player:
                continue

            # OPP - PIECE - SECOND - EMPTY
            if state.get_piece(bx, by) == opponent and state.is_empty(ax, ay):
                return True

            # EMPTY - PIECE - SECOND - OPP
            if state.get_piece(ax, ay) == opponent and state.is_empty(bx, by):
                return True

    return False


# ---------------------------------------------------------------------------
# Double free-three
# ---------------------------------------------------------------------------

def creates_double_free_three(state: GameState, move: Move, player: int) -> bool:
    """Whether placing ``player`` on ``move`` opens two free threes at once."""
    free_threes = 0
    for dx, dy in MAIN_DIRECTIONS:
        if _is_free_three(state, move, dx, dy, player):
            free_threes += 1
            if free_threes >= 2:
                return True
    return False


def _is_free_three(state: GameState, move: Move, dx: int, dy: int, player: int) -> bool:
    opponent = get_opponent(player)

    # Every window of 5 along the axis that contains the move
    for offset in range(-4, 1):
        wx, wy = move.x + offset * dx, move.y + offset * dy
        if not (state.is_valid(wx, wy) and state.is_valid(wx + 4 * dx, wy + 4 * dy)):
            continue

        shape = []
        for i in range(5):
            px, py = wx + i * dx, wy + i * dy
            piece = player if (px, py) == (move.x, move.y) else state.get_piece(px, py)
            if piece == player:
                shape.append('P')
            elif piece == opponent:
                shape.append('O')
            else:
                shape.append('.')

        shape = ''.join(shape)
        if shape not in _FREE_THREE_SHAPES:
            continue

        # Both cells flanking the window must be empty
        if (state.is_empty(wx - dx, wy - dy)
                and state.is_empty(wx + 5 * dx, wy + 5 * dy)
                and _can_become_four(shape)):
            return True

    return False


def _can_become_four(shape: str) -> bool:
    for i, cell in enumerate(shape):
        if cell != '.':
            continue
        filled = shape[:i] + 'P' + shape[i + 1:]
        if 'PPPP' in filled:
            return True
    return False
