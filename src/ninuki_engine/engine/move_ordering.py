"""
Move ordering heuristics for alpha-beta search.

Good move ordering is critical for alpha-beta pruning efficiency. The goal is to
search the best moves first to maximize cutoffs, and on a 19×19 board it is also
what keeps the branching factor bounded: only cells near existing stones are
considered, and only the best few of those survive truncation.

Ordering priority (high to low):
1. Previous best move (transposition table or shallower iteration)
2. Killer moves (moves that caused cutoffs at the same depth)
3. Quick heuristic score: centrality, adjacency, active zone, line length,
   capture availability and history heuristic
"""

from typing import Optional

import numpy as np

from ninuki_engine.config import ORDERING_CONFIG, SEARCH_CONFIG
from ninuki_engine.game.game_types import (
    ALL_DIRECTIONS,
    EMPTY,
    INVALID_MOVE,
    MAIN_DIRECTIONS,
    GameState,
    Move,
    get_opponent,
)


def get_search_radius(state: GameState) -> int:
    if state.turn_count <= ORDERING_CONFIG['wide_radius_until_turn']:
        return ORDERING_CONFIG['wide_radius']
    return ORDERING_CONFIG['narrow_radius']


def get_max_candidates(state: GameState) -> int:
    for phase in ORDERING_CONFIG['candidate_limits']:
        if phase['until_turn'] is None or state.turn_count <= phase['until_turn']:
            return phase['max_candidates']
    return ORDERING_CONFIG['candidate_limits'][-1]['max_candidates']


def generate_candidates(state: GameState) -> list[Move]:
    """
    Empty cells within the phase radius of any stone, plus the radius+1 zone
    around the opponent's last move. Returns row-major order, unsorted.
    """
    radius = get_search_radius(state)
    size = state.size
    occupied = state.board != EMPTY
    relevant = np.zeros((size, size), dtype=bool)

    # Mark positions near existing pieces
    for x, y in np.argwhere(occupied).tolist():
        relevant[max(0, x - radius):x + radius + 1, max(0, y - radius):y + radius + 1] = True

    # Mark zone around opponent's last move (tactical priority)
    last = state.last_move
    if state.is_valid(last.x, last.y):
        extended = radius + 1
        relevant[max(0, last.x - extended):last.x + extended + 1,
                 max(0, last.y - extended):last.y + extended + 1] = True

    relevant &= ~occupied
    return [Move(x, y) for x, y in np.argwhere(relevant).tolist()]


def generate_ordered_moves(
    state: GameState,
    previous_best: Move = INVALID_MOVE,
    history_table: Optional[np.ndarray] = None
) -> list[Move]:
    """
    Ranked, truncated candidate list for the side to move.

    Args:
        state: Position to generate moves for
        previous_best: Move to try first if it is a candidate
        history_table: (size, size) cutoff-strength table, or None

    Returns:
        Candidates best first; ``[center]`` on an empty board
    """
    candidates = generate_candidates(state)

    # If no candidates (e.g. empty board), play center
    if not candidates:
        return [Move(state.center, state.center)]

    def score(move: Move) -> int:
        return quick_evaluate_move(state, move, history_table)

    if previous_best in candidates:
        rest = [move for move in candidates if move != previous_best]
        rest.sort(key=score, reverse=True)
        ordered = [previous_best] + rest
    else:
        ordered = sorted(candidates, key=score, reverse=True)

    return ordered[:get_max_candidates(state)]


def count_consecutive(
    state: GameState,
    x: int,
    y: int,
    dx: int,
    dy: int,
    player: int,
    max_count: int = 4
) -> int:
    """Stones of ``player`` in a row from (x, y) along (dx, dy), excluding (x, y)."""
    count = 0
    cx, cy = x + dx, y + dy
    while count < max_count and state.get_piece(cx, cy) == player:
        count += 1
        cx += dx
        cy += dy
    return count


def quick_evaluate_move(
    state: GameState,
    move: Move,
    history_table: Optional[np.ndarray] = None
) -> int:
    """
    Cheap ordering score for placing the side to move on ``move``.

    Not the static evaluator: it only looks at the neighbourhood of the move.
    Reads the state and history table, never writes them.
    """
    score = 0
    player = state.current_player
    opponent = get_opponent(player)
    center = state.center

    # 1. Centrality (Chebyshev distance)
    center_dist = max(abs(move.x - center), abs(move.y - center))
    score += (center - center_dist) * 10

    # 2. Immediate connectivity
    my_adjacent = 0
    opp_adjacent = 0
    for dx, dy in ALL_DIRECTIONS:
        piece = state.get_piece(move.x + dx, move.y + dy)
        if piece == player:
            my_adjacent += 1
        elif piece == opponent:
            opp_adjacent += 1
    score += my_adjacent * 50
    score += opp_adjacent * 20

    # 3. Active zone: near the opponent's last move
    last = state.last_move
    if state.is_valid(last.x, last.y):
        if max(abs(move.x - last.x), abs(move.y - last.y)) <= 2:
            score += 500

    # 4. Longest line through the move, both sides
    max_my_line = 0
    max_opp_line = 0
    for dx, dy in MAIN_DIRECTIONS:
        my_count = 1 + count_consecutive(state, move.x, move.y, dx, dy, player) \
            + count_consecutive(state, move.x, move.y, -dx, -dy, player)
        max_my_line = max(max_my_line, my_count)

        opp_count = count_consecutive(state, move.x, move.y, dx, dy, opponent) \
            + count_consecutive(state, move.x, move.y, -dx, -dy, opponent)
        max_opp_line = max(max_opp_line, opp_count)

    if max_my_line >= 5:
        score += 100000
    elif max_my_line == 4:
        score += 10000
    elif max_my_line == 3:
        score += 1000
    elif max_my_line == 2:
        score += 100

    # Blocking
    if max_opp_line >= 4:
        score += 8000
    elif max_opp_line == 3:
        score += 800

    # 5. Capture available: NEW + OPP + OPP + OWN
    for dx, dy in ALL_DIRECTIONS:
        if (state.get_piece(move.x + dx, move.y + dy) == opponent
                and state.get_piece(move.x + 2 * dx, move.y + 2 * dy) == opponent
                and state.get_piece(move.x + 3 * dx, move.y + 3 * dy) == player):
            score += 2000
            break

    # 6. History heuristic
    if history_table is not None:
        score += int(history_table[move.x, move.y])

    return score


class MoveOrdering:
    """
    Killer-move and history tables for one root search.

    Not shared between searches: the engine builds a fresh instance per call.
    """

    def __init__(
        self,
        board_size: int,
        max_depth: int = SEARCH_CONFIG['max_search_depth'],
        killer_slots: int = SEARCH_CONFIG['killer_slots']
    ):
        """
        Args:
            board_size: Board edge length (history table shape)
            max_depth: Maximum remaining depth tracked by the killer table
            killer_slots: Killer moves remembered per depth
        """
        self.max_depth = max_depth
        self.killer_slots = killer_slots

        # Killer moves: most recent first, per remaining depth
        self.killer_moves: list[list[Move]] = [[] for _ in range(max_depth)]

        # History heuristic: [x, y] -> score (incremented by depth^2 on cutoff)
        self.history = np.zeros((board_size, board_size), dtype=np.int32)

    def reset(self):
        """Reset killer moves and history for new search."""
        self.killer_moves = [[] for _ in range(self.max_depth)]
        self.history.fill(0)

    def update_killers(self, move: Move, depth: int):
        """
        Record a move that caused a cutoff at this depth.

        Args:
            move: Cutoff move
            depth: Remaining depth at the cutoff
        """
        if depth >= self.max_depth:
            return

        killers = self.killer_moves[depth]
        if killers and killers[0] == move:
            return
        if move in killers:
            killers.remove(move)
        killers.insert(0, move)
        del killers[self.killer_slots:]

    def update_history(self, move: Move, depth: int):
        """
        Update history heuristic when a move causes a cutoff.

        Args:
            move: Cutoff move
            depth: Remaining depth at cutoff
        """
        # Increment by depth^2 (deeper cutoffs are more valuable)
        self.history[move.x, move.y] += depth * depth

    def decay_history(self):
        """Halve every history entry so recent iterations dominate."""
        self.history >>= 1

    def promote_killers(self, moves: list[Move], depth: int) -> list[Move]:
        """
        Move this depth's killers that are among ``moves`` to the front.

        Killers keep their relative order (most recent first); the remaining
        moves keep theirs.
        """
        if depth >= self.max_depth:
            return moves

        killers = [move for move in self.killer_moves[depth] if move in moves]
        if not killers:
            return moves

        return killers + [move for move in moves if move not in killers]
