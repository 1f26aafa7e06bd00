"""
Static position evaluation for alpha-beta leaves.

Scores are from PLAYER2's (the AI's) point of view: positive favours PLAYER2.
A non-terminal score is ``evaluate_for_player(PLAYER2) - evaluate_for_player(PLAYER1)``,
where each side's score combines:

- Line patterns: every run is analysed once per axis from its first stone,
  scanning a 6-cell window (one gap allowed). Runs that cannot grow to five
  before hitting an opposing stone or the edge score nothing.
- Threat combinations: open/closed fours, double open threes, four+three forks.
- Capture opportunities for the side, minus the opponent's against it.
- Captures already made, on a steep ramp towards the 10-capture win.
"""

from dataclasses import dataclass

from ninuki_engine.game.game_types import (
    ALL_DIRECTIONS,
    EMPTY,
    MAIN_DIRECTIONS,
    PLAYER1,
    PLAYER2,
    WIN_CAPTURES,
    GameState,
    Move,
    get_opponent,
)
from ninuki_engine.game.rule_engine import check_win

# Score constants
WIN = 600000
FOUR_OPEN = 50000
FOUR_HALF = 25000
THREE_OPEN = 10000
THREE_HALF = 1500
TWO_OPEN = 100

CAPTURE_WIN = 500000

# Threat/combination bonuses
OPEN_FOUR_THREAT = 90000
HALF_FOUR_THREAT = 40000
DOUBLE_OPEN_THREE = 50000
FOUR_THREE_FORK = 80000
DOUBLE_FOUR_FORK = 70000
CAPTURE_PRESSURE_THREE = 60000

WINDOW = 6


@dataclass
class PatternInfo:
    consecutive_count: int
    total_pieces: int
    free_ends: int
    has_gaps: bool
    max_reachable: int

    @property
    def is_dead(self) -> bool:
        return self.max_reachable < 5 and self.consecutive_count < 5


@dataclass
class PatternCounts:
    four_open: int = 0
    four_half: int = 0
    three_open: int = 0
    three_half: int = 0
    two_open: int = 0


class _BoardView:
    """Plain-list snapshot of a board for tight scanning loops."""

    __slots__ = ('cells', 'size')

    def __init__(self, state: GameState):
        self.cells = state.board.tolist()
        self.size = state.size

    def get(self, x: int, y: int) -> int:
        if 0 <= x < self.size and 0 <= y < self.size:
            return self.cells[x][y]
        return -1

    def stones(self, player: int):
        for x, row in enumerate(self.cells):
            for y, piece in enumerate(row):
                if piece == player:
                    yield x, y


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def evaluate(state: GameState, max_depth: int, current_depth: int) -> int:
    """
    Score a position reached ``current_depth`` plies into a ``max_depth`` search.

    Wins are ``WIN`` plus the remaining mate distance, so a win reached at a
    shallower ply scores strictly higher than a deeper one (and losses
    mirror that).
    """
    mate_distance = max_depth - current_depth

    if check_win(state, PLAYER2):
        return WIN + mate_distance
    if check_win(state, PLAYER1):
        return -WIN - mate_distance

    return evaluate_for_player(state, PLAYER2) - evaluate_for_player(state, PLAYER1)


def evaluate_simple(state: GameState) -> int:
    """Depth-independent evaluation (terminal positions score exactly ±WIN)."""
    if check_win(state, PLAYER2):
        return WIN
    if check_win(state, PLAYER1):
        return -WIN

    return evaluate_for_player(state, PLAYER2) - evaluate_for_player(state, PLAYER1)


def evaluate_for_player(state: GameState, player: int) -> int:
    view = _BoardView(state)
    counts = _count_patterns(view, player)

    score = evaluate_threats_and_combinations(state, player, counts)
    score += _analyze_position(view, state, player)
    return score


# ---------------------------------------------------------------------------
# Pattern analysis
# ---------------------------------------------------------------------------

def _is_line_start(view: _BoardView, x: int, y: int, dx: int, dy: int, player: int) -> bool:
    return view.get(x - dx, y - dy) != player


def _analyze_line(view: _BoardView, start_x: int, start_y: int, dx: int, dy: int, player: int) -> PatternInfo:
    opponent = get_opponent(player)
    consecutive = 0
    total_pieces = 0
    gap_count = 0
    in_gap = False
    total_span = WINDOW

    for i in range(WINDOW):
        piece = view.get(start_x + i * dx, start_y + i * dy)

        if piece == -1 or piece == opponent:
            total_span = i
            break

        if piece == player:
            if not in_gap and total_pieces == consecutive:
                consecutive += 1
            total_pieces += 1
            in_gap = False
        else:
            in_gap = True
            gap_count += 1

    free_ends = 0
    if view.get(start_x - dx, start_y - dy) == EMPTY:
        free_ends += 1
    end_x, end_y = start_x + total_span * dx, start_y + total_span * dy
    if view.get(end_x, end_y) == EMPTY:
        free_ends += 1

    # Cells this line could still grow into, up to the first opposing stone
    max_reachable = total_pieces

    bx, by = start_x - dx, start_y - dy
    while view.get(bx, by) not in (-1, opponent):
        max_reachable += 1
        bx -= dx
        by -= dy

    fx, fy = end_x, end_y
    while view.get(fx, fy) not in (-1, opponent):
        max_reachable += 1
        fx += dx
        fy += dy

    return PatternInfo(
        consecutive_count=consecutive,
        total_pieces=total_pieces,
        free_ends=free_ends,
        has_gaps=gap_count > 0,
        max_reachable=max_reachable,
    )


def analyze_line(state: GameState, start: Move, dx: int, dy: int, player: int) -> PatternInfo:
    """PatternInfo for the line anchored at ``start`` along (dx, dy)."""
    return _analyze_line(_BoardView(state), start.x, start.y, dx, dy, player)


def _is_four(pattern: PatternInfo) -> bool:
    tp = pattern.total_pieces
    return tp >= 4 and (pattern.consecutive_count == 4 or (tp == 4 and pattern.has_gaps))


def _is_three(pattern: PatternInfo) -> bool:
    return pattern.total_pieces == 3 and (pattern.consecutive_count == 3 or pattern.has_gaps)


def pattern_to_score(pattern: PatternInfo) -> int:
    if pattern.is_dead:
        return 0

    if pattern.consecutive_count >= 5:
        return WIN

    fe = pattern.free_ends

    if _is_four(pattern):
        if fe == 2:
            return FOUR_OPEN
        if fe == 1:
            return FOUR_HALF

    if _is_three(pattern):
        if fe == 2:
            return THREE_OPEN
        if fe == 1:
            return THREE_HALF

    if pattern.total_pieces == 2 and fe == 2:
        return TWO_OPEN

    return 0


def _count_patterns(view: _BoardView, player: int) -> PatternCounts:
    counts = PatternCounts()

    for x, y in view.stones(player):
        for dx, dy in MAIN_DIRECTIONS:
            if not _is_line_start(view, x, y, dx, dy, player):
                continue

            pattern = _analyze_line(view, x, y, dx, dy, player)
            if pattern.is_dead:
                continue

            fe = pattern.free_ends
            if _is_four(pattern):
                if fe == 2:
                    counts.four_open += 1
                elif fe == 1:
                    counts.four_half += 1

            if _is_three(pattern):
                if fe == 2:
                    counts.three_open += 1
                elif fe == 1:
                    counts.three_half += 1

            if pattern.total_pieces == 2 and fe == 2:
                counts.two_open += 1

    return counts


def count_all_patterns(state: GameState, player: int) -> PatternCounts:
    return _count_patterns(_BoardView(state), player)


def has_winning_threats(state: GameState, player: int) -> bool:
    """An open or closed four, or two open threes."""
    counts = count_all_patterns(state, player)
    return counts.four_open > 0 or counts.four_half > 0 or counts.three_open >= 2


def evaluate_threats_and_combinations(state: GameState, player: int, counts: PatternCounts) -> int:
    score = 0

    if counts.four_open > 0:
        score += OPEN_FOUR_THREAT
    if counts.four_half > 0:
        score += HALF_FOUR_THREAT
    if counts.three_open >= 2:
        score += DOUBLE_OPEN_THREE

    # Combinations
    if counts.four_half >= 1 and counts.three_open >= 1:
        score += FOUR_THREE_FORK
    if counts.four_half >= 2:
        score += DOUBLE_FOUR_FORK

    if state.captures_of(player) >= WIN_CAPTURES - 2 and counts.three_open >= 1:
        score += CAPTURE_PRESSURE_THREE

    return score


# ---------------------------------------------------------------------------
# Position analysis: patterns + captures
# ---------------------------------------------------------------------------

def _analyze_position(view: _BoardView, state: GameState, player: int) -> int:
    total_score = 0
    opponent = get_opponent(player)

    # Part 1: patterns, each run scored once per axis
    evaluated = set()
    for x, y in view.stones(player):
        for dir_idx, (dx, dy) in enumerate(MAIN_DIRECTIONS):
            if (x, y, dir_idx) in evaluated:
                continue
            if not _is_line_start(view, x, y, dx, dy, player):
                continue

            pattern = _analyze_line(view, x, y, dx, dy, player)
            total_score += pattern_to_score(pattern)

            for i in range(pattern.consecutive_count):
                evaluated.add((x + i * dx, y + i * dy, dir_idx))

    # Part 2: capture opportunities, ours minus theirs
    my_captures = state.captures_of(player)
    for _, captured in find_capture_opportunities(view, player):
        total_score += _evaluate_capture_context(view, state, player, captured, my_captures + 1)

    opp_captures = state.captures_of(opponent)
    for _, captured in find_capture_opportunities(view, opponent):
        total_score -= _evaluate_capture_context(view, state, opponent, captured, opp_captures + 1)

    # Part 3: captures already made
    total_score += _own_capture_score(my_captures)
    total_score -= _opponent_capture_score(opp_captures)

    return total_score


def _own_capture_score(captures: int) -> int:
    if captures >= 9:
        return 300000
    if captures >= 8:
        return 200000
    if captures >= 6:
        return 15000
    if captures >= 4:
        return 6000
    return captures * 500


def _opponent_capture_score(captures: int) -> int:
    # Weighted above our own ramp: defending the capture win comes first
    if captures >= 9:
        return 400000
    if captures >= 8:
        return 300000
    if captures >= 6:
        return 20000
    if captures >= 4:
        return 8000
    return captures * 800


def find_capture_opportunities(view: _BoardView, player: int) -> list[tuple[Move, list[Move]]]:
    """
    Every opponent pair ``player`` could capture next move.

    Each pair is visited once per axis from its first stone and both
    bracket orientations are checked, which covers all 8 directions.
    Each pair therefore contributes once; scanning 8 directions from every
    stone would list it twice and double the capture term.

    Returns:
        List of (capturing cell, [captured stone, captured stone])
    """
    opponent = get_opponent(player)
    opportunities = []

    for x, y in view.stones(opponent):
        for dx, dy in MAIN_DIRECTIONS:
            nx, ny = x + dx, y + dy
            if view.get(nx, ny) != opponent:
                continue

            before = (x - dx, y - dy)
            after = (nx + dx, ny + dy)
            before_piece = view.get(*before)
            after_piece = view.get(*after)
            captured = [Move(x, y), Move(nx, ny)]

            if before_piece == player and after_piece == EMPTY:
                opportunities.append((Move(*after), captured))
            elif before_piece == EMPTY and after_piece == player:
                opportunities.append((Move(*before), captured))

    return opportunities


def _evaluate_capture_context(
    view: _BoardView,
    state: GameState,
    player: int,
    captured: list[Move],
    new_capture_count: int
) -> int:
    opponent = get_opponent(player)

    # 1. Proximity to capture victory
    if new_capture_count >= WIN_CAPTURES:
        return CAPTURE_WIN
    if new_capture_count == 9:
        value = 100000
    elif new_capture_count >= 8:
        value = 50000
    elif new_capture_count >= 6:
        value = 15000
    else:
        value = new_capture_count * 2000

    # 2. Disruption of opponent lines running through the captured stones
    for stone in captured:
        for dx, dy in MAIN_DIRECTIONS:
            line = _count_through(view, stone, dx, dy, opponent)
            if line >= 4:
                value += 30000
            elif line == 3:
                value += 12000
            elif line == 2:
                value += 3000

    # 3. Captured cells next to our own stones
    for stone in captured:
        for dx, dy in ALL_DIRECTIONS:
            if view.get(stone.x + dx, stone.y + dy) == player:
                value += 1500

    # 4. Opponent close to a capture win
    if state.captures_of(opponent) >= WIN_CAPTURES - 2:
        value += 25000

    return value


def _count_through(view: _BoardView, pos: Move, dx: int, dy: int, player: int) -> int:
    """Stones of ``player`` on both sides of ``pos`` along the axis, excluding ``pos``."""
    count = 0

    x, y = pos.x - dx, pos.y - dy
    while view.get(x, y) == player:
        count += 1
        x -= dx
        y -= dy

    x, y = pos.x + dx, pos.y + dy
    while view.get(x, y) == player:
        count += 1
        x += dx
        y += dy

    return count
