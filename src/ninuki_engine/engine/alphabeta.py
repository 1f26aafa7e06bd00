"""
Alpha-beta minimax search engine for Ninuki-renju.

Key features:
- Minimax with alpha-beta pruning, PLAYER2 (the AI) maximizing
- Iterative deepening (search depth 1, then 2, then 3... up to max_depth)
- Transposition table integration (Zobrist keys maintained by the rule engine)
- Move ordering: previous best / TT move, killer moves, history heuristic
- Late move reduction for late candidates at depth >= 3
- Optional time budget, checked cooperatively at every node
- Mate-distance scoring so shorter wins are preferred


Algorithm overview:

    def minimax(state, depth, alpha, beta, maximizing):
        if depth == 0:
            return static_eval(state)

        # Transposition table lookup
        if tt_entry := tt.probe(state, depth, alpha, beta):
            return tt_entry.score

        best = -inf if maximizing else +inf
        for move in ordered_moves:
            child = apply_move(copy(state), move)
            if child wins:
                return mate score
            score = minimax(child, depth-1, alpha, beta, not maximizing)
            update best, alpha / beta
            if alpha >= beta:
                record killer + history
                break   # Cutoff

        # Store in TT
        tt.store(state, depth, best, bound_type, best_move)
        return best
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from ninuki_engine.config import SEARCH_CONFIG, TT_CONFIG
from ninuki_engine.engine.evaluator import WIN, evaluate
from ninuki_engine.engine.move_ordering import MoveOrdering, generate_ordered_moves
from ninuki_engine.engine.transposition_table import BoundType, TranspositionTable
from ninuki_engine.engine.zobrist import get_zobrist_hasher
from ninuki_engine.game.game_types import EMPTY, INVALID_MOVE, PLAYER2, GameState, Move
from ninuki_engine.game.rule_engine import apply_move, is_legal_move

logger = logging.getLogger(__name__)


SCORE_INF = 1_000_000_000
NEAR_MATE = SEARCH_CONFIG['near_mate_threshold']


@dataclass
class SearchResult:
    """Result of alpha-beta search."""
    best_move: Move = INVALID_MOVE
    score: int = 0
    depth_searched: int = 0
    nodes_evaluated: int = 0
    cache_hits: int = 0
    cache_hit_rate: float = 0.0
    time_ms: int = 0
    principal_variation: list[Move] = field(default_factory=list)
    tt_stats: dict = field(default_factory=dict)


class SearchContext:
    """
    Mutable state owned by exactly one root search.

    Holds the killer/history tables, node counters and the deadline. Built
    fresh for every call to ``AlphaBetaEngine.search`` unless the caller
    passes one in.
    """

    def __init__(self, board_size: int, time_limit_ms: int = 0):
        self.ordering = MoveOrdering(board_size)
        self.max_depth = 0
        self.previous_best = INVALID_MOVE
        self.nodes_evaluated = 0
        self.cache_hits = 0
        self.start_ms = time.time() * 1000
        self.time_limit_ms = time_limit_ms
        self.stopped = False

    def reset_counters(self):
        self.nodes_evaluated = 0
        self.cache_hits = 0

    def time_up(self) -> bool:
        """Check if time limit exceeded."""
        if self.time_limit_ms <= 0:
            return False

        elapsed_ms = time.time() * 1000 - self.start_ms
        return elapsed_ms >= self.time_limit_ms

    def elapsed_ms(self) -> int:
        return int(time.time() * 1000 - self.start_ms)


class AlphaBetaEngine:
    """
    Alpha-beta minimax search engine with iterative deepening.

    The transposition table lives as long as the engine and is shared by
    consecutive searches; killer moves and history are per search.
    """

    def __init__(
        self,
        tt_size_log2: int = TT_CONFIG['size_log2'],
        use_transposition_table: bool = True,
        use_killer_moves: bool = True,
        use_history_heuristic: bool = True,
        use_lmr: bool = True
    ):
        """
        Initialize alpha-beta engine.

        Args:
            tt_size_log2: Transposition table holds 2**tt_size_log2 entries
            use_transposition_table: Probe and store the transposition table
            use_killer_moves: Enable killer move heuristic
            use_history_heuristic: Enable history heuristic
            use_lmr: Enable late move reduction
        """
        self.tt = TranspositionTable(size_log2=tt_size_log2)

        self.use_transposition_table = use_transposition_table
        self.use_killer_moves = use_killer_moves
        self.use_history_heuristic = use_history_heuristic
        self.use_lmr = use_lmr

        self.last_result: Optional[SearchResult] = None

    def search(
        self,
        state: GameState,
        max_depth: Optional[int] = None,
        time_limit_ms: int = 0,
        context: Optional[SearchContext] = None
    ) -> SearchResult:
        """
        Main search entry point with iterative deepening.

        Strategy:
        - Return an immediately winning move without searching
        - Search depth 1, then 2, then 3... up to max_depth
        - Always keep best move from last completed depth
        - Stop early once a forced win or loss is proven

        Args:
            state: Position to search; not modified
            max_depth: Deepest iteration (defaults to the game-phase depth)
            time_limit_ms: Time budget in milliseconds (0 = unlimited)
            context: Caller-held context to search with; its own time limit
                applies and its killer/history tables remain readable afterwards

        Returns:
            SearchResult with best move, score, statistics
        """
        if max_depth is None:
            max_depth = self.get_depth_for_game_phase(state)
        max_depth = max(1, max_depth)

        root = state.copy()
        root.zobrist_hash = get_zobrist_hasher(root.size).compute_full_hash(root)

        ctx = context if context is not None else SearchContext(root.size, time_limit_ms)
        result = SearchResult()

        # Empty board: nothing to search, take the center
        if not root.has_stones():
            result.best_move = Move(root.center, root.center)
            result.tt_stats = self.tt.get_stats()
            self.last_result = result
            return result

        # Pre-check: immediate victory
        winning_move = self._find_immediate_win(root, ctx)
        if winning_move is not None:
            logger.info("Immediate win at %s", tuple(winning_move))
            result.best_move = winning_move
            result.score = WIN if root.current_player == PLAYER2 else -WIN
            result.depth_searched = 1
            result.principal_variation = [winning_move]
            result.time_ms = ctx.elapsed_ms()
            result.tt_stats = self.tt.get_stats()
            self.last_result = result
            return result

        maximizing = root.current_player == PLAYER2
        best_move = INVALID_MOVE

        # Iterative deepening
        for depth in range(1, max_depth + 1):
            ctx.reset_counters()
            ctx.max_depth = depth
            self.tt.new_search()

            score, current_best = self.minimax(
                ctx, root, depth, -SCORE_INF + 1, SCORE_INF - 1, maximizing
            )

            if ctx.stopped:
                # Interrupted iteration: keep the last completed depth
                if not best_move.is_valid(root.size) and current_best.is_valid(root.size):
                    best_move = current_best
                    result.best_move = best_move
                logger.info("Time limit reached during depth %d", depth)
                break

            if current_best.is_valid(root.size):
                best_move = current_best
                ctx.previous_best = current_best

            result.best_move = best_move
            result.score = score
            result.depth_searched = depth
            result.nodes_evaluated = ctx.nodes_evaluated
            result.cache_hits = ctx.cache_hits

            logger.debug(
                "depth=%d score=%d move=%s nodes=%d cache_hits=%d",
                depth, score, tuple(best_move), ctx.nodes_evaluated, ctx.cache_hits
            )

            # Stop if we found a forced win/loss
            if abs(score) > NEAR_MATE:
                break

            # Age history table between iterations
            ctx.ordering.decay_history()

        if not result.best_move.is_valid(root.size):
            result.best_move = self.fallback_move(root)

        if result.nodes_evaluated > 0:
            result.cache_hit_rate = result.cache_hits / result.nodes_evaluated
        result.time_ms = ctx.elapsed_ms()
        result.principal_variation = self._extract_pv(root, result.depth_searched)
        result.tt_stats = self.tt.get_stats()

        self.last_result = result
        return result

    def search_fixed_depth(self, state: GameState, depth: int) -> tuple[int, Move]:
        """
        Single full-window minimax at exactly ``depth`` with a fresh context.

        No pre-check and no iterative deepening.

        Returns:
            (score, best_move)
        """
        root = state.copy()
        root.zobrist_hash = get_zobrist_hasher(root.size).compute_full_hash(root)

        ctx = SearchContext(root.size)
        ctx.max_depth = depth
        self.tt.new_search()

        return self.minimax(
            ctx, root, depth, -SCORE_INF + 1, SCORE_INF - 1, root.current_player == PLAYER2
        )

    def minimax(
        self,
        ctx: SearchContext,
        state: GameState,
        depth: int,
        alpha: int,
        beta: int,
        maximizing: bool
    ) -> tuple[int, Move]:
        """
        Alpha-beta minimax search.

        Args:
            ctx: Per-search context (killers, history, counters, deadline)
            state: Position; never modified (children are copies)
            depth: Remaining depth
            alpha: Alpha bound
            beta: Beta bound
            maximizing: True when PLAYER2 is to move

        Returns:
            (score from PLAYER2's perspective, best move or INVALID_MOVE)
        """
        ctx.nodes_evaluated += 1

        if ctx.time_up():
            ctx.stopped = True
            return 0, INVALID_MOVE

        current_depth = ctx.max_depth - depth

        # Leaf node: evaluate
        if depth <= 0:
            return evaluate(state, ctx.max_depth, current_depth), INVALID_MOVE

        # Probe transposition table
        tt_key = state.zobrist_hash
        tt_move = INVALID_MOVE
        if self.use_transposition_table:
            cached_score, tt_move = self.tt.probe(tt_key, depth, alpha, beta)
            if cached_score is not None:
                ctx.cache_hits += 1
                return cached_score, tt_move

        # Get move ordering
        seed = tt_move if tt_move.is_valid(state.size) else ctx.previous_best
        history = ctx.ordering.history if self.use_history_heuristic else None
        moves = generate_ordered_moves(state, seed, history)
        if self.use_killer_moves:
            moves = ctx.ordering.promote_killers(moves, depth)

        original_alpha = alpha
        original_beta = beta
        best_score = -SCORE_INF + 1 if maximizing else SCORE_INF - 1
        best_move = INVALID_MOVE
        move_index = 0
        any_legal = False

        for move in moves:
            child = state.copy()
            move_result = apply_move(child, move)
            if not move_result.success:
                continue
            any_legal = True

            if move_result.creates_win:
                # The winning position sits one ply below this node
                mate = WIN + depth - 1
                win_score = mate if maximizing else -mate
                if self.use_transposition_table:
                    self.tt.store(tt_key, depth, win_score, BoundType.EXACT, move)
                return win_score, move

            score = self._search_child(ctx, child, depth, alpha, beta, maximizing, move_index)
            if ctx.stopped:
                return score, best_move

            if maximizing:
                if score > best_score:
                    best_score = score
                    best_move = move
                alpha = max(alpha, best_score)
            else:
                if score < best_score:
                    best_score = score
                    best_move = move
                beta = min(beta, best_score)

            if alpha >= beta:
                if self.use_killer_moves:
                    ctx.ordering.update_killers(move, depth)
                if self.use_history_heuristic:
                    ctx.ordering.update_history(move, depth)
                break

            move_index += 1

        if not any_legal:
            return evaluate(state, ctx.max_depth, current_depth), INVALID_MOVE

        # Determine bound type for TT
        if best_score <= original_alpha:
            bound = BoundType.UPPER  # All moves failed low
        elif best_score >= original_beta:
            bound = BoundType.LOWER  # We failed high
        else:
            bound = BoundType.EXACT  # PV node

        if self.use_transposition_table:
            self.tt.store(tt_key, depth, best_score, bound, best_move)

        return best_score, best_move

    def _search_child(
        self,
        ctx: SearchContext,
        child: GameState,
        depth: int,
        alpha: int,
        beta: int,
        maximizing: bool,
        move_index: int
    ) -> int:
        """Search one child, first at reduced depth with a null window when LMR applies."""
        use_lmr = (
            self.use_lmr
            and move_index >= SEARCH_CONFIG['lmr_min_move_index']
            and depth >= SEARCH_CONFIG['lmr_min_depth']
        )

        if use_lmr:
            reduced = depth - SEARCH_CONFIG['lmr_reduction']
            if maximizing:
                score, _ = self.minimax(ctx, child, reduced, alpha, alpha + 1, False)
                promising = score > alpha
            else:
                score, _ = self.minimax(ctx, child, reduced, beta - 1, beta, True)
                promising = score < beta

            if not promising or ctx.stopped:
                return score

        score, _ = self.minimax(ctx, child, depth - 1, alpha, beta, not maximizing)
        return score

    def _find_immediate_win(self, state: GameState, ctx: SearchContext) -> Optional[Move]:
        history = ctx.ordering.history if self.use_history_heuristic else None
        for move in generate_ordered_moves(state, INVALID_MOVE, history):
            child = state.copy()
            move_result = apply_move(child, move)
            if move_result.success and move_result.creates_win:
                return move
        return None

    def _extract_pv(self, state: GameState, max_length: int) -> list[Move]:
        """Follow stored best moves from the root through the transposition table."""
        pv = []
        current = state.copy()
        seen = set()

        while len(pv) < max_length and current.zobrist_hash not in seen:
            seen.add(current.zobrist_hash)
            move = self.tt.get_best_move(current.zobrist_hash)
            if not move.is_valid(current.size):
                break
            move_result = apply_move(current, move)
            if not move_result.success:
                break
            pv.append(move)
            if move_result.creates_win:
                break

        return pv

    @staticmethod
    def fallback_move(state: GameState) -> Move:
        """Board center if playable, else the first legal empty cell."""
        center = Move(state.center, state.center)
        if is_legal_move(state, center):
            return center

        for x in range(state.size):
            for y in range(state.size):
                if state.board[x, y] == EMPTY and is_legal_move(state, Move(x, y)):
                    return Move(x, y)

        return INVALID_MOVE

    @staticmethod
    def get_depth_for_game_phase(state: GameState) -> int:
        """Shallower in the opening, deeper as the board fills."""
        for phase in SEARCH_CONFIG['phase_depths']:
            if phase['until_turn'] is None or state.turn_count <= phase['until_turn']:
                return phase['depth']
        return SEARCH_CONFIG['default_max_depth']

    def clear_tt(self):
        """Clear transposition table."""
        self.tt.clear()

    def get_stats(self) -> dict:
        """Get search statistics."""
        last = self.last_result
        return {
            'nodes_evaluated': last.nodes_evaluated if last else 0,
            'cache_hits': last.cache_hits if last else 0,
            'cache_hit_rate': last.cache_hit_rate if last else 0.0,
            'tt_stats': self.tt.get_stats(),
            'tt_fill_rate': self.tt.get_fill_rate(),
        }
