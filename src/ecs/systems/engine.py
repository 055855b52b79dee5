"""Game engine: the per-game state machine driving spawn, fall, lock and clear.

The engine owns nothing itself; all state lives in components on one game
entity. Operations return result values from :mod:`ecs.events.results` and
publish the same facts on the event bus for presentation and sync systems.
None of them raise for game conditions.
"""
from __future__ import annotations

import logging
import random
import time
from typing import List, Optional, Tuple

from esper import World

from ecs.chem.matcher import MatchCandidate, find_best_match
from ecs.chem.pattern_graph import parse_graph
from ecs.components.active_piece import ActivePiece
from ecs.components.board import Board
from ecs.components.cell import Cell
from ecs.components.clear_highlight import ClearHighlight
from ecs.components.current_target import CurrentTarget
from ecs.components.game_state import GameMode, GameOverCause, GameState
from ecs.components.molecule_pool import MoleculePool
from ecs.components.pending_garbage import PendingGarbage
from ecs.components.player_identity import PlayerIdentity
from ecs.components.score import Score
from ecs.components.tick_speed import TickSpeed
from ecs.constants import (
    CLEAR_HIGHLIGHT_MS,
    MAX_GARBAGE_ROWS,
    OXYGEN_CHANCE_EARLY,
    OXYGEN_CHANCE_LATE,
    OXYGEN_SCORE_THRESHOLD,
    SOFT_DROP_STEPS,
    SPEED_BOOST_FACTOR,
)
from ecs.events.bus import (
    EVENT_GAME_OVER,
    EVENT_GAME_STARTED,
    EVENT_GARBAGE_APPLIED,
    EVENT_GRAVITY_APPLIED,
    EVENT_MATCH_CLEARED,
    EVENT_MATCH_FOUND,
    EVENT_PIECE_LOCKED,
    EVENT_PIECE_MOVED,
    EVENT_PIECE_SPAWNED,
    EVENT_SPEED_CHANGED,
    EVENT_TARGET_CHANGED,
    EventBus,
)
from ecs.events.records import PlayerSnapshot
from ecs.events.results import GameOver, Locked, Matched, Moved, Spawned, TickResult
from ecs.factories.molecules import Molecule, select_target
from ecs.systems.board_ops import GravityMove, apply_gravity, clear_cells, inject_garbage_rows, is_open
from ecs.utils.game_state import set_game_mode
from ecs.world import primary_game_entity

logger = logging.getLogger(__name__)


class GameEngine:
    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        entity: int | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        if entity is None:
            entity = primary_game_entity(world)
        if entity is None:
            raise ValueError("World has no game entity")
        self.entity = entity
        self._rng: random.Random = rng or getattr(world, "random", None) or random.Random()

    # ------------------------------------------------------------------
    # Component access
    # ------------------------------------------------------------------

    @property
    def board(self) -> Board:
        return self.world.component_for_entity(self.entity, Board)

    @property
    def state(self) -> GameState:
        return self.world.component_for_entity(self.entity, GameState)

    @property
    def speed(self) -> TickSpeed:
        return self.world.component_for_entity(self.entity, TickSpeed)

    @property
    def identity(self) -> PlayerIdentity:
        return self.world.component_for_entity(self.entity, PlayerIdentity)

    @property
    def score(self) -> int:
        return self.world.component_for_entity(self.entity, Score).value

    @property
    def target(self) -> Molecule:
        return self.world.component_for_entity(self.entity, CurrentTarget).molecule

    @property
    def active(self) -> Optional[ActivePiece]:
        return self._optional(ActivePiece)

    @property
    def highlight(self) -> Optional[ClearHighlight]:
        return self._optional(ClearHighlight)

    @property
    def pending_garbage(self) -> int:
        return self.world.component_for_entity(self.entity, PendingGarbage).rows

    @property
    def speed_ratio(self) -> float:
        return self.speed.ratio

    @property
    def mode(self) -> GameMode:
        return self.state.mode

    def _optional(self, component_type):
        try:
            return self.world.component_for_entity(self.entity, component_type)
        except KeyError:
            return None

    def _discard(self, component_type) -> None:
        if self.world.has_component(self.entity, component_type):
            self.world.remove_component(self.entity, component_type)

    def highlighted_positions(self) -> List[Tuple[int, int]]:
        highlight = self.highlight
        if highlight is None:
            return []
        return highlight.candidate.positions()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Return to a fresh idle game; dimensions, tick and pool are kept."""
        self.board.clear()
        self._discard(ActivePiece)
        self._discard(ClearHighlight)
        self.world.component_for_entity(self.entity, Score).value = 0
        self.world.component_for_entity(self.entity, PendingGarbage).rows = 0
        self.speed.reset()
        state = self.state
        state.soft_drop = False
        state.over_cause = None
        state.fall_elapsed_ms = 0.0
        state.generation += 1
        set_game_mode(self.world, self.event_bus, self.entity, GameMode.IDLE)
        self._set_target(select_target(0, None, self._custom_pool(), rng=self._rng))
        logger.debug("Game %s reset (generation %d)", self.identity.player_id, state.generation)

    def start(self) -> TickResult:
        """Reset, then begin running with a freshly selected target."""
        self.reset()
        set_game_mode(self.world, self.event_bus, self.entity, GameMode.RUNNING)
        self.event_bus.emit(EVENT_GAME_STARTED, entity=self.entity)
        matched = self.pick_new_target()
        if matched is not None:
            self._begin_clear(matched)
            return TickResult((matched,))
        return TickResult((self._respawn(),))

    def end_game(self, cause: GameOverCause) -> GameOver:
        state = self.state
        self._discard(ActivePiece)
        self._discard(ClearHighlight)
        state.soft_drop = False
        state.fall_elapsed_ms = 0.0
        state.over_cause = cause
        set_game_mode(self.world, self.event_bus, self.entity, GameMode.OVER)
        score = self.score
        logger.info("Game over for %s (%s), score %d", self.identity.player_id, cause.value, score)
        self.event_bus.emit(EVENT_GAME_OVER, entity=self.entity, cause=cause, score=score)
        return GameOver(cause=cause, score=score)

    # ------------------------------------------------------------------
    # Pieces
    # ------------------------------------------------------------------

    def random_atom(self) -> Cell:
        chance = OXYGEN_CHANCE_LATE if self.score >= OXYGEN_SCORE_THRESHOLD else OXYGEN_CHANCE_EARLY
        return Cell.OXYGEN if self._rng.random() < chance else Cell.CARBON

    def spawn(self, element: Cell | None = None) -> Optional[Spawned]:
        """Place a new atom at the top centre; ``None`` when that cell is taken."""
        board = self.board
        x, y = board.cols // 2, 0
        if not board.is_empty(x, y):
            return None
        element = element or self.random_atom()
        self.world.add_component(self.entity, ActivePiece(x=x, y=y, element=element))
        self.event_bus.emit(EVENT_PIECE_SPAWNED, entity=self.entity, x=x, y=y, element=element)
        return Spawned(x=x, y=y, element=element)

    def _respawn(self) -> Spawned | GameOver:
        spawned = self.spawn()
        if spawned is None:
            return self.end_game(GameOverCause.SPAWN_BLOCKED)
        return spawned

    def can_move(self, dx: int, dy: int) -> bool:
        piece = self.active
        if piece is None:
            return False
        return is_open(self.board, piece.x + dx, piece.y + dy)

    def move_horizontal(self, dx: int) -> Optional[Moved]:
        piece = self.active
        if piece is None or self.mode != GameMode.RUNNING or dx == 0:
            return None
        step = 1 if dx > 0 else -1
        if not self.can_move(step, 0):
            return None
        piece.x += step
        self.event_bus.emit(EVENT_PIECE_MOVED, entity=self.entity, x=piece.x, y=piece.y)
        return Moved(x=piece.x, y=piece.y)

    def set_soft_drop(self, active: bool) -> bool:
        state = self.state
        if active and (state.mode != GameMode.RUNNING or self.active is None):
            return False
        state.soft_drop = bool(active)
        return True

    def lock_piece(self) -> Optional[Tuple[Locked, Optional[MatchCandidate]]]:
        """Write the active atom into the board and test the target against it."""
        piece = self.active
        if piece is None:
            return None
        self.board.set(piece.x, piece.y, piece.element)
        self._discard(ActivePiece)
        locked = Locked(x=piece.x, y=piece.y, element=piece.element)
        self.event_bus.emit(EVENT_PIECE_LOCKED, entity=self.entity, x=piece.x, y=piece.y, element=piece.element)
        return locked, self.find_target_match()

    def _resolve_lock(self, locked: Locked, candidate: Optional[MatchCandidate]) -> TickResult:
        if candidate is not None:
            matched = self._score_match(candidate, chained=False)
            self._begin_clear(matched)
            return TickResult((locked, matched))
        return TickResult((locked, self._respawn()))

    def tick(self) -> TickResult:
        """Advance the falling atom one row (two while soft-dropping)."""
        if self.mode != GameMode.RUNNING:
            return TickResult()
        steps = SOFT_DROP_STEPS if self.state.soft_drop else 1
        for _ in range(steps):
            piece = self.active
            if piece is None:
                break
            if self.can_move(0, 1):
                piece.y += 1
                continue
            outcome = self.lock_piece()
            if outcome is None:
                break
            return self._resolve_lock(*outcome)
        return TickResult()

    def hard_drop(self) -> TickResult:
        piece = self.active
        if piece is None or self.mode != GameMode.RUNNING:
            return TickResult()
        while self.can_move(0, 1):
            piece.y += 1
        outcome = self.lock_piece()
        if outcome is None:
            return TickResult()
        return self._resolve_lock(*outcome)

    # ------------------------------------------------------------------
    # Targets and clearing
    # ------------------------------------------------------------------

    def _custom_pool(self):
        return self.world.component_for_entity(self.entity, MoleculePool).custom

    def _set_target(self, molecule: Molecule) -> None:
        self.world.component_for_entity(self.entity, CurrentTarget).molecule = molecule
        self.event_bus.emit(EVENT_TARGET_CHANGED, entity=self.entity, target_name=molecule.name, pattern=molecule.pattern)

    def find_target_match(self) -> Optional[MatchCandidate]:
        return find_best_match(parse_graph(self.target.pattern), self.board)

    def _score_match(self, candidate: MatchCandidate, *, chained: bool) -> Matched:
        score = self.world.component_for_entity(self.entity, Score)
        score.value += 1
        self.boost_speed(1)
        return Matched(candidate=candidate, target=self.target, score=score.value, chained=chained)

    def pick_new_target(self) -> Optional[Matched]:
        """Swap in the next target and score it at once if the board already holds it."""
        target = select_target(self.score, self.target.name, self._custom_pool(), rng=self._rng)
        self._set_target(target)
        candidate = self.find_target_match()
        if candidate is None:
            return None
        return self._score_match(candidate, chained=True)

    def _begin_clear(self, matched: Matched) -> None:
        state = self.state
        state.soft_drop = False
        state.fall_elapsed_ms = 0.0
        self._discard(ActivePiece)
        self.world.add_component(
            self.entity,
            ClearHighlight(candidate=matched.candidate, remaining_ms=float(CLEAR_HIGHLIGHT_MS), generation=state.generation),
        )
        set_game_mode(self.world, self.event_bus, self.entity, GameMode.CLEARING)
        self.event_bus.emit(
            EVENT_MATCH_FOUND,
            entity=self.entity,
            positions=matched.candidate.positions(),
            target_name=matched.target.name,
            pattern=matched.target.pattern,
            score=matched.score,
            chained=matched.chained,
        )

    def clear_match(self, candidate: MatchCandidate) -> List[GravityMove]:
        """Empty the matched cells, then let every column settle."""
        board = self.board
        clear_cells(board, candidate.coords)
        self.event_bus.emit(EVENT_MATCH_CLEARED, entity=self.entity, positions=candidate.positions())
        moves = apply_gravity(board)
        self.event_bus.emit(EVENT_GRAVITY_APPLIED, entity=self.entity, moves=moves)
        return moves

    def finish_clear(self, generation: int | None = None) -> TickResult:
        """Complete a pending highlight: clear, retarget, then chain or resume."""
        highlight = self.highlight
        state = self.state
        if highlight is None or state.mode != GameMode.CLEARING:
            return TickResult()
        if generation is not None and generation != state.generation:
            return TickResult()
        if highlight.generation != state.generation:
            self._discard(ClearHighlight)
            return TickResult()
        self._discard(ClearHighlight)
        self.clear_match(highlight.candidate)
        chained = self.pick_new_target()
        if chained is not None:
            logger.debug("Chained clear for %s: %s", self.identity.player_id, chained.target.name)
            self._begin_clear(chained)
            return TickResult((chained,))
        set_game_mode(self.world, self.event_bus, self.entity, GameMode.RUNNING)
        return TickResult((self._respawn(),))

    # ------------------------------------------------------------------
    # Speed and garbage
    # ------------------------------------------------------------------

    def boost_speed(self, cleared_count: int) -> bool:
        if cleared_count <= 0:
            return False
        speed = self.speed
        floor_ms = min(speed.min_ms, speed.base_ms)
        next_ms = max(floor_ms, speed.current_ms * (SPEED_BOOST_FACTOR ** cleared_count))
        next_ms = min(next_ms, speed.current_ms)
        if next_ms == speed.current_ms:
            return False
        speed.current_ms = next_ms
        self.event_bus.emit(EVENT_SPEED_CHANGED, entity=self.entity, current_ms=next_ms, ratio=speed.ratio)
        return True

    def add_garbage_rows(self, count: int) -> bool:
        """Raise the stack by up to ``MAX_GARBAGE_ROWS`` garbage rows.

        Returns False, leaving the board untouched, when the rows pushed off
        the top are not empty or when the falling atom, clamped to row 0,
        would land on an occupied cell.
        """
        capped = min(count, MAX_GARBAGE_ROWS)
        if capped <= 0:
            return True
        board = self.board
        piece = self.active
        if piece is not None and piece.y < capped:
            # Row ``capped`` becomes row 0 after the shift.
            if capped >= board.rows or not board.is_empty(piece.x, capped):
                return False
        gaps = inject_garbage_rows(board, capped, rng=self._rng)
        if gaps is None:
            return False
        if piece is not None:
            piece.y = max(0, piece.y - capped)
        logger.debug("Applied %d garbage rows to %s", capped, self.identity.player_id)
        self.event_bus.emit(EVENT_GARBAGE_APPLIED, entity=self.entity, rows=capped, gaps=gaps)
        return True

    def queue_garbage(self, rows: int) -> int:
        pending = self.world.component_for_entity(self.entity, PendingGarbage)
        if rows > 0:
            pending.rows = min(MAX_GARBAGE_ROWS, pending.rows + rows)
        return pending.rows

    def apply_pending_garbage(self) -> Optional[GameOver]:
        """Inject all queued rows in one call; overflow ends the game."""
        pending = self.world.component_for_entity(self.entity, PendingGarbage)
        if pending.rows <= 0 or self.mode != GameMode.RUNNING:
            return None
        rows = pending.rows
        pending.rows = 0
        if not self.add_garbage_rows(rows):
            logger.info("Garbage overflow for %s (%d rows)", self.identity.player_id, rows)
            return self.end_game(GameOverCause.GARBAGE_OVERFLOW)
        return None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def snapshot(self, status: str | None = None, *, now: float | None = None) -> PlayerSnapshot:
        identity = self.identity
        target = self.target
        if status is None:
            status = "dead" if self.mode == GameMode.OVER else "playing"
        return PlayerSnapshot(
            player_id=identity.player_id,
            username=identity.username,
            avatar=identity.avatar,
            board=self.board.row_strings(),
            score=self.score,
            status=status,
            target_name=target.name,
            target_pattern=target.pattern,
            speed_ratio=self.speed_ratio,
            last_update=time.time() if now is None else now,
        )
