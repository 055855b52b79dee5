"""Timer-driven loop for one game.

Window ticks arrive as ``EVENT_TICK(dt)`` in seconds. While running, the
elapsed time accumulates until a full fall interval has passed, then one
engine step runs. While clearing, the same ticks count down the match
highlight instead and the fall timer stays paused.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from esper import World

from ecs.components.clear_highlight import ClearHighlight
from ecs.components.game_state import GameMode
from ecs.events.bus import EVENT_TICK, EventBus
from ecs.events.results import TickResult
from ecs.systems.engine import GameEngine

logger = logging.getLogger(__name__)

GarbageSource = Callable[[], int]


class GameLoopSystem:
    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        engine: GameEngine,
        *,
        garbage_source: Optional[GarbageSource] = None,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.engine = engine
        self.garbage_source = garbage_source
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 0.0)
        try:
            elapsed_ms = float(dt) * 1000.0
        except (TypeError, ValueError):
            return
        if elapsed_ms <= 0:
            return
        self.advance(elapsed_ms)

    def advance(self, elapsed_ms: float) -> List[TickResult]:
        """Advance timers by ``elapsed_ms``; returns the step results that fired."""
        mode = self.engine.mode
        if mode == GameMode.CLEARING:
            return self._advance_highlight(elapsed_ms)
        if mode != GameMode.RUNNING:
            return []
        state = self.engine.state
        state.fall_elapsed_ms += elapsed_ms
        results: List[TickResult] = []
        while self.engine.mode == GameMode.RUNNING:
            interval = self.engine.speed.current_ms
            if state.fall_elapsed_ms < interval:
                break
            state.fall_elapsed_ms -= interval
            results.append(self.step())
        return results

    def _advance_highlight(self, elapsed_ms: float) -> List[TickResult]:
        highlight = self.engine.highlight
        if highlight is None:
            return []
        state = self.engine.state
        if highlight.generation != state.generation:
            logger.debug("Dropping stale highlight from generation %d", highlight.generation)
            self.world.remove_component(self.engine.entity, ClearHighlight)
            return []
        highlight.remaining_ms -= elapsed_ms
        if highlight.remaining_ms > 0:
            return []
        return [self.engine.finish_clear(highlight.generation)]

    def step(self) -> TickResult:
        """One loop iteration: take in garbage, apply it, then move the piece."""
        if self.garbage_source is not None:
            rows = self.garbage_source()
            if rows > 0:
                self.engine.queue_garbage(rows)
        over = self.engine.apply_pending_garbage()
        if over is not None:
            return TickResult((over,))
        return self.engine.tick()
