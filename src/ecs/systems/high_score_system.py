"""Submits final scores to an external high-score sink."""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from ecs.events.bus import EVENT_GAME_OVER, EVENT_HIGH_SCORE_RESULT, EventBus
from ecs.events.records import HighScoreEntry
from ecs.systems.engine import GameEngine

logger = logging.getLogger(__name__)

# Returns True when the entry made the top of the table.
HighScoreSubmit = Callable[[HighScoreEntry], bool]


class HighScoreSystem:
    def __init__(
        self,
        world,
        event_bus: EventBus,
        engine: GameEngine,
        submit: Optional[HighScoreSubmit] = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.engine = engine
        self.submit = submit
        self._clock = clock
        self.event_bus.subscribe(EVENT_GAME_OVER, self.on_game_over)

    def on_game_over(self, sender, **kwargs):
        if kwargs.get('entity') != self.engine.entity:
            return
        cause = kwargs.get('cause')
        score = int(kwargs.get('score', 0))
        is_top = False
        if score > 0 and self.submit is not None:
            identity = self.engine.identity
            entry = HighScoreEntry(
                username=identity.username,
                user_id=identity.player_id,
                avatar=identity.avatar,
                score=score,
                timestamp=self._clock(),
            )
            try:
                is_top = bool(self.submit(entry))
            except Exception:
                # Sink errors are logged, never raised.
                logger.exception("High score submission failed for %s", identity.player_id)
        if is_top:
            message = f"New high score! {score}"
        else:
            base = cause.message if cause is not None else "Game Over!"
            message = f"{base} Score: {score}"
        self.event_bus.emit(EVENT_HIGH_SCORE_RESULT, entity=self.engine.entity, is_top=is_top, message=message)
