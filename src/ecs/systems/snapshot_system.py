import logging
import time
from typing import Callable

from ecs.events.bus import (
    EventBus,
    EVENT_GAME_OVER,
    EVENT_GAME_STARTED,
    EVENT_GARBAGE_APPLIED,
    EVENT_GRAVITY_APPLIED,
    EVENT_PIECE_LOCKED,
    EVENT_PIECE_SPAWNED,
    EVENT_SNAPSHOT_PUBLISHED,
    EVENT_TARGET_CHANGED,
)
from ecs.events.records import PlayerSnapshot
from ecs.events.shared_state import SharedStateBus, player_key
from ecs.systems.engine import GameEngine

logger = logging.getLogger(__name__)

_PUBLISH_ON = (
    EVENT_GAME_STARTED,
    EVENT_PIECE_SPAWNED,
    EVENT_PIECE_LOCKED,
    EVENT_GRAVITY_APPLIED,
    EVENT_GARBAGE_APPLIED,
    EVENT_TARGET_CHANGED,
    EVENT_GAME_OVER,
)


class SnapshotSystem:
    """Publishes this player's board and status under ``player.<id>``."""

    def __init__(
        self,
        world,
        event_bus: EventBus,
        shared_state: SharedStateBus,
        engine: GameEngine,
        *,
        clock: Callable[[], float] = time.time,
    ):
        self.world = world
        self.event_bus = event_bus
        self.shared_state = shared_state
        self.engine = engine
        self._clock = clock
        for name in _PUBLISH_ON:
            self.event_bus.subscribe(name, self.on_state_changed)

    def on_state_changed(self, sender, **kwargs):
        if kwargs.get('entity') != self.engine.entity:
            return
        self.publish()

    def publish(self, status: str | None = None) -> PlayerSnapshot:
        snapshot = self.engine.snapshot(status, now=self._clock())
        self.shared_state.set(player_key(snapshot.player_id), snapshot)
        self.event_bus.emit(EVENT_SNAPSHOT_PUBLISHED, entity=self.engine.entity, snapshot=snapshot)
        return snapshot

    def leave(self) -> None:
        """Mark this player as gone so opponents stop targeting it."""
        self.publish("left")
        logger.info("Player %s left", self.engine.identity.player_id)
