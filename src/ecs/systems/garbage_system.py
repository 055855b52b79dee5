"""Garbage channel between game instances.

Outgoing attacks are appended to the shared ``garbage`` queue as immutable
:class:`GarbageEvent` records; each recipient consumes the events addressed to
it exactly once and prunes them from the queue.
"""
from __future__ import annotations

import logging
import time
import uuid
from typing import Callable, List, Set, Tuple

from esper import World

from ecs.chem.pattern_graph import atom_count
from ecs.events.bus import EVENT_GARBAGE_SENT, EVENT_MATCH_FOUND, EventBus
from ecs.events.records import GarbageEvent, PlayerSnapshot
from ecs.events.shared_state import GARBAGE_KEY, PLAYER_PREFIX, SharedStateBus
from ecs.systems.engine import GameEngine

logger = logging.getLogger(__name__)


def garbage_rows_for(pattern: str) -> int:
    """Rows an opponent receives when ``pattern`` is cleared."""
    return max(1, atom_count(pattern) // 3)


class GarbageSystem:
    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        shared_state: SharedStateBus,
        engine: GameEngine,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.shared_state = shared_state
        self.engine = engine
        self._clock = clock
        self._processed_ids: Set[str] = set()
        self.event_bus.subscribe(EVENT_MATCH_FOUND, self.on_match_found)

    @property
    def player_id(self) -> str:
        return self.engine.identity.player_id

    def on_match_found(self, sender, **kwargs):
        if kwargs.get('entity') != self.engine.entity:
            return
        pattern = kwargs.get('pattern')
        if not pattern:
            return
        rows = garbage_rows_for(pattern)
        for opponent in self.opponents():
            self.send_garbage(opponent, rows)

    def opponents(self) -> List[str]:
        """Other players whose last published snapshot says they are still playing."""
        result: List[str] = []
        for key in self.shared_state.keys(PLAYER_PREFIX):
            snapshot = self.shared_state.get(key)
            if not isinstance(snapshot, PlayerSnapshot):
                continue
            if snapshot.player_id == self.player_id or snapshot.status != "playing":
                continue
            result.append(snapshot.player_id)
        return result

    def send_garbage(self, to_player_id: str, rows: int) -> GarbageEvent:
        event = GarbageEvent(
            id=f"{self.player_id}-{uuid.uuid4().hex[:12]}",
            from_player_id=self.player_id,
            to_player_id=to_player_id,
            rows=rows,
            timestamp=self._clock(),
        )
        self.shared_state.set(GARBAGE_KEY, lambda prev: tuple(prev or ()) + (event,))
        self.event_bus.emit(EVENT_GARBAGE_SENT, entity=self.engine.entity, to_player_id=to_player_id, rows=rows)
        return event

    def incoming(self) -> Tuple[GarbageEvent, ...]:
        queue = self.shared_state.get(GARBAGE_KEY) or ()
        return tuple(
            evt for evt in queue
            if evt.to_player_id == self.player_id and evt.id not in self._processed_ids
        )

    def consume(self) -> List[GarbageEvent]:
        """Take every unprocessed event addressed to this player."""
        mine = list(self.incoming())
        if not mine:
            return []
        self._processed_ids.update(evt.id for evt in mine)
        processed = self._processed_ids
        self.shared_state.set(
            GARBAGE_KEY,
            lambda prev: tuple(evt for evt in (prev or ()) if evt.id not in processed),
        )
        logger.debug("%s received %d garbage events", self.player_id, len(mine))
        return mine

    def consume_rows(self) -> int:
        return sum(evt.rows for evt in self.consume())

    def pending_rows(self) -> int:
        """Rows waiting for this player, queued on the engine or still in the channel."""
        return self.engine.pending_garbage + sum(evt.rows for evt in self.incoming())

    def reset(self) -> None:
        self._processed_ids.clear()
