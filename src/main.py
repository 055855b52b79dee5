"""Entry point for the Molecule Drop prototype.

Sets up ECS world, event bus, systems, and Arcade window.
"""
import logging

from arcade import Window, run, set_background_color, color, key

from ecs.world import create_world
from ecs.constants import (
    BOARD_HEIGHT,
    BOARD_MARGIN,
    BOARD_WIDTH,
    CELL_SIZE,
    HUD_WIDTH,
    WINDOW_TITLE,
)
from ecs.events.bus import (
    EVENT_INPUT_HARD_DROP,
    EVENT_INPUT_MOVE,
    EVENT_INPUT_RESTART,
    EVENT_INPUT_SOFT_DROP,
    EVENT_TICK,
    EventBus,
)
from ecs.events.records import HighScoreEntry
from ecs.events.shared_state import SharedStateBus
from ecs.systems.engine import GameEngine
from ecs.systems.game_loop_system import GameLoopSystem
from ecs.systems.garbage_system import GarbageSystem
from ecs.systems.high_score_system import HighScoreSystem
from ecs.systems.input import GameInputSystem
from ecs.systems.render import RenderSystem
from ecs.systems.snapshot_system import SnapshotSystem

logger = logging.getLogger(__name__)


class LocalHighScores:
    """In-process high-score table; an entry is top when it beats every earlier one."""

    def __init__(self):
        self.entries: list[HighScoreEntry] = []

    def submit(self, entry: HighScoreEntry) -> bool:
        is_top = all(entry.score > other.score for other in self.entries)
        self.entries.append(entry)
        self.entries.sort(key=lambda e: e.score, reverse=True)
        return is_top


class MoleculeDropWindow(Window):
    def __init__(self):
        width = BOARD_MARGIN * 3 + BOARD_WIDTH * CELL_SIZE + HUD_WIDTH
        height = BOARD_MARGIN * 2 + BOARD_HEIGHT * CELL_SIZE
        super().__init__(width, height, WINDOW_TITLE)
        self.set_update_rate(1/60)
        self.event_bus = EventBus()
        self.shared_state = SharedStateBus()
        self.world = create_world(self.event_bus)
        self.engine = GameEngine(self.world, self.event_bus)
        self.high_scores = LocalHighScores()

        # Game systems
        self.garbage_system = GarbageSystem(self.world, self.event_bus, self.shared_state, self.engine)
        self.game_loop_system = GameLoopSystem(
            self.world,
            self.event_bus,
            self.engine,
            garbage_source=self.garbage_system.consume_rows,
        )
        self.input_system = GameInputSystem(self.world, self.event_bus, self.engine)

        # Sync systems
        self.snapshot_system = SnapshotSystem(self.world, self.event_bus, self.shared_state, self.engine)
        self.high_score_system = HighScoreSystem(
            self.world, self.event_bus, self.engine, submit=self.high_scores.submit
        )

        # Interface systems
        self.render_system = RenderSystem(
            self.world,
            self.event_bus,
            self,
            self.engine,
            pending_garbage=self.garbage_system.pending_rows,
        )

        set_background_color(color.BLACK)

    def on_draw(self):
        self.clear()
        self.render_system.process()

    def on_update(self, delta_time: float):
        self.event_bus.emit(EVENT_TICK, dt=delta_time)

    def on_key_press(self, symbol: int, modifiers: int):
        entity = self.engine.entity
        if symbol == key.LEFT:
            self.event_bus.emit(EVENT_INPUT_MOVE, entity=entity, dx=-1)
        elif symbol == key.RIGHT:
            self.event_bus.emit(EVENT_INPUT_MOVE, entity=entity, dx=1)
        elif symbol == key.DOWN:
            self.event_bus.emit(EVENT_INPUT_SOFT_DROP, entity=entity, active=True)
        elif symbol == key.SPACE:
            self.event_bus.emit(EVENT_INPUT_HARD_DROP, entity=entity)
        elif symbol == key.R:
            self.event_bus.emit(EVENT_INPUT_RESTART, entity=entity)

    def on_key_release(self, symbol: int, modifiers: int):
        if symbol == key.DOWN:
            self.event_bus.emit(EVENT_INPUT_SOFT_DROP, entity=self.engine.entity, active=False)

    def on_close(self):
        self.snapshot_system.leave()
        super().on_close()


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    window = MoleculeDropWindow()
    logger.info("Window ready (%dx%d)", window.width, window.height)
    run()

if __name__ == "__main__":
    main()
