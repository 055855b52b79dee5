from ecs.components.game_state import GameMode
from ecs.events.bus import (
    EventBus,
    EVENT_INPUT_HARD_DROP,
    EVENT_INPUT_MOVE,
    EVENT_INPUT_RESTART,
    EVENT_INPUT_SOFT_DROP,
)
from ecs.systems.engine import GameEngine


class GameInputSystem:
    """Translates player intents on the bus into engine operations.

    Piece commands only apply while the game is running with an atom in
    play; restart is accepted in every mode.
    """

    def __init__(self, world, event_bus: EventBus, engine: GameEngine):
        self.world = world
        self.event_bus = event_bus
        self.engine = engine
        self.event_bus.subscribe(EVENT_INPUT_MOVE, self.on_move)
        self.event_bus.subscribe(EVENT_INPUT_SOFT_DROP, self.on_soft_drop)
        self.event_bus.subscribe(EVENT_INPUT_HARD_DROP, self.on_hard_drop)
        self.event_bus.subscribe(EVENT_INPUT_RESTART, self.on_restart)

    def _targets_me(self, kwargs) -> bool:
        entity = kwargs.get('entity')
        return entity is None or entity == self.engine.entity

    def _piece_in_play(self) -> bool:
        return self.engine.mode == GameMode.RUNNING and self.engine.active is not None

    def on_move(self, sender, **kwargs):
        if not self._targets_me(kwargs) or not self._piece_in_play():
            return
        dx = kwargs.get('dx', 0)
        if dx:
            self.engine.move_horizontal(dx)

    def on_soft_drop(self, sender, **kwargs):
        if not self._targets_me(kwargs):
            return
        active = bool(kwargs.get('active', False))
        if active and not self._piece_in_play():
            return
        self.engine.set_soft_drop(active)

    def on_hard_drop(self, sender, **kwargs):
        if not self._targets_me(kwargs) or not self._piece_in_play():
            return
        self.engine.hard_drop()

    def on_restart(self, sender, **kwargs):
        if not self._targets_me(kwargs):
            return
        self.engine.start()
