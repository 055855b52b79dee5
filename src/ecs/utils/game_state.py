from __future__ import annotations

from esper import World

from ecs.components.game_state import GameMode, GameState
from ecs.events.bus import EVENT_GAME_MODE_CHANGED, EventBus


def get_game_state(world: World, entity: int) -> GameState | None:
    try:
        return world.component_for_entity(entity, GameState)
    except KeyError:
        return None


def set_game_mode(world: World, event_bus: EventBus, entity: int, mode: GameMode) -> bool:
    """Update a game's mode and emit a change event when it differs."""

    state = get_game_state(world, entity)
    if state is None:
        state = GameState(mode=mode)
        world.add_component(entity, state)
        event_bus.emit(EVENT_GAME_MODE_CHANGED, entity=entity, previous_mode=None, new_mode=mode)
        return True
    previous_mode = state.mode
    if previous_mode == mode:
        return False
    state.mode = mode
    event_bus.emit(EVENT_GAME_MODE_CHANGED, entity=entity, previous_mode=previous_mode, new_mode=mode)
    return True
