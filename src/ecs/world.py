import random
from typing import Optional, Sequence

from esper import World
from .events.bus import EventBus
from ecs.constants import BASE_TICK_MS, BOARD_HEIGHT, BOARD_WIDTH
from ecs.factories.game import create_game_entity, game_entities
from ecs.factories.molecules import Molecule


def create_world(
    event_bus: EventBus,
    *,
    width: int = BOARD_WIDTH,
    height: int = BOARD_HEIGHT,
    tick_ms: float = BASE_TICK_MS,
    custom_molecules: Optional[Sequence[Molecule]] = None,
    player_id: str = "local",
    username: str = "Player",
    avatar: Optional[str] = None,
    rng: random.Random | None = None,
) -> World:
    world = World()
    setattr(world, "random", rng or random.Random())

    # Local player's game instance; further players can be added with create_game_entity.
    create_game_entity(
        world,
        width=width,
        height=height,
        tick_ms=tick_ms,
        custom_molecules=custom_molecules,
        player_id=player_id,
        username=username,
        avatar=avatar,
        rng=getattr(world, "random"),
    )
    return world


def primary_game_entity(world: World) -> int | None:
    """Return the first game entity created for this world."""
    entities = game_entities(world)
    if not entities:
        return None
    return min(entities)
