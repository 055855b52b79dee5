from __future__ import annotations

import random
from typing import Optional, Sequence

from esper import World

from ecs.components.board import Board
from ecs.components.current_target import CurrentTarget
from ecs.components.game_state import GameState
from ecs.components.molecule_pool import MoleculePool
from ecs.components.pending_garbage import PendingGarbage
from ecs.components.player_identity import PlayerIdentity
from ecs.components.score import Score
from ecs.components.tick_speed import TickSpeed
from ecs.constants import BASE_TICK_MS, BOARD_HEIGHT, BOARD_WIDTH, MIN_TICK_MS
from ecs.factories.molecules import Molecule, select_target


def create_game_entity(
    world: World,
    *,
    width: int = BOARD_WIDTH,
    height: int = BOARD_HEIGHT,
    tick_ms: float = BASE_TICK_MS,
    custom_molecules: Optional[Sequence[Molecule]] = None,
    player_id: str = "local",
    username: str = "Player",
    avatar: Optional[str] = None,
    rng: random.Random | None = None,
) -> int:
    """Create one game instance: an entity carrying every per-game component."""
    rng = rng or getattr(world, "random", None) or random.Random()
    custom = tuple(custom_molecules) if custom_molecules else None
    return world.create_entity(
        PlayerIdentity(player_id=player_id, username=username, avatar=avatar),
        Board(rows=height, cols=width),
        GameState(),
        Score(),
        TickSpeed(base_ms=float(tick_ms), current_ms=float(tick_ms), min_ms=float(MIN_TICK_MS)),
        MoleculePool(custom=custom),
        CurrentTarget(molecule=select_target(0, None, custom, rng=rng)),
        PendingGarbage(),
    )


def game_entities(world: World) -> list[int]:
    return [entity for entity, _ in world.get_component(PlayerIdentity)]
