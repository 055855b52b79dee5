from __future__ import annotations

import random
from typing import Sequence

from esper import World

from ecs.components.board import Board
from ecs.components.cell import Cell
from ecs.events.bus import EVENT_TICK, EventBus
from ecs.factories.molecules import Molecule
from ecs.systems.engine import GameEngine
from ecs.world import create_world

ETHANE = Molecule("ethane", "CC")
# Needs a twenty-carbon chain; no test builds one, so locks never match it.
UNMATCHABLE = Molecule("icosane", "C" * 20)


def new_game(
    molecules: Sequence[Molecule] = (ETHANE,),
    *,
    seed: int = 1,
    **kwargs,
) -> tuple[EventBus, World, GameEngine]:
    """Build a bus, a world holding one game and an engine bound to it."""
    bus = EventBus()
    rng = random.Random(seed)
    world = create_world(bus, custom_molecules=list(molecules), rng=rng, **kwargs)
    engine = GameEngine(world, bus)
    return bus, world, engine


def place(board: Board, cells: dict[tuple[int, int], Cell]) -> None:
    for (x, y), value in cells.items():
        board.set(x, y, value)


def drop_carbon_at(engine: GameEngine, column: int):
    """Swap the active atom for a carbon, steer it to ``column`` and hard drop."""
    engine.spawn(Cell.CARBON)
    piece = engine.active
    for _ in range(engine.board.cols):
        if piece.x == column:
            break
        engine.move_horizontal(1 if column > piece.x else -1)
    assert piece.x == column, f"could not steer atom to column {column}"
    return engine.hard_drop()


def record(bus: EventBus, name: str) -> list[dict]:
    """Collect the payload of every ``name`` event emitted on ``bus``."""
    payloads: list[dict] = []
    bus.subscribe(name, lambda sender, **kwargs: payloads.append(kwargs))
    return payloads


def drive_ticks(bus: EventBus, count: int, dt: float = 1 / 60) -> None:
    for _ in range(count):
        bus.emit(EVENT_TICK, dt=dt)
