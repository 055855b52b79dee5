"""Values returned by game engine operations.

Callers branch on the concrete type instead of registering callbacks.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ecs.chem.matcher import MatchCandidate
from ecs.components.cell import Cell
from ecs.components.game_state import GameOverCause
from ecs.factories.molecules import Molecule


@dataclass(frozen=True, slots=True)
class Spawned:
    x: int
    y: int
    element: Cell


@dataclass(frozen=True, slots=True)
class Moved:
    x: int
    y: int


@dataclass(frozen=True, slots=True)
class Locked:
    x: int
    y: int
    element: Cell


@dataclass(frozen=True, slots=True)
class Matched:
    candidate: MatchCandidate
    target: Molecule
    score: int
    chained: bool = False


@dataclass(frozen=True, slots=True)
class GameOver:
    cause: GameOverCause
    score: int


EngineEvent = Union[Spawned, Moved, Locked, Matched, GameOver]


@dataclass(frozen=True, slots=True)
class TickResult:
    events: Tuple[EngineEvent, ...] = ()

    def _first(self, kind):
        for event in self.events:
            if isinstance(event, kind):
                return event
        return None

    @property
    def match(self) -> Optional[Matched]:
        return self._first(Matched)

    @property
    def game_over(self) -> Optional[GameOver]:
        return self._first(GameOver)

    @property
    def locked(self) -> Optional[Locked]:
        return self._first(Locked)

    @property
    def spawned(self) -> Optional[Spawned]:
        return self._first(Spawned)
