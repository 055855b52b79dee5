"""Per-game state describing where the game sits in its lifecycle."""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class GameMode(Enum):
    """Lifecycle modes that decide which operations are accepted."""
    IDLE = auto()
    RUNNING = auto()
    CLEARING = auto()
    OVER = auto()


class GameOverCause(Enum):
    SPAWN_BLOCKED = "spawn_blocked"
    GARBAGE_OVERFLOW = "garbage_overflow"

    @property
    def message(self) -> str:
        if self is GameOverCause.GARBAGE_OVERFLOW:
            return "Garbage overflow!"
        return "Game Over!"


@dataclass(slots=True)
class GameState:
    mode: GameMode = GameMode.IDLE
    soft_drop: bool = False
    over_cause: Optional[GameOverCause] = None
    # Bumped on every reset so timers scheduled for an earlier game can be discarded.
    generation: int = 0
    fall_elapsed_ms: float = 0.0

    @property
    def running(self) -> bool:
        return self.mode == GameMode.RUNNING
