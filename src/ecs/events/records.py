"""Immutable records exchanged with collaborators outside a single game."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True, slots=True)
class PlayerSnapshot:
    player_id: str
    username: str
    avatar: Optional[str]
    board: Tuple[str, ...]
    score: int
    status: str
    target_name: str
    target_pattern: str
    speed_ratio: float
    last_update: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "playerId": self.player_id,
            "username": self.username,
            "avatar": self.avatar,
            "board": [list(row) for row in self.board],
            "score": self.score,
            "status": self.status,
            "target": {"name": self.target_name, "pattern": self.target_pattern},
            "speedRatio": self.speed_ratio,
            "lastUpdate": self.last_update,
        }


@dataclass(frozen=True, slots=True)
class GarbageEvent:
    id: str
    from_player_id: str
    to_player_id: str
    rows: int
    timestamp: float


@dataclass(frozen=True, slots=True)
class HighScoreEntry:
    username: str
    user_id: str
    avatar: Optional[str]
    score: int
    timestamp: float
