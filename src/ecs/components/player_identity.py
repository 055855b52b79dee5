from dataclasses import dataclass
from typing import Optional

@dataclass(slots=True)
class PlayerIdentity:
    player_id: str = "local"
    username: str = "Player"
    avatar: Optional[str] = None
