from dataclasses import dataclass

@dataclass(slots=True)
class PendingGarbage:
    """Garbage rows received but not yet injected into the board."""
    rows: int = 0
