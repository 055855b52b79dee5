from dataclasses import dataclass

@dataclass(slots=True)
class Score:
    """Number of molecules cleared in the current game."""
    value: int = 0
