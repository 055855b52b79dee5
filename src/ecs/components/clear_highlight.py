from dataclasses import dataclass

from ecs.chem.matcher import MatchCandidate

@dataclass(slots=True)
class ClearHighlight:
    """Matched cells held on screen before removal.

    ``generation`` ties the pending clear to the game it was scheduled in.
    """
    candidate: MatchCandidate
    remaining_ms: float
    generation: int
