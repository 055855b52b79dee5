from dataclasses import dataclass

from ecs.components.cell import Cell

@dataclass(slots=True)
class ActivePiece:
    """The single falling atom; removed from the entity when it locks."""
    x: int
    y: int
    element: Cell
