from dataclasses import dataclass, field
from typing import List, Tuple

from ecs.components.cell import Cell

@dataclass(slots=True)
class Board:
    """Fixed-size grid owned by one game entity.

    ``cells[y][x]``; row 0 is the top of the well, row ``rows - 1`` the floor.
    """
    rows: int
    cols: int
    cells: List[List[Cell]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.cells:
            self.cells = [[Cell.EMPTY for _ in range(self.cols)] for _ in range(self.rows)]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.cols and 0 <= y < self.rows

    def get(self, x: int, y: int) -> Cell:
        return self.cells[y][x]

    def set(self, x: int, y: int, value: Cell) -> None:
        self.cells[y][x] = value

    def is_empty(self, x: int, y: int) -> bool:
        return self.cells[y][x] is Cell.EMPTY

    def clear(self) -> None:
        for row in self.cells:
            for x in range(self.cols):
                row[x] = Cell.EMPTY

    def row_strings(self) -> Tuple[str, ...]:
        return tuple(''.join(cell.value for cell in row) for row in self.cells)
