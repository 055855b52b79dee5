from enum import Enum


class Cell(str, Enum):
    """Content of a single board slot.

    Values double as the one-character symbols used in snapshots and patterns.
    """
    EMPTY = '.'
    CARBON = 'C'
    OXYGEN = 'O'
    GARBAGE = 'G'

    @property
    def is_atom(self) -> bool:
        return self in (Cell.CARBON, Cell.OXYGEN)


ATOM_SYMBOLS = {Cell.CARBON.value: Cell.CARBON, Cell.OXYGEN.value: Cell.OXYGEN}
