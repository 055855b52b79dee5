"""Pattern graph builder for the simplified line notation.

Only ``C`` and ``O`` atoms, implicit single bonds and parenthesised branches
are understood. Every other character is skipped without touching the parser
state, so ``"C-C"`` and ``"CC"`` describe the same graph.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ecs.components.cell import ATOM_SYMBOLS, Cell


@dataclass(frozen=True, slots=True)
class PatternNode:
    element: Cell


@dataclass(frozen=True, slots=True)
class PatternGraph:
    """Immutable node list plus per-node neighbour indices (in insertion order)."""

    nodes: Tuple[PatternNode, ...]
    adjacency: Tuple[Tuple[int, ...], ...]

    def __len__(self) -> int:
        return len(self.nodes)

    def degree(self, index: int) -> int:
        return len(self.adjacency[index])

    def edges(self) -> List[Tuple[int, int]]:
        """Return every undirected edge once as ``(low, high)``."""
        return sorted({(min(a, b), max(a, b)) for a, nbrs in enumerate(self.adjacency) for b in nbrs})


def parse_graph(pattern: str) -> PatternGraph:
    nodes: List[PatternNode] = []
    neighbours: Dict[int, List[int]] = {}
    branch_stack: List[int] = []
    last_index: Optional[int] = None

    def add_edge(a: int, b: int) -> None:
        if b not in neighbours[a]:
            neighbours[a].append(b)
        if a not in neighbours[b]:
            neighbours[b].append(a)

    for ch in pattern:
        element = ATOM_SYMBOLS.get(ch)
        if element is not None:
            index = len(nodes)
            nodes.append(PatternNode(element=element))
            neighbours[index] = []
            if last_index is not None:
                add_edge(last_index, index)
            last_index = index
        elif ch == '(':
            if last_index is not None:
                branch_stack.append(last_index)
        elif ch == ')':
            if branch_stack:
                last_index = branch_stack.pop()

    adjacency = tuple(tuple(neighbours[i]) for i in range(len(nodes)))
    return PatternGraph(nodes=tuple(nodes), adjacency=adjacency)


def atom_count(pattern: str) -> int:
    return len(parse_graph(pattern))
