"""Subgraph matcher locating a pattern graph among the atoms on a board.

A match assigns every pattern node to a distinct board cell holding the same
element, such that bonded nodes sit on 4-directionally adjacent cells. The
search is a backtracking embedding: the highest-degree node is pinned to each
candidate cell in turn, then the remaining nodes are placed most-constrained
first, each restricted to cells adjacent to *all* of its already placed
neighbours.

Among every distinct embedding the best one wins: lowest on the board
(largest ``max_y``), then leftmost (smallest ``min_x``), then the smallest
signature string.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ecs.chem.pattern_graph import PatternGraph
from ecs.components.board import Board

Coord = Tuple[int, int]  # (x, y)

DIRECTIONS: Tuple[Coord, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


@dataclass(frozen=True, slots=True)
class MatchCandidate:
    """A complete embedding; ``coords[i]`` is the board cell of pattern node ``i``."""

    coords: Tuple[Coord, ...]
    max_y: int
    min_x: int
    signature: str

    @classmethod
    def from_coords(cls, coords: Iterable[Coord]) -> "MatchCandidate":
        frozen = tuple((int(x), int(y)) for x, y in coords)
        ordered = sorted(frozen, key=lambda c: (c[1], c[0]))
        signature = '|'.join(f"{y}:{x}" for x, y in ordered)
        return cls(
            coords=frozen,
            max_y=max(y for _, y in frozen),
            min_x=min(x for x, _ in frozen),
            signature=signature,
        )

    def positions(self) -> List[Coord]:
        return sorted(self.coords, key=lambda c: (c[1], c[0]))


def pick_better(a: Optional[MatchCandidate], b: Optional[MatchCandidate]) -> Optional[MatchCandidate]:
    """Return the preferred of two candidates (either may be ``None``)."""
    if a is None:
        return b
    if b is None:
        return a
    if b.max_y != a.max_y:
        return b if b.max_y > a.max_y else a
    if b.min_x != a.min_x:
        return b if b.min_x < a.min_x else a
    return b if b.signature < a.signature else a


def _root_index(graph: PatternGraph) -> int:
    root = 0
    for index in range(len(graph)):
        if graph.degree(index) > graph.degree(root):
            root = index
    return root


def find_best_match(graph: PatternGraph, board: Board) -> Optional[MatchCandidate]:
    """Return the best embedding of ``graph`` in ``board`` or ``None``.

    ``None`` is the ordinary "target not built yet" answer, not an error.
    """
    total = len(graph)
    if total == 0:
        return None
    elements = [node.element for node in graph.nodes]
    adjacency = graph.adjacency
    assignments: Dict[int, Coord] = {}
    used: Set[Coord] = set()
    seen: Set[str] = set()
    best: Optional[MatchCandidate] = None

    def candidates_for(node: int, placed_neighbours: List[int]) -> List[Coord]:
        required = elements[node]
        result: Optional[List[Coord]] = None
        for neighbour in placed_neighbours:
            nx0, ny0 = assignments[neighbour]
            local: List[Coord] = []
            for dx, dy in DIRECTIONS:
                nx, ny = nx0 + dx, ny0 + dy
                if not board.in_bounds(nx, ny):
                    continue
                if board.get(nx, ny) is not required:
                    continue
                local.append((nx, ny))
            if not local:
                return []
            if result is None:
                result = local
            else:
                result = [coord for coord in result if coord in local]
                if not result:
                    return []
        return list(dict.fromkeys(result or []))

    def next_node() -> Tuple[Optional[int], List[int]]:
        chosen: Optional[int] = None
        chosen_neighbours: List[int] = []
        for node in range(total):
            if node in assignments:
                continue
            placed = [n for n in adjacency[node] if n in assignments]
            if not placed:
                continue
            if len(placed) > len(chosen_neighbours):
                chosen = node
                chosen_neighbours = placed
        return chosen, chosen_neighbours

    def search() -> None:
        nonlocal best
        if len(assignments) == total:
            candidate = MatchCandidate.from_coords(assignments[i] for i in range(total))
            if candidate.signature not in seen:
                seen.add(candidate.signature)
                best = pick_better(best, candidate)
            return
        node, placed = next_node()
        if node is None:
            # Disconnected remainder; nothing can extend this branch.
            return
        for cand in candidates_for(node, placed):
            if cand in used:
                continue
            cx, cy = cand
            if any(abs(assignments[n][0] - cx) + abs(assignments[n][1] - cy) != 1 for n in placed):
                continue
            assignments[node] = cand
            used.add(cand)
            search()
            used.discard(cand)
            del assignments[node]

    root = _root_index(graph)
    root_element = elements[root]
    for y in range(board.rows):
        for x in range(board.cols):
            if board.get(x, y) is not root_element:
                continue
            assignments[root] = (x, y)
            used.add((x, y))
            search()
            used.discard((x, y))
            del assignments[root]
    return best
