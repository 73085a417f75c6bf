"""
Graph Model Builder
===================
Derives country nodes, border edges and neighbor lists from raw border pairs.

Why is this file needed?
------------------------
1. Identity: Every country appearing in the dataset becomes exactly one node,
   in the order it was first seen.
2. Symmetry: A border listed once (A -> B) still makes A and B neighbors of
   each other. The adjacency index is built once for all edges.
3. Lookup: Forces and views work on integer indices; this module owns the
   identity -> index mapping.

Classes:
    CountryNode: A country and its ordered neighbor list.
    BorderEdge: An undirected border between two countries.
    BorderGraph: Container with lookup helpers.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CountryNode:
    """A country. `neighbors` keeps first-seen order and holds no duplicates."""
    id: str
    index: int
    neighbors: Tuple[str, ...] = ()

    @property
    def degree(self) -> int:
        return len(self.neighbors)


@dataclass(frozen=True)
class BorderEdge:
    """An undirected shared border, kept exactly as listed in the input."""
    source: str
    target: str
    source_index: int
    target_index: int

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id


@dataclass
class BorderGraph:
    nodes: List[CountryNode] = field(default_factory=list)
    edges: List[BorderEdge] = field(default_factory=list)
    _index: Dict[str, int] = field(default_factory=dict, repr=False)
    _incident: Dict[str, List[int]] = field(default_factory=dict, repr=False)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    @property
    def node_ids(self) -> List[str]:
        return [node.id for node in self.nodes]

    def index_of(self, node_id: str) -> int:
        try:
            return self._index[node_id]
        except KeyError:
            raise ValueError(f"Unknown country '{node_id}'.") from None

    def node(self, node_id: str) -> CountryNode:
        return self.nodes[self.index_of(node_id)]

    def neighbors(self, node_id: str) -> Tuple[str, ...]:
        return self.node(node_id).neighbors

    def degree(self, node_id: str) -> int:
        return self.node(node_id).degree

    def incident_edges(self, node_id: str) -> List[int]:
        """Indices of the edges touching `node_id`, in input order."""
        self.index_of(node_id)
        return list(self._incident.get(node_id, []))

    def degree_order(self) -> List[int]:
        """Node indices sorted by neighbor count, highest first. Ties keep first-seen order."""
        return sorted(range(len(self.nodes)), key=lambda i: -self.nodes[i].degree)


def normalize_pairs(pairs: Iterable[Sequence[str]]) -> List[Tuple[str, str]]:
    """
    Check every entry is a (source, target) pair and return them as tuples.
    Entries are never truncated or split.

    Raises:
        ValueError: With the index of the first entry that is not a pair.
    """
    checked: List[Tuple[str, str]] = []
    for position, pair in enumerate(pairs):
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise ValueError(f"Entry {position} is not a (source, target) pair: {pair!r}")
        checked.append((pair[0], pair[1]))
    return checked


def build_graph(pairs: Iterable[Sequence[str]]) -> BorderGraph:
    """
    Build the border graph from an ordered sequence of (source, target) pairs.

    Args:
        pairs: Raw border pairs. Direction is ignored for adjacency; the edge
               list keeps every pair as given.

    Returns:
        BorderGraph with nodes in first-seen order.

    Raises:
        ValueError: If an entry is not a pair.
    """
    order: List[str] = []
    index: Dict[str, int] = {}
    raw_edges: List[Tuple[str, str]] = []

    for source, target in normalize_pairs(pairs):
        for name in (source, target):
            if name not in index:
                index[name] = len(order)
                order.append(name)
        raw_edges.append((source, target))

    # Symmetric adjacency, deduplicated by neighbor identity
    adjacency: Dict[str, Dict[str, None]] = {name: {} for name in order}
    incident: Dict[str, List[int]] = {name: [] for name in order}
    for edge_index, (source, target) in enumerate(raw_edges):
        incident[source].append(edge_index)
        if target != source:
            incident[target].append(edge_index)
            adjacency[source].setdefault(target, None)
            adjacency[target].setdefault(source, None)

    nodes = [
        CountryNode(id=name, index=i, neighbors=tuple(adjacency[name]))
        for i, name in enumerate(order)
    ]
    edges = [
        BorderEdge(source=s, target=t, source_index=index[s], target_index=index[t])
        for s, t in raw_edges
    ]

    logger.debug(f"Built graph with {len(nodes)} countries and {len(edges)} borders.")
    return BorderGraph(nodes=nodes, edges=edges, _index=index, _incident=incident)
