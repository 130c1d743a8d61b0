# convergraph/graph.py
"""
Co-occurrence graph of substitutions.

Nodes are distinct substitutions; an undirected edge joins two substitutions
carried by the same query and counts how many queries carry both. The graph
moves through three states: CONSTRUCTION (counts accumulate), PRUNING (edge
frequencies fixed, edges and nodes may only be removed) and FROZEN.
"""

import logging
from collections import Counter
from concurrent.futures import ProcessPoolExecutor, as_completed
from enum import Enum
from itertools import combinations
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import networkx as nx

from .exceptions import GraphStateError
from .substitutions import Substitution, SubstitutionSet

logger = logging.getLogger(__name__)

EdgeKey = Tuple[Substitution, Substitution]


class GraphState(Enum):
    CONSTRUCTION = "construction"
    PRUNING = "pruning"
    FROZEN = "frozen"


class CooccurrenceCounts:
    """
    Accumulator of node support and pairwise co-occurrence counts.

    Edge keys are ordered pairs (smaller, larger) so that partial counts from
    independent workers merge by plain summation.
    """

    def __init__(self):
        self.n_queries = 0
        self.node_support: Counter = Counter()
        self.edge_counts: Counter = Counter()

    def add(self, substitutions: Iterable[Substitution]) -> None:
        ordered = sorted(set(substitutions))
        self.n_queries += 1
        self.node_support.update(ordered)
        self.edge_counts.update(combinations(ordered, 2))

    def merge(self, other: "CooccurrenceCounts") -> "CooccurrenceCounts":
        self.n_queries += other.n_queries
        self.node_support.update(other.node_support)
        self.edge_counts.update(other.edge_counts)
        return self


def _count_chunk(substitution_sets: List[SubstitutionSet]) -> CooccurrenceCounts:
    counts = CooccurrenceCounts()
    for substitutions in substitution_sets:
        counts.add(substitutions)
    return counts


def count_cooccurrences(substitution_sets: List[SubstitutionSet], max_workers: int = 1,
                        chunk_size: int = 1000) -> CooccurrenceCounts:
    """Count co-occurrences, optionally across worker processes with a final merge."""
    if max_workers <= 1 or len(substitution_sets) <= chunk_size:
        return _count_chunk(substitution_sets)

    chunks = [substitution_sets[i:i + chunk_size]
              for i in range(0, len(substitution_sets), chunk_size)]
    logger.info(f"Counting co-occurrences in {len(chunks)} chunks with {max_workers} workers")

    total = CooccurrenceCounts()
    with ProcessPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(_count_chunk, chunk) for chunk in chunks]
        for future in as_completed(futures):
            total.merge(future.result())
    return total


class CooccurrenceGraph:
    """Substitution co-occurrence graph backed by a networkx.Graph."""

    def __init__(self):
        self.state = GraphState.CONSTRUCTION
        self._counts: Optional[CooccurrenceCounts] = CooccurrenceCounts()
        self._graph = nx.Graph()
        self.n_queries = 0

    @classmethod
    def from_counts(cls, counts: CooccurrenceCounts) -> "CooccurrenceGraph":
        graph = cls()
        graph.merge(counts)
        return graph

    # -- construction -------------------------------------------------------

    def add_substitution_set(self, substitutions: Iterable[Substitution]) -> None:
        """Register one query's substitutions. An empty set still counts as a query."""
        self._require(GraphState.CONSTRUCTION, "add substitutions")
        self._counts.add(substitutions)

    def merge(self, other) -> None:
        """Merge partial counts, or another graph still under construction."""
        self._require(GraphState.CONSTRUCTION, "merge counts")
        if isinstance(other, CooccurrenceGraph):
            other._require(GraphState.CONSTRUCTION, "be merged")
            other = other._counts
        self._counts.merge(other)

    def finalize(self) -> "CooccurrenceGraph":
        """
        Materialize nodes and edges and fix edge frequencies.

        Frequency is count / number of queries (all queries, including those
        without any substitution). Per-query participation is discarded.
        """
        self._require(GraphState.CONSTRUCTION, "finalize")
        counts, self._counts = self._counts, None
        self.n_queries = counts.n_queries

        for sub in sorted(counts.node_support):
            self._graph.add_node(
                sub,
                label=sub.label,
                site=sub.site,
                position=sub.position,
                ancestral=sub.ancestral,
                derived=sub.derived,
                support=counts.node_support[sub],
            )
        for (a, b) in sorted(counts.edge_counts):
            count = counts.edge_counts[(a, b)]
            self._graph.add_edge(a, b, count=count, frequency=count / self.n_queries)

        self.state = GraphState.PRUNING
        logger.info(f"Built co-occurrence graph: {self.number_of_nodes()} nodes, "
                    f"{self.number_of_edges()} edges from {self.n_queries} queries")
        return self

    # -- pruning ------------------------------------------------------------

    def remove_edges(self, edges: Iterable[EdgeKey]) -> int:
        self._require(GraphState.PRUNING, "remove edges")
        edges = list(edges)
        self._graph.remove_edges_from(edges)
        return len(edges)

    def remove_nodes(self, nodes: Iterable[Substitution]) -> int:
        self._require(GraphState.PRUNING, "remove nodes")
        nodes = list(nodes)
        self._graph.remove_nodes_from(nodes)
        return len(nodes)

    def freeze(self) -> "CooccurrenceGraph":
        self._require(GraphState.PRUNING, "freeze")
        nx.freeze(self._graph)
        self.state = GraphState.FROZEN
        return self

    # -- queries ------------------------------------------------------------

    @property
    def is_frozen(self) -> bool:
        return self.state is GraphState.FROZEN

    def nodes(self) -> List[Substitution]:
        """Nodes in substitution order."""
        self._require_built()
        return sorted(self._graph.nodes)

    def edges(self) -> Iterator[Tuple[Substitution, Substitution, Dict]]:
        """(source, target, attributes) with source < target, in sorted order."""
        self._require_built()
        ordered = sorted(tuple(sorted((a, b))) for a, b in self._graph.edges)
        for a, b in ordered:
            yield a, b, self._graph.edges[a, b]

    def number_of_nodes(self) -> int:
        return self._graph.number_of_nodes()

    def number_of_edges(self) -> int:
        return self._graph.number_of_edges()

    def degree(self, node: Substitution) -> int:
        return self._graph.degree(node)

    def support(self, node: Substitution) -> int:
        return self._graph.nodes[node]['support']

    def edge_count(self, a: Substitution, b: Substitution) -> int:
        return self._graph.edges[a, b]['count']

    def edge_frequency(self, a: Substitution, b: Substitution) -> float:
        return self._graph.edges[a, b]['frequency']

    def has_edge(self, a: Substitution, b: Substitution) -> bool:
        return self._graph.has_edge(a, b)

    def __contains__(self, node) -> bool:
        return node in self._graph

    def to_networkx(self) -> nx.Graph:
        """A detached copy with string node ids and sorted insertion order, for export."""
        self._require_built()
        export = nx.Graph()
        for node in self.nodes():
            attrs = dict(self._graph.nodes[node])
            export.add_node(node.label, **attrs)
        for a, b, attrs in self.edges():
            export.add_edge(a.label, b.label, **attrs)
        return export

    def _require(self, state: GraphState, action: str) -> None:
        if self.state is not state:
            raise GraphStateError(f"Cannot {action}: graph is in {self.state.value} state")

    def _require_built(self) -> None:
        if self.state is GraphState.CONSTRUCTION:
            raise GraphStateError("Graph has not been finalized")


class CooccurrenceGraphBuilder:
    """Builds a finalized CooccurrenceGraph from per-query substitution sets."""

    def __init__(self, max_workers: int = 1, chunk_size: int = 1000):
        self.max_workers = max_workers
        self.chunk_size = chunk_size

    def build(self, substitution_sets: List[SubstitutionSet]) -> CooccurrenceGraph:
        counts = count_cooccurrences(list(substitution_sets), self.max_workers, self.chunk_size)
        return CooccurrenceGraph.from_counts(counts).finalize()
