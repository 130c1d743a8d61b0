# convergraph/pruner.py
"""
Threshold-based pruning of the co-occurrence graph.

Stages run in a fixed order: edges below the support threshold, then edges
below the frequency threshold, then nodes left without any edge.
"""

import logging
from dataclasses import dataclass

from .config import check_count, check_fraction
from .graph import CooccurrenceGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PruningReport:
    edges_below_support: int
    edges_below_frequency: int
    orphan_nodes: int
    remaining_nodes: int
    remaining_edges: int


class GraphPruner:
    """Removes weakly supported edges and the nodes they leave orphaned."""

    def __init__(self, minimum_support: int = 4, minimum_frequency: float = 0.1):
        check_count("minimum_cooccurrence_support", minimum_support, minimum=0)
        check_fraction("minimum_cooccurrence_frequency", minimum_frequency)
        self.minimum_support = minimum_support
        self.minimum_frequency = float(minimum_frequency)

    def prune(self, graph: CooccurrenceGraph) -> PruningReport:
        """Prune in place and freeze the graph. An empty result is valid."""
        weak = [(a, b) for a, b, attrs in graph.edges() if attrs['count'] < self.minimum_support]
        below_support = graph.remove_edges(weak)

        rare = [(a, b) for a, b, attrs in graph.edges()
                if attrs['frequency'] < self.minimum_frequency]
        below_frequency = graph.remove_edges(rare)

        orphans = graph.remove_nodes([n for n in graph.nodes() if graph.degree(n) == 0])
        graph.freeze()

        report = PruningReport(
            edges_below_support=below_support,
            edges_below_frequency=below_frequency,
            orphan_nodes=orphans,
            remaining_nodes=graph.number_of_nodes(),
            remaining_edges=graph.number_of_edges(),
        )
        logger.info(
            f"Pruned {below_support} edges below support {self.minimum_support}, "
            f"{below_frequency} edges below frequency {self.minimum_frequency}, "
            f"{orphans} orphan nodes; {report.remaining_nodes} nodes and "
            f"{report.remaining_edges} edges remain"
        )
        return report
