# convergraph/output_generator.py
"""
Output generation for convergraph.

Renders the frozen co-occurrence graph as text for graph-visualization tools
(Graphviz DOT, GraphML, GEXF for Gephi, or a TSV edge list) and saves the
intermediate tables of a run.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

import networkx as nx
import pandas as pd

from .config import OUTPUT_FORMATS, ConvergraphConfig
from .exceptions import GraphStateError, InvalidParameterError
from .graph import CooccurrenceGraph
from .site_analyzer import SiteFrequencies

logger = logging.getLogger(__name__)

INDENT = "    "


class OutputGenerator:
    """Renders graphs and saves run artifacts."""

    def __init__(self, config: Optional[ConvergraphConfig] = None):
        self.config = config or ConvergraphConfig()

    def render(self, graph: CooccurrenceGraph, output_format: Optional[str] = None) -> str:
        """
        Render a frozen graph to text.

        Every node is declared once and every edge appears once with its
        integer co-occurrence count as ``weight``. Ordering follows the
        substitutions, so identical graphs always render identically.
        """
        output_format = output_format or self.config.output_format
        if not graph.is_frozen:
            raise GraphStateError("Only a pruned, frozen graph can be written")

        if output_format == "dot":
            return render_dot(graph)
        if output_format == "graphml":
            return "\n".join(nx.generate_graphml(graph.to_networkx())) + "\n"
        if output_format == "gexf":
            return "\n".join(nx.generate_gexf(graph.to_networkx())) + "\n"
        if output_format == "tsv":
            return edge_table(graph).to_csv(sep='\t', index=False)
        raise InvalidParameterError("output_format", output_format,
                                    f"expected one of {list(OUTPUT_FORMATS)}")

    def write(self, graph: CooccurrenceGraph, output_path: Optional[str] = None,
              stream: Optional[TextIO] = None) -> str:
        """Write the rendered graph to a file, a stream, or standard output; returns the text."""
        text = self.render(graph)
        if output_path:
            path = Path(output_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text)
            logger.info(f"Saved graph to: {path}")
        else:
            out = stream or sys.stdout
            out.write(text)
            out.flush()
        return text

    def save_intermediates(self, output_dir: str, site_frequencies: SiteFrequencies,
                           substitutions: pd.DataFrame, graph: CooccurrenceGraph) -> None:
        """Save per-site frequencies, the substitution table, and the graph as GraphML."""
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        if self.config.save_intermediates:
            site_frequencies.to_frame().to_csv(output_path / "site_frequencies.csv", index=False)
            logger.info(f"Saved site frequencies to: {output_path / 'site_frequencies.csv'}")
            substitutions.to_csv(output_path / "substitutions.csv", index=False)
            logger.info(f"Saved substitutions to: {output_path / 'substitutions.csv'}")

        nx.write_graphml(graph.to_networkx(), output_path / "cooccurrence_graph.graphml")
        logger.info("Saved co-occurrence graph to GraphML file.")


def render_dot(graph: CooccurrenceGraph) -> str:
    """Undirected DOT with integer node ids, substitution labels and edge weights."""
    ids = {}
    lines = ["graph {"]
    for i, node in enumerate(graph.nodes()):
        ids[node] = i
        lines.append(f'{INDENT}{i} [ label = "{node.label}" ]')
    for a, b, attrs in graph.edges():
        count = attrs['count']
        lines.append(f'{INDENT}{ids[a]} -- {ids[b]} [ label = "{count}", weight={count} ]')
    lines.append("}")
    return "\n".join(lines) + "\n"


def edge_table(graph: CooccurrenceGraph) -> pd.DataFrame:
    rows = [
        {'source': a.label, 'target': b.label,
         'count': attrs['count'], 'frequency': attrs['frequency']}
        for a, b, attrs in graph.edges()
    ]
    return pd.DataFrame(rows, columns=['source', 'target', 'count', 'frequency'])
