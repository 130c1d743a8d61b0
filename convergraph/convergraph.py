# convergraph.py
import logging
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, TextIO, Union

from .config import ConvergraphConfig
from .data_loader import Alignment, DataLoader
from .graph import CooccurrenceGraph, CooccurrenceGraphBuilder
from .output_generator import OutputGenerator
from .pruner import GraphPruner, PruningReport
from .site_analyzer import SiteFrequencies, SiteFrequencyAnalyzer
from .substitutions import SubstitutionExtractor, SubstitutionSet, substitution_table

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Everything a run produced; ``graph`` is frozen."""
    alignment: Alignment
    site_frequencies: SiteFrequencies
    substitution_sets: List[SubstitutionSet]
    graph: CooccurrenceGraph
    pruning: PruningReport
    text: Optional[str] = None


class Convergraph:
    """
    Orchestrates the convergraph pipeline.
    """

    def __init__(self, config: Optional[ConvergraphConfig] = None):
        self.config = (config or ConvergraphConfig()).validate()
        logger.debug(f"Initializing Convergraph with config: {vars(self.config)}")
        self.loader = DataLoader(self.config)
        self.analyzer = SiteFrequencyAnalyzer(self.config.conservation_threshold)
        self.builder = CooccurrenceGraphBuilder(self.config.max_workers, self.config.chunk_size)
        self.pruner = GraphPruner(self.config.minimum_cooccurrence_support,
                                  self.config.minimum_cooccurrence_frequency)
        self.output_generator = OutputGenerator(self.config)

    def run_pipeline(self, reference_path: str, query_source: Union[str, BinaryIO, None] = None,
                     output_path: Optional[str] = None, output_dir: Optional[str] = None,
                     stream: Optional[TextIO] = None) -> PipelineResult:
        """
        Execute the full pipeline: load, analyze sites, extract substitutions,
        build and prune the graph, then write it.

        Args:
            reference_path (str): Path to the reference sequence file.
            query_source (str | BinaryIO | None): Query records path, binary stream,
                or None / "-" for standard input.
            output_path (Optional[str]): Write the graph here instead of to ``stream``.
            output_dir (Optional[str]): Directory for intermediate tables and GraphML.
            stream (Optional[TextIO]): Text stream for the graph; defaults to stdout.

        Returns:
            PipelineResult: The run's intermediate and final products.
        """
        logger.info("📥 Stage 1: Input Processing")
        alignment = self.loader.load_alignment(reference_path, query_source)

        result = self.build_graph(alignment)

        logger.info("📤 Stage 6: Output Generation")
        if output_dir:
            table = substitution_table(alignment, result.substitution_sets)
            self.output_generator.save_intermediates(output_dir, result.site_frequencies,
                                                     table, result.graph)
        result.text = self.output_generator.write(result.graph, output_path=output_path, stream=stream)

        logger.info("✅ Pipeline completed successfully")
        return result

    def build_graph(self, alignment: Alignment) -> PipelineResult:
        """Stages 2-5 on an already loaded alignment."""
        logger.info("🧮 Stage 2: Site Frequency Analysis")
        site_frequencies = self.analyzer.analyze(alignment)

        logger.info("🔍 Stage 3: Substitution Extraction")
        extractor = SubstitutionExtractor(site_frequencies, self.config.gap_policy)
        substitution_sets = extractor.extract(alignment)

        logger.info("🔗 Stage 4: Co-occurrence Graph Construction")
        graph = self.builder.build(substitution_sets)

        logger.info("✂️ Stage 5: Graph Pruning")
        pruning = self.pruner.prune(graph)

        return PipelineResult(alignment, site_frequencies, substitution_sets, graph, pruning)


def run_convergraph_analysis(**kwargs) -> PipelineResult:
    """
    Entry-point function for pipeline execution.
    """
    config = kwargs.pop('config', None) or ConvergraphConfig()
    pipeline = Convergraph(config)
    logger.info("Starting pipeline execution...")
    return pipeline.run_pipeline(**kwargs)
