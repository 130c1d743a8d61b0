"""
convergraph: mutation co-occurrence graphs from aligned amino-acid sequences.

Reads a reference (outgroup) sequence and aligned query records, keeps the
variable sites, and links substitutions that occur together in the same
query. The pruned graph is written for tools like Gephi or Graphviz.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .alphabet import GapPolicy
from .config import OUTPUT_FORMATS, ConvergraphConfig
from .convergraph import run_convergraph_analysis
from .exceptions import ConvergraphError
from .utils import create_config_from_args, load_config_file

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Log to stderr; stdout is reserved for the graph."""
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def validate_file_path(file_path: str, file_type: str) -> Path:
    """Validate that an input file exists."""
    path = Path(file_path)
    if not path.is_file():
        logger.error(f"{file_type} file does not exist: {file_path}")
        sys.exit(1)
    return path


def setup_argument_parser() -> argparse.ArgumentParser:
    """Set up the argument parser with organized argument groups."""
    parser = argparse.ArgumentParser(
        prog="convergraph",
        description=(
            "Create a mutation co-occurrence graph for viewing in tools like Gephi.\n"
            "The ultimate goal is to find convergently evolved shared mutations."
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        epilog="Example: zcat records.tsv.gz | convergraph -r wuhan.fasta -q -s 4 -f 0.1 > graph.dot"
    )

    # Input File Arguments
    input_group = parser.add_argument_group('Input')
    input_group.add_argument(
        "-r", "--reference-file", required=True, type=str,
        help="Reference (outgroup) sequence, raw or single-record FASTA."
    )
    input_group.add_argument(
        "query", nargs="?", default="-",
        help="Tab-delimited aligned query records; '-' reads standard input. "
             "Compressed files are decompressed transparently."
    )
    input_group.add_argument(
        "-q", "--query-has-header", action="store_true",
        help="The first line of the query input is a header row."
    )
    input_group.add_argument(
        "--sequence-column", type=str, default=None,
        help="Header name or 0-based index of the sequence column "
             "(default: 'aa_aln' if present, else the last column)."
    )

    # Analysis Arguments
    analysis_group = parser.add_argument_group('Analysis Parameters')
    analysis_group.add_argument(
        "-c", "--conservation-threshold", dest="conservation_threshold", type=float, default=None,
        help="Sites whose dominant symbol reaches this frequency are ignored (default: 0.97)."
    )
    analysis_group.add_argument(
        "-s", "--minimum-cooccurrence-support", dest="minimum_cooccurrence_support",
        type=int, default=None,
        help="Remove edges backed by fewer queries (default: 4)."
    )
    analysis_group.add_argument(
        "-f", "--minimum-cooccurrence-frequency", dest="minimum_cooccurrence_frequency",
        type=float, default=None,
        help="Remove edges whose count / number of queries is lower (default: 0.1)."
    )
    analysis_group.add_argument(
        "--gap-policy", choices=GapPolicy.choices(), default=None,
        help="How gap and unknown symbols form substitutions (default: include)."
    )
    analysis_group.add_argument(
        "--max-workers", type=int, default=None,
        help="Worker processes for co-occurrence counting (default: 1)."
    )

    # Output Arguments
    output_group = parser.add_argument_group('Output')
    output_group.add_argument(
        "--format", dest="output_format", choices=list(OUTPUT_FORMATS), default=None,
        help="Graph text format (default: dot)."
    )
    output_group.add_argument(
        "-o", "--output", type=str, default=None,
        help="Write the graph to this file instead of standard output."
    )
    output_group.add_argument(
        "--output-dir", type=str, default=None,
        help="Directory to save site frequencies, substitutions and a GraphML copy."
    )

    # Configuration Arguments
    config_group = parser.add_argument_group('Configuration')
    config_group.add_argument(
        "--config", type=str, default=None,
        help="Optional YAML or JSON config file; command-line values take precedence."
    )
    verbosity = config_group.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true",
                           help="Log debug messages, including every variable site.")
    verbosity.add_argument("--quiet", action="store_true", help="Log warnings and errors only.")
    config_group.add_argument(
        "--version", action="version", version=f"convergraph {__version__}",
        help="Show program's version number and exit."
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main function to orchestrate the convergraph pipeline."""
    parser = setup_argument_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.quiet)

    try:
        reference_path = validate_file_path(args.reference_file, 'reference')
        query_source = args.query
        if query_source != "-":
            query_source = str(validate_file_path(query_source, 'query'))

        base = load_config_file(args.config) if args.config else ConvergraphConfig()
        config = create_config_from_args(args, base)

        logger.info("Starting convergraph pipeline")
        logger.info(f"Reference: {reference_path}")
        logger.info(f"Queries: {'standard input' if query_source == '-' else query_source}")

        run_convergraph_analysis(
            reference_path=str(reference_path),
            query_source=query_source,
            output_path=args.output,
            output_dir=args.output_dir,
            config=config,
        )
    except KeyboardInterrupt:
        logger.error("Pipeline interrupted by user")
        sys.exit(1)
    except (ConvergraphError, OSError) as e:
        logger.error(f"Pipeline failed: {e}")
        sys.exit(1)
    return 0


if __name__ == "__main__":
    main()
