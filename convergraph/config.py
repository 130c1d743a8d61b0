# convergraph/config.py
"""
Configuration module for convergraph.
This file defines a dataclass to hold configurable parameters for the pipeline,
allowing easy modification of settings like conservation and pruning thresholds.
"""

from dataclasses import dataclass, fields
from numbers import Integral, Real
from typing import Optional, Union

from .alphabet import GapPolicy
from .exceptions import InvalidParameterError

OUTPUT_FORMATS = ("dot", "graphml", "gexf", "tsv")


@dataclass
class ConvergraphConfig:
    """
    Configuration class for convergraph pipeline parameters.
    This dataclass encapsulates settings that control input parsing, site
    filtering, graph pruning and output rendering.

    Attributes:
        conservation_threshold (float): Sites whose dominant symbol reaches this
            frequency across the queries are conserved and ignored (default: 0.97).
        minimum_cooccurrence_support (int): Edges backed by fewer co-occurring
            queries are removed (default: 4).
        minimum_cooccurrence_frequency (float): Edges whose count divided by the
            number of queries falls below this value are removed (default: 0.1).
        query_has_header (bool): The first line of the query input is a header
            row (default: False).
        sequence_column (Optional[Union[str, int]]): Column holding the aligned
            sequence. A name requires a header; an integer is a 0-based field
            index. None picks ``aa_aln`` when present, else the last column.
        gap_policy (str): How gap and unknown symbols take part in substitution
            extraction: 'include', 'skip' or 'collapse' (default: 'include').
        output_format (str): Graph text format, one of 'dot', 'graphml', 'gexf'
            or 'tsv' (default: 'dot').
        max_workers (int): Number of worker processes used to count
            co-occurrences. 1 keeps everything in-process (default: 1).
        chunk_size (int): Number of queries handed to a worker at a time
            (default: 1000).
        save_intermediates (bool): When an output directory is given, also save
            site frequencies and substitution tables (default: True).
    """
    conservation_threshold: float = 0.97
    minimum_cooccurrence_support: int = 4
    minimum_cooccurrence_frequency: float = 0.1
    query_has_header: bool = False
    sequence_column: Optional[Union[str, int]] = None
    gap_policy: str = GapPolicy.INCLUDE.value
    output_format: str = "dot"
    max_workers: int = 1
    chunk_size: int = 1000
    save_intermediates: bool = True

    def validate(self) -> "ConvergraphConfig":
        """Check every parameter range, raising InvalidParameterError on the first violation."""
        check_fraction("conservation_threshold", self.conservation_threshold)
        check_fraction("minimum_cooccurrence_frequency", self.minimum_cooccurrence_frequency)
        check_count("minimum_cooccurrence_support", self.minimum_cooccurrence_support, minimum=0)
        check_count("max_workers", self.max_workers, minimum=1)
        check_count("chunk_size", self.chunk_size, minimum=1)

        if self.gap_policy not in GapPolicy.choices():
            raise InvalidParameterError("gap_policy", self.gap_policy,
                                        f"expected one of {GapPolicy.choices()}")
        if self.output_format not in OUTPUT_FORMATS:
            raise InvalidParameterError("output_format", self.output_format,
                                        f"expected one of {list(OUTPUT_FORMATS)}")
        if isinstance(self.sequence_column, str) and not self.query_has_header:
            raise InvalidParameterError("sequence_column", self.sequence_column,
                                        "a column name requires query_has_header")
        if isinstance(self.sequence_column, bool):
            raise InvalidParameterError("sequence_column", self.sequence_column,
                                        "expected a column name or index")
        return self

    @classmethod
    def field_names(cls):
        return [f.name for f in fields(cls)]


def check_fraction(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidParameterError(name, value, "expected a number in [0, 1]")
    if not 0.0 <= float(value) <= 1.0:
        raise InvalidParameterError(name, value, "expected a number in [0, 1]")


def check_count(name: str, value, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidParameterError(name, value, f"expected an integer >= {minimum}")
    if value < minimum:
        raise InvalidParameterError(name, value, f"expected an integer >= {minimum}")
