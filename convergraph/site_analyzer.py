# convergraph/site_analyzer.py
"""
Per-site symbol frequencies across the query population.

The reference is excluded from tallying: frequencies describe the queries,
not the ancestral state. A site is conserved when its dominant symbol reaches
the conservation threshold (inclusive); only variable sites move downstream.
"""

import logging
from typing import List, Tuple

import numpy as np
import pandas as pd

from .config import check_fraction
from .data_loader import Alignment

logger = logging.getLogger(__name__)


class SiteFrequencies:
    """
    Symbol counts and derived frequencies for every alignment column.

    Produced once per run by SiteFrequencyAnalyzer and read by the
    substitution extractor; it is never mutated after construction.

    Attributes:
        counts (pd.DataFrame): Sites x observed symbols, integer counts.
        n_queries (int): Number of query sequences tallied.
        conservation_threshold (float): Threshold used for classification.
        variable_sites (Tuple[int, ...]): Sorted 0-based indices of variable sites.
    """

    def __init__(self, counts: pd.DataFrame, n_queries: int, conservation_threshold: float):
        self.counts = counts
        self.n_queries = n_queries
        self.conservation_threshold = conservation_threshold

        if n_queries and not counts.columns.empty:
            self.max_frequency = counts.max(axis=1) / n_queries
            self.dominant_symbol = counts.idxmax(axis=1)
            variable = self.max_frequency < conservation_threshold
            self.variable_sites: Tuple[int, ...] = tuple(int(i) for i in counts.index[variable.values])
        else:
            self.max_frequency = pd.Series(np.nan, index=counts.index, dtype=float)
            self.dominant_symbol = pd.Series(None, index=counts.index, dtype=object)
            self.variable_sites = ()
        self._variable = frozenset(self.variable_sites)

    @property
    def length(self) -> int:
        return len(self.counts.index)

    @property
    def frequencies(self) -> pd.DataFrame:
        """Counts divided by the number of queries; each row sums to 1."""
        if not self.n_queries:
            return self.counts.astype(float)
        return self.counts / self.n_queries

    def is_variable(self, site: int) -> bool:
        return site in self._variable

    def is_conserved(self, site: int) -> bool:
        return not self.is_variable(site)

    def site_table(self, site: int) -> pd.Series:
        """Non-zero counts at one site, keyed by symbol."""
        row = self.counts.loc[site]
        return row[row > 0]

    def to_frame(self) -> pd.DataFrame:
        """One row per site, with 1-based positions, for reporting."""
        frame = pd.DataFrame({
            'position': self.counts.index + 1,
            'dominant_symbol': self.dominant_symbol.values,
            'max_frequency': self.max_frequency.values,
            'depth': self.counts.sum(axis=1).values,
            'n_symbols': (self.counts > 0).sum(axis=1).values,
            'variable': [self.is_variable(i) for i in self.counts.index],
        })
        return frame


class SiteFrequencyAnalyzer:
    """Tallies symbols per alignment column and classifies columns as conserved or variable."""

    def __init__(self, conservation_threshold: float = 0.97):
        check_fraction("conservation_threshold", conservation_threshold)
        self.conservation_threshold = float(conservation_threshold)

    def analyze(self, alignment: Alignment) -> SiteFrequencies:
        counts = count_symbols([q.symbols for q in alignment.queries], alignment.length)
        frequencies = SiteFrequencies(counts, alignment.n_queries, self.conservation_threshold)

        for site in frequencies.variable_sites:
            logger.debug(
                f"{site + 1:04d} / {frequencies.dominant_symbol[site]}: "
                f"{frequencies.max_frequency[site]:.4f} ({alignment.n_queries})"
            )
        logger.info(
            f"{len(frequencies.variable_sites)} of {alignment.length} sites are variable "
            f"at conservation threshold {self.conservation_threshold}"
        )
        return frequencies


def count_symbols(sequences: List[str], length: int) -> pd.DataFrame:
    """
    Count symbol occurrences per column.

    Returns a DataFrame indexed by 0-based site with one column per observed
    symbol, ordered by symbol code.
    """
    index = pd.RangeIndex(length, name='site')
    if not sequences:
        return pd.DataFrame(index=index)

    matrix = encode(sequences, length)
    codes = np.unique(matrix)
    counts = np.stack([(matrix == code).sum(axis=0) for code in codes], axis=1)
    return pd.DataFrame(counts, index=index, columns=[chr(code) for code in codes])


def encode(sequences: List[str], length: int) -> np.ndarray:
    """Encode equal-length ASCII sequences as a (queries x length) uint8 matrix."""
    buffer = "".join(sequences).encode('ascii')
    return np.frombuffer(buffer, dtype=np.uint8).reshape(len(sequences), length)
