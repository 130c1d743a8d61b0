# convergraph/substitutions.py
"""
Substitution extraction relative to the reference sequence.
"""

import logging
from typing import FrozenSet, List, NamedTuple

import pandas as pd

from .alphabet import GapPolicy, collapse, is_missing
from .data_loader import Alignment, AlignedSequence
from .site_analyzer import SiteFrequencies

logger = logging.getLogger(__name__)


class Substitution(NamedTuple):
    """A (site, ancestral symbol, derived symbol) triple; site is 0-based."""
    site: int
    ancestral: str
    derived: str

    @property
    def position(self) -> int:
        return self.site + 1

    @property
    def label(self) -> str:
        return f"{self.ancestral}{self.position}{self.derived}"

    def __str__(self) -> str:
        return self.label


SubstitutionSet = FrozenSet[Substitution]


class SubstitutionExtractor:
    """
    Compares each query to the reference at the variable sites.

    Gap and unknown symbols follow the configured GapPolicy:
    'include' treats them as ordinary symbols, 'skip' never emits a
    substitution where either side is missing, and 'collapse' folds every
    gap/unknown symbol into one class before comparing.
    """

    def __init__(self, site_frequencies: SiteFrequencies, gap_policy=GapPolicy.INCLUDE):
        self.site_frequencies = site_frequencies
        self.gap_policy = GapPolicy(gap_policy)

    def extract(self, alignment: Alignment) -> List[SubstitutionSet]:
        """Return one substitution set per query, in input order."""
        reference = alignment.reference.symbols
        sets = [self.extract_query(reference, query) for query in alignment.queries]
        n_carriers = sum(1 for s in sets if s)
        logger.info(f"Extracted substitutions for {len(sets)} queries "
                    f"({n_carriers} carry at least one substitution)")
        return sets

    def extract_query(self, reference: str, query: AlignedSequence) -> SubstitutionSet:
        substitutions = set()
        for site in self.site_frequencies.variable_sites:
            ancestral, derived = reference[site], query.symbols[site]
            if self.gap_policy is GapPolicy.SKIP and (is_missing(ancestral) or is_missing(derived)):
                continue
            if self.gap_policy is GapPolicy.COLLAPSE:
                ancestral, derived = collapse(ancestral), collapse(derived)
            if ancestral != derived:
                substitutions.add(Substitution(site, ancestral, derived))
        return frozenset(substitutions)


def substitution_table(alignment: Alignment, substitution_sets: List[SubstitutionSet]) -> pd.DataFrame:
    """Long-format table of (query, position, ancestral, derived, label) for reporting."""
    rows = []
    for query, substitutions in zip(alignment.queries, substitution_sets):
        for sub in sorted(substitutions):
            rows.append({
                'query': query.name,
                'position': sub.position,
                'ancestral': sub.ancestral,
                'derived': sub.derived,
                'label': sub.label,
            })
    return pd.DataFrame(rows, columns=['query', 'position', 'ancestral', 'derived', 'label'])
