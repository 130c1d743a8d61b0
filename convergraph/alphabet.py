# convergraph/alphabet.py
"""
Amino-acid alignment alphabet.

Letters are residues (``X`` is the unknown residue), ``*`` is a stop,
``-``, ``.`` and ``~`` are gaps and ``?`` marks an unknown position.
"""

from enum import Enum
from string import ascii_lowercase, ascii_uppercase

GAP_SYMBOLS = frozenset("-.~")
UNKNOWN_SYMBOLS = frozenset("X?")
MISSING_SYMBOLS = GAP_SYMBOLS | UNKNOWN_SYMBOLS
STOP_SYMBOL = "*"
COLLAPSED_MISSING = "-"

VALID_SYMBOLS = frozenset(ascii_uppercase) | GAP_SYMBOLS | UNKNOWN_SYMBOLS | {STOP_SYMBOL}

_ASCII_UPPER = str.maketrans(ascii_lowercase, ascii_uppercase)


class GapPolicy(str, Enum):
    """How gap and unknown symbols take part in substitution extraction."""

    INCLUDE = "include"    # ordinary symbols
    SKIP = "skip"          # missing data, never a substitution
    COLLAPSE = "collapse"  # one shared missing-data class

    @classmethod
    def choices(cls):
        return [policy.value for policy in cls]


def normalize(sequence: str) -> str:
    """Upper-case the ASCII letters of a raw sequence string; other characters are kept as-is."""
    return sequence.strip().translate(_ASCII_UPPER)


def invalid_positions(sequence: str):
    """Yield (index, symbol) for every symbol outside the alphabet."""
    for i, symbol in enumerate(sequence):
        if symbol not in VALID_SYMBOLS:
            yield i, symbol


def is_missing(symbol: str) -> bool:
    return symbol in MISSING_SYMBOLS


def collapse(symbol: str) -> str:
    return COLLAPSED_MISSING if symbol in MISSING_SYMBOLS else symbol
