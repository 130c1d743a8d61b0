# convergraph/__init__.py
"""
convergraph: mutation co-occurrence graphs for finding convergently evolved
shared substitutions in aligned amino-acid sequences.
"""

__version__ = "0.1.0"

from .config import ConvergraphConfig
from .convergraph import Convergraph, PipelineResult, run_convergraph_analysis
from .exceptions import (
    ConvergraphError,
    GraphStateError,
    InvalidParameterError,
    LengthMismatchError,
    MalformedRecordError,
)
