# convergraph/exceptions.py
"""
Error kinds raised by the convergraph pipeline.
Every stage raises eagerly and the pipeline terminates on the first error;
there is no partial-result recovery.
"""

from typing import Optional


class ConvergraphError(Exception):
    """Base class for all pipeline errors."""


class MalformedRecordError(ConvergraphError):
    """A reference or query record is empty, truncated or holds an invalid symbol."""

    def __init__(self, record: str, reason: str, line: Optional[int] = None):
        self.record = record
        self.reason = reason
        self.line = line
        where = f" (line {line})" if line is not None else ""
        super().__init__(f"Malformed record '{record}'{where}: {reason}")


class LengthMismatchError(ConvergraphError):
    """A sequence length disagrees with the alignment length set by the reference."""

    def __init__(self, record: str, expected: int, observed: int):
        self.record = record
        self.expected = expected
        self.observed = observed
        super().__init__(
            f"Record '{record}' has length {observed}, expected alignment length {expected}"
        )


class InvalidParameterError(ConvergraphError, ValueError):
    """A configuration parameter lies outside its valid range."""

    def __init__(self, parameter: str, value, expectation: str):
        self.parameter = parameter
        self.value = value
        super().__init__(f"Invalid value for '{parameter}': {value!r} ({expectation})")


class GraphStateError(ConvergraphError, RuntimeError):
    """An operation was attempted in the wrong graph lifecycle state."""
