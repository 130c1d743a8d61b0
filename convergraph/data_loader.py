# convergraph/data_loader.py
"""
Loading of the reference sequence and the aligned query records.

The reference is a plain sequence file or a single-record FASTA. Queries are
tab-delimited lines holding one aligned sequence each, read from a file or
from standard input; compressed input is decompressed transparently.
"""

import csv
import io
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterable, List, Optional, Union

import pandas as pd
from Bio import SeqIO

from .alphabet import invalid_positions, normalize
from .config import ConvergraphConfig
from .exceptions import InvalidParameterError, LengthMismatchError, MalformedRecordError

logger = logging.getLogger(__name__)

DEFAULT_SEQUENCE_COLUMN = "aa_aln"
STDIN_MARKER = "-"

# magic bytes -> pandas compression method
MAGIC_NUMBERS = (
    (b"\x1f\x8b", "gzip"),
    (b"BZh", "bz2"),
    (b"\xfd7zXZ\x00", "xz"),
)


@dataclass(frozen=True)
class AlignedSequence:
    """One aligned record: a name and its column-aligned symbols."""
    name: str
    symbols: str
    line: Optional[int] = field(default=None, compare=False)

    def __len__(self) -> int:
        return len(self.symbols)


@dataclass
class Alignment:
    """The reference and the ordered queries, all of one length."""
    reference: AlignedSequence
    queries: List[AlignedSequence]

    @property
    def length(self) -> int:
        return len(self.reference)

    @property
    def n_queries(self) -> int:
        return len(self.queries)


def build_alignment(reference: AlignedSequence, queries: Iterable[AlignedSequence]) -> Alignment:
    """
    Validate raw records and assemble them into an Alignment.

    Symbols are upper-cased. The reference length fixes the alignment length;
    every query must match it.

    Raises:
        MalformedRecordError: A record is empty or holds a symbol outside the alphabet.
        LengthMismatchError: A query length differs from the reference length.
    """
    reference = _checked_record(reference)
    length = len(reference)

    checked = []
    for query in queries:
        query = _checked_record(query)
        if len(query) != length:
            raise LengthMismatchError(query.name, length, len(query))
        checked.append(query)

    return Alignment(reference=reference, queries=checked)


def _checked_record(record: AlignedSequence) -> AlignedSequence:
    symbols = normalize(record.symbols)
    if not symbols:
        raise MalformedRecordError(record.name, "empty sequence", record.line)
    for i, symbol in invalid_positions(symbols):
        raise MalformedRecordError(record.name, f"invalid symbol {symbol!r} at column {i + 1}",
                                   record.line)
    return AlignedSequence(record.name, symbols, record.line)


class DataLoader:
    """Handles loading of the reference and query records."""

    def __init__(self, config: Optional[ConvergraphConfig] = None):
        self.config = config or ConvergraphConfig()

    def load_alignment(self, reference_path: str,
                       query_source: Union[str, BinaryIO, None] = None) -> Alignment:
        """Read both inputs to completion and validate them as one alignment."""
        reference = self.load_reference(reference_path)
        queries = self.load_queries(query_source)
        alignment = build_alignment(reference, queries)
        logger.info(f"Data are {alignment.n_queries} x {alignment.length}")
        if not alignment.n_queries:
            logger.warning("No query records found; the graph will be empty.")
        return alignment

    def load_reference(self, file_path: str) -> AlignedSequence:
        """
        Load the reference sequence from a raw sequence file or a single-record FASTA.
        """
        path = Path(file_path)
        logger.info(f"Loading reference from: {path}")
        try:
            text = path.read_text()
        except UnicodeDecodeError as e:
            raise MalformedRecordError(str(path), _undecodable(e)) from e

        if text.lstrip().startswith('>'):
            try:
                record = SeqIO.read(io.StringIO(text), "fasta")
            except ValueError as e:
                raise MalformedRecordError(str(path), f"expected a single FASTA record ({e})") from e
            return AlignedSequence(record.id, str(record.seq), 1)

        return AlignedSequence(path.stem, "".join(text.split()), 1)

    def load_queries(self, source: Union[str, BinaryIO, None] = None) -> List[AlignedSequence]:
        """
        Load query records from a path, a binary stream, or standard input.

        ``None`` and ``"-"`` both mean standard input.
        """
        table = self._read_query_table(source)
        if table.empty:
            return []

        sequence_column = self._sequence_column(table)
        other_columns = [c for c in table.columns if c != sequence_column]
        name_column = other_columns[0] if other_columns else None
        first_line = 2 if self.config.query_has_header else 1

        records = []
        for offset, row in enumerate(table.itertuples(index=False, name=None)):
            values = dict(zip(table.columns, row))
            line = first_line + offset
            name = values.get(name_column) if name_column is not None else None
            if pd.isna(name) or not name:
                name = f"query_{offset + 1}"

            sequence = values[sequence_column]
            if all(pd.isna(v) or v == "" for v in row):
                raise MalformedRecordError(name, "empty line", line)
            if pd.isna(sequence) or sequence == "":
                raise MalformedRecordError(name, "missing sequence field", line)
            records.append(AlignedSequence(str(name), sequence, line))

        logger.info(f"Loaded {len(records)} query records.")
        return records

    def _read_query_table(self, source) -> pd.DataFrame:
        if source is None or source == STDIN_MARKER:
            logger.info("Reading query records from standard input")
            handle, compression = _sniffed_buffer(sys.stdin.buffer)
        elif hasattr(source, "read"):
            handle, compression = _sniffed_buffer(source)
        else:
            path = Path(source)
            logger.info(f"Loading query records from: {path}")
            handle, compression = path, "infer"

        try:
            return pd.read_csv(
                handle,
                sep='\t',
                header=0 if self.config.query_has_header else None,
                dtype=str,
                na_filter=False,
                quoting=csv.QUOTE_NONE,
                skip_blank_lines=False,
                compression=compression,
            )
        except pd.errors.EmptyDataError:
            return pd.DataFrame()
        except pd.errors.ParserError as e:
            raise MalformedRecordError("query input", str(e).strip()) from e
        except UnicodeDecodeError as e:
            raise MalformedRecordError("query input", _undecodable(e)) from e

    def _sequence_column(self, table: pd.DataFrame):
        column = self.config.sequence_column
        if isinstance(column, int):
            if not -table.shape[1] <= column < table.shape[1]:
                raise InvalidParameterError("sequence_column", column,
                                            f"input has {table.shape[1]} columns")
            return table.columns[column]
        if column is not None:
            if column not in table.columns:
                raise InvalidParameterError("sequence_column", column,
                                            f"not among header columns {list(table.columns)}")
            return column
        if self.config.query_has_header and DEFAULT_SEQUENCE_COLUMN in table.columns:
            return DEFAULT_SEQUENCE_COLUMN
        return table.columns[-1]


def _undecodable(error: UnicodeDecodeError) -> str:
    byte = error.object[error.start:error.start + 1]
    return f"invalid byte {byte!r} at offset {error.start}"


def _sniffed_buffer(stream: BinaryIO):
    """Read a binary stream into memory and detect its compression from magic bytes."""
    data = stream.read()
    if isinstance(data, str):
        data = data.encode()
    for magic, method in MAGIC_NUMBERS:
        if data.startswith(magic):
            logger.debug(f"Detected {method}-compressed input stream")
            return io.BytesIO(data), method
    return io.BytesIO(data), None
