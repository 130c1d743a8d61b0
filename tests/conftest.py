import pytest

from convergraph.config import ConvergraphConfig
from convergraph.data_loader import AlignedSequence, build_alignment


@pytest.fixture
def make_alignment():
    """Build a validated Alignment from a reference string and query strings."""
    def _make(reference, queries):
        return build_alignment(
            AlignedSequence("reference", reference),
            [AlignedSequence(f"query_{i + 1}", q) for i, q in enumerate(queries)],
        )
    return _make


@pytest.fixture
def permissive_config():
    """Keeps every edge and every variable site."""
    return ConvergraphConfig(
        conservation_threshold=0.97,
        minimum_cooccurrence_support=1,
        minimum_cooccurrence_frequency=0.0,
    )


@pytest.fixture
def write_inputs(tmp_path):
    """Write a reference file and a query file, returning both paths."""
    def _write(reference, query_lines, header=None, query_name="queries.tsv"):
        ref_path = tmp_path / "reference.txt"
        ref_path.write_text(reference + "\n")
        query_path = tmp_path / query_name
        lines = ([header] if header else []) + list(query_lines)
        query_path.write_text("\n".join(lines) + "\n")
        return str(ref_path), str(query_path)
    return _write


# A small alignment with several co-occurring substitutions at variable sites.
CLUSTERED_REFERENCE = "MKTAYIAKQR"
CLUSTERED_QUERIES = [
    "MKTAYIAKQR",
    "MKSAYIVKQR",
    "MKSAYIVKQR",
    "MKSAFIVKQR",
    "MKSAFIVKHR",
    "MKTAFIAKHR",
    "MKTAFIAKHR",
    "MKSAYIVKHR",
    "MKTAYIAKQR",
    "MKSAFIVKQR",
]


@pytest.fixture
def clustered(make_alignment):
    return make_alignment(CLUSTERED_REFERENCE, CLUSTERED_QUERIES)
