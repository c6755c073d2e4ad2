import pytest

from formatbench.compression import ENABLED_COMPRESSION
from formatbench.corpus import CorpusBuilder
from formatbench.datagen import RandomLineItems
from formatbench.encodings import ENCODINGS

# Small batches so every parquet and arrow file has several row groups.
SMALL_BATCHES = {"write.batch.rows": "300"}


@pytest.fixture(scope="session")
def random_rows():
    return list(RandomLineItems(1000, seed=7))


@pytest.fixture(scope="session")
def random_corpus(tmp_path_factory, random_rows):
    """Every encoding x compression written once for the whole session."""
    corpus = CorpusBuilder(
        tmp_path_factory.mktemp("corpus"), random_rows, extra_config=SMALL_BATCHES
    )
    corpus.ensure_all(ENCODINGS, ENABLED_COMPRESSION)
    return corpus


@pytest.fixture
def write_rows(tmp_path):
    """Write `rows` for one encoding and compression; return the corpus file."""

    def write(rows, encoding, compression):
        corpus = CorpusBuilder(tmp_path / "data", rows)
        path, _ = corpus.ensure(encoding, compression)
        return path

    return write
