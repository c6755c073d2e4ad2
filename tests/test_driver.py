import io
import os

import pytest

from formatbench.compression import CompressionType
from formatbench.config import BenchmarkConfig
from formatbench.corpus import CorpusBuilder
from formatbench.driver import benchmark_read, benchmark_write, run
from formatbench.encodings import encoding
from formatbench.scenarios import BIGINT, TPCH_6, VARCHAR

from lineitems import expected_value, line_item

ROWS = [line_item(orderkey=i, shipinstruct="NONE" if i % 2 else "COLLECT COD") for i in range(1, 51)]


def _lines(out):
    return out.getvalue().split("\n")


def test_read_output_layout(random_corpus):
    out = io.StringIO()
    compressions = [CompressionType.uncompressed, CompressionType.snappy]

    measurements = benchmark_read(
        [encoding("parquet")], 1, compressions, [BIGINT, VARCHAR], random_corpus, out
    )

    lines = _lines(out)
    assert lines[0] == "bigint"
    assert lines[1].startswith("parquet custom uncompressed ")
    assert lines[2].startswith("parquet custom snappy ")
    assert lines[7] == ""
    assert lines[8] == "varchar"
    assert lines[15:] == ["", ""]
    assert len(measurements) == 12
    assert [m.label for m in measurements[:3]] == ["parquet custom", "parquet custom", "parquet generic"]


def test_read_values_match_rows(random_corpus, random_rows):
    out = io.StringIO()

    measurements = benchmark_read(
        [encoding("orc-dict")], 2, [CompressionType.gzip], [TPCH_6], random_corpus, out
    )

    expected = expected_value(random_rows, TPCH_6)
    assert [m.value for m in measurements] == [pytest.approx(expected, rel=1e-9)] * 3
    assert all(m.loop_count == 2 for m in measurements)


def test_scenarios_are_independent(random_corpus):
    enc = encoding("arrow")
    compressions = [CompressionType.uncompressed]

    both = benchmark_read([enc], 1, compressions, [BIGINT, VARCHAR], random_corpus, io.StringIO())
    alone = benchmark_read([enc], 1, compressions, [VARCHAR], random_corpus, io.StringIO())

    assert [m.value for m in both[3:]] == [m.value for m in alone]


def test_read_requires_corpus(tmp_path):
    corpus = CorpusBuilder(tmp_path, ROWS)
    corpus.ensure(encoding("parquet"), CompressionType.uncompressed)
    out = io.StringIO()

    with pytest.raises(FileNotFoundError):
        benchmark_read(
            [encoding("parquet"), encoding("orc")],
            1,
            [CompressionType.uncompressed],
            [BIGINT],
            corpus,
            out,
        )

    lines = _lines(out)
    assert lines[0] == "bigint"
    assert len([line for line in lines if line.startswith("parquet ")]) == 3


def test_write_output(tmp_path):
    corpus = CorpusBuilder(tmp_path, ROWS)
    out = io.StringIO()

    measurements = benchmark_write(
        [encoding("orc"), encoding("arrow")], 2, [CompressionType.snappy], corpus, out
    )

    lines = _lines(out)
    assert lines[0] == "write"
    assert lines[1].startswith("orc snappy ")
    assert lines[2].startswith("arrow snappy ")
    assert lines[3:] == ["", ""]
    assert corpus.files_written == 4
    assert measurements[0].value.endswith("B")


@pytest.mark.parametrize("loop_count", [0, -1])
def test_loop_count_must_be_positive(tmp_path, loop_count):
    corpus = CorpusBuilder(tmp_path, ROWS)

    with pytest.raises(ValueError, match="loop count"):
        benchmark_write([encoding("orc")], loop_count, [CompressionType.gzip], corpus, io.StringIO())
    with pytest.raises(ValueError, match="loop count"):
        benchmark_read([encoding("orc")], loop_count, [CompressionType.gzip], [BIGINT], corpus, io.StringIO())
    assert list(tmp_path.iterdir()) == []


def test_run_reuses_corpus(tmp_path):
    config = BenchmarkConfig(
        read_loops=(1, 2),
        compressions=("uncompressed",),
        encodings=("parquet", "arrow"),
        scenarios=("bigint",),
        data_dir=tmp_path,
    )
    out = io.StringIO()

    measurements = run(config, ROWS, out)

    lines = _lines(out)
    assert lines[0] == "==== Run 0 ===="
    assert "==== Run 1 ====" in lines
    assert lines.count("bigint") == 2
    assert len(measurements) == 12
    assert {m.value for m in measurements} == {sum(range(1, 51))}

    mtimes = {p.name: os.stat(p).st_mtime_ns for p in tmp_path.iterdir()}
    assert sorted(mtimes) == ["line_item.arrow", "line_item.parquet"]
    run(config, ROWS, io.StringIO())
    assert {p.name: os.stat(p).st_mtime_ns for p in tmp_path.iterdir()} == mtimes


def test_run_writes_only(tmp_path):
    config = BenchmarkConfig(
        run_reads=False,
        run_writes=True,
        read_loops=(1,),
        write_loops=1,
        compressions=("gzip",),
        encodings=("orc",),
        data_dir=tmp_path,
    )
    out = io.StringIO()

    measurements = run(config, ROWS, out)

    assert _lines(out)[:2] == ["==== Run 0 ====", "write"]
    assert len(measurements) == 1
    assert (tmp_path / "line_item.orc.gz").exists()
