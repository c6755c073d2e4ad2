from formatbench.cli import main, make_rows
from formatbench.config import parse_config
from formatbench.datagen import RandomLineItems


def test_make_rows_random():
    rows = make_rows(parse_config(["--generator", "random", "--num-rows", "10", "--seed", "4"]))

    assert isinstance(rows, RandomLineItems)
    assert (rows.num_rows, rows.seed) == (10, 4)


def test_main_runs_reads(tmp_path, capsys):
    main(
        [
            "--generator", "random",
            "--num-rows", "200",
            "--read-loops", "1",
            "--encoding", "parquet",
            "--compression", "snappy",
            "--scenario", "bigint",
            "--data-dir", str(tmp_path),
        ]
    )

    lines = capsys.readouterr().out.splitlines()
    assert lines[:2] == ["==== Run 0 ====", "bigint"]
    # 200 rows, four lines per order
    assert [line.split()[-1] for line in lines[2:5]] == ["5100"] * 3
    assert (tmp_path / "line_item.parquet.snappy").exists()


class RecordingRows(RandomLineItems):
    closed = False

    def close(self):
        self.closed = True


def test_main_closes_rows(tmp_path, monkeypatch, capsys):
    rows = RecordingRows(20)
    monkeypatch.setattr("formatbench.cli.make_rows", lambda config: rows)

    main(
        [
            "--read-loops", "1",
            "--encoding", "orc",
            "--compression", "uncompressed",
            "--scenario", "bigint",
            "--data-dir", str(tmp_path),
        ]
    )

    assert rows.closed
    assert capsys.readouterr().out.startswith("==== Run 0 ====")
