import sys
import time

from formatbench.corpus import CorpusBuilder
from formatbench.matrix import iter_read_matrix, iter_write_matrix
from formatbench.report import Measurement, log_duration, size_to_str
from formatbench.splits import create_split


def _check_loop_count(loop_count):
    if loop_count <= 0:
        raise ValueError(f"loop count must be positive, got {loop_count}")


def benchmark_write(encodings, loop_count, compressions, corpus: CorpusBuilder, out=None):
    """Time `loop_count` full corpus writes per (encoding, compression)."""
    _check_loop_count(loop_count)
    out = out or sys.stdout
    measurements = []

    print("write", file=out)
    for cell in iter_write_matrix(encodings, compressions):
        size = None
        start = time.perf_counter_ns()
        for _ in range(loop_count):
            size = corpus.write(cell.encoding, cell.compression)
        elapsed = time.perf_counter_ns() - start

        measurement = Measurement(cell.label, cell.compression, elapsed, loop_count, size_to_str(size))
        log_duration(measurement, out)
        measurements.append(measurement)
    print(file=out)
    return measurements


def benchmark_read(
    encodings,
    loop_count,
    compressions,
    scenarios,
    corpus: CorpusBuilder,
    out=None,
    config=None,
):
    """Time `loop_count` full drains of every read matrix cell.

    The corpus files must already exist; see CorpusBuilder.ensure_all.
    """
    _check_loop_count(loop_count)
    out = out or sys.stdout
    measurements = []

    current_scenario = None
    for cell in iter_read_matrix(encodings, compressions, scenarios):
        if cell.scenario is not current_scenario:
            if current_scenario is not None:
                print(file=out)
            print(cell.scenario.name, file=out)
            current_scenario = cell.scenario

        path = corpus.file_for(cell.encoding, cell.compression)
        result = None
        start = time.perf_counter_ns()
        for _ in range(loop_count):
            split = create_split(path, cell.encoding, cell.scenario)
            result = cell.strategy.drain(split, cell.scenario, config)
        elapsed = time.perf_counter_ns() - start

        measurement = Measurement(cell.label, cell.compression, elapsed, loop_count, result.value)
        log_duration(measurement, out)
        measurements.append(measurement)

    if current_scenario is not None:
        print(file=out)
    return measurements


def run(config, rows, out=None):
    """Run every enabled phase once per entry of `config.read_loops`."""
    out = out or sys.stdout
    encodings = config.resolve_encodings()
    compressions = config.resolve_compressions()
    scenarios = config.resolve_scenarios()

    corpus = CorpusBuilder(config.data_dir, rows, dataset=config.dataset, progress=config.progress)
    if config.run_reads:
        corpus.ensure_all(encodings, compressions)

    measurements = []
    for run_index, read_loops in enumerate(config.read_loops):
        print(f"==== Run {run_index} ====", file=out)
        if config.run_writes:
            measurements += benchmark_write(encodings, config.write_loops, compressions, corpus, out)
        if config.run_reads:
            measurements += benchmark_read(encodings, read_loops, compressions, scenarios, corpus, out)
    return measurements
