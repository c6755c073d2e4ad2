import argparse
import os
import pathlib
from dataclasses import dataclass, field
from typing import Tuple

from formatbench.compression import ENABLED_COMPRESSION, CompressionType
from formatbench.encodings import DATASET, ENCODINGS, encoding
from formatbench.scenarios import SCENARIOS, scenario

DATA_DIR_ENV = "FORMATBENCH_DATA_DIR"
GENERATORS = ("tpch", "random")


def default_data_dir() -> pathlib.Path:
    return pathlib.Path(os.environ.get(DATA_DIR_ENV, "target"))


@dataclass
class BenchmarkConfig:
    """What to benchmark and where the corpus lives.

    One run is executed per entry of `read_loops`; the entry is that run's
    read repeat count.
    """

    run_reads: bool = True
    run_writes: bool = False
    read_loops: Tuple[int, ...] = (2, 5)
    write_loops: int = 2
    compressions: Tuple[str, ...] = tuple(c.name for c in ENABLED_COMPRESSION)
    encodings: Tuple[str, ...] = tuple(e.name for e in ENCODINGS)
    scenarios: Tuple[str, ...] = tuple(s.name for s in SCENARIOS)
    data_dir: pathlib.Path = field(default_factory=default_data_dir)
    dataset: str = DATASET
    generator: str = "tpch"
    scale_factor: float = 0.01
    num_rows: int = 100_000
    seed: int = 0
    progress: bool = False
    verbose: bool = False

    def __post_init__(self):
        self.data_dir = pathlib.Path(self.data_dir)
        if not self.read_loops:
            raise ValueError("read_loops needs at least one entry")
        for loops in (*self.read_loops, self.write_loops):
            if loops <= 0:
                raise ValueError(f"loop count must be positive, got {loops}")
        if self.generator not in GENERATORS:
            raise ValueError(f"Unknown generator: {self.generator}")
        # Fail on unknown names now rather than after the corpus is written.
        self.resolve_compressions()
        self.resolve_encodings()
        self.resolve_scenarios()

    def resolve_compressions(self):
        return [CompressionType.from_name(name) for name in self.compressions]

    def resolve_encodings(self):
        return [encoding(name) for name in self.encodings]

    def resolve_scenarios(self):
        return [scenario(name) for name in self.scenarios]


def build_parser() -> argparse.ArgumentParser:
    defaults = BenchmarkConfig()
    parser = argparse.ArgumentParser(
        prog="formatbench",
        description="Benchmark columnar file format reads and writes.",
    )
    parser.add_argument(
        "--reads",
        action=argparse.BooleanOptionalAction,
        default=defaults.run_reads,
        help="Benchmark reads",
    )
    parser.add_argument(
        "--writes",
        action=argparse.BooleanOptionalAction,
        default=defaults.run_writes,
        help="Benchmark writes",
    )
    parser.add_argument(
        "--read-loops",
        type=int,
        nargs="+",
        default=list(defaults.read_loops),
        help="Read repeat count of each run; one run per value",
    )
    parser.add_argument("--write-loops", type=int, default=defaults.write_loops)
    parser.add_argument(
        "--compression",
        nargs="+",
        choices=[c.name for c in CompressionType],
        default=list(defaults.compressions),
    )
    parser.add_argument(
        "--encoding",
        nargs="+",
        choices=[e.name for e in ENCODINGS],
        default=list(defaults.encodings),
    )
    parser.add_argument(
        "--scenario",
        nargs="+",
        choices=[s.name for s in SCENARIOS],
        default=list(defaults.scenarios),
    )
    parser.add_argument(
        "--data-dir",
        type=pathlib.Path,
        default=defaults.data_dir,
        help=f"Corpus directory (default: ${DATA_DIR_ENV} or ./target)",
    )
    parser.add_argument("--dataset", default=defaults.dataset, help="Corpus file name prefix")
    parser.add_argument("--generator", choices=GENERATORS, default=defaults.generator)
    parser.add_argument(
        "--scale-factor",
        type=float,
        default=defaults.scale_factor,
        help="TPC-H scale factor for the tpch generator",
    )
    parser.add_argument(
        "--num-rows",
        type=int,
        default=defaults.num_rows,
        help="Row count for the random generator",
    )
    parser.add_argument("--seed", type=int, default=defaults.seed)
    parser.add_argument("--progress", action="store_true", help="Show corpus write progress")
    parser.add_argument("--verbose", action="store_true")
    return parser


def parse_config(argv=None) -> BenchmarkConfig:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return BenchmarkConfig(
            run_reads=args.reads,
            run_writes=args.writes,
            read_loops=tuple(args.read_loops),
            write_loops=args.write_loops,
            compressions=tuple(args.compression),
            encodings=tuple(args.encoding),
            scenarios=tuple(args.scenario),
            data_dir=args.data_dir,
            dataset=args.dataset,
            generator=args.generator,
            scale_factor=args.scale_factor,
            num_rows=args.num_rows,
            seed=args.seed,
            progress=args.progress,
            verbose=args.verbose,
        )
    except ValueError as exc:
        parser.error(str(exc))
