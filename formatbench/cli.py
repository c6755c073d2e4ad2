import logging
from contextlib import closing

from formatbench.config import BenchmarkConfig, parse_config
from formatbench.datagen import RandomLineItems, TpchLineItems
from formatbench.driver import run


def make_rows(config: BenchmarkConfig):
    if config.generator == "tpch":
        return TpchLineItems(config.scale_factor)
    return RandomLineItems(config.num_rows, seed=config.seed)


def main(argv=None):
    config = parse_config(argv)

    if config.verbose:
        logging.basicConfig(level=logging.INFO)

    with closing(make_rows(config)) as rows:
        run(config, rows)
