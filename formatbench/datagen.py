import abc
import contextlib
import logging
import time

import duckdb
import numpy as np

from formatbench.schema import LineItem

BATCH_ROWS = 10 * 1024


@contextlib.contextmanager
def time_log():
    start = time.time()
    yield
    end = time.time()
    logging.info("Finished in: %.1fs", end - start)


class LineItemGenerator(abc.ABC):
    """A finite, restartable sequence of lineitem rows.

    Every call to `iter()` starts again from the first row and yields the
    same rows in the same order.
    """

    @abc.abstractmethod
    def __iter__(self):
        pass

    def close(self):
        pass


class TpchLineItems(LineItemGenerator):
    """TPC-H lineitem rows generated by DuckDB's tpch extension."""

    QUERY = """
        SELECT
            l_orderkey::BIGINT,
            l_partkey::BIGINT,
            l_suppkey::BIGINT,
            l_linenumber::BIGINT,
            l_quantity::BIGINT,
            l_extendedprice::DOUBLE,
            l_discount::DOUBLE,
            l_tax::DOUBLE,
            l_returnflag,
            l_linestatus,
            l_shipdate::VARCHAR,
            l_commitdate::VARCHAR,
            l_receiptdate::VARCHAR,
            l_shipinstruct,
            l_shipmode,
            l_comment
        FROM lineitem
        ORDER BY l_orderkey, l_linenumber
    """

    def __init__(self, scale_factor=0.01, batch_rows=BATCH_ROWS):
        self.scale_factor = scale_factor
        self.batch_rows = batch_rows
        self.connection = duckdb.connect()
        try:
            self.connection.sql("INSTALL tpch")
            self.connection.sql("LOAD tpch")

            logging.info("Generating TPCH dataset (sf = %s)", scale_factor)
            with time_log():
                self.connection.sql(f"CALL dbgen(sf = {float(scale_factor)})")
        except BaseException:
            self.connection.close()
            raise

    def __iter__(self):
        reader = self.connection.sql(self.QUERY).fetch_arrow_reader(self.batch_rows)
        for batch in reader:
            columns = [array.to_pylist() for array in batch.columns]
            for values in zip(*columns):
                yield LineItem(*values)

    def close(self):
        self.connection.close()


RETURN_FLAGS = ["A", "N", "R"]
LINE_STATUSES = ["F", "O"]
SHIP_INSTRUCTIONS = ["COLLECT COD", "DELIVER IN PERSON", "NONE", "TAKE BACK RETURN"]
SHIP_MODES = ["AIR", "FOB", "MAIL", "RAIL", "REG AIR", "SHIP", "TRUCK"]
COMMENT_WORDS = [
    "carefully", "quickly", "blithely", "final", "regular", "express", "ironic",
    "pending", "deposits", "packages", "requests", "accounts", "instructions",
    "foxes", "theodolites", "pinto", "beans", "sleep", "haggle", "nag", "wake",
]
START_DATE = np.datetime64("1992-01-01")


class RandomLineItems(LineItemGenerator):
    """Lineitem-shaped rows drawn from a seeded numpy generator.

    Needs no DuckDB extension, so it also works offline.
    """

    def __init__(self, num_rows, seed=0, batch_rows=BATCH_ROWS):
        if num_rows < 0:
            raise ValueError(f"num_rows must not be negative, got {num_rows}")
        self.num_rows = num_rows
        self.seed = seed
        self.batch_rows = batch_rows

    def __iter__(self):
        rng = np.random.default_rng(self.seed)
        for offset in range(0, self.num_rows, self.batch_rows):
            size = min(self.batch_rows, self.num_rows - offset)
            yield from self._batch(rng, offset, size)

    def _batch(self, rng, offset, size):
        orderkey = np.arange(offset, offset + size) // 4 + 1
        linenumber = np.arange(offset, offset + size) % 4 + 1
        quantity = rng.integers(1, 51, size)
        extendedprice = np.round(quantity * rng.uniform(900.0, 2100.0, size), 2)
        shipdate = START_DATE + rng.integers(0, 2500, size)
        commitdate = shipdate + rng.integers(-60, 60, size)
        receiptdate = shipdate + rng.integers(1, 31, size)
        comment = rng.choice(COMMENT_WORDS, size)
        for _ in range(3):
            comment = np.char.add(np.char.add(comment, " "), rng.choice(COMMENT_WORDS, size))

        columns = [
            orderkey,
            rng.integers(1, 200_001, size),
            rng.integers(1, 10_001, size),
            linenumber,
            quantity,
            extendedprice,
            rng.integers(0, 11, size) / 100,
            rng.integers(0, 9, size) / 100,
            rng.choice(RETURN_FLAGS, size),
            rng.choice(LINE_STATUSES, size),
            shipdate.astype(str),
            commitdate.astype(str),
            receiptdate.astype(str),
            rng.choice(SHIP_INSTRUCTIONS, size),
            rng.choice(SHIP_MODES, size),
            comment,
        ]
        # tolist() turns numpy scalars into plain ints, floats and strs
        for values in zip(*(col.tolist() for col in columns)):
            yield LineItem(*values)
