from typing import NamedTuple, Optional, Tuple

from formatbench.schema import LINE_ITEM_COLUMNS, Column, column


class Scenario(NamedTuple):
    """A named column projection.

    `columns` is the projection requested from a reader, in result order.
    `read_positions` lists the result positions that are aggregated; when it
    is None every projected position is read.
    """

    name: str
    columns: Tuple[Column, ...]
    read_positions: Optional[Tuple[int, ...]] = None

    @property
    def column_indexes(self):
        return tuple(col.ordinal for col in self.columns)

    def positions(self):
        if self.read_positions is None:
            return tuple(range(len(self.columns)))
        return self.read_positions


def _columns(*names):
    return tuple(column(name) for name in names)


BIGINT = Scenario("bigint", _columns("orderkey"))
DOUBLE = Scenario("double", _columns("extendedprice"))
VARCHAR = Scenario("varchar", _columns("shipinstruct"))
TPCH_6 = Scenario(
    "tpch6", _columns("quantity", "extendedprice", "discount", "shipdate")
)
TPCH_1 = Scenario(
    "tpch1",
    _columns(
        "quantity",
        "extendedprice",
        "discount",
        "tax",
        "returnflag",
        "linestatus",
        "shipdate",
    ),
)
ALL = Scenario("all", LINE_ITEM_COLUMNS)
# Pays for decoding every column but only sums the first.
LOAD_ALL_READ_ONE = Scenario("one (load all)", LINE_ITEM_COLUMNS, read_positions=(0,))

SCENARIOS = (BIGINT, DOUBLE, VARCHAR, TPCH_6, TPCH_1, ALL, LOAD_ALL_READ_ONE)


def scenarios():
    return SCENARIOS


def scenario(name: str) -> Scenario:
    for candidate in SCENARIOS:
        if candidate.name == name:
            return candidate
    raise ValueError(f"Unknown scenario: {name}")
