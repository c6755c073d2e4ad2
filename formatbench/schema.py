from typing import NamedTuple, Optional

import pyarrow as pa


class Column(NamedTuple):
    name: str
    type: str
    ordinal: int


class LineItem(NamedTuple):
    """One row of the TPC-H lineitem table, as written to every corpus file."""

    orderkey: Optional[int]
    partkey: Optional[int]
    suppkey: Optional[int]
    linenumber: Optional[int]
    quantity: Optional[int]
    extendedprice: Optional[float]
    discount: Optional[float]
    tax: Optional[float]
    returnflag: Optional[str]
    linestatus: Optional[str]
    shipdate: Optional[str]
    commitdate: Optional[str]
    receiptdate: Optional[str]
    shipinstruct: Optional[str]
    shipmode: Optional[str]
    comment: Optional[str]


_COLUMN_TYPES = ["bigint"] * 5 + ["double"] * 3 + ["string"] * 8

LINE_ITEM_COLUMNS = tuple(
    Column(name, type_name, ordinal)
    for ordinal, (name, type_name) in enumerate(zip(LineItem._fields, _COLUMN_TYPES))
)

_ARROW_TYPES = {
    "bigint": pa.int64(),
    "double": pa.float64(),
    "string": pa.string(),
}


def arrow_type(type_name: str) -> pa.DataType:
    try:
        return _ARROW_TYPES[type_name]
    except KeyError:
        raise ValueError(f"Unsupported type {type_name}") from None


def column(name: str) -> Column:
    for col in LINE_ITEM_COLUMNS:
        if col.name == name:
            return col
    raise ValueError(f"Unknown lineitem column: {name}")


def table_properties(columns=LINE_ITEM_COLUMNS):
    """Hive-style table properties describing the stored columns."""
    return {
        "columns": ",".join(col.name for col in columns),
        "columns.types": ":".join(col.type for col in columns),
    }


def columns_from_properties(properties):
    names = properties["columns"].split(",")
    types = properties["columns.types"].split(":")
    if len(names) != len(types):
        raise ValueError(
            f"Table properties list {len(names)} columns but {len(types)} types"
        )
    return tuple(
        Column(name, type_name, ordinal)
        for ordinal, (name, type_name) in enumerate(zip(names, types))
    )


def arrow_schema(columns) -> pa.Schema:
    return pa.schema([pa.field(col.name, arrow_type(col.type)) for col in columns])
