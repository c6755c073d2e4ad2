from typing import NamedTuple, Tuple

from formatbench.schema import arrow_schema, columns_from_properties

_PYTHON_TYPES = {
    "bigint": (int,),
    "double": (float, int),
    "string": (str,),
}


class RowShape(NamedTuple):
    """Describes how to pull named fields out of a row object."""

    field_names: Tuple[str, ...]

    @classmethod
    def of(cls, row_type):
        return cls(tuple(row_type._fields))

    def get(self, row, name):
        return getattr(row, name)


class ColumnarSerDe:
    """Turns rows into records laid out in the stored column order."""

    def __init__(self, name="columnar"):
        self.name = name
        self.columns = None
        self.schema = None

    def initialize(self, config, table_properties):
        columns = columns_from_properties(table_properties)
        for col in columns:
            if col.type not in _PYTHON_TYPES:
                raise ValueError(f"Unsupported type {col.type}")
        self.columns = columns
        self.schema = arrow_schema(columns)

    def serialize(self, row, shape: RowShape) -> tuple:
        if self.columns is None:
            raise RuntimeError("SerDe not initialized. Call initialize() first.")

        record = []
        for col in self.columns:
            if col.name not in shape.field_names:
                raise ValueError(f"Row has no field for column {col.name}")
            value = shape.get(row, col.name)
            if value is not None and (
                isinstance(value, bool) or not isinstance(value, _PYTHON_TYPES[col.type])
            ):
                raise ValueError(
                    f"Column {col.name} is {col.type} but got {type(value).__name__}"
                )
            record.append(value)
        return tuple(record)
