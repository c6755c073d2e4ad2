"""The two ways of draining a split: a row cursor and a columnar page source.

Both strategies aggregate the same thing, so for one corpus file and one
scenario they must agree (up to floating point summation order):

* bigint and double values add their value,
* strings add their UTF-8 byte length,
* nulls add nothing.
"""
from contextlib import closing
from dataclasses import dataclass
from typing import NamedTuple, Union

import pyarrow.compute as pc

from formatbench.readers import PageSourceProvider, RecordCursorProvider


class TrialResult(NamedTuple):
    value: Union[int, float]
    positions: int


_CURSOR_READERS = {
    "bigint": lambda cursor, field: cursor.get_long(field),
    "double": lambda cursor, field: cursor.get_double(field),
    "string": lambda cursor, field: len(cursor.get_slice(field)),
}


def _cursor_reader(col):
    try:
        return _CURSOR_READERS[col.type]
    except KeyError:
        raise ValueError(f"Unsupported type {col.type}") from None


def block_sum(block, type_name):
    if type_name == "string":
        block = pc.binary_length(block)
    elif type_name not in ("bigint", "double"):
        raise ValueError(f"Unsupported type {type_name}")
    return pc.sum(block, min_count=0).as_py()


@dataclass(frozen=True)
class CursorStrategy:
    provider: RecordCursorProvider

    @property
    def label(self):
        return self.provider.cursor_type

    def drain(self, split, scenario, config=None) -> TrialResult:
        readers = [
            (position, _cursor_reader(scenario.columns[position]))
            for position in scenario.positions()
        ]
        total = 0
        positions = 0
        cursor = self.provider.create_cursor(split, scenario.columns, config=config)
        with closing(cursor):
            while cursor.advance():
                positions += 1
                for field, read in readers:
                    if not cursor.is_null(field):
                        total += read(cursor, field)
        return TrialResult(total, positions)


@dataclass(frozen=True)
class PageStrategy:
    provider: PageSourceProvider

    @property
    def label(self):
        return "page"

    def drain(self, split, scenario, config=None) -> TrialResult:
        read_columns = [(position, scenario.columns[position].type) for position in scenario.positions()]
        total = 0
        positions = 0
        page_source = self.provider.create_page_source(split, scenario.columns, config=config)
        with closing(page_source):
            while not page_source.is_finished():
                page = page_source.next_page()
                if page is None:
                    continue
                positions += page.num_rows
                for position, type_name in read_columns:
                    total += block_sum(page.column(position), type_name)
        return TrialResult(total, positions)
