import abc

import pyarrow as pa
import pyarrow.dataset as ds
import pyarrow.orc as orc
import pyarrow.parquet as pq

from formatbench.splits import UTC
from formatbench.writers import class_name

READ_BATCH_ROWS = 10 * 1024


def project(batch: pa.RecordBatch, names) -> pa.RecordBatch:
    """Return `batch` with exactly `names`, in that order."""
    names = list(names)
    if batch.schema.names == names:
        return batch
    arrays = [batch.column(batch.schema.get_field_index(name)) for name in names]
    return pa.RecordBatch.from_arrays(arrays, names=names)


class BatchStream:
    def __init__(self, batches, source=None):
        self.batches = iter(batches)
        self.source = source

    def close(self):
        if self.source is not None:
            self.source.close()
            self.source = None


class InputFormat(abc.ABC):
    """Reads the record batches of one file that belong to a byte range."""

    @abc.abstractmethod
    def open_batches(self, path, start, length, names, batch_rows, predicate=None) -> BatchStream:
        pass

    def _check_predicate(self, predicate):
        if predicate is not None:
            raise ValueError(f"{class_name(self)} does not support predicate pushdown")


def _row_group_offset(row_group) -> int:
    first_column = row_group.column(0)
    if first_column.has_dictionary_page and first_column.dictionary_page_offset:
        return first_column.dictionary_page_offset
    return first_column.data_page_offset


def row_groups_in_range(metadata, start, length):
    """Indexes of the row groups whose first page starts in [start, start + length)."""
    return [
        index
        for index in range(metadata.num_row_groups)
        if start <= _row_group_offset(metadata.row_group(index)) < start + length
    ]


class ParquetInputFormat(InputFormat):
    """Reads the row groups whose first page starts inside the byte range."""

    def open_batches(self, path, start, length, names, batch_rows, predicate=None):
        self._check_predicate(predicate)
        source = pa.memory_map(str(path), "r")
        try:
            parquet_file = pq.ParquetFile(source)
            row_groups = row_groups_in_range(parquet_file.metadata, start, length)
        except BaseException:
            source.close()
            raise

        if not row_groups:
            return BatchStream((), source)
        batches = parquet_file.iter_batches(
            batch_size=batch_rows, row_groups=row_groups, columns=list(names)
        )
        return BatchStream(batches, source)


# ORC and arrow IPC files are not splittable here: the split that starts at
# offset zero reads the whole file and every other split reads nothing.


class OrcInputFormat(InputFormat):
    def open_batches(self, path, start, length, names, batch_rows, predicate=None):
        self._check_predicate(predicate)
        source = pa.memory_map(str(path), "r")
        if start > 0:
            return BatchStream((), source)
        try:
            orc_file = orc.ORCFile(source)
        except BaseException:
            source.close()
            raise
        names = list(names)
        stripes = (
            orc_file.read_stripe(index, columns=names)
            for index in range(orc_file.nstripes)
        )
        return BatchStream(stripes, source)


class ArrowInputFormat(InputFormat):
    def open_batches(self, path, start, length, names, batch_rows, predicate=None):
        self._check_predicate(predicate)
        source = pa.memory_map(str(path), "r")
        if start > 0:
            return BatchStream((), source)
        try:
            schema = pa.ipc.open_file(source).schema
            # Only the projected columns are decompressed and decoded.
            options = pa.ipc.IpcReadOptions(included_fields=_field_indexes(schema, names))
            reader = pa.ipc.open_file(source, options=options)
        except BaseException:
            source.close()
            raise
        batches = (reader.get_batch(index) for index in range(reader.num_record_batches))
        return BatchStream(batches, source)


def _field_indexes(schema, names):
    indexes = []
    for name in names:
        index = schema.get_field_index(name)
        if index < 0:
            raise ValueError(f"Column {name} is not in the file schema")
        indexes.append(index)
    return sorted(indexes)


class DatasetInputFormat(InputFormat):
    """Format-agnostic reads through pyarrow.dataset.

    Parquet files are restricted to the row groups of the byte range, the
    same way ParquetInputFormat does it.  Other formats are read whole by the
    split that starts at offset zero.
    """

    def __init__(self, format):
        self.format = format

    def open_batches(self, path, start, length, names, batch_rows, predicate=None):
        dataset = ds.dataset(str(path), format=self.format)
        if self.format == "parquet":
            return self._parquet_batches(dataset, start, length, names, batch_rows, predicate)
        if start > 0:
            return BatchStream(())
        batches = dataset.to_batches(
            columns=list(names), filter=predicate, batch_size=batch_rows
        )
        return BatchStream(batches)

    def _parquet_batches(self, dataset, start, length, names, batch_rows, predicate):
        fragments = []
        for fragment in dataset.get_fragments():
            row_groups = row_groups_in_range(fragment.metadata, start, length)
            if row_groups:
                fragments.append(fragment.subset(row_group_ids=row_groups))

        def batches():
            for fragment in fragments:
                yield from fragment.to_batches(
                    columns=list(names), filter=predicate, batch_size=batch_rows
                )

        return BatchStream(batches())


class RecordCursor:
    """Row-at-a-time view over a stream of record batches.

    Field positions are positions in the requested column list, not in the
    file schema.
    """

    def __init__(self, stream: BatchStream, columns, time_zone=UTC):
        self.columns = tuple(columns)
        self.time_zone = time_zone
        self._stream = stream
        self._names = [col.name for col in self.columns]
        self._values = []
        self._rows = 0
        self._position = -1
        self._exhausted = False

    def advance(self) -> bool:
        if self._exhausted:
            return False
        self._position += 1
        while self._position >= self._rows:
            batch = next(self._stream.batches, None)
            if batch is None:
                self._exhausted = True
                self._values = []
                return False
            batch = project(batch, self._names)
            self._values = [array.to_pylist() for array in batch.columns]
            self._rows = batch.num_rows
            self._position = 0
        return True

    def _check_positioned(self):
        if self._exhausted or self._position < 0:
            raise ValueError("Cursor is not positioned on a row; call advance() first")

    def is_null(self, field) -> bool:
        self._check_positioned()
        return self._values[field][self._position] is None

    def _get(self, field, type_name):
        col = self.columns[field]
        if col.type != type_name:
            raise ValueError(f"Column {col.name} is {col.type}, not {type_name}")
        self._check_positioned()
        return self._values[field][self._position]

    def get_long(self, field) -> int:
        return self._get(field, "bigint")

    def get_double(self, field) -> float:
        return self._get(field, "double")

    def get_slice(self, field) -> bytes:
        return self._get(field, "string").encode("utf-8")

    def close(self):
        self._exhausted = True
        self._stream.close()


class PageSource:
    """Batch-at-a-time reads.  `next_page` may return None without being finished."""

    def __init__(self, stream: BatchStream, columns, time_zone=UTC):
        self.columns = tuple(columns)
        self.time_zone = time_zone
        self._stream = stream
        self._names = [col.name for col in self.columns]
        self._finished = False

    def is_finished(self) -> bool:
        return self._finished

    def next_page(self):
        batch = next(self._stream.batches, None)
        if batch is None:
            self._finished = True
            return None
        if batch.num_rows == 0:
            return None
        return project(batch, self._names)

    def close(self):
        self._finished = True
        self._stream.close()


def _open_stream(input_format, split, columns, config, predicate):
    if split.partition_keys:
        raise ValueError("Partitioned splits are not supported")
    batch_rows = int((config or {}).get("read.batch.rows", READ_BATCH_ROWS))
    return input_format.open_batches(
        split.path,
        split.start,
        split.length,
        [col.name for col in columns],
        batch_rows,
        predicate=predicate,
    )


class RecordCursorProvider:
    def __init__(self, input_format: InputFormat, cursor_type="custom"):
        self.input_format = input_format
        self.cursor_type = cursor_type

    def create_cursor(self, split, columns, config=None, predicate=None, time_zone=UTC):
        stream = _open_stream(self.input_format, split, columns, config, predicate)
        return RecordCursor(stream, columns, time_zone)


class PageSourceProvider:
    def __init__(self, input_format: InputFormat):
        self.input_format = input_format

    def create_page_source(self, split, columns, config=None, predicate=None, time_zone=UTC):
        stream = _open_stream(self.input_format, split, columns, config, predicate)
        return PageSource(stream, columns, time_zone)
