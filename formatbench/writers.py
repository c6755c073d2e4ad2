import abc
import os
from pathlib import Path

import pyarrow as pa
import pyarrow.orc as orc
import pyarrow.parquet as pq

from formatbench.schema import arrow_schema, columns_from_properties

# Rows buffered per record batch.  Each flushed batch becomes one parquet row
# group and one arrow IPC record batch.
BATCH_ROWS = 10 * 1024


def class_name(obj) -> str:
    cls = type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"


def partial_path(path) -> Path:
    path = Path(path)
    return path.parent / (path.name + ".partial")


class RecordWriter(abc.ABC):
    """Buffers serialized records and writes them out a batch at a time.

    Data goes to `<path>.partial` and is only renamed to `path` by a clean
    close, so an interrupted or aborted write never leaves a file behind
    that looks complete.
    """

    def __init__(self, path, schema: pa.Schema, progress=None, batch_rows=BATCH_ROWS):
        if batch_rows <= 0:
            raise ValueError(f"batch_rows must be positive, got {batch_rows}")
        self.path = Path(path)
        self.schema = schema
        self.progress = progress
        self.batch_rows = batch_rows
        self.rows_written = 0
        self._rows = []
        self._closed = False
        self._open(partial_path(self.path))

    @abc.abstractmethod
    def _open(self, path):
        pass

    @abc.abstractmethod
    def _write_batch(self, batch: pa.RecordBatch):
        pass

    @abc.abstractmethod
    def _close(self):
        pass

    def write(self, record):
        self._rows.append(record)
        if len(self._rows) >= self.batch_rows:
            self._flush()

    def _flush(self):
        if not self._rows:
            return
        arrays = [
            pa.array(values, type=field.type)
            for values, field in zip(zip(*self._rows), self.schema)
        ]
        self._write_batch(pa.RecordBatch.from_arrays(arrays, schema=self.schema))
        self.rows_written += len(self._rows)
        if self.progress is not None:
            self.progress(len(self._rows))
        self._rows = []

    def close(self, abort=False):
        if self._closed:
            return
        self._closed = True

        if abort:
            self._rows = []
            try:
                self._close()
            finally:
                _remove_if_exists(partial_path(self.path))
            return

        try:
            self._flush()
            self._close()
        except BaseException:
            _remove_if_exists(partial_path(self.path))
            raise
        os.replace(partial_path(self.path), self.path)


def _remove_if_exists(path):
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


class ParquetRecordWriter(RecordWriter):
    def __init__(self, path, schema, compression, use_dictionary, **kwargs):
        self.compression = compression
        self.use_dictionary = use_dictionary
        super().__init__(path, schema, **kwargs)

    def _open(self, path):
        self._writer = pq.ParquetWriter(
            str(path),
            self.schema,
            compression=self.compression,
            use_dictionary=self.use_dictionary,
        )

    def _write_batch(self, batch):
        self._writer.write_batch(batch)

    def _close(self):
        self._writer.close()


class OrcRecordWriter(RecordWriter):
    def __init__(self, path, schema, compression, dictionary_key_size_threshold, **kwargs):
        self.compression = compression
        self.dictionary_key_size_threshold = dictionary_key_size_threshold
        super().__init__(path, schema, **kwargs)

    def _open(self, path):
        self._writer = orc.ORCWriter(
            str(path),
            compression=self.compression,
            dictionary_key_size_threshold=self.dictionary_key_size_threshold,
        )

    def _write_batch(self, batch):
        self._writer.write(pa.Table.from_batches([batch]))

    def _close(self):
        if self.rows_written == 0:
            # The ORC writer only learns the schema from its first table.
            self._writer.write(self.schema.empty_table())
        self._writer.close()


class ArrowRecordWriter(RecordWriter):
    def __init__(self, path, schema, compression, **kwargs):
        self.compression = compression
        super().__init__(path, schema, **kwargs)

    def _open(self, path):
        self._sink = pa.OSFile(str(path), "wb")
        options = pa.ipc.IpcWriteOptions(compression=self.compression)
        self._writer = pa.ipc.new_file(self._sink, self.schema, options=options)

    def _write_batch(self, batch):
        self._writer.write_batch(batch)

    def _close(self):
        try:
            self._writer.close()
        finally:
            self._sink.close()


class OutputFormat(abc.ABC):
    """Opens record writers for one file format."""

    @abc.abstractmethod
    def codec(self, config) -> str:
        """The codec name this format's writer expects, read from `config`."""

    @abc.abstractmethod
    def _create_writer(self, path, schema, codec, config, **kwargs) -> RecordWriter:
        pass

    def open(self, config, path, is_compressed, table_properties, progress=None):
        codec = self.codec(config)
        if is_compressed != (codec.lower() not in ("none", "uncompressed")):
            raise ValueError(
                f"{class_name(self)} was asked for is_compressed={is_compressed} "
                f"but the configured codec is {codec}"
            )
        schema = arrow_schema(columns_from_properties(table_properties))
        batch_rows = int(config.get("write.batch.rows", BATCH_ROWS))
        return self._create_writer(
            path, schema, codec, config, progress=progress, batch_rows=batch_rows
        )


class ParquetOutputFormat(OutputFormat):
    def codec(self, config):
        return config["parquet.compression"]

    def _create_writer(self, path, schema, codec, config, **kwargs):
        use_dictionary = config.get("parquet.enable.dictionary", "true") == "true"
        return ParquetRecordWriter(path, schema, codec, use_dictionary, **kwargs)


class OrcOutputFormat(OutputFormat):
    """ORC writer.

    With `dictionary=False` every string column uses direct encoding; with
    `dictionary=True` the writer always dictionary-encodes strings.
    """

    def __init__(self, dictionary=False):
        self.dictionary = dictionary

    def codec(self, config):
        return config["orc.compress"]

    def _create_writer(self, path, schema, codec, config, **kwargs):
        threshold = 1.0 if self.dictionary else 0.0
        return OrcRecordWriter(path, schema, codec, threshold, **kwargs)


class ArrowOutputFormat(OutputFormat):
    def codec(self, config):
        return config["arrow.ipc.compression"]

    def _create_writer(self, path, schema, codec, config, **kwargs):
        compression = None if codec == "none" else codec
        return ArrowRecordWriter(path, schema, compression, **kwargs)
