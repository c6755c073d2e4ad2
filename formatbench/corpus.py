import logging
from pathlib import Path

from tqdm import tqdm

from formatbench.compression import CompressionType, job_config
from formatbench.datagen import time_log
from formatbench.encodings import DATASET
from formatbench.schema import LineItem, table_properties
from formatbench.serde import RowShape

ROW_SHAPE = RowShape.of(LineItem)


def write_line_items(path, encoding, compression, rows, extra_config=None, progress=False) -> int:
    """Write every row of `rows` to `path` using `encoding`; return the file size."""
    config = job_config(compression)
    if extra_config:
        config.update(extra_config)

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    logging.info("Writing %s", path)
    with time_log(), tqdm(unit="rows", desc=path.name, disable=not progress) as bar:
        writer = encoding.output_format.open(
            config,
            path,
            compression != CompressionType.uncompressed,
            table_properties(),
            progress=bar.update,
        )
        try:
            for row in rows:
                writer.write(encoding.serde.serialize(row, ROW_SHAPE))
        except BaseException:
            writer.close(abort=True)
            raise
        writer.close()

    return path.stat().st_size


class CorpusBuilder:
    """Materializes one corpus file per (encoding, compression).

    A file that already exists is assumed to be current.  Nothing checks its
    contents, so delete the data directory after changing the schema or the
    row generator.
    """

    def __init__(self, data_dir, rows, dataset=DATASET, progress=False, extra_config=None):
        self.data_dir = Path(data_dir)
        self.rows = rows
        self.dataset = dataset
        self.progress = progress
        self.extra_config = extra_config or {}
        self.files_written = 0

    def file_for(self, encoding, compression) -> Path:
        return self.data_dir / encoding.file_name(compression, self.dataset)

    def ensure(self, encoding, compression):
        """Return the corpus file and its size, writing it only if it is missing."""
        path = self.file_for(encoding, compression)
        if path.exists():
            logging.debug("Reusing %s", path)
            return path, path.stat().st_size
        return path, self.write(encoding, compression)

    def ensure_all(self, encodings, compressions):
        return [
            self.ensure(encoding, compression)
            for encoding in encodings
            for compression in compressions
        ]

    def write(self, encoding, compression) -> int:
        size = write_line_items(
            self.file_for(encoding, compression),
            encoding,
            compression,
            self.rows,
            extra_config=self.extra_config,
            progress=self.progress,
        )
        self.files_written += 1
        return size
