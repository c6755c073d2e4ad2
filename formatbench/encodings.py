from dataclasses import dataclass
from typing import Tuple

from formatbench.readers import (
    ArrowInputFormat,
    DatasetInputFormat,
    InputFormat,
    OrcInputFormat,
    ParquetInputFormat,
    PageSourceProvider,
    RecordCursorProvider,
)
from formatbench.schema import table_properties
from formatbench.serde import ColumnarSerDe
from formatbench.strategies import CursorStrategy, PageStrategy
from formatbench.writers import (
    ArrowOutputFormat,
    OrcOutputFormat,
    OutputFormat,
    ParquetOutputFormat,
    class_name,
)

DATASET = "line_item"


@dataclass(frozen=True)
class Encoding:
    """A file format under test and every way we know to read it."""

    name: str
    input_format: InputFormat
    output_format: OutputFormat
    serde: ColumnarSerDe
    cursor_providers: Tuple[RecordCursorProvider, ...] = ()
    page_source_providers: Tuple[PageSourceProvider, ...] = ()

    def __post_init__(self):
        self.serde.initialize({}, table_properties())

    def file_name(self, compression, dataset=DATASET) -> str:
        return f"{dataset}.{self.name}{compression.file_extension}"

    def strategies(self):
        """Cursor strategies first, then page strategies, in registration order."""
        return tuple(CursorStrategy(provider) for provider in self.cursor_providers) + tuple(
            PageStrategy(provider) for provider in self.page_source_providers
        )

    def partition_properties(self) -> dict:
        schema = table_properties()
        schema["file.inputformat"] = class_name(self.input_format)
        schema["serialization.lib"] = class_name(self.serde)
        return schema


def _encoding(name, input_format, output_format, dataset_format):
    return Encoding(
        name,
        input_format,
        output_format,
        ColumnarSerDe(name),
        cursor_providers=(
            RecordCursorProvider(input_format, "custom"),
            RecordCursorProvider(DatasetInputFormat(dataset_format), "generic"),
        ),
        page_source_providers=(PageSourceProvider(input_format),),
    )


ENCODINGS = (
    _encoding("arrow", ArrowInputFormat(), ArrowOutputFormat(), "ipc"),
    _encoding("parquet", ParquetInputFormat(), ParquetOutputFormat(), "parquet"),
    _encoding("orc", OrcInputFormat(), OrcOutputFormat(dictionary=False), "orc"),
    _encoding("orc-dict", OrcInputFormat(), OrcOutputFormat(dictionary=True), "orc"),
)


def encoding(name: str) -> Encoding:
    for candidate in ENCODINGS:
        if candidate.name == name:
            return candidate
    raise ValueError(f"Unknown encoding: {name}")
