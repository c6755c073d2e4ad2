import enum


class CompressionType(enum.Enum):
    uncompressed = ""
    snappy = ".snappy"
    gzip = ".gz"

    @property
    def file_extension(self) -> str:
        return self.value

    def __str__(self):
        return self.name

    @classmethod
    def from_name(cls, name: str) -> "CompressionType":
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Unsupported compression codec: {name}") from None


ENABLED_COMPRESSION = (
    CompressionType.uncompressed,
    CompressionType.snappy,
    CompressionType.gzip,
)

_ORC_CODECS = {
    CompressionType.uncompressed: "UNCOMPRESSED",
    CompressionType.snappy: "SNAPPY",
    CompressionType.gzip: "ZLIB",
}

# Arrow IPC only knows LZ4 and ZSTD, so the fast and the dense variants stand
# in for snappy and gzip.
_ARROW_CODECS = {
    CompressionType.uncompressed: "none",
    CompressionType.snappy: "lz4",
    CompressionType.gzip: "zstd",
}


def job_config(compression: CompressionType) -> dict:
    """Writer properties for `compression`, keyed the way each format names them."""
    if not isinstance(compression, CompressionType):
        raise ValueError(f"Unsupported compression codec: {compression}")

    if compression == CompressionType.uncompressed:
        parquet_codec = "none"
    else:
        parquet_codec = compression.name
    return {
        "parquet.compression": parquet_codec,
        "parquet.enable.dictionary": "true",
        "orc.compress": _ORC_CODECS[compression],
        "arrow.ipc.compression": _ARROW_CODECS[compression],
    }
