import pytest

from formatbench.compression import ENABLED_COMPRESSION, CompressionType, job_config
from formatbench.schema import LineItem, table_properties
from formatbench.serde import ColumnarSerDe, RowShape

from lineitems import DEFAULTS, line_item

SHAPE = RowShape.of(LineItem)


@pytest.fixture
def serde():
    serde = ColumnarSerDe()
    serde.initialize({}, table_properties())
    return serde


def test_serialize_keeps_column_order(serde):
    assert serde.serialize(line_item(), SHAPE) == tuple(DEFAULTS.values())


def test_serialize_keeps_nulls(serde):
    record = serde.serialize(line_item(orderkey=None, comment=None), SHAPE)

    assert record[0] is None
    assert record[15] is None


def test_integral_double_is_accepted(serde):
    assert serde.serialize(line_item(discount=0), SHAPE)[6] == 0


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"quantity": "17"}, "Column quantity is bigint but got str"),
        ({"orderkey": True}, "Column orderkey is bigint but got bool"),
        ({"tax": "0.02"}, "Column tax is double but got str"),
        ({"shipmode": 7}, "Column shipmode is string but got int"),
    ],
)
def test_serialize_rejects_wrong_types(serde, overrides, message):
    with pytest.raises(ValueError, match=message):
        serde.serialize(line_item(**overrides), SHAPE)


def test_serialize_projected_columns():
    serde = ColumnarSerDe()
    serde.initialize({}, {"columns": "comment,orderkey", "columns.types": "string:bigint"})

    assert serde.serialize(line_item(orderkey=9), SHAPE) == ("egular courts above the", 9)
    assert serde.schema.names == ["comment", "orderkey"]


def test_missing_field():
    serde = ColumnarSerDe()
    serde.initialize({}, {"columns": "price", "columns.types": "double"})

    with pytest.raises(ValueError, match="no field for column price"):
        serde.serialize(line_item(), SHAPE)


def test_uninitialized_serde():
    with pytest.raises(RuntimeError, match="not initialized"):
        ColumnarSerDe().serialize(line_item(), SHAPE)


def test_initialize_rejects_unknown_types():
    with pytest.raises(ValueError, match="Unsupported type timestamp"):
        ColumnarSerDe().initialize({}, {"columns": "ts", "columns.types": "timestamp"})


def test_compression_extensions():
    assert [c.file_extension for c in ENABLED_COMPRESSION] == ["", ".snappy", ".gz"]
    assert [str(c) for c in ENABLED_COMPRESSION] == ["uncompressed", "snappy", "gzip"]


def test_compression_from_name():
    assert CompressionType.from_name("gzip") is CompressionType.gzip
    with pytest.raises(ValueError, match="Unsupported compression codec: lzo"):
        CompressionType.from_name("lzo")


@pytest.mark.parametrize(
    "compression, parquet, orc, arrow",
    [
        (CompressionType.uncompressed, "none", "UNCOMPRESSED", "none"),
        (CompressionType.snappy, "snappy", "SNAPPY", "lz4"),
        (CompressionType.gzip, "gzip", "ZLIB", "zstd"),
    ],
)
def test_job_config(compression, parquet, orc, arrow):
    config = job_config(compression)

    assert config["parquet.compression"] == parquet
    assert config["orc.compress"] == orc
    assert config["arrow.ipc.compression"] == arrow
    assert config["parquet.enable.dictionary"] == "true"


def test_job_config_rejects_names():
    with pytest.raises(ValueError, match="Unsupported compression codec: snappy"):
        job_config("snappy")
