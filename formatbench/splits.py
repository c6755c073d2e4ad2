import time
from pathlib import Path
from typing import NamedTuple, Tuple

UTC = "UTC"


class Session(NamedTuple):
    user: str
    time_zone: str
    locale: str
    start_time: float


SESSION = Session("user", UTC, "en", time.time())


class Split(NamedTuple):
    """One readable byte range of a corpus file plus the schema needed to decode it."""

    client_id: str
    path: str
    start: int
    length: int
    schema: dict
    partition_keys: Tuple = ()
    session: Session = SESSION


def create_split(path, encoding, scenario, client_id="test") -> Split:
    """Cover the whole of `path` with a single split."""
    path = Path(path)
    schema = encoding.partition_properties()
    schema["projected.column.ids"] = ",".join(str(i) for i in scenario.column_indexes)
    return Split(client_id, str(path), 0, path.stat().st_size, schema)
