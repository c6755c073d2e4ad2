import sys
from typing import NamedTuple, Optional

_SIZE_UNITS = ["B", "kB", "MB", "GB", "TB", "PB"]


class Measurement(NamedTuple):
    label: str
    compression: Optional[object]
    elapsed_nanos: int
    loop_count: int
    value: object

    @property
    def seconds_per_loop(self) -> float:
        return self.elapsed_nanos / self.loop_count / 1e9


def format_seconds(seconds: float) -> str:
    return f"{seconds:.2f}s"


def size_to_str(size: int) -> str:
    """Render a byte count in its largest whole unit, e.g. 1536 -> "1.50kB"."""
    value = float(size)
    for unit in _SIZE_UNITS:
        if value < 1024 or unit == _SIZE_UNITS[-1]:
            break
        value /= 1024
    if value == int(value):
        return f"{int(value)}{unit}"
    return f"{value:.2f}{unit}"


def format_measurement(measurement: Measurement) -> str:
    display = measurement.label
    if measurement.compression is not None:
        display += f" {measurement.compression}"
    duration = format_seconds(measurement.seconds_per_loop)
    return f"{display:<30} {duration:>6} {measurement.value}"


def log_duration(measurement: Measurement, out=None):
    print(format_measurement(measurement), file=out or sys.stdout)
