"""Enumeration of the benchmark matrix, kept free of timing and I/O."""
from typing import NamedTuple


class WriteCell(NamedTuple):
    encoding: object
    compression: object

    @property
    def label(self):
        return self.encoding.name


class ReadCell(NamedTuple):
    scenario: object
    encoding: object
    strategy: object
    compression: object

    @property
    def label(self):
        return f"{self.encoding.name} {self.strategy.label}"


def iter_write_matrix(encodings, compressions):
    for encoding in encodings:
        for compression in compressions:
            yield WriteCell(encoding, compression)


def iter_read_matrix(encodings, compressions, scenarios):
    # Scenarios stay outermost so every cell of one scenario is reported
    # under the same header.
    for scenario in scenarios:
        for encoding in encodings:
            for strategy in encoding.strategies():
                for compression in compressions:
                    yield ReadCell(scenario, encoding, strategy, compression)
