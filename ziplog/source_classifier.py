from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import NamedTuple

from .timestamp_formats import FormatCatalog, TimestampFormat


class ClassifiedLine(NamedTuple):
    timestamp: datetime | None
    text: str
    # width of the prefix actually applied to text (0 when filler was used)
    prefix_width: int = 0


class SourceClassifier:
    """
    Class to wrap the lines of one log source, and render each line as a
    ClassifiedLine, with the source's prefix on lines that have a timestamp, and
    an equal-width filler of spaces on lines that don't.

    Until some line matches a format from the catalog, every line is tried against
    the whole catalog. The first format to match becomes the format for the rest
    of the source, and is the only one tried from then on, even for lines it
    fails to match.
    """
    def __init__(self, lines: Iterable[str], prefix: str, catalog: FormatCatalog):
        self.lines = lines
        self._lines_iter = iter(lines)
        self.prefix = prefix
        self.filler = " " * len(prefix)
        self.catalog = catalog
        self.locked_format: TimestampFormat | None = None

    @property
    def is_locked(self) -> bool:
        return self.locked_format is not None

    @property
    def read_error(self) -> Exception | None:
        return getattr(self.lines, "read_error", None)

    def classify(self, line: str) -> ClassifiedLine:
        if self.locked_format is None:
            found = self.catalog.match(line)
            if found is None:
                return ClassifiedLine(None, f"{self.filler}{line}")
            timestamp, self.locked_format = found
        else:
            timestamp = self.locked_format.parse(line)

        if timestamp is None:
            return ClassifiedLine(None, f"{self.filler}{line}")
        return ClassifiedLine(timestamp, f"{self.prefix}{line}", len(self.prefix))

    def __iter__(self):
        return self

    def __next__(self) -> ClassifiedLine:
        return self.classify(next(self._lines_iter))
