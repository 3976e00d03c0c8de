from __future__ import annotations

import enum
from collections.abc import Generator, Iterable
from datetime import datetime, timedelta
from typing import NamedTuple

from .source_classifier import ClassifiedLine

INTERVAL_COLUMN_WIDTH = 7


class IntervalUnit(enum.Enum):
    SECONDS = "s"
    MILLISECONDS = "ms"

    @classmethod
    def from_specifier(cls, spec: str) -> IntervalUnit:
        try:
            return cls(spec)
        except ValueError:
            valid = ", ".join(unit.value for unit in cls)
            raise ValueError(f"invalid interval specifier {spec!r} (must be one of {valid})") from None

    @property
    def resolution(self) -> timedelta:
        return {
            IntervalUnit.SECONDS: timedelta(seconds=1),
            IntervalUnit.MILLISECONDS: timedelta(milliseconds=1),
        }[self]


class AnnotatedLine(NamedTuple):
    interval: int | None
    column: str
    line: ClassifiedLine

    @property
    def text(self) -> str:
        return f"{self.column}{self.line.text}"


class IntervalAnnotator:
    """
    Callable class to add the time elapsed since the most recent timestamped line
    to each line of a merged sequence of ClassifiedLines.

    Lines without a timestamp get a blank column, and do not change the most
    recent timestamp. If no unit is given, lines pass through with no column.
    """
    def __init__(self, unit: IntervalUnit | None = None):
        self.unit = unit
        self.last_timestamp: datetime | None = None

    def interval(self, timestamp: datetime | None) -> int | None:
        if self.last_timestamp is None or timestamp is None:
            return None
        elapsed = timestamp - self.last_timestamp
        # whole units, truncated toward zero
        ticks = abs(elapsed) // self.unit.resolution
        return ticks if elapsed >= timedelta(0) else -ticks

    def annotate(self, line: ClassifiedLine) -> AnnotatedLine:
        if self.unit is None:
            return AnnotatedLine(None, "", line)

        interval = self.interval(line.timestamp)
        if interval is None:
            column = " " * INTERVAL_COLUMN_WIDTH
        else:
            column = f"{interval:{INTERVAL_COLUMN_WIDTH}d}"

        if line.timestamp is not None:
            self.last_timestamp = line.timestamp
        return AnnotatedLine(interval, column, line)

    def __call__(self, seq: Iterable[ClassifiedLine]) -> Generator[AnnotatedLine, None, None]:
        for line in seq:
            yield self.annotate(line)
