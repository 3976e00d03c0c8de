from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import NamedTuple


class DateContext(NamedTuple):
    """
    Date fields used by formats whose timestamps omit the date (or the year).
    Captured once, when the format catalog is built.
    """
    year: int
    month: int
    day: int

    @classmethod
    def today(cls) -> DateContext:
        now = datetime.now(timezone.utc)
        return cls(now.year, now.month, now.day)


def _utc(dt: datetime) -> datetime:
    # naive timestamps are taken as UTC, offset timestamps are converted to UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class TimestampFormat:
    """
    Class to recognize one timestamp convention in a log line, and convert the matched
    text into a timezone-aware datetime.

    Each subclass defines the regex `pattern` for its timestamp, and whether that
    pattern must match at the start of the line (`anchored`) or may be found anywhere
    in it (to skip over a leading pid or other token). The order in which subclasses are
    defined in this module is the order in which FormatCatalog tries them, so more
    specific formats must be defined before more general ones.
    """
    pattern = ""
    anchored = True
    strptime_format = ""

    _find = staticmethod(lambda s: None)

    def __init_subclass__(cls):
        regex = re.compile(cls.pattern)
        cls._find = staticmethod(regex.match if cls.anchored else regex.search)

    def __init__(self, context: DateContext):
        self.context = context

    def __repr__(self):
        return f"{type(self).__name__}()"

    def parse(self, line: str) -> datetime | None:
        m = self._find(line)
        if m is None:
            return None
        try:
            return _utc(self.to_datetime(m))
        except ValueError:
            # pattern matched, but the fields do not make a valid date/time
            return None

    def to_datetime(self, m: re.Match) -> datetime:
        return datetime.strptime(m[1], self.strptime_format)


class IsoOffset(TimestampFormat):
    # 2018-12-15T02:11:06+0200
    pattern = r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}[+-]\d{4})"
    strptime_format = "%Y-%m-%dT%H:%M:%S%z"


class IsoFractionalOffset(TimestampFormat):
    # 2018-12-15T02:11:06.123456+02:00
    # 2019-10-09T10:58:45,929228489+03:00 (digits past microseconds are dropped)
    pattern = r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})[.,](\d{6})\d*([+-]\d{2}):(\d{2})"
    strptime_format = "%Y-%m-%dT%H:%M:%S.%f%z"

    def to_datetime(self, m: re.Match) -> datetime:
        return datetime.strptime(f"{m[1]}.{m[2]}{m[3]}{m[4]}", self.strptime_format)


class YMDHMScommaMillis(TimestampFormat):
    # 2018-04-06 17:13:40,955
    # 2018-04-23 04:48:11,811|
    pattern = r"(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}),(\d{3})[| ]"
    anchored = False
    strptime_format = "%Y-%m-%d %H:%M:%S"

    def to_datetime(self, m: re.Match) -> datetime:
        return super().to_datetime(m) + timedelta(milliseconds=int(m[2]))


class YMDHMSdashed(TimestampFormat):
    # 2018-04-06 17:13:40
    # [2018-04-06 17:13:40.955356
    pattern = r"\[?(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})(?:\.(\d{6}))?"
    strptime_format = "%Y-%m-%d %H:%M:%S"

    def to_datetime(self, m: re.Match) -> datetime:
        return super().to_datetime(m) + timedelta(microseconds=int(m[2] or 0))


class YMDHMSslashed(YMDHMSdashed):
    # 2018/04/06 17:13:40
    # [2018/04/06 17:13:40.955356
    pattern = r"\[?(\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2})(?:\.(\d{6}))?"
    strptime_format = "%Y/%m/%d %H:%M:%S"


class Syslog(TimestampFormat):
    # Apr 6 17:13:40
    # (year is omitted, so take it from the catalog's date context)
    pattern = r"(\w{3} +\d+ +\d+:\d+:\d+)"
    strptime_format = "%Y %b %d %H:%M:%S"

    def to_datetime(self, m: re.Match) -> datetime:
        return datetime.strptime(f"{self.context.year} {m[1]}", self.strptime_format)


class StraceTime(TimestampFormat):
    # strace -tt output, with leading pid
    # 16255 15:08:52.554223
    pattern = r"\d+ (\d{2}:\d{2}:\d{2}).(\d{6})"
    anchored = False
    strptime_format = "%Y.%m.%d %H:%M:%S"

    def to_datetime(self, m: re.Match) -> datetime:
        year, month, day = self.context
        dt = datetime.strptime(f"{year}.{month}.{day} {m[1]}", self.strptime_format)
        return dt + timedelta(microseconds=int(m[2]))


class HMS(TimestampFormat):
    # 01:21:27
    # (most general format, must stay last)
    pattern = r"(\d+:\d+:\d+)"
    strptime_format = "%Y.%m.%d %H:%M:%S"

    def to_datetime(self, m: re.Match) -> datetime:
        year, month, day = self.context
        return datetime.strptime(f"{year}.{month}.{day} {m[1]}", self.strptime_format)


def _all_formats(cls: type[TimestampFormat]) -> list[type[TimestampFormat]]:
    # depth-first walk of the subclass tree, in definition order
    ret = []
    for subcls in cls.__subclasses__():
        ret.append(subcls)
        ret.extend(_all_formats(subcls))
    return ret


class FormatCatalog:
    """
    Ordered, read-only collection of TimestampFormats, built once per run and
    shared by all SourceClassifiers.
    """
    def __init__(self, formats):
        self.formats: tuple[TimestampFormat, ...] = tuple(formats)

    @classmethod
    def build(cls, context: DateContext | None = None) -> FormatCatalog:
        context = context or DateContext.today()
        return cls(fmt(context) for fmt in _all_formats(TimestampFormat))

    def __iter__(self):
        return iter(self.formats)

    def __len__(self):
        return len(self.formats)

    def match(self, line: str) -> tuple[datetime, TimestampFormat] | None:
        for fmt in self.formats:
            ts = fmt.parse(line)
            if ts is not None:
                return ts, fmt
        return None
