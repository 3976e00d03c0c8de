import pytest

from datetime import datetime, timezone, timedelta
from ziplog.timestamp_formats import DateContext, FormatCatalog, TimestampFormat

CONTEXT = DateContext(2019, 10, 9)
CATALOG = FormatCatalog.build(CONTEXT)


def _utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def _test_timestamp_format_parsing(string_date: str, expected_format_class_name: str, expected_datetime: datetime) -> None:
    found = CATALOG.match(string_date)
    assert found is not None, f"no format matched {string_date!r}"

    parsed_datetime, fmt = found

    # assert that we got the expected format
    assert type(fmt).__name__ == expected_format_class_name

    print(repr(string_date))
    print(type(fmt).__name__)
    print("Parsed time  :", parsed_datetime)
    print("Expected time:", expected_datetime)
    assert parsed_datetime == expected_datetime, f"failed to convert {string_date!r} with format {type(fmt).__name__}"
    assert parsed_datetime.tzinfo is not None


@pytest.mark.parametrize(
    "fmt_class, string_date, expected_datetime",
    [
        (
            "HMS",
            "01:21:27 Log",
            _utc(2019, 10, 9, 1, 21, 27),
        ),
        (
            "Syslog",
            "Apr 6 17:13:40 myhost kernel: Log",
            _utc(2019, 4, 6, 17, 13, 40),
        ),
        (
            "Syslog",
            "Apr  6 17:13:40 myhost kernel: Log",
            _utc(2019, 4, 6, 17, 13, 40),
        ),
        (
            "IsoOffset",
            "2018-12-15T02:11:06+0200 Log",
            _utc(2018, 12, 15, 0, 11, 6),
        ),
        (
            "IsoOffset",
            "2018-12-15T02:11:06-0130 Log",
            _utc(2018, 12, 15, 3, 41, 6),
        ),
        (
            "IsoFractionalOffset",
            "2018-12-15T02:11:06.123456+02:00 Log",
            _utc(2018, 12, 15, 0, 11, 6, 123456),
        ),
        (
            "IsoFractionalOffset",
            "2019-10-09T10:58:45,929228489+03:00 Log",
            _utc(2019, 10, 9, 7, 58, 45, 929228),
        ),
        (
            "YMDHMScommaMillis",
            "2018-04-06 17:13:40,955 Log",
            _utc(2018, 4, 6, 17, 13, 40, 955000),
        ),
        (
            "YMDHMScommaMillis",
            "2018-04-23 04:48:11,811|INFO|Log",
            _utc(2018, 4, 23, 4, 48, 11, 811000),
        ),
        (
            "YMDHMScommaMillis",
            "12345 2018-04-06 17:13:40,955 Log",
            _utc(2018, 4, 6, 17, 13, 40, 955000),
        ),
        (
            "YMDHMSdashed",
            "2018-04-06 17:13:40 Log",
            _utc(2018, 4, 6, 17, 13, 40),
        ),
        (
            "YMDHMSdashed",
            "[2018-04-06 17:13:40.955356] Log",
            _utc(2018, 4, 6, 17, 13, 40, 955356),
        ),
        (
            "YMDHMSslashed",
            "2018/04/06 17:13:40 Log",
            _utc(2018, 4, 6, 17, 13, 40),
        ),
        (
            "YMDHMSslashed",
            "[2018/04/06 17:13:40.955356 Log",
            _utc(2018, 4, 6, 17, 13, 40, 955356),
        ),
        (
            "StraceTime",
            "16255 15:08:52,554223 read(3, \"\", 4096) = 0",
            _utc(2019, 10, 9, 15, 8, 52, 554223),
        ),
        (
            "StraceTime",
            "16255 15:08:52.554223 open(\"/etc/passwd\", O_RDONLY) = 3",
            _utc(2019, 10, 9, 15, 8, 52, 554223),
        ),
    ],
)
def test_timestamp_format_parsing(fmt_class: str, string_date: str, expected_datetime: datetime):
    _test_timestamp_format_parsing(string_date, fmt_class, expected_datetime)


@pytest.mark.parametrize(
    "line",
    [
        "",
        "no timestamp here",
        "Traceback (most recent call last):",
        # anchored formats do not skip leading text
        "INFO 2018-04-06 17:13:40 Log",
    ],
)
def test_no_format_matches(line: str):
    assert CATALOG.match(line) is None


@pytest.mark.parametrize(
    "line",
    [
        "2018-13-06 17:13:40 month out of range",
        "2018/04/31 17:13:40 no such day",
        "25:61:99 not a time of day",
        "Foo 6 17:13:40 not a month",
        "2018-04-06 17:13:40,955 is fine, but 2018-02-30 is not",
    ],
)
def test_matched_but_unparsable_is_no_match(line: str):
    found = CATALOG.match(line)
    if line.startswith("2018-04-06"):
        # the valid leading timestamp is the one that counts
        assert found is not None
        assert found[0] == _utc(2018, 4, 6, 17, 13, 40, 955000)
    else:
        assert found is None


def test_catalog_order_prefers_specific_formats():
    names = [type(fmt).__name__ for fmt in CATALOG]
    assert names == [
        "IsoOffset",
        "IsoFractionalOffset",
        "YMDHMScommaMillis",
        "YMDHMSdashed",
        "YMDHMSslashed",
        "Syslog",
        "StraceTime",
        "HMS",
    ]
    # the bare time-of-day format is the most general, and must be tried last
    assert names[-1] == "HMS"


def test_general_format_would_match_inside_longer_timestamp():
    # the strace format finds "06 17:13:40.955356" inside a full date-time, so it
    # must come after the dashed date-time format in the catalog
    strace = next(fmt for fmt in CATALOG if type(fmt).__name__ == "StraceTime")
    line = "[2018-04-06 17:13:40.955356 Log"
    assert strace.parse(line) is not None

    ts, fmt = CATALOG.match(line)
    assert type(fmt).__name__ == "YMDHMSdashed"
    assert ts == _utc(2018, 4, 6, 17, 13, 40, 955356)


def test_date_context_is_shared_by_all_formats():
    assert all(fmt.context is CONTEXT for fmt in CATALOG)
    assert all(isinstance(fmt, TimestampFormat) for fmt in CATALOG)


def test_date_context_today():
    context = DateContext.today()
    now = datetime.now(timezone.utc)
    # allow for the test running across midnight
    assert now.date() - datetime(*context).date() <= timedelta(days=1)
