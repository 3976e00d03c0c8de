#
# ziplog.py
#
# Utility for merging multiple log files into a single stream, ordered by the timestamps
# found in each file.
#

from __future__ import annotations

import argparse
from collections.abc import Generator
import sys
from typing import NamedTuple

from .file_reading import FileReader, STDIN_NAME
from .interval_annotation import AnnotatedLine, IntervalAnnotator, IntervalUnit
from .merging import Merger
from .output import COLOR_CHOICES, MergedLineWriter, save_to_csv
from .source_classifier import SourceClassifier
from .timestamp_formats import FormatCatalog


class PrefixedFile(NamedTuple):
    prefix: str
    path: str

    @classmethod
    def from_string(cls, s: str) -> PrefixedFile:
        # "PREFIX=PATH"; with no "=", the whole string is the path, with an empty prefix
        prefix, sep, path = s.partition("=")
        if not sep:
            return cls("", s)
        return cls(prefix, path)


def make_argument_parser():
    epilog_notes = """
    Each line with a recognized timestamp is written with its file's prefix, and lines
    without one are written with an equal width of spaces. Lines with no timestamp sort
    ahead of timestamped lines when merged.

    The timestamp format of each file is detected from the first line that has a
    recognizable timestamp, and is then used for the rest of that file.
    """

    parser = argparse.ArgumentParser(prog="ziplog", description="merge logs by timestamps", epilog=epilog_notes)
    parser.add_argument("files", nargs="*", metavar="FILE", help='log files to be merged; use "-" for STDIN')
    parser.add_argument(
        "--prefix", "-p",
        default="> ",
        help="the default prefix to prepend to timestamped lines (default: %(default)r)"
    )
    parser.add_argument(
        "--prefixed-file", "-f",
        dest="prefixed_files",
        action="append",
        default=[],
        type=PrefixedFile.from_string,
        metavar="PREFIX=PATH",
        help="log file with its own prefix for timestamped lines (may be given multiple times)"
    )
    parser.add_argument(
        "--interval", "-i",
        choices=[unit.value for unit in IntervalUnit],
        help="show interval since previous timestamped line, in seconds (s) or milliseconds (ms)"
    )
    parser.add_argument(
        "--encoding", "-enc",
        type=str,
        default=sys.getfilesystemencoding(),
        help="encoding to use when reading log files (defaults to the system default encoding)"
    )
    parser.add_argument(
        "--color",
        choices=COLOR_CHOICES,
        default="auto",
        help="highlight prefixes and intervals (default: only when writing to a terminal)"
    )
    parser.add_argument("--csv", help="save merged lines to CSV file instead of printing them")

    return parser


class ZipLogApplication:
    def __init__(self, config: argparse.Namespace):
        self.config = config

        self.prefix = config.prefix
        self.inputs = [
            *(PrefixedFile(self.prefix, fname) for fname in config.files),
            *config.prefixed_files,
        ]

        if config.interval is None:
            self.interval_unit = None
        else:
            self.interval_unit = IntervalUnit.from_specifier(config.interval)

        self.encoding = config.encoding
        self.color = config.color
        self.save_to_csv = config.csv

        # built once, and shared by all sources
        self.catalog = FormatCatalog.build()
        self.sources: list[SourceClassifier] | None = None

    def open_sources(self) -> list[SourceClassifier]:
        """
        Open all input files, and wrap each in a SourceClassifier. Raises OSError
        if any file can't be opened, before any lines are read.
        """
        if self.sources is not None:
            return self.sources

        sources = []
        stdin_found = False
        for prefix, path in self.inputs:
            if path == STDIN_NAME:
                # only the first reference to stdin is used
                if stdin_found:
                    continue
                stdin_found = True
            reader = FileReader.get_reader(path, self.encoding)
            sources.append(SourceClassifier(reader, prefix, self.catalog))

        self.sources = sources
        return sources

    def merged_lines(self) -> Generator[AnnotatedLine, None, None]:
        merger = Merger(self.open_sources())
        yield from IntervalAnnotator(self.interval_unit)(merger)

    def run(self):
        self.open_sources()
        merged_lines = self.merged_lines()

        if self.save_to_csv:
            save_to_csv(merged_lines, self.save_to_csv)
        else:
            MergedLineWriter(self.color).write(merged_lines)

        self._report_read_errors()

    def _report_read_errors(self):
        for source in self.sources:
            if source.read_error is not None:
                print(
                    f"ziplog: warning: read error in {source.lines.file_name}: {source.read_error}",
                    file=sys.stderr
                )


def main():

    parser = make_argument_parser()
    args_ns = parser.parse_args()

    app = ZipLogApplication(args_ns)
    try:
        app.open_sources()
    except OSError as exc:
        print(f"ziplog: error opening file: {exc.filename}: {exc.strerror}", file=sys.stderr)
        sys.exit(1)

    app.run()


if __name__ == '__main__':
    main()
