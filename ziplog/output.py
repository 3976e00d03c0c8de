from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import TextIO

import littletable as lt
from rich.console import Console
from rich.text import Text

from .interval_annotation import AnnotatedLine

COLOR_CHOICES = ("auto", "always", "never")


class MergedLineWriter:
    """
    Writes merged lines to stdout (or the given file), one per line.

    When writing to a terminal (or if color is "always"), the source prefix and the
    interval column are highlighted using rich; otherwise lines are written as-is.
    """
    prefix_style = "bold cyan"
    interval_style = "dim"

    def __init__(self, color: str = "auto", file: TextIO | None = None):
        if color not in COLOR_CHOICES:
            raise ValueError(f"invalid color choice {color!r}")
        self.file = file
        self.console = Console(
            file=file,
            force_terminal=True if color == "always" else None,
            no_color=color == "never",
            highlight=False,
            markup=False,
            emoji=False,
            soft_wrap=True,
        )
        self.colorize = color != "never" and self.console.is_terminal

    def _write_styled(self, annotated: AnnotatedLine):
        # only the column and prefix go through rich, which would expand tabs in the
        # log text; the rest of the line is written as-is
        line = annotated.line
        head = Text(annotated.column, style=self.interval_style)
        head.append(line.text[:line.prefix_width], style=self.prefix_style)
        self.console.print(head, end="")
        self.console.file.write(f"{line.text[line.prefix_width:]}\n")

    def write(self, merged_lines: Iterable[AnnotatedLine]) -> int:
        count = 0
        for annotated in merged_lines:
            if self.colorize:
                self._write_styled(annotated)
            else:
                print(annotated.text, file=self.file or sys.stdout)
            count += 1
        return count


def save_to_csv(merged_lines: Iterable[AnnotatedLine], csv_dest: str) -> lt.Table:
    """
    Save merged lines to a CSV file, with columns for the timestamp, interval, and
    rendered line.
    """
    def as_row(annotated: AnnotatedLine) -> dict[str, str]:
        timestamp = annotated.line.timestamp
        return {
            "timestamp": timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:23] if timestamp else "",
            "interval": "" if annotated.interval is None else str(annotated.interval),
            "line": annotated.line.text,
        }

    merged_lines_table = lt.Table()
    merged_lines_table.insert_many(as_row(annotated) for annotated in merged_lines)
    merged_lines_table.csv_export(csv_dest, fieldnames=["timestamp", "interval", "line"])
    return merged_lines_table
