from __future__ import annotations

import heapq
from collections.abc import Iterable
from typing import Any, Callable, TypeVar

from .source_classifier import ClassifiedLine

T = TypeVar("T")
KeyFunction = Callable[[T], Any]


def merge_order_key(item: ClassifiedLine) -> tuple:
    """
    Sort key for merging ClassifiedLines: lines without a timestamp sort before all
    lines with one; lines with equal timestamps (or both without) sort by their
    rendered text.
    """
    timestamp, text, *_ = item
    if timestamp is None:
        return 0, text
    return 1, timestamp, text


class Merger:
    """
    Class that takes a list of iterators, each already in key order, and yields all of
    their items in a single key-ordered sequence.

    Uses a heap to pull values from the multiple iterators, holding only one pending
    item per iterator, so each iterator is only read as far as is needed to produce
    the next merged item.
    """
    def __init__(self, seq_list: list[Iterable[T]], key_function: KeyFunction = merge_order_key):
        self.seq_list = seq_list
        self.key_function = key_function
        self.heap_iter = heapq.merge(*self.seq_list, key=key_function)

    def __iter__(self):
        return self

    def __next__(self) -> T:
        return next(self.heap_iter)
