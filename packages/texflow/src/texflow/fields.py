"""
Field tracker — the pending tab stops of the snippet being filled.

Stops are absolute offsets into the live text, so every mutation made while
the queue is active must be reported through ``shift``.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable

from .structure import enclosing_tabular, tabular_end
from .types import TabStop


class AdvanceSignal(Enum):
    """Returned by ``FieldTracker.advance`` instead of a stop."""
    INSERT_SEPARATOR = "insert-separator"


class FieldTracker:
    def __init__(self, stops: Iterable[TabStop] = ()) -> None:
        self._stops: list[TabStop] = list(stops)

    @property
    def stops(self) -> list[TabStop]:
        return list(self._stops)

    def __len__(self) -> int:
        return len(self._stops)

    def __bool__(self) -> bool:
        return bool(self._stops)

    def set(self, stops: Iterable[TabStop]) -> None:
        self._stops = list(stops)

    def clear(self) -> None:
        self._stops.clear()

    def peek(self) -> TabStop | None:
        return self._stops[0] if self._stops else None

    def shift(self, diff: int, from_offset: int) -> None:
        """Move every stop starting at or after ``from_offset`` by ``diff``."""
        if not self._stops or diff == 0:
            return
        shifted = [s.shifted(diff) if s.start >= from_offset else s for s in self._stops]
        self._stops = [s for s in shifted if s.start >= 0]

    def skip_consumed(self, caret: int) -> None:
        """Drop leading zero-width stops sitting at ``caret``."""
        while self._stops and self._stops[0].is_empty and self._stops[0].start == caret:
            self._stops.pop(0)

    def advance(self, caret: int, text: str | None = None) -> TabStop | AdvanceSignal | None:
        """
        Pop the next stop.

        With ``text`` given, a caret inside a tabular environment whose
        ``\\end`` tag comes before the next stop yields
        ``AdvanceSignal.INSERT_SEPARATOR`` and leaves the queue untouched.
        """
        self.skip_consumed(caret)
        if not self._stops:
            return None

        if text is not None:
            env = enclosing_tabular(text, caret)
            if env is not None:
                end_tag = tabular_end(text, caret, env)
                if end_tag is not None and self._stops[0].start >= end_tag:
                    return AdvanceSignal.INSERT_SEPARATOR

        return self._stops.pop(0)
