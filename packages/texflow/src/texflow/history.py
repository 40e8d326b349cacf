"""
Undo/redo history of (text, caret) snapshots.

A linear list with a pointer: pushing below the tail discards the redo
branch, and pushes that arrive within the coalescing window replace the top
entry so one undo step covers a burst of typing.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

DEFAULT_COALESCE_WINDOW = 1.0  # seconds


@dataclass(frozen=True)
class HistoryEntry:
    text: str
    caret: int


class HistoryStack:
    """
    Snapshot history with branch discard and time-based coalescing.

    ``clock`` returns seconds; tests pass a fake clock.
    """

    def __init__(
        self,
        initial: HistoryEntry | None = None,
        window: float = DEFAULT_COALESCE_WINDOW,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: list[HistoryEntry] = [initial or HistoryEntry("", 0)]
        self._pointer = 0
        self._window = window
        self._clock = clock
        self._last_push: float | None = None

    def push(self, text: str, caret: int, immediate: bool = False) -> None:
        """Record a snapshot, coalescing with the top entry inside the window."""
        now = self._clock()
        entry = HistoryEntry(text, caret)

        if self._pointer == len(self._entries) - 1:
            stale = self._last_push is None or now - self._last_push > self._window
            if immediate or stale:
                self._entries.append(entry)
                self._pointer += 1
            else:
                self._entries[self._pointer] = entry
        else:
            del self._entries[self._pointer + 1:]
            self._entries.append(entry)
            self._pointer += 1

        self._last_push = now

    def undo(self) -> HistoryEntry | None:
        """Step back; ``None`` when already at the oldest entry."""
        if self._pointer == 0:
            return None
        self._pointer -= 1
        return self._entries[self._pointer]

    def redo(self) -> HistoryEntry | None:
        """Step forward; ``None`` when already at the newest entry."""
        if self._pointer >= len(self._entries) - 1:
            return None
        self._pointer += 1
        return self._entries[self._pointer]

    def reset(self, text: str = "", caret: int = 0) -> None:
        self._entries = [HistoryEntry(text, caret)]
        self._pointer = 0
        self._last_push = None

    @property
    def current(self) -> HistoryEntry:
        return self._entries[self._pointer]

    @property
    def can_undo(self) -> bool:
        return self._pointer > 0

    @property
    def can_redo(self) -> bool:
        return self._pointer < len(self._entries) - 1

    @property
    def length(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
