"""
Source queue with a persistent list and an active playback list.

The persistent list is what operators see and edit. The active list is a
working copy consumed front-to-back during one playback cycle; it is only
refilled from the persistent list when looping is enabled, so edits reach
playback at the next refill.
"""

from __future__ import annotations

from collections import Counter, deque
from collections.abc import Iterable

import structlog

from .sources import Source, SourceKind, classify

_log = structlog.get_logger(__name__)

_KIND_LABELS = (
    (SourceKind.FILE, "file(s)"),
    (SourceKind.URL, "URL(s)"),
    (SourceKind.STREAM, "stream(s)"),
)


def kind_breakdown(sources: Iterable[Source]) -> str:
    """Summarise sources by kind, e.g. ``(2 file(s), 1 URL(s))``."""
    counts = Counter(source.kind for source in sources)
    parts = [f"{counts[kind]} {label}" for kind, label in _KIND_LABELS if counts[kind]]
    return f"({', '.join(parts)})" if parts else ""


class SourceQueue:
    """
    Ordered, de-duplicated queue of sources feeding the relay engine.

    next() never fails: when nothing is left to play it returns the
    placeholder locator so the destination keeps receiving media.
    """

    def __init__(self, placeholder: str, loop: bool = False):
        self.placeholder = placeholder
        self.loop = loop
        self.total_played = 0
        self._persistent: list[Source] = []
        self._active: deque[Source] = deque()

    def __len__(self) -> int:
        return len(self._persistent)

    def __contains__(self, locator: object) -> bool:
        return any(source.locator == locator for source in self._persistent)

    # Mutation ------------------------------------------------------------------
    def add(self, *locators: str) -> list[Source]:
        """
        Classify and append locators that are new and valid.

        Returns:
            The sources actually appended, in order
        """
        seen = {source.locator for source in self._persistent}
        accepted: list[Source] = []
        for locator in locators:
            if locator in seen:
                continue
            seen.add(locator)
            source = classify(locator)
            if source.valid:
                accepted.append(source)

        if not accepted:
            _log.warning("queue_add_nothing_valid", requested=len(locators))
            return []

        self._persistent.extend(accepted)
        _log.info(
            "queue_add",
            added=len(accepted),
            breakdown=kind_breakdown(accepted),
            total=len(self._persistent),
        )
        return accepted

    def remove(self, index: int) -> bool:
        """Remove the persistent entry at ``index``; out-of-range is reported, not raised."""
        if index < 0 or index >= len(self._persistent):
            _log.warning("queue_remove_invalid_index", index=index, size=len(self._persistent))
            return False
        removed = self._persistent.pop(index)
        _log.info("queue_remove", locator=removed.locator, index=index)
        return True

    def clear(self) -> None:
        """Empty both the persistent and the active list."""
        self._persistent.clear()
        self._active.clear()
        _log.info("queue_cleared")

    # Playback ------------------------------------------------------------------
    def begin_cycle(self) -> None:
        """Replace the active list with a snapshot of the persistent list."""
        self._active = deque(self._persistent)

    def next(self) -> str:
        """
        Pop the next locator to play.

        Refills from the persistent list at most once per call, and only
        when looping; falls back to the placeholder otherwise.
        """
        refilled = False
        while True:
            if self._active:
                source = self._active.popleft()
                self.total_played += 1
                return source.locator

            if refilled or not self.loop or not self._persistent:
                return self.placeholder

            _log.info("queue_loop_refill", size=len(self._persistent))
            self.begin_cycle()
            self.total_played = 0
            refilled = True

    # Snapshots -----------------------------------------------------------------
    def items(self) -> tuple[Source, ...]:
        return tuple(self._persistent)

    def pending(self) -> tuple[Source, ...]:
        return tuple(self._active)

    def breakdown(self) -> str:
        return kind_breakdown(self._persistent)
