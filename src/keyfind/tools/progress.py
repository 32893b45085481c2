"""
Progress reporting for keyfind.

Progress is purely observational: reporters receive events but can never
change what a search returns. A tracker owns the counters of one search;
reporters decide what to do with the events (render, record or ignore).
"""

import logging
import threading
from enum import Enum
from typing import Callable, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


logger = logging.getLogger(__name__)


DEFAULT_GLYPHS = "|/-\\"


class ProgressPhase(Enum):
    """Phase label attached to each progress event."""
    MATCHING = "matching"
    DONE = "done"
    CANCELLED = "cancelled"


class ProgressEvent(BaseModel):
    """
    A snapshot of search progress.

    Attributes:
        current: Candidates processed so far
        total: Candidates enumerated for the search
        percent: Completion percentage (0-100)
        glyph: Current spinner glyph
        phase: What the search is doing
    """

    model_config = ConfigDict(frozen=True)

    current: int = Field(..., ge=0, description="Candidates processed so far")
    total: int = Field(..., ge=0, description="Total candidates")
    percent: float = Field(..., ge=0.0, le=100.0, description="Completion percentage")
    glyph: str = Field(..., description="Spinner glyph")
    phase: ProgressPhase = Field(..., description="Progress phase")

    @property
    def is_done(self) -> bool:
        return self.phase is ProgressPhase.DONE

    def __str__(self) -> str:
        return f"{self.glyph} {self.phase.value} {self.current}/{self.total} ({self.percent:.1f}%)"


class ProgressReporter:
    """Receives progress events. The base implementation discards them."""

    def report(self, event: ProgressEvent) -> None:
        pass


class NullProgressReporter(ProgressReporter):
    """Reporter that stays silent."""
    pass


class CallbackProgressReporter(ProgressReporter):
    """Reporter that forwards each event to a callable."""

    def __init__(self, callback: Callable[[ProgressEvent], None]):
        self.callback = callback

    def report(self, event: ProgressEvent) -> None:
        self.callback(event)


class RecordingProgressReporter(ProgressReporter):
    """Reporter that keeps every event it receives, in order."""

    def __init__(self):
        self.events: List[ProgressEvent] = []
        self._lock = threading.Lock()

    def report(self, event: ProgressEvent) -> None:
        with self._lock:
            self.events.append(event)


ProgressLike = Union[ProgressReporter, Callable[[ProgressEvent], None], None]


def as_reporter(progress: ProgressLike) -> ProgressReporter:
    """Wrap a callable (or None) into a ProgressReporter."""
    if progress is None:
        return NullProgressReporter()
    if isinstance(progress, ProgressReporter):
        return progress
    if callable(progress):
        return CallbackProgressReporter(progress)
    raise TypeError(f"Progress must be a ProgressReporter or callable, got {type(progress).__name__}")


class ProgressTracker:
    """
    Counts processed candidates for one search and emits events.

    The total is fixed at construction. ``advance`` emits a ``MATCHING``
    event for every processed count below the total; the count equal to
    the total is only ever reported by ``finish``, as the single ``DONE``
    event. The spinner glyph steps once every ``spinner_every`` candidates.
    Counters are guarded by a lock so worker threads may call ``advance``.
    """

    def __init__(
        self,
        total: int,
        reporter: Optional[ProgressReporter] = None,
        spinner_every: int = 10,
        glyphs: str = DEFAULT_GLYPHS,
    ):
        if total < 0:
            raise ValueError("Progress total cannot be negative")
        if spinner_every <= 0:
            raise ValueError("spinner_every must be positive")
        self.total = total
        self.reporter = reporter or NullProgressReporter()
        self.spinner_every = spinner_every
        self.glyphs = glyphs or DEFAULT_GLYPHS
        self.processed = 0
        self.spinner_index = 0
        self.finished = False
        self._lock = threading.Lock()

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 100.0 if self.finished else 0.0
        return (self.processed / self.total) * 100

    @property
    def glyph(self) -> str:
        return self.glyphs[self.spinner_index % len(self.glyphs)]

    def _snapshot(self, phase: ProgressPhase) -> ProgressEvent:
        return ProgressEvent(
            current=self.processed,
            total=self.total,
            percent=min(self.percent, 100.0),
            glyph=self.glyph,
            phase=phase,
        )

    def advance(self) -> None:
        """Mark one more candidate as processed."""
        with self._lock:
            if self.finished:
                return
            if self.processed >= self.total:
                return
            self.processed += 1
            if self.processed % self.spinner_every == 0:
                self.spinner_index += 1
            if self.processed >= self.total:
                # The completing count is reported by finish()
                return
            event = self._snapshot(ProgressPhase.MATCHING)
            self._emit(event)

    def finish(self) -> None:
        """Mark the search complete and emit the final event."""
        with self._lock:
            if self.finished:
                return
            self.processed = self.total
            self.finished = True
            self._emit(self._snapshot(ProgressPhase.DONE))

    def cancel(self) -> None:
        """Emit a cancellation event with the current counters."""
        with self._lock:
            if self.finished:
                return
            event = self._snapshot(ProgressPhase.CANCELLED)
            self.finished = True
            self._emit(event)

    def _emit(self, event: ProgressEvent) -> None:
        try:
            self.reporter.report(event)
        except Exception as e:
            # Reporter failures must not change search results
            logger.warning(f"Progress reporter failed: {e}")
