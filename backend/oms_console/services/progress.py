"""
Progress reporting for CSV uploads.

The reporter is given a publisher (any callable taking a ProgressEvent) when it
is constructed; it never looks one up globally. Delivery is best effort: a
failing publisher is logged and the upload carries on.
"""
import logging
import math
import threading
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Sequence

from oms_console.schemas.progress import ProgressEvent, CSV_UPLOAD_PROGRESS_EVENT

logger = logging.getLogger(__name__)

ProgressPublisher = Callable[[ProgressEvent], None]


def percent(done: int, total: int) -> int:
    """Whole percent of done/total, rounded half up, clamped to 0..100."""
    if total <= 0:
        return 100
    return max(0, min(100, math.floor(done * 100 / total + 0.5)))


class NullProgressPublisher:
    """Drops every event (no listener connected)."""

    def __call__(self, event: ProgressEvent) -> None:
        return None


class LoggingProgressPublisher:
    """Writes events to the log; useful for scripts and background jobs."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def __call__(self, event: ProgressEvent) -> None:
        logger.log(
            self.level,
            f"[{CSV_UPLOAD_PROGRESS_EVENT}] {event.upload_id}: {event.progress}% "
            f"({event.processed_items}/{event.total_items}) {event.current_item}"
            f"{' - completed' if event.completed else ''}",
        )


class InMemoryProgressPublisher:
    """
    Keeps every event per upload id so a poller (or a test) can read the
    history or the latest state.

    Events are held until the upload is dropped. A long-lived publisher must be
    drained with consume() or cleared with clear() once an upload is finished.
    """

    def __init__(self):
        self._events: Dict[str, List[ProgressEvent]] = defaultdict(list)
        self._lock = threading.Lock()

    def __call__(self, event: ProgressEvent) -> None:
        with self._lock:
            self._events[event.upload_id].append(event)

    def events(self, upload_id: str) -> List[ProgressEvent]:
        with self._lock:
            return list(self._events.get(upload_id, []))

    def latest(self, upload_id: str) -> Optional[ProgressEvent]:
        events = self.events(upload_id)
        return events[-1] if events else None

    def consume(self, upload_id: str) -> List[ProgressEvent]:
        """Events so far; the upload is dropped once its last event is completed."""
        with self._lock:
            events = list(self._events.get(upload_id, []))
            if events and events[-1].completed:
                self._events.pop(upload_id, None)
            return events

    def pending_uploads(self) -> List[str]:
        with self._lock:
            return list(self._events)

    def clear(self, upload_id: str) -> None:
        with self._lock:
            self._events.pop(upload_id, None)


class ProgressReporter:
    """Builds progress events and hands them to the injected publisher."""

    def __init__(self, publisher: Optional[ProgressPublisher] = None):
        self.publisher = publisher or NullProgressPublisher()

    def _publish(self, event: ProgressEvent) -> None:
        try:
            self.publisher(event)
        except Exception as e:
            logger.warning(f"Could not publish progress for upload {event.upload_id}: {e}")

    def emit(
        self,
        upload_id: str,
        progress: int,
        current_item: str,
        total_items: int,
        processed_items: int,
        errors: Sequence[str],
        completed: bool,
        success_message: Optional[str] = None,
    ) -> None:
        self._publish(ProgressEvent(
            upload_id=upload_id,
            progress=progress,
            current_item=current_item,
            total_items=total_items,
            processed_items=processed_items,
            errors=list(errors),
            completed=completed,
            success_message=success_message,
        ))

    def emit_batch(
        self,
        upload_id: str,
        progress: int,
        current_batch: int,
        total_batches: int,
        batch_size: int,
        total_items: int,
        processed_items: int,
        errors: Sequence[str],
    ) -> None:
        self._publish(ProgressEvent(
            upload_id=upload_id,
            progress=progress,
            current_item=f"Processing batch {current_batch}/{total_batches} ({batch_size} items)",
            total_items=total_items,
            processed_items=processed_items,
            errors=list(errors),
            completed=False,
            batch_processing=True,
            current_batch=current_batch,
            total_batches=total_batches,
            batch_size=batch_size,
        ))
