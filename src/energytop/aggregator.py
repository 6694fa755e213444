"""Windowed multi-series aggregation of energy snapshots."""

import logging
import threading
from datetime import datetime

from energytop.models import NO_DATA, ChartDataset, ChartView, Series, Snapshot

logger = logging.getLogger(__name__)

DEFAULT_MAX_POINTS = 300


def format_clock(timestamp: int) -> str:
    """Format a unix timestamp as a local 24-hour clock label."""
    return datetime.fromtimestamp(timestamp).strftime("%H:%M:%S")


class SeriesAggregator:
    """
    Keeps one energy series per pid, aligned to a shared timeline.

    Every series holds exactly one value per timeline label. A pid missing
    from a snapshot gets NO_DATA for that tick, and the window never holds
    more than ``max_points`` labels. Only ``ingest`` mutates state; it runs
    under a lock so readers never observe a partially applied tick.
    """

    def __init__(self, max_points: int = DEFAULT_MAX_POINTS) -> None:
        """
        Initialize the SeriesAggregator.

        Args:
            max_points: Maximum number of timeline labels retained.
        """
        if max_points < 1:
            raise ValueError(f"max_points must be >= 1, got {max_points}")
        self._max_points = max_points
        self._lock = threading.Lock()
        self._timeline: list[str] = []
        self._series_by_pid: dict[int, Series] = {}
        self._tick_count = 0

    @property
    def max_points(self) -> int:
        return self._max_points

    @property
    def tick_count(self) -> int:
        """Number of snapshots ingested since creation or the last reset."""
        with self._lock:
            return self._tick_count

    @property
    def timeline(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._timeline)

    @property
    def pids(self) -> tuple[int, ...]:
        """Pids in first-seen order."""
        with self._lock:
            return tuple(self._series_by_pid)

    def __len__(self) -> int:
        with self._lock:
            return len(self._series_by_pid)

    def series(self, pid: int) -> Series | None:
        """Return a copy of the series for pid, or None if never seen."""
        with self._lock:
            series = self._series_by_pid.get(pid)
            if series is None:
                return None
            return Series(pid=series.pid, comm=series.comm, values=list(series.values))

    def ingest(self, snapshot: Snapshot) -> None:
        """Append one snapshot to the window."""
        with self._lock:
            self._timeline.append(format_clock(snapshot.timestamp))
            self._tick_count += 1
            slots = len(self._timeline)

            seen: set[int] = set()
            for entry in snapshot.entries:
                if entry.pid in seen:
                    continue
                seen.add(entry.pid)

                series = self._series_by_pid.get(entry.pid)
                if series is None:
                    # Backfill so the new series lines up with earlier labels
                    series = Series(pid=entry.pid, comm=entry.comm, values=[NO_DATA] * (slots - 1))
                    self._series_by_pid[entry.pid] = series
                    logger.debug("New series for %s", series.display_label)
                elif series.comm != entry.comm:
                    logger.debug("pid %d renamed from %r to %r", entry.pid, series.comm, entry.comm)
                    series.comm = entry.comm

                series.values.append(entry.energy_converted if entry.has_energy else NO_DATA)

            for pid, series in self._series_by_pid.items():
                if pid not in seen:
                    series.values.append(NO_DATA)

            if slots > self._max_points:
                drop = slots - self._max_points
                del self._timeline[:drop]
                for series in self._series_by_pid.values():
                    del series.values[:drop]

    def chart_view(self) -> ChartView:
        """Return a consistent copy of the timeline and all series."""
        with self._lock:
            return ChartView(
                labels=tuple(self._timeline),
                datasets=tuple(
                    ChartDataset(label=series.display_label, values=tuple(series.values))
                    for series in self._series_by_pid.values()
                ),
            )

    def reset(self) -> None:
        """Discard the timeline and every series."""
        with self._lock:
            self._timeline.clear()
            self._series_by_pid.clear()
            self._tick_count = 0
