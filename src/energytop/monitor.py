"""Polling engine for energytop."""

import logging
import threading
from dataclasses import dataclass, field
from queue import Queue

from energytop.aggregator import SeriesAggregator
from energytop.errors import SnapshotError
from energytop.models import DisplayRow, FailureReason, Snapshot, SnapshotFailure
from energytop.providers import SnapshotProvider
from energytop.table import project

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PollResult:
    """Outcome of one poll cycle, as delivered to the presentation layer."""

    snapshot: Snapshot | None = None
    rows: list[DisplayRow] = field(default_factory=list)
    failure: SnapshotFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def status(self) -> str:
        if self.failure is None:
            return "OK"
        return f"Error: {self.failure.message}"

    @property
    def raw_text(self) -> str | None:
        if self.snapshot is not None:
            return self.snapshot.raw_text
        return self.failure.raw_text if self.failure else None


class EnergyMonitor:
    """
    Energy monitor that polls a snapshot provider on a fixed interval.

    Runs in a separate daemon thread. Each cycle fetches one snapshot, ingests
    it into the aggregator and pushes a PollResult to a thread-safe Queue.
    Cycles are serialized: a slow fetch delays the next cycle instead of
    overlapping it, so snapshots are always ingested in the order read.
    Provider failures are pushed as results and never stop the loop.
    """

    def __init__(
        self,
        provider: SnapshotProvider,
        aggregator: SeriesAggregator,
        update_queue: Queue[PollResult],
        poll_rate: float = 1.0,
    ) -> None:
        """
        Initialize the EnergyMonitor.

        Args:
            provider: Source of snapshots.
            aggregator: Window the snapshots are ingested into.
            update_queue: Thread-safe queue to push results to.
            poll_rate: How often to poll the provider (in seconds). Default 1.0s.
        """
        self._provider = provider
        self._aggregator = aggregator
        self._queue = update_queue
        self._poll_rate = max(0.1, poll_rate)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._last_result: PollResult | None = None

    @property
    def poll_rate(self) -> float:
        """Get the current poll rate."""
        return self._poll_rate

    @poll_rate.setter
    def poll_rate(self, value: float) -> None:
        """Set the poll rate."""
        self._poll_rate = max(0.1, value)  # Minimum 0.1 seconds

    @property
    def aggregator(self) -> SeriesAggregator:
        return self._aggregator

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def last_result(self) -> PollResult | None:
        return self._last_result

    def start(self) -> None:
        """
        Start the monitoring thread.

        If a previous thread is still finishing a fetch after ``stop()``, wait
        for it first so two poll cycles never run at once.
        """
        if self.is_running:
            if not self._stop_event.is_set():
                return
            logger.debug("Waiting for the previous poll thread to finish")
            self._thread.join()

        # Each thread owns its event, a stopped thread is never revived
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._poll_loop,
            args=(self._stop_event,),
            daemon=True,
            name="EnergyMonitor",
        )
        self._thread.start()
        logger.info("Energy monitor started (poll rate %.2fs)", self._poll_rate)

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        A thread still inside a fetch when the timeout expires stays
        referenced; its snapshot is discarded when the fetch returns.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is None:
            return

        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning("Energy monitor thread still finishing a fetch")
            return

        self._thread = None
        logger.info("Energy monitor stopped")

    def poll_once(self, stop_event: threading.Event | None = None) -> PollResult | None:
        """
        Run one fetch/ingest/publish cycle.

        Returns the published result, or None if a stop was requested while
        the fetch was in flight, in which case the snapshot is discarded.

        Args:
            stop_event: Stop event of the calling thread. Defaults to the
                monitor's current one.
        """
        if stop_event is None:
            stop_event = self._stop_event

        try:
            snapshot = self._provider.now()
        except SnapshotError as e:
            logger.warning("Snapshot unavailable (%s): %s", e.reason.value, e.message)
            result = PollResult(failure=e.to_failure())
        except Exception as e:
            logger.exception("Unexpected error while polling")
            result = PollResult(
                failure=SnapshotFailure(
                    reason=FailureReason.TRANSPORT_FAILURE,
                    message=f"Fetch error: {e}",
                )
            )
        else:
            if stop_event.is_set():
                logger.debug("Discarding snapshot received after stop")
                return None
            self._aggregator.ingest(snapshot)
            result = PollResult(snapshot=snapshot, rows=project(snapshot))

        self._last_result = result
        self._queue.put(result)
        return result

    def _poll_loop(self, stop_event: threading.Event) -> None:
        """Main polling loop running in the background thread."""
        while not stop_event.is_set():
            self.poll_once(stop_event)

            # Wait for poll_rate seconds or until stop is requested
            stop_event.wait(timeout=self._poll_rate)
