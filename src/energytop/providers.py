"""Snapshot providers: where raw energy readings come from."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from energytop import wire
from energytop.errors import ProviderUnreadableError, SnapshotError, TransportFailureError
from energytop.models import Snapshot
from energytop.parser import parse_snapshot

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "/proc/energy/cgroup"


class SnapshotProvider(Protocol):
    """Anything that can produce the current snapshot on demand."""

    def now(self) -> Snapshot:
        """Return the current snapshot or raise SnapshotError."""
        ...


class FileSnapshotProvider:
    """Reads snapshots from a text file such as the ProcPower procfs entry."""

    def __init__(self, path: str | Path = DEFAULT_SOURCE) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read_text(self) -> str:
        """Read the raw source text."""
        try:
            with self._path.open("r", encoding="utf-8", errors="replace") as f:
                return f.read()
        except (FileNotFoundError, PermissionError, IsADirectoryError) as e:
            raise ProviderUnreadableError(f"File not readable: {self._path}") from e
        except OSError as e:
            raise ProviderUnreadableError(f"Unable to read: {self._path}") from e

    def now(self) -> Snapshot:
        return parse_snapshot(self.read_text(), source=str(self._path))


class ChannelSnapshotProvider:
    """
    Receives serialized snapshots over a request/response channel.

    ``fetch`` performs one round-trip and returns the JSON text built by
    ``energytop.wire.encode``.
    """

    def __init__(self, fetch: Callable[[], str]) -> None:
        self._fetch = fetch

    def now(self) -> Snapshot:
        try:
            text = self._fetch()
        except SnapshotError:
            raise
        except Exception as e:
            logger.debug("Channel fetch failed", exc_info=True)
            raise TransportFailureError(f"Fetch error: {e}") from e
        return wire.decode(text)
