"""Data models for energytop."""

import math
from dataclasses import dataclass, field
from enum import Enum

# 1 uJ = 1e-6 J, 1 kWh = 3.6e9 J
KWH_PER_MICROJOULE = 2.7777777777778e-13

# Marker for a tick in which a series has no reading. Distinct from 0.0.
NO_DATA = None

FieldValue = int | float | str


class FailureReason(Enum):
    """Reasons a tick can fail to produce a snapshot."""

    UNREADABLE_SOURCE = "unreadable-source"
    TRANSPORT_FAILURE = "transport-failure"
    NO_ENTRIES = "no-entries"


@dataclass(slots=True, frozen=True)
class Entry:
    """One process's energy reading within a snapshot."""

    pid: int
    comm: str
    energy_raw: float  # Microjoules
    fields: dict[str, FieldValue]
    raw_line: str

    @property
    def energy_converted(self) -> float:
        """Energy in kilowatt-hours."""
        return self.energy_raw * KWH_PER_MICROJOULE

    @property
    def has_energy(self) -> bool:
        return math.isfinite(self.energy_raw)


@dataclass(slots=True, frozen=True)
class Snapshot:
    """One timestamped batch of entries read from the source."""

    timestamp: int  # Unix seconds
    entries: tuple[Entry, ...]
    raw_text: str
    source: str = ""


@dataclass(slots=True, frozen=True)
class SnapshotFailure:
    """A tick that produced no snapshot."""

    reason: FailureReason
    message: str
    raw_text: str | None = None


@dataclass(slots=True)
class Series:
    """Per-pid energy history aligned to the shared timeline."""

    pid: int
    comm: str
    values: list[float | None] = field(default_factory=list)

    @property
    def display_label(self) -> str:
        return f"{self.comm} (pid {self.pid})"


@dataclass(slots=True, frozen=True)
class DisplayRow:
    """A display-ready table row."""

    pid: int
    comm: str
    energy: str


@dataclass(slots=True, frozen=True)
class ChartDataset:
    label: str
    values: tuple[float | None, ...]


@dataclass(slots=True, frozen=True)
class ChartView:
    """Consistent copy of the aggregator window for chart consumers."""

    labels: tuple[str, ...]
    datasets: tuple[ChartDataset, ...]
