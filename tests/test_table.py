"""Tests for the table projector."""

from energytop.models import Entry, Snapshot
from energytop.parser import parse_snapshot
from energytop.table import PLACEHOLDER, format_energy, project

UJ_PER_KWH = 3.6e12


def make_snapshot(*readings: tuple[int, float]) -> Snapshot:
    entries = tuple(
        Entry(pid=pid, comm=f"p{pid}", energy_raw=kwh * UJ_PER_KWH, fields={}, raw_line="")
        for pid, kwh in readings
    )
    return Snapshot(timestamp=0, entries=entries, raw_text="")


def test_format_energy_three_decimals():
    """Test energy is formatted with three decimals."""
    assert format_energy(2.0) == "2.000"
    assert format_energy(0.12345) == "0.123"


def test_format_energy_placeholder():
    """Test missing or non-finite values render the placeholder."""
    assert format_energy(None) == PLACEHOLDER
    assert format_energy(float("nan")) == PLACEHOLDER
    assert format_energy(float("inf")) == PLACEHOLDER


def test_project_sorted_descending():
    """Test rows are ordered by energy, highest first."""
    rows = project(make_snapshot((1, 0.1), (2, 3.0), (3, 1.5)))

    assert [row.pid for row in rows] == [2, 3, 1]


def test_project_ties_keep_parse_order():
    """Test equal energies keep their original order."""
    rows = project(make_snapshot((1, 0.5), (2, 0.5), (3, 0.9)))

    assert [row.pid for row in rows] == [3, 1, 2]


def test_project_row_contents():
    """Test rows carry pid, comm and formatted energy."""
    rows = project(parse_snapshot("pid=42 comm=php energy=7200000000000", timestamp=0))

    assert len(rows) == 1
    assert rows[0].pid == 42
    assert rows[0].comm == "php"
    assert rows[0].energy == "2.000"


def test_project_non_finite_sorts_as_zero():
    """Test a reading without energy sorts like zero and shows the placeholder."""
    snapshot = parse_snapshot(
        "pid=1 comm=a energy=-3600000000000\npid=2 comm=b energy=n/a\npid=3 comm=c energy=0",
        timestamp=0,
    )

    rows = project(snapshot)

    assert [row.pid for row in rows] == [2, 3, 1]
    assert rows[0].energy == PLACEHOLDER


def test_project_is_pure():
    """Test projecting does not reorder the snapshot's entries."""
    snapshot = make_snapshot((1, 0.1), (2, 3.0))

    project(snapshot)

    assert [entry.pid for entry in snapshot.entries] == [1, 2]
