"""Tests for snapshot payload encoding."""

import json
import math

import pytest

from energytop import wire
from energytop.errors import (
    NoEntriesError,
    ProviderUnreadableError,
    TransportFailureError,
)
from energytop.models import FailureReason, SnapshotFailure
from energytop.parser import parse_snapshot

RAW = "pid=42 comm=php energy=7200000000000 cgroup=/web\npid=7 comm=bash energy=oops"


@pytest.fixture
def snapshot():
    return parse_snapshot(RAW, timestamp=1_700_000_000, source="/proc/energy/cgroup")


class TestEncode:
    """Tests for payload construction."""

    def test_snapshot_payload_shape(self, snapshot):
        """Test a snapshot payload carries timestamp, source, raw text and entries."""
        payload = wire.snapshot_to_payload(snapshot)

        assert payload["success"] is True
        data = payload["data"]
        assert data["timestamp"] == 1_700_000_000
        assert data["source"] == "/proc/energy/cgroup"
        assert data["rawText"] == RAW
        assert data["entries"][0] == {
            "pid": 42,
            "comm": "php",
            "energyRaw": 7.2e12,
            "energy": pytest.approx(2.0),
            "fields": {"pid": 42, "comm": "php", "energy": 7200000000000, "cgroup": "/web"},
            "rawLine": "pid=42 comm=php energy=7200000000000 cgroup=/web",
        }

    def test_non_finite_energy_is_null(self, snapshot):
        """Test a missing energy reading is encoded as null."""
        text = wire.encode(snapshot)

        entry = json.loads(text)["data"]["entries"][1]
        assert entry["energy"] is None
        assert entry["energyRaw"] is None
        assert entry["fields"]["energy"] == "oops"

    def test_failure_payload(self):
        """Test a failure payload carries reason, message and raw text."""
        failure = SnapshotFailure(FailureReason.NO_ENTRIES, "nothing", raw_text="foo=1")

        payload = wire.failure_to_payload(failure)

        assert payload == {
            "success": False,
            "data": {"reason": "no-entries", "message": "nothing", "rawText": "foo=1"},
        }

    def test_failure_payload_without_raw_text(self):
        """Test rawText is omitted when there is none."""
        failure = SnapshotFailure(FailureReason.UNREADABLE_SOURCE, "File not readable: /x")

        assert "rawText" not in wire.failure_to_payload(failure)["data"]


class TestDecode:
    """Tests for payload parsing."""

    def test_decode_snapshot(self, snapshot):
        """Test decoding an encoded snapshot restores its readings."""
        decoded = wire.decode(wire.encode(snapshot))

        assert decoded.timestamp == snapshot.timestamp
        assert decoded.source == snapshot.source
        assert decoded.raw_text == RAW
        assert [e.pid for e in decoded.entries] == [42, 7]
        assert decoded.entries[0].energy_converted == pytest.approx(2.0)
        assert math.isnan(decoded.entries[1].energy_raw)

    def test_decode_no_entries_failure(self):
        """Test a no-entries payload raises NoEntriesError with raw text."""
        text = wire.encode(SnapshotFailure(FailureReason.NO_ENTRIES, "empty", raw_text="foo=1"))

        with pytest.raises(NoEntriesError) as excinfo:
            wire.decode(text)

        assert excinfo.value.raw_text == "foo=1"
        assert excinfo.value.message == "empty"

    def test_decode_unreadable_failure(self):
        """Test an unreadable-source payload raises ProviderUnreadableError."""
        text = wire.encode(SnapshotFailure(FailureReason.UNREADABLE_SOURCE, "File not readable"))

        with pytest.raises(ProviderUnreadableError):
            wire.decode(text)

    @pytest.mark.parametrize(
        "text",
        [
            "not json",
            "[]",
            '{"success": true}',
            '{"success": true, "data": {"entries": []}}',
            '{"success": true, "data": {"timestamp": 1, "entries": [{"comm": "x"}]}}',
            '{"success": false, "data": {"reason": "exploded"}}',
            '{"success": false, "data": "oops"}',
        ],
    )
    def test_decode_malformed(self, text):
        """Test malformed payloads raise TransportFailureError."""
        with pytest.raises(TransportFailureError):
            wire.decode(text)
