"""JSON payloads exchanged between a snapshot provider and its consumer.

A successful tick is sent as::

    {"success": true, "data": {"timestamp": ..., "source": ..., "rawText": ...,
                               "entries": [...]}}

and a failed one as::

    {"success": false, "data": {"reason": "no-entries", "message": ..., "rawText": ...}}
"""

import json
import math
from typing import Any

from energytop.errors import TransportFailureError, error_from_failure
from energytop.models import Entry, FailureReason, FieldValue, Snapshot, SnapshotFailure


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


def _field_to_json(value: FieldValue) -> FieldValue | None:
    if isinstance(value, float):
        return _finite_or_none(value)
    return value


def entry_to_payload(entry: Entry) -> dict[str, Any]:
    return {
        "pid": entry.pid,
        "comm": entry.comm,
        "energyRaw": _finite_or_none(entry.energy_raw),
        "energy": _finite_or_none(entry.energy_converted),
        "fields": {key: _field_to_json(value) for key, value in entry.fields.items()},
        "rawLine": entry.raw_line,
    }


def snapshot_to_payload(snapshot: Snapshot) -> dict[str, Any]:
    return {
        "success": True,
        "data": {
            "timestamp": snapshot.timestamp,
            "source": snapshot.source,
            "rawText": snapshot.raw_text,
            "entries": [entry_to_payload(entry) for entry in snapshot.entries],
        },
    }


def failure_to_payload(failure: SnapshotFailure) -> dict[str, Any]:
    data: dict[str, Any] = {"reason": failure.reason.value, "message": failure.message}
    if failure.raw_text is not None:
        data["rawText"] = failure.raw_text
    return {"success": False, "data": data}


def encode(result: Snapshot | SnapshotFailure) -> str:
    """Serialize a snapshot or a failure to JSON text."""
    if isinstance(result, Snapshot):
        payload = snapshot_to_payload(result)
    else:
        payload = failure_to_payload(result)
    return json.dumps(payload, allow_nan=False)


def _entry_from_payload(item: dict[str, Any]) -> Entry:
    energy_raw = item.get("energyRaw")
    fields = {
        key: float("nan") if value is None else value
        for key, value in (item.get("fields") or {}).items()
    }
    return Entry(
        pid=int(item["pid"]),
        comm=str(item["comm"]),
        energy_raw=float("nan") if energy_raw is None else float(energy_raw),
        fields=fields,
        raw_line=str(item.get("rawLine", "")),
    )


def decode(text: str) -> Snapshot:
    """
    Deserialize JSON text produced by ``encode``.

    Raises:
        SnapshotError: The matching subclass when the payload reports a failure.
        TransportFailureError: When the payload is malformed.
    """
    try:
        payload = json.loads(text)
        success = payload["success"]
        data = payload["data"]
    except (ValueError, TypeError, KeyError) as e:
        raise TransportFailureError(f"Unexpected response: {e}") from e

    if success is not True:
        try:
            failure = SnapshotFailure(
                reason=FailureReason(data["reason"]),
                message=str(data.get("message", "Unknown")),
                raw_text=data.get("rawText"),
            )
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            raise TransportFailureError(f"Unexpected response: {e}") from e
        raise error_from_failure(failure)

    try:
        return Snapshot(
            timestamp=int(data["timestamp"]),
            entries=tuple(_entry_from_payload(item) for item in data["entries"]),
            raw_text=str(data.get("rawText", "")),
            source=str(data.get("source", "")),
        )
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        raise TransportFailureError(f"Unexpected response: {e}") from e
