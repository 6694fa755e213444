"""Parser for key=value energy snapshots.

The source is newline separated text where each line carries whitespace
separated ``key=value`` tokens, e.g.::

    pid=42 comm=php energy=7200000000000

Lines lacking any of ``pid``, ``comm`` or ``energy`` are ignored. Only a blob
without a single qualifying line is an error.
"""

import re
import time

from energytop.errors import NoEntriesError
from energytop.models import Entry, FieldValue, Snapshot

REQUIRED_KEYS = ("pid", "comm", "energy")

_TOKEN_RE = re.compile(r"(\w+)=(\S+)")
_LINE_SPLIT_RE = re.compile(r"\r?\n")
_INT_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(r"[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?")


def coerce_value(token: str) -> FieldValue:
    """Return token as int or float when it is lexically a number, else as text."""
    if _INT_RE.fullmatch(token):
        try:
            return int(token)
        except ValueError:
            # Beyond the interpreter's int string length limit
            return token
    if _FLOAT_RE.fullmatch(token):
        return float(token)
    return token


def _as_pid(value: FieldValue) -> int | None:
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _as_energy(value: FieldValue) -> float:
    if isinstance(value, str):
        return float("nan")
    try:
        return float(value)
    except OverflowError:
        return float("nan")


def parse_line(line: str) -> Entry | None:
    """
    Parse one source line.

    Returns None for lines that do not qualify as an entry.
    An energy value that is not a number, or does not fit a float, is kept
    as NaN (no data). Unlike a PHP-style float cast it is never read as 0 or
    as the numeric prefix of the token.
    """
    fields: dict[str, FieldValue] = {}
    for key, value in _TOKEN_RE.findall(line):
        fields[key.lower()] = coerce_value(value)

    if any(key not in fields for key in REQUIRED_KEYS):
        return None

    pid = _as_pid(fields["pid"])
    if pid is None:
        return None

    energy_raw = _as_energy(fields["energy"])

    return Entry(
        pid=pid,
        comm=str(fields["comm"]),
        energy_raw=energy_raw,
        fields=fields,
        raw_line=line,
    )


def parse_entries(raw_text: str) -> list[Entry]:
    """Parse all qualifying lines of a blob, in source order."""
    entries: list[Entry] = []
    seen_pids: set[int] = set()

    for line in _LINE_SPLIT_RE.split(raw_text.strip()):
        line = line.strip()
        if not line:
            continue

        entry = parse_line(line)
        # First line wins when a pid repeats within one blob
        if entry is None or entry.pid in seen_pids:
            continue

        seen_pids.add(entry.pid)
        entries.append(entry)

    return entries


def parse_snapshot(raw_text: str, timestamp: int | None = None, source: str = "") -> Snapshot:
    """
    Parse a raw blob into a Snapshot.

    Args:
        raw_text: Full text read from the source.
        timestamp: Sample time in unix seconds. Defaults to now.
        source: Locator the text was read from, kept for diagnostics.

    Raises:
        NoEntriesError: If no line in the blob qualifies as an entry.
    """
    entries = parse_entries(raw_text)
    if not entries:
        raise NoEntriesError(raw_text)

    if timestamp is None:
        timestamp = int(time.time())

    return Snapshot(timestamp=timestamp, entries=tuple(entries), raw_text=raw_text, source=source)
