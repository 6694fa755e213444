"""Exceptions raised while obtaining a snapshot."""

from energytop.models import FailureReason, SnapshotFailure


class SnapshotError(Exception):
    """Base class for failures that cost a tick its snapshot."""

    reason: FailureReason = FailureReason.TRANSPORT_FAILURE

    def __init__(self, message: str, raw_text: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.raw_text = raw_text

    def to_failure(self) -> SnapshotFailure:
        """Convert to the failure record surfaced to the presentation layer."""
        return SnapshotFailure(reason=self.reason, message=self.message, raw_text=self.raw_text)


class ProviderUnreadableError(SnapshotError):
    """The snapshot source could not be accessed."""

    reason = FailureReason.UNREADABLE_SOURCE


class NoEntriesError(SnapshotError):
    """The source was read but no line qualified as an entry."""

    reason = FailureReason.NO_ENTRIES

    def __init__(self, raw_text: str, message: str | None = None) -> None:
        super().__init__(
            message
            or "Could not parse any entries (expected lines of key=value with pid, comm, energy).",
            raw_text=raw_text,
        )


class TransportFailureError(SnapshotError):
    """The delivery channel between provider and consumer failed."""

    reason = FailureReason.TRANSPORT_FAILURE


_ERRORS_BY_REASON: dict[FailureReason, type[SnapshotError]] = {
    FailureReason.UNREADABLE_SOURCE: ProviderUnreadableError,
    FailureReason.TRANSPORT_FAILURE: TransportFailureError,
    FailureReason.NO_ENTRIES: NoEntriesError,
}


def error_from_failure(failure: SnapshotFailure) -> SnapshotError:
    """Rebuild the exception matching a failure record."""
    error_cls = _ERRORS_BY_REASON[failure.reason]
    if error_cls is NoEntriesError:
        return NoEntriesError(failure.raw_text or "", message=failure.message)
    return error_cls(failure.message, raw_text=failure.raw_text)
