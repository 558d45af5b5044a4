"""Outcome of a single control point dispatch."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .status import StatusCode


class DispatchOutcome(Enum):
    """How a control point write ended."""
    OK = "ok"
    REJECTED = "rejected"
    TRANSPORT_FAILURE = "transport_failure"


@dataclass(frozen=True, slots=True)
class DispatchResult:
    """Typed result of ControlPointDispatcher.dispatch().

    Only OK results carry the published status. Cancel is an OK result with
    no status, since nothing was published.
    """

    outcome: DispatchOutcome
    reason: str = ""
    status: StatusCode | None = None

    @classmethod
    def ok(cls, status: StatusCode | None = None, reason: str = "") -> DispatchResult:
        return cls(DispatchOutcome.OK, reason, status)

    @classmethod
    def rejected(cls, reason: str) -> DispatchResult:
        return cls(DispatchOutcome.REJECTED, reason)

    @classmethod
    def transport_failure(cls, reason: str) -> DispatchResult:
        return cls(DispatchOutcome.TRANSPORT_FAILURE, reason)

    @property
    def is_ok(self) -> bool:
        return self.outcome is DispatchOutcome.OK

    @property
    def published(self) -> bool:
        """Whether this dispatch changed the shared state."""
        return self.status is not None
