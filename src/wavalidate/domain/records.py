"""Validation outcomes and result records.

INVARIANT: A ResultRecord is append-only. Once written to the result
sink it is never mutated.
"""

from __future__ import annotations

from pydantic import BaseModel

NOT_READY = "not_ready"
LOOKUP_FAILED = "lookup_failed"


class ValidationOutcome(BaseModel):
    """Result of one directory lookup.

    ``reason`` is None for a determinate answer.  Indeterminate outcomes
    (session not ready, lookup error) carry a reason and always report
    ``exists=False``: unknown collapses to false.
    """

    model_config = {"frozen": True}

    exists: bool
    reason: str | None = None
    error: str | None = None

    @property
    def indeterminate(self) -> bool:
        return self.reason is not None

    @classmethod
    def not_ready(cls) -> ValidationOutcome:
        return cls(exists=False, reason=NOT_READY)

    @classmethod
    def lookup_failed(cls, error: str) -> ValidationOutcome:
        return cls(exists=False, reason=LOOKUP_FAILED, error=error)


class ResultRecord(BaseModel):
    """One output row: canonical address and whether it exists."""

    model_config = {"frozen": True}

    address: str
    exists: bool

    def to_row(self) -> tuple[str, str]:
        """Render as CSV fields with literal ``true``/``false`` tokens."""
        return self.address, "true" if self.exists else "false"
