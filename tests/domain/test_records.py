"""Tests for validation outcomes and result records."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from wavalidate.domain.records import (
    LOOKUP_FAILED,
    NOT_READY,
    ResultRecord,
    ValidationOutcome,
)


class TestValidationOutcome:
    def test_not_ready(self) -> None:
        outcome = ValidationOutcome.not_ready()
        assert outcome.exists is False
        assert outcome.reason == NOT_READY
        assert outcome.indeterminate

    def test_lookup_failed_keeps_error(self) -> None:
        outcome = ValidationOutcome.lookup_failed("timeout")
        assert outcome.exists is False
        assert outcome.reason == LOOKUP_FAILED
        assert outcome.error == "timeout"

    def test_determinate(self) -> None:
        assert not ValidationOutcome(exists=True).indeterminate


class TestResultRecord:
    def test_row_tokens(self) -> None:
        assert ResultRecord(address="549", exists=True).to_row() == ("549", "true")
        assert ResultRecord(address="", exists=False).to_row() == ("", "false")

    def test_frozen(self) -> None:
        record = ResultRecord(address="549", exists=True)
        with pytest.raises(ValidationError):
            record.exists = False  # type: ignore[misc]
