"""
Tests for exception classes.

Covers all exception types and their string representations.
"""

import pytest

from app.exceptions import (
    AccountBlockedError,
    AccountNotFoundError,
    GenerationError,
    InsufficientCreditsError,
    InvalidCostScheduleError,
    LedgerError,
)


class TestLedgerError:
    """Tests for base LedgerError."""

    def test_is_exception(self):
        assert issubclass(LedgerError, Exception)

    @pytest.mark.parametrize(
        "exc_class",
        [
            AccountBlockedError,
            AccountNotFoundError,
            GenerationError,
            InsufficientCreditsError,
            InvalidCostScheduleError,
        ],
    )
    def test_all_derive_from_ledger_error(self, exc_class: type):
        assert issubclass(exc_class, LedgerError)


class TestInsufficientCreditsError:
    def test_attributes(self):
        exc = InsufficientCreditsError(daily=2, monthly=4, required=5)

        assert exc.daily == 2
        assert exc.monthly == 4
        assert exc.required == 5

    def test_message(self):
        exc = InsufficientCreditsError(daily=2, monthly=4, required=5)

        assert str(exc) == "Insufficient credits. Daily: 2, Monthly: 4, Required: 5"


class TestAccountErrors:
    def test_not_found(self):
        exc = AccountNotFoundError("u9")

        assert exc.account_id == "u9"
        assert str(exc) == "Account not found: u9"

    def test_blocked(self):
        exc = AccountBlockedError("u2")

        assert exc.account_id == "u2"
        assert "blocked" in str(exc)


class TestInvalidCostScheduleError:
    def test_lists_every_problem(self):
        exc = InvalidCostScheduleError(["A: missing", "B: cost must be non-negative, got -1"])

        assert exc.problems == ["A: missing", "B: cost must be non-negative, got -1"]
        assert str(exc) == (
            "Invalid cost schedule: A: missing; B: cost must be non-negative, got -1"
        )


class TestGenerationError:
    def test_message(self):
        exc = GenerationError("timed out after 60.0s")

        assert exc.message == "timed out after 60.0s"
        assert str(exc) == "Generation failed: timed out after 60.0s"
