"""
Exception Classes - Strongly typed exception hierarchy.

NO DICTIONARIES - All exceptions have typed attributes.
"""


class LedgerError(Exception):
    """Base exception for all credit ledger errors."""

    pass


class InsufficientCreditsError(LedgerError):
    """Raised when neither credit pool alone covers the cost."""

    def __init__(self, daily: int, monthly: int, required: int) -> None:
        self.daily = daily
        self.monthly = monthly
        self.required = required
        super().__init__(
            f"Insufficient credits. Daily: {daily}, Monthly: {monthly}, Required: {required}"
        )


class AccountNotFoundError(LedgerError):
    """Raised when account doesn't exist."""

    def __init__(self, account_id: str) -> None:
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class AccountBlockedError(LedgerError):
    """Raised when a blocked account tries to log in."""

    def __init__(self, account_id: str) -> None:
        self.account_id = account_id
        super().__init__(f"Account {account_id} is blocked")


class InvalidCostScheduleError(LedgerError):
    """Raised when a cost schedule update is rejected."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__(f"Invalid cost schedule: {'; '.join(problems)}")


class GenerationError(LedgerError):
    """Raised when the content generation collaborator fails or times out."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Generation failed: {message}")



class ArtifactNotFoundError(LedgerError):
    """Raised when an artifact doesn't exist for the requesting account."""

    def __init__(self, artifact_id: str) -> None:
        self.artifact_id = artifact_id
        super().__init__(f"Artifact not found: {artifact_id}")
