"""
In-Memory Store - Explicit state container for the credit ledger.

Holds accounts, the audit trail, the active cost schedule and generated
artifacts for the lifetime of the process. Every service receives the
store it works on; there is no module-level state.
"""

import asyncio
from collections import deque

from app.exceptions import AccountNotFoundError, ArtifactNotFoundError
from app.models.domain import Account, Artifact, AuditLogEntry, CostSchedule


class LedgerStore:
    """
    Single source of truth for ledger state.

    Accounts are immutable snapshots keyed by id; saving a snapshot replaces
    the previous one, so every reader sees the same record for an id.
    Emails are indexed lowercased for case-insensitive lookup.
    """

    def __init__(self, cost_schedule: CostSchedule) -> None:
        self._accounts: dict[str, Account] = {}
        self._email_index: dict[str, str] = {}
        self._audit_entries: deque[AuditLogEntry] = deque()
        self._artifacts: dict[str, deque[Artifact]] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self.cost_schedule = cost_schedule

    # ========================================================================
    # Accounts
    # ========================================================================

    def get_account(self, account_id: str) -> Account:
        """
        Get account by id.

        Raises:
            AccountNotFoundError: Account doesn't exist
        """
        account = self._accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    def find_account_by_email(self, email: str) -> Account | None:
        account_id = self._email_index.get(email.strip().lower())
        if account_id is None:
            return None
        return self._accounts[account_id]

    def add_account(self, account: Account) -> Account:
        """Insert a new account. Email and id must both be unused."""
        key = account.email.strip().lower()
        if key in self._email_index:
            raise ValueError(f"Email already registered: {account.email}")
        if account.account_id in self._accounts:
            raise ValueError(f"Account id already exists: {account.account_id}")
        self._accounts[account.account_id] = account
        self._email_index[key] = account.account_id
        return account

    def save_account(self, account: Account) -> Account:
        """Replace the stored snapshot of an existing account."""
        current = self.get_account(account.account_id)
        if current.email.strip().lower() != account.email.strip().lower():
            raise ValueError("Account email cannot change")
        self._accounts[account.account_id] = account
        return account

    def list_accounts(self) -> list[Account]:
        """All accounts in creation order."""
        return list(self._accounts.values())

    def lock_for(self, account_id: str) -> asyncio.Lock:
        """Per-account lock serializing read-check-write sequences."""
        lock = self._locks.get(account_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[account_id] = lock
        return lock

    # ========================================================================
    # Audit trail
    # ========================================================================

    def prepend_audit_entry(self, entry: AuditLogEntry) -> None:
        self._audit_entries.appendleft(entry)

    def audit_entries(self) -> list[AuditLogEntry]:
        """Audit entries newest first."""
        return list(self._audit_entries)

    # ========================================================================
    # Artifacts
    # ========================================================================

    def add_artifact(self, artifact: Artifact) -> None:
        self._artifacts.setdefault(artifact.account_id, deque()).appendleft(artifact)

    def artifacts_for(self, account_id: str) -> list[Artifact]:
        """Artifacts of one account newest first."""
        return list(self._artifacts.get(account_id, ()))

    def get_artifact(self, account_id: str, artifact_id: str) -> Artifact:
        """
        Get one of an account's artifacts.

        Raises:
            ArtifactNotFoundError: No artifact with that id belongs to the account
        """
        for artifact in self._artifacts.get(account_id, ()):
            if artifact.artifact_id == artifact_id:
                return artifact
        raise ArtifactNotFoundError(artifact_id)

    def replace_artifact(self, artifact: Artifact) -> Artifact:
        """Replace a stored artifact in place, keeping its position."""
        artifacts = self._artifacts.get(artifact.account_id, deque())
        for index, current in enumerate(artifacts):
            if current.artifact_id == artifact.artifact_id:
                artifacts[index] = artifact
                return artifact
        raise ArtifactNotFoundError(artifact.artifact_id)

    def remove_artifact(self, account_id: str, artifact_id: str) -> Artifact:
        artifact = self.get_artifact(account_id, artifact_id)
        self._artifacts[account_id].remove(artifact)
        return artifact
