"""
Audit Log Service - Append-only record of consumption attempts.

Entries are prepended, so storage order is newest first. There is no way to
edit or remove an entry.
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from uuid import uuid4

from app.db.store import LedgerStore
from app.models.api import AuditStatus
from app.models.domain import Account, AuditLogEntry


def _utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(UTC)


class AuditLog:
    """Audit trail over a ledger store."""

    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def record(
        self,
        account: Account,
        action: str,
        cost: int,
        status: AuditStatus,
        timestamp: datetime | None = None,
    ) -> AuditLogEntry:
        """
        Append one entry for a consumption attempt.

        The account name is copied into the entry and is not updated later.
        """
        entry = AuditLogEntry(
            entry_id=uuid4().hex,
            user_id=account.account_id,
            user_name=account.name,
            action=action,
            cost=cost,
            timestamp=timestamp or _utc_now(),
            status=status,
        )
        self.store.prepend_audit_entry(entry)
        return entry

    def entries(self, limit: int | None = None) -> list[AuditLogEntry]:
        """All entries, newest first."""
        entries = self.store.audit_entries()
        if limit is not None:
            return entries[:limit]
        return entries

    def for_user(self, user_id: str) -> list[AuditLogEntry]:
        """Entries of one account, newest first."""
        return [entry for entry in self.store.audit_entries() if entry.user_id == user_id]

    @staticmethod
    def total_consumed(entries: Iterable[AuditLogEntry]) -> int:
        """Sum of costs over successful entries."""
        return sum(entry.cost for entry in entries if entry.status == AuditStatus.SUCCESS)
