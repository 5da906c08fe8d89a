"""
Account Directory - Account lookup, creation on first login, and blocking.

Login is simulated: an email either matches an existing account or creates
a new one. Every created account, admins included, lives in the directory.
"""

from dataclasses import replace
from datetime import UTC, datetime, timedelta
from uuid import uuid4

from structlog import get_logger

from app.config import Settings, get_settings
from app.db.store import LedgerStore
from app.exceptions import AccountBlockedError
from app.models.api import AuditStatus, PlanType, UserRole, UserStatus
from app.models.domain import Account, CreditPoolPair
from app.observability.metrics import metrics
from app.services.audit_log import AuditLog
from app.services.plan_catalog import admin_credits, get_plan

logger = get_logger(__name__)


def _utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(UTC)


class AccountDirectory:
    """Accounts held by a ledger store."""

    def __init__(self, store: LedgerStore, settings: Settings | None = None) -> None:
        self.store = store
        self.settings = settings or get_settings()

    def find_by_email(self, email: str) -> Account | None:
        """Case-insensitive exact match on email."""
        return self.store.find_account_by_email(email)

    def get(self, account_id: str) -> Account:
        """
        Get account by id.

        Raises:
            AccountNotFoundError: Account doesn't exist
        """
        return self.store.get_account(account_id)

    def list_accounts(self) -> list[Account]:
        return self.store.list_accounts()

    def role_for_email(self, email: str) -> UserRole:
        """
        Role granted to a new account.

        Explicitly configured admin emails always win; the substring
        heuristic only applies while it is enabled in settings.
        """
        normalized = email.strip().lower()
        if normalized in self.settings.admin_email_list:
            return UserRole.ADMIN
        if self.settings.admin_email_heuristic and "admin" in normalized:
            return UserRole.ADMIN
        return UserRole.USER

    async def login_or_create(self, name: str, email: str) -> Account:
        """
        Return the account for an email, creating it on first login.

        An existing account is returned unchanged; login never edits the profile.

        Raises:
            ValueError: Blank name or email
            AccountBlockedError: The existing account is blocked
        """
        name = name.strip()
        email = email.strip()
        if not name or not email:
            raise ValueError("name and email are required")

        existing = self.find_by_email(email)
        if existing is not None:
            if existing.is_blocked:
                logger.warning("login_blocked", account_id=existing.account_id)
                raise AccountBlockedError(existing.account_id)
            logger.info("login_existing_account", account_id=existing.account_id)
            return existing

        role = self.role_for_email(email)
        credits = admin_credits() if role == UserRole.ADMIN else get_plan(PlanType.FREE).credits()
        account = self.store.add_account(
            Account(
                account_id=uuid4().hex,
                name=name,
                email=email,
                plan=PlanType.FREE,
                role=role,
                status=UserStatus.ACTIVE,
                credits=credits,
                joined_at=_utc_now(),
            )
        )

        metrics.accounts_created_total.labels(role=role.value).inc()
        logger.info(
            "account_created",
            account_id=account.account_id,
            role=role.value,
            plan=account.plan.value,
        )
        return account

    async def set_blocked(self, account_id: str, blocked: bool) -> Account:
        """
        Block or unblock an account. Credits are untouched.

        Raises:
            AccountNotFoundError: Account doesn't exist
        """
        status = UserStatus.BLOCKED if blocked else UserStatus.ACTIVE
        async with self.store.lock_for(account_id):
            current = self.store.get_account(account_id)
            updated = current
            if current.status != status:
                updated = self.store.save_account(replace(current, status=status))

        metrics.admin_actions_total.labels(operation="block" if blocked else "unblock").inc()
        logger.info(
            "account_status_changed",
            account_id=account_id,
            old_status=current.status.value,
            new_status=updated.status.value,
        )
        return updated

    async def toggle_blocked(self, account_id: str) -> Account:
        """
        Flip between ACTIVE and BLOCKED.

        Raises:
            AccountNotFoundError: Account doesn't exist
        """
        async with self.store.lock_for(account_id):
            current = self.store.get_account(account_id)
            status = UserStatus.ACTIVE if current.is_blocked else UserStatus.BLOCKED
            updated = self.store.save_account(replace(current, status=status))

        metrics.admin_actions_total.labels(operation="toggle_block").inc()
        logger.info(
            "account_status_toggled",
            account_id=account_id,
            new_status=updated.status.value,
        )
        return updated

    def seed_demo_accounts(self, audit_log: AuditLog | None = None) -> list[Account]:
        """
        Load the demo creators and a few historical audit entries.

        Skips accounts whose email is already registered.
        """
        now = _utc_now()
        demo = [
            Account(
                account_id="u1",
                name="Alice Creator",
                email="alice@example.com",
                plan=PlanType.PRO,
                role=UserRole.USER,
                status=UserStatus.ACTIVE,
                credits=CreditPoolPair(daily=45, max_daily=50, monthly=800, max_monthly=1000),
                joined_at=datetime(2023, 10, 15, tzinfo=UTC),
            ),
            Account(
                account_id="u2",
                name="Bob Vlogs",
                email="bob@example.com",
                plan=PlanType.FREE,
                role=UserRole.USER,
                status=UserStatus.ACTIVE,
                credits=CreditPoolPair(daily=2, max_daily=5, monthly=10, max_monthly=50),
                joined_at=datetime(2023, 11, 2, tzinfo=UTC),
            ),
            Account(
                account_id="u3",
                name="Charlie Agency",
                email="charlie@agency.com",
                plan=PlanType.PREMIUM,
                role=UserRole.USER,
                status=UserStatus.ACTIVE,
                credits=CreditPoolPair(daily=100, max_daily=100, monthly=4500, max_monthly=5000),
                joined_at=datetime(2023, 9, 20, tzinfo=UTC),
            ),
        ]

        seeded = [self.store.add_account(a) for a in demo if self.find_by_email(a.email) is None]
        by_id = {a.account_id: a for a in seeded}

        if audit_log is not None:
            # Oldest first so the newest ends up on top
            history = [
                ("u3", "Channel Analysis", 10, AuditStatus.SUCCESS, timedelta(seconds=8000)),
                ("u2", "Thumbnail Studio", 3, AuditStatus.FAILED, timedelta(seconds=5000)),
                ("u1", "Full Script Generation", 5, AuditStatus.SUCCESS, timedelta(seconds=1000)),
            ]
            for account_id, action, cost, status, age in history:
                if account_id in by_id:
                    audit_log.record(by_id[account_id], action, cost, status, timestamp=now - age)

        logger.info("demo_accounts_seeded", count=len(seeded))
        return seeded
