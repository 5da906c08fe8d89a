"""
Analytics Service - Admin dashboard overview.
"""

from dataclasses import dataclass

from app.db.store import LedgerStore
from app.models.api import AuditStatus, PlanType, UserStatus
from app.services.audit_log import AuditLog
from app.services.plan_catalog import PLAN_CATALOG


@dataclass(frozen=True)
class PlanDistribution:
    plan: PlanType
    label: str
    monthly_price: int
    users: int


@dataclass(frozen=True)
class AnalyticsOverview:
    """Point-in-time totals across all accounts and the audit trail."""

    total_users: int
    active_users: int
    blocked_users: int
    total_credits_consumed: int
    failed_attempts: int
    monthly_revenue: int  # Simulated: sum of plan prices over accounts
    plans: tuple[PlanDistribution, ...]


class AnalyticsService:
    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def overview(self) -> AnalyticsOverview:
        accounts = self.store.list_accounts()
        entries = self.store.audit_entries()

        plans = tuple(
            PlanDistribution(
                plan=plan,
                label=config.label,
                monthly_price=config.monthly_price,
                users=sum(1 for a in accounts if a.plan == plan),
            )
            for plan, config in PLAN_CATALOG.items()
        )

        return AnalyticsOverview(
            total_users=len(accounts),
            active_users=sum(1 for a in accounts if a.status == UserStatus.ACTIVE),
            blocked_users=sum(1 for a in accounts if a.status == UserStatus.BLOCKED),
            total_credits_consumed=AuditLog.total_consumed(entries),
            failed_attempts=sum(1 for e in entries if e.status == AuditStatus.FAILED),
            monthly_revenue=sum(p.monthly_price * p.users for p in plans),
            plans=plans,
        )
