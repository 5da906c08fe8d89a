"""
Domain Models - Internal business logic models using dataclasses.

NO DICTIONARIES - All data structures are strongly typed immutable dataclasses.
Accounts are never edited in place: operations build a new snapshot and
hand it to the store, which keeps exactly one snapshot per account id.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from app.exceptions import InsufficientCreditsError
from app.models.api import (
    AuditStatus,
    CreditPool,
    FeatureKey,
    PlanType,
    UserRole,
    UserStatus,
)


@dataclass(frozen=True)
class CreditPoolPair:
    """Daily and monthly credit balances with their ceilings."""

    daily: int
    max_daily: int
    monthly: int
    max_monthly: int

    def __post_init__(self) -> None:
        """Validate pool invariants."""
        if not 0 <= self.daily <= self.max_daily:
            raise ValueError(f"Daily balance out of range: {self.daily}/{self.max_daily}")
        if not 0 <= self.monthly <= self.max_monthly:
            raise ValueError(f"Monthly balance out of range: {self.monthly}/{self.max_monthly}")

    @classmethod
    def full(cls, max_daily: int, max_monthly: int) -> "CreditPoolPair":
        """Pools filled to the given ceilings."""
        return cls(
            daily=max_daily, max_daily=max_daily, monthly=max_monthly, max_monthly=max_monthly
        )

    def at_ceiling(self) -> "CreditPoolPair":
        """Same ceilings, both balances refilled."""
        return replace(self, daily=self.max_daily, monthly=self.max_monthly)


@dataclass(frozen=True)
class Account:
    """Immutable account snapshot."""

    account_id: str
    name: str
    email: str
    plan: PlanType
    role: UserRole
    status: UserStatus
    credits: CreditPoolPair
    joined_at: datetime

    def __post_init__(self) -> None:
        """Validate account identity fields."""
        if not self.account_id:
            raise ValueError("account_id cannot be empty")
        if not self.email:
            raise ValueError("email cannot be empty")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_blocked(self) -> bool:
        return self.status == UserStatus.BLOCKED


@dataclass(frozen=True)
class CostSchedule:
    """Credit cost per feature key."""

    costs: tuple[tuple[FeatureKey, int], ...]

    def get(self, feature: FeatureKey) -> int:
        """Look up a cost. Raises KeyError for a feature with no configured cost."""
        for key, cost in self.costs:
            if key == feature:
                return cost
        raise KeyError(feature)

    def as_mapping(self) -> dict[FeatureKey, int]:
        return dict(self.costs)


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable record of one metered consumption attempt."""

    entry_id: str
    user_id: str
    user_name: str
    action: str
    cost: int
    timestamp: datetime
    status: AuditStatus


@dataclass(frozen=True)
class ConsumeResult:
    """Outcome of a consume call."""

    status: AuditStatus
    account: Account
    cost: int
    pool: CreditPool
    daily_before: int
    monthly_before: int
    entry: AuditLogEntry

    @property
    def succeeded(self) -> bool:
        return self.status == AuditStatus.SUCCESS

    def raise_for_status(self) -> "ConsumeResult":
        """Raise InsufficientCreditsError if the attempt failed."""
        if not self.succeeded:
            raise InsufficientCreditsError(self.daily_before, self.monthly_before, self.cost)
        return self


@dataclass(frozen=True)
class Artifact:
    """Stored result of a successful generation."""

    artifact_id: str
    account_id: str
    feature: FeatureKey
    title: str
    created_at: datetime
    payload: dict[str, Any] = field(default_factory=dict)
    updated_at: datetime | None = None
