"""
Plan Catalog - Credit pool ceilings granted by each plan tier.
"""

from dataclasses import dataclass

from app.models.api import PlanType
from app.models.domain import CreditPoolPair


@dataclass(frozen=True)
class PlanConfig:
    """Configuration for a plan tier."""

    label: str
    max_daily: int
    max_monthly: int
    monthly_price: int  # Simulated, whole currency units

    def credits(self) -> CreditPoolPair:
        """Fresh pools at this tier's ceilings."""
        return CreditPoolPair.full(self.max_daily, self.max_monthly)


PLAN_CATALOG: dict[PlanType, PlanConfig] = {
    PlanType.FREE: PlanConfig(label="Starter", max_daily=5, max_monthly=50, monthly_price=0),
    PlanType.PRO: PlanConfig(
        label="Professional", max_daily=50, max_monthly=1000, monthly_price=49
    ),
    PlanType.PREMIUM: PlanConfig(
        label="Agency", max_daily=100, max_monthly=5000, monthly_price=99
    ),
}

# Admins are never charged; their pools only need to look unlimited.
ADMIN_MAX_DAILY = 999
ADMIN_MAX_MONTHLY = 9999


def get_plan(plan: PlanType) -> PlanConfig:
    """Look up a plan tier."""
    return PLAN_CATALOG[plan]


def admin_credits() -> CreditPoolPair:
    return CreditPoolPair.full(ADMIN_MAX_DAILY, ADMIN_MAX_MONTHLY)
