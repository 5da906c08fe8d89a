"""
Credit Ledger - Consumption, resets and plan changes on account credit pools.

Every balance change runs under the account's lock and follows the pattern:
1. Re-read the current snapshot from the store
2. Decide the new state
3. Build the new snapshot (pool invariants are validated on construction)
4. Replace the stored snapshot
"""

from dataclasses import replace

from structlog import get_logger

from app.db.store import LedgerStore
from app.models.api import AuditStatus, CreditPool, PlanType
from app.models.domain import Account, ConsumeResult
from app.observability.metrics import metrics
from app.services.audit_log import AuditLog
from app.services.plan_catalog import get_plan

logger = get_logger(__name__)


class CreditLedger:
    """
    Credit ledger over a store.

    Consumption policy is daily-first, single-pool: a cost is taken in full
    from the daily pool if it covers it, otherwise in full from the monthly
    pool, otherwise not at all. A cost is never split across pools.
    """

    def __init__(self, store: LedgerStore, audit_log: AuditLog | None = None) -> None:
        self.store = store
        self.audit_log = audit_log or AuditLog(store)

    async def consume(self, account: Account | str, cost: int, feature_label: str) -> ConsumeResult:
        """
        Attempt to spend credits.

        Admin accounts always succeed without being charged. Every call writes
        exactly one audit entry. A failed attempt mutates nothing and reports
        the balances it saw.

        Raises:
            ValueError: Negative cost
            AccountNotFoundError: Account doesn't exist
        """
        if cost < 0:
            raise ValueError(f"Cost cannot be negative: {cost}")

        account_id = account if isinstance(account, str) else account.account_id

        async with self.store.lock_for(account_id):
            current = self.store.get_account(account_id)
            credits = current.credits
            daily_before = credits.daily
            monthly_before = credits.monthly

            if current.is_admin:
                pool = CreditPool.EXEMPT
                updated = current
            elif credits.daily >= cost:
                pool = CreditPool.DAILY
                updated = replace(current, credits=replace(credits, daily=credits.daily - cost))
            elif credits.monthly >= cost:
                pool = CreditPool.MONTHLY
                updated = replace(
                    current, credits=replace(credits, monthly=credits.monthly - cost)
                )
            else:
                pool = CreditPool.NONE
                updated = current

            status = AuditStatus.FAILED if pool == CreditPool.NONE else AuditStatus.SUCCESS
            if updated is not current:
                self.store.save_account(updated)

            entry = self.audit_log.record(current, feature_label, cost, status)

        metrics.record_consume(status.value, pool.value, cost)
        log = logger.info if status == AuditStatus.SUCCESS else logger.warning
        log(
            "credits_consumed" if status == AuditStatus.SUCCESS else "credits_insufficient",
            account_id=account_id,
            action=feature_label,
            cost=cost,
            pool=pool.value,
            daily_before=daily_before,
            monthly_before=monthly_before,
            daily_after=updated.credits.daily,
            monthly_after=updated.credits.monthly,
        )

        return ConsumeResult(
            status=status,
            account=updated,
            cost=cost,
            pool=pool,
            daily_before=daily_before,
            monthly_before=monthly_before,
            entry=entry,
        )

    async def reset_to_max(self, account: Account | str) -> Account:
        """
        Refill both pools to their ceilings.

        Idempotent. Not recorded in the audit log.

        Raises:
            AccountNotFoundError: Account doesn't exist
        """
        account_id = account if isinstance(account, str) else account.account_id

        async with self.store.lock_for(account_id):
            current = self.store.get_account(account_id)
            refilled = replace(current, credits=current.credits.at_ceiling())
            updated = self.store.save_account(refilled)

        metrics.admin_actions_total.labels(operation="reset_credits").inc()
        logger.info(
            "credits_reset_to_max",
            account_id=account_id,
            daily=updated.credits.daily,
            monthly=updated.credits.monthly,
        )
        return updated

    async def apply_plan_change(self, account: Account | str, new_plan: PlanType) -> Account:
        """
        Switch plan and hard-reset both pools and ceilings to the plan's values.

        Remaining credits are not carried over or pro-rated.

        Raises:
            AccountNotFoundError: Account doesn't exist
        """
        account_id = account if isinstance(account, str) else account.account_id
        plan = get_plan(new_plan)

        async with self.store.lock_for(account_id):
            current = self.store.get_account(account_id)
            updated = self.store.save_account(
                replace(current, plan=new_plan, credits=plan.credits())
            )

        logger.info(
            "plan_changed",
            account_id=account_id,
            old_plan=current.plan.value,
            new_plan=new_plan.value,
            max_daily=plan.max_daily,
            max_monthly=plan.max_monthly,
        )
        return updated
