"""
Admin API routes for managing creators and the cost schedule.

Every route requires the ADMIN role.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from structlog import get_logger

from app.api.dependencies import get_store, require_admin
from app.api.routes import account_to_response, audit_log_response, schedule_to_response
from app.db.store import LedgerStore
from app.exceptions import AccountNotFoundError, InvalidCostScheduleError
from app.models.api import (
    AccountResponse,
    AnalyticsOverviewResponse,
    AuditLogResponse,
    BlockRequest,
    CostScheduleModel,
    PlanDistributionItem,
    UserListResponse,
)
from app.models.domain import Account
from app.services.analytics import AnalyticsService
from app.services.audit_log import AuditLog
from app.services.cost_schedule import CostScheduleService
from app.services.directory import AccountDirectory
from app.services.ledger import CreditLedger

logger = get_logger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"])


def _not_found(account_id: str) -> HTTPException:
    logger.warning("admin_account_not_found", account_id=account_id)
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="User not found",
    )


# ============================================================================
# Users
# ============================================================================


@router.get("/users", response_model=UserListResponse)
async def list_users(
    search: str | None = Query(None, description="Substring match on name or email"),
    admin: Account = Depends(require_admin),
    store: LedgerStore = Depends(get_store),
) -> UserListResponse:
    """List all accounts, admins included."""
    accounts = store.list_accounts()
    if search:
        needle = search.lower()
        accounts = [a for a in accounts if needle in a.name.lower() or needle in a.email.lower()]

    return UserListResponse(
        users=[account_to_response(a) for a in accounts],
        total=len(accounts),
    )


@router.get("/users/{account_id}", response_model=AccountResponse)
async def get_user(
    account_id: str,
    admin: Account = Depends(require_admin),
    store: LedgerStore = Depends(get_store),
) -> AccountResponse:
    """Get a single account."""
    try:
        account = store.get_account(account_id)
    except AccountNotFoundError as exc:
        raise _not_found(account_id) from exc
    return account_to_response(account)


@router.post("/users/{account_id}/reset-credits", response_model=AccountResponse)
async def reset_credits(
    account_id: str,
    admin: Account = Depends(require_admin),
    store: LedgerStore = Depends(get_store),
) -> AccountResponse:
    """Refill both credit pools to their ceilings."""
    try:
        account = await CreditLedger(store).reset_to_max(account_id)
    except AccountNotFoundError as exc:
        raise _not_found(account_id) from exc

    logger.info("admin_reset_credits", admin_id=admin.account_id, account_id=account_id)
    return account_to_response(account)


@router.put("/users/{account_id}/blocked", response_model=AccountResponse)
async def set_blocked(
    account_id: str,
    request: BlockRequest,
    admin: Account = Depends(require_admin),
    store: LedgerStore = Depends(get_store),
) -> AccountResponse:
    """Block or unblock an account."""
    try:
        account = await AccountDirectory(store).set_blocked(account_id, request.blocked)
    except AccountNotFoundError as exc:
        raise _not_found(account_id) from exc

    logger.info(
        "admin_set_blocked",
        admin_id=admin.account_id,
        account_id=account_id,
        blocked=request.blocked,
    )
    return account_to_response(account)


@router.post("/users/{account_id}/toggle-block", response_model=AccountResponse)
async def toggle_block(
    account_id: str,
    admin: Account = Depends(require_admin),
    store: LedgerStore = Depends(get_store),
) -> AccountResponse:
    """Flip an account between ACTIVE and BLOCKED."""
    try:
        account = await AccountDirectory(store).toggle_blocked(account_id)
    except AccountNotFoundError as exc:
        raise _not_found(account_id) from exc

    logger.info(
        "admin_toggle_block",
        admin_id=admin.account_id,
        account_id=account_id,
        status=account.status.value,
    )
    return account_to_response(account)


# ============================================================================
# Cost schedule
# ============================================================================


@router.get("/config/costs", response_model=CostScheduleModel)
async def get_costs(
    admin: Account = Depends(require_admin),
    store: LedgerStore = Depends(get_store),
) -> CostScheduleModel:
    """Active cost schedule."""
    return schedule_to_response(CostScheduleService(store).current())


@router.put("/config/costs", response_model=CostScheduleModel)
async def update_costs(
    request: CostScheduleModel,
    admin: Account = Depends(require_admin),
    store: LedgerStore = Depends(get_store),
) -> CostScheduleModel:
    """
    Replace the whole cost schedule.

    A rejected update leaves the previous schedule active.
    """
    try:
        schedule = CostScheduleService(store).update_schedule(request.model_dump())
    except InvalidCostScheduleError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Invalid cost schedule", "problems": exc.problems},
        ) from exc

    logger.info("admin_costs_updated", admin_id=admin.account_id)
    return schedule_to_response(schedule)


# ============================================================================
# Audit log & analytics
# ============================================================================


@router.get("/audit-log", response_model=AuditLogResponse)
async def get_audit_log(
    limit: int | None = Query(None, ge=1, le=1000),
    admin: Account = Depends(require_admin),
    store: LedgerStore = Depends(get_store),
) -> AuditLogResponse:
    """
    Global consumption history, newest first.

    total_consumed always covers the whole log, not just the returned page.
    """
    audit_log = AuditLog(store)
    response = audit_log_response(audit_log.entries(limit))
    response.total_consumed = AuditLog.total_consumed(audit_log.entries())
    return response


@router.get("/analytics/overview", response_model=AnalyticsOverviewResponse)
async def get_analytics_overview(
    admin: Account = Depends(require_admin),
    store: LedgerStore = Depends(get_store),
) -> AnalyticsOverviewResponse:
    """Totals across accounts, consumption and simulated revenue."""
    overview = AnalyticsService(store).overview()
    return AnalyticsOverviewResponse(
        total_users=overview.total_users,
        active_users=overview.active_users,
        blocked_users=overview.blocked_users,
        total_credits_consumed=overview.total_credits_consumed,
        failed_attempts=overview.failed_attempts,
        monthly_revenue=overview.monthly_revenue,
        plans=[
            PlanDistributionItem(
                plan=p.plan,
                label=p.label,
                monthly_price=p.monthly_price,
                users=p.users,
            )
            for p in overview.plans
        ],
    )
