"""
API Routes - FastAPI endpoints for creators.

NO DICTIONARIES - All requests/responses use Pydantic models.
"""

from collections.abc import Awaitable
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_current_account, get_generator, get_store
from app.config import get_settings
from app.db.store import LedgerStore
from app.exceptions import (
    AccountBlockedError,
    AccountNotFoundError,
    ArtifactNotFoundError,
    GenerationError,
    InsufficientCreditsError,
)
from app.models.api import (
    AccountResponse,
    ArtifactListResponse,
    ArtifactResponse,
    ArtifactUpdateRequest,
    AuditLogEntryResponse,
    AuditLogResponse,
    CostScheduleModel,
    CreditsResponse,
    HealthResponse,
    LoginRequest,
    PlanChangeRequest,
    PlanResponse,
    StudioResponse,
)
from app.models.domain import Account, Artifact, AuditLogEntry, CostSchedule
from app.models.generation import ChannelRequest, CreatorBrief, ScriptRequest, ThumbnailRequest
from app.services.audit_log import AuditLog
from app.services.directory import AccountDirectory
from app.services.generation import GenerationClient
from app.services.ledger import CreditLedger
from app.services.plan_catalog import PLAN_CATALOG
from app.services.studio import StudioResult, StudioService

router = APIRouter()


# ============================================================================
# Response builders
# ============================================================================


def account_to_response(account: Account) -> AccountResponse:
    """Convert domain account to API model."""
    return AccountResponse(
        account_id=account.account_id,
        name=account.name,
        email=account.email,
        plan=account.plan,
        role=account.role,
        status=account.status,
        credits=CreditsResponse(
            daily=account.credits.daily,
            max_daily=account.credits.max_daily,
            monthly=account.credits.monthly,
            max_monthly=account.credits.max_monthly,
        ),
        joined_at=account.joined_at.isoformat(),
    )


def entry_to_response(entry: AuditLogEntry) -> AuditLogEntryResponse:
    return AuditLogEntryResponse(
        entry_id=entry.entry_id,
        user_id=entry.user_id,
        user_name=entry.user_name,
        action=entry.action,
        cost=entry.cost,
        timestamp=entry.timestamp.isoformat(),
        status=entry.status,
    )


def audit_log_response(entries: list[AuditLogEntry]) -> AuditLogResponse:
    return AuditLogResponse(
        entries=[entry_to_response(e) for e in entries],
        total_consumed=AuditLog.total_consumed(entries),
    )


def schedule_to_response(schedule: CostSchedule) -> CostScheduleModel:
    return CostScheduleModel(**{key.value: cost for key, cost in schedule.costs})


def artifact_to_response(artifact: Artifact) -> ArtifactResponse:
    return ArtifactResponse(
        artifact_id=artifact.artifact_id,
        feature=artifact.feature,
        title=artifact.title,
        payload=artifact.payload,
        created_at=artifact.created_at.isoformat(),
        updated_at=artifact.updated_at.isoformat() if artifact.updated_at else None,
    )


# ============================================================================
# Accounts
# ============================================================================


@router.post("/v1/auth/login", response_model=AccountResponse)
async def login(
    request: LoginRequest,
    store: LedgerStore = Depends(get_store),
) -> AccountResponse:
    """
    Log in by email, creating the account on first login.

    Returns the account; the client sends its account_id as X-Account-ID afterwards.
    """
    directory = AccountDirectory(store, get_settings())
    try:
        account = await directory.login_or_create(request.name, request.email)
    except AccountBlockedError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. This account was blocked by an administrator.",
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc

    return account_to_response(account)


@router.get("/v1/accounts/me", response_model=AccountResponse)
async def get_me(account: Account = Depends(get_current_account)) -> AccountResponse:
    """Current account with fresh balances."""
    return account_to_response(account)


@router.post("/v1/accounts/me/plan", response_model=AccountResponse)
async def change_plan(
    request: PlanChangeRequest,
    account: Account = Depends(get_current_account),
    store: LedgerStore = Depends(get_store),
) -> AccountResponse:
    """
    Switch plan (simulated upgrade, no payment).

    Both pools and ceilings are reset to the new plan's values.
    """
    ledger = CreditLedger(store)
    updated = await ledger.apply_plan_change(account.account_id, request.plan)
    return account_to_response(updated)


@router.get("/v1/accounts/me/audit-log", response_model=AuditLogResponse)
async def get_my_audit_log(
    account: Account = Depends(get_current_account),
    store: LedgerStore = Depends(get_store),
) -> AuditLogResponse:
    """Caller's consumption history, newest first."""
    return audit_log_response(AuditLog(store).for_user(account.account_id))


@router.get("/v1/costs", response_model=CostScheduleModel)
async def get_costs(store: LedgerStore = Depends(get_store)) -> CostScheduleModel:
    """Active credit cost per feature."""
    return schedule_to_response(store.cost_schedule)


@router.get("/v1/plans", response_model=list[PlanResponse])
async def list_plans() -> list[PlanResponse]:
    """Plan catalog."""
    return [
        PlanResponse(
            plan=plan,
            label=config.label,
            max_daily=config.max_daily,
            max_monthly=config.max_monthly,
            monthly_price=config.monthly_price,
        )
        for plan, config in PLAN_CATALOG.items()
    ]


# ============================================================================
# Studio (metered generation)
# ============================================================================


async def _run_studio(action: Awaitable[StudioResult]) -> StudioResponse:
    """Await a studio action and map ledger errors to HTTP responses."""
    try:
        result = await action
    except AccountNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Account not found",
        ) from exc
    except InsufficientCreditsError as exc:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={
                "message": (
                    f"Insufficient credits (cost: {exc.required}). "
                    f"Daily: {exc.daily} | Monthly: {exc.monthly}"
                ),
                "daily": exc.daily,
                "monthly": exc.monthly,
                "required": exc.required,
                "upgrade_url": get_settings().upgrade_url,
            },
        ) from exc
    except GenerationError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Content generation failed. Credits were not refunded. Please try again.",
        ) from exc

    return StudioResponse(
        artifact=artifact_to_response(result.artifact),
        account=account_to_response(result.account),
        cost=result.cost,
        pool=result.pool,
    )


def _studio(store: LedgerStore, generator: GenerationClient) -> StudioService:
    return StudioService(store, generator, get_settings().generation_timeout_seconds)


@router.post(
    "/v1/studio/strategy",
    response_model=StudioResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_strategy(
    request: CreatorBrief,
    account: Account = Depends(get_current_account),
    store: LedgerStore = Depends(get_store),
    generator: GenerationClient = Depends(get_generator),
) -> StudioResponse:
    """Generate a content strategy (STRATEGY_GENERATION)."""
    studio = _studio(store, generator)
    return await _run_studio(studio.generate_strategy(account.account_id, request))


@router.post(
    "/v1/studio/script",
    response_model=StudioResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_script(
    request: ScriptRequest,
    account: Account = Depends(get_current_account),
    store: LedgerStore = Depends(get_store),
    generator: GenerationClient = Depends(get_generator),
) -> StudioResponse:
    """Generate a full script for one idea (SCRIPT_GENERATION)."""
    studio = _studio(store, generator)
    return await _run_studio(studio.generate_script(account.account_id, request))


@router.post(
    "/v1/studio/channel",
    response_model=StudioResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_channel(
    request: ChannelRequest,
    account: Account = Depends(get_current_account),
    store: LedgerStore = Depends(get_store),
    generator: GenerationClient = Depends(get_generator),
) -> StudioResponse:
    """Generate channel identity and monetization plan (CHANNEL_ANALYSIS)."""
    studio = _studio(store, generator)
    return await _run_studio(studio.generate_channel_setup(account.account_id, request))


@router.post(
    "/v1/studio/thumbnail",
    response_model=StudioResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_thumbnail(
    request: ThumbnailRequest,
    account: Account = Depends(get_current_account),
    store: LedgerStore = Depends(get_store),
    generator: GenerationClient = Depends(get_generator),
) -> StudioResponse:
    """Generate a thumbnail image (THUMBNAIL_GENERATION)."""
    studio = _studio(store, generator)
    return await _run_studio(studio.generate_thumbnail(account.account_id, request))


@router.get("/v1/studio/artifacts", response_model=ArtifactListResponse)
async def list_artifacts(
    account: Account = Depends(get_current_account),
    store: LedgerStore = Depends(get_store),
) -> ArtifactListResponse:
    """Caller's generated artifacts, newest first."""
    return ArtifactListResponse(
        artifacts=[artifact_to_response(a) for a in store.artifacts_for(account.account_id)]
    )


def _artifact_not_found(artifact_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Artifact not found: {artifact_id}",
    )


@router.put("/v1/studio/artifacts/{artifact_id}", response_model=ArtifactResponse)
async def update_artifact(
    artifact_id: str,
    request: ArtifactUpdateRequest,
    account: Account = Depends(get_current_account),
    store: LedgerStore = Depends(get_store),
    generator: GenerationClient = Depends(get_generator),
) -> ArtifactResponse:
    """Edit a saved artifact's title or payload. No credits are charged."""
    try:
        artifact = _studio(store, generator).update_artifact(
            account.account_id, artifact_id, title=request.title, payload=request.payload
        )
    except ArtifactNotFoundError as exc:
        raise _artifact_not_found(artifact_id) from exc

    return artifact_to_response(artifact)


@router.delete("/v1/studio/artifacts/{artifact_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_artifact(
    artifact_id: str,
    account: Account = Depends(get_current_account),
    store: LedgerStore = Depends(get_store),
    generator: GenerationClient = Depends(get_generator),
) -> None:
    """Delete a saved artifact. Credits spent on it are not returned."""
    try:
        _studio(store, generator).delete_artifact(account.account_id, artifact_id)
    except ArtifactNotFoundError as exc:
        raise _artifact_not_found(artifact_id) from exc


# ============================================================================
# Health
# ============================================================================


@router.get("/health", response_model=HealthResponse)
async def health_check(store: LedgerStore = Depends(get_store)) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        accounts=len(store.list_accounts()),
        audit_entries=len(store.audit_entries()),
        timestamp=datetime.now(UTC).isoformat(),
    )
