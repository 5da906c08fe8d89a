"""
API Models - Pydantic models for request/response validation.

NO DICTIONARIES - All data structures are strongly typed.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator


class PlanType(str, Enum):
    """Subscription plan tier."""

    FREE = "FREE"
    PRO = "PRO"
    PREMIUM = "PREMIUM"


class UserRole(str, Enum):
    """Account role enumeration."""

    USER = "USER"
    ADMIN = "ADMIN"


class UserStatus(str, Enum):
    """Account status enumeration."""

    ACTIVE = "ACTIVE"
    BLOCKED = "BLOCKED"


class FeatureKey(str, Enum):
    """Meterable actions."""

    STRATEGY_GENERATION = "STRATEGY_GENERATION"
    SCRIPT_GENERATION = "SCRIPT_GENERATION"
    THUMBNAIL_GENERATION = "THUMBNAIL_GENERATION"
    CHANNEL_ANALYSIS = "CHANNEL_ANALYSIS"


class AuditStatus(str, Enum):
    """Outcome of a consumption attempt."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class CreditPool(str, Enum):
    """Which pool paid for a consumption attempt."""

    DAILY = "DAILY"
    MONTHLY = "MONTHLY"
    EXEMPT = "EXEMPT"  # Admin accounts are never charged
    NONE = "NONE"  # Attempt failed, nothing charged


# ============================================================================
# Account Models
# ============================================================================


class LoginRequest(BaseModel):
    """POST /v1/auth/login request body."""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Ensure email looks like an address."""
        v = v.strip()
        if "@" not in v:
            raise ValueError("email must contain @")
        return v


class CreditsResponse(BaseModel):
    """Both credit pools and their ceilings."""

    daily: int
    max_daily: int
    monthly: int
    max_monthly: int


class AccountResponse(BaseModel):
    """Account as returned by the API."""

    account_id: str
    name: str
    email: str
    plan: PlanType
    role: UserRole
    status: UserStatus
    credits: CreditsResponse
    joined_at: str  # ISO 8601 timestamp


class PlanChangeRequest(BaseModel):
    """POST /v1/accounts/me/plan request body."""

    plan: PlanType


class PlanResponse(BaseModel):
    """Single plan tier from the catalog."""

    plan: PlanType
    label: str
    max_daily: int
    max_monthly: int
    monthly_price: int


# ============================================================================
# Cost Schedule Models
# ============================================================================


class CostScheduleModel(BaseModel):
    """
    Full cost schedule - all four feature keys are required.

    Unknown keys are rejected. Values must be JSON integers: booleans,
    numeric strings and floats are rejected rather than coerced. Ranges are
    not checked here; the cost schedule service rejects negative costs so an
    invalid update is discarded as a whole.
    """

    model_config = ConfigDict(extra="forbid")

    STRATEGY_GENERATION: StrictInt
    SCRIPT_GENERATION: StrictInt
    THUMBNAIL_GENERATION: StrictInt
    CHANNEL_ANALYSIS: StrictInt


# ============================================================================
# Audit Log Models
# ============================================================================


class AuditLogEntryResponse(BaseModel):
    """Single audit log entry."""

    entry_id: str
    user_id: str
    user_name: str
    action: str
    cost: int
    timestamp: str  # ISO 8601 timestamp
    status: AuditStatus


class AuditLogResponse(BaseModel):
    """Audit log listing (newest first)."""

    entries: list[AuditLogEntryResponse]
    total_consumed: int


# ============================================================================
# Studio Models
# ============================================================================


class ArtifactResponse(BaseModel):
    """Stored result of a successful generation."""

    artifact_id: str
    feature: FeatureKey
    title: str
    payload: dict[str, Any]
    created_at: str  # ISO 8601 timestamp
    updated_at: str | None = None


class ArtifactUpdateRequest(BaseModel):
    """PUT /v1/studio/artifacts/{artifact_id} request body. Omitted fields stay as they are."""

    title: str | None = Field(None, min_length=1, max_length=200)
    payload: dict[str, Any] | None = None


class StudioResponse(BaseModel):
    """Response of a metered generation request."""

    artifact: ArtifactResponse
    account: AccountResponse
    cost: int
    pool: CreditPool


class ArtifactListResponse(BaseModel):
    """GET /v1/studio/artifacts response."""

    artifacts: list[ArtifactResponse]


# ============================================================================
# Admin Models
# ============================================================================


class BlockRequest(BaseModel):
    """PUT /admin/users/{account_id}/blocked request body."""

    blocked: bool


class UserListResponse(BaseModel):
    """GET /admin/users response."""

    users: list[AccountResponse]
    total: int


class PlanDistributionItem(BaseModel):
    """User count per plan."""

    plan: PlanType
    label: str
    monthly_price: int
    users: int


class AnalyticsOverviewResponse(BaseModel):
    """Dashboard overview analytics."""

    total_users: int
    active_users: int
    blocked_users: int
    total_credits_consumed: int
    failed_attempts: int
    monthly_revenue: int
    plans: list[PlanDistributionItem]


# ============================================================================
# Health Models
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    accounts: int
    audit_entries: int
    timestamp: str
