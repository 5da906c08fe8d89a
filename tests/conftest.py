"""
Pytest Configuration and Centralized Fixtures.

Provides reusable fixtures for testing:
- A fresh in-memory store per test
- Ledger, directory and audit log bound to that store
- Accounts in various states
- A fake generation collaborator
- API test clients wired to the test store
"""

from collections.abc import Iterator
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.config import Settings
from app.db.store import LedgerStore
from app.models.api import PlanType, UserRole, UserStatus
from app.models.domain import Account, CreditPoolPair
from app.models.generation import (
    CalendarEntry,
    ChannelSetup,
    ContentIdea,
    ContentStrategy,
    FullScript,
    ScriptAnalytics,
    ScriptSection,
    ThumbnailImage,
)
from app.services.audit_log import AuditLog
from app.services.cost_schedule import default_cost_schedule
from app.services.directory import AccountDirectory
from app.services.ledger import CreditLedger

# ============================================================================
# Store & Service Fixtures
# ============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings with one explicit admin email and default costs."""
    return Settings(admin_emails="owner@studio.io", seed_demo_data=False)


@pytest.fixture
def store(test_settings: Settings) -> LedgerStore:
    """Empty store with the default cost schedule."""
    return LedgerStore(default_cost_schedule(test_settings))


@pytest.fixture
def audit_log(store: LedgerStore) -> AuditLog:
    return AuditLog(store)


@pytest.fixture
def ledger(store: LedgerStore, audit_log: AuditLog) -> CreditLedger:
    return CreditLedger(store, audit_log)


@pytest.fixture
def directory(store: LedgerStore, test_settings: Settings) -> AccountDirectory:
    return AccountDirectory(store, test_settings)


# ============================================================================
# Account Fixtures
# ============================================================================


def create_account(
    store: LedgerStore,
    account_id: str = "acct-1",
    name: str = "Test Creator",
    email: str | None = None,
    plan: PlanType = PlanType.FREE,
    role: UserRole = UserRole.USER,
    status: UserStatus = UserStatus.ACTIVE,
    daily: int = 5,
    max_daily: int = 5,
    monthly: int = 50,
    max_monthly: int = 50,
) -> Account:
    """Add an account with explicit balances to the store."""
    return store.add_account(
        Account(
            account_id=account_id,
            name=name,
            email=email or f"{account_id}@example.com",
            plan=plan,
            role=role,
            status=status,
            credits=CreditPoolPair(
                daily=daily, max_daily=max_daily, monthly=monthly, max_monthly=max_monthly
            ),
            joined_at=datetime(2024, 1, 1, tzinfo=UTC),
        )
    )


@pytest.fixture
def free_account(store: LedgerStore) -> Account:
    """FREE account with full pools (5/5, 50/50)."""
    return create_account(store, account_id="free-1", name="Free Creator")


@pytest.fixture
def drained_account(store: LedgerStore) -> Account:
    """FREE account with both pools empty."""
    return create_account(store, account_id="drained-1", name="Drained", daily=0, monthly=0)


@pytest.fixture
def admin_account(store: LedgerStore) -> Account:
    """ADMIN account."""
    return create_account(
        store,
        account_id="admin-1",
        name="Admin",
        email="admin@studio.io",
        role=UserRole.ADMIN,
        daily=999,
        max_daily=999,
        monthly=9999,
        max_monthly=9999,
    )


@pytest.fixture
def blocked_account(store: LedgerStore) -> Account:
    return create_account(
        store, account_id="blocked-1", name="Blocked", status=UserStatus.BLOCKED
    )


# ============================================================================
# Generation Fixtures
# ============================================================================


@pytest.fixture
def sample_strategy() -> ContentStrategy:
    return ContentStrategy(
        strategy_summary="Short daily recipes",
        trends=["air fryer", "meal prep"],
        ideas=[
            ContentIdea(
                title="5-minute breakfast",
                seo_title="Quick Breakfast Ideas",
                description="Three breakfasts under five minutes",
                hashtags=["#breakfast"],
            )
        ],
        calendar=[CalendarEntry(day="Monday", content_title="5-minute breakfast", type="Short")],
    )


@pytest.fixture
def sample_script() -> FullScript:
    return FullScript(
        sections=[ScriptSection(label="Hook", content="You are cooking eggs wrong")],
        analytics=ScriptAnalytics(
            estimated_engagement="High", retention_score=82, keyword_density="2%"
        ),
    )


@pytest.fixture
def fake_generator(sample_strategy: ContentStrategy, sample_script: FullScript) -> AsyncMock:
    """Generation collaborator that always succeeds."""
    generator = AsyncMock()
    generator.generate_strategy = AsyncMock(return_value=sample_strategy)
    generator.generate_script = AsyncMock(return_value=sample_script)
    generator.generate_channel_setup = AsyncMock(
        return_value=ChannelSetup(name="Kitchen Sprint", handle="@kitchensprint")
    )
    generator.generate_thumbnail = AsyncMock(
        return_value=ThumbnailImage(data_url="data:image/png;base64,AAAA")
    )
    generator.close = AsyncMock()
    return generator


# ============================================================================
# FastAPI Test Client Fixtures
# ============================================================================


@pytest.fixture
def app() -> FastAPI:
    """FastAPI app for testing."""
    from app.main import app as main_app

    return main_app


@pytest.fixture
def client(app: FastAPI, store: LedgerStore, fake_generator: AsyncMock) -> Iterator[TestClient]:
    """Test client bound to the test store and fake collaborator."""
    from app.api.dependencies import get_generator, get_store

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_generator] = lambda: fake_generator

    yield TestClient(app)

    app.dependency_overrides.clear()


def auth_headers(account: Account) -> dict[str, str]:
    return {"X-Account-ID": account.account_id}


# ============================================================================
# Request Body Fixtures
# ============================================================================


@pytest.fixture
def brief_body() -> dict:
    """Strategy request body in wire (camelCase) format."""
    return {
        "niche": "cooking",
        "platform": "YouTube",
        "objective": "grow subscribers",
        "contentLength": "SHORT",
        "style": "energetic",
    }
