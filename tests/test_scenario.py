"""
End-to-end scenario: a new creator signs up and spends credits.

Runs once against the services and once through the HTTP API.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from app.db.store import LedgerStore
from app.models.api import AuditStatus, CreditPool, FeatureKey, PlanType, UserRole
from app.models.generation import ContentIdea, CreatorBrief, ScriptRequest
from app.services.audit_log import AuditLog
from app.services.directory import AccountDirectory
from app.services.studio import StudioService

BRIEF = CreatorBrief(
    niche="cooking",
    platform="YouTube",
    objective="grow subscribers",
    style="energetic",
)


class TestNewCreatorScenario:
    @pytest.mark.asyncio
    async def test_signup_three_strategies_then_script(
        self,
        store: LedgerStore,
        directory: AccountDirectory,
        audit_log: AuditLog,
        fake_generator: AsyncMock,
    ):
        bob = await directory.login_or_create("Bob", "bob@example.com")
        assert bob.plan == PlanType.FREE
        assert bob.role == UserRole.USER
        assert (bob.credits.daily, bob.credits.monthly) == (5, 50)

        studio = StudioService(store, fake_generator, timeout_seconds=5)

        daily_seen = []
        for _ in range(3):
            result = await studio.generate_strategy(bob.account_id, BRIEF)
            assert result.pool == CreditPool.DAILY
            daily_seen.append(result.account.credits.daily)
            assert result.account.credits.monthly == 50

        assert daily_seen == [4, 3, 2]
        entries = audit_log.for_user(bob.account_id)
        assert len(entries) == 3
        assert all(e.status == AuditStatus.SUCCESS and e.cost == 1 for e in entries)

        script = await studio.generate_script(
            bob.account_id, ScriptRequest(idea=ContentIdea(title="Egg hacks"), brief=BRIEF)
        )

        assert script.cost == store.cost_schedule.get(FeatureKey.SCRIPT_GENERATION) == 5
        assert script.pool == CreditPool.MONTHLY
        assert (script.account.credits.daily, script.account.credits.monthly) == (2, 45)
        assert store.get_account(bob.account_id) == script.account
        assert [a.title for a in studio.list_artifacts(bob.account_id)][0] == "Egg hacks"


class TestNewCreatorScenarioOverHttp:
    def test_signup_three_strategies_then_script(self, client: TestClient, brief_body: dict):
        login = client.post("/v1/auth/login", json={"name": "Bob", "email": "bob@example.com"})
        assert login.status_code == 200
        bob = login.json()
        assert bob["plan"] == "FREE"
        assert bob["credits"] == {"daily": 5, "max_daily": 5, "monthly": 50, "max_monthly": 50}

        headers = {"X-Account-ID": bob["account_id"]}
        for expected_daily in (4, 3, 2):
            response = client.post("/v1/studio/strategy", json=brief_body, headers=headers)
            assert response.status_code == 201
            assert response.json()["account"]["credits"]["daily"] == expected_daily
            assert response.json()["pool"] == "DAILY"

        response = client.post(
            "/v1/studio/script",
            json={"idea": {"title": "Egg hacks"}, "brief": brief_body},
            headers=headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["pool"] == "MONTHLY"
        assert body["account"]["credits"]["daily"] == 2
        assert body["account"]["credits"]["monthly"] == 45

        history = client.get("/v1/accounts/me/audit-log", headers=headers).json()
        assert [e["cost"] for e in history["entries"]] == [5, 1, 1, 1]
        assert history["total_consumed"] == 8
