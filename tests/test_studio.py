"""
Tests for StudioService (metered generation).

A charge happens before the collaborator is called and stands even when
the call fails or times out.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from conftest import create_account

from app.db.store import LedgerStore
from app.exceptions import (
    AccountNotFoundError,
    ArtifactNotFoundError,
    GenerationError,
    InsufficientCreditsError,
)
from app.models.api import AuditStatus, CreditPool, FeatureKey
from app.models.domain import Account
from app.models.generation import ChannelRequest, CreatorBrief, ThumbnailRequest
from app.services.audit_log import AuditLog
from app.services.studio import StudioService

BRIEF = CreatorBrief(niche="fitness", platform="TikTok", objective="sell plans", style="calm")


@pytest.fixture
def studio(store: LedgerStore, fake_generator: AsyncMock) -> StudioService:
    return StudioService(store, fake_generator, timeout_seconds=1)


class TestSuccess:
    @pytest.mark.asyncio
    async def test_charges_and_stores_artifact(
        self, studio: StudioService, free_account: Account, store: LedgerStore
    ):
        result = await studio.generate_strategy(free_account.account_id, BRIEF)

        assert result.cost == 1
        assert result.pool == CreditPool.DAILY
        assert result.account.credits.daily == 4
        assert result.artifact.feature == FeatureKey.STRATEGY_GENERATION
        assert result.artifact.title == "Strategy: fitness"
        assert result.artifact.payload["strategy_summary"] == "Short daily recipes"
        assert store.artifacts_for(free_account.account_id) == [result.artifact]

    @pytest.mark.asyncio
    async def test_channel_setup_uses_channel_analysis_cost(
        self, studio: StudioService, free_account: Account, fake_generator: AsyncMock
    ):
        request = ChannelRequest(niche="fitness", platform="TikTok", style="calm")

        result = await studio.generate_channel_setup(free_account.account_id, request)

        assert result.cost == 10
        assert result.pool == CreditPool.MONTHLY
        assert result.account.credits.monthly == 40
        fake_generator.generate_channel_setup.assert_awaited_once_with(request)

    @pytest.mark.asyncio
    async def test_thumbnail(self, studio: StudioService, free_account: Account):
        result = await studio.generate_thumbnail(
            free_account.account_id, ThumbnailRequest(prompt="shocked face, neon")
        )

        assert result.cost == 3
        assert result.artifact.title == "shocked face, neon"

    @pytest.mark.asyncio
    async def test_admin_generates_for_free(self, studio: StudioService, admin_account: Account):
        result = await studio.generate_strategy(admin_account.account_id, BRIEF)

        assert result.pool == CreditPool.EXEMPT
        assert result.account.credits == admin_account.credits

    @pytest.mark.asyncio
    async def test_artifacts_newest_first(self, studio: StudioService, free_account: Account):
        await studio.generate_strategy(free_account.account_id, BRIEF)
        await studio.generate_thumbnail(free_account.account_id, ThumbnailRequest(prompt="x"))

        features = [a.feature for a in studio.list_artifacts(free_account.account_id)]

        assert features == [FeatureKey.THUMBNAIL_GENERATION, FeatureKey.STRATEGY_GENERATION]

    @pytest.mark.asyncio
    async def test_uses_current_cost_schedule(
        self, studio: StudioService, free_account: Account, store: LedgerStore
    ):
        studio.costs.update_schedule(
            {
                "STRATEGY_GENERATION": 2,
                "SCRIPT_GENERATION": 5,
                "THUMBNAIL_GENERATION": 3,
                "CHANNEL_ANALYSIS": 10,
            }
        )

        result = await studio.generate_strategy(free_account.account_id, BRIEF)

        assert result.cost == 2
        assert store.get_account(free_account.account_id).credits.daily == 3


class TestInsufficientCredits:
    @pytest.mark.asyncio
    async def test_collaborator_not_called(
        self,
        studio: StudioService,
        drained_account: Account,
        fake_generator: AsyncMock,
        audit_log: AuditLog,
    ):
        with pytest.raises(InsufficientCreditsError) as exc_info:
            await studio.generate_strategy(drained_account.account_id, BRIEF)

        assert (exc_info.value.daily, exc_info.value.monthly, exc_info.value.required) == (0, 0, 1)
        fake_generator.generate_strategy.assert_not_awaited()
        entries = audit_log.entries()
        assert len(entries) == 1
        assert entries[0].status == AuditStatus.FAILED

    @pytest.mark.asyncio
    async def test_unknown_account(self, studio: StudioService, fake_generator: AsyncMock):
        with pytest.raises(AccountNotFoundError):
            await studio.generate_strategy("missing", BRIEF)

        fake_generator.generate_strategy.assert_not_awaited()


class TestNoRefund:
    @pytest.mark.asyncio
    async def test_failure_keeps_deduction(
        self,
        studio: StudioService,
        free_account: Account,
        fake_generator: AsyncMock,
        store: LedgerStore,
        audit_log: AuditLog,
    ):
        fake_generator.generate_strategy.side_effect = GenerationError("provider returned 500")

        with pytest.raises(GenerationError):
            await studio.generate_strategy(free_account.account_id, BRIEF)

        assert store.get_account(free_account.account_id).credits.daily == 4
        entries = audit_log.entries()
        assert len(entries) == 1
        assert entries[0].status == AuditStatus.SUCCESS
        assert store.artifacts_for(free_account.account_id) == []

    @pytest.mark.asyncio
    async def test_unexpected_exception_wrapped(
        self, studio: StudioService, free_account: Account, fake_generator: AsyncMock
    ):
        fake_generator.generate_strategy.side_effect = RuntimeError("boom")

        with pytest.raises(GenerationError) as exc_info:
            await studio.generate_strategy(free_account.account_id, BRIEF)

        assert exc_info.value.message == "boom"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_timeout_keeps_deduction(
        self,
        store: LedgerStore,
        free_account: Account,
        fake_generator: AsyncMock,
        audit_log: AuditLog,
    ):
        async def slow(_request):
            await asyncio.sleep(10)

        fake_generator.generate_strategy.side_effect = slow
        studio = StudioService(store, fake_generator, timeout_seconds=0.01)

        with pytest.raises(GenerationError) as exc_info:
            await studio.generate_strategy(free_account.account_id, BRIEF)

        assert "timed out" in exc_info.value.message
        assert store.get_account(free_account.account_id).credits.daily == 4
        assert len(audit_log.entries()) == 1


class TestListArtifacts:
    def test_unknown_account(self, studio: StudioService):
        with pytest.raises(AccountNotFoundError):
            studio.list_artifacts("missing")

    def test_empty(self, studio: StudioService, free_account: Account):
        assert studio.list_artifacts(free_account.account_id) == []


class TestEditArtifacts:
    """Saved artifacts can be edited and deleted free of charge."""

    @pytest.mark.asyncio
    async def test_update_title_and_payload(
        self, studio: StudioService, free_account: Account, store: LedgerStore
    ):
        created = (await studio.generate_strategy(free_account.account_id, BRIEF)).artifact

        updated = studio.update_artifact(
            free_account.account_id,
            created.artifact_id,
            title="Edited",
            payload={"strategy_summary": "Longer recipes"},
        )

        assert updated.title == "Edited"
        assert updated.payload == {"strategy_summary": "Longer recipes"}
        assert updated.created_at == created.created_at
        assert updated.updated_at is not None
        assert store.artifacts_for(free_account.account_id) == [updated]

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(
        self, studio: StudioService, free_account: Account
    ):
        created = (await studio.generate_strategy(free_account.account_id, BRIEF)).artifact

        updated = studio.update_artifact(free_account.account_id, created.artifact_id, title="T")

        assert updated.payload == created.payload

    @pytest.mark.asyncio
    async def test_update_keeps_position(self, studio: StudioService, free_account: Account):
        older = (await studio.generate_strategy(free_account.account_id, BRIEF)).artifact
        await studio.generate_thumbnail(free_account.account_id, ThumbnailRequest(prompt="x"))

        studio.update_artifact(free_account.account_id, older.artifact_id, title="Older")

        titles = [a.title for a in studio.list_artifacts(free_account.account_id)]
        assert titles == ["x", "Older"]

    @pytest.mark.asyncio
    async def test_delete(
        self,
        studio: StudioService,
        free_account: Account,
        store: LedgerStore,
        audit_log: AuditLog,
    ):
        created = (await studio.generate_strategy(free_account.account_id, BRIEF)).artifact
        credits_after_charge = store.get_account(free_account.account_id).credits

        studio.delete_artifact(free_account.account_id, created.artifact_id)

        assert studio.list_artifacts(free_account.account_id) == []
        assert store.get_account(free_account.account_id).credits == credits_after_charge
        assert len(audit_log.entries()) == 1

    @pytest.mark.asyncio
    async def test_edits_leave_credits_and_audit_untouched(
        self,
        studio: StudioService,
        free_account: Account,
        store: LedgerStore,
        audit_log: AuditLog,
    ):
        created = (await studio.generate_strategy(free_account.account_id, BRIEF)).artifact
        credits_after_charge = store.get_account(free_account.account_id).credits

        studio.update_artifact(free_account.account_id, created.artifact_id, title="Edited")

        assert store.get_account(free_account.account_id).credits == credits_after_charge
        assert len(audit_log.entries()) == 1

    @pytest.mark.asyncio
    async def test_other_accounts_artifact_not_found(
        self, studio: StudioService, free_account: Account, store: LedgerStore
    ):
        other = create_account(store, account_id="other")
        created = (await studio.generate_strategy(free_account.account_id, BRIEF)).artifact

        with pytest.raises(ArtifactNotFoundError):
            studio.update_artifact(other.account_id, created.artifact_id, title="Mine now")
        with pytest.raises(ArtifactNotFoundError):
            studio.delete_artifact(other.account_id, created.artifact_id)

        assert store.artifacts_for(free_account.account_id) == [created]

    def test_unknown_artifact(self, studio: StudioService, free_account: Account):
        with pytest.raises(ArtifactNotFoundError) as exc_info:
            studio.delete_artifact(free_account.account_id, "nope")

        assert exc_info.value.artifact_id == "nope"
