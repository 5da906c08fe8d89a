"""
Studio Service - Metered content generation.

Each action resolves its cost, spends credits, and only then calls the
generation collaborator. Credits pay for the attempt: a failed or timed-out
generation is not refunded and writes no further audit entry.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel
from structlog import get_logger

from app.db.store import LedgerStore
from app.exceptions import GenerationError
from app.models.api import CreditPool, FeatureKey
from app.models.domain import Account, Artifact
from app.models.generation import (
    ChannelRequest,
    CreatorBrief,
    ScriptRequest,
    ThumbnailRequest,
)
from app.observability.metrics import metrics, track_duration
from app.observability.tracing import trace_operation
from app.services.cost_schedule import FEATURE_LABELS, CostScheduleService
from app.services.generation import GenerationClient
from app.services.ledger import CreditLedger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StudioResult:
    """Stored artifact plus the account state after the charge."""

    artifact: Artifact
    account: Account
    cost: int
    pool: CreditPool


class StudioService:
    """Runs metered actions against the generation collaborator."""

    def __init__(
        self,
        store: LedgerStore,
        generator: GenerationClient,
        timeout_seconds: float,
        ledger: CreditLedger | None = None,
        costs: CostScheduleService | None = None,
    ) -> None:
        self.store = store
        self.generator = generator
        self.timeout_seconds = timeout_seconds
        self.ledger = ledger or CreditLedger(store)
        self.costs = costs or CostScheduleService(store)

    async def run(
        self,
        account_id: str,
        feature: FeatureKey,
        title: str,
        call: Callable[[], Awaitable[BaseModel]],
    ) -> StudioResult:
        """
        Charge for a feature, then run the generation call.

        Raises:
            AccountNotFoundError: Account doesn't exist
            InsufficientCreditsError: Neither pool covers the cost; nothing was called
            GenerationError: Collaborator failed or timed out; the charge stands
        """
        cost = self.costs.get_cost(feature)
        consumed = await self.ledger.consume(account_id, cost, FEATURE_LABELS[feature])
        consumed.raise_for_status()

        with track_duration() as timer:
            try:
                with trace_operation("generation", feature=feature.value, account_id=account_id):
                    async with asyncio.timeout(self.timeout_seconds):
                        result = await call()
            except TimeoutError as e:
                metrics.record_generation(feature.value, False, timer.elapsed(), "timeout")
                logger.error(
                    "generation_timeout",
                    account_id=account_id,
                    feature=feature.value,
                    timeout_seconds=self.timeout_seconds,
                    credits_refunded=False,
                )
                raise GenerationError(f"timed out after {self.timeout_seconds}s") from e
            except GenerationError as e:
                metrics.record_generation(feature.value, False, timer.elapsed(), type(e).__name__)
                logger.error(
                    "generation_failed",
                    account_id=account_id,
                    feature=feature.value,
                    error=e.message,
                    credits_refunded=False,
                )
                raise
            except Exception as e:
                metrics.record_generation(feature.value, False, timer.elapsed(), type(e).__name__)
                logger.error(
                    "generation_error",
                    account_id=account_id,
                    feature=feature.value,
                    error=str(e),
                    credits_refunded=False,
                    exc_info=True,
                )
                raise GenerationError(str(e) or type(e).__name__) from e

        metrics.record_generation(feature.value, True, timer.duration)

        artifact = Artifact(
            artifact_id=uuid4().hex,
            account_id=account_id,
            feature=feature,
            title=title,
            created_at=datetime.now(UTC),
            payload=result.model_dump(mode="json"),
        )
        self.store.add_artifact(artifact)

        logger.info(
            "artifact_created",
            account_id=account_id,
            artifact_id=artifact.artifact_id,
            feature=feature.value,
            duration_seconds=timer.duration,
        )
        return StudioResult(
            artifact=artifact, account=consumed.account, cost=cost, pool=consumed.pool
        )

    async def generate_strategy(self, account_id: str, brief: CreatorBrief) -> StudioResult:
        return await self.run(
            account_id,
            FeatureKey.STRATEGY_GENERATION,
            f"Strategy: {brief.niche}",
            lambda: self.generator.generate_strategy(brief),
        )

    async def generate_script(self, account_id: str, request: ScriptRequest) -> StudioResult:
        return await self.run(
            account_id,
            FeatureKey.SCRIPT_GENERATION,
            request.idea.title,
            lambda: self.generator.generate_script(request),
        )

    async def generate_channel_setup(
        self, account_id: str, request: ChannelRequest
    ) -> StudioResult:
        return await self.run(
            account_id,
            FeatureKey.CHANNEL_ANALYSIS,
            f"Channel: {request.niche}",
            lambda: self.generator.generate_channel_setup(request),
        )

    async def generate_thumbnail(self, account_id: str, request: ThumbnailRequest) -> StudioResult:
        return await self.run(
            account_id,
            FeatureKey.THUMBNAIL_GENERATION,
            request.prompt[:80],
            lambda: self.generator.generate_thumbnail(request),
        )

    def list_artifacts(self, account_id: str) -> list[Artifact]:
        """
        Artifacts of one account, newest first.

        Raises:
            AccountNotFoundError: Account doesn't exist
        """
        self.store.get_account(account_id)
        return self.store.artifacts_for(account_id)

    def update_artifact(
        self,
        account_id: str,
        artifact_id: str,
        title: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Artifact:
        """
        Edit the title and/or payload of a saved artifact.

        Free of charge and not audit-logged.

        Raises:
            ArtifactNotFoundError: Artifact doesn't exist or belongs to another account
        """
        current = self.store.get_artifact(account_id, artifact_id)
        updated = replace(
            current,
            title=current.title if title is None else title,
            payload=current.payload if payload is None else payload,
            updated_at=datetime.now(UTC),
        )
        self.store.replace_artifact(updated)

        logger.info(
            "artifact_updated",
            account_id=account_id,
            artifact_id=artifact_id,
            title_changed=title is not None,
            payload_changed=payload is not None,
        )
        return updated

    def delete_artifact(self, account_id: str, artifact_id: str) -> None:
        """
        Remove a saved artifact. Credits spent on it are not returned.

        Raises:
            ArtifactNotFoundError: Artifact doesn't exist or belongs to another account
        """
        self.store.remove_artifact(account_id, artifact_id)
        logger.info("artifact_deleted", account_id=account_id, artifact_id=artifact_id)
