"""
Cost Schedule Service - Credit cost per meterable feature.

Updates replace the whole schedule at once. An update is validated in full
before it is committed, so a rejected update leaves the active schedule intact.
"""

from collections.abc import Mapping

from structlog import get_logger

from app.config import Settings
from app.db.store import LedgerStore
from app.exceptions import InvalidCostScheduleError
from app.models.api import FeatureKey
from app.models.domain import CostSchedule

logger = get_logger(__name__)


# Human-readable action labels written into audit entries
FEATURE_LABELS: dict[FeatureKey, str] = {
    FeatureKey.STRATEGY_GENERATION: "Strategy Generation",
    FeatureKey.SCRIPT_GENERATION: "Full Script Generation",
    FeatureKey.THUMBNAIL_GENERATION: "Thumbnail Studio",
    FeatureKey.CHANNEL_ANALYSIS: "Channel Analysis",
}


def default_cost_schedule(settings: Settings) -> CostSchedule:
    """Build the startup schedule from settings."""
    return build_cost_schedule(
        {
            FeatureKey.STRATEGY_GENERATION: settings.cost_strategy_generation,
            FeatureKey.SCRIPT_GENERATION: settings.cost_script_generation,
            FeatureKey.THUMBNAIL_GENERATION: settings.cost_thumbnail_generation,
            FeatureKey.CHANNEL_ANALYSIS: settings.cost_channel_analysis,
        }
    )


def build_cost_schedule(new_costs: Mapping[str | FeatureKey, object]) -> CostSchedule:
    """
    Validate a complete cost mapping and build a schedule from it.

    Raises:
        InvalidCostScheduleError: Missing or unknown keys, or a value that is
            not a non-negative integer. All problems are reported together.
    """
    problems: list[str] = []
    parsed: dict[FeatureKey, int] = {}
    seen: set[FeatureKey] = set()

    for raw_key, value in new_costs.items():
        try:
            key = FeatureKey(raw_key)
        except ValueError:
            problems.append(f"unknown feature key: {raw_key}")
            continue
        seen.add(key)
        # bool is an int subclass but never a cost
        if isinstance(value, bool) or not isinstance(value, int):
            problems.append(f"{key.value}: cost must be an integer, got {value!r}")
            continue
        if value < 0:
            problems.append(f"{key.value}: cost must be non-negative, got {value}")
            continue
        parsed[key] = value

    for key in FeatureKey:
        if key not in seen:
            problems.append(f"{key.value}: missing")

    if problems:
        raise InvalidCostScheduleError(problems)

    return CostSchedule(costs=tuple((key, parsed[key]) for key in FeatureKey))


class CostScheduleService:
    """Reads and replaces the store's active cost schedule."""

    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def current(self) -> CostSchedule:
        return self.store.cost_schedule

    def get_cost(self, feature: FeatureKey) -> int:
        """
        Cost of one feature.

        Raises:
            KeyError: The active schedule has no cost for this feature
        """
        return self.store.cost_schedule.get(feature)

    def update_schedule(self, new_costs: Mapping[str | FeatureKey, object]) -> CostSchedule:
        """
        Replace the whole schedule.

        Raises:
            InvalidCostScheduleError: Update rejected, previous schedule stays active
        """
        try:
            schedule = build_cost_schedule(new_costs)
        except InvalidCostScheduleError as exc:
            logger.warning("cost_schedule_update_rejected", problems=exc.problems)
            raise

        previous = self.store.cost_schedule
        self.store.cost_schedule = schedule
        logger.info(
            "cost_schedule_updated",
            previous={k.value: v for k, v in previous.costs},
            current={k.value: v for k, v in schedule.costs},
        )
        return schedule
