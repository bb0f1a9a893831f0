from datetime import datetime
from typing import Callable, Literal, Optional

from pydantic import BaseModel

from chillpoints.schemas.expiring_points import ExpiringPoints
from chillpoints.schemas.rewards_points import RewardsPointsState
from chillpoints.services.i18n import format_relative


TIER_COLORS = {
    "silver": "gray-300",
    "gold": "amber-300",
    "platinum": "violet-400",
}
DEFAULT_TIER_COLOR = "gray-200"


class TierProgressView(BaseModel):
    current_label: str
    next_label: str
    value: float
    percent_label: str


class ExpiryWarningView(BaseModel):
    total_expiring: int
    message: str
    nearest_expiry_label: Optional[str] = None


class StatisticView(BaseModel):
    value: int
    label: str


class RewardsCardView(BaseModel):
    state: Literal["loading", "empty", "error", "populated"]
    title: str = ""
    description: str = ""

    points: Optional[int] = None
    points_display: Optional[str] = None
    points_label: Optional[str] = None

    tier_badge: Optional[str] = None
    tier_color: Optional[str] = None

    progress: Optional[TierProgressView] = None
    expiry_warning: Optional[ExpiryWarningView] = None

    benefits_title: Optional[str] = None
    benefits: list[str] = []
    statistics: list[StatisticView] = []


def tier_color(tier_name: Optional[str]) -> str:
    return TIER_COLORS.get(tier_name or "", DEFAULT_TIER_COLOR)


def _progress(rewards: RewardsPointsState, t: Callable[..., str]) -> Optional[TierProgressView]:
    if rewards.next_tier is None:
        return None
    return TierProgressView(
        current_label=f"{t('rewards.currentTier')}: {rewards.tier.name.upper()}",
        next_label=f"{t('rewards.nextTier')}: {rewards.next_tier.name.upper()}",
        value=rewards.progress,
        percent_label=f"{round(rewards.progress)}% {t('rewards.toNextTier')}",
    )


def _expiry_warning(
    expiring_points: Optional[ExpiringPoints],
    expiring_loading: bool,
    t: Callable[..., str],
    now: Optional[datetime],
) -> Optional[ExpiryWarningView]:
    if expiring_loading or expiring_points is None or expiring_points.total_expiring <= 0:
        return None

    nearest = None
    if expiring_points.nearest_expiry is not None:
        nearest = f"{t('rewards.firstExpiryDate')} {format_relative(expiring_points.nearest_expiry, now)}"

    return ExpiryWarningView(
        total_expiring=expiring_points.total_expiring,
        message=t("rewards.expiringPoints", count=expiring_points.total_expiring),
        nearest_expiry_label=nearest,
    )


def build_rewards_card(
    rewards: Optional[RewardsPointsState],
    expiring_points: Optional[ExpiringPoints],
    *,
    points_loading: bool,
    expiring_loading: bool,
    t: Callable[..., str],
    error: Optional[Exception] = None,
    now: Optional[datetime] = None,
) -> RewardsCardView:
    """
    Project provider state onto the rewards card.

    loading  -> skeleton while the points query runs
    error    -> points query failed and nothing is cached
    empty    -> signed out, or the member has no rewards record yet
    populated otherwise
    """
    if points_loading:
        return RewardsCardView(state="loading")

    if rewards is None:
        if error is not None:
            return RewardsCardView(
                state="error",
                title=t("rewards.errorTitle"),
                description=t("rewards.errorDescription"),
            )
        return RewardsCardView(
            state="empty",
            title=t("rewards.noRewardsTitle"),
            description=f"{t('rewards.noRewardsDescription')} {t('rewards.startEarning')}",
        )

    stats = rewards.statistics
    return RewardsCardView(
        state="populated",
        title=t("rewards.chillPoints"),
        description=t(f"rewards.tierMessages.{rewards.tier.name}"),
        points=rewards.points,
        points_display=f"{rewards.points:,}",
        points_label=t("rewards.availablePoints"),
        tier_badge=rewards.tier.name.upper(),
        tier_color=tier_color(rewards.tier.name),
        progress=_progress(rewards, t),
        expiry_warning=_expiry_warning(expiring_points, expiring_loading, t, now),
        benefits_title=t("rewards.tierBenefits"),
        benefits=list(rewards.tier.benefits),
        statistics=[
            StatisticView(value=stats.total_earned, label=t("rewards.totalEarned")),
            StatisticView(value=stats.total_redeemed, label=t("rewards.totalRedeemed")),
            StatisticView(value=stats.transactions_count, label=t("rewards.transactions")),
        ],
    )
