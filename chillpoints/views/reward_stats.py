from datetime import datetime
from typing import Callable, Literal, Optional

from pydantic import BaseModel

from chillpoints.schemas.expiring_points import ExpiringPoints
from chillpoints.schemas.rewards_points import RewardsPointsState
from chillpoints.services.i18n import format_relative
from chillpoints.views.rewards_card import StatisticView


class ExpiringAlertView(BaseModel):
    title: str
    description: str
    hint: str


class RewardStatsView(BaseModel):
    state: Literal["loading", "empty", "populated"]
    cards: list[StatisticView] = []
    expiring_alert: Optional[ExpiringAlertView] = None


def build_reward_stats(
    rewards: Optional[RewardsPointsState],
    expiring_points: Optional[ExpiringPoints],
    *,
    loading: bool,
    t: Callable[..., str],
    now: Optional[datetime] = None,
) -> RewardStatsView:
    if loading:
        return RewardStatsView(state="loading")
    if rewards is None:
        return RewardStatsView(state="empty")

    alert = None
    if expiring_points is not None and expiring_points.total_expiring > 0:
        when = ""
        if expiring_points.nearest_expiry is not None:
            when = format_relative(expiring_points.nearest_expiry, now)
        alert = ExpiringAlertView(
            title=t("rewards.expiringSoonTitle"),
            description=t(
                "rewards.expiringSoonDescription",
                count=f"{expiring_points.total_expiring:,}",
                when=when,
            ).strip(),
            hint=t("rewards.expiringSoonHint"),
        )

    return RewardStatsView(
        state="populated",
        cards=[
            StatisticView(value=rewards.statistics.total_earned, label=t("rewards.totalEarned")),
            StatisticView(value=rewards.statistics.total_redeemed, label=t("rewards.totalRedeemed")),
            StatisticView(value=rewards.points, label=t("rewards.availableBalance")),
        ],
        expiring_alert=alert,
    )
