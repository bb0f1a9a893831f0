from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator


TierName = Literal["silver", "gold", "platinum"]

# Highest tier; a member here has nothing left to progress towards.
TOP_TIER: TierName = "platinum"


class Tier(BaseModel):
    name: TierName
    threshold: int = Field(ge=0)
    benefits: tuple[str, ...] = ()

    class Config:
        frozen = True


class RewardStatistics(BaseModel):
    total_earned: int = Field(default=0, ge=0, alias="totalEarned")
    total_redeemed: int = Field(default=0, ge=0, alias="totalRedeemed")
    transactions_count: int = Field(default=0, ge=0, alias="transactionsCount")

    class Config:
        populate_by_name = True
        frozen = True


class RewardsPointsState(BaseModel):
    """
    Server-computed snapshot of a member's balance and tier position.

    The server owns every number here. Parsing rejects snapshots that break
    the balance/progress bounds or pair a non-top tier with no next tier,
    so a bad payload surfaces as a failed query instead of a broken card.
    """

    points: int = Field(ge=0)
    tier: Tier
    next_tier: Optional[Tier] = Field(default=None, alias="nextTier")
    progress: float = Field(default=0.0, ge=0, le=100)
    statistics: RewardStatistics = Field(default_factory=RewardStatistics)

    class Config:
        populate_by_name = True
        frozen = True

    @model_validator(mode="after")
    def _check_tier_progression(self):
        if self.next_tier is None and self.tier.name != TOP_TIER:
            raise ValueError(f"nextTier is required below {TOP_TIER} (tier={self.tier.name})")
        if self.next_tier is not None and self.tier.name == TOP_TIER:
            raise ValueError(f"{TOP_TIER} members cannot have a nextTier")
        return self
