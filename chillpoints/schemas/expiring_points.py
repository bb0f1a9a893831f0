from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from chillpoints.schemas.reward_transaction import RewardTransaction


class ExpiringPoints(BaseModel):
    expiring_transactions: tuple[RewardTransaction, ...] = Field(default=(), alias="expiringTransactions")
    total_expiring: int = Field(default=0, ge=0, alias="totalExpiring")
    nearest_expiry: Optional[datetime] = Field(default=None, alias="nearestExpiry")

    class Config:
        populate_by_name = True
        frozen = True
