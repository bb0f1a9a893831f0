from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


TransactionType = Literal["earn", "redeem", "transfer", "expire"]
TransactionStatus = Literal["active", "pending", "used", "expired", "cancelled"]


class RewardTransaction(BaseModel):
    id: int
    user_id: int = Field(alias="userId")

    points: int
    description: str = ""
    transaction_type: TransactionType = Field(alias="transactionType")

    booking_id: Optional[int] = Field(default=None, alias="bookingId")
    recipient_id: Optional[int] = Field(default=None, alias="recipientId")
    expiry_date: Optional[datetime] = Field(default=None, alias="expiryDate")

    status: TransactionStatus = "active"
    created_at: datetime = Field(alias="createdAt")

    class Config:
        populate_by_name = True
        frozen = True
