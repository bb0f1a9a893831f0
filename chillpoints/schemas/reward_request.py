from typing import Optional

from pydantic import BaseModel, Field


class RedeemRequest(BaseModel):
    points: int = Field(gt=0)
    description: str = ""


class TransferRequest(BaseModel):
    points: int = Field(gt=0)
    recipientEmail: str
    description: str = ""


class TransferForm(BaseModel):
    # Raw dialog input; validated by services.reward_forms, not by pydantic.
    points: Optional[str | int] = None
    recipientEmail: Optional[str] = None
    description: Optional[str] = None
