"""
Cash Move Entity for TrackRecord

Capital contributions, tracked apart from trading P&L.
"""
import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CashMoveCreate(BaseModel):
    date: datetime.date
    amount: float = Field(allow_inf_nan=False)  # Positive = deposit, Negative = withdrawal
    note: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "date": "2024-01-01",
                "amount": 1000.0,
                "note": "Initial funding"
            }
        }


class CashMove(CashMoveCreate):
    """
    Represents a single deposit/withdrawal event.
    """
    id: str


class DepositsAggregateResponse(BaseModel):
    """
    Aggregated deposit data for a user.
    """
    total_deposits: float
    total_withdrawals: float
    net_transfers: float
    deposit_count: int
    withdrawal_count: int
    deposits: list[CashMove]
