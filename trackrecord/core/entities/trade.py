import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

TradeSide = Literal["long", "short"]
TradeOutcome = Literal["win", "loss"]


class TradeCreate(BaseModel):
    """
    A closed position as entered by the user, before an id is assigned.
    The sign of the P&L comes from `outcome`, never from `amount`.
    """
    date: datetime.date
    asset: str
    side: TradeSide
    outcome: TradeOutcome
    amount: float = Field(ge=0, allow_inf_nan=False)  # USD magnitude
    note: Optional[str] = None

    @field_validator("asset")
    @classmethod
    def normalise_asset(cls, value: str) -> str:
        asset = value.strip().upper()
        if not asset:
            raise ValueError("asset must not be empty")
        return asset

    class Config:
        json_schema_extra = {
            "example": {
                "date": "2024-01-02",
                "asset": "EURUSD",
                "side": "long",
                "outcome": "win",
                "amount": 200.0,
                "note": "London open breakout"
            }
        }


class Trade(TradeCreate):
    """
    Standardised Trade entity used throughout the engine.
    Compatible with FastAPI serialisation.
    """
    id: str
