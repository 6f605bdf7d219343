import math

from trackrecord.core.entities.trade import Trade
from trackrecord.core.errors import InvalidRecordError

OUTCOME_SIGN = {"win": 1.0, "loss": -1.0}


def calculate_pnl(trade: Trade) -> float:
    """Signed P&L of one trade: +amount for a win, -amount for a loss."""
    sign = OUTCOME_SIGN.get(trade.outcome)
    if sign is None:
        raise InvalidRecordError(trade.id, f"unrecognized outcome {trade.outcome!r}")

    amount = trade.amount
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount):
        raise InvalidRecordError(trade.id, f"amount must be a finite number, got {amount!r}")
    if amount < 0:
        raise InvalidRecordError(trade.id, f"amount must be non-negative, got {amount!r}")

    return amount * sign
