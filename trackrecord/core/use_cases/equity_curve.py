import datetime
import math
from typing import List, Optional, Sequence

from trackrecord.core.entities.deposit import CashMove
from trackrecord.core.entities.metrics import EquityPoint
from trackrecord.core.entities.trade import Trade
from trackrecord.core.errors import InvalidRecordError
from trackrecord.core.use_cases.pnl_calculator import calculate_pnl


def event_date(record) -> datetime.date:
    """Calendar date of a trade or cash move; ISO strings are accepted."""
    value = record.date
    if isinstance(value, datetime.datetime):
        raise InvalidRecordError(record.id, "date must not carry a time component")
    if isinstance(value, datetime.date):
        return value
    try:
        return datetime.date.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidRecordError(record.id, f"unparseable date {value!r}") from None


def _deposit_delta(deposit: CashMove) -> float:
    amount = deposit.amount
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount):
        raise InvalidRecordError(deposit.id, f"amount must be a finite number, got {amount!r}")
    return amount


def build_equity_curve(
    trades: Sequence[Trade],
    deposits: Optional[Sequence[CashMove]] = None
) -> List[EquityPoint]:
    """
    Merges trades and deposits into one chronological cumulative series.

    Same-day events keep their concatenation order: trades first, then
    deposits, each in the order given. `sorted` is stable, so sorting on the
    date alone is enough.
    """
    events = [(event_date(t), calculate_pnl(t)) for t in trades]
    events += [(event_date(d), _deposit_delta(d)) for d in deposits or []]
    events = sorted(events, key=lambda e: e[0])

    curve: List[EquityPoint] = []
    equity = 0.0
    for day, delta in events:
        equity += delta
        curve.append(EquityPoint(date=day, value=equity, pnl=delta))
    return curve
