import datetime
from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel

from trackrecord.core.entities.trade import Trade, TradeOutcome, TradeSide
from trackrecord.core.use_cases.equity_curve import event_date
from trackrecord.core.use_cases.pnl_calculator import calculate_pnl


class TradeFilters(BaseModel):
    """Subset of trades under analysis. Unset fields match everything; date bounds are inclusive."""
    asset: Optional[str] = None
    side: Optional[TradeSide] = None
    outcome: Optional[TradeOutcome] = None
    date_from: Optional[datetime.date] = None
    date_to: Optional[datetime.date] = None


def filter_trades(trades: Sequence[Trade], filters: Optional[TradeFilters] = None) -> List[Trade]:
    if filters is None:
        return list(trades)

    selected = []
    for trade in trades:
        if filters.asset and trade.asset != filters.asset:
            continue
        if filters.side and trade.side != filters.side:
            continue
        if filters.outcome and trade.outcome != filters.outcome:
            continue
        day = event_date(trade)
        if filters.date_from and day < filters.date_from:
            continue
        if filters.date_to and day > filters.date_to:
            continue
        selected.append(trade)
    return selected


def sort_trades(
    trades: Sequence[Trade],
    sort_by: Literal["date", "pnl"] = "date",
    sort_dir: Literal["asc", "desc"] = "desc"
) -> List[Trade]:
    """Journal ordering by date or signed P&L. Ties keep their input order in both directions."""
    if sort_by == "pnl":
        key = calculate_pnl
    else:
        key = event_date
    return sorted(trades, key=key, reverse=(sort_dir == "desc"))
