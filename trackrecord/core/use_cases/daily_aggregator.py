from typing import Dict, Sequence

from trackrecord.core.entities.trade import Trade
from trackrecord.core.use_cases.equity_curve import event_date
from trackrecord.core.use_cases.pnl_calculator import calculate_pnl


def aggregate_daily_pnl(trades: Sequence[Trade]) -> Dict[str, float]:
    """
    Net trade P&L per calendar day, keyed by ISO date.

    Only days with at least one trade appear; a day whose trades offset each
    other is present with 0. Deposits never enter here.
    """
    daily: Dict[str, float] = {}
    for trade in trades:
        day_key = event_date(trade).isoformat()
        daily[day_key] = daily.get(day_key, 0.0) + calculate_pnl(trade)
    return daily
