from typing import List, Sequence

from trackrecord.core.entities.metrics import TrackRecordMetrics
from trackrecord.core.entities.trade import Trade
from trackrecord.core.use_cases.equity_curve import build_equity_curve
from trackrecord.core.use_cases.pnl_calculator import calculate_pnl


def _max_drawdown(trades: Sequence[Trade]) -> float:
    # Trades only: deposits would mask the retracement
    peak = 0.0
    max_drawdown = 0.0
    for point in build_equity_curve(trades):
        peak = max(peak, point.value)
        max_drawdown = max(max_drawdown, peak - point.value)
    return max_drawdown


def calculate_metrics(trades: Sequence[Trade]) -> TrackRecordMetrics:
    """Summary statistics for an already-filtered set of trades.

    Ratios that would need a one-sided or empty partition come back as None
    instead of infinity. Zero-P&L trades are neither winners nor losers but
    still count in `totalTrades`, so they lower the win rate.
    """
    if not trades:
        return TrackRecordMetrics(
            netPnl=0,
            winRate=0,
            profitFactor=None,
            riskReward=None,
            maxDrawdown=0,
            averageWin=None,
            averageLoss=None,
            totalTrades=0
        )

    pnls: List[float] = [calculate_pnl(t) for t in trades]
    winners = [p for p in pnls if p > 0]
    losers = [p for p in pnls if p < 0]

    average_win = sum(winners) / len(winners) if winners else None
    average_loss = sum(losers) / len(losers) if losers else None

    profit_factor = None
    if winners and losers:
        profit_factor = sum(winners) / abs(sum(losers))

    risk_reward = None
    if average_win is not None and average_loss is not None and average_loss != 0:
        risk_reward = average_win / abs(average_loss)

    return TrackRecordMetrics(
        netPnl=sum(pnls),
        winRate=len(winners) / len(trades) * 100,
        profitFactor=profit_factor,
        riskReward=risk_reward,
        maxDrawdown=_max_drawdown(trades),
        averageWin=average_win,
        averageLoss=average_loss,
        totalTrades=len(trades)
    )
