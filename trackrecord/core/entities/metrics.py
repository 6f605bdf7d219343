import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel


class EquityPoint(BaseModel):
    """
    Cumulative equity after one trade or deposit event.
    """
    date: datetime.date
    value: float
    pnl: float  # Delta contributed by this single event


class TrackRecordMetrics(BaseModel):
    netPnl: float
    winRate: float  # 0 - 100
    profitFactor: Optional[float] = None
    riskReward: Optional[float] = None
    maxDrawdown: float
    averageWin: Optional[float] = None
    averageLoss: Optional[float] = None  # Negative when present
    totalTrades: int


class DashboardResponse(BaseModel):
    """
    Everything the summary cards, equity chart and heatmap need in one payload.
    """
    user: str
    metrics: TrackRecordMetrics
    equityCurve: List[EquityPoint]
    dailyPnl: Dict[str, float]
    totalDeposits: float
    netCapital: float
    pnlTrend: float
