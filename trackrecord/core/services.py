import logging
import uuid
from typing import List, Optional, Tuple

from trackrecord.core.entities.deposit import CashMove, CashMoveCreate, DepositsAggregateResponse
from trackrecord.core.entities.metrics import DashboardResponse
from trackrecord.core.entities.trade import Trade, TradeCreate
from trackrecord.core.interfaces.record_store import IRecordStore
from trackrecord.core.use_cases.daily_aggregator import aggregate_daily_pnl
from trackrecord.core.use_cases.equity_curve import build_equity_curve
from trackrecord.core.use_cases.metrics_calculator import calculate_metrics
from trackrecord.core.use_cases.trade_filter import TradeFilters, filter_trades

logger = logging.getLogger(__name__)

# Equity points looked back over for the dashboard trend
TREND_LOOKBACK = 3


class JournalService:
    """
    Record entry plus on-demand recomputation. Nothing derived is cached:
    every read recomputes from the store's current snapshot.
    """

    def __init__(self, store: IRecordStore):
        self.store = store

    async def list_trades(self, user: str, filters: Optional[TradeFilters] = None) -> List[Trade]:
        trades = await self.store.list_trades(user)
        return filter_trades(trades, filters)

    async def list_deposits(self, user: str) -> List[CashMove]:
        return await self.store.list_deposits(user)

    async def list_records(self, user: str, filters: Optional[TradeFilters] = None) -> Tuple[List[Trade], List[CashMove]]:
        trades, deposits = await self.store.list_records(user)
        return filter_trades(trades, filters), deposits

    async def add_trade(self, user: str, draft: TradeCreate) -> Trade:
        trade = Trade(id=uuid.uuid4().hex, **draft.model_dump())
        saved = await self.store.insert_trade(user, trade)
        logger.info(f"Recorded trade {saved.id} for {user}")
        return saved

    async def add_deposit(self, user: str, draft: CashMoveCreate) -> CashMove:
        deposit = CashMove(id=uuid.uuid4().hex, **draft.model_dump())
        saved = await self.store.insert_deposit(user, deposit)
        logger.info(f"Recorded deposit {saved.id} for {user}")
        return saved

    async def delete_trade(self, user: str, trade_id: str) -> None:
        await self.store.delete_trade(user, trade_id)

    async def delete_deposit(self, user: str, deposit_id: str) -> None:
        await self.store.delete_deposit(user, deposit_id)

    async def summarize_deposits(self, user: str) -> DepositsAggregateResponse:
        deposits = await self.store.list_deposits(user)

        total_deposits = sum(d.amount for d in deposits if d.amount > 0)
        total_withdrawals = abs(sum(d.amount for d in deposits if d.amount < 0))

        return DepositsAggregateResponse(
            total_deposits=total_deposits,
            total_withdrawals=total_withdrawals,
            net_transfers=total_deposits - total_withdrawals,
            deposit_count=sum(1 for d in deposits if d.amount > 0),
            withdrawal_count=sum(1 for d in deposits if d.amount < 0),
            deposits=deposits
        )

    async def get_dashboard(self, user: str, filters: Optional[TradeFilters] = None) -> DashboardResponse:
        trades, deposits = await self.list_records(user, filters)

        # Metrics and heatmap cover the filtered trades; the equity curve also
        # carries every deposit so it tracks the account balance.
        metrics = calculate_metrics(trades)
        equity_curve = build_equity_curve(trades, deposits)
        total_deposits = sum(d.amount for d in deposits)

        pnl_trend = 0.0
        if len(equity_curve) >= 2:
            start = equity_curve[max(0, len(equity_curve) - 1 - TREND_LOOKBACK)]
            pnl_trend = equity_curve[-1].value - start.value

        return DashboardResponse(
            user=user,
            metrics=metrics,
            equityCurve=equity_curve,
            dailyPnl=aggregate_daily_pnl(trades),
            totalDeposits=total_deposits,
            netCapital=total_deposits + metrics.netPnl,
            pnlTrend=pnl_trend
        )
