import datetime
import logging
import os
from typing import Dict, List, Literal, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trackrecord.core.entities.deposit import CashMove, CashMoveCreate, DepositsAggregateResponse
from trackrecord.core.entities.metrics import DashboardResponse, EquityPoint, TrackRecordMetrics
from trackrecord.core.entities.trade import Trade, TradeCreate, TradeOutcome, TradeSide
from trackrecord.core.errors import InvalidRecordError, StoreUnavailableError
from trackrecord.core.interfaces.record_store import IRecordStore
from trackrecord.core.services import JournalService
from trackrecord.core.use_cases.daily_aggregator import aggregate_daily_pnl
from trackrecord.core.use_cases.equity_curve import build_equity_curve
from trackrecord.core.use_cases.metrics_calculator import calculate_metrics
from trackrecord.core.use_cases.trade_filter import TradeFilters, sort_trades
from trackrecord.infrastructure.persistence.fallback_store import FallbackRecordStore
from trackrecord.infrastructure.persistence.local_store import LocalJsonStore
from trackrecord.infrastructure.persistence.postgres_repo import PostgresRepo

# Setup Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("TrackRecord")

app = FastAPI(title="TrackRecord API", version="1.0.0", description="Trading journal with track-record metrics")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvalidRecordError)
async def invalid_record_handler(request: Request, exc: InvalidRecordError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


# --- Dependency Injection ---

_local_store: Optional[LocalJsonStore] = None
_remote_store: Optional[PostgresRepo] = None


def get_local_store() -> LocalJsonStore:
    global _local_store
    if _local_store is None:
        _local_store = LocalJsonStore(os.getenv("TRACKRECORD_LOCAL_PATH"))
    return _local_store


def get_remote_store() -> Optional[PostgresRepo]:
    """
    One repo per DSN for the life of the process. It connects lazily, so a
    database that is down stays configured as the primary store: reads fall
    back to the local cache and writes are refused.
    """
    global _remote_store
    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        return None
    if _remote_store is None or _remote_store.dsn != db_url:
        _remote_store = PostgresRepo(db_url)
        logger.info("Remote store configured from DATABASE_URL.")
    return _remote_store


def get_store(
    local: LocalJsonStore = Depends(get_local_store),
    remote: Optional[PostgresRepo] = Depends(get_remote_store)
) -> IRecordStore:
    return FallbackRecordStore(local, primary=remote)


def get_service(store: IRecordStore = Depends(get_store)) -> JournalService:
    return JournalService(store)


def get_filters(
    asset: Optional[str] = Query(None),
    side: Optional[TradeSide] = Query(None),
    outcome: Optional[TradeOutcome] = Query(None),
    dateFrom: Optional[datetime.date] = Query(None),
    dateTo: Optional[datetime.date] = Query(None)
) -> TradeFilters:
    return TradeFilters(asset=asset, side=side, outcome=outcome, date_from=dateFrom, date_to=dateTo)


# --- Endpoints ---

@app.get("/health")
async def health(store: IRecordStore = Depends(get_store)):
    mode = "remote+local" if getattr(store, "primary", None) is not None else "local"
    return {"status": "healthy", "mode": mode}


@app.get("/v1/trades", response_model=List[Trade])
async def get_trades(
    user: str = Query(..., description="User id"),
    filters: TradeFilters = Depends(get_filters),
    sortBy: Optional[Literal["date", "pnl"]] = Query(None, description="'date' or 'pnl'"),
    sortDir: Literal["asc", "desc"] = Query("desc"),
    service: JournalService = Depends(get_service)
):
    trades = await service.list_trades(user, filters)
    if sortBy:
        trades = sort_trades(trades, sortBy, sortDir)
    return trades


@app.post("/v1/trades", response_model=Trade, status_code=201)
async def create_trade(
    draft: TradeCreate,
    user: str = Query(..., description="User id"),
    service: JournalService = Depends(get_service)
):
    return await service.add_trade(user, draft)


@app.delete("/v1/trades/{trade_id}", status_code=204)
async def delete_trade(
    trade_id: str,
    user: str = Query(..., description="User id"),
    service: JournalService = Depends(get_service)
):
    await service.delete_trade(user, trade_id)


@app.get("/v1/deposits", response_model=DepositsAggregateResponse)
async def get_deposits(
    user: str = Query(..., description="User id"),
    service: JournalService = Depends(get_service)
):
    """
    Deposit/withdrawal history with totals.
    """
    return await service.summarize_deposits(user)


@app.post("/v1/deposits", response_model=CashMove, status_code=201)
async def create_deposit(
    draft: CashMoveCreate,
    user: str = Query(..., description="User id"),
    service: JournalService = Depends(get_service)
):
    return await service.add_deposit(user, draft)


@app.delete("/v1/deposits/{deposit_id}", status_code=204)
async def delete_deposit(
    deposit_id: str,
    user: str = Query(..., description="User id"),
    service: JournalService = Depends(get_service)
):
    await service.delete_deposit(user, deposit_id)


@app.get("/v1/metrics", response_model=TrackRecordMetrics)
async def get_metrics(
    user: str = Query(..., description="User id"),
    filters: TradeFilters = Depends(get_filters),
    service: JournalService = Depends(get_service)
):
    trades = await service.list_trades(user, filters)
    return calculate_metrics(trades)


@app.get("/v1/equity", response_model=List[EquityPoint])
async def get_equity_curve(
    user: str = Query(..., description="User id"),
    filters: TradeFilters = Depends(get_filters),
    includeDeposits: bool = Query(True, description="Add cash moves to the curve"),
    service: JournalService = Depends(get_service)
):
    trades, deposits = await service.list_records(user, filters)
    if not includeDeposits:
        deposits = []
    return build_equity_curve(trades, deposits)


@app.get("/v1/daily-pnl", response_model=Dict[str, float])
async def get_daily_pnl(
    user: str = Query(..., description="User id"),
    filters: TradeFilters = Depends(get_filters),
    service: JournalService = Depends(get_service)
):
    """
    Net P&L per trading day, for the calendar heatmap.
    """
    trades = await service.list_trades(user, filters)
    return aggregate_daily_pnl(trades)


@app.get("/v1/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    user: str = Query(..., description="User id"),
    filters: TradeFilters = Depends(get_filters),
    service: JournalService = Depends(get_service)
):
    return await service.get_dashboard(user, filters)
