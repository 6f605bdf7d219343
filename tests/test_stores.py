"""
Tests for the local cache and the remote-then-local fallback ordering.
"""
import pytest

from conftest import make_deposit, make_trade
from trackrecord.core.errors import StoreUnavailableError
from trackrecord.core.interfaces.record_store import IRecordStore
from trackrecord.core.services import JournalService
from trackrecord.infrastructure.persistence.fallback_store import FallbackRecordStore
from trackrecord.infrastructure.persistence.local_store import LocalJsonStore
from trackrecord.infrastructure.persistence.postgres_repo import PostgresRepo

USER = "trader-1"


class BrokenRemote(IRecordStore):
    """Remote store whose every call fails, e.g. the database is down."""

    async def list_trades(self, user):
        raise ConnectionError("remote down")

    async def list_deposits(self, user):
        raise ConnectionError("remote down")

    async def insert_trade(self, user, trade):
        raise ConnectionError("remote down")

    async def insert_deposit(self, user, deposit):
        raise ConnectionError("remote down")

    async def delete_trade(self, user, trade_id):
        raise ConnectionError("remote down")

    async def delete_deposit(self, user, deposit_id):
        raise ConnectionError("remote down")


@pytest.mark.anyio
async def test_local_store_roundtrip_through_file(tmp_path):
    path = str(tmp_path / "journal.json")
    store = LocalJsonStore(path)
    await store.insert_trade(USER, make_trade(100, "win", id="t1"))
    await store.insert_deposit(USER, make_deposit(500, id="d1"))

    reopened = LocalJsonStore(path)

    assert [t.id for t in await reopened.list_trades(USER)] == ["t1"]
    assert [d.id for d in await reopened.list_deposits(USER)] == ["d1"]
    assert await reopened.list_trades("someone-else") == []


@pytest.mark.anyio
async def test_local_store_delete_is_idempotent():
    store = LocalJsonStore()
    await store.insert_trade(USER, make_trade(100, "win", id="t1"))

    await store.delete_trade(USER, "t1")
    await store.delete_trade(USER, "t1")
    await store.delete_deposit(USER, "missing")

    assert await store.list_trades(USER) == []


@pytest.mark.anyio
async def test_local_store_survives_corrupt_file(tmp_path):
    path = tmp_path / "journal.json"
    path.write_text("{not json")

    store = LocalJsonStore(str(path))

    assert await store.list_trades(USER) == []


@pytest.mark.anyio
async def test_fallback_refreshes_cache_from_remote():
    remote = LocalJsonStore()
    await remote.insert_trade(USER, make_trade(100, "win", id="remote-trade"))
    local = LocalJsonStore()
    await local.insert_trade(USER, make_trade(1, "loss", id="stale"))

    store = FallbackRecordStore(local, primary=remote)

    assert [t.id for t in await store.list_trades(USER)] == ["remote-trade"]
    assert [t.id for t in await local.list_trades(USER)] == ["remote-trade"]


@pytest.mark.anyio
async def test_fallback_serves_local_when_remote_read_fails():
    local = LocalJsonStore()
    await local.insert_trade(USER, make_trade(100, "win", id="cached"))

    store = FallbackRecordStore(local, primary=BrokenRemote())

    assert [t.id for t in await store.list_trades(USER)] == ["cached"]


@pytest.mark.anyio
async def test_fallback_write_failure_leaves_cache_untouched():
    local = LocalJsonStore()
    store = FallbackRecordStore(local, primary=BrokenRemote())

    with pytest.raises(StoreUnavailableError):
        await store.insert_trade(USER, make_trade(100, "win", id="t1"))
    with pytest.raises(StoreUnavailableError):
        await store.insert_deposit(USER, make_deposit(100, id="d1"))

    assert await local.list_trades(USER) == []
    assert await local.list_deposits(USER) == []


@pytest.mark.anyio
async def test_fallback_mirrors_successful_writes():
    remote = LocalJsonStore()
    local = LocalJsonStore()
    store = FallbackRecordStore(local, primary=remote)

    await store.insert_trade(USER, make_trade(100, "win", id="t1"))
    await store.insert_deposit(USER, make_deposit(250, id="d1"))
    assert [t.id for t in await remote.list_trades(USER)] == ["t1"]
    assert [t.id for t in await local.list_trades(USER)] == ["t1"]

    await store.delete_deposit(USER, "d1")
    assert await remote.list_deposits(USER) == []
    assert await local.list_deposits(USER) == []


@pytest.mark.anyio
async def test_fallback_without_remote_is_local_only():
    local = LocalJsonStore()
    store = FallbackRecordStore(local)

    await store.insert_trade(USER, make_trade(100, "win", id="t1"))
    await store.delete_trade(USER, "t1")

    assert await store.list_trades(USER) == []


class FlakyRemote(LocalJsonStore):
    """In-memory remote that can be switched off, counting snapshot reads."""

    def __init__(self):
        super().__init__()
        self.down = False
        self.reads = 0

    def _check(self):
        if self.down:
            raise ConnectionError("remote down")

    async def list_records(self, user):
        self._check()
        self.reads += 1
        return await super().list_records(user)

    async def insert_trade(self, user, trade):
        self._check()
        return await super().insert_trade(user, trade)


@pytest.mark.anyio
async def test_trade_refused_while_remote_down_is_not_lost_when_it_returns():
    remote = FlakyRemote()
    local = LocalJsonStore()
    store = FallbackRecordStore(local, primary=remote)
    await store.insert_trade(USER, make_trade(100, "win", id="before"))

    remote.down = True
    with pytest.raises(StoreUnavailableError):
        await store.insert_trade(USER, make_trade(50, "loss", id="during"))
    assert [t.id for t in await store.list_trades(USER)] == ["before"]

    remote.down = False
    await store.insert_trade(USER, make_trade(70, "win", id="after"))
    assert [t.id for t in await store.list_trades(USER)] == ["before", "after"]


@pytest.mark.anyio
async def test_dashboard_reads_one_remote_snapshot():
    remote = FlakyRemote()
    await remote.insert_trade(USER, make_trade(100, "win", id="t1"))
    await remote.insert_deposit(USER, make_deposit(1000, id="d1"))
    service = JournalService(FallbackRecordStore(LocalJsonStore(), primary=remote))

    dashboard = await service.get_dashboard(USER)

    assert remote.reads == 1
    assert dashboard.totalDeposits == 1000
    assert dashboard.metrics.totalTrades == 1


class FakeCursor:
    def __init__(self, log):
        self.log = log

    def execute(self, query, params=None):
        self.log.append(" ".join(query.split()))

    def fetchall(self):
        return []

    def close(self):
        pass


class FakeConnection:
    def __init__(self, log):
        self.log = log

    def cursor(self):
        return FakeCursor(self.log)

    def commit(self):
        pass

    def close(self):
        pass


def test_postgres_repo_does_not_connect_on_construction(monkeypatch):
    def refuse(self):
        raise AssertionError("connected too early")

    monkeypatch.setattr(PostgresRepo, "_connect", refuse)

    repo = PostgresRepo("postgresql://db.invalid/journal")

    assert repo.dsn == "postgresql://db.invalid/journal"


@pytest.mark.anyio
async def test_postgres_repo_creates_schema_once_and_orders_same_day_rows(monkeypatch):
    log = []
    monkeypatch.setattr(PostgresRepo, "_connect", lambda self: FakeConnection(log))
    repo = PostgresRepo("postgresql://db.invalid/journal")

    await repo.list_trades(USER)
    await repo.list_deposits(USER)
    await repo.insert_trade(USER, make_trade(10, "win", id="t1"))

    creates = [q for q in log if q.startswith("CREATE TABLE")]
    assert len(creates) == 2
    selects = [q for q in log if q.startswith("SELECT")]
    assert len(selects) == 2
    assert all("ORDER BY date ASC, seq ASC" in q for q in selects)


@pytest.mark.anyio
async def test_postgres_repo_surfaces_connection_errors_from_methods(monkeypatch):
    def refuse(self):
        raise ConnectionError("could not connect to server")

    monkeypatch.setattr(PostgresRepo, "_connect", refuse)
    repo = PostgresRepo("postgresql://db.invalid/journal")

    with pytest.raises(ConnectionError):
        await repo.list_trades(USER)
    with pytest.raises(ConnectionError):
        await repo.insert_trade(USER, make_trade(10, "win", id="t1"))
