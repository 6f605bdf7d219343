import asyncio
import threading
from typing import List

import psycopg2

from trackrecord.core.entities.deposit import CashMove
from trackrecord.core.entities.trade import Trade
from trackrecord.core.interfaces.record_store import IRecordStore


class PostgresRepo(IRecordStore):
    """
    Remote record store. psycopg2 is blocking, so every call is pushed to a
    worker thread to keep the event loop free.

    Nothing connects at construction time: the schema is created on first
    use, so an unreachable database surfaces as errors from the store
    methods rather than from building the repo.
    """

    def __init__(self, dsn: str):
        self.dsn = dsn
        self._ready = False
        self._init_lock = threading.Lock()

    def _connect(self):
        return psycopg2.connect(self.dsn)

    def _init_db(self):
        conn = self._connect()
        cur = conn.cursor()

        # seq orders same-day rows by insertion
        cur.execute("""
            CREATE TABLE IF NOT EXISTS trades (
                id VARCHAR PRIMARY KEY,
                user_id VARCHAR NOT NULL,
                date DATE NOT NULL,
                asset VARCHAR NOT NULL,
                side VARCHAR NOT NULL,
                outcome VARCHAR NOT NULL,
                amount DECIMAL NOT NULL,
                note TEXT,
                seq BIGSERIAL
            );
        """)
        cur.execute("ALTER TABLE trades ADD COLUMN IF NOT EXISTS seq BIGSERIAL;")

        cur.execute("""
            CREATE TABLE IF NOT EXISTS deposits (
                id VARCHAR PRIMARY KEY,
                user_id VARCHAR NOT NULL,
                date DATE NOT NULL,
                amount DECIMAL NOT NULL,
                note TEXT,
                seq BIGSERIAL
            );
        """)
        cur.execute("ALTER TABLE deposits ADD COLUMN IF NOT EXISTS seq BIGSERIAL;")

        conn.commit()
        cur.close()
        conn.close()

    def _ensure_schema(self):
        if self._ready:
            return
        with self._init_lock:
            if not self._ready:
                self._init_db()
                self._ready = True

    def _fetch(self, query: str, params: tuple) -> list:
        self._ensure_schema()
        conn = self._connect()
        cur = conn.cursor()
        cur.execute(query, params)
        rows = cur.fetchall()
        cur.close()
        conn.close()
        return rows

    def _execute(self, query: str, params: tuple):
        self._ensure_schema()
        conn = self._connect()
        cur = conn.cursor()
        cur.execute(query, params)
        conn.commit()
        cur.close()
        conn.close()

    # IRecordStore Implementation
    async def list_trades(self, user: str) -> List[Trade]:
        rows = await asyncio.to_thread(
            self._fetch,
            """
            SELECT id, date, asset, side, outcome, amount, note
            FROM trades
            WHERE user_id = %s
            ORDER BY date ASC, seq ASC
            """,
            (user,)
        )

        trades = []
        for row in rows:
            trades.append(Trade(
                id=row[0],
                date=row[1],
                asset=row[2],
                side=row[3],
                outcome=row[4],
                amount=float(row[5]),
                note=row[6]
            ))
        return trades

    async def list_deposits(self, user: str) -> List[CashMove]:
        rows = await asyncio.to_thread(
            self._fetch,
            """
            SELECT id, date, amount, note
            FROM deposits
            WHERE user_id = %s
            ORDER BY date ASC, seq ASC
            """,
            (user,)
        )

        deposits = []
        for row in rows:
            deposits.append(CashMove(
                id=row[0],
                date=row[1],
                amount=float(row[2]),
                note=row[3]
            ))
        return deposits

    async def insert_trade(self, user: str, trade: Trade) -> Trade:
        await asyncio.to_thread(
            self._execute,
            """
            INSERT INTO trades (id, user_id, date, asset, side, outcome, amount, note)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            """,
            (trade.id, user, trade.date, trade.asset, trade.side, trade.outcome, trade.amount, trade.note)
        )
        return trade

    async def insert_deposit(self, user: str, deposit: CashMove) -> CashMove:
        await asyncio.to_thread(
            self._execute,
            """
            INSERT INTO deposits (id, user_id, date, amount, note)
            VALUES (%s, %s, %s, %s, %s)
            """,
            (deposit.id, user, deposit.date, deposit.amount, deposit.note)
        )
        return deposit

    async def delete_trade(self, user: str, trade_id: str) -> None:
        await asyncio.to_thread(
            self._execute,
            "DELETE FROM trades WHERE id = %s AND user_id = %s",
            (trade_id, user)
        )

    async def delete_deposit(self, user: str, deposit_id: str) -> None:
        await asyncio.to_thread(
            self._execute,
            "DELETE FROM deposits WHERE id = %s AND user_id = %s",
            (deposit_id, user)
        )
