import logging
from typing import List, Optional, Tuple

from trackrecord.core.entities.deposit import CashMove
from trackrecord.core.entities.trade import Trade
from trackrecord.core.errors import StoreUnavailableError
from trackrecord.core.interfaces.record_store import IRecordStore
from trackrecord.infrastructure.persistence.local_store import LocalJsonStore

logger = logging.getLogger(__name__)


class FallbackRecordStore(IRecordStore):
    """
    Remote store first, local cache second.

    - Reads: a successful remote read refreshes the local cache; a failed one
      is logged and the cached records are served instead.
    - Writes: the remote store must accept the write before it is mirrored
      locally. A rejected write raises StoreUnavailableError and the cache is
      left untouched.
    - Without a remote store every call goes to the local cache.
    """

    def __init__(self, local: LocalJsonStore, primary: Optional[IRecordStore] = None):
        self.primary = primary
        self.local = local

    async def _refresh(self, user: str) -> bool:
        if self.primary is None:
            return False
        try:
            trades, deposits = await self.primary.list_records(user)
        except Exception as e:
            logger.warning(f"Remote read failed for {user}: {e}. Using local data.")
            return False
        self.local.replace(user, trades, deposits)
        return True

    async def list_trades(self, user: str) -> List[Trade]:
        await self._refresh(user)
        return await self.local.list_trades(user)

    async def list_deposits(self, user: str) -> List[CashMove]:
        await self._refresh(user)
        return await self.local.list_deposits(user)

    async def list_records(self, user: str) -> Tuple[List[Trade], List[CashMove]]:
        # One refresh, so both lists come from the same remote snapshot
        await self._refresh(user)
        return await self.local.list_trades(user), await self.local.list_deposits(user)

    async def _remote_write(self, action: str, user: str, call):
        try:
            await call
        except Exception as e:
            logger.error(f"Remote {action} failed for {user}: {e}")
            raise StoreUnavailableError(f"Unable to {action} on the remote store") from e

    async def insert_trade(self, user: str, trade: Trade) -> Trade:
        if self.primary is not None:
            await self._remote_write("insert trade", user, self.primary.insert_trade(user, trade))
        return await self.local.insert_trade(user, trade)

    async def insert_deposit(self, user: str, deposit: CashMove) -> CashMove:
        if self.primary is not None:
            await self._remote_write("insert deposit", user, self.primary.insert_deposit(user, deposit))
        return await self.local.insert_deposit(user, deposit)

    async def delete_trade(self, user: str, trade_id: str) -> None:
        if self.primary is not None:
            await self._remote_write("delete trade", user, self.primary.delete_trade(user, trade_id))
        await self.local.delete_trade(user, trade_id)

    async def delete_deposit(self, user: str, deposit_id: str) -> None:
        if self.primary is not None:
            await self._remote_write("delete deposit", user, self.primary.delete_deposit(user, deposit_id))
        await self.local.delete_deposit(user, deposit_id)
