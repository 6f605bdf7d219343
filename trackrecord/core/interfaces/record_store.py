from abc import ABC, abstractmethod
from typing import List, Tuple

from trackrecord.core.entities.deposit import CashMove
from trackrecord.core.entities.trade import Trade


class IRecordStore(ABC):
    """
    Storage capability consumed by the journal service: list, insert and
    delete trades and cash moves for one user.
    """

    @abstractmethod
    async def list_trades(self, user: str) -> List[Trade]:
        pass

    @abstractmethod
    async def list_deposits(self, user: str) -> List[CashMove]:
        pass

    @abstractmethod
    async def insert_trade(self, user: str, trade: Trade) -> Trade:
        pass

    @abstractmethod
    async def insert_deposit(self, user: str, deposit: CashMove) -> CashMove:
        pass

    @abstractmethod
    async def delete_trade(self, user: str, trade_id: str) -> None:
        """Deleting an unknown id is a no-op."""
        pass

    @abstractmethod
    async def delete_deposit(self, user: str, deposit_id: str) -> None:
        pass

    async def list_records(self, user: str) -> Tuple[List[Trade], List[CashMove]]:
        """Trades and cash moves read together, for views that need both."""
        return await self.list_trades(user), await self.list_deposits(user)
