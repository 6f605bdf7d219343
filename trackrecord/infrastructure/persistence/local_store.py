import json
import logging
import os
from typing import Dict, List, Optional

from trackrecord.core.entities.deposit import CashMove
from trackrecord.core.entities.trade import Trade
from trackrecord.core.interfaces.record_store import IRecordStore

logger = logging.getLogger(__name__)


class LocalJsonStore(IRecordStore):
    """
    Local cache of every user's records, optionally persisted to a JSON file:

        {"<user>": {"trades": [...], "deposits": [...]}}

    Without a path the store lives in memory only.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path
        self._state: Dict[str, dict] = self._load()

    def _load(self) -> Dict[str, dict]:
        if not self.path or not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Unable to read local store {self.path}: {e}. Starting empty.")
            return {}

    def _save(self):
        if not self.path:
            return
        try:
            with open(self.path, "w", encoding="utf-8") as fh:
                json.dump(self._state, fh)
        except OSError as e:
            logger.error(f"Unable to write local store {self.path}: {e}")

    def _bucket(self, user: str) -> dict:
        return self._state.setdefault(user, {"trades": [], "deposits": []})

    # IRecordStore Implementation
    async def list_trades(self, user: str) -> List[Trade]:
        return [Trade.model_validate(t) for t in self._bucket(user)["trades"]]

    async def list_deposits(self, user: str) -> List[CashMove]:
        return [CashMove.model_validate(d) for d in self._bucket(user)["deposits"]]

    async def insert_trade(self, user: str, trade: Trade) -> Trade:
        self._bucket(user)["trades"].append(trade.model_dump(mode="json"))
        self._save()
        return trade

    async def insert_deposit(self, user: str, deposit: CashMove) -> CashMove:
        self._bucket(user)["deposits"].append(deposit.model_dump(mode="json"))
        self._save()
        return deposit

    async def delete_trade(self, user: str, trade_id: str) -> None:
        bucket = self._bucket(user)
        bucket["trades"] = [t for t in bucket["trades"] if t["id"] != trade_id]
        self._save()

    async def delete_deposit(self, user: str, deposit_id: str) -> None:
        bucket = self._bucket(user)
        bucket["deposits"] = [d for d in bucket["deposits"] if d["id"] != deposit_id]
        self._save()

    def replace(self, user: str, trades: List[Trade], deposits: List[CashMove]):
        """Overwrites a user's cached records with a fresh remote snapshot."""
        self._state[user] = {
            "trades": [t.model_dump(mode="json") for t in trades],
            "deposits": [d.model_dump(mode="json") for d in deposits],
        }
        self._save()
