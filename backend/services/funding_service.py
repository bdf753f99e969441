"""
Funding service: list an account's coins and pick one to pay with.

Selection is first-fit in the order the node returns holdings. It does not
look for the smallest or largest qualifying coin, so results stay identical
to any other client that walks holdings the same way.
"""
import logging
from typing import Iterable, Optional

from domain.constants import MAX_RPC_PAGE_SIZE
from domain.errors import InsufficientFundsError, QueryFailedError
from exceptions import SuiRpcError
from models import FundingUnit

logger = logging.getLogger(__name__)


def select_first_fit(units: Iterable[FundingUnit], required: int, owner: str = "") -> FundingUnit:
    """Return the first unit whose balance covers ``required``."""
    largest: Optional[int] = None
    for unit in units:
        if unit.balance >= required:
            return unit
        largest = unit.balance if largest is None else max(largest, unit.balance)
    raise InsufficientFundsError(owner, required, largest)


class FundingUnitSelector:
    """Reads an account's coins of one type from the ledger."""

    def __init__(self, client, coin_type: str):
        self._client = client
        self._coin_type = coin_type

    async def list_units(self, owner: str) -> list[FundingUnit]:
        """All coins owned by ``owner``, every page, in node order."""
        units: list[FundingUnit] = []
        cursor = None
        while True:
            try:
                page = await self._client.get_coins(
                    owner, self._coin_type, cursor=cursor, limit=MAX_RPC_PAGE_SIZE
                )
            except SuiRpcError as e:
                raise QueryFailedError(f"Failed to fetch coins for {owner}: {e.message}", cause=e) from e

            batch = page.get("data") or []
            units.extend(FundingUnit.from_rpc(coin) for coin in batch)
            previous, cursor = cursor, page.get("nextCursor")
            if not page.get("hasNextPage") or cursor is None:
                break
            if not batch or cursor == previous:
                logger.warning(f"Coin pagination for {owner} stalled at cursor {cursor}; stopping early")
                break

        logger.debug(f"{owner}: {len(units)} coin(s) of {self._coin_type}")
        return units

    async def select(self, owner: str, required: int) -> FundingUnit:
        units = await self.list_units(owner)
        unit = select_first_fit(units, required, owner)
        logger.info(f"Selected coin {unit.id} ({unit.balance} MIST) for {required} MIST")
        return unit
