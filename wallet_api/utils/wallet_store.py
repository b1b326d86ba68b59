# wallet_api/utils/wallet_store.py
import uuid
from typing import Any, List, Optional, Protocol


class WalletStore(Protocol):
    """
    Balance access for one user's wallets and sub-wallets.

    Every balance mutation made by the ledger goes through ``update_balance``.
    The SQLAlchemy implementation lives in ``wallet_api.crud.wallet``.
    """

    async def list_wallets(self) -> List[Any]:
        ...

    async def list_sub_wallets(self) -> List[Any]:
        ...

    async def get(self, kind: str, record_id: uuid.UUID) -> Optional[Any]:
        ...

    async def update_balance(self, kind: str, record_id: uuid.UUID, balance: float) -> None:
        ...
