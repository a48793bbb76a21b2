from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional

from wallet_pnl.core import constants


class LedgerSource(ABC):
    """
    Abstract Base Class for ledger data sources.
    Responsible for the two read calls the pipeline needs; everything
    else (pagination, batching, normalization) is done by the caller.
    """

    @abstractmethod
    async def get_signatures(self, address: str, before: Optional[str] = None, limit: int = constants.SIGNATURE_PAGE_SIZE) -> List[str]:
        """Return up to `limit` signatures for address, newest first, strictly older than `before`."""
        pass

    @abstractmethod
    async def get_transaction(self, signature: str) -> Optional[Dict[str, Any]]:
        """Return the raw parsed transaction record, or None if the node does not have it."""
        pass
