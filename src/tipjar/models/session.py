"""
Wallet session models.
"""

from typing import Optional
from pydantic import BaseModel


class SessionInfo(BaseModel):
    """Result of best-effort session discovery (None means not connected)."""
    account: Optional[str] = None
    chain_id: Optional[int] = None
    chain_name: Optional[str] = None


class WalletSession(BaseModel):
    account: Optional[str] = None
    chain_id: Optional[int] = None
    chain_name: Optional[str] = None

    @property
    def connected(self) -> bool:
        return bool(self.account)

    def on_chain(self, chain_id: int) -> bool:
        return self.connected and self.chain_id == chain_id
