"""
View state owned by the ViewController.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from tipjar.models.contract import ContractSnapshot
from tipjar.models.session import WalletSession


class ConnectionStatus(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    WRONG_NETWORK = "wrong_network"
    READY = "ready"


class PendingAction(BaseModel):
    pending: bool = False
    action: Optional[str] = None  # "connect" | "tip" | "withdraw"
    error: str = ""


def is_owner(account: Optional[str], owner: Optional[str]) -> bool:
    if not account or not owner:
        return False
    return account.lower() == owner.lower()


class ViewState(BaseModel):
    session: WalletSession = Field(default_factory=WalletSession)
    snapshot: Optional[ContractSnapshot] = None
    pending: PendingAction = Field(default_factory=PendingAction)
    last_tx_hash: Optional[str] = None

    @property
    def is_owner(self) -> bool:
        return is_owner(self.session.account, self.snapshot.owner if self.snapshot else None)

    @property
    def error(self) -> str:
        return self.pending.error
