"""
Contract read models.
"""

from decimal import Decimal

from pydantic import BaseModel


class ContractSnapshot(BaseModel):
    """Balance (ETH decimal string) and owner, always read together."""
    balance: str = "0"
    owner: str = ""

    @property
    def has_funds(self) -> bool:
        return Decimal(self.balance) > 0
