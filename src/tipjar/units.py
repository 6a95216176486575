"""
ETH amount parsing and formatting.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Optional, Union

from web3 import Web3

from tipjar.errors import InvalidAmountError

WEI_PER_ETH = 10**18
BALANCE_PLACES = 4
MAX_FRACTION_DIGITS = 18


def parse_tip_amount(text: Union[str, Decimal, None]) -> Decimal:
    """Validate a user-entered tip amount in ETH. Raises InvalidAmountError."""
    if text is None or (isinstance(text, str) and not text.strip()):
        raise InvalidAmountError(text or "")
    try:
        amount = Decimal(text.strip() if isinstance(text, str) else text)
    except InvalidOperation:
        raise InvalidAmountError(text)
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError(text)
    exponent = amount.normalize().as_tuple().exponent
    if isinstance(exponent, int) and exponent < -MAX_FRACTION_DIGITS:
        raise InvalidAmountError(text, "Tip amounts cannot be smaller than 1 wei.")
    return amount


def to_wei(amount: Union[str, Decimal]) -> int:
    return int(Web3.to_wei(Decimal(amount), "ether"))


def format_ether(wei: int, places: int = BALANCE_PLACES) -> str:
    """Format a wei amount as an ETH decimal string, e.g. 1230000000000000000 -> '1.2300'."""
    with localcontext() as ctx:
        ctx.prec = 80
        eth = Decimal(int(wei)) / Decimal(WEI_PER_ETH)
        return format(eth.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP), "f")


def shorten_address(address: Optional[str]) -> str:
    if not address:
        return "-"
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"
