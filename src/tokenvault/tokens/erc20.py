"""
Custody adapter for ERC20-style tokens.

ERC20CustodyLedger exposes one token through the TokenLedger protocol:
``pull`` spends the depositor's allowance to the custody address and ``push``
transfers out of the custody address. The token itself lives elsewhere; any
object with ERC20 transfer, allowance and balance calls can be wrapped.
"""

from __future__ import annotations

import logging
from typing import Callable, Protocol, Union, runtime_checkable

from tokenvault.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


@runtime_checkable
class ERC20Like(Protocol):
    """The slice of an ERC20 token the custody adapter calls."""

    # Either a plain integer or a zero-argument ``totalSupply()``-style call
    total_supply: Union[int, Callable[[], int]]

    def balance_of(self, account: str) -> int:
        ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        ...

    def transfer_from(self, spender: str, from_addr: str, to_addr: str, amount: int) -> bool:
        ...


class ERC20CustodyLedger:
    """TokenLedger adapter over an ERC20 token with a fixed custody address."""

    def __init__(self, token: ERC20Like, custody_address: str) -> None:
        if not custody_address:
            raise ValidationError("Custody address cannot be empty.")
        if not isinstance(token, ERC20Like):
            raise ValidationError(
                "Token does not expose ERC20 transfer and balance calls",
                details={"token": type(token).__name__},
            )
        self.token = token
        self.custody_address = custody_address

    def pull(self, source: str, amount: int) -> bool:
        ok = self.token.transfer_from(self.custody_address, source, self.custody_address, amount)
        logger.debug(
            "Pulled %s into custody from %s",
            amount,
            source,
            extra={"event": "erc20.pull", "accepted": ok is not False},
        )
        return ok

    def push(self, destination: str, amount: int) -> bool:
        ok = self.token.transfer(self.custody_address, destination, amount)
        logger.debug(
            "Pushed %s out of custody to %s",
            amount,
            destination,
            extra={"event": "erc20.push", "accepted": ok is not False},
        )
        return ok

    def balance_of(self, identity: str) -> int:
        return self.token.balance_of(identity)

    def total_supply(self) -> int:
        supply = self.token.total_supply
        return supply() if callable(supply) else supply

    def custody_balance(self) -> int:
        return self.token.balance_of(self.custody_address)
