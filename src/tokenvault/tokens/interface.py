"""
Token ledger protocol - the narrow interface custody depends on.

The vault never implements balances itself. Each asset identifier maps to a
ledger that can pull tokens into custody, push them out, and answer balance
and total supply queries.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol, runtime_checkable

from tokenvault.core.exceptions import UnknownAssetError, ValidationError

logger = logging.getLogger(__name__)


def normalize_identity(identity: str, field: str = "identity") -> str:
    """
    Canonical form of a depositor, proposer or voter identity.

    Ledger identities are case-insensitive hex addresses, so custody
    records and vote sets are keyed by the stripped, lowercased form.
    """
    if not isinstance(identity, str) or not identity.strip():
        raise ValidationError(
            f"{field.capitalize()} cannot be empty.", details={"field": field}
        )
    return identity.strip().lower()


@runtime_checkable
class TokenLedger(Protocol):
    """Fungible token ledger for a single asset."""

    def pull(self, source: str, amount: int) -> bool:
        """Move ``amount`` from ``source`` into custody. False or raise on failure."""
        ...

    def push(self, destination: str, amount: int) -> bool:
        """Move ``amount`` out of custody to ``destination``. False or raise on failure."""
        ...

    def balance_of(self, identity: str) -> int:
        ...

    def total_supply(self) -> int:
        ...


class TokenRegistry:
    """Maps asset identifiers to their token ledgers."""

    def __init__(self) -> None:
        self._ledgers: dict[str, TokenLedger] = {}
        self._lock = threading.RLock()

    def register(self, asset_id: str, ledger: TokenLedger) -> None:
        if not asset_id:
            raise ValidationError("Asset identifier cannot be empty.")
        if not isinstance(ledger, TokenLedger):
            raise ValidationError(
                f"Ledger for {asset_id} does not implement the token ledger interface",
                details={"asset_id": asset_id, "ledger": type(ledger).__name__},
            )
        with self._lock:
            replaced = asset_id in self._ledgers
            self._ledgers[asset_id] = ledger
        logger.info(
            "Token ledger registered",
            extra={"event": "tokens.registered", "asset_id": asset_id, "replaced": replaced},
        )

    def get(self, asset_id: str) -> TokenLedger:
        with self._lock:
            ledger = self._ledgers.get(asset_id)
        if ledger is None:
            raise UnknownAssetError(
                f"No token ledger registered for asset {asset_id}",
                details={"asset_id": asset_id},
            )
        return ledger

    def asset_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._ledgers)

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self._ledgers
