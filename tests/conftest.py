"""
Test configuration and fixtures
"""
import sys
from pathlib import Path

# Add src to Python path
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

import pytest

from erc20_token import UINT256_MAX, InMemoryToken
from tokenvault.core.config import VaultConfig
from tokenvault.tokens.erc20 import ERC20CustodyLedger
from tokenvault.vault import TokenVault

DAY = 86400
START = 1_700_000_000
ASSET = "VLT"
TOTAL_SUPPLY = 100_000

HOLDERS = {
    "0xalice": 10_000,
    "0xbob": 5_000,
    "0xcarol": 3_000,
    "0xdave": 2_000,
}


class ManualClock:
    def __init__(self, start_time: int):
        self.current_time = start_time

    def now(self) -> int:
        return self.current_time

    def advance(self, seconds: int):
        self.current_time += seconds

    def set(self, timestamp: int):
        self.current_time = timestamp


def make_token(balances=None, total_supply=TOTAL_SUPPLY, symbol=ASSET) -> InMemoryToken:
    return InMemoryToken(
        symbol=symbol,
        total_supply=total_supply,
        balances=dict(HOLDERS if balances is None else balances),
    )


def make_vault(clock=None, token=None, asset_id=ASSET, config=None):
    """Vault with one registered ERC20 asset and unlimited custody allowances."""
    vault = TokenVault(config=config or VaultConfig(), time_provider=clock.now if clock else None)
    token = token or make_token()
    custody = vault.config.custody_address
    vault.register_asset(asset_id, ERC20CustodyLedger(token, custody))
    for holder in list(token.balances):
        token.approve(holder, custody, UINT256_MAX)
    return vault, token


@pytest.fixture
def clock():
    return ManualClock(START)


@pytest.fixture
def token():
    return make_token()


@pytest.fixture
def vault(clock, token):
    vault, _ = make_vault(clock=clock, token=token)
    return vault
