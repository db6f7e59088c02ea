import pytest

from erc20_token import InMemoryToken, TokenError
from tokenvault.core.exceptions import ValidationError
from tokenvault.tokens.erc20 import ERC20CustodyLedger, ERC20Like
from tokenvault.tokens.interface import TokenLedger


def make_token():
    return InMemoryToken(symbol="VLT", balances={"0xAlice": 100, "0xbob": 50})


def test_custody_adapter_implements_ledger_protocol():
    token = make_token()
    ledger = ERC20CustodyLedger(token, "0xvault")
    assert isinstance(token, ERC20Like)
    assert isinstance(ledger, TokenLedger)

    token.approve("0xalice", "0xvault", 100)
    assert ledger.pull("0xalice", 70)
    assert ledger.custody_balance() == 70
    assert token.allowance("0xalice", "0xvault") == 30
    assert ledger.push("0xbob", 20)
    assert ledger.balance_of("0xbob") == 70
    assert ledger.total_supply() == 150


def test_pull_without_allowance_and_overdrawn_push_raise():
    token = make_token()
    ledger = ERC20CustodyLedger(token, "0xvault")

    with pytest.raises(TokenError):
        ledger.pull("0xalice", 1)
    with pytest.raises(TokenError):
        ledger.push("0xbob", 1)
    assert token.balance_of("0xalice") == 100


def test_total_supply_accepts_a_call():
    class ContractToken:
        def __init__(self, token):
            self._token = token
            self.balance_of = token.balance_of
            self.transfer = token.transfer
            self.transfer_from = token.transfer_from

        def total_supply(self):
            return self._token.total_supply

    ledger = ERC20CustodyLedger(ContractToken(make_token()), "0xvault")
    assert ledger.total_supply() == 150


def test_adapter_rejects_bad_construction():
    with pytest.raises(ValidationError):
        ERC20CustodyLedger(make_token(), "")
    with pytest.raises(ValidationError):
        ERC20CustodyLedger(object(), "0xvault")
