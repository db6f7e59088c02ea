"""
In-memory ERC20 token used as the external ledger in tests.

Balances are seeded at construction; there is no mint or burn. Accounts are
case-insensitive, like hex addresses on chain.
"""

from dataclasses import dataclass, field

UINT256_MAX = 2**256 - 1


class TokenError(Exception):
    pass


@dataclass
class InMemoryToken:
    symbol: str
    total_supply: int = 0
    balances: dict = field(default_factory=dict)
    allowances: dict = field(default_factory=dict)
    transfers: list = field(default_factory=list)

    def __post_init__(self):
        self.balances = {account.lower(): amount for account, amount in self.balances.items()}
        seeded = sum(self.balances.values())
        if not self.total_supply:
            self.total_supply = seeded
        if self.total_supply < seeded:
            raise TokenError(f"total supply {self.total_supply} below seeded balances {seeded}")

    def balance_of(self, account):
        return self.balances.get(account.lower(), 0)

    def allowance(self, owner, spender):
        return self.allowances.get((owner.lower(), spender.lower()), 0)

    def approve(self, owner, spender, amount):
        self.allowances[(owner.lower(), spender.lower())] = amount
        return True

    def transfer(self, sender, recipient, amount):
        self._move(sender.lower(), recipient.lower(), amount)
        return True

    def transfer_from(self, spender, from_addr, to_addr, amount):
        key = (from_addr.lower(), spender.lower())
        allowed = self.allowances.get(key, 0)
        if allowed < amount:
            raise TokenError(f"insufficient allowance ({allowed} < {amount})")
        self._move(key[0], to_addr.lower(), amount)
        if allowed != UINT256_MAX:
            self.allowances[key] = allowed - amount
        return True

    def _move(self, source, destination, amount):
        if amount < 0:
            raise TokenError("amount cannot be negative")
        balance = self.balances.get(source, 0)
        if balance < amount:
            raise TokenError(f"transfer amount exceeds balance ({amount} > {balance})")
        self.balances[source] = balance - amount
        self.balances[destination] = self.balances.get(destination, 0) + amount
        self.transfers.append((source, destination, amount))
