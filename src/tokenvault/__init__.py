"""
tokenvault - Token Custody and Governance

Holds deposited fungible tokens under a time-locked, linearly vesting release
schedule and lets token holders vote to release a depositor's tokens early or
extend their lock.

Main Components:
- Custody Ledger: deposits, vesting releases, custody records
- Governance Engine: propose, weighted vote, execute
- Token interface: the narrow ledger protocol custody depends on
"""

from tokenvault.core.config import VaultConfig
from tokenvault.custody.records import CustodyRecord, LockStatus
from tokenvault.governance.proposals import Proposal, ProposalKind, ProposalState
from tokenvault.tokens.interface import TokenLedger, TokenRegistry
from tokenvault.vault import TokenVault

__version__ = "0.1.0"

__all__ = [
    "CustodyRecord",
    "LockStatus",
    "Proposal",
    "ProposalKind",
    "ProposalState",
    "TokenLedger",
    "TokenRegistry",
    "TokenVault",
    "VaultConfig",
]
