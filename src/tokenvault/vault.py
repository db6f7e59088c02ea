"""
TokenVault - single entry point over custody and governance.

Wires the token registry, event log, custody ledger and governance engine
around one shared state and exposes the public operations.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable

from tokenvault.core.config import VaultConfig
from tokenvault.core.events import EventLog
from tokenvault.core.exceptions import StorageError
from tokenvault.core.logging_config import setup_logging
from tokenvault.core.storage import VaultState
from tokenvault.custody.ledger import CustodyLedger
from tokenvault.custody.records import CustodyRecord, LockStatus
from tokenvault.governance.engine import GovernanceEngine
from tokenvault.governance.proposals import Proposal, ProposalKind
from tokenvault.tokens.interface import TokenLedger, TokenRegistry

logger = logging.getLogger(__name__)


class TokenVault:
    def __init__(
        self,
        config: VaultConfig | None = None,
        registry: TokenRegistry | None = None,
        time_provider: Callable[[], int] | None = None,
        state: VaultState | None = None,
    ):
        self.config = config if config is not None else VaultConfig()
        self.registry = registry if registry is not None else TokenRegistry()
        self.events = EventLog()
        self._time_provider = time_provider
        self._build(state if state is not None else VaultState())

    def _build(self, state: VaultState) -> None:
        self.state = state
        self.ledger = CustodyLedger(
            self.registry,
            state=state,
            events=self.events,
            config=self.config,
            time_provider=self._time_provider,
        )
        self.governance = GovernanceEngine(
            self.ledger,
            registry=self.registry,
            events=self.events,
            config=self.config,
            time_provider=self._time_provider,
        )

    @classmethod
    def from_env(cls, time_provider: Callable[[], int] | None = None) -> "TokenVault":
        """Build a vault from TOKENVAULT_* settings, configuring JSON logging and loading saved state."""
        config = VaultConfig.from_env()
        setup_logging(
            name="tokenvault",
            log_file=config.log_file,
            level=config.log_level,
            environment=config.environment,
        )
        vault = cls(config=config, time_provider=time_provider)
        if config.state_path and os.path.exists(config.state_path):
            vault.load_state()
        elif config.state_path:
            logger.info("No vault snapshot at %s, starting empty", config.state_path)
        return vault

    # ==================== Assets ====================

    def register_asset(self, asset_id: str, ledger: TokenLedger) -> None:
        self.registry.register(asset_id, ledger)

    # ==================== Custody ====================

    def deposit(
        self,
        depositor: str,
        asset_id: str,
        amount: int,
        lock_duration: int,
        vesting_duration: int = 0,
        current_time: int | None = None,
    ) -> CustodyRecord:
        return self.ledger.deposit(
            depositor, asset_id, amount, lock_duration, vesting_duration, current_time=current_time
        )

    def release_vested(self, depositor: str, current_time: int | None = None) -> int:
        return self.ledger.release_vested(depositor, current_time=current_time)

    def view_remaining(self, depositor: str) -> int:
        return self.ledger.view_remaining(depositor)

    def releasable_amount(self, depositor: str, current_time: int | None = None) -> int:
        return self.ledger.releasable_amount(depositor, current_time=current_time)

    def lock_status(self, depositor: str) -> LockStatus:
        return self.ledger.lock_status(depositor)

    def get_record(self, depositor: str) -> CustodyRecord | None:
        return self.ledger.get_record(depositor)

    # ==================== Governance ====================

    def propose(
        self,
        proposer: str,
        kind: ProposalKind | str,
        parameter: int,
        current_time: int | None = None,
    ) -> int:
        return self.governance.propose(proposer, kind, parameter, current_time=current_time)

    def vote(
        self,
        proposal_id: int,
        voter: str,
        support: bool,
        current_time: int | None = None,
    ) -> int:
        return self.governance.vote(proposal_id, voter, support, current_time=current_time)

    def execute(self, proposal_id: int, current_time: int | None = None) -> bool:
        return self.governance.execute(proposal_id, current_time=current_time)

    def get_proposal(self, proposal_id: int) -> Proposal:
        return self.governance.get_proposal(proposal_id)

    def get_vote_tally(self, proposal_id: int, current_time: int | None = None) -> dict[str, Any]:
        return self.governance.get_vote_tally(proposal_id, current_time=current_time)

    # ==================== Persistence ====================

    def _resolve_path(self, path: str | None) -> str:
        resolved = path or self.config.state_path
        if not resolved:
            raise StorageError("No state path given and TOKENVAULT_STATE_PATH is not set")
        return resolved

    def save_state(self, path: str | None = None) -> str:
        resolved = self._resolve_path(path)
        self.state.save(resolved)
        return resolved

    def load_state(self, path: str | None = None) -> None:
        """Replace in-memory records and proposals with a saved snapshot."""
        state = VaultState.load(self._resolve_path(path))
        self._build(state)
