from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable

from tokenvault.core import metrics
from tokenvault.core.arithmetic import require_uint, voting_weight
from tokenvault.core.config import VOTING_PERIOD, VaultConfig
from tokenvault.core.events import EventLog, EventType
from tokenvault.core.exceptions import (
    AlreadyExecutedError,
    AlreadyVotedError,
    NoVotingPowerError,
    NotAnActiveLockerError,
    ProposalNotFoundError,
    VaultError,
    VotingClosedError,
    VotingNotOverError,
    VotingNotStartedError,
)
from tokenvault.custody.ledger import CustodyLedger
from tokenvault.governance.proposals import Proposal, ProposalKind, ProposalState
from tokenvault.tokens.interface import TokenRegistry, normalize_identity

logger = logging.getLogger(__name__)


class GovernanceEngine:
    def __init__(
        self,
        ledger: CustodyLedger,
        registry: TokenRegistry | None = None,
        events: EventLog | None = None,
        config: VaultConfig | None = None,
        time_provider: Callable[[], int] | None = None,
    ):
        """
        Initialize the GovernanceEngine on top of a custody ledger.

        Args:
            ledger: Custody ledger whose records proposals target
            registry: Token ledgers used for voting weights (defaults to the ledger's)
            events: Notification log (defaults to the ledger's)
            config: Weight scale (defaults to the ledger's)
            time_provider: Clock returning integer Unix timestamps
        """
        self.ledger = ledger
        self.registry = registry if registry is not None else ledger.registry
        self.events = events if events is not None else ledger.events
        self.config = config if config is not None else ledger.config
        self.state = ledger.state
        self._time_provider = time_provider or (lambda: int(time.time()))
        self._lock = threading.RLock()

        ledger.attach_governance(self)

        logger.info(
            "GovernanceEngine initialized. Voting period: %ss, weight scale: %s",
            VOTING_PERIOD,
            self.config.weight_scale,
        )

    def _current_time(self, current_time: int | None = None) -> int:
        timestamp = self._time_provider() if current_time is None else current_time
        try:
            return int(timestamp)
        except (TypeError, ValueError) as exc:
            raise ValueError("time_provider must return an integer timestamp") from exc

    def get_proposal(self, proposal_id: int) -> Proposal:
        with self._lock:
            proposal = self.state.proposals.get(proposal_id)
        if proposal is None:
            raise ProposalNotFoundError(
                f"Proposal {proposal_id} not found.", details={"proposal_id": proposal_id}
            )
        return proposal

    def proposal_state(self, proposal_id: int, current_time: int | None = None) -> ProposalState:
        return self.get_proposal(proposal_id).state(self._current_time(current_time))

    def list_proposals(self, proposer: str | None = None) -> list[Proposal]:
        with self._lock:
            proposals = self.state.proposals.values()
        if proposer is not None:
            proposer = normalize_identity(proposer, "proposer")
            proposals = [p for p in proposals if p.proposer == proposer]
        return sorted(proposals, key=lambda p: p.proposal_id)

    def propose(
        self,
        proposer: str,
        kind: ProposalKind | str,
        parameter: int,
        current_time: int | None = None,
    ) -> int:
        """
        Open a proposal against the proposer's own custody record.

        Returns the new proposal id. The voting window is
        ``[now, now + VOTING_PERIOD]``.
        """
        try:
            proposer = normalize_identity(proposer, "proposer")
            record = self.ledger.get_active_record(proposer)
            if record is None:
                raise NotAnActiveLockerError(
                    f"{proposer} has no active lock and cannot propose",
                    details={"proposer": proposer},
                )
            proposal_kind = ProposalKind.parse(kind)
            require_uint(parameter, "parameter")

            with self._lock:
                now = self._current_time(current_time)
                proposal_id = self.state.next_proposal_id()
                proposal = Proposal(
                    proposal_id=proposal_id,
                    proposer=proposer,
                    asset_id=record.asset_id,
                    kind=proposal_kind,
                    parameter=parameter,
                    start_time=now,
                    end_time=now + VOTING_PERIOD,
                )
                self.state.proposals.insert(proposal_id, proposal)
        except VaultError as exc:
            metrics.record_rejection("propose", exc)
            raise

        metrics.record_proposal(proposal_kind.value)
        self.events.emit(
            EventType.PROPOSAL_CREATED,
            now,
            proposal_id=proposal_id,
            proposer=proposer,
            kind=proposal_kind.value,
            parameter=parameter,
            end_time=proposal.end_time,
        )
        logger.info(
            "Proposal %s (%s, parameter=%s) submitted by %s. Voting ends at %s",
            proposal_id,
            proposal_kind.value,
            parameter,
            proposer,
            proposal.end_time,
            extra={"event": "governance.propose", "proposal_id": proposal_id},
        )
        return proposal_id

    def compute_voting_weight(self, proposal: Proposal, voter: str) -> int:
        """
        Voter's scaled share of the circulating supply of the proposal's asset.

        The voter's own still-locked balance of that asset is subtracted from
        total supply to obtain circulating supply.
        """
        token_ledger = self.registry.get(proposal.asset_id)
        voter_balance = token_ledger.balance_of(voter)
        voter_record = self.ledger.get_active_record(voter)
        locked_balance = 0
        if voter_record is not None and voter_record.asset_id == proposal.asset_id:
            locked_balance = voter_record.remaining
        return voting_weight(
            voter_balance,
            token_ledger.total_supply(),
            locked_balance,
            self.config.weight_scale,
        )

    def vote(
        self,
        proposal_id: int,
        voter: str,
        support: bool,
        current_time: int | None = None,
    ) -> int:
        """
        Cast a one-time weighted vote and return the weight applied.

        Raises:
            ProposalNotFoundError: unknown proposal
            ValidationError: voter is empty
            VotingNotStartedError: now is before start_time
            VotingClosedError: now is after end_time
            AlreadyVotedError: voter already voted on this proposal
            ZeroCirculatingSupplyError: circulating supply is zero
            NoVotingPowerError: computed weight is zero
        """
        try:
            voter = normalize_identity(voter, "voter")
            with self._lock:
                proposal = self.get_proposal(proposal_id)
                now = self._current_time(current_time)
                window = {
                    "proposal_id": proposal_id,
                    "start_time": proposal.start_time,
                    "end_time": proposal.end_time,
                    "current_time": now,
                }
                if now < proposal.start_time:
                    raise VotingNotStartedError(
                        f"Voting for proposal {proposal_id} has not started", details=window
                    )
                if now > proposal.end_time:
                    raise VotingClosedError(
                        f"Voting for proposal {proposal_id} is closed", details=window
                    )
                if proposal.has_voted(voter):
                    raise AlreadyVotedError(
                        f"Voter {voter} has already voted on proposal {proposal_id}",
                        details={"proposal_id": proposal_id, "voter": voter},
                    )

                weight = self.compute_voting_weight(proposal, voter)
                if weight == 0:
                    raise NoVotingPowerError(
                        f"Voter {voter} has no voting power on proposal {proposal_id}",
                        details={"proposal_id": proposal_id, "voter": voter},
                    )

                if support:
                    proposal.yes_weight += weight
                else:
                    proposal.no_weight += weight
                proposal.voters.add(voter)
                self.state.proposals.update(proposal_id, proposal)
        except VaultError as exc:
            metrics.record_rejection("vote", exc)
            raise

        metrics.record_vote(bool(support))
        self.events.emit(
            EventType.VOTE_CAST,
            now,
            proposal_id=proposal_id,
            voter=voter,
            support=bool(support),
            weight=weight,
        )
        logger.info(
            "Vote cast on %s by %s: %s with weight %s. Current tally: YES=%s, NO=%s",
            proposal_id,
            voter,
            "YES" if support else "NO",
            weight,
            proposal.yes_weight,
            proposal.no_weight,
            extra={"event": "governance.vote", "proposal_id": proposal_id},
        )
        return weight

    def execute(self, proposal_id: int, current_time: int | None = None) -> bool:
        """
        Settle a proposal once its voting window has closed.

        A proposal passes only when yes weight strictly exceeds no weight; a
        passing proposal is applied to the proposer's custody record. If that
        adjustment fails the error propagates and the proposal stays
        unexecuted. Returns whether the proposal passed.
        """
        try:
            with self._lock:
                proposal = self.get_proposal(proposal_id)
                now = self._current_time(current_time)
                if now <= proposal.end_time:
                    raise VotingNotOverError(
                        f"Voting period for {proposal_id} has not ended yet",
                        details={"proposal_id": proposal_id, "end_time": proposal.end_time},
                    )
                if proposal.executed:
                    raise AlreadyExecutedError(
                        f"Proposal {proposal_id} has already been executed",
                        details={"proposal_id": proposal_id, "passed": proposal.passed},
                    )

                passed = proposal.yes_weight > proposal.no_weight
                if passed:
                    self.ledger.apply_adjustment(
                        proposal.proposer,
                        proposal.kind,
                        proposal.parameter,
                        authority=self,
                        current_time=now,
                    )

                proposal.executed = True
                proposal.passed = passed
                self.state.proposals.update(proposal_id, proposal)
        except VaultError as exc:
            metrics.record_rejection("execute", exc)
            raise

        metrics.record_execution(passed)
        self.events.emit(
            EventType.PROPOSAL_EXECUTED,
            now,
            proposal_id=proposal_id,
            passed=passed,
            yes_weight=proposal.yes_weight,
            no_weight=proposal.no_weight,
        )
        logger.info(
            "Proposal %s executed: %s. YES=%s, NO=%s",
            proposal_id,
            "PASSED" if passed else "REJECTED",
            proposal.yes_weight,
            proposal.no_weight,
            extra={"event": "governance.execute", "proposal_id": proposal_id},
        )
        return passed

    def get_vote_tally(self, proposal_id: int, current_time: int | None = None) -> dict[str, Any]:
        """Real-time vote tally for a proposal."""
        proposal = self.get_proposal(proposal_id)
        now = self._current_time(current_time)
        total = proposal.yes_weight + proposal.no_weight

        approval_percentage = 0.0
        if total > 0:
            approval_percentage = proposal.yes_weight / total * 100.0

        return {
            "proposal_id": proposal_id,
            "kind": proposal.kind.value,
            "parameter": proposal.parameter,
            "yes_weight": proposal.yes_weight,
            "no_weight": proposal.no_weight,
            "total_weight": total,
            "voter_count": len(proposal.voters),
            "approval_percentage": approval_percentage,
            "passing": proposal.yes_weight > proposal.no_weight,
            "state": proposal.state(now).value,
            "end_time": proposal.end_time,
            "time_remaining": max(0, proposal.end_time - now),
        }
