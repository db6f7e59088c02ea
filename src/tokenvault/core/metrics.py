"""
Custody and governance instrumentation for tokenvault.

Provides Prometheus metrics for deposits, releases, proposals, votes and
executions, with helper functions called after each operation commits.
"""

from __future__ import annotations

from prometheus_client import Counter

deposit_counter = Counter(
    "tokenvault_deposits_total", "Total custody records created", ["asset"]
)

deposited_tokens_counter = Counter(
    "tokenvault_deposited_tokens_total", "Total base units pulled into custody", ["asset"]
)

released_tokens_counter = Counter(
    "tokenvault_released_tokens_total",
    "Total base units pushed out of custody",
    ["asset", "source"],
)

proposal_counter = Counter(
    "tokenvault_proposals_total", "Total governance proposals created", ["kind"]
)

vote_counter = Counter(
    "tokenvault_votes_total", "Total votes cast on governance proposals", ["support"]
)

execution_counter = Counter(
    "tokenvault_executions_total", "Total proposal executions by outcome", ["outcome"]
)

rejected_operation_counter = Counter(
    "tokenvault_rejected_operations_total",
    "Operations rejected with a vault error",
    ["operation", "error"],
)


def record_deposit(asset_id: str, amount: int) -> None:
    deposit_counter.labels(asset=asset_id).inc()
    deposited_tokens_counter.labels(asset=asset_id).inc(amount)


def record_release(asset_id: str, amount: int, source: str = "vesting") -> None:
    """Increment the release counter; zero amounts are ignored."""
    if amount <= 0:
        return
    released_tokens_counter.labels(asset=asset_id, source=source).inc(amount)


def record_proposal(kind: str) -> None:
    proposal_counter.labels(kind=kind).inc()


def record_vote(support: bool) -> None:
    vote_counter.labels(support="yes" if support else "no").inc()


def record_execution(passed: bool) -> None:
    execution_counter.labels(outcome="passed" if passed else "rejected").inc()


def record_rejection(operation: str, error: Exception) -> None:
    rejected_operation_counter.labels(operation=operation, error=type(error).__name__).inc()
