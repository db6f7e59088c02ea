"""
Custody and governance invariants under property-based testing.

Uses Hypothesis to drive random deposits, release times and votes and checks
that released amounts stay monotonic and bounded, that locks cannot be
released early, and that rejected operations leave state untouched.
"""

import pytest
from hypothesis import given, settings, strategies as st

from conftest import ASSET, DAY, START, ManualClock, make_vault
from tokenvault.core.exceptions import (
    AlreadyVotedError,
    LockNotElapsedError,
    NothingToReleaseError,
)
from tokenvault.governance.proposals import ProposalKind

amounts = st.integers(min_value=1, max_value=10_000)
lock_durations = st.integers(min_value=180 * DAY, max_value=720 * DAY)
vesting_durations = st.integers(min_value=0, max_value=400 * DAY)


@given(
    amount=amounts,
    lock_duration=lock_durations,
    vesting_duration=vesting_durations,
    offsets=st.lists(st.integers(min_value=0, max_value=500 * DAY), min_size=1, max_size=12),
)
@settings(max_examples=200, deadline=None)
def test_released_amount_is_monotonic_and_bounded(amount, lock_duration, vesting_duration, offsets):
    clock = ManualClock(START)
    vault, token = make_vault(clock=clock)
    vault.deposit("0xalice", ASSET, amount, lock_duration, vesting_duration)
    unlock = START + lock_duration

    previous = 0
    for offset in sorted(offsets):
        clock.set(unlock + offset)
        try:
            vault.release_vested("0xalice")
        except NothingToReleaseError:
            pass
        record = vault.get_record("0xalice")
        assert previous <= record.released_amount <= record.total_amount
        previous = record.released_amount
        if not record.active:
            break

    # Custody always holds exactly what has not been released
    assert token.balance_of(vault.config.custody_address) == vault.view_remaining("0xalice")


@given(
    amount=amounts,
    lock_duration=lock_durations,
    vesting_duration=vesting_durations,
    elapsed=st.integers(min_value=0, max_value=720 * DAY),
)
@settings(max_examples=200, deadline=None)
def test_release_before_unlock_always_fails(amount, lock_duration, vesting_duration, elapsed):
    clock = ManualClock(START)
    vault, _ = make_vault(clock=clock)
    vault.deposit("0xalice", ASSET, amount, lock_duration, vesting_duration)

    if elapsed >= lock_duration:
        elapsed = lock_duration - 1
    clock.set(START + elapsed)

    with pytest.raises(LockNotElapsedError):
        vault.release_vested("0xalice")
    assert vault.get_record("0xalice").released_amount == 0


@given(
    amount=amounts,
    vesting_duration=st.integers(min_value=1, max_value=400 * DAY),
)
@settings(max_examples=100, deadline=None)
def test_full_release_after_vesting_end(amount, vesting_duration):
    clock = ManualClock(START)
    vault, _ = make_vault(clock=clock)
    vault.deposit("0xalice", ASSET, amount, 180 * DAY, vesting_duration)

    clock.set(START + 180 * DAY + vesting_duration)

    assert vault.release_vested("0xalice") == amount
    assert not vault.get_record("0xalice").active


@given(
    supports=st.lists(st.booleans(), min_size=1, max_size=3),
    repeat_support=st.booleans(),
)
@settings(max_examples=50, deadline=None)
def test_weights_accumulate_and_repeat_votes_change_nothing(supports, repeat_support):
    clock = ManualClock(START)
    vault, _ = make_vault(clock=clock)
    vault.deposit("0xalice", ASSET, 1_000, 180 * DAY)
    proposal_id = vault.propose("0xalice", ProposalKind.RELEASE_EARLY, 10)

    voters = ["0xbob", "0xcarol", "0xdave"][: len(supports)]
    expected_yes = expected_no = 0
    for voter, support in zip(voters, supports):
        weight = vault.vote(proposal_id, voter, support)
        if support:
            expected_yes += weight
        else:
            expected_no += weight

    with pytest.raises(AlreadyVotedError):
        vault.vote(proposal_id, voters[0], repeat_support)

    proposal = vault.get_proposal(proposal_id)
    assert (proposal.yes_weight, proposal.no_weight) == (expected_yes, expected_no)
