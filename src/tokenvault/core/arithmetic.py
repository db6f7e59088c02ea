"""
Integer arithmetic shared by custody and governance.

All amounts are base units and all durations are seconds, held as Python
ints bounded to the uint256 range. Divisions are floor divisions over
non-negative operands, which equals truncation toward zero.
"""

from __future__ import annotations

from tokenvault.core.exceptions import InvalidAmountError, ZeroCirculatingSupplyError

UINT256_MAX = 2**256 - 1


def require_uint(value: int, field: str) -> int:
    """Return ``value`` if it is an unsigned 256-bit integer, else raise."""
    # bool is an int subclass but never a valid amount
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError(
            f"{field} must be an integer", details={"field": field, "value": repr(value)}
        )
    if value < 0:
        raise InvalidAmountError(
            f"{field} cannot be negative", details={"field": field, "value": value}
        )
    if value > UINT256_MAX:
        raise InvalidAmountError(
            f"{field} exceeds uint256", details={"field": field, "value": value}
        )
    return value


def vested_amount(total_amount: int, elapsed: int, vesting_duration: int) -> int:
    """
    Cumulative amount vested ``elapsed`` seconds after the lock ends.

    A zero vesting duration, or an elapsed time at or past the vesting
    duration, vests everything.
    """
    if elapsed < 0:
        return 0
    if vesting_duration == 0 or elapsed >= vesting_duration:
        return total_amount
    return total_amount * elapsed // vesting_duration


def releasable_amount(
    total_amount: int,
    released_amount: int,
    unlock_time: int,
    vesting_duration: int,
    current_time: int,
) -> int:
    """
    Newly vested amount at ``current_time`` that has not been released yet.

    Returns 0 before ``unlock_time``. The result may be 0 but never negative.
    """
    if current_time < unlock_time:
        return 0
    vested = vested_amount(total_amount, current_time - unlock_time, vesting_duration)
    return max(0, vested - released_amount)


def voting_weight(
    voter_balance: int,
    total_supply: int,
    locked_balance: int,
    scale: int,
) -> int:
    """
    Scaled share of circulating supply held by a voter.

    ``weight = voter_balance * scale // (total_supply - locked_balance)``.
    Raises ZeroCirculatingSupplyError when circulating supply is not positive.
    """
    circulating = total_supply - locked_balance
    if circulating <= 0:
        raise ZeroCirculatingSupplyError(
            "Circulating supply is zero; voting weight is undefined",
            details={"total_supply": total_supply, "locked_balance": locked_balance},
        )
    return voter_balance * scale // circulating
