"""
Exception hierarchy for tokenvault.

Every rejected custody or governance operation raises a typed exception so
callers can tell "try later" (time window) apart from "structurally invalid"
(bad parameters) and "insufficient funds" (external ledger) conditions.
"""

from __future__ import annotations
from typing import Optional, Any, Dict


class VaultError(Exception):
    """Base exception for all custody and governance errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether retrying the same call later may succeed
    """

    recoverable_default = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: Optional[bool] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = self.recoverable_default if recoverable is None else recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error for logging and API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# ==================== Validation Errors ====================


class ValidationError(VaultError):
    """Raised when call parameters are structurally invalid."""
    pass


class InvalidAmountError(ValidationError):
    """Raised when an amount or duration is not a valid unsigned integer."""
    pass


class LockTooShortError(ValidationError):
    """Raised when a deposit's lock duration is below the minimum."""
    pass


class InvalidProposalTypeError(ValidationError):
    """Raised when a proposal kind is not one of the supported kinds."""
    pass


class UnknownAssetError(ValidationError):
    """Raised when an asset identifier has no registered token ledger."""
    pass


class UnauthorizedAdjustmentError(ValidationError):
    """Raised when anything but the governance engine adjusts a custody record."""
    pass


# ==================== State Errors ====================


class StateError(VaultError):
    """Raised when the current custody or proposal state forbids an operation."""
    pass


class DuplicateLockError(StateError):
    """Raised when a depositor already has an active custody record."""
    pass


class NoActiveLockError(StateError):
    """Raised when a depositor has no active custody record."""
    pass


class NothingToReleaseError(StateError):
    """Raised when nothing has vested since the last release."""
    pass


class ExceedsTotalError(StateError):
    """Raised when an early release would exceed the deposited total."""
    pass


class NotAnActiveLockerError(StateError):
    """Raised when a proposer has no active custody record."""
    pass


class ProposalNotFoundError(StateError):
    """Raised when a proposal identifier is unknown."""
    pass


class AlreadyVotedError(StateError):
    """Raised when a voter votes twice on the same proposal."""
    pass


class NoVotingPowerError(StateError):
    """Raised when a voter's computed weight is zero."""
    pass


class ZeroCirculatingSupplyError(StateError):
    """Raised when circulating supply is zero so no weight can be computed."""
    pass


class AlreadyExecutedError(StateError):
    """Raised when a proposal has already been executed."""
    pass


# ==================== Time Window Errors ====================


class TimeWindowError(VaultError):
    """Raised when an operation is attempted outside its allowed time window."""

    recoverable_default = True


class LockNotElapsedError(TimeWindowError):
    """Raised when releasing before the lock period has ended."""
    pass


class VotingNotStartedError(TimeWindowError):
    """Raised when voting before a proposal's voting window opens."""
    pass


class VotingClosedError(TimeWindowError):
    """Raised when voting after a proposal's voting window has closed.

    Windows never reopen, so retrying cannot succeed.
    """

    recoverable_default = False


class VotingNotOverError(TimeWindowError):
    """Raised when executing a proposal before its voting window closes."""
    pass


# ==================== Funds Errors ====================


class FundsError(VaultError):
    """Raised when the external token ledger cannot move funds."""

    recoverable_default = True


class TransferError(FundsError):
    """Raised when a pull into custody or a push out of custody fails."""
    pass


# ==================== Storage Errors ====================


class StorageError(VaultError):
    """Raised when state snapshots cannot be read or written."""
    pass
