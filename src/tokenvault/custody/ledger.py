from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable

from tokenvault.core import metrics
from tokenvault.core.arithmetic import releasable_amount, require_uint
from tokenvault.core.config import VaultConfig
from tokenvault.core.events import EventLog, EventType
from tokenvault.core.exceptions import (
    DuplicateLockError,
    ExceedsTotalError,
    InvalidAmountError,
    LockNotElapsedError,
    LockTooShortError,
    NoActiveLockError,
    NothingToReleaseError,
    TransferError,
    UnauthorizedAdjustmentError,
    VaultError,
)
from tokenvault.core.storage import VaultState
from tokenvault.custody.records import CustodyRecord, LockStatus
from tokenvault.governance.proposals import ProposalKind
from tokenvault.tokens.interface import TokenRegistry, normalize_identity

logger = logging.getLogger(__name__)


class CustodyLedger:
    """
    Holds deposited tokens per depositor and releases them on a
    lock-then-linear-vesting schedule.

    Every operation validates first, moves tokens on the external ledger
    second, and commits local state last, so a failure at any step leaves
    the stored records untouched.
    """

    def __init__(
        self,
        registry: TokenRegistry,
        state: VaultState | None = None,
        events: EventLog | None = None,
        config: VaultConfig | None = None,
        time_provider: Callable[[], int] | None = None,
    ):
        self.registry = registry
        self.state = state if state is not None else VaultState()
        self.events = events if events is not None else EventLog()
        self.config = config if config is not None else VaultConfig()
        self._time_provider = time_provider or (lambda: int(time.time()))
        self._governance: object | None = None
        self._lock = threading.RLock()

        logger.info(
            "CustodyLedger initialized. Minimum lock: %ss, deterministic time provider: %s",
            self.config.min_lock_duration,
            bool(time_provider),
        )

    def _current_time(self, current_time: int | None = None) -> int:
        timestamp = self._time_provider() if current_time is None else current_time
        try:
            return int(timestamp)
        except (TypeError, ValueError) as exc:
            raise ValueError("time_provider must return an integer timestamp") from exc

    # ==================== Views ====================

    def get_record(self, depositor: str) -> CustodyRecord | None:
        depositor = normalize_identity(depositor, "depositor")
        with self._lock:
            return self.state.custody.get(depositor)

    def lock_status(self, depositor: str) -> LockStatus:
        record = self.get_record(depositor)
        if record is None:
            return LockStatus.NO_RECORD
        return record.status

    def get_active_record(self, depositor: str) -> CustodyRecord | None:
        record = self.get_record(depositor)
        if record is None or not record.active:
            return None
        return record

    def view_remaining(self, depositor: str) -> int:
        """Custodied balance not yet released; 0 when there is no record."""
        record = self.get_record(depositor)
        return record.remaining if record else 0

    def releasable_amount(self, depositor: str, current_time: int | None = None) -> int:
        """What release_vested would pay out now, or 0."""
        record = self.get_active_record(depositor)
        if record is None:
            return 0
        now = self._current_time(current_time)
        return releasable_amount(
            record.total_amount,
            record.released_amount,
            record.unlock_time,
            record.vesting_duration,
            now,
        )

    def history(self, depositor: str) -> list[CustodyRecord]:
        """Exhausted records superseded by a later deposit, oldest first."""
        depositor = normalize_identity(depositor, "depositor")
        with self._lock:
            return list(self.state.history.get(depositor, []))

    def total_locked(self, asset_id: str) -> int:
        with self._lock:
            return sum(
                record.remaining
                for record in self.state.custody.values()
                if record.asset_id == asset_id and record.active
            )

    # ==================== Deposit / Release ====================

    def deposit(
        self,
        depositor: str,
        asset_id: str,
        amount: int,
        lock_duration: int,
        vesting_duration: int = 0,
        current_time: int | None = None,
    ) -> CustodyRecord:
        """
        Pull ``amount`` of ``asset_id`` from the depositor into custody and
        open a custody record starting now.

        Raises:
            ValidationError: depositor is empty
            InvalidAmountError: amount is zero or not an unsigned integer
            LockTooShortError: lock_duration is below the configured minimum
            UnknownAssetError: no ledger is registered for asset_id
            DuplicateLockError: the depositor already has an active record
            TransferError: the token pull failed
        """
        try:
            depositor = normalize_identity(depositor, "depositor")
            require_uint(amount, "amount")
            require_uint(lock_duration, "lock_duration")
            require_uint(vesting_duration, "vesting_duration")
            if amount == 0:
                raise InvalidAmountError("Deposit amount must be positive.", details={"amount": amount})
            if lock_duration < self.config.min_lock_duration:
                raise LockTooShortError(
                    f"Lock duration {lock_duration}s is below the minimum of "
                    f"{self.config.min_lock_duration}s",
                    details={
                        "lock_duration": lock_duration,
                        "min_lock_duration": self.config.min_lock_duration,
                    },
                )
            token_ledger = self.registry.get(asset_id)

            with self._lock:
                now = self._current_time(current_time)
                existing = self.state.custody.get(depositor)
                if existing is not None and existing.active:
                    raise DuplicateLockError(
                        f"Depositor {depositor} already has an active lock",
                        details={"depositor": depositor, "asset_id": existing.asset_id},
                    )

                self._move_tokens(token_ledger.pull, "pull", depositor, asset_id, amount)

                record = CustodyRecord(
                    depositor=depositor,
                    asset_id=asset_id,
                    total_amount=amount,
                    lock_start=now,
                    lock_duration=lock_duration,
                    vesting_duration=vesting_duration,
                )
                if existing is not None:
                    self.state.archive(existing)
                    self.state.custody.update(depositor, record)
                else:
                    self.state.custody.insert(depositor, record)
        except VaultError as exc:
            metrics.record_rejection("deposit", exc)
            raise

        metrics.record_deposit(asset_id, amount)
        self.events.emit(
            EventType.LOCKED,
            now,
            depositor=depositor,
            asset_id=asset_id,
            amount=amount,
            lock_duration=lock_duration,
            vesting_duration=vesting_duration,
        )
        logger.info(
            "Tokens locked: %s of %s by %s until %s",
            amount,
            asset_id,
            depositor,
            record.unlock_time,
            extra={"event": "custody.deposit", "depositor": depositor, "asset_id": asset_id},
        )
        return record

    def release_vested(self, depositor: str, current_time: int | None = None) -> int:
        """
        Release everything vested since the last release and return the amount.

        Raises:
            NoActiveLockError: the depositor has no active record
            LockNotElapsedError: the lock period has not ended
            NothingToReleaseError: nothing new has vested
            TransferError: the token push failed
        """
        try:
            depositor = normalize_identity(depositor, "depositor")
            with self._lock:
                now = self._current_time(current_time)
                record = self._require_active(depositor)
                if now < record.unlock_time:
                    raise LockNotElapsedError(
                        f"Lock for {depositor} ends at {record.unlock_time}",
                        details={
                            "depositor": depositor,
                            "unlock_time": record.unlock_time,
                            "seconds_remaining": record.unlock_time - now,
                        },
                    )

                amount = releasable_amount(
                    record.total_amount,
                    record.released_amount,
                    record.unlock_time,
                    record.vesting_duration,
                    now,
                )
                if amount <= 0:
                    raise NothingToReleaseError(
                        f"Nothing vested for {depositor} since the last release",
                        details={"depositor": depositor, "released_amount": record.released_amount},
                    )

                token_ledger = self.registry.get(record.asset_id)
                self._move_tokens(token_ledger.push, "push", depositor, record.asset_id, amount)
                record.released_amount += amount
                self.state.custody.update(depositor, record)
        except VaultError as exc:
            metrics.record_rejection("release", exc)
            raise

        self._after_release(record, amount, now, source="vesting")
        return amount

    # ==================== Governance path ====================

    def attach_governance(self, authority: object) -> None:
        """Register the only caller allowed to use apply_adjustment."""
        with self._lock:
            if self._governance is not None and self._governance is not authority:
                logger.warning("Replacing attached governance authority")
            self._governance = authority

    def apply_adjustment(
        self,
        depositor: str,
        kind: ProposalKind,
        parameter: int,
        authority: object,
        current_time: int | None = None,
    ) -> CustodyRecord:
        """
        Apply a passed proposal to a custody record.

        RELEASE_EARLY pushes ``parameter`` tokens out and counts them as
        released. EXTEND_LOCK adds ``parameter`` seconds to the lock with no
        upper bound.
        """
        if self._governance is None or authority is not self._governance:
            raise UnauthorizedAdjustmentError(
                "Custody records can only be adjusted by the attached governance engine",
                details={"depositor": depositor},
            )
        depositor = normalize_identity(depositor, "depositor")
        require_uint(parameter, "parameter")

        with self._lock:
            now = self._current_time(current_time)
            if kind is ProposalKind.RELEASE_EARLY:
                record = self._require_active(depositor)
                if record.released_amount + parameter > record.total_amount:
                    raise ExceedsTotalError(
                        f"Early release of {parameter} exceeds the remaining "
                        f"{record.remaining} for {depositor}",
                        details={
                            "depositor": depositor,
                            "parameter": parameter,
                            "remaining": record.remaining,
                        },
                    )
                token_ledger = self.registry.get(record.asset_id)
                self._move_tokens(token_ledger.push, "push", depositor, record.asset_id, parameter)
                record.released_amount += parameter
                self.state.custody.update(depositor, record)
            else:
                record = self.state.custody.get(depositor)
                if record is None:
                    raise NoActiveLockError(
                        f"No custody record for {depositor}", details={"depositor": depositor}
                    )
                record.lock_duration += parameter
                self.state.custody.update(depositor, record)

        if kind is ProposalKind.RELEASE_EARLY:
            self._after_release(record, parameter, now, source="governance")
        else:
            logger.info(
                "Lock for %s extended by %ss, now unlocks at %s",
                depositor,
                parameter,
                record.unlock_time,
                extra={"event": "custody.extend_lock", "depositor": depositor},
            )
        return record

    # ==================== Helpers ====================

    def _require_active(self, depositor: str) -> CustodyRecord:
        record = self.state.custody.get(depositor)
        if record is None or not record.active:
            raise NoActiveLockError(
                f"No active lock for {depositor}",
                details={
                    "depositor": depositor,
                    "status": (record.status if record else LockStatus.NO_RECORD).value,
                },
            )
        return record

    def _move_tokens(
        self,
        operation: Callable[[str, int], Any],
        direction: str,
        counterparty: str,
        asset_id: str,
        amount: int,
    ) -> None:
        details = {
            "direction": direction,
            "counterparty": counterparty,
            "asset_id": asset_id,
            "amount": amount,
        }
        try:
            ok = operation(counterparty, amount)
        except Exception as exc:
            raise TransferError(f"Token {direction} failed: {exc}", details=details) from exc
        if ok is False:
            raise TransferError(f"Token {direction} was rejected by the ledger", details=details)

    def _after_release(self, record: CustodyRecord, amount: int, now: int, source: str) -> None:
        metrics.record_release(record.asset_id, amount, source=source)
        self.events.emit(
            EventType.RELEASED,
            now,
            depositor=record.depositor,
            asset_id=record.asset_id,
            amount=amount,
            released_amount=record.released_amount,
            source=source,
        )
        logger.info(
            "Released %s of %s to %s (%s/%s)",
            amount,
            record.asset_id,
            record.depositor,
            record.released_amount,
            record.total_amount,
            extra={"event": "custody.release", "release_source": source},
        )
        if not record.active:
            logger.info(
                "Custody record for %s exhausted",
                record.depositor,
                extra={"event": "custody.exhausted", "depositor": record.depositor},
            )
