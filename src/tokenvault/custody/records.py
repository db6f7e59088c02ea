from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class LockStatus(Enum):
    NO_RECORD = "no_record"
    ACTIVE = "active"
    EXHAUSTED = "exhausted"


@dataclass
class CustodyRecord:
    """
    A depositor's custodied balance and its lock-then-vest release schedule.

    ``total_amount`` is fixed at creation; ``released_amount`` only grows and
    never exceeds it. The record stays active until everything is released.
    """

    depositor: str
    asset_id: str
    total_amount: int
    lock_start: int
    lock_duration: int
    vesting_duration: int
    released_amount: int = 0

    @property
    def active(self) -> bool:
        return self.released_amount < self.total_amount

    @property
    def status(self) -> LockStatus:
        return LockStatus.ACTIVE if self.active else LockStatus.EXHAUSTED

    @property
    def remaining(self) -> int:
        return self.total_amount - self.released_amount

    @property
    def unlock_time(self) -> int:
        return self.lock_start + self.lock_duration

    @property
    def vesting_end(self) -> int:
        return self.unlock_time + self.vesting_duration

    def to_dict(self) -> dict[str, Any]:
        return {
            "depositor": self.depositor,
            "asset_id": self.asset_id,
            "total_amount": self.total_amount,
            "released_amount": self.released_amount,
            "lock_start": self.lock_start,
            "lock_duration": self.lock_duration,
            "vesting_duration": self.vesting_duration,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CustodyRecord":
        return cls(
            depositor=data["depositor"],
            asset_id=data["asset_id"],
            total_amount=int(data["total_amount"]),
            released_amount=int(data.get("released_amount", 0)),
            lock_start=int(data["lock_start"]),
            lock_duration=int(data["lock_duration"]),
            vesting_duration=int(data.get("vesting_duration", 0)),
        )

    def __repr__(self) -> str:
        return (
            f"CustodyRecord(depositor='{self.depositor}', asset='{self.asset_id}', "
            f"released={self.released_amount}/{self.total_amount}, status='{self.status.value}')"
        )
