"""
In-memory repositories for custody records and proposals, with JSON snapshots.

Records are mutated in place and never removed. A snapshot captures the
current records, the per-depositor history of exhausted records, every
proposal and the proposal-id counter.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Generic, Hashable, List, Optional, TypeVar

from tokenvault.core.exceptions import StorageError
from tokenvault.custody.records import CustodyRecord
from tokenvault.governance.proposals import Proposal

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

SNAPSHOT_VERSION = 1


class RecordStore(Generic[K, V]):
    """Keyed store with explicit insert/update semantics."""

    def __init__(self) -> None:
        self._records: Dict[K, V] = {}

    def get(self, key: K) -> Optional[V]:
        return self._records.get(key)

    def insert(self, key: K, record: V) -> None:
        if key in self._records:
            raise KeyError(f"Record {key!r} already exists")
        self._records[key] = record

    def update(self, key: K, record: V) -> None:
        if key not in self._records:
            raise KeyError(f"Record {key!r} does not exist")
        self._records[key] = record

    def values(self) -> List[V]:
        return list(self._records.values())

    def keys(self) -> List[K]:
        return list(self._records.keys())

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __len__(self) -> int:
        return len(self._records)


class VaultState:
    """Shared state owned by the custody ledger and the governance engine."""

    def __init__(self) -> None:
        self.custody: RecordStore[str, CustodyRecord] = RecordStore()
        self.history: Dict[str, List[CustodyRecord]] = {}
        self.proposals: RecordStore[int, Proposal] = RecordStore()
        self._last_proposal_id = 0

    def next_proposal_id(self) -> int:
        self._last_proposal_id += 1
        return self._last_proposal_id

    @property
    def last_proposal_id(self) -> int:
        return self._last_proposal_id

    def archive(self, record: CustodyRecord) -> None:
        """Keep an exhausted record for audit before its key is reused."""
        self.history.setdefault(record.depositor, []).append(record)

    # ==================== Snapshots ====================

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": SNAPSHOT_VERSION,
            "custody": [record.to_dict() for record in self.custody.values()],
            "history": {
                depositor: [record.to_dict() for record in records]
                for depositor, records in self.history.items()
            },
            "proposals": [proposal.to_dict() for proposal in self.proposals.values()],
            "last_proposal_id": self._last_proposal_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VaultState":
        version = data.get("version", SNAPSHOT_VERSION)
        if version != SNAPSHOT_VERSION:
            raise StorageError(
                f"Unsupported snapshot version {version}",
                details={"version": version, "expected": SNAPSHOT_VERSION},
            )
        state = cls()
        try:
            for item in data.get("custody", []):
                record = CustodyRecord.from_dict(item)
                state.custody.insert(record.depositor, record)
            for depositor, records in data.get("history", {}).items():
                state.history[depositor] = [CustodyRecord.from_dict(item) for item in records]
            for item in data.get("proposals", []):
                proposal = Proposal.from_dict(item)
                state.proposals.insert(proposal.proposal_id, proposal)
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageError(f"Malformed snapshot: {exc}") from exc

        highest = max(state.proposals.keys(), default=0)
        state._last_proposal_id = max(int(data.get("last_proposal_id", 0)), highest)
        return state

    def save(self, path: str) -> None:
        """Write a JSON snapshot atomically (temp file then rename)."""
        directory = os.path.dirname(path)
        tmp_path = f"{path}.tmp"
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as handle:
                json.dump(self.to_dict(), handle, indent=2)
            os.replace(tmp_path, path)
        except OSError as exc:
            raise StorageError(f"Failed to persist vault state: {exc}", details={"path": path}) from exc
        logger.info(
            "Vault state persisted",
            extra={
                "event": "storage.saved",
                "path": path,
                "records": len(self.custody),
                "proposals": len(self.proposals),
            },
        )

    @classmethod
    def load(cls, path: str) -> "VaultState":
        try:
            with open(path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Failed to load vault state: {exc}", details={"path": path}) from exc
        state = cls.from_dict(data)
        logger.info(
            "Vault state loaded",
            extra={
                "event": "storage.loaded",
                "path": path,
                "records": len(state.custody),
                "proposals": len(state.proposals),
            },
        )
        return state
