from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from tokenvault.core.exceptions import InvalidProposalTypeError


class ProposalKind(Enum):
    RELEASE_EARLY = "release_early"
    EXTEND_LOCK = "extend_lock"

    @classmethod
    def parse(cls, value: "ProposalKind | str") -> "ProposalKind":
        """
        Accept an enum member, its value ("release_early") or its
        CamelCase name ("ReleaseEarly"); reject anything else.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip()
            for kind in cls:
                camel = "".join(part.capitalize() for part in kind.value.split("_"))
                if normalized in (kind.value, kind.name, camel):
                    return kind
        raise InvalidProposalTypeError(
            f"Unsupported proposal type: {value!r}",
            details={"kind": repr(value), "allowed": [kind.value for kind in cls]},
        )


class ProposalState(Enum):
    OPEN = "open"
    CLOSED = "closed"
    EXECUTED = "executed"


@dataclass
class Proposal:
    proposal_id: int
    proposer: str
    asset_id: str
    kind: ProposalKind
    parameter: int
    start_time: int
    end_time: int
    yes_weight: int = 0
    no_weight: int = 0
    executed: bool = False
    passed: bool | None = None
    voters: set[str] = field(default_factory=set)

    def state(self, current_time: int) -> ProposalState:
        if self.executed:
            return ProposalState.EXECUTED
        if self.start_time <= current_time <= self.end_time:
            return ProposalState.OPEN
        return ProposalState.CLOSED

    def has_voted(self, voter: str) -> bool:
        return voter in self.voters

    def to_dict(self) -> dict[str, Any]:
        return {
            "proposal_id": self.proposal_id,
            "proposer": self.proposer,
            "asset_id": self.asset_id,
            "kind": self.kind.value,
            "parameter": self.parameter,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "yes_weight": self.yes_weight,
            "no_weight": self.no_weight,
            "executed": self.executed,
            "passed": self.passed,
            "voters": sorted(self.voters),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Proposal":
        return cls(
            proposal_id=int(data["proposal_id"]),
            proposer=data["proposer"],
            asset_id=data["asset_id"],
            kind=ProposalKind.parse(data["kind"]),
            parameter=int(data["parameter"]),
            start_time=int(data["start_time"]),
            end_time=int(data["end_time"]),
            yes_weight=int(data.get("yes_weight", 0)),
            no_weight=int(data.get("no_weight", 0)),
            executed=bool(data.get("executed", False)),
            passed=data.get("passed"),
            voters=set(data.get("voters", [])),
        )
