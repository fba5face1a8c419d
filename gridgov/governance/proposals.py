"""
Governance Proposals

Defines the error taxonomy, the Proposal dataclass that tracks a single
governance item from creation to execution, and the VoteRecord kept for
every (proposal, voter) pair.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..constants import (
    ERR_ALREADY_VOTED,
    ERR_NOT_FOUND,
    ERR_QUORUM_NOT_MET,
    ERR_SYSTEM_PAUSED,
    ERR_UNAUTHORIZED,
    ERR_VOTING_CLOSED,
    ERR_VOTING_STILL_OPEN,
)
from ..exceptions import GridGovException


# ══════════════════════════════════════════════════════════════════════
#  ERROR TAXONOMY
# ══════════════════════════════════════════════════════════════════════

class ErrorKind(Enum):
    """Discriminant of every expected governance failure."""
    UNAUTHORIZED = "unauthorized"
    SYSTEM_PAUSED = "system_paused"
    NOT_FOUND = "not_found"
    ALREADY_VOTED = "already_voted"
    VOTING_CLOSED = "voting_closed"
    VOTING_STILL_OPEN = "voting_still_open"
    QUORUM_NOT_MET = "quorum_not_met"


class GovernanceError(GridGovException):
    """Base governance exception."""
    kind: ErrorKind
    code: int

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind.value)


class UnauthorizedError(GovernanceError):
    """Caller is not the admin identity."""
    kind = ErrorKind.UNAUTHORIZED
    code = ERR_UNAUTHORIZED


class SystemPausedError(GovernanceError):
    """Pause flag is set."""
    kind = ErrorKind.SYSTEM_PAUSED
    code = ERR_SYSTEM_PAUSED


class ProposalNotFoundError(GovernanceError):
    """Proposal id is unknown, or (on execute) the proposal already ran."""
    kind = ErrorKind.NOT_FOUND
    code = ERR_NOT_FOUND


class AlreadyVotedError(GovernanceError):
    """Voter already cast a vote on this proposal."""
    kind = ErrorKind.ALREADY_VOTED
    code = ERR_ALREADY_VOTED


class VotingClosedError(GovernanceError):
    """Vote attempted after the proposal's end height."""
    kind = ErrorKind.VOTING_CLOSED
    code = ERR_VOTING_CLOSED


class VotingStillOpenError(GovernanceError):
    """Execution attempted at or before the proposal's end height."""
    kind = ErrorKind.VOTING_STILL_OPEN
    code = ERR_VOTING_STILL_OPEN


class QuorumNotMetError(GovernanceError):
    """Accumulated weight is below the configured minimum quorum."""
    kind = ErrorKind.QUORUM_NOT_MET
    code = ERR_QUORUM_NOT_MET


ERRORS_BY_KIND: Dict[ErrorKind, type] = {
    cls.kind: cls
    for cls in (
        UnauthorizedError,
        SystemPausedError,
        ProposalNotFoundError,
        AlreadyVotedError,
        VotingClosedError,
        VotingStillOpenError,
        QuorumNotMetError,
    )
}


# ══════════════════════════════════════════════════════════════════════
#  PROPOSAL
# ══════════════════════════════════════════════════════════════════════

@dataclass
class Proposal:
    """
    Governance proposal.

    Fields:
        id:              Monotonic identifier, first proposal is 1
        description:     Opaque text supplied by the proposer
        proposer:        Identity of the creator
        end_height:      Last height at which votes are accepted
        created_height:  Height at which the proposal was opened
        votes:           Accumulated vote weight (never decreases)
        executed:        Set once, on successful execution
    """
    id: int
    description: str
    proposer: str
    end_height: int
    created_height: int = 0
    votes: int = 0
    executed: bool = False

    def is_open(self, height: int) -> bool:
        """Votes are accepted up to and including end_height."""
        return height <= self.end_height

    def snapshot(self) -> "Proposal":
        """Independent copy handed to readers."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "proposer": self.proposer,
            "votes": self.votes,
            "createdHeight": self.created_height,
            "endHeight": self.end_height,
            "executed": self.executed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Proposal":
        return cls(
            id=int(data["id"]),
            description=data["description"],
            proposer=data["proposer"],
            end_height=int(data["endHeight"]),
            created_height=int(data.get("createdHeight", 0)),
            votes=int(data.get("votes", 0)),
            executed=bool(data.get("executed", False)),
        )

    def __repr__(self) -> str:
        return (
            f"<Proposal #{self.id} votes={self.votes} "
            f"end={self.end_height} executed={self.executed}>"
        )


# ══════════════════════════════════════════════════════════════════════
#  VOTE RECORD
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class VoteRecord:
    """A vote cast by *voter* on *proposal_id*; never mutated or removed."""
    proposal_id: int
    voter: str
    weight: int
    height: int = field(default=0, compare=False)

    @property
    def key(self) -> Tuple[int, str]:
        return (self.proposal_id, self.voter)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "proposalId": self.proposal_id,
            "voter": self.voter,
            "weight": self.weight,
            "height": self.height,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VoteRecord":
        return cls(
            proposal_id=int(data["proposalId"]),
            voter=data["voter"],
            weight=int(data["weight"]),
            height=int(data.get("height", 0)),
        )


def error_for(kind: ErrorKind, message: Optional[str] = None) -> GovernanceError:
    """Build the exception instance matching *kind*."""
    return ERRORS_BY_KIND[kind](message or "")
