"""
Governance State Store

Authoritative state for proposals and vote records. The store knows nothing
about token balances, the admin identity or the pause flag; it only enforces
the per-entity invariants:

  - proposal ids are allocated 1, 2, 3, ... with no gaps
  - end_height is fixed at creation
  - a (proposal, voter) pair is recorded at most once
  - vote totals only grow
  - executed flips False → True exactly once

Every check runs before any mutation, so a rejected call leaves the store
untouched.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from ..constants import GOVERNANCE_VOTING_PERIOD
from ..logger import get_logger
from .proposals import (
    AlreadyVotedError,
    Proposal,
    ProposalNotFoundError,
    QuorumNotMetError,
    VoteRecord,
    VotingClosedError,
    VotingStillOpenError,
)

logger = get_logger(__name__)


class GovernanceStore(ABC):
    """Abstract interface for proposal and vote-record storage."""

    @abstractmethod
    def create_proposal(self, proposer: str, description: str, current_height: int) -> int:
        """Allocate the next id and open a proposal. Always succeeds."""

    @abstractmethod
    def record_vote(
        self,
        proposal_id: int,
        voter: str,
        weight: int,
        current_height: int,
    ) -> VoteRecord:
        """
        Record *voter*'s vote and add *weight* to the proposal total.

        Raises:
            ProposalNotFoundError: unknown proposal id
            VotingClosedError:     current_height > end_height
            AlreadyVotedError:     pair already recorded
        """

    @abstractmethod
    def execute(self, proposal_id: int, current_height: int, min_quorum: int) -> Proposal:
        """
        Mark a proposal executed.

        Raises:
            ProposalNotFoundError: unknown id, or already executed
            VotingStillOpenError:  current_height <= end_height
            QuorumNotMetError:     votes < min_quorum
        """

    @abstractmethod
    def get_proposal(self, proposal_id: int) -> Optional[Proposal]:
        """Snapshot of the proposal, or None."""

    @abstractmethod
    def has_voted(self, proposal_id: int, voter: str) -> bool: ...

    @property
    @abstractmethod
    def proposal_count(self) -> int: ...

    @property
    @abstractmethod
    def voting_period(self) -> int:
        """Ticks added to the creation height to get end_height."""

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """
        Export proposals, vote records and the id sequence as one unit.

        Must carry "votingPeriod", "proposalCount", "proposals" and "votes"
        so InMemoryGovernanceStore.from_dict can rebuild the state.
        """


class InMemoryGovernanceStore(GovernanceStore):
    """Dict-backed GovernanceStore."""

    def __init__(self, voting_period: int = GOVERNANCE_VOTING_PERIOD):
        if voting_period < 1:
            raise ValueError(f"voting_period must be >= 1, got {voting_period}")
        self._voting_period = voting_period
        self._proposals: Dict[int, Proposal] = {}
        self._votes: Dict[Tuple[int, str], VoteRecord] = {}
        self._proposal_count = 0

    # ── Mutations ─────────────────────────────────────────────────────

    def create_proposal(self, proposer: str, description: str, current_height: int) -> int:
        proposal_id = self._proposal_count + 1
        self._proposals[proposal_id] = Proposal(
            id=proposal_id,
            description=description,
            proposer=proposer,
            created_height=current_height,
            end_height=current_height + self.voting_period,
        )
        self._proposal_count = proposal_id
        logger.debug(
            f"Stored proposal #{proposal_id} h={current_height} "
            f"end={current_height + self.voting_period}"
        )
        return proposal_id

    def record_vote(
        self,
        proposal_id: int,
        voter: str,
        weight: int,
        current_height: int,
    ) -> VoteRecord:
        if weight < 0:
            raise ValueError(f"Vote weight cannot be negative, got {weight}")

        proposal = self._require(proposal_id)
        if not proposal.is_open(current_height):
            raise VotingClosedError(
                f"Voting on proposal #{proposal_id} closed at h={proposal.end_height}"
            )
        key = (proposal_id, voter)
        if key in self._votes:
            raise AlreadyVotedError(f"{voter} has already voted on proposal #{proposal_id}")

        record = VoteRecord(
            proposal_id=proposal_id,
            voter=voter,
            weight=weight,
            height=current_height,
        )
        self._votes[key] = record
        proposal.votes += weight
        logger.debug(f"Stored vote {voter} on #{proposal_id} weight={weight}")
        return record

    def execute(self, proposal_id: int, current_height: int, min_quorum: int) -> Proposal:
        proposal = self._require(proposal_id)
        if proposal.is_open(current_height):
            raise VotingStillOpenError(
                f"Voting on proposal #{proposal_id} open until h={proposal.end_height}"
            )
        # Already executed surfaces as "not executable", same as unknown id
        if proposal.executed:
            raise ProposalNotFoundError(f"Proposal #{proposal_id} already executed")
        if proposal.votes < min_quorum:
            raise QuorumNotMetError(
                f"Proposal #{proposal_id} has {proposal.votes} < quorum {min_quorum}"
            )
        proposal.executed = True
        logger.debug(f"Stored execution of #{proposal_id} h={current_height}")
        return proposal.snapshot()

    # ── Queries ───────────────────────────────────────────────────────

    def get_proposal(self, proposal_id: int) -> Optional[Proposal]:
        proposal = self._proposals.get(proposal_id)
        return proposal.snapshot() if proposal else None

    def has_voted(self, proposal_id: int, voter: str) -> bool:
        return (proposal_id, voter) in self._votes

    def get_vote(self, proposal_id: int, voter: str) -> Optional[VoteRecord]:
        return self._votes.get((proposal_id, voter))

    def votes_for(self, proposal_id: int) -> List[VoteRecord]:
        return [r for (pid, _), r in self._votes.items() if pid == proposal_id]

    @property
    def proposal_count(self) -> int:
        return self._proposal_count

    @property
    def voting_period(self) -> int:
        return self._voting_period

    def _require(self, proposal_id: int) -> Proposal:
        proposal = self._proposals.get(proposal_id)
        if proposal is None:
            raise ProposalNotFoundError(f"Proposal #{proposal_id} not found")
        return proposal

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "votingPeriod": self.voting_period,
            "proposalCount": self._proposal_count,
            "proposals": [p.to_dict() for p in self._proposals.values()],
            "votes": [r.to_dict() for r in self._votes.values()],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryGovernanceStore":
        store = cls(voting_period=int(data.get("votingPeriod", GOVERNANCE_VOTING_PERIOD)))
        for item in data.get("proposals", []):
            proposal = Proposal.from_dict(item)
            store._proposals[proposal.id] = proposal
        for item in data.get("votes", []):
            record = VoteRecord.from_dict(item)
            if record.proposal_id not in store._proposals:
                raise ValueError(f"Vote references unknown proposal #{record.proposal_id}")
            store._votes[record.key] = record
        highest = max(store._proposals, default=0)
        store._proposal_count = max(int(data.get("proposalCount", 0)), highest)
        return store

    def __repr__(self) -> str:
        return (
            f"<InMemoryGovernanceStore proposals={self._proposal_count} "
            f"votes={len(self._votes)}>"
        )
