"""
GridGov Token-Weighted Governance

Provides:
  - Proposal / VoteRecord / ErrorKind / GovernanceError family  (proposals.py)
  - TokenBalanceProvider / LogicalClock and in-process versions (interfaces.py)
  - GovernanceStore / InMemoryGovernanceStore                   (store.py)
  - GovernanceEngine / GovernanceResult                         (engine.py)
"""

from .proposals import (
    AlreadyVotedError,
    ErrorKind,
    GovernanceError,
    Proposal,
    ProposalNotFoundError,
    QuorumNotMetError,
    SystemPausedError,
    UnauthorizedError,
    VoteRecord,
    VotingClosedError,
    VotingStillOpenError,
)
from .interfaces import (
    InMemoryBalances,
    InsufficientBalanceError,
    LogicalClock,
    ManualClock,
    TokenBalanceProvider,
)
from .store import (
    GovernanceStore,
    InMemoryGovernanceStore,
)
from .engine import (
    GovernanceEngine,
    GovernanceResult,
)

__all__ = [
    # Proposals
    "AlreadyVotedError",
    "ErrorKind",
    "GovernanceError",
    "Proposal",
    "ProposalNotFoundError",
    "QuorumNotMetError",
    "SystemPausedError",
    "UnauthorizedError",
    "VoteRecord",
    "VotingClosedError",
    "VotingStillOpenError",
    # Capabilities
    "InMemoryBalances",
    "InsufficientBalanceError",
    "LogicalClock",
    "ManualClock",
    "TokenBalanceProvider",
    # Store
    "GovernanceStore",
    "InMemoryGovernanceStore",
    # Engine
    "GovernanceEngine",
    "GovernanceResult",
]
