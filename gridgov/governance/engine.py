"""
Governance Engine

Public operation set for token-weighted governance:

  - set_paused        admin-only kill switch
  - create_proposal   permissionless, opens a voting window at the current height
  - cast_vote         one vote per identity, weighted by live token balance
  - execute_proposal  permissionless once the window closed and quorum is met
  - get_proposal      read-only snapshot

Every operation returns a GovernanceResult. Expected failures (see ErrorKind)
are reported in the result and never raised; contract violations by injected
collaborators (e.g. a negative balance) propagate as ordinary exceptions.

Vote weight is the voter's balance at the moment of voting. Tokens are not
locked, so the same tokens moved to another identity can vote again.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from ..config.loader import GovernanceConfig
from ..exceptions import ConfigurationError
from ..logger import get_logger
from .interfaces import LogicalClock, TokenBalanceProvider
from .proposals import (
    ERRORS_BY_KIND,
    ErrorKind,
    GovernanceError,
    ProposalNotFoundError,
    SystemPausedError,
    UnauthorizedError,
    error_for,
)
from .store import GovernanceStore, InMemoryGovernanceStore

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  RESULT
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class GovernanceResult:
    """Outcome of an engine operation: a value, or an error kind."""
    value: Any = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def success(cls, value: Any = True) -> "GovernanceResult":
        return cls(value=value)

    @classmethod
    def failure(cls, exc: GovernanceError) -> "GovernanceResult":
        return cls(error=exc.kind, message=str(exc))

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def code(self) -> Optional[int]:
        """Contract error code for the failure, None on success."""
        if self.error is None:
            return None
        return ERRORS_BY_KIND[self.error].code

    def unwrap(self) -> Any:
        """Return the value, or raise the GovernanceError matching the failure."""
        if self.error is not None:
            raise error_for(self.error, self.message)
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"error": self.code, "kind": self.error.value, "message": self.message}
        value = self.value.to_dict() if hasattr(self.value, "to_dict") else self.value
        return {"value": value}


# ══════════════════════════════════════════════════════════════════════
#  ENGINE
# ══════════════════════════════════════════════════════════════════════

class GovernanceEngine:
    """
    Orchestrates pause/admin policy, balance lookups and the store.

    The engine keeps its own copy of *config*; the pause flag on that copy is
    changed only through set_paused. Engines built from the same config do
    not share state.
    """

    def __init__(
        self,
        config: GovernanceConfig,
        balances: TokenBalanceProvider,
        clock: LogicalClock,
        store: Optional[GovernanceStore] = None,
    ):
        """
        Args:
            config:   Voting period, quorum, admin identity, initial pause flag
            balances: Source of vote weight (balance_of)
            clock:    Source of the current height (current_height)
            store:    Proposal storage; defaults to an in-memory store. Its
                      voting_period must equal config.voting_period.

        Raises:
            ConfigurationError: invalid config, or store/config period mismatch
        """
        config.validate()
        self._config = replace(config)
        self._balances = balances
        self._clock = clock
        if store is None:
            store = InMemoryGovernanceStore(voting_period=self._config.voting_period)
        elif store.voting_period != self._config.voting_period:
            raise ConfigurationError(
                f"Store voting_period {store.voting_period} does not match "
                f"config voting_period {self._config.voting_period}"
            )
        self._store = store

    # ── Admin ─────────────────────────────────────────────────────────

    def set_paused(self, caller: str, pause: bool) -> GovernanceResult:
        """Admin-only. Not subject to the pause gate itself."""
        if caller != self._config.admin:
            return self._reject("set_paused", caller, UnauthorizedError(
                f"{caller} is not the governance admin"
            ))
        self._config.paused = bool(pause)
        logger.info(f"Governance {'paused' if pause else 'resumed'} by {caller}")
        return GovernanceResult.success(self._config.paused)

    # ── Proposals ─────────────────────────────────────────────────────

    def create_proposal(self, caller: str, description: str) -> GovernanceResult:
        try:
            self._ensure_active()
            height = self._clock.current_height()
            proposal_id = self._store.create_proposal(caller, description, height)
        except GovernanceError as e:
            return self._reject("create_proposal", caller, e)
        logger.info(
            f"Proposal #{proposal_id} created by {caller} h={height} "
            f"{description!r}"
        )
        return GovernanceResult.success(proposal_id)

    def cast_vote(self, caller: str, proposal_id: int) -> GovernanceResult:
        """
        Vote on *proposal_id* with the caller's current balance.

        A zero balance still records the vote and uses up the caller's single
        vote on this proposal.
        """
        try:
            self._ensure_active()
            height = self._clock.current_height()
            weight = self._balances.balance_of(caller)
            self._store.record_vote(proposal_id, caller, weight, height)
        except GovernanceError as e:
            return self._reject("cast_vote", caller, e)
        logger.info(f"Vote: {caller} on #{proposal_id} weight={weight} h={height}")
        return GovernanceResult.success(True)

    def execute_proposal(self, caller: str, proposal_id: int) -> GovernanceResult:
        """Permissionless; *caller* is only logged."""
        try:
            self._ensure_active()
            height = self._clock.current_height()
            proposal = self._store.execute(proposal_id, height, self._config.min_quorum)
        except GovernanceError as e:
            return self._reject("execute_proposal", caller, e)
        logger.info(
            f"Proposal #{proposal_id} executed by {caller} h={height} "
            f"weight={proposal.votes}"
        )
        return GovernanceResult.success(True)

    def get_proposal(self, proposal_id: int) -> GovernanceResult:
        proposal = self._store.get_proposal(proposal_id)
        if proposal is None:
            return GovernanceResult.failure(
                ProposalNotFoundError(f"Proposal #{proposal_id} not found")
            )
        return GovernanceResult.success(proposal)

    # ── Queries ───────────────────────────────────────────────────────

    @property
    def is_paused(self) -> bool:
        return self._config.paused

    @property
    def admin(self) -> str:
        return self._config.admin

    @property
    def config(self) -> GovernanceConfig:
        return replace(self._config)

    @property
    def proposal_count(self) -> int:
        return self._store.proposal_count

    def has_voted(self, proposal_id: int, voter: str) -> bool:
        return self._store.has_voted(proposal_id, voter)

    # ── Internals ─────────────────────────────────────────────────────

    def _ensure_active(self) -> None:
        if self._config.paused:
            raise SystemPausedError("Governance is paused")

    def _reject(self, operation: str, caller: str, exc: GovernanceError) -> GovernanceResult:
        logger.warning(
            f"{operation} rejected for {caller}: {exc.kind.name} "
            f"(code {exc.code}) {exc}"
        )
        return GovernanceResult.failure(exc)

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        """Full persisted-state layout: config scalars plus store contents."""
        return {
            "admin": self._config.admin,
            "paused": self._config.paused,
            "minQuorum": self._config.min_quorum,
            "votingPeriod": self._config.voting_period,
            "store": self._store.to_dict(),
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        balances: TokenBalanceProvider,
        clock: LogicalClock,
    ) -> "GovernanceEngine":
        """
        Rebuild an engine (with an in-memory store) from to_dict output.

        Raises:
            ValueError:         no "store" section in *data*
            ConfigurationError: top-level and store voting periods disagree
        """
        if "store" not in data:
            raise ValueError("Engine state has no 'store' section")
        store = InMemoryGovernanceStore.from_dict(data["store"])
        config = GovernanceConfig(
            voting_period=int(data.get("votingPeriod", store.voting_period)),
            min_quorum=int(data["minQuorum"]),
            admin=data["admin"],
            paused=bool(data.get("paused", False)),
        )
        return cls(config, balances, clock, store=store)

    def __repr__(self) -> str:
        return (
            f"<GovernanceEngine proposals={self.proposal_count} "
            f"paused={self._config.paused}>"
        )
