"""
Grid DAO Governance Example

Demonstrates embedding the governance engine in a host that owns the
token balances and the block height.
"""

from gridgov.config import load_config
from gridgov.governance import GovernanceEngine, InMemoryBalances, ManualClock
from gridgov.logger import configure_logging


OPERATOR = 'ST2CY5V39NHDPWSXMW9QDT3HC3GD6Q6XX4CFRK9AG'
PRODUCER = 'ST3NBRSFKX28FQ2ZJ1MAKX58HKHSDGNV5N7R21XCP'


def example_proposal_lifecycle(engine, balances, clock):
    """Example: propose, vote, wait out the window, execute."""

    proposal_id = engine.create_proposal(OPERATOR, 'Upgrade grid infrastructure').unwrap()
    print(f"Created proposal #{proposal_id}")

    balances.set_balance(PRODUCER, 2_000_000)
    vote = engine.cast_vote(PRODUCER, proposal_id)
    print(f"Vote accepted: {vote.ok}")

    # Too early: the window is still open
    early = engine.execute_proposal(PRODUCER, proposal_id)
    print(f"Early execution: {early.error.name} (code {early.code})")

    clock.set_height(engine.get_proposal(proposal_id).value.end_height + 1)
    result = engine.execute_proposal(PRODUCER, proposal_id)
    print(f"Execution: {result.to_dict()}")
    print(f"Proposal state: {engine.get_proposal(proposal_id).value.to_dict()}")


def example_pause(engine):
    """Example: the admin kill switch."""

    engine.set_paused(engine.admin, True)
    blocked = engine.create_proposal(OPERATOR, 'Blocked while paused')
    print(f"While paused: {blocked.error.name}")
    engine.set_paused(engine.admin, False)


def main():
    config = load_config()
    configure_logging(config.logging)

    balances = InMemoryBalances()
    clock = ManualClock(1000)
    engine = GovernanceEngine(config.governance, balances, clock)

    example_proposal_lifecycle(engine, balances, clock)
    example_pause(engine)


if __name__ == '__main__':
    main()
