"""Governance approval for slashing.

Slash proposals are created, governors vote (optionally through a delegate),
and a slash is executed only when quorum and majority approval are reached.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum

from credence.env import U64_MAX, Address, ContractError, Env

_KEY_NEXT_ID = ("governance", "next_proposal_id")
_KEY_GOVERNORS = ("governance", "governors")
_KEY_QUORUM_BPS = ("governance", "quorum_bps")
_KEY_MIN_GOVERNORS = ("governance", "min_governors")

DEFAULT_QUORUM_BPS = 5100
DEFAULT_MIN_GOVERNORS = 1


class ProposalStatus(Enum):
    """Lifecycle state of a slash proposal."""

    OPEN = "open"
    EXECUTED = "executed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class SlashProposal:
    """A proposal to slash ``amount``."""

    id: int
    amount: int
    proposed_by: Address
    proposed_at: int
    status: ProposalStatus


def _proposal_key(proposal_id: int) -> tuple:
    return ("governance", "proposal", proposal_id)


def _vote_key(proposal_id: int, voter: Address) -> tuple:
    return ("governance", "vote", proposal_id, voter)


def _delegate_key(governor: Address) -> tuple:
    return ("governance", "delegate", governor)


def _emit(env: Env, topic: str, proposal_id: int, address: Address, amount: int) -> None:
    env.publish((topic,), (proposal_id, address, amount))


def _require_governors(env: Env) -> list[Address]:
    governors = env.storage.get(_KEY_GOVERNORS)
    if governors is None:
        raise ContractError("governance not initialized")
    return governors


def _load_proposal(env: Env, proposal_id: int) -> SlashProposal:
    proposal = env.storage.get(_proposal_key(proposal_id))
    if proposal is None:
        raise ContractError("proposal not found")
    return proposal


def initialize_governance(
    env: Env, governors: list[Address], quorum_bps: int, min_governors: int
) -> None:
    """Set governors and quorum. Admin checks are the caller's job."""
    if quorum_bps > 10_000:
        raise ContractError("quorum_bps must be <= 10000")
    env.storage[_KEY_GOVERNORS] = list(governors)
    env.storage[_KEY_QUORUM_BPS] = quorum_bps
    env.storage[_KEY_MIN_GOVERNORS] = min_governors
    env.storage[_KEY_NEXT_ID] = 0


def propose_slash(env: Env, proposer: Address, amount: int) -> int:
    """Open a slash proposal and return its id."""
    if amount <= 0:
        raise ContractError("slash amount must be positive")
    proposal_id = env.storage.get(_KEY_NEXT_ID, 0)
    if proposal_id >= U64_MAX:
        raise ContractError("proposal id overflow")
    env.storage[_KEY_NEXT_ID] = proposal_id + 1
    env.storage[_proposal_key(proposal_id)] = SlashProposal(
        id=proposal_id,
        amount=amount,
        proposed_by=proposer,
        proposed_at=env.timestamp,
        status=ProposalStatus.OPEN,
    )
    _emit(env, "slash_proposed", proposal_id, proposer, amount)
    return proposal_id


def vote(env: Env, voter: Address, proposal_id: int, approve: bool) -> None:
    """Record a vote by a governor or by a governor's delegate."""
    proposal = _load_proposal(env, proposal_id)
    if proposal.status is not ProposalStatus.OPEN:
        raise ContractError("proposal not open for voting")
    governors = _require_governors(env)
    is_delegate = any(
        env.storage.get(_delegate_key(governor)) == voter for governor in governors
    )
    if voter not in governors and not is_delegate:
        raise ContractError("not a governor or delegate")
    key = _vote_key(proposal_id, voter)
    if key in env.storage:
        raise ContractError("already voted")
    env.storage[key] = approve
    _emit(env, "governance_vote", proposal_id, voter, 1 if approve else 0)


def delegate(env: Env, governor: Address, to: Address) -> None:
    """Hand ``governor``'s voting power to ``to``."""
    env.require_auth(governor)
    governors = _require_governors(env)
    if governor not in governors:
        raise ContractError("not a governor")
    env.storage[_delegate_key(governor)] = to
    _emit(env, "governance_delegate", 0, governor, 0)


def _count_votes(env: Env, proposal_id: int) -> tuple[int, int, int]:
    approve = reject = 0
    for governor in get_governors(env):
        effective = env.storage.get(_delegate_key(governor), governor)
        choice = env.storage.get(_vote_key(proposal_id, effective))
        if choice is None:
            continue
        if choice:
            approve += 1
        else:
            reject += 1
    return approve, reject, approve + reject


def is_approved(env: Env, proposal_id: int) -> bool:
    """Whether quorum is met and a strict majority of votes approve."""
    total = len(get_governors(env))
    if total == 0:
        return False
    quorum_bps, min_governors = get_quorum_config(env)
    approve, _, voted = _count_votes(env, proposal_id)
    quorum_ok = voted >= max(total * quorum_bps // 10_000, min_governors)
    return quorum_ok and voted > 0 and approve > voted // 2


def execute_slash_if_approved(env: Env, proposal_id: int) -> bool:
    """Close the proposal; return True when it was approved and executed."""
    proposal = _load_proposal(env, proposal_id)
    if proposal.status is not ProposalStatus.OPEN:
        raise ContractError("proposal already closed")
    approved = is_approved(env, proposal_id)
    status = ProposalStatus.EXECUTED if approved else ProposalStatus.REJECTED
    env.storage[_proposal_key(proposal_id)] = dataclasses.replace(proposal, status=status)
    topic = "slash_proposal_executed" if approved else "slash_proposal_rejected"
    _emit(env, topic, proposal_id, proposal.proposed_by, proposal.amount)
    return approved


def get_proposal(env: Env, proposal_id: int) -> SlashProposal | None:
    """Return the proposal, or None if there is none with this id."""
    return env.storage.get(_proposal_key(proposal_id))


def get_vote(env: Env, proposal_id: int, voter: Address) -> bool | None:
    """Return the vote cast by ``voter``, or None if it has not voted."""
    return env.storage.get(_vote_key(proposal_id, voter))


def get_governors(env: Env) -> list[Address]:
    """Return the governors, or an empty list before initialisation."""
    return list(env.storage.get(_KEY_GOVERNORS, []))


def get_delegate(env: Env, governor: Address) -> Address | None:
    """Return the delegate of ``governor``, if any."""
    return env.storage.get(_delegate_key(governor))


def get_quorum_config(env: Env) -> tuple[int, int]:
    """Return ``(quorum_bps, min_governors)``."""
    return (
        env.storage.get(_KEY_QUORUM_BPS, DEFAULT_QUORUM_BPS),
        env.storage.get(_KEY_MIN_GOVERNORS, DEFAULT_MIN_GOVERNORS),
    )