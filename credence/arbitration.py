"""Weighted arbitration voting for dispute resolution."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

from credence.env import I128_MAX, U32_MAX, U64_MAX, Address, ContractError, Env

_KEY_ADMIN = ("arbitration", "admin")
_KEY_DISPUTE_COUNTER = ("arbitration", "dispute_counter")

NO_OUTCOME = 0


@dataclass(frozen=True)
class Dispute:
    """A dispute open to arbitrator votes; ``outcome`` is 0 while unresolved or tied."""

    id: int
    creator: Address
    description: str
    voting_start: int
    voting_end: int
    resolved: bool
    outcome: int


def _arbitrator_key(arbitrator: Address) -> tuple:
    return ("arbitration", "arbitrator", arbitrator)


def _dispute_key(dispute_id: int) -> tuple:
    return ("arbitration", "dispute", dispute_id)


def _votes_key(dispute_id: int) -> tuple:
    return ("arbitration", "votes", dispute_id)


def _voted_key(dispute_id: int, voter: Address) -> tuple:
    return ("arbitration", "voted", dispute_id, voter)


class ArbitrationContract:
    """Arbitration registry kept in the instance storage of ``env``."""

    def __init__(self, env: Env) -> None:
        self.env = env

    @property
    def _storage(self) -> dict:
        return self.env.storage

    def _require_admin_auth(self) -> None:
        admin = self._storage.get(_KEY_ADMIN)
        if admin is None:
            raise ContractError("not initialized")
        self.env.require_auth(admin)

    def _votes(self, dispute_id: int) -> dict[int, int]:
        return self._storage.get(_votes_key(dispute_id), {})

    def initialize(self, admin: Address) -> None:
        """Set the admin; may be done only once."""
        if _KEY_ADMIN in self._storage:
            raise ContractError("already initialized")
        self._storage[_KEY_ADMIN] = admin

    def register_arbitrator(self, arbitrator: Address, weight: int) -> None:
        """Register or update an arbitrator with a positive voting weight."""
        self._require_admin_auth()
        if weight <= 0:
            raise ContractError("weight must be positive")
        if weight > I128_MAX:
            raise ValueError("weight out of range")
        self._storage[_arbitrator_key(arbitrator)] = weight
        self.env.publish(("arbitrator_registered", arbitrator), weight)

    def unregister_arbitrator(self, arbitrator: Address) -> None:
        """Remove an arbitrator."""
        self._require_admin_auth()
        self._storage.pop(_arbitrator_key(arbitrator), None)
        self.env.publish(("arbitrator_unregistered", arbitrator), ())

    def create_dispute(self, creator: Address, description: str, duration: int) -> int:
        """Open a dispute whose voting runs for ``duration`` seconds; return its id."""
        self.env.require_auth(creator)
        if not 0 <= duration <= U64_MAX:
            raise ValueError("duration out of range")
        dispute_id = self._storage.get(_KEY_DISPUTE_COUNTER, 0)
        if dispute_id >= U64_MAX:
            raise ContractError("dispute counter overflow")
        self._storage[_KEY_DISPUTE_COUNTER] = dispute_id + 1

        start = self.env.timestamp
        end = start + duration
        if end > U64_MAX:
            raise ContractError("duration overflow")

        self._storage[_dispute_key(dispute_id)] = Dispute(
            id=dispute_id,
            creator=creator,
            description=description,
            voting_start=start,
            voting_end=end,
            resolved=False,
            outcome=NO_OUTCOME,
        )
        self.env.publish(("dispute_created", dispute_id), creator)
        return dispute_id

    def vote(self, voter: Address, dispute_id: int, outcome: int) -> None:
        """Cast the voter's weight for ``outcome`` (any non-zero value)."""
        self.env.require_auth(voter)
        if outcome == NO_OUTCOME:
            raise ContractError("invalid outcome")
        if not 0 <= outcome <= U32_MAX:
            raise ValueError("outcome out of range")

        weight = self._storage.get(_arbitrator_key(voter))
        if weight is None:
            raise ContractError("voter is not an authorized arbitrator")
        dispute = self.get_dispute(dispute_id)

        now = self.env.timestamp
        if now < dispute.voting_start or now > dispute.voting_end:
            raise ContractError("voting period is inactive")
        if dispute.resolved:
            raise ContractError("dispute already resolved")

        voted_key = _voted_key(dispute_id, voter)
        if voted_key in self._storage:
            raise ContractError("arbitrator already voted on this dispute")
        self._storage[voted_key] = True

        votes = dict(self._votes(dispute_id))
        tally = votes.get(outcome, 0) + weight
        if tally > I128_MAX:
            raise ContractError("weight overflow")
        votes[outcome] = tally
        self._storage[_votes_key(dispute_id)] = votes

        self.env.publish(("vote_cast", dispute_id, voter), (outcome, weight))

    def resolve_dispute(self, dispute_id: int) -> int:
        """Close voting and return the winning outcome, or 0 on a tie or no votes."""
        dispute = self.get_dispute(dispute_id)
        if dispute.resolved:
            raise ContractError("dispute already resolved")
        if self.env.timestamp <= dispute.voting_end:
            raise ContractError("voting period has not ended")

        winner = NO_OUTCOME
        max_weight = -1
        is_tie = False
        for outcome, weight in sorted(self._votes(dispute_id).items()):
            if weight > max_weight:
                max_weight = weight
                winner = outcome
                is_tie = False
            elif weight == max_weight:
                is_tie = True
        if is_tie:
            winner = NO_OUTCOME

        self._storage[_dispute_key(dispute_id)] = dataclasses.replace(
            dispute, resolved=True, outcome=winner
        )
        self.env.publish(("dispute_resolved", dispute_id), winner)
        return winner

    def get_dispute(self, dispute_id: int) -> Dispute:
        """Return the dispute with ``dispute_id``."""
        dispute = self._storage.get(_dispute_key(dispute_id))
        if dispute is None:
            raise ContractError("dispute not found")
        return dispute

    def get_tally(self, dispute_id: int, outcome: int) -> int:
        """Return the total weight cast for ``outcome``."""
        return self._votes(dispute_id).get(outcome, 0)