"""Identity bonds with attestations, slashing, fees and a reentrancy guard."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Protocol

from credence import early_exit_penalty
from credence.env import I128_MAX, I128_MIN, U64_MAX, Address, ContractError, Env
from credence.fees import KEY_FEE_POOL

_KEY_ADMIN = ("bond", "admin")
_KEY_BOND = ("bond", "bond")
_KEY_ATTESTATION_COUNTER = ("bond", "attestation_counter")
_KEY_CALLBACK = ("bond", "callback")
_KEY_LOCKED = ("bond", "locked")


def _attester_key(attester: Address) -> tuple:
    return ("bond", "attester", attester)


def _attestation_key(attestation_id: int) -> tuple:
    return ("bond", "attestation", attestation_id)


def _subject_key(subject: Address) -> tuple:
    return ("bond", "subject_attestations", subject)


def _in_i128(value: int) -> bool:
    return I128_MIN <= value <= I128_MAX


@dataclass(frozen=True)
class IdentityBond:
    """The bond held by an identity."""

    identity: Address
    bonded_amount: int
    bond_start: int
    bond_duration: int
    slashed_amount: int
    active: bool
    is_rolling: bool
    withdrawal_requested_at: int
    notice_period: int


@dataclass(frozen=True)
class Attestation:
    """A statement made by an attester about a subject."""

    id: int
    attester: Address
    subject: Address
    attestation_data: str
    timestamp: int
    revoked: bool


class BondCallback(Protocol):
    """Receiver of the external calls made after a state change."""

    def on_withdraw(self, amount: int) -> object: ...

    def on_slash(self, amount: int) -> object: ...

    def on_collect(self, amount: int) -> object: ...


class CredenceBond:
    """Single-bond contract kept in the instance storage of ``env``."""

    def __init__(self, env: Env) -> None:
        self.env = env

    @property
    def _storage(self) -> dict:
        return self.env.storage

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        """Undo every storage change and event if the call fails."""
        saved = dict(self._storage)
        event_count = len(self.env.events)
        try:
            yield
        except BaseException:
            self._storage.clear()
            self._storage.update(saved)
            del self.env.events[event_count:]
            raise

    @contextmanager
    def _lock(self) -> Iterator[None]:
        if self._storage.get(_KEY_LOCKED, False):
            raise ContractError("reentrancy detected")
        self._storage[_KEY_LOCKED] = True
        yield
        self._storage[_KEY_LOCKED] = False

    def _admin(self, missing: str) -> Address:
        admin = self._storage.get(_KEY_ADMIN)
        if admin is None:
            raise ContractError(missing)
        return admin

    def _callback(self) -> BondCallback | None:
        return self._storage.get(_KEY_CALLBACK)

    def initialize(self, admin: Address) -> None:
        """Set the admin."""
        self._storage[_KEY_ADMIN] = admin

    def set_early_exit_config(
        self, admin: Address, treasury: Address, penalty_bps: int
    ) -> None:
        """Set the early exit treasury and penalty in basis points (admin only)."""
        stored = self._admin("not initialized")
        self.env.require_auth(admin)
        if admin != stored:
            raise ContractError("not admin")
        early_exit_penalty.set_config(self.env, treasury, penalty_bps)

    def register_attester(self, attester: Address) -> None:
        """Authorise ``attester``; the admin must authorise the call."""
        self.env.require_auth(self._admin("not initialized"))
        self._storage[_attester_key(attester)] = True
        self.env.publish(("attester_registered",), attester)

    def unregister_attester(self, attester: Address) -> None:
        """Withdraw the authorisation of ``attester``."""
        self.env.require_auth(self._admin("not initialized"))
        self._storage.pop(_attester_key(attester), None)
        self.env.publish(("attester_unregistered",), attester)

    def is_attester(self, attester: Address) -> bool:
        """Whether ``attester`` is authorised."""
        return bool(self._storage.get(_attester_key(attester), False))

    def create_bond(self, identity: Address, amount: int, duration: int) -> IdentityBond:
        """Create a non-rolling bond, replacing any existing one."""
        return self.create_bond_with_rolling(identity, amount, duration, False, 0)

    def create_bond_with_rolling(
        self,
        identity: Address,
        amount: int,
        duration: int,
        is_rolling: bool,
        notice_period: int,
    ) -> IdentityBond:
        """Create a bond starting now, replacing any existing one."""
        if not 0 <= duration <= U64_MAX:
            raise ValueError("duration out of range")
        start = self.env.timestamp
        if start + duration > U64_MAX:
            raise ContractError("bond end timestamp would overflow")
        bond = IdentityBond(
            identity=identity,
            bonded_amount=amount,
            bond_start=start,
            bond_duration=duration,
            slashed_amount=0,
            active=True,
            is_rolling=is_rolling,
            withdrawal_requested_at=0,
            notice_period=notice_period,
        )
        self._storage[_KEY_BOND] = bond
        return bond

    def get_identity_state(self) -> IdentityBond:
        """Return the current bond."""
        bond = self._storage.get(_KEY_BOND)
        if bond is None:
            raise ContractError("no bond")
        return bond

    def add_attestation(
        self, attester: Address, subject: Address, attestation_data: str
    ) -> Attestation:
        """Record an attestation by an authorised attester and return it."""
        self.env.require_auth(attester)
        if not self.is_attester(attester):
            raise ContractError("unauthorized attester")
        attestation_id = self._storage.get(_KEY_ATTESTATION_COUNTER, 0)
        if attestation_id >= U64_MAX:
            raise ContractError("attestation counter overflow")
        self._storage[_KEY_ATTESTATION_COUNTER] = attestation_id + 1

        attestation = Attestation(
            id=attestation_id,
            attester=attester,
            subject=subject,
            attestation_data=attestation_data,
            timestamp=self.env.timestamp,
            revoked=False,
        )
        self._storage[_attestation_key(attestation_id)] = attestation
        self._storage[_subject_key(subject)] = [
            *self.get_subject_attestations(subject),
            attestation_id,
        ]
        self.env.publish(
            ("attestation_added", subject), (attestation_id, attester, attestation_data)
        )
        return attestation

    def revoke_attestation(self, attester: Address, attestation_id: int) -> None:
        """Revoke an attestation; only its original attester may do so."""
        self.env.require_auth(attester)
        attestation = self.get_attestation(attestation_id)
        if attestation.attester != attester:
            raise ContractError("only original attester can revoke")
        if attestation.revoked:
            raise ContractError("attestation already revoked")
        self._storage[_attestation_key(attestation_id)] = dataclasses.replace(
            attestation, revoked=True
        )
        self.env.publish(
            ("attestation_revoked", attestation.subject), (attestation_id, attester)
        )

    def get_attestation(self, attestation_id: int) -> Attestation:
        """Return the attestation with ``attestation_id``."""
        attestation = self._storage.get(_attestation_key(attestation_id))
        if attestation is None:
            raise ContractError("attestation not found")
        return attestation

    def get_subject_attestations(self, subject: Address) -> list[int]:
        """Return the ids of every attestation about ``subject``, oldest first."""
        return list(self._storage.get(_subject_key(subject), []))

    def request_withdrawal(self) -> IdentityBond:
        """Record a withdrawal request on a rolling bond."""
        bond = self.get_identity_state()
        if not bond.is_rolling:
            raise ContractError("not a rolling bond")
        if bond.withdrawal_requested_at != 0:
            raise ContractError("withdrawal already requested")
        bond = dataclasses.replace(bond, withdrawal_requested_at=self.env.timestamp)
        self._storage[_KEY_BOND] = bond
        self.env.publish(
            ("withdrawal_requested",), (bond.identity, bond.withdrawal_requested_at)
        )
        return bond

    def slash(self, amount: int) -> IdentityBond:
        """Add ``amount`` to the slashed amount, capped at the bonded amount."""
        bond = self.get_identity_state()
        new_slashed = bond.slashed_amount + amount
        if not _in_i128(new_slashed):
            raise ContractError("slashing caused overflow")
        bond = dataclasses.replace(
            bond, slashed_amount=min(new_slashed, bond.bonded_amount)
        )
        self._storage[_KEY_BOND] = bond
        return bond

    def extend_duration(self, additional_duration: int) -> IdentityBond:
        """Lengthen the lock-up by ``additional_duration`` seconds."""
        bond = self.get_identity_state()
        duration = bond.bond_duration + additional_duration
        if duration > U64_MAX:
            raise ContractError("duration extension caused overflow")
        if bond.bond_start + duration > U64_MAX:
            raise ContractError("bond end timestamp would overflow")
        bond = dataclasses.replace(bond, bond_duration=duration)
        self._storage[_KEY_BOND] = bond
        return bond

    def deposit_fees(self, amount: int) -> None:
        """Add ``amount`` to the fee pool."""
        self._storage[KEY_FEE_POOL] = self._storage.get(KEY_FEE_POOL, 0) + amount

    def withdraw_bond(self, identity: Address) -> int:
        """Return the unslashed balance to its owner and deactivate the bond."""
        self.env.require_auth(identity)
        with self._transaction(), self._lock():
            bond = self.get_identity_state()
            if bond.identity != identity:
                raise ContractError("not bond owner")
            if not bond.active:
                raise ContractError("bond not active")
            amount = bond.bonded_amount - bond.slashed_amount
            self._storage[_KEY_BOND] = dataclasses.replace(
                bond, bonded_amount=0, active=False
            )
            callback = self._callback()
            if callback is not None:
                callback.on_withdraw(amount)
        return amount

    def slash_bond(self, admin: Address, slash_amount: int) -> int:
        """Slash an active bond (admin only) and return the new slashed total."""
        self.env.require_auth(admin)
        with self._transaction(), self._lock():
            if self._admin("no admin") != admin:
                raise ContractError("not admin")
            bond = self.get_identity_state()
            if not bond.active:
                raise ContractError("bond not active")
            new_slashed = bond.slashed_amount + slash_amount
            if new_slashed > bond.bonded_amount:
                raise ContractError("slash exceeds bond")
            self._storage[_KEY_BOND] = dataclasses.replace(
                bond, slashed_amount=new_slashed
            )
            callback = self._callback()
            if callback is not None:
                callback.on_slash(slash_amount)
        return new_slashed

    def collect_fees(self, admin: Address) -> int:
        """Empty the fee pool (admin only) and return what it held."""
        self.env.require_auth(admin)
        with self._transaction(), self._lock():
            if self._admin("no admin") != admin:
                raise ContractError("not admin")
            fees = self._storage.get(KEY_FEE_POOL, 0)
            self._storage[KEY_FEE_POOL] = 0
            callback = self._callback()
            if callback is not None:
                callback.on_collect(fees)
        return fees

    def set_callback(self, callback: BondCallback) -> None:
        """Register the receiver of external calls."""
        self._storage[_KEY_CALLBACK] = callback

    def is_locked(self) -> bool:
        """Whether the reentrancy lock is held."""
        return bool(self._storage.get(_KEY_LOCKED, False))