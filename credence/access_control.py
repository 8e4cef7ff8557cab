"""Role checks for admin, verifier and identity-owner paths.

Failed checks publish an ``access_denied`` event before raising.
"""

from __future__ import annotations

from enum import IntEnum

from credence.env import Address, ContractError, Env

ADMIN_KEY = "admin"
VERIFIER_PREFIX = "verifier"
ACCESS_DENIED_EVENT = "access_denied"


class AccessError(IntEnum):
    """Reason for a denied access; the value is the code carried by the event."""

    NOT_ADMIN = 1
    NOT_VERIFIER = 2
    NOT_IDENTITY_OWNER = 3
    NOT_INITIALIZED = 4


def _verifier_key(verifier: Address) -> tuple[str, Address]:
    return (VERIFIER_PREFIX, verifier)


def _deny(env: Env, caller: Address, role: str, error: AccessError) -> None:
    env.publish((ACCESS_DENIED_EVENT,), (caller, role, int(error)))


def set_admin(env: Env, admin: Address) -> None:
    """Store ``admin`` as the contract admin."""
    env.storage[ADMIN_KEY] = admin


def require_admin(env: Env, caller: Address) -> None:
    """Raise unless ``caller`` is the configured admin."""
    admin = env.storage.get(ADMIN_KEY)
    if admin is None:
        _deny(env, caller, "admin", AccessError.NOT_INITIALIZED)
        raise ContractError("not initialized")
    if caller != admin:
        _deny(env, caller, "admin", AccessError.NOT_ADMIN)
        raise ContractError("not admin")


def require_verifier(env: Env, caller: Address) -> None:
    """Raise unless ``caller`` holds the verifier role."""
    if env.storage.get(_verifier_key(caller)) is not True:
        _deny(env, caller, "verifier", AccessError.NOT_VERIFIER)
        raise ContractError("not verifier")


def require_identity_owner(env: Env, caller: Address, expected_identity: Address) -> None:
    """Raise unless ``caller`` is ``expected_identity``."""
    if caller != expected_identity:
        _deny(env, caller, "identity_owner", AccessError.NOT_IDENTITY_OWNER)
        raise ContractError("not identity owner")


def require_admin_or_verifier(env: Env, caller: Address) -> None:
    """Raise unless ``caller`` is the admin or a verifier."""
    if is_admin(env, caller) or is_verifier(env, caller):
        return
    _deny(env, caller, "admin_or_verifier", AccessError.NOT_VERIFIER)
    raise ContractError("not authorized")


def add_verifier_role(env: Env, admin: Address, verifier: Address) -> None:
    """Grant the verifier role; ``admin`` must be the admin."""
    require_admin(env, admin)
    env.storage[_verifier_key(verifier)] = True
    env.publish(("verifier_added",), (verifier,))


def remove_verifier_role(env: Env, admin: Address, verifier: Address) -> None:
    """Revoke the verifier role; ``admin`` must be the admin."""
    require_admin(env, admin)
    env.storage[_verifier_key(verifier)] = False
    env.publish(("verifier_removed",), (verifier,))


def is_verifier(env: Env, address: Address) -> bool:
    """Whether ``address`` currently holds the verifier role."""
    return bool(env.storage.get(_verifier_key(address), False))


def is_admin(env: Env, address: Address) -> bool:
    """Whether ``address`` is the configured admin."""
    admin = env.storage.get(ADMIN_KEY)
    return admin is not None and admin == address


def get_admin(env: Env) -> Address:
    """Return the configured admin."""
    admin = env.storage.get(ADMIN_KEY)
    if admin is None:
        raise ContractError("not initialized")
    return admin