"""Admin role management with a role hierarchy, limits and audit events."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import IntEnum

from credence.env import U32_MAX, Address, ContractError, Env

_KEY_INITIALIZED = ("admin_contract", "initialized")
_KEY_MIN_ADMINS = ("admin_contract", "min_admins")
_KEY_MAX_ADMINS = ("admin_contract", "max_admins")
_KEY_ADMIN_LIST = ("admin_contract", "admin_list")

DEFAULT_MIN_ADMINS = 1
DEFAULT_MAX_ADMINS = 100


class AdminRole(IntEnum):
    """Admin roles; a higher value carries more privilege."""

    OPERATOR = 1
    ADMIN = 2
    SUPER_ADMIN = 3


@dataclass(frozen=True)
class AdminInfo:
    """An admin's role assignment."""

    address: Address
    role: AdminRole
    assigned_at: int
    assigned_by: Address
    active: bool


_REQUIRED_TO_ASSIGN = {
    AdminRole.SUPER_ADMIN: AdminRole.SUPER_ADMIN,
    AdminRole.ADMIN: AdminRole.SUPER_ADMIN,
    AdminRole.OPERATOR: AdminRole.ADMIN,
}


def get_required_role_to_assign(role: AdminRole) -> AdminRole:
    """Return the lowest role allowed to assign ``role``."""
    return _REQUIRED_TO_ASSIGN[AdminRole(role)]


def _info_key(address: Address) -> tuple:
    return ("admin_contract", "info", address)


def _role_key(role: AdminRole) -> tuple:
    return ("admin_contract", "role", AdminRole(role))


class AdminContract:
    """Admin registry kept in the instance storage of ``env``."""

    def __init__(self, env: Env) -> None:
        self.env = env

    @property
    def _storage(self) -> dict:
        return self.env.storage

    def _info(self, address: Address) -> AdminInfo | None:
        return self._storage.get(_info_key(address))

    def _load(self, address: Address) -> AdminInfo:
        info = self._info(address)
        if info is None:
            raise ContractError("admin not found")
        return info

    def _role_list(self, role: AdminRole) -> list[Address]:
        return self._storage.get(_role_key(role), [])

    def _require_role_at_least(self, caller: Address, required: AdminRole) -> None:
        if self.get_role(caller) < required:
            raise ContractError("insufficient privileges")

    def _require_outranks(self, caller: Address, target: AdminInfo, action: str) -> None:
        if self.get_role(caller) <= target.role:
            raise ContractError(f"insufficient privileges to {action} admin")

    def initialize(self, super_admin: Address, min_admins: int, max_admins: int) -> None:
        """Set the limits and make ``super_admin`` the first super admin."""
        if _KEY_INITIALIZED in self._storage:
            raise ContractError("already initialized")
        if not (0 <= min_admins <= U32_MAX and 0 <= max_admins <= U32_MAX):
            raise ValueError("admin limits out of range")
        if min_admins == 0:
            raise ContractError("min_admins cannot be zero")
        if min_admins > max_admins:
            raise ContractError("min_admins cannot be greater than max_admins")
        self.env.require_auth(super_admin)

        self._storage[_KEY_INITIALIZED] = True
        self._storage[_KEY_MIN_ADMINS] = min_admins
        self._storage[_KEY_MAX_ADMINS] = max_admins
        self._storage[_info_key(super_admin)] = AdminInfo(
            address=super_admin,
            role=AdminRole.SUPER_ADMIN,
            assigned_at=self.env.timestamp,
            assigned_by=super_admin,
            active=True,
        )
        self._storage[_KEY_ADMIN_LIST] = [super_admin]
        self._storage[_role_key(AdminRole.SUPER_ADMIN)] = [super_admin]
        self._storage[_role_key(AdminRole.ADMIN)] = []
        self._storage[_role_key(AdminRole.OPERATOR)] = []
        self.env.publish(("admin_initialized",), super_admin)

    def add_admin(self, caller: Address, new_admin: Address, role: AdminRole) -> AdminInfo:
        """Add ``new_admin`` with ``role``; ``caller`` must be allowed to assign it."""
        role = AdminRole(role)
        self.env.require_auth(caller)
        self._require_role_at_least(caller, get_required_role_to_assign(role))
        if self._info(new_admin) is not None:
            raise ContractError("address is already an admin")
        if caller == new_admin and self.get_role(caller) >= role:
            raise ContractError("cannot assign equal or higher role to self")
        _, max_admins = self.get_config()
        if self.get_admin_count() >= max_admins:
            raise ContractError("maximum admin limit reached")

        info = AdminInfo(
            address=new_admin,
            role=role,
            assigned_at=self.env.timestamp,
            assigned_by=caller,
            active=True,
        )
        self._storage[_info_key(new_admin)] = info
        self._storage[_KEY_ADMIN_LIST] = [*self.get_all_admins(), new_admin]
        self._storage[_role_key(role)] = [*self._role_list(role), new_admin]
        self.env.publish(("admin_added",), info)
        return info

    def remove_admin(self, caller: Address, admin_to_remove: Address) -> None:
        """Remove an admin of strictly lower role than ``caller``."""
        self.env.require_auth(caller)
        info = self._load(admin_to_remove)
        self._require_outranks(caller, info, "remove")
        min_admins, _ = self.get_config()
        if info.role is AdminRole.SUPER_ADMIN and len(self._role_list(info.role)) <= min_admins:
            raise ContractError("cannot remove last super admin")

        del self._storage[_info_key(admin_to_remove)]
        self._storage[_KEY_ADMIN_LIST] = [
            a for a in self.get_all_admins() if a != admin_to_remove
        ]
        self._storage[_role_key(info.role)] = [
            a for a in self._role_list(info.role) if a != admin_to_remove
        ]
        self.env.publish(("admin_removed",), info)

    def update_admin_role(
        self, caller: Address, admin_address: Address, new_role: AdminRole
    ) -> AdminInfo:
        """Move an admin to ``new_role`` and return the updated info."""
        new_role = AdminRole(new_role)
        self.env.require_auth(caller)
        info = self._load(admin_address)
        self._require_role_at_least(caller, get_required_role_to_assign(new_role))
        if caller == admin_address and self.get_role(caller) >= new_role:
            raise ContractError("cannot assign equal or higher role to self")

        old_role = info.role
        old_list = self._role_list(old_role)
        if admin_address in old_list:
            remaining = list(old_list)
            remaining.remove(admin_address)
            self._storage[_role_key(old_role)] = remaining
        self._storage[_role_key(new_role)] = [*self._role_list(new_role), admin_address]

        updated = dataclasses.replace(
            info, role=new_role, assigned_at=self.env.timestamp, assigned_by=caller
        )
        self._storage[_info_key(admin_address)] = updated
        self.env.publish(("admin_role_updated",), (admin_address, old_role, new_role))
        return updated

    def deactivate_admin(self, caller: Address, admin_address: Address) -> None:
        """Mark an active admin of lower role as inactive."""
        self.env.require_auth(caller)
        info = self._load(admin_address)
        self._require_outranks(caller, info, "deactivate")
        if not info.active:
            raise ContractError("admin already deactivated")
        updated = dataclasses.replace(info, active=False)
        self._storage[_info_key(admin_address)] = updated
        self.env.publish(("admin_deactivated",), updated)

    def reactivate_admin(self, caller: Address, admin_address: Address) -> None:
        """Mark an inactive admin of lower role as active again."""
        self.env.require_auth(caller)
        info = self._load(admin_address)
        self._require_outranks(caller, info, "reactivate")
        if info.active:
            raise ContractError("admin already active")
        updated = dataclasses.replace(info, active=True)
        self._storage[_info_key(admin_address)] = updated
        self.env.publish(("admin_reactivated",), updated)

    def get_admin_info(self, admin_address: Address) -> AdminInfo:
        """Return the info of an admin."""
        return self._load(admin_address)

    def get_admin_role(self, address: Address) -> AdminRole:
        """Return the role of an admin."""
        return self.get_role(address)

    def is_admin(self, address: Address) -> bool:
        """Whether ``address`` is an active admin."""
        info = self._info(address)
        return info is not None and info.active

    def has_role_at_least(self, address: Address, required_role: AdminRole) -> bool:
        """Whether ``address`` is an active admin with at least ``required_role``."""
        info = self._info(address)
        return info is not None and info.active and info.role >= required_role

    def get_all_admins(self) -> list[Address]:
        """Return every admin address in order of addition."""
        return list(self._storage.get(_KEY_ADMIN_LIST, []))

    def get_admins_by_role(self, role: AdminRole) -> list[Address]:
        """Return the admins holding ``role``."""
        return list(self._role_list(role))

    def get_admin_count(self) -> int:
        """Return the number of admins, active or not."""
        return len(self.get_all_admins())

    def get_active_admin_count(self) -> int:
        """Return the number of active admins."""
        return sum(
            1
            for address in self.get_all_admins()
            if (info := self._info(address)) is not None and info.active
        )

    def get_config(self) -> tuple[int, int]:
        """Return ``(min_admins, max_admins)``."""
        return (
            self._storage.get(_KEY_MIN_ADMINS, DEFAULT_MIN_ADMINS),
            self._storage.get(_KEY_MAX_ADMINS, DEFAULT_MAX_ADMINS),
        )

    def get_role(self, address: Address) -> AdminRole:
        """Return the role of an admin; raise if ``address`` is not one."""
        info = self._info(address)
        if info is None:
            raise ContractError("address is not an admin")
        return info.role