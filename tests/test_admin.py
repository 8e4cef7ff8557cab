import pytest

from credence.admin import (
    AdminContract,
    AdminInfo,
    AdminRole,
    get_required_role_to_assign,
)
from credence.env import ContractError, Env


def setup_with_limits(min_admins, max_admins):
    env = Env()
    contract = AdminContract(env)
    super_admin = env.generate_address()
    contract.initialize(super_admin, min_admins, max_admins)
    return env, contract, super_admin


def setup_contract():
    return setup_with_limits(1, 100)


def setup_multiple_admins():
    env, contract, super_admin = setup_contract()
    admin = env.generate_address()
    operator = env.generate_address()
    contract.add_admin(super_admin, admin, AdminRole.ADMIN)
    contract.add_admin(admin, operator, AdminRole.OPERATOR)
    return env, contract, super_admin, admin, operator


def test_initialization():
    env, contract, super_admin = setup_contract()
    assert contract.is_admin(super_admin)
    assert contract.get_admin_role(super_admin) == AdminRole.SUPER_ADMIN
    assert contract.get_admin_count() == 1
    assert env.events[-1] == (("admin_initialized",), super_admin)


def test_double_initialization():
    _, contract, super_admin = setup_contract()
    with pytest.raises(ContractError, match="already initialized"):
        contract.initialize(super_admin, 1, 100)


def test_initialize_rejects_min_admins_zero():
    env = Env()
    contract = AdminContract(env)
    with pytest.raises(ContractError, match="min_admins cannot be zero"):
        contract.initialize(env.generate_address(), 0, 100)


def test_initialize_rejects_min_greater_than_max():
    env = Env()
    contract = AdminContract(env)
    with pytest.raises(ContractError, match="min_admins cannot be greater than max_admins"):
        contract.initialize(env.generate_address(), 10, 9)


def test_initialize_requires_auth():
    env = Env()
    contract = AdminContract(env)
    super_admin = env.generate_address()
    env.revoke_auth(super_admin)
    with pytest.raises(ContractError, match="unauthorized"):
        contract.initialize(super_admin, 1, 100)
    assert contract.get_admin_count() == 0


def test_get_config_returns_initialized_values():
    _, contract, _ = setup_with_limits(2, 5)
    assert contract.get_config() == (2, 5)


def test_get_config_defaults_before_initialization():
    assert AdminContract(Env()).get_config() == (1, 100)


def test_add_admin():
    env, contract, super_admin = setup_contract()
    env.set_timestamp(500)
    new_admin = env.generate_address()
    info = contract.add_admin(super_admin, new_admin, AdminRole.ADMIN)
    assert info.address == new_admin
    assert info.role == AdminRole.ADMIN
    assert info.assigned_by == super_admin
    assert info.assigned_at == 500
    assert info.active
    assert env.events[-1] == (("admin_added",), info)


def test_add_admin_rejects_insufficient_privileges():
    env, contract, _, admin, _ = setup_multiple_admins()
    with pytest.raises(ContractError, match="insufficient privileges"):
        contract.add_admin(admin, env.generate_address(), AdminRole.ADMIN)


def test_add_admin_rejects_non_admin_caller():
    env, contract, _ = setup_contract()
    with pytest.raises(ContractError, match="address is not an admin"):
        contract.add_admin(env.generate_address(), env.generate_address(), AdminRole.OPERATOR)


def test_add_admin_rejects_duplicate_admin():
    _, contract, super_admin, admin, _ = setup_multiple_admins()
    with pytest.raises(ContractError, match="address is already an admin"):
        contract.add_admin(super_admin, admin, AdminRole.ADMIN)


def test_add_admin_respects_max_limit():
    env, contract, super_admin = setup_with_limits(1, 2)
    contract.add_admin(super_admin, env.generate_address(), AdminRole.ADMIN)
    with pytest.raises(ContractError, match="maximum admin limit reached"):
        contract.add_admin(super_admin, env.generate_address(), AdminRole.ADMIN)
    assert contract.get_admin_count() == 2


def test_add_admin_rejects_self_add_as_duplicate_admin():
    _, contract, super_admin = setup_contract()
    with pytest.raises(ContractError, match="address is already an admin"):
        contract.add_admin(super_admin, super_admin, AdminRole.SUPER_ADMIN)


def test_remove_admin():
    _, contract, _, admin, operator = setup_multiple_admins()
    contract.remove_admin(admin, operator)
    assert contract.get_admin_count() == 2
    assert operator not in contract.get_all_admins()
    assert contract.get_admins_by_role(AdminRole.OPERATOR) == []
    assert not contract.is_admin(operator)


def test_remove_admin_rejects_non_admin_target():
    env, contract, super_admin = setup_contract()
    with pytest.raises(ContractError, match="admin not found"):
        contract.remove_admin(super_admin, env.generate_address())


def test_remove_admin_rejects_insufficient_privileges():
    _, contract, _, admin, operator = setup_multiple_admins()
    with pytest.raises(ContractError, match="insufficient privileges to remove admin"):
        contract.remove_admin(operator, admin)


def test_remove_admin_rejects_removing_super_admin():
    env, contract, super_admin = setup_with_limits(1, 100)
    other = env.generate_address()
    contract.add_admin(super_admin, other, AdminRole.ADMIN)
    with pytest.raises(ContractError, match="insufficient privileges to remove admin"):
        contract.remove_admin(other, super_admin)


def test_update_admin_role():
    _, contract, super_admin, _, operator = setup_multiple_admins()
    info = contract.update_admin_role(super_admin, operator, AdminRole.ADMIN)
    assert info.role == AdminRole.ADMIN
    assert contract.get_admin_role(operator) == AdminRole.ADMIN


def test_update_admin_role_publishes_event():
    env, contract, super_admin, _, operator = setup_multiple_admins()
    contract.update_admin_role(super_admin, operator, AdminRole.ADMIN)
    assert env.events[-1] == (
        ("admin_role_updated",),
        (operator, AdminRole.OPERATOR, AdminRole.ADMIN),
    )


def test_update_admin_role_rejects_insufficient_privileges():
    _, contract, _, admin, operator = setup_multiple_admins()
    with pytest.raises(ContractError, match="insufficient privileges"):
        contract.update_admin_role(admin, operator, AdminRole.ADMIN)


def test_update_admin_role_rejects_non_admin_target():
    env, contract, super_admin = setup_contract()
    with pytest.raises(ContractError, match="admin not found"):
        contract.update_admin_role(super_admin, env.generate_address(), AdminRole.ADMIN)


def test_update_admin_role_prevents_self_assign_equal_or_higher():
    _, contract, super_admin = setup_contract()
    with pytest.raises(ContractError, match="cannot assign equal or higher role to self"):
        contract.update_admin_role(super_admin, super_admin, AdminRole.SUPER_ADMIN)


def test_update_admin_role_updates_role_lists():
    _, contract, super_admin, _, operator = setup_multiple_admins()
    assert operator in contract.get_admins_by_role(AdminRole.OPERATOR)
    contract.update_admin_role(super_admin, operator, AdminRole.ADMIN)
    assert operator not in contract.get_admins_by_role(AdminRole.OPERATOR)
    assert operator in contract.get_admins_by_role(AdminRole.ADMIN)


def test_deactivate_reactivate_admin():
    _, contract, super_admin, admin, _ = setup_multiple_admins()
    contract.deactivate_admin(super_admin, admin)
    assert not contract.get_admin_info(admin).active
    contract.reactivate_admin(super_admin, admin)
    assert contract.get_admin_info(admin).active


def test_deactivate_admin_rejects_insufficient_privileges():
    _, contract, _, admin, operator = setup_multiple_admins()
    with pytest.raises(ContractError, match="insufficient privileges to deactivate admin"):
        contract.deactivate_admin(operator, admin)


def test_deactivate_admin_rejects_double_deactivate():
    _, contract, super_admin, admin, _ = setup_multiple_admins()
    contract.deactivate_admin(super_admin, admin)
    with pytest.raises(ContractError, match="admin already deactivated"):
        contract.deactivate_admin(super_admin, admin)


def test_reactivate_admin_rejects_insufficient_privileges():
    _, contract, super_admin, admin, operator = setup_multiple_admins()
    contract.deactivate_admin(super_admin, admin)
    with pytest.raises(ContractError, match="insufficient privileges to reactivate admin"):
        contract.reactivate_admin(operator, admin)


def test_reactivate_admin_rejects_when_already_active():
    _, contract, super_admin, admin, _ = setup_multiple_admins()
    with pytest.raises(ContractError, match="admin already active"):
        contract.reactivate_admin(super_admin, admin)


def test_deactivated_admin_not_counted_as_active_and_fails_role_checks():
    _, contract, super_admin, admin, _ = setup_multiple_admins()
    assert contract.get_active_admin_count() == 3
    contract.deactivate_admin(super_admin, admin)
    assert contract.get_active_admin_count() == 2
    assert not contract.is_admin(admin)
    assert not contract.has_role_at_least(admin, AdminRole.OPERATOR)


def test_role_hierarchy():
    _, contract, super_admin, admin, _ = setup_multiple_admins()
    assert AdminRole.SUPER_ADMIN > AdminRole.ADMIN > AdminRole.OPERATOR
    assert contract.has_role_at_least(super_admin, AdminRole.OPERATOR)
    assert not contract.has_role_at_least(admin, AdminRole.SUPER_ADMIN)
    super_admins = contract.get_admins_by_role(AdminRole.SUPER_ADMIN)
    assert super_admins == [super_admin]


def test_has_role_at_least():
    _, contract, super_admin, admin, operator = setup_multiple_admins()
    assert contract.has_role_at_least(super_admin, AdminRole.SUPER_ADMIN)
    assert contract.has_role_at_least(admin, AdminRole.ADMIN)
    assert contract.has_role_at_least(operator, AdminRole.OPERATOR)
    assert not contract.has_role_at_least(operator, AdminRole.ADMIN)


def test_has_role_at_least_false_for_non_admin():
    env, contract, _ = setup_contract()
    assert contract.has_role_at_least(env.generate_address(), AdminRole.OPERATOR) is False


def test_get_all_admins():
    _, contract, super_admin, admin, operator = setup_multiple_admins()
    assert contract.get_all_admins() == [super_admin, admin, operator]


def test_admin_info():
    _, contract, super_admin, admin, _ = setup_multiple_admins()
    info = contract.get_admin_info(admin)
    assert info == AdminInfo(
        address=admin,
        role=AdminRole.ADMIN,
        assigned_at=0,
        assigned_by=super_admin,
        active=True,
    )


def test_get_admin_info_panics_for_non_admin():
    env, contract, _ = setup_contract()
    with pytest.raises(ContractError, match="admin not found"):
        contract.get_admin_info(env.generate_address())


def test_get_admin_role_panics_for_non_admin():
    env, contract, _ = setup_contract()
    with pytest.raises(ContractError, match="address is not an admin"):
        contract.get_admin_role(env.generate_address())


def test_removing_super_admin_respects_minimum():
    env, contract, super_admin = setup_with_limits(2, 100)
    second = env.generate_address()
    contract.add_admin(super_admin, second, AdminRole.SUPER_ADMIN)
    with pytest.raises(ContractError, match="insufficient privileges to remove admin"):
        contract.remove_admin(super_admin, second)
    assert contract.get_admins_by_role(AdminRole.SUPER_ADMIN) == [super_admin, second]


@pytest.mark.parametrize(
    ("role", "required"),
    [
        (AdminRole.SUPER_ADMIN, AdminRole.SUPER_ADMIN),
        (AdminRole.ADMIN, AdminRole.SUPER_ADMIN),
        (AdminRole.OPERATOR, AdminRole.ADMIN),
    ],
)
def test_required_role_to_assign(role, required):
    assert get_required_role_to_assign(role) == required