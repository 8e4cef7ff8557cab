import pytest

from credence import access_control as ac
from credence.env import ContractError, Env


@pytest.fixture
def setup():
    env = Env()
    admin = env.generate_address()
    ac.set_admin(env, admin)
    return env, admin


def test_get_admin_returns_stored(setup):
    env, admin = setup
    assert ac.get_admin(env) == admin


def test_get_admin_uninitialized():
    with pytest.raises(ContractError, match="not initialized"):
        ac.get_admin(Env())


def test_require_admin_accepts_admin(setup):
    env, admin = setup
    ac.require_admin(env, admin)
    assert env.events == []


def test_require_admin_rejects_other_and_emits_event(setup):
    env, _admin = setup
    other = env.generate_address()
    with pytest.raises(ContractError, match="not admin"):
        ac.require_admin(env, other)
    assert env.events == [(("access_denied",), (other, "admin", 1))]


def test_require_admin_uninitialized_emits_event():
    env = Env()
    caller = env.generate_address()
    with pytest.raises(ContractError, match="not initialized"):
        ac.require_admin(env, caller)
    assert env.events[-1][1][2] == ac.AccessError.NOT_INITIALIZED


def test_verifier_add_and_remove(setup):
    env, admin = setup
    verifier = env.generate_address()
    assert not ac.is_verifier(env, verifier)
    ac.add_verifier_role(env, admin, verifier)
    assert ac.is_verifier(env, verifier)
    ac.require_verifier(env, verifier)
    assert env.events[-1] == (("verifier_added",), (verifier,))
    ac.remove_verifier_role(env, admin, verifier)
    assert not ac.is_verifier(env, verifier)
    assert env.events[-1] == (("verifier_removed",), (verifier,))


def test_require_verifier_rejects(setup):
    env, _admin = setup
    stranger = env.generate_address()
    with pytest.raises(ContractError, match="not verifier"):
        ac.require_verifier(env, stranger)
    assert env.events[-1] == (("access_denied",), (stranger, "verifier", 2))


def test_add_verifier_requires_admin(setup):
    env, _admin = setup
    other = env.generate_address()
    verifier = env.generate_address()
    with pytest.raises(ContractError, match="not admin"):
        ac.add_verifier_role(env, other, verifier)
    assert not ac.is_verifier(env, verifier)


def test_require_identity_owner(setup):
    env, _admin = setup
    owner = env.generate_address()
    other = env.generate_address()
    ac.require_identity_owner(env, owner, owner)
    with pytest.raises(ContractError, match="not identity owner"):
        ac.require_identity_owner(env, other, owner)
    assert env.events[-1] == (("access_denied",), (other, "identity_owner", 3))


def test_require_admin_or_verifier(setup):
    env, admin = setup
    verifier = env.generate_address()
    stranger = env.generate_address()
    ac.add_verifier_role(env, admin, verifier)
    ac.require_admin_or_verifier(env, admin)
    ac.require_admin_or_verifier(env, verifier)
    with pytest.raises(ContractError, match="not authorized"):
        ac.require_admin_or_verifier(env, stranger)
    assert env.events[-1] == (("access_denied",), (stranger, "admin_or_verifier", 2))


def test_is_admin(setup):
    env, admin = setup
    assert ac.is_admin(env, admin)
    assert not ac.is_admin(env, env.generate_address())
    assert not ac.is_admin(Env(), admin)