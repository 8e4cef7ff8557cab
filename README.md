# credence

`credence` models a trust protocol as a set of contracts that run against an
in-memory ledger. It is a plain Python library with no dependencies outside the
standard library.

## What is in it

- **`credence.env`** has the `Env` environment. It holds the contract storage
  (`env.storage`), the ledger clock (`env.timestamp`, `set_timestamp`,
  `advance`) and the list of published events (`env.events`). It also issues
  fresh addresses (`generate_address`). Every address counts as authorised
  until `revoke_auth` is called for it, and from then on `require_auth` fails
  for that address. A failed check raises `ContractError`, and its `message`
  attribute names the reason, for example `"not admin"` or `"no bond"`.
- **`credence.bond.CredenceBond`** manages a single identity bond:
  - Create a bond with `create_bond` or `create_bond_with_rolling`. Read it
    back with `get_identity_state`.
  - `slash` adds to the slashed amount and caps it at the bonded amount.
  - `extend_duration` lengthens the lock-up. `request_withdrawal` applies to
    rolling bonds.
  - `withdraw_bond`, `slash_bond` and `collect_fees` run under a reentrancy
    lock (`is_locked`). They roll back storage and events if they fail. Each
    one calls the object registered with `set_callback` through its
    `on_withdraw`, `on_slash` or `on_collect` method.
  - Attesters are managed with `register_attester`, `unregister_attester` and
    `is_attester`. Attestations are handled with `add_attestation`,
    `revoke_attestation`, `get_attestation` and `get_subject_attestations`.
  - `deposit_fees` adds to the fee pool. `set_early_exit_config` stores the
    early-exit treasury and penalty rate.
- **`credence.admin.AdminContract`** keeps a role hierarchy of `AdminRole.SUPER_ADMIN`
  over `ADMIN` over `OPERATOR`. It has these operations:
  - `add_admin`, `remove_admin`, `update_admin_role`, `deactivate_admin` and
    `reactivate_admin`.
  - Minimum and maximum admin counts, set in `initialize` and read with
    `get_config`.
  - Queries such as `is_admin`, `has_role_at_least`, `get_admins_by_role` and
    `get_active_admin_count`.

  `get_required_role_to_assign` gives the lowest role that may assign a role.
- **`credence.arbitration.ArbitrationContract`** runs weighted voting on
  disputes. Arbitrators are registered with a positive weight, and each
  arbitrator votes once per dispute during the voting window.
  `resolve_dispute` returns the outcome with the most weight. It returns `0`
  on a tie or when no votes were cast.
- **`credence.governance`** handles slash proposals. It provides
  `initialize_governance`, `propose_slash`, `vote` and `delegate`, plus
  `is_approved`, which checks quorum and a strict majority.
  `execute_slash_if_approved` closes a proposal as `ProposalStatus.EXECUTED`
  or `ProposalStatus.REJECTED`.
- **Helpers** hold small building blocks that work on an `Env`:
  - `credence.access_control` has admin and verifier role checks. A check that
    fails publishes an `access_denied` event.
  - `credence.cooldown` handles the cooldown period and its window checks.
  - `credence.early_exit_penalty` calculates a penalty in proportion to the
    remaining lock time.
  - `credence.fees` calculates the bond creation fee and keeps the fee pool.

## Installation

```
pip install .
```

## Example

```python
from credence.env import ContractError, Env
from credence.admin import AdminContract, AdminRole
from credence.arbitration import ArbitrationContract
from credence.bond import CredenceBond
from credence import governance

env = Env()
root = env.generate_address()

admins = AdminContract(env)
admins.initialize(root, 1, 100)
ops = env.generate_address()
admins.add_admin(root, ops, AdminRole.ADMIN)
assert admins.get_admin_count() == 2

arb = ArbitrationContract(env)
arb.initialize(root)
judge = env.generate_address()
arb.register_arbitrator(judge, 10)
dispute_id = arb.create_dispute(root, "Dispute #1", 3600)
arb.vote(judge, dispute_id, 1)
env.advance(3601)
assert arb.resolve_dispute(dispute_id) == 1

bond_env = Env()
owner, holder = bond_env.generate_address(), bond_env.generate_address()
bonds = CredenceBond(bond_env)
bonds.initialize(owner)
bonds.create_bond(holder, 1000, 86400)
assert bonds.slash(300).slashed_amount == 300
assert bonds.withdraw_bond(holder) == 700
try:
    bonds.withdraw_bond(holder)
except ContractError as err:
    assert err.message == "bond not active"

gov_env = Env()
g1, g2, g3 = (gov_env.generate_address() for _ in range(3))
governance.initialize_governance(gov_env, [g1, g2, g3], 5100, 1)
proposal_id = governance.propose_slash(gov_env, g1, 500)
governance.vote(gov_env, g1, proposal_id, True)
governance.vote(gov_env, g2, proposal_id, True)
assert governance.execute_slash_if_approved(gov_env, proposal_id)
```

## What it does not do

- State lives only in the `Env` object. Nothing is written to disk, and
  nothing is sent over a network.
- The package moves no tokens. Withdrawals, slashes and fee collections
  return amounts, update storage and call the registered callback object, and
  that is all.
- `CredenceBond` holds one bond at a time. It has no top-up or partial
  withdrawal operation, and it has no early withdrawal that charges the
  penalty. `credence.early_exit_penalty` only stores the configuration and
  calculates penalties.
- There is no command-line tool and no server.

## Tests

```
pip install .[test]
pytest
```