"""Bond creation fee: a share of the bonded amount that goes to the treasury."""

from __future__ import annotations

from credence.env import I128_MAX, I128_MIN, U32_MAX, Address, ContractError, Env

KEY_FEE_TREASURY = "fee_treasury"
KEY_FEE_BPS = "fee_bps"
KEY_FEE_POOL = "fees"
MAX_FEE_BPS = 10_000


def _checked(value: int, message: str) -> int:
    if not I128_MIN <= value <= I128_MAX:
        raise ContractError(message)
    return value


def _bps(amount: int, bps: int) -> int:
    product = _checked(amount * bps, "fee calculation overflow")
    quotient = abs(product) // 10_000
    return quotient if product >= 0 else -quotient


def get_config(env: Env) -> tuple[Address | None, int]:
    """Return ``(treasury, fee_bps)``; without configuration the fee is zero."""
    return env.storage.get(KEY_FEE_TREASURY), env.storage.get(KEY_FEE_BPS, 0)


def set_config(env: Env, treasury: Address, fee_bps: int) -> None:
    """Store the treasury and fee rate. Admin checks are the caller's job."""
    if not 0 <= fee_bps <= U32_MAX:
        raise ValueError("fee_bps out of range")
    if fee_bps > MAX_FEE_BPS:
        raise ContractError("fee_bps must be <= 10000")
    env.storage[KEY_FEE_TREASURY] = treasury
    env.storage[KEY_FEE_BPS] = fee_bps


def calculate_fee(env: Env, amount: int) -> tuple[int, int]:
    """Return ``(fee, net)`` for a bond of ``amount``."""
    _, fee_bps = get_config(env)
    if fee_bps == 0 or amount <= 0:
        return 0, amount
    fee = _bps(amount, fee_bps)
    net = _checked(amount - fee, "fee calculation underflow")
    return fee, net


def is_fee_waived(env: Env, amount: int, identity: Address) -> bool:
    """Whether no fee applies to this bond."""
    _, fee_bps = get_config(env)
    return fee_bps == 0 or amount <= 0


def record_fee(
    env: Env, identity: Address, amount: int, fee: int, treasury: Address
) -> None:
    """Add ``fee`` to the contract's fee pool and publish the fee event."""
    if fee <= 0:
        return
    current = env.storage.get(KEY_FEE_POOL, 0)
    env.storage[KEY_FEE_POOL] = _checked(current + fee, "fee pool overflow")
    emit_fee_event(env, identity, amount, fee, treasury)


def emit_fee_event(
    env: Env, identity: Address, bond_amount: int, fee_amount: int, treasury: Address
) -> None:
    """Publish the bond creation fee event."""
    env.publish(
        ("bond_creation_fee",), (identity, bond_amount, fee_amount, treasury)
    )