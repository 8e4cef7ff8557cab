"""Penalty for withdrawing before the lock-up period ends.

The penalty is proportional to the remaining lock time and goes to the treasury.
"""

from __future__ import annotations

from credence.env import I128_MAX, I128_MIN, U32_MAX, Address, ContractError, Env

KEY_TREASURY = "treasury"
KEY_PENALTY_BPS = "early_exit_penalty_bps"
MAX_PENALTY_BPS = 10_000

_OVERFLOW = "early exit penalty overflow"
_DIV_BY_ZERO = "early exit penalty div-by-zero"


def _checked(value: int, message: str) -> int:
    if not I128_MIN <= value <= I128_MAX:
        raise ContractError(message)
    return value


def _div(numerator: int, denominator: int, message: str) -> int:
    """Integer division truncating toward zero."""
    if denominator == 0:
        raise ContractError(message)
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator < 0) == (denominator < 0) else -quotient


def get_config(env: Env) -> tuple[Address, int]:
    """Return ``(treasury, penalty_bps)``; raise if either is not set."""
    treasury = env.storage.get(KEY_TREASURY)
    if treasury is None:
        raise ContractError("early exit config not set")
    penalty_bps = env.storage.get(KEY_PENALTY_BPS)
    if penalty_bps is None:
        raise ContractError("early exit penalty bps not set")
    return treasury, penalty_bps


def set_config(env: Env, treasury: Address, penalty_bps: int) -> None:
    """Store the treasury and penalty rate. Admin checks are the caller's job."""
    if not 0 <= penalty_bps <= U32_MAX:
        raise ValueError("penalty_bps out of range")
    if penalty_bps > MAX_PENALTY_BPS:
        raise ContractError("penalty_bps must be <= 10000 (100%)")
    env.storage[KEY_TREASURY] = treasury
    env.storage[KEY_PENALTY_BPS] = penalty_bps


def calculate_penalty(
    amount: int, remaining_time: int, total_duration: int, penalty_bps: int
) -> int:
    """Return ``(amount * penalty_bps / 10000) * remaining_time / total_duration``."""
    if total_duration == 0 or penalty_bps == 0:
        return 0
    base = _div(_checked(amount * penalty_bps, _OVERFLOW), 10_000, _DIV_BY_ZERO)
    scaled = _checked(base * remaining_time, _OVERFLOW)
    return _div(scaled, total_duration, _DIV_BY_ZERO)


def emit_penalty_event(
    env: Env,
    identity: Address,
    withdraw_amount: int,
    penalty_amount: int,
    treasury: Address,
) -> None:
    """Publish the early exit penalty event."""
    env.publish(
        ("early_exit_penalty",),
        (identity, withdraw_amount, penalty_amount, treasury),
    )