"""Cooldown window between a withdrawal request and its execution.

The admin sets a cooldown period. A bond holder signals intent to withdraw,
and may execute the withdrawal once the period has elapsed. The request can
be cancelled at any point before execution.
"""

from __future__ import annotations

from credence.env import U64_MAX, Address, Env

KEY_COOLDOWN_PERIOD = "cooldown_period"


def set_cooldown_period(env: Env, period: int) -> None:
    """Store the cooldown period in seconds. Admin checks are the caller's job."""
    if not 0 <= period <= U64_MAX:
        raise ValueError("cooldown period out of range")
    env.storage[KEY_COOLDOWN_PERIOD] = period


def get_cooldown_period(env: Env) -> int:
    """Return the configured cooldown period, or 0 if none is set."""
    return env.storage.get(KEY_COOLDOWN_PERIOD, 0)


def _window_end(request_time: int, cooldown_period: int) -> int:
    return min(request_time + cooldown_period, U64_MAX)


def is_cooldown_active(now: int, request_time: int, cooldown_period: int) -> bool:
    """Whether the window is still running; a request time of 0 means no request."""
    if request_time == 0:
        return False
    return now < _window_end(request_time, cooldown_period)


def can_withdraw(now: int, request_time: int, cooldown_period: int) -> bool:
    """Whether a request exists and its cooldown has fully elapsed."""
    if request_time == 0:
        return False
    return now >= _window_end(request_time, cooldown_period)


def emit_cooldown_requested(env: Env, requester: Address, amount: int) -> None:
    """Publish the event for a cooldown withdrawal request."""
    env.publish(("cooldown_requested",), (requester, amount))


def emit_cooldown_executed(env: Env, requester: Address, amount: int) -> None:
    """Publish the event for an executed cooldown withdrawal."""
    env.publish(("cooldown_executed",), (requester, amount))


def emit_cooldown_cancelled(env: Env, requester: Address) -> None:
    """Publish the event for a cancelled cooldown withdrawal."""
    env.publish(("cooldown_cancelled",), requester)


def emit_cooldown_period_updated(env: Env, old_period: int, new_period: int) -> None:
    """Publish the event for a change of the cooldown period."""
    env.publish(("cooldown_period_updated",), (old_period, new_period))