"""Execution environment shared by the contracts: storage, events, clock and auth."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Hashable

U64_MAX = 2**64 - 1
U32_MAX = 2**32 - 1
I128_MAX = 2**127 - 1
I128_MIN = -(2**127)


class ContractError(Exception):
    """Raised when a contract call aborts; the message names the reason."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True, order=True)
class Address:
    """An opaque account or contract address."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass
class Env:
    """In-memory ledger environment.

    ``storage`` is the instance storage of the contract running in this
    environment; ``events`` holds every published ``(topics, data)`` pair in
    order. Every address is authorised unless its authorisation is revoked.
    """

    timestamp: int = 0
    storage: dict[Hashable, Any] = field(default_factory=dict)
    events: list[tuple[tuple[Any, ...], Any]] = field(default_factory=list)
    _revoked: set[Address] = field(default_factory=set, repr=False)
    _counter: itertools.count = field(default_factory=itertools.count, repr=False)

    def generate_address(self) -> Address:
        """Return a fresh address, distinct from every earlier one."""
        return Address(f"G{next(self._counter):055d}")

    def require_auth(self, address: Address) -> None:
        """Check that ``address`` authorised the current call."""
        if address in self._revoked:
            raise ContractError("unauthorized")

    def revoke_auth(self, address: Address) -> None:
        """Make later authorisation checks for ``address`` fail."""
        self._revoked.add(address)

    def publish(self, topics: Any, data: Any) -> None:
        """Record an event with the given topics and data."""
        if not isinstance(topics, tuple):
            topics = (topics,)
        self.events.append((topics, data))

    def set_timestamp(self, timestamp: int) -> None:
        """Set the ledger clock, in seconds."""
        if not 0 <= timestamp <= U64_MAX:
            raise ValueError("timestamp out of range")
        self.timestamp = timestamp

    def advance(self, seconds: int) -> None:
        """Move the ledger clock forward by ``seconds``."""
        if seconds < 0:
            raise ValueError("cannot move the clock backwards")
        self.set_timestamp(self.timestamp + seconds)