"""Identity bonds, attestations, admin roles, arbitration and slashing governance on an in-memory ledger."""

__version__ = "0.1.0"

__all__ = [
    "access_control",
    "admin",
    "arbitration",
    "bond",
    "cooldown",
    "early_exit_penalty",
    "env",
    "fees",
    "governance",
]