"""Exception types raised by the Salvo core."""

from __future__ import annotations


class DomainError(RuntimeError):
    """Corrupted state or a logic bug; the operation cannot continue."""


class RejectedOperation(ValueError):
    """An operation refused before anything was mutated."""


class InsufficientFundsError(RejectedOperation):
    def __init__(self, cash: int, amount: int) -> None:
        super().__init__(
            f"spend_money: we only have ${cash}, but we're trying to spend ${amount}"
        )
        self.cash = cash
        self.amount = amount


class OutOfAmmoError(RejectedOperation):
    def __init__(self, weapon_name: str) -> None:
        super().__init__(f"No {weapon_name} left to fire")
        self.weapon_name = weapon_name


__all__ = [
    "DomainError",
    "InsufficientFundsError",
    "OutOfAmmoError",
    "RejectedOperation",
]
