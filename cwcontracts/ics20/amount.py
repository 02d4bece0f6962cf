"""Token amounts that are either native coins or cw20 tokens."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from cwcontracts.ics20.errors import AmountOverflow

_CW20_PREFIX = "cw20:"
_U64_MAX = 2**64 - 1


def _u64(amount: int) -> int:
    if amount > _U64_MAX or amount < 0:
        raise AmountOverflow()
    return amount


@dataclass
class NativeAmount:
    """An amount of a native coin."""

    denom: str
    amount: int

    def u64_amount(self) -> int:
        """The amount, checked to fit into 64 bits."""
        return _u64(self.amount)

    def is_empty(self) -> bool:
        return self.amount == 0

    def to_json(self) -> dict[str, Any]:
        return {"native": {"denom": self.denom, "amount": str(self.amount)}}


@dataclass
class Cw20Amount:
    """An amount of a cw20 token, identified by its contract address."""

    address: str
    amount: int

    @property
    def denom(self) -> str:
        return f"{_CW20_PREFIX}{self.address}"

    def u64_amount(self) -> int:
        """The amount, checked to fit into 64 bits."""
        return _u64(self.amount)

    def is_empty(self) -> bool:
        return self.amount == 0

    def to_json(self) -> dict[str, Any]:
        return {"cw20": {"address": self.address, "amount": str(self.amount)}}


Amount = Union[NativeAmount, Cw20Amount]


def from_parts(denom: str, amount: int) -> Amount:
    """Build an amount from a denom, where "cw20:<address>" names a cw20 token."""
    if denom.startswith(_CW20_PREFIX):
        return Cw20Amount(denom[len(_CW20_PREFIX):], amount)
    return NativeAmount(denom, amount)


def cw20(amount: int, address: str) -> Cw20Amount:
    return Cw20Amount(address, amount)


def native(amount: int, denom: str) -> NativeAmount:
    return NativeAmount(denom, amount)