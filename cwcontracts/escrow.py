"""Escrow contract data: errors, messages and stored state."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable

from cwcontracts.chain import (
    Coin,
    Cw20Coin,
    Env,
    Map,
    MemoryStorage,
    Timestamp,
    addr_validate,
)


class ContractError(Exception):
    """Base class for escrow contract errors."""

    message = "Escrow contract error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class Unauthorized(ContractError):
    message = "Unauthorized"


class NotInWhitelist(ContractError):
    message = "Only accepts tokens in the cw20_whitelist"


class Expired(ContractError):
    message = "Escrow is expired"


class EmptyBalance(ContractError):
    message = "Send some coins to create an escrow"


class AlreadyInUse(ContractError):
    message = "Escrow id already in use"


@dataclass
class CreateMsg:
    """Request to open a new escrow."""

    id: str
    arbiter: str
    recipient: str
    end_height: int | None = None
    end_time: int | None = None
    cw20_whitelist: list[str] | None = None

    def addr_whitelist(self) -> list[str]:
        """Validated addresses of the accepted cw20 tokens."""
        if self.cw20_whitelist is None:
            return []
        return [addr_validate(address) for address in self.cw20_whitelist]


def is_valid_name(name: str) -> bool:
    """An escrow id must be 3 to 20 bytes of UTF-8."""
    return 3 <= len(name.encode("utf-8")) <= 20


@dataclass
class ListResponse:
    escrows: list[str]


@dataclass
class DetailsResponse:
    id: str
    arbiter: str
    recipient: str
    source: str
    end_height: int | None = None
    end_time: int | None = None
    native_balance: list[Coin] = field(default_factory=list)
    cw20_balance: list[Cw20Coin] = field(default_factory=list)
    cw20_whitelist: list[str] = field(default_factory=list)


@dataclass
class GenericBalance:
    """Native and cw20 tokens held together."""

    native: list[Coin] = field(default_factory=list)
    cw20: list[Cw20Coin] = field(default_factory=list)

    def add_tokens(self, add: Cw20Coin | Coin | Iterable[Coin]) -> None:
        """Merge a cw20 coin or a batch of native coins into the balance."""
        if isinstance(add, Cw20Coin):
            self._merge(self.cw20, add, "address")
            return
        tokens = [add] if isinstance(add, Coin) else add
        for token in tokens:
            self._merge(self.native, token, "denom")

    @staticmethod
    def _merge(held: list, token: Coin | Cw20Coin, attr: str) -> None:
        for idx, existing in enumerate(held):
            if getattr(existing, attr) == getattr(token, attr):
                held[idx] = replace(existing, amount=existing.amount + token.amount)
                return
        held.append(replace(token))


@dataclass
class Escrow:
    arbiter: str
    recipient: str
    source: str
    end_height: int | None = None
    end_time: int | None = None
    balance: GenericBalance = field(default_factory=GenericBalance)
    cw20_whitelist: list[str] = field(default_factory=list)

    def is_expired(self, env: Env) -> bool:
        if self.end_height is not None and env.block.height > self.end_height:
            return True
        if self.end_time is not None and env.block.time > Timestamp.from_seconds(
            self.end_time
        ):
            return True
        return False

    def human_whitelist(self) -> list[str]:
        return list(self.cw20_whitelist)


ESCROWS = Map("escrow", kind="cw20_escrow::state::Escrow")


def all_escrow_ids(storage: MemoryStorage) -> list[str]:
    """Ids of all registered escrows, in ascending order."""
    return ESCROWS.keys(storage)