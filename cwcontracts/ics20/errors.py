"""Errors raised by the ICS-20 transfer contract."""

from __future__ import annotations


class ContractError(Exception):
    """Base class for ICS-20 contract errors."""

    message = "ICS-20 contract error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class NoSuchChannel(ContractError):
    def __init__(self, id: str) -> None:  # noqa: A002 - field name of the error
        self.id = id
        super().__init__(f"Channel doesn't exist: {id}")


class NoFunds(ContractError):
    message = "Didn't send any funds"


class AmountOverflow(ContractError):
    message = "Amount larger than 2**64, not supported by ics20 packets"


class InvalidIbcVersion(ContractError):
    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(
            f"Only supports channel with ibc version ics20-1, got {version}"
        )


class OnlyOrderedChannel(ContractError):
    message = "Only supports unordered channel"


class InsufficientFunds(ContractError):
    message = "Insufficient funds to redeem voucher on channel"


class NoForeignTokens(ContractError):
    message = (
        "Only accepts tokens that originate on this chain, "
        "not native tokens of remote chain"
    )


class FromOtherPort(ContractError):
    def __init__(self, port: str) -> None:
        self.port = port
        super().__init__(f"Parsed port from denom ({port}) doesn't match packet")


class FromOtherChannel(ContractError):
    def __init__(self, channel: str) -> None:
        self.channel = channel
        super().__init__(
            f"Parsed channel from denom ({channel}) doesn't match packet"
        )


class CannotMigrate(ContractError):
    def __init__(self, previous_contract: str) -> None:
        self.previous_contract = previous_contract
        super().__init__(
            f"Cannot migrate from different contract type: {previous_contract}"
        )


class UnknownReplyId(ContractError):
    def __init__(self, id: int) -> None:  # noqa: A002 - field name of the error
        self.id = id
        super().__init__(f"Got a submessage reply with unknown id: {id}")