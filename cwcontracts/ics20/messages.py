"""Messages, responses and stored state of the ICS-20 transfer contract."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from cwcontracts.chain import IbcEndpoint, Item, Map, StdError, from_binary, to_binary
from cwcontracts.ics20.amount import Amount
from cwcontracts.ics20.errors import AmountOverflow

_U64_MAX = 2**64 - 1
_U128_MAX = 2**128 - 1


@dataclass
class ChannelState:
    """Balance of one denom on one channel."""

    outstanding: int = 0
    total_sent: int = 0

    def to_json(self) -> dict[str, Any]:
        return {"outstanding": str(self.outstanding), "total_sent": str(self.total_sent)}


@dataclass
class Config:
    default_timeout: int = 0


@dataclass
class ChannelInfo:
    """Static information on a connected channel."""

    id: str
    counterparty_endpoint: IbcEndpoint
    connection_id: str


CONFIG = Item("ics20_config", kind="cw20_ics20::state::Config")
CHANNEL_INFO = Map("channel_info", kind="cw20_ics20::state::ChannelInfo")
CHANNEL_STATE = Map("channel_state", kind="cw20_ics20::state::ChannelState")


@dataclass
class InitMsg:
    """Default timeout for packets, in seconds."""

    default_timeout: int


@dataclass
class MigrateMsg:
    pass


@dataclass
class TransferMsg:
    """Where to send tokens, and for how many seconds the packet lives."""

    channel: str
    remote_address: str
    timeout: int | None = None


@dataclass
class PortQuery:
    pass


@dataclass
class ListChannelsQuery:
    pass


@dataclass
class ChannelQuery:
    id: str


@dataclass
class ListChannelsResponse:
    channels: list[ChannelInfo] = field(default_factory=list)


@dataclass
class ChannelResponse:
    info: ChannelInfo
    balances: list[Amount] = field(default_factory=list)
    total_sent: list[Amount] = field(default_factory=list)


@dataclass
class PortResponse:
    port_id: str


_PACKET_FIELDS = ("amount", "denom", "receiver", "sender")


@dataclass
class Ics20Packet:
    """The JSON packet exchanged for an ICS-20 token transfer."""

    amount: int = 0
    denom: str = ""
    receiver: str = ""
    sender: str = ""

    def validate(self) -> None:
        """Raise AmountOverflow if the amount does not fit into 64 bits."""
        if self.amount > _U64_MAX:
            raise AmountOverflow()

    def to_json(self) -> dict[str, Any]:
        return {
            "amount": str(self.amount),
            "denom": self.denom,
            "receiver": self.receiver,
            "sender": self.sender,
        }

    def to_binary(self) -> bytes:
        return to_binary(self)

    @classmethod
    def from_binary(cls, data: bytes) -> Ics20Packet:
        raw = from_binary(data)
        if not isinstance(raw, dict):
            raise StdError("Error parsing into type Ics20Packet: expected an object")
        missing = [name for name in _PACKET_FIELDS if name not in raw]
        if missing:
            raise StdError(f"Error parsing into type Ics20Packet: missing field `{missing[0]}`")
        amount = raw["amount"]
        if not isinstance(amount, str) or not amount.isdigit() or int(amount) > _U128_MAX:
            raise StdError("Error parsing into type Ics20Packet: invalid amount")
        for name in ("denom", "receiver", "sender"):
            if not isinstance(raw[name], str):
                raise StdError(f"Error parsing into type Ics20Packet: invalid {name}")
        return cls(int(amount), raw["denom"], raw["receiver"], raw["sender"])