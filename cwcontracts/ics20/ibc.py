"""IBC entry points of the ICS-20 transfer contract: channels, packets and acks."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field, replace
from typing import Any, Iterable

from cwcontracts.chain import (
    Attribute,
    BankSend,
    Coin,
    Deps,
    Env,
    IbcChannel,
    IbcEndpoint,
    IbcOrder,
    IbcPacket,
    OverflowError,
    Response,
    StdError,
    SubMsg,
    WasmExecute,
    from_binary,
    to_binary,
)
from cwcontracts.ics20.amount import Amount, Cw20Amount, NativeAmount, from_parts
from cwcontracts.ics20.errors import (
    ContractError,
    FromOtherChannel,
    FromOtherPort,
    InsufficientFunds,
    InvalidIbcVersion,
    NoForeignTokens,
    OnlyOrderedChannel,
    UnknownReplyId,
)
from cwcontracts.ics20.messages import (
    CHANNEL_INFO,
    CHANNEL_STATE,
    ChannelInfo,
    ChannelState,
    Ics20Packet,
)

ICS20_VERSION = "ics20-1"
ICS20_ORDERING = IbcOrder.UNORDERED
SEND_TOKEN_ID = 1337

_U128_MAX = 2**128 - 1


@dataclass(frozen=True)
class Ics20Ack:
    """Generic ICS acknowledgement: either a result payload or an error text."""

    result: bytes | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if (self.result is None) == (self.error is None):
            raise ValueError("exactly one of result and error must be set")

    @property
    def is_success(self) -> bool:
        return self.result is not None

    def to_json(self) -> dict[str, Any]:
        if self.result is not None:
            return {"result": base64.b64encode(self.result).decode("ascii")}
        return {"error": self.error}

    def to_binary(self) -> bytes:
        return to_binary(self)

    @classmethod
    def from_binary(cls, data: bytes) -> Ics20Ack:
        raw = from_binary(data)
        if not isinstance(raw, dict) or len(raw) != 1:
            raise StdError("Error parsing into type Ics20Ack: expected one variant")
        (variant, value), = raw.items()
        if variant == "result" and isinstance(value, str):
            try:
                return cls(result=base64.b64decode(value, validate=True))
            except binascii.Error as exc:
                raise StdError(f"Error parsing into type Ics20Ack: {exc}") from exc
        if variant == "error" and isinstance(value, str):
            return cls(error=value)
        raise StdError(f"Error parsing into type Ics20Ack: unknown variant `{variant}`")


@dataclass
class Reply:
    """Outcome of a submessage; error is None when it succeeded."""

    id: int
    error: str | None = None
    data: bytes | None = None


@dataclass
class IbcBasicResponse:
    messages: list[SubMsg] = field(default_factory=list)
    attributes: list[Attribute] = field(default_factory=list)

    def add_message(self, msg: Any) -> IbcBasicResponse:
        self.messages.append(SubMsg(msg))
        return self

    def add_submessage(self, msg: SubMsg) -> IbcBasicResponse:
        self.messages.append(msg)
        return self

    def add_attribute(self, key: str, value: Any) -> IbcBasicResponse:
        self.attributes.append(Attribute(key, value))
        return self

    def add_attributes(self, attributes: Iterable[Attribute]) -> IbcBasicResponse:
        self.attributes.extend(attributes)
        return self


@dataclass
class IbcReceiveResponse(IbcBasicResponse):
    acknowledgement: bytes = b""

    def set_ack(self, ack: bytes) -> IbcReceiveResponse:
        self.acknowledgement = ack
        return self


def ack_success() -> bytes:
    """Serialised success acknowledgement."""
    return Ics20Ack(result=b"1").to_binary()


def ack_fail(err: str) -> bytes:
    """Serialised error acknowledgement."""
    return Ics20Ack(error=err).to_binary()


def reply(deps: Deps, env: Env, reply_msg: Reply) -> Response:
    """Turn a failed token payout into an error acknowledgement."""
    if reply_msg.id != SEND_TOKEN_ID:
        raise UnknownReplyId(reply_msg.id)
    if reply_msg.error is None:
        return Response()
    return Response().set_data(ack_fail(reply_msg.error))


def _enforce_order_and_version(
    channel: IbcChannel, counterparty_version: str | None
) -> None:
    if channel.version != ICS20_VERSION:
        raise InvalidIbcVersion(channel.version)
    if counterparty_version is not None and counterparty_version != ICS20_VERSION:
        raise InvalidIbcVersion(counterparty_version)
    if channel.order != ICS20_ORDERING:
        raise OnlyOrderedChannel()


def ibc_channel_open(
    deps: Deps, env: Env, channel: IbcChannel, counterparty_version: str | None = None
) -> None:
    """Enforce ordering and version constraints on a channel being opened."""
    _enforce_order_and_version(channel, counterparty_version)


def ibc_channel_connect(
    deps: Deps, env: Env, channel: IbcChannel, counterparty_version: str | None = None
) -> IbcBasicResponse:
    """Check the channel once more and record it."""
    _enforce_order_and_version(channel, counterparty_version)
    info = ChannelInfo(
        id=channel.endpoint.channel_id,
        counterparty_endpoint=channel.counterparty_endpoint,
        connection_id=channel.connection_id,
    )
    CHANNEL_INFO.save(deps.storage, info.id, info)
    return IbcBasicResponse()


def parse_voucher_denom(voucher_denom: str, remote_endpoint: IbcEndpoint) -> str:
    """Local denom of a voucher "port/channel/denom" from the expected endpoint."""
    parts = voucher_denom.split("/", 2)
    if len(parts) != 3:
        raise NoForeignTokens()
    port, channel, denom = parts
    if port != remote_endpoint.port_id:
        raise FromOtherPort(port)
    if channel != remote_endpoint.channel_id:
        raise FromOtherChannel(channel)
    return denom


def _do_ibc_packet_receive(deps: Deps, packet: IbcPacket) -> tuple[Ics20Packet, str]:
    msg = Ics20Packet.from_binary(packet.data)
    channel = packet.dest.channel_id
    denom = parse_voucher_denom(msg.denom, packet.src)
    amount = msg.amount

    def reduce(orig: ChannelState | None) -> ChannelState:
        if orig is None or orig.outstanding < amount:
            raise InsufficientFunds()
        return replace(orig, outstanding=orig.outstanding - amount)

    CHANNEL_STATE.update(deps.storage, (channel, denom), reduce)
    return msg, denom


def ibc_packet_receive(deps: Deps, env: Env, packet: IbcPacket) -> IbcReceiveResponse:
    """Pay out returning vouchers; failures become error acknowledgements."""
    try:
        msg, denom = _do_ibc_packet_receive(deps, packet)
    except (ContractError, StdError) as err:
        return (
            IbcReceiveResponse()
            .set_ack(ack_fail(str(err)))
            .add_attributes(
                [
                    Attribute("action", "receive"),
                    Attribute("success", "false"),
                    Attribute("error", str(err)),
                ]
            )
        )
    attributes = [
        Attribute("action", "receive"),
        Attribute("sender", msg.sender),
        Attribute("receiver", msg.receiver),
        Attribute("denom", denom),
        Attribute("amount", msg.amount),
        Attribute("success", "true"),
    ]
    payout = send_amount(from_parts(denom, msg.amount), msg.receiver)
    response = IbcReceiveResponse().set_ack(ack_success())
    response.add_submessage(payout)
    response.add_attributes(attributes)
    return response


def ibc_packet_ack(
    deps: Deps, env: Env, acknowledgement: bytes, original_packet: IbcPacket
) -> IbcBasicResponse:
    """Book a successful send, or return the funds of a failed one."""
    ack = Ics20Ack.from_binary(acknowledgement)
    if ack.is_success:
        return _on_packet_success(deps, original_packet)
    return _on_packet_failure(deps, original_packet, ack.error or "")


def ibc_packet_timeout(deps: Deps, env: Env, packet: IbcPacket) -> IbcBasicResponse:
    """Return the funds of a packet that timed out."""
    return _on_packet_failure(deps, packet, "timeout")


def _on_packet_success(deps: Deps, packet: IbcPacket) -> IbcBasicResponse:
    msg = Ics20Packet.from_binary(packet.data)
    attributes = [
        Attribute("action", "acknowledge"),
        Attribute("sender", msg.sender),
        Attribute("receiver", msg.receiver),
        Attribute("denom", msg.denom),
        Attribute("amount", msg.amount),
        Attribute("success", "true"),
    ]
    amount = msg.amount

    def add(orig: ChannelState | None) -> ChannelState:
        state = orig or ChannelState()
        for current in (state.outstanding, state.total_sent):
            if current + amount > _U128_MAX:
                raise OverflowError("add", current, amount)
        return ChannelState(
            outstanding=state.outstanding + amount,
            total_sent=state.total_sent + amount,
        )

    CHANNEL_STATE.update(deps.storage, (packet.src.channel_id, msg.denom), add)
    return IbcBasicResponse().add_attributes(attributes)


def _on_packet_failure(deps: Deps, packet: IbcPacket, err: str) -> IbcBasicResponse:
    msg = Ics20Packet.from_binary(packet.data)
    attributes = [
        Attribute("action", "acknowledge"),
        Attribute("sender", msg.sender),
        Attribute("receiver", msg.receiver),
        Attribute("denom", msg.denom),
        Attribute("amount", str(msg.amount)),
        Attribute("success", "false"),
        Attribute("error", err),
    ]
    refund = send_amount(from_parts(msg.denom, msg.amount), msg.sender)
    return IbcBasicResponse().add_attributes(attributes).add_submessage(refund)


def send_amount(amount: Amount, recipient: str) -> SubMsg:
    """Submessage paying amount to recipient, replying only on error."""
    if isinstance(amount, NativeAmount):
        bank = BankSend(to_address=recipient, amount=[Coin(amount.denom, amount.amount)])
        return SubMsg.reply_on_error(bank, SEND_TOKEN_ID)
    if isinstance(amount, Cw20Amount):
        transfer = {"transfer": {"recipient": recipient, "amount": str(amount.amount)}}
        execute = WasmExecute(
            contract_addr=amount.address, msg=to_binary(transfer), funds=[]
        )
        return SubMsg.reply_on_error(execute, SEND_TOKEN_ID)
    raise TypeError(f"unsupported amount: {type(amount).__name__}")