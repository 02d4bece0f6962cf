"""Entry points of the ICS-20 transfer contract: setup, transfers and queries."""

from __future__ import annotations

from typing import Any

from cwcontracts.chain import (
    Cw20ReceiveMsg,
    Deps,
    Env,
    IbcSendPacket,
    MessageInfo,
    Response,
    StdError,
    addr_validate,
    from_binary,
    get_contract_version,
    nonpayable,
    one_coin,
    set_contract_version,
    to_binary,
)
from cwcontracts.ics20.amount import Amount, Cw20Amount, NativeAmount, from_parts
from cwcontracts.ics20.errors import CannotMigrate, NoFunds, NoSuchChannel
from cwcontracts.ics20.messages import (
    CHANNEL_INFO,
    CHANNEL_STATE,
    CONFIG,
    ChannelQuery,
    ChannelResponse,
    Config,
    Ics20Packet,
    InitMsg,
    ListChannelsQuery,
    ListChannelsResponse,
    MigrateMsg,
    PortQuery,
    PortResponse,
    TransferMsg,
)

CONTRACT_NAME = "crates.io:cw20-ics20"
CONTRACT_VERSION = "0.8.0"


def _parse_transfer_msg(data: bytes) -> TransferMsg:
    raw = from_binary(data)
    if not isinstance(raw, dict):
        raise StdError("Error parsing into type TransferMsg: expected an object")
    for name in ("channel", "remote_address"):
        if name not in raw:
            raise StdError(f"Error parsing into type TransferMsg: missing field `{name}`")
        if not isinstance(raw[name], str):
            raise StdError(f"Error parsing into type TransferMsg: invalid {name}")
    timeout = raw.get("timeout")
    if timeout is not None and (
        isinstance(timeout, bool) or not isinstance(timeout, int) or timeout < 0
    ):
        raise StdError("Error parsing into type TransferMsg: invalid timeout")
    return TransferMsg(raw["channel"], raw["remote_address"], timeout)


def instantiate(deps: Deps, env: Env, info: MessageInfo, msg: InitMsg) -> Response:
    """Record the contract version and the default packet timeout."""
    set_contract_version(deps.storage, CONTRACT_NAME, CONTRACT_VERSION)
    CONFIG.save(deps.storage, Config(default_timeout=msg.default_timeout))
    return Response()


def execute(deps: Deps, env: Env, info: MessageInfo, msg: Any) -> Response:
    """Dispatch a cw20 receive hook or a native token transfer."""
    if isinstance(msg, Cw20ReceiveMsg):
        return execute_receive(deps, env, info, msg)
    if isinstance(msg, TransferMsg):
        coin = one_coin(info)
        return execute_transfer(
            deps, env, msg, NativeAmount(coin.denom, coin.amount), info.sender
        )
    raise TypeError(f"unsupported execute message: {type(msg).__name__}")


def execute_receive(
    deps: Deps, env: Env, info: MessageInfo, wrapper: Cw20ReceiveMsg
) -> Response:
    """Handle cw20 tokens sent to this contract with an embedded TransferMsg."""
    nonpayable(info)
    msg = _parse_transfer_msg(wrapper.msg)
    amount = Cw20Amount(info.sender, wrapper.amount)
    return execute_transfer(deps, env, msg, amount, addr_validate(wrapper.sender))


def execute_transfer(
    deps: Deps, env: Env, msg: TransferMsg, amount: Amount, sender: str
) -> Response:
    """Send an ICS-20 packet moving amount over the requested channel."""
    if amount.is_empty():
        raise NoFunds()
    if not CHANNEL_INFO.has(deps.storage, msg.channel):
        raise NoSuchChannel(msg.channel)

    timeout_delta = (
        msg.timeout
        if msg.timeout is not None
        else CONFIG.load(deps.storage).default_timeout
    )
    timeout = env.block.time.plus_seconds(timeout_delta)

    packet = Ics20Packet(
        amount=amount.amount,
        denom=amount.denom,
        receiver=msg.remote_address,
        sender=sender,
    )
    packet.validate()

    send = IbcSendPacket(channel_id=msg.channel, data=packet.to_binary(), timeout=timeout)
    # Local balances are only updated once the packet is acknowledged.
    return (
        Response()
        .add_message(send)
        .add_attribute("action", "transfer")
        .add_attribute("sender", packet.sender)
        .add_attribute("receiver", packet.receiver)
        .add_attribute("denom", packet.denom)
        .add_attribute("amount", str(packet.amount))
    )


def migrate(deps: Deps, env: Env, msg: MigrateMsg) -> Response:
    """Allow migration only from a contract of the same type."""
    version = get_contract_version(deps.storage)
    if version.contract != CONTRACT_NAME:
        raise CannotMigrate(version.contract)
    return Response()


def query(deps: Deps, env: Env, msg: Any) -> bytes:
    """Answer a query with its JSON-encoded response."""
    if isinstance(msg, PortQuery):
        return to_binary(query_port(deps))
    if isinstance(msg, ListChannelsQuery):
        return to_binary(query_list(deps))
    if isinstance(msg, ChannelQuery):
        return to_binary(query_channel(deps, msg.id))
    raise TypeError(f"unsupported query message: {type(msg).__name__}")


def query_port(deps: Deps) -> PortResponse:
    return PortResponse(port_id=deps.querier.query_port_id())


def query_list(deps: Deps) -> ListChannelsResponse:
    return ListChannelsResponse(
        channels=[info for _, info in CHANNEL_INFO.items(deps.storage)]
    )


def query_channel(deps: Deps, channel_id: str) -> ChannelResponse:
    """Channel information with outstanding and total sent amounts per denom."""
    info = CHANNEL_INFO.load(deps.storage, channel_id)
    entries = CHANNEL_STATE.prefix_items(deps.storage, channel_id)
    balances = [from_parts(denom, state.outstanding) for denom, state in entries]
    total_sent = [from_parts(denom, state.total_sent) for denom, state in entries]
    return ChannelResponse(info=info, balances=balances, total_sent=total_sent)