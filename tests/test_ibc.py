import pytest

from cwcontracts.chain import (
    BankSend,
    Coin,
    IbcChannel,
    IbcEndpoint,
    IbcOrder,
    IbcPacket,
    StdError,
    SubMsg,
    Timestamp,
    WasmExecute,
    mock_dependencies,
    mock_env,
    mock_info,
)
from cwcontracts.ics20.amount import cw20, native
from cwcontracts.ics20.contract import instantiate, query_channel
from cwcontracts.ics20.errors import (
    FromOtherChannel,
    FromOtherPort,
    InsufficientFunds,
    InvalidIbcVersion,
    NoForeignTokens,
    OnlyOrderedChannel,
    UnknownReplyId,
)
from cwcontracts.ics20.ibc import (
    ICS20_ORDERING,
    ICS20_VERSION,
    Ics20Ack,
    Reply,
    ack_fail,
    ack_success,
    ibc_channel_connect,
    ibc_channel_open,
    ibc_packet_ack,
    ibc_packet_receive,
    ibc_packet_timeout,
    parse_voucher_denom,
    reply,
    send_amount,
)
from cwcontracts.ics20.messages import ChannelInfo, Ics20Packet, InitMsg

DEFAULT_TIMEOUT = 3600
CONTRACT_PORT = "ibc:wasm1234567890abcdef"
REMOTE_PORT = "transfer"
CONNECTION_ID = "connection-2"


def mock_channel(channel_id, order=ICS20_ORDERING, version=ICS20_VERSION):
    return IbcChannel(
        endpoint=IbcEndpoint(CONTRACT_PORT, channel_id),
        counterparty_endpoint=IbcEndpoint(REMOTE_PORT, f"{channel_id}5"),
        order=order,
        version=version,
        connection_id=CONNECTION_ID,
    )


def mock_channel_info(channel_id):
    return ChannelInfo(
        id=channel_id,
        counterparty_endpoint=IbcEndpoint(REMOTE_PORT, f"{channel_id}5"),
        connection_id=CONNECTION_ID,
    )


def add_channel(deps, channel_id):
    channel = mock_channel(channel_id)
    ibc_channel_open(deps, mock_env(), channel, None)
    ibc_channel_connect(deps, mock_env(), channel, ICS20_VERSION)


def setup(channels):
    deps = mock_dependencies()
    res = instantiate(deps, mock_env(), mock_info("anyone"), InitMsg(DEFAULT_TIMEOUT))
    assert res.messages == []
    for channel in channels:
        add_channel(deps, channel)
    return deps


def mock_sent_packet(my_channel, amount, denom, sender):
    data = Ics20Packet(amount=amount, denom=denom, sender=sender, receiver="remote-rcpt")
    return IbcPacket(
        data=data.to_binary(),
        src=IbcEndpoint(CONTRACT_PORT, my_channel),
        dest=IbcEndpoint(REMOTE_PORT, "channel-1234"),
        sequence=2,
        timeout=Timestamp.from_seconds(1665321069),
    )


def mock_receive_packet(my_channel, amount, denom, receiver):
    data = Ics20Packet(
        amount=amount,
        denom=f"{REMOTE_PORT}/channel-1234/{denom}",
        sender="remote-sender",
        receiver=receiver,
    )
    return IbcPacket(
        data=data.to_binary(),
        src=IbcEndpoint(REMOTE_PORT, "channel-1234"),
        dest=IbcEndpoint(CONTRACT_PORT, my_channel),
        sequence=3,
        timeout=Timestamp.from_seconds(1665321069),
    )


def test_check_ack_json():
    assert Ics20Ack(result=b"1").to_binary() == b'{"result":"MQ=="}'
    assert Ics20Ack(error="bad coin").to_binary() == b'{"error":"bad coin"}'


def test_check_packet_json():
    packet = Ics20Packet(
        amount=12345,
        denom="ucosm",
        sender="cosmos1zedxv25ah8fksmg2lzrndrpkvsjqgk4zt5ff7n",
        receiver="wasm1fucynrfkrt684pm8jrt8la5h2csvs5cnldcgqc",
    )
    expected = (
        b'{"amount":"12345","denom":"ucosm",'
        b'"receiver":"wasm1fucynrfkrt684pm8jrt8la5h2csvs5cnldcgqc",'
        b'"sender":"cosmos1zedxv25ah8fksmg2lzrndrpkvsjqgk4zt5ff7n"}'
    )
    assert packet.to_binary() == expected


def test_ack_round_trip():
    assert Ics20Ack.from_binary(ack_success()) == Ics20Ack(result=b"1")
    assert Ics20Ack.from_binary(ack_fail("oops")) == Ics20Ack(error="oops")


@pytest.mark.parametrize(
    "data", [b'{"other":"x"}', b'{"result":"!!"}', b"[]", b'{"result":"MQ==","error":"x"}']
)
def test_ack_from_binary_rejects_invalid(data):
    with pytest.raises(StdError):
        Ics20Ack.from_binary(data)


def test_ack_needs_exactly_one_variant():
    with pytest.raises(ValueError):
        Ics20Ack()


def test_send_receive_cw20():
    send_channel = "channel-9"
    deps = setup(["channel-1", "channel-7", send_channel])
    cw20_addr = "token-addr"
    cw20_denom = "cw20:token-addr"

    sent_packet = mock_sent_packet(send_channel, 987654321, cw20_denom, "local-sender")
    recv_packet = mock_receive_packet(send_channel, 876543210, cw20_denom, "local-rcpt")
    recv_high_packet = mock_receive_packet(send_channel, 1876543210, cw20_denom, "local-rcpt")

    res = ibc_packet_receive(deps, mock_env(), recv_packet)
    assert res.messages == []
    no_funds = Ics20Ack(error=str(InsufficientFunds()))
    assert Ics20Ack.from_binary(res.acknowledgement) == no_funds

    res = ibc_packet_ack(deps, mock_env(), ack_success(), sent_packet)
    assert res.messages == []

    state = query_channel(deps, send_channel)
    assert state.balances == [cw20(987654321, cw20_addr)]
    assert state.total_sent == [cw20(987654321, cw20_addr)]

    res = ibc_packet_receive(deps, mock_env(), recv_high_packet)
    assert res.messages == []
    assert Ics20Ack.from_binary(res.acknowledgement) == no_funds

    res = ibc_packet_receive(deps, mock_env(), recv_packet)
    assert len(res.messages) == 1
    expected = SubMsg.reply_on_error(
        WasmExecute(
            contract_addr=cw20_addr,
            msg=b'{"transfer":{"recipient":"local-rcpt","amount":"876543210"}}',
            funds=[],
        ),
        1337,
    )
    assert res.messages[0] == expected
    assert Ics20Ack.from_binary(res.acknowledgement) == Ics20Ack(result=b"1")

    state = query_channel(deps, send_channel)
    assert state.balances == [cw20(111111111, cw20_addr)]
    assert state.total_sent == [cw20(987654321, cw20_addr)]


def test_send_receive_native():
    send_channel = "channel-9"
    deps = setup(["channel-1", "channel-7", send_channel])
    denom = "uatom"

    sent_packet = mock_sent_packet(send_channel, 987654321, denom, "local-sender")
    recv_packet = mock_receive_packet(send_channel, 876543210, denom, "local-rcpt")
    recv_high_packet = mock_receive_packet(send_channel, 1876543210, denom, "local-rcpt")

    res = ibc_packet_receive(deps, mock_env(), recv_packet)
    assert res.messages == []
    no_funds = Ics20Ack(error=str(InsufficientFunds()))
    assert Ics20Ack.from_binary(res.acknowledgement) == no_funds

    res = ibc_packet_ack(deps, mock_env(), ack_success(), sent_packet)
    assert res.messages == []

    state = query_channel(deps, send_channel)
    assert state.balances == [native(987654321, denom)]
    assert state.total_sent == [native(987654321, denom)]

    res = ibc_packet_receive(deps, mock_env(), recv_high_packet)
    assert res.messages == []
    assert Ics20Ack.from_binary(res.acknowledgement) == no_funds

    res = ibc_packet_receive(deps, mock_env(), recv_packet)
    assert len(res.messages) == 1
    expected = SubMsg.reply_on_error(
        BankSend(to_address="local-rcpt", amount=[Coin(denom, 876543210)]), 1337
    )
    assert res.messages[0] == expected
    assert Ics20Ack.from_binary(res.acknowledgement) == Ics20Ack(result=b"1")
    assert ("success", "true") in [(a.key, a.value) for a in res.attributes]

    state = query_channel(deps, send_channel)
    assert state.balances == [native(111111111, denom)]
    assert state.total_sent == [native(987654321, denom)]


def test_receive_foreign_token_is_rejected_with_ack():
    deps = setup(["channel-9"])
    data = Ics20Packet(amount=5, denom="ucosm", sender="remote-sender", receiver="local")
    packet = IbcPacket(
        data=data.to_binary(),
        src=IbcEndpoint(REMOTE_PORT, "channel-1234"),
        dest=IbcEndpoint(CONTRACT_PORT, "channel-9"),
        sequence=1,
        timeout=Timestamp.from_seconds(1665321069),
    )
    res = ibc_packet_receive(deps, mock_env(), packet)
    assert res.messages == []
    assert Ics20Ack.from_binary(res.acknowledgement) == Ics20Ack(error=str(NoForeignTokens()))


def test_ack_error_refunds_sender():
    deps = setup(["channel-9"])
    packet = mock_sent_packet("channel-9", 100, "cw20:token-addr", "local-sender")
    res = ibc_packet_ack(deps, mock_env(), ack_fail("bad coin"), packet)
    assert res.messages == [
        SubMsg.reply_on_error(
            WasmExecute(
                contract_addr="token-addr",
                msg=b'{"transfer":{"recipient":"local-sender","amount":"100"}}',
                funds=[],
            ),
            1337,
        )
    ]
    assert ("error", "bad coin") in [(a.key, a.value) for a in res.attributes]
    assert query_channel(deps, "channel-9").balances == []


def test_timeout_refunds_sender():
    deps = setup(["channel-9"])
    packet = mock_sent_packet("channel-9", 42, "uatom", "local-sender")
    res = ibc_packet_timeout(deps, mock_env(), packet)
    assert res.messages == [
        SubMsg.reply_on_error(BankSend("local-sender", [Coin("uatom", 42)]), 1337)
    ]
    assert ("error", "timeout") in [(a.key, a.value) for a in res.attributes]


def test_parse_voucher_denom():
    endpoint = IbcEndpoint("transfer", "channel-1")
    assert parse_voucher_denom("transfer/channel-1/ucosm", endpoint) == "ucosm"
    assert parse_voucher_denom("transfer/channel-1/a/b", endpoint) == "a/b"
    with pytest.raises(NoForeignTokens):
        parse_voucher_denom("ucosm", endpoint)
    with pytest.raises(FromOtherPort) as port_err:
        parse_voucher_denom("other/channel-1/ucosm", endpoint)
    assert port_err.value.port == "other"
    with pytest.raises(FromOtherChannel) as chan_err:
        parse_voucher_denom("transfer/channel-2/ucosm", endpoint)
    assert chan_err.value.channel == "channel-2"


def test_channel_connect_records_info():
    deps = setup(["channel-3"])
    assert query_channel(deps, "channel-3").info == mock_channel_info("channel-3")


def test_channel_open_rejects_bad_version():
    deps = setup([])
    with pytest.raises(InvalidIbcVersion) as err:
        ibc_channel_open(deps, mock_env(), mock_channel("channel-1", version="ics20-2"))
    assert err.value.version == "ics20-2"
    with pytest.raises(InvalidIbcVersion) as err:
        ibc_channel_open(deps, mock_env(), mock_channel("channel-1"), "v2")
    assert err.value.version == "v2"


def test_channel_open_rejects_ordered():
    deps = setup([])
    with pytest.raises(OnlyOrderedChannel):
        ibc_channel_connect(
            deps, mock_env(), mock_channel("channel-1", order=IbcOrder.ORDERED), None
        )


def test_reply_handling():
    deps = setup([])
    with pytest.raises(UnknownReplyId) as err:
        reply(deps, mock_env(), Reply(id=7))
    assert err.value.id == 7
    assert reply(deps, mock_env(), Reply(id=1337)).data is None
    failed = reply(deps, mock_env(), Reply(id=1337, error="send failed"))
    assert failed.data == b'{"error":"send failed"}'


def test_send_amount_native():
    assert send_amount(native(5, "ucosm"), "bob") == SubMsg.reply_on_error(
        BankSend("bob", [Coin("ucosm", 5)]), 1337
    )