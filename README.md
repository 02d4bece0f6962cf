# cwcontracts

A cross-chain token transfer contract, escrow records and airdrop message
types, together with the small in-memory chain environment they run in. All of
it is plain Python with no dependencies.

## What is in the package

- `cwcontracts.chain` is the environment the contracts use:
  - `MemoryStorage`, an ordered key-value store, with the `Item` and `Map`
    accessors on top of it.
  - The value types `Coin`, `Cw20Coin`, `Timestamp`, `Env` and `MessageInfo`.
  - `Response` and `SubMsg`, plus the message types `BankSend`, `WasmExecute`
    and `IbcSendPacket`.
  - The IBC types `IbcChannel`, `IbcEndpoint` and `IbcPacket`.
  - The helpers `to_binary`, `from_binary`, `addr_validate`, `one_coin`,
    `nonpayable`, `set_contract_version` and `get_contract_version`.
  - The test doubles `mock_env`, `mock_info` and `mock_dependencies`.
- `cwcontracts.ics20` is the ICS-20 transfer contract:
  - `contract` holds `instantiate`, `execute` (native transfers and cw20
    receive hooks), `migrate`, `query`, `query_port`, `query_list` and
    `query_channel`.
  - `ibc` holds the channel handshake checks (`ibc_channel_open` and
    `ibc_channel_connect`) and packet handling (`ibc_packet_receive`,
    `ibc_packet_ack` and `ibc_packet_timeout`). It also has `reply`,
    `parse_voucher_denom`, `send_amount` and the `Ics20Ack` acknowledgement
    format.
  - `amount` holds `NativeAmount`, `Cw20Amount`, `from_parts`, `native` and
    `cw20`.
  - `messages` holds the message, response and stored-state types, including
    `Ics20Packet`.
  - `errors` holds `ContractError` and its subclasses.
- `cwcontracts.escrow` holds the escrow data model: `CreateMsg`,
  `is_valid_name`, `GenericBalance`, `Escrow` (with `is_expired` and
  `human_whitelist`), `ListResponse`, `DetailsResponse` and
  `all_escrow_ids`. It also has the escrow error classes.
- `cwcontracts.airdrop.messages` holds the message and response types of a
  staged merkle airdrop. These are `InstantiateMsg`, `UpdateConfig`,
  `RegisterMerkleRoot`, `Claim`, the query types and their responses.

## Install

```
pip install .
pip install ".[test]"   # to run the tests
```

## Example

```python
from cwcontracts.chain import Coin, IbcChannel, IbcEndpoint, mock_dependencies, mock_env, mock_info
from cwcontracts.ics20.contract import execute, instantiate, query_list
from cwcontracts.ics20.ibc import ICS20_ORDERING, ICS20_VERSION, ibc_channel_connect, ibc_channel_open
from cwcontracts.ics20.messages import InitMsg, TransferMsg

deps = mock_dependencies()
instantiate(deps, mock_env(), mock_info("anyone"), InitMsg(default_timeout=3600))

channel = IbcChannel(
    IbcEndpoint("ibc:wasm1234567890abcdef", "channel-3"),
    IbcEndpoint("transfer", "channel-35"),
    ICS20_ORDERING,
    ICS20_VERSION,
    "connection-2",
)
ibc_channel_open(deps, mock_env(), channel)
ibc_channel_connect(deps, mock_env(), channel, ICS20_VERSION)
print([c.id for c in query_list(deps).channels])   # ['channel-3']

res = execute(
    deps, mock_env(), mock_info("foobar", [Coin("ucosm", 1234567)]),
    TransferMsg(channel="channel-3", remote_address="foreign-address"),
)
print(res.messages[0].msg.channel_id)   # channel-3
```

When something fails, the code raises an exception. For the transfer contract
this is a subclass of `cwcontracts.ics20.errors.ContractError`. Errors from
the environment are a `StdError` or a `PaymentError` from `cwcontracts.chain`.

## What the package does not do

- The escrow module has no entry points. Nothing creates, tops up, approves or
  refunds an escrow. The module only defines the stored records, the request
  and response types, and the errors.
- The airdrop package has only its message and response types. It has no
  contract logic, so it does not register merkle roots, verify proofs or
  record claims.
- There is no command-line tool, and no connection to a real chain. Everything
  runs against `MemoryStorage` and the `Querier` test double.

## Tests

```
pytest
```