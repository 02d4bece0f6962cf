"""Contract runtime primitives: storage, environment, messages and test doubles."""

from __future__ import annotations

import base64
import copy
import json
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Iterator


class StdError(Exception):
    """Generic error raised by the runtime."""

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class NotFoundError(StdError):
    """A value was expected in storage but is missing."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"{kind} not found")
        self.kind = kind


class OverflowError(StdError):  # noqa: A001 - mirrors the runtime error name
    """Checked arithmetic left the valid range."""

    def __init__(self, operation: str, operand1: int, operand2: int) -> None:
        super().__init__(f"Cannot {operation} with {operand1} and {operand2}")
        self.operation = operation
        self.operand1 = operand1
        self.operand2 = operand2


class PaymentError(Exception):
    """The funds sent with a message do not match what it accepts."""

    message = "Payment error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class NoFundsSent(PaymentError):
    message = "No funds sent"


class MultipleDenoms(PaymentError):
    message = "Sent more than one denomination"


class NonPayable(PaymentError):
    message = "This message does no accept funds"


@dataclass
class Coin:
    denom: str
    amount: int

    def to_json(self) -> dict[str, Any]:
        return {"denom": self.denom, "amount": str(self.amount)}


@dataclass
class Cw20Coin:
    address: str
    amount: int

    def to_json(self) -> dict[str, Any]:
        return {"address": self.address, "amount": str(self.amount)}


@dataclass
class Cw20ReceiveMsg:
    sender: str
    amount: int
    msg: bytes

    def to_json(self) -> dict[str, Any]:
        return {
            "sender": self.sender,
            "amount": str(self.amount),
            "msg": base64.b64encode(self.msg).decode("ascii"),
        }


_NANOS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True, order=True)
class Timestamp:
    """A point in time, in nanoseconds since the Unix epoch."""

    nanos: int

    @classmethod
    def from_seconds(cls, seconds: int) -> Timestamp:
        return cls(seconds * _NANOS_PER_SECOND)

    def plus_seconds(self, seconds: int) -> Timestamp:
        return Timestamp(self.nanos + seconds * _NANOS_PER_SECOND)

    def seconds(self) -> int:
        return self.nanos // _NANOS_PER_SECOND

    def to_json(self) -> str:
        return str(self.nanos)


@dataclass
class BlockInfo:
    height: int
    time: Timestamp
    chain_id: str


@dataclass
class Env:
    block: BlockInfo
    contract_address: str


@dataclass
class MessageInfo:
    sender: str
    funds: list[Coin] = field(default_factory=list)


class MemoryStorage:
    """Ordered key-value store holding copies of the values given to it."""

    def __init__(self) -> None:
        self._data: dict[bytes, Any] = {}

    def get(self, key: bytes) -> Any:
        if key not in self._data:
            return None
        return copy.deepcopy(self._data[key])

    def set(self, key: bytes, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def remove(self, key: bytes) -> None:
        self._data.pop(key, None)

    def range(
        self, start: bytes | None = None, end: bytes | None = None
    ) -> Iterator[tuple[bytes, Any]]:
        """Yield entries with start <= key < end in ascending key order."""
        for key in sorted(self._data):
            if start is not None and key < start:
                continue
            if end is not None and key >= end:
                break
            yield key, copy.deepcopy(self._data[key])


def _length_prefixed(raw: bytes) -> bytes:
    if len(raw) > 0xFFFF:
        raise StdError("Key component too long")
    return len(raw).to_bytes(2, "big") + raw


def _encode_component(part: Any) -> bytes:
    if isinstance(part, bool):
        raise TypeError("bool is not a valid key component")
    if isinstance(part, str):
        return part.encode("utf-8")
    if isinstance(part, bytes):
        return part
    if isinstance(part, int):
        if part < 0:
            raise ValueError("integer key components must not be negative")
        return part.to_bytes(8, "big")
    raise TypeError(f"unsupported key component: {type(part).__name__}")


def _key_parts(key: Any) -> tuple[Any, ...]:
    parts = key if isinstance(key, tuple) else (key,)
    if not parts:
        raise ValueError("empty key")
    return parts


def _prefix_end(prefix: bytes) -> bytes | None:
    trimmed = prefix.rstrip(b"\xff")
    if not trimmed:
        return None
    return trimmed[:-1] + bytes([trimmed[-1] + 1])


class Item:
    """A single typed value stored under a fixed key."""

    def __init__(self, key: str, kind: str | None = None) -> None:
        self.key = key
        self.kind = kind or key
        self._storage_key = key.encode("utf-8")

    def save(self, storage: MemoryStorage, value: Any) -> None:
        storage.set(self._storage_key, value)

    def may_load(self, storage: MemoryStorage) -> Any:
        return storage.get(self._storage_key)

    def load(self, storage: MemoryStorage) -> Any:
        value = self.may_load(storage)
        if value is None:
            raise NotFoundError(self.kind)
        return value

    def update(self, storage: MemoryStorage, func: Callable[[Any], Any]) -> Any:
        value = func(self.load(storage))
        self.save(storage, value)
        return value


class Map:
    """Typed values stored under a namespace, keyed by strings, ints or tuples of them."""

    def __init__(self, namespace: str, kind: str | None = None) -> None:
        self.namespace = namespace
        self.kind = kind or namespace
        self._prefix = _length_prefixed(namespace.encode("utf-8"))

    def _storage_key(self, key: Any) -> bytes:
        encoded = [_encode_component(part) for part in _key_parts(key)]
        head = b"".join(_length_prefixed(part) for part in encoded[:-1])
        return self._prefix + head + encoded[-1]

    def save(self, storage: MemoryStorage, key: Any, value: Any) -> None:
        storage.set(self._storage_key(key), (key, value))

    def may_load(self, storage: MemoryStorage, key: Any) -> Any:
        entry = storage.get(self._storage_key(key))
        return None if entry is None else entry[1]

    def load(self, storage: MemoryStorage, key: Any) -> Any:
        value = self.may_load(storage, key)
        if value is None:
            raise NotFoundError(self.kind)
        return value

    def has(self, storage: MemoryStorage, key: Any) -> bool:
        return storage.get(self._storage_key(key)) is not None

    def remove(self, storage: MemoryStorage, key: Any) -> None:
        storage.remove(self._storage_key(key))

    def update(
        self, storage: MemoryStorage, key: Any, func: Callable[[Any], Any]
    ) -> Any:
        value = func(self.may_load(storage, key))
        self.save(storage, key, value)
        return value

    def _entries(self, storage: MemoryStorage, prefix: bytes) -> Iterator[tuple[Any, Any]]:
        for _, (key, value) in storage.range(prefix, _prefix_end(prefix)):
            yield key, value

    def keys(self, storage: MemoryStorage) -> list[Any]:
        return [key for key, _ in self._entries(storage, self._prefix)]

    def items(self, storage: MemoryStorage) -> list[tuple[Any, Any]]:
        return list(self._entries(storage, self._prefix))

    def prefix_items(self, storage: MemoryStorage, prefix: Any) -> list[tuple[Any, Any]]:
        """Entries whose leading key components equal prefix, keyed by the rest."""
        head = _key_parts(prefix)
        raw = self._prefix + b"".join(
            _length_prefixed(_encode_component(part)) for part in head
        )
        found = []
        for key, value in self._entries(storage, raw):
            parts = _key_parts(key)
            if len(parts) <= len(head) or parts[: len(head)] != head:
                continue
            rest = parts[len(head):]
            found.append((rest[0] if len(rest) == 1 else rest, value))
        return found


@dataclass
class Querier:
    """Answers queries a contract makes about the chain."""

    port_id: str | None = None
    balances: dict[str, list[Coin]] = field(default_factory=dict)

    def query_port_id(self) -> str:
        if self.port_id is None:
            raise StdError("No port bound to this contract")
        return self.port_id

    def update_balance(self, address: str, coins: Iterable[Coin]) -> None:
        self.balances[address] = [copy.copy(c) for c in coins]

    def query_balance(self, address: str, denom: str) -> Coin:
        for held in self.balances.get(address, []):
            if held.denom == denom:
                return Coin(denom, held.amount)
        return Coin(denom, 0)


@dataclass
class Deps:
    storage: MemoryStorage = field(default_factory=MemoryStorage)
    querier: Querier = field(default_factory=Querier)


@dataclass(frozen=True)
class Attribute:
    key: str
    value: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", str(self.value))


@dataclass
class BankSend:
    to_address: str
    amount: list[Coin]


@dataclass
class WasmExecute:
    contract_addr: str
    msg: bytes
    funds: list[Coin] = field(default_factory=list)


class IbcOrder(Enum):
    UNORDERED = "ORDER_UNORDERED"
    ORDERED = "ORDER_ORDERED"


@dataclass
class IbcEndpoint:
    port_id: str
    channel_id: str


@dataclass
class IbcChannel:
    endpoint: IbcEndpoint
    counterparty_endpoint: IbcEndpoint
    order: IbcOrder
    version: str
    connection_id: str


@dataclass
class IbcPacket:
    data: bytes
    src: IbcEndpoint
    dest: IbcEndpoint
    sequence: int
    timeout: Timestamp


@dataclass
class IbcSendPacket:
    channel_id: str
    data: bytes
    timeout: Timestamp


class ReplyOn(Enum):
    NEVER = "never"
    SUCCESS = "success"
    ERROR = "error"
    ALWAYS = "always"


@dataclass
class SubMsg:
    msg: Any
    id: int = 0
    reply_on: ReplyOn = ReplyOn.NEVER

    @classmethod
    def reply_on_error(cls, msg: Any, reply_id: int) -> SubMsg:
        return cls(msg, reply_id, ReplyOn.ERROR)


@dataclass
class Response:
    messages: list[SubMsg] = field(default_factory=list)
    attributes: list[Attribute] = field(default_factory=list)
    data: bytes | None = None

    def add_message(self, msg: Any) -> Response:
        self.messages.append(SubMsg(msg))
        return self

    def add_submessage(self, msg: SubMsg) -> Response:
        self.messages.append(msg)
        return self

    def add_attribute(self, key: str, value: Any) -> Response:
        self.attributes.append(Attribute(key, value))
        return self

    def add_attributes(self, attributes: Iterable[Attribute]) -> Response:
        self.attributes.extend(attributes)
        return self

    def set_data(self, data: bytes) -> Response:
        self.data = data
        return self


@dataclass
class ContractVersion:
    contract: str
    version: str


_CONTRACT_INFO = Item("contract_info", kind="cw2::ContractVersion")


def set_contract_version(storage: MemoryStorage, contract: str, version: str) -> None:
    _CONTRACT_INFO.save(storage, ContractVersion(contract, version))


def get_contract_version(storage: MemoryStorage) -> ContractVersion:
    return _CONTRACT_INFO.load(storage)


_ADDR_MIN_LENGTH = 3
_ADDR_MAX_LENGTH = 54


def addr_validate(address: str) -> str:
    """Check that address is a well-formed, normalised account address."""
    if len(address) < _ADDR_MIN_LENGTH:
        raise StdError("Invalid input: human address too short")
    if len(address) > _ADDR_MAX_LENGTH:
        raise StdError("Invalid input: human address too long")
    if address.lower() != address:
        raise StdError("Invalid input: address not normalized")
    return address


def _to_jsonable(value: Any) -> Any:
    to_json = getattr(value, "to_json", None)
    if callable(to_json):
        return _to_jsonable(to_json())
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


def to_binary(value: Any) -> bytes:
    """Serialise value to compact JSON bytes."""
    return json.dumps(
        _to_jsonable(value), separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


def from_binary(data: bytes) -> Any:
    """Parse JSON bytes into plain Python values."""
    try:
        return json.loads(data)
    except (ValueError, UnicodeDecodeError) as exc:
        raise StdError(f"Error parsing into type: {exc}") from exc


def one_coin(info: MessageInfo) -> Coin:
    """Return the single non-zero coin sent, or raise a PaymentError."""
    if not info.funds:
        raise NoFundsSent()
    if len(info.funds) > 1:
        raise MultipleDenoms()
    coin = info.funds[0]
    if coin.amount == 0:
        raise NoFundsSent()
    return coin


def nonpayable(info: MessageInfo) -> None:
    """Raise NonPayable if any funds were sent."""
    if info.funds:
        raise NonPayable()


MOCK_CONTRACT_ADDR = "cosmos2contract"


def mock_env() -> Env:
    return Env(
        block=BlockInfo(
            height=12_345,
            time=Timestamp(1_571_797_419_879_305_533),
            chain_id="cosmos-testnet-14002",
        ),
        contract_address=MOCK_CONTRACT_ADDR,
    )


def mock_info(sender: str, funds: Iterable[Coin] = ()) -> MessageInfo:
    return MessageInfo(sender, [copy.copy(c) for c in funds])


def mock_dependencies() -> Deps:
    return Deps(MemoryStorage(), Querier())