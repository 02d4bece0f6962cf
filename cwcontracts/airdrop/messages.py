"""Messages and responses of the merkle airdrop contract."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

_U8_MAX = 0xFF
_U128_MAX = 2**128 - 1


def _check_stage(stage: int) -> None:
    if isinstance(stage, bool) or not isinstance(stage, int) or not 0 <= stage <= _U8_MAX:
        raise ValueError(f"stage must be an integer in 0..={_U8_MAX}, got {stage!r}")


@dataclass
class InstantiateMsg:
    """Token to hand out, and an owner (the sender when None)."""

    cw20_token_address: str
    owner: str | None = None

    def to_json(self) -> dict[str, Any]:
        return {"owner": self.owner, "cw20_token_address": self.cw20_token_address}


@dataclass
class UpdateConfig:
    """Change the owner; None freezes the contract against new stages."""

    new_owner: str | None = None

    def to_json(self) -> dict[str, Any]:
        return {"update_config": {"new_owner": self.new_owner}}


@dataclass
class RegisterMerkleRoot:
    """Open a new stage with a hex-encoded merkle root."""

    merkle_root: str

    def to_json(self) -> dict[str, Any]:
        return {"register_merkle_root": {"merkle_root": self.merkle_root}}


@dataclass
class Claim:
    """Claim amount in a stage with a hex-encoded merkle proof."""

    stage: int
    amount: int
    proof: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        _check_stage(self.stage)
        if isinstance(self.amount, bool) or not isinstance(self.amount, int) or not (
            0 <= self.amount <= _U128_MAX
        ):
            raise ValueError(f"amount must fit into 128 bits, got {self.amount!r}")

    def to_json(self) -> dict[str, Any]:
        return {
            "claim": {
                "stage": self.stage,
                "amount": str(self.amount),
                "proof": list(self.proof),
            }
        }


@dataclass
class ConfigQuery:
    def to_json(self) -> dict[str, Any]:
        return {"config": {}}


@dataclass
class MerkleRootQuery:
    stage: int

    def __post_init__(self) -> None:
        _check_stage(self.stage)

    def to_json(self) -> dict[str, Any]:
        return {"merkle_root": {"stage": self.stage}}


@dataclass
class LatestStageQuery:
    def to_json(self) -> dict[str, Any]:
        return {"latest_stage": {}}


@dataclass
class IsClaimedQuery:
    stage: int
    address: str

    def __post_init__(self) -> None:
        _check_stage(self.stage)

    def to_json(self) -> dict[str, Any]:
        return {"is_claimed": {"stage": self.stage, "address": self.address}}


@dataclass
class ConfigResponse:
    owner: str | None
    cw20_token_address: str


@dataclass
class MerkleRootResponse:
    stage: int
    merkle_root: str


@dataclass
class LatestStageResponse:
    latest_stage: int


@dataclass
class IsClaimedResponse:
    is_claimed: bool


@dataclass
class MigrateMsg:
    pass