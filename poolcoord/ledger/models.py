"""Pydantic models for ledger outputs, pool records and submissions.

On-chain records are exchanged with the ledger gateway in the Plutus
detailed JSON schema:
- {"constructor": N, "fields": [...]}
- {"int": N}
- {"bytes": "<hex>"}
- {"list": [...]}
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from poolcoord.difficulty.codec import DifficultyValue

# Block hashes are sha256 digests
HASH_SIZE = 32


# ---------------------------------------------------------------------------
# Plutus data helpers
# ---------------------------------------------------------------------------


def constr(index: int, fields: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    return {"constructor": index, "fields": fields or []}


def p_int(value: int) -> dict[str, Any]:
    return {"int": int(value)}


def p_bytes(value: str) -> dict[str, Any]:
    return {"bytes": value}


def p_list(items: list[dict[str, Any]]) -> dict[str, Any]:
    return {"list": items}


def _unwrap(field: Any, key: str) -> Any:
    if not isinstance(field, dict) or key not in field:
        raise ValueError(f"expected plutus {key!r} field, got {field!r}")
    return field[key]


def _constr_fields(datum: Any, expected_index: int = 0) -> list[Any]:
    if not isinstance(datum, dict) or datum.get("constructor") != expected_index:
        raise ValueError(f"expected constructor {expected_index}, got {datum!r}")
    fields = datum.get("fields")
    if not isinstance(fields, list):
        raise ValueError("constructor has no field list")
    return fields


def _hex_from_wire(value: Any) -> str:
    """Accept a hex string or a list of byte values (serde's Vec<u8>)."""
    if isinstance(value, str):
        bytes.fromhex(value)
        return value.lower()
    if isinstance(value, (list, tuple)):
        try:
            return bytes(value).hex()
        except TypeError as e:
            raise ValueError(f"byte list holds non-integers: {e}") from e
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    raise ValueError(f"cannot read bytes from {type(value).__name__}")


# ---------------------------------------------------------------------------
# Ledger outputs
# ---------------------------------------------------------------------------


class OutputRef(BaseModel):
    """Reference to a ledger output: transaction id + output index."""

    tx_hash: str
    output_index: int = Field(ge=0)

    @property
    def ref(self) -> str:
        return f"{self.tx_hash}#{self.output_index}"

    @classmethod
    def parse(cls, value: str) -> OutputRef:
        """Parse the ``<tx_hash>#<index>`` form."""
        tx_hash, sep, index = value.partition("#")
        if not sep or not tx_hash or not index.isdigit():
            raise ValueError(f"malformed output reference: {value!r}")
        return cls(tx_hash=tx_hash, output_index=int(index))


class Utxo(OutputRef):
    """An unspent output as reported by the ledger gateway."""

    address: str = ""
    assets: dict[str, int] = Field(default_factory=dict)
    datum_hash: str | None = None
    datum: dict[str, Any] | None = None

    def out_ref(self) -> OutputRef:
        return OutputRef(tx_hash=self.tx_hash, output_index=self.output_index)


# ---------------------------------------------------------------------------
# Pool records
# ---------------------------------------------------------------------------


class OwnerRecord(BaseModel):
    """Owner datum attached to a pool account output."""

    owner_vkh: str = Field(min_length=1)

    def to_datum(self) -> dict[str, Any]:
        return constr(0, [p_bytes(self.owner_vkh)])

    @classmethod
    def from_datum(cls, datum: Any) -> OwnerRecord:
        fields = _constr_fields(datum)
        if len(fields) != 1:
            raise ValueError(f"owner datum must have 1 field, got {len(fields)}")
        return cls(owner_vkh=_unwrap(fields[0], "bytes"))


class BlockState(BaseModel):
    """State held in the validator output: one mined block."""

    block_number: int = Field(ge=0)
    current_hash: str
    leading_zeroes: int = Field(ge=0)
    difficulty_number: int = Field(ge=0)
    epoch_time: int
    current_time: int
    extra: Any = None
    interlink: list[str] = Field(default_factory=list)

    @field_validator("current_hash", mode="before")
    @classmethod
    def _coerce_hash(cls, v: Any) -> str:
        return _hex_from_wire(v)

    @field_validator("interlink", mode="before")
    @classmethod
    def _coerce_interlink(cls, v: Any) -> list[str]:
        if not isinstance(v, (list, tuple)):
            raise ValueError("interlink must be a list")
        return [_hex_from_wire(item) for item in v]

    @property
    def difficulty(self) -> DifficultyValue:
        return DifficultyValue(
            leading_zeros=self.leading_zeroes,
            difficulty_number=self.difficulty_number,
        )

    def to_fields(self) -> tuple:
        """Ordered on-chain field tuple. ``extra`` is always 0."""
        return (
            self.block_number,
            self.current_hash,
            self.leading_zeroes,
            self.difficulty_number,
            self.epoch_time,
            self.current_time,
            0,
            list(self.interlink),
        )

    def to_datum(self) -> dict[str, Any]:
        block_number, hash_, zeroes, number, epoch_time, current_time, extra, interlink = (
            self.to_fields()
        )
        return constr(0, [
            p_int(block_number),
            p_bytes(hash_),
            p_int(zeroes),
            p_int(number),
            p_int(epoch_time),
            p_int(current_time),
            p_int(extra),
            p_list([p_bytes(h) for h in interlink]),
        ])

    @classmethod
    def from_datum(cls, datum: Any) -> BlockState:
        fields = _constr_fields(datum)
        if len(fields) != 8:
            raise ValueError(f"block datum must have 8 fields, got {len(fields)}")
        return cls(
            block_number=_unwrap(fields[0], "int"),
            current_hash=_unwrap(fields[1], "bytes"),
            leading_zeroes=_unwrap(fields[2], "int"),
            difficulty_number=_unwrap(fields[3], "int"),
            epoch_time=_unwrap(fields[4], "int"),
            current_time=_unwrap(fields[5], "int"),
            extra=fields[6],
            interlink=[_unwrap(h, "bytes") for h in _unwrap(fields[7], "list")],
        )


# ---------------------------------------------------------------------------
# Inbound proof report
# ---------------------------------------------------------------------------


class ProofReport(BaseModel):
    """A found block reported by the pool backend, plus who gets paid.

    Field names follow the pool backend; the camelCase names used by other
    reporters are accepted as well.
    """

    nonce: str = Field(min_length=1)
    sha: str = Field(validation_alias=AliasChoices("sha", "proofHash"))
    current_block: BlockState = Field(validation_alias=AliasChoices("current_block", "priorBlock"))
    new_zeroes: int = Field(validation_alias=AliasChoices("new_zeroes", "achievedZeros"))
    new_difficulty: int = Field(validation_alias=AliasChoices("new_difficulty", "achievedDifficulty"))
    miner_payments: dict[str, int] = Field(validation_alias=AliasChoices("miner_payments", "payouts"))
    hash_rate: float | None = Field(default=None, validation_alias=AliasChoices("hash_rate", "hashRate"))

    @field_validator("nonce", "sha", mode="before")
    @classmethod
    def _coerce_hex(cls, v: Any) -> str:
        return _hex_from_wire(v)

    @field_validator("sha")
    @classmethod
    def _full_hash(cls, v: str) -> str:
        if len(v) != HASH_SIZE * 2:
            raise ValueError(f"sha must be {HASH_SIZE} bytes, got {len(v) // 2}")
        return v

    @field_validator("miner_payments")
    @classmethod
    def _non_negative_payments(cls, v: dict[str, int]) -> dict[str, int]:
        for address, amount in v.items():
            if amount < 0:
                raise ValueError(f"negative payment for {address}")
        return v


# ---------------------------------------------------------------------------
# Outbound transaction request
# ---------------------------------------------------------------------------


class AccountOutput(BaseModel):
    """A pool account output to create for one payout recipient."""

    address: str
    owner: OwnerRecord
    assets: dict[str, int]
    replaces: OutputRef | None = None

    def to_datum(self) -> dict[str, Any]:
        return self.owner.to_datum()


class TransactionRequest(BaseModel):
    """Everything the ledger client needs to build, sign and submit a round."""

    validator_input: OutputRef
    validator_redeemer: dict[str, Any]
    account_inputs: list[OutputRef] = Field(default_factory=list)
    account_redeemer: dict[str, Any]
    validator_address: str
    validator_datum: dict[str, Any]
    validator_assets: dict[str, int]
    pool_address: str
    account_outputs: list[AccountOutput] = Field(default_factory=list)
    mint: dict[str, int]
    mint_redeemer: dict[str, Any]
    pool_master_token: str
    script_reference: OutputRef
    valid_from: int
    valid_to: int


__all__ = [
    "AccountOutput",
    "BlockState",
    "HASH_SIZE",
    "OutputRef",
    "OwnerRecord",
    "ProofReport",
    "TransactionRequest",
    "Utxo",
    "constr",
    "p_bytes",
    "p_int",
    "p_list",
]
