from datetime import datetime
from enum import StrEnum

from hexbytes import HexBytes
from pydantic import BaseModel, Field, field_validator

from forecast_portal.common import categories

FACTORY_CONTRACT_NAME = "ForecastGameFactory"

TRANSACTION_HASH_BYTES = 32


def canonical_transaction_hash(value: str) -> str:
    """
    Lowercase 0x-prefixed hex. The hash is the idempotency key, so every
    write path stores it in this one form.
    """
    raw = HexBytes(value)
    if len(raw) != TRANSACTION_HASH_BYTES:
        raise ValueError(
            f"Transaction hash must be {TRANSACTION_HASH_BYTES} bytes, got {len(raw)}."
        )
    return raw.to_0x_hex()


# Suggested labels offered by the create form. Anything comma free is accepted.
class Category(StrEnum):
    WEATHER = "Weather"
    POLITICS = "Politics"
    SPORTS = "Sports"
    TECHNOLOGY = "Technology"
    FINANCE = "Finance"
    ENTERTAINMENT = "Entertainment"
    OTHERS = "Others"


class CreatedGame(BaseModel):
    """The GameCreated event pulled out of a confirmed transaction receipt."""

    game_id_on_chain: int = Field(ge=0)
    game_address: str
    transaction_hash: str

    @field_validator("transaction_hash")
    @classmethod
    def canonicalize_transaction_hash(cls, v: str) -> str:
        return canonical_transaction_hash(v)


class DeploymentMetadata(BaseModel):
    factory_address: str
    chain_id: int
    agent_id: str
    deployed_by_address: str
    categories: list[str] = []

    @field_validator("categories")
    @classmethod
    def normalize_categories(cls, v: list[str]) -> list[str]:
        return categories.normalize(v)


class DeployedGame(BaseModel):
    id: int
    factory_deployment_id: int
    game_id_on_chain: int
    game_address: str
    agent_id: str
    deployed_by_address: str
    transaction_hash: str
    deployed_at: datetime
    categories: list[str]


class FactoryContract(BaseModel):
    id: int
    contract_name: str
    address: str
    abi: str
    bytecode: str | None
    deployed_at: datetime | None
    status: str | None
    chain_id: int
    compiler_version: str | None
