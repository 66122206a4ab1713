from typing import Any

from pydantic import BaseModel, Field, field_validator

from forecast_portal.common import categories
from forecast_portal.portal import canonical_transaction_hash


class GameDeploymentCreate(BaseModel):
    # factory_address, chain_id and agent_id default to the configured values.
    factory_address: str | None = None
    chain_id: int | None = None
    agent_id: str | None = None
    game_id_on_chain: int = Field(ge=0)
    game_address: str
    deployed_by_address: str
    transaction_hash: str
    categories: list[str] = Field(min_length=1)

    @field_validator("categories")
    @classmethod
    def normalize_categories(cls, v: list[str]) -> list[str]:
        normalized = categories.normalize(v)
        if not normalized:
            raise ValueError("Please select at least one category.")
        return normalized

    @field_validator("transaction_hash")
    @classmethod
    def canonicalize_transaction_hash(cls, v: str) -> str:
        return canonical_transaction_hash(v)


class ReceiptDeploymentCreate(BaseModel):
    """A createGame receipt as the wallet returned it, JSON-RPC encoded."""

    receipt: dict[str, Any]
    deployed_by_address: str
    factory_address: str | None = None
    chain_id: int | None = None
    agent_id: str | None = None
    categories: list[str] = Field(min_length=1)

    @field_validator("categories")
    @classmethod
    def normalize_categories(cls, v: list[str]) -> list[str]:
        normalized = categories.normalize(v)
        if not normalized:
            raise ValueError("Please select at least one category.")
        return normalized
