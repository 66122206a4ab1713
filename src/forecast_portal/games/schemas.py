import math
from enum import StrEnum

from pydantic import BaseModel, computed_field

from forecast_portal.portal import DeployedGame


class RecordFailure(StrEnum):
    CONFIGURATION_MISSING = "configuration_missing"
    PARENT_NOT_FOUND = "parent_not_found"
    DUPLICATE_DEPLOYMENT = "duplicate_deployment"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    CHAIN_INTERACTION_FAILED = "chain_interaction_failed"


class RecordOutcome(BaseModel):
    success: bool
    kind: RecordFailure | None = None
    error: str | None = None
    id: int | None = None

    @classmethod
    def failed(cls, kind: RecordFailure, error: str) -> "RecordOutcome":
        return cls(success=False, kind=kind, error=error)


class GamePage(BaseModel):
    games: list[DeployedGame]
    total_count: int
    page: int = 1
    page_size: int = 1

    @computed_field  # type: ignore[misc]
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)
