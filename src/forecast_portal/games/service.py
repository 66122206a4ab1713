import logging

from forecast_portal.common import (
    IntegrityViolation,
    Storage,
    StorageError,
    categories,
)
from forecast_portal.portal import CreatedGame, DeploymentMetadata

from . import repo
from .schemas import GamePage, RecordFailure, RecordOutcome

logger = logging.getLogger(__name__)

PARENT_NOT_FOUND_MESSAGE = (
    "Factory deployment not found in 'deployed_contracts'. "
    "Ensure factory is deployed and logged correctly."
)
DUPLICATE_MESSAGE = "Duplicate transaction hash. This game might already be recorded."


async def record_deployment(
    storage: Storage, event: CreatedGame, metadata: DeploymentMetadata
) -> RecordOutcome:
    """
    Records a game the factory created on chain. The event must come from a
    confirmed receipt, nothing here talks to the chain.

    Never raises for storage problems, every failure comes back as a
    RecordOutcome with a RecordFailure kind.
    """
    try:
        result = await repo.insert_deployed_game(storage, event, metadata)
    except IntegrityViolation as e:
        if e.kind == "unique":
            logger.warning(
                "Deployment %s is already recorded.", event.transaction_hash
            )
            return RecordOutcome.failed(
                RecordFailure.DUPLICATE_DEPLOYMENT, DUPLICATE_MESSAGE
            )
        if e.kind in ("foreign_key", "not_null"):
            logger.warning(
                "No factory deployment for %s on chain %s.",
                metadata.factory_address,
                metadata.chain_id,
            )
            return RecordOutcome.failed(
                RecordFailure.PARENT_NOT_FOUND, PARENT_NOT_FOUND_MESSAGE
            )
        logger.error("Error recording agent game deployment: %s", e)
        return RecordOutcome.failed(RecordFailure.STORAGE_UNAVAILABLE, str(e))
    except StorageError as e:
        logger.error("Error recording agent game deployment: %s", e)
        return RecordOutcome.failed(RecordFailure.STORAGE_UNAVAILABLE, str(e))

    if result.rowcount != 1:
        logger.warning(
            "No factory deployment for %s on chain %s, nothing recorded.",
            metadata.factory_address,
            metadata.chain_id,
        )
        return RecordOutcome.failed(
            RecordFailure.PARENT_NOT_FOUND, PARENT_NOT_FOUND_MESSAGE
        )

    logger.info("Agent game deployment recorded: %s", event.game_address)
    return RecordOutcome(success=True, id=result.ids[0])


async def list_categories(storage: Storage) -> list[str]:
    """Every distinct category in use, sorted. Empty if the store is down."""
    try:
        raw_categories = await repo.list_category_strings(storage)
    except StorageError as e:
        logger.error("Error fetching unique categories: %s", e)
        return []
    labels: set[str] = set()
    for raw in raw_categories:
        labels |= categories.decode(raw)
    return sorted(labels)


async def list_games(
    storage: Storage, category: str | None, page: int, page_size: int
) -> GamePage:
    """
    One page of deployed games, newest first, optionally filtered to a
    category. total_count is the size of the filtered set, not of the page.
    """
    if page < 1:
        raise ValueError("page starts at 1")
    if page_size < 1:
        raise ValueError("page_size must be positive")

    try:
        total_count = await repo.count_deployed_games(storage, category)
        games = await repo.list_deployed_games(
            storage, category, limit=page_size, offset=(page - 1) * page_size
        )
    except StorageError as e:
        logger.error("Error fetching deployed games: %s", e)
        return GamePage(games=[], total_count=0, page=page, page_size=page_size)

    return GamePage(
        games=games, total_count=total_count, page=page, page_size=page_size
    )
