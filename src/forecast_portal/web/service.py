import logging

from forecast_portal import factories, games
from forecast_portal.chain import (
    ChainInteractionFailed,
    confirm_receipt,
    extract_created_game,
    normalize_receipt,
)
from forecast_portal.common import Storage, StorageError
from forecast_portal.config import ConfigurationMissing, Settings
from forecast_portal.games import GamePage, RecordFailure, RecordOutcome
from forecast_portal.games.service import PARENT_NOT_FOUND_MESSAGE
from forecast_portal.portal import CreatedGame, DeploymentMetadata, FactoryContract

from .schemas import GameDeploymentCreate, ReceiptDeploymentCreate

logger = logging.getLogger(__name__)


async def get_factory_details(
    storage: Storage, settings: Settings
) -> FactoryContract | None:
    try:
        address, chain_id = settings.require_factory()
    except ConfigurationMissing as e:
        logger.error("Can't look up the factory: %s", e)
        return None
    try:
        return await factories.get_factory(storage, address, chain_id)
    except StorageError as e:
        logger.error("Error fetching factory details from DB: %s", e)
        return None


def _deployment_metadata(
    settings: Settings,
    data: GameDeploymentCreate | ReceiptDeploymentCreate,
) -> DeploymentMetadata:
    factory_address = data.factory_address or settings.factory_address
    chain_id = data.chain_id if data.chain_id is not None else settings.chain_id
    agent_id = data.agent_id or settings.agent_id

    missing = [
        name
        for name, value in (
            ("FACTORY_ADDRESS", factory_address),
            ("CHAIN_ID", chain_id),
            ("AGENT_ID", agent_id),
        )
        if value is None
    ]
    if missing:
        raise ConfigurationMissing(*missing)
    assert factory_address is not None
    assert chain_id is not None
    assert agent_id is not None

    return DeploymentMetadata(
        factory_address=factory_address,
        chain_id=chain_id,
        agent_id=agent_id,
        deployed_by_address=data.deployed_by_address,
        categories=data.categories,
    )


async def record_agent_game_deployment(
    storage: Storage, settings: Settings, data: GameDeploymentCreate
) -> RecordOutcome:
    try:
        metadata = _deployment_metadata(settings, data)
    except ConfigurationMissing as e:
        return RecordOutcome.failed(RecordFailure.CONFIGURATION_MISSING, str(e))

    event = CreatedGame(
        game_id_on_chain=data.game_id_on_chain,
        game_address=data.game_address,
        transaction_hash=data.transaction_hash,
    )
    return await games.record_deployment(storage, event, metadata)


async def record_deployment_receipt(
    storage: Storage, settings: Settings, data: ReceiptDeploymentCreate
) -> RecordOutcome:
    """
    Same as record_agent_game_deployment, but reads the game id and address
    out of the receipt using the factory's ABI. Nothing is recorded unless the
    transaction succeeded and emitted GameCreated.
    """
    try:
        metadata = _deployment_metadata(settings, data)
    except ConfigurationMissing as e:
        return RecordOutcome.failed(RecordFailure.CONFIGURATION_MISSING, str(e))

    try:
        factory = await factories.get_factory(
            storage, metadata.factory_address, metadata.chain_id
        )
    except StorageError as e:
        logger.error("Error fetching factory details from DB: %s", e)
        return RecordOutcome.failed(RecordFailure.STORAGE_UNAVAILABLE, str(e))
    if factory is None:
        return RecordOutcome.failed(
            RecordFailure.PARENT_NOT_FOUND, PARENT_NOT_FOUND_MESSAGE
        )

    try:
        receipt = normalize_receipt(data.receipt)
        confirm_receipt(receipt)
        event = extract_created_game(factory.abi, receipt)
    except ChainInteractionFailed as e:
        logger.warning("Not recording deployment: %s", e)
        return RecordOutcome.failed(RecordFailure.CHAIN_INTERACTION_FAILED, str(e))
    if event is None:
        return RecordOutcome.failed(
            RecordFailure.CHAIN_INTERACTION_FAILED,
            "Game created, but could not find GameCreated event in transaction "
            "receipt.",
        )

    return await games.record_deployment(storage, event, metadata)


async def get_all_categories(storage: Storage) -> list[str]:
    return await games.list_categories(storage)


async def get_games(
    storage: Storage, category: str | None, page: int, limit: int
) -> GamePage:
    return await games.list_games(storage, category, page, limit)
