import sqlalchemy
from databases.interfaces import Record
from sentry_sdk.tracing import trace

from forecast_portal.common import ExecuteResult, Storage, categories
from forecast_portal.common.tables import agent_deployed_games, deployed_contracts
from forecast_portal.portal import CreatedGame, DeployedGame, DeploymentMetadata

games = agent_deployed_games


def _category_filter(category: str | None) -> sqlalchemy.ColumnElement[bool]:
    if categories.is_all(category):
        return sqlalchemy.true()
    assert category is not None
    return categories.contains(games.c.categories, category)


def _to_deployed_game(row: Record) -> DeployedGame:
    return DeployedGame(
        id=row["id"],
        factory_deployment_id=row["factory_deployment_id"],
        game_id_on_chain=row["game_id_on_chain"],
        game_address=row["game_address"],
        agent_id=row["agent_id"],
        deployed_by_address=row["deployed_by_address"],
        transaction_hash=row["transaction_hash"],
        deployed_at=row["deployed_at"],
        categories=sorted(categories.decode(row["categories"])),
    )


@trace
async def insert_deployed_game(
    storage: Storage, event: CreatedGame, metadata: DeploymentMetadata
) -> ExecuteResult:
    """
    Inserts the game with its factory_deployment_id looked up in the same
    statement. If no deployed_contracts row matches the factory address and
    chain the select is empty and nothing is inserted.
    """
    parent = (
        sqlalchemy.select(
            deployed_contracts.c.id,
            sqlalchemy.cast(event.game_id_on_chain, sqlalchemy.Integer),
            sqlalchemy.cast(event.game_address, sqlalchemy.String),
            sqlalchemy.cast(metadata.agent_id, sqlalchemy.String),
            sqlalchemy.cast(metadata.deployed_by_address, sqlalchemy.String),
            sqlalchemy.cast(event.transaction_hash, sqlalchemy.String),
            sqlalchemy.cast(
                categories.encode(metadata.categories), sqlalchemy.String
            ),
        )
        .where(
            (deployed_contracts.c.address == metadata.factory_address)
            & (deployed_contracts.c.chain_id == metadata.chain_id)
        )
        .order_by(deployed_contracts.c.id.desc())
        .limit(1)
    )
    query = games.insert().from_select(
        [
            games.c.factory_deployment_id,
            games.c.game_id_on_chain,
            games.c.game_address,
            games.c.agent_id,
            games.c.deployed_by_address,
            games.c.transaction_hash,
            games.c.categories,
        ],
        parent,
    )
    return await storage.execute(query)


@trace
async def list_deployed_games(
    storage: Storage, category: str | None, limit: int, offset: int
) -> list[DeployedGame]:
    rows = await storage.fetch_all(
        query=games.select()
        .where(_category_filter(category))
        .order_by(games.c.deployed_at.desc(), games.c.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return [_to_deployed_game(row) for row in rows]


@trace
async def count_deployed_games(storage: Storage, category: str | None) -> int:
    row = await storage.fetch_one(
        query=sqlalchemy.select(sqlalchemy.func.count().label("total"))
        .select_from(games)
        .where(_category_filter(category))
    )
    if row is None:
        return 0
    return int(row["total"])


@trace
async def list_category_strings(storage: Storage) -> list[str]:
    rows = await storage.fetch_all(
        query=sqlalchemy.select(games.c.categories).where(
            games.c.categories != ""
        )
    )
    return [row["categories"] for row in rows]
