import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

from fastapi import FastAPI, Query, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse
from jinja2_fragments.fastapi import Jinja2Blocks  # type: ignore

from forecast_portal.common import Storage, categories
from forecast_portal.config import Settings
from forecast_portal.games import GamePage, RecordFailure, RecordOutcome
from forecast_portal.portal import Category, FactoryContract

from . import service
from .schemas import GameDeploymentCreate, ReceiptDeploymentCreate
from .tracing import setup_tracing

logger = logging.getLogger(__name__)

GAMES_PER_PAGE = 9
MAX_PAGE_SIZE = 100

_OUTCOME_STATUS = {
    None: 201,
    RecordFailure.CONFIGURATION_MISSING: 400,
    RecordFailure.CHAIN_INTERACTION_FAILED: 400,
    RecordFailure.PARENT_NOT_FOUND: 404,
    RecordFailure.DUPLICATE_DEPLOYMENT: 409,
    RecordFailure.STORAGE_UNAVAILABLE: 503,
}


def outcome_response(outcome: RecordOutcome) -> JSONResponse:
    return JSONResponse(
        status_code=_OUTCOME_STATUS[outcome.kind],
        content=outcome.model_dump(mode="json"),
    )


def build_app(storage: Storage, settings: Settings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # A database we can't reach at startup is fatal.
        await storage.connect()
        yield
        await storage.disconnect()

    app = FastAPI(lifespan=lifespan)

    web_dir = Path(__file__).parent
    templates = Jinja2Blocks(directory=web_dir / "templates")

    def view(
        request: Request,
        template: str,
        block_name: str | None = None,
        **kwargs: Any,
    ) -> Any:
        if block_name is None:
            block_name = request.headers.get("hx-target")

        return templates.TemplateResponse(
            request=request,
            name=template,
            context=kwargs,
            block_name=block_name,
        )

    @app.get("/health", response_class=HTMLResponse)
    async def check_health(request: Request) -> Any:
        return Response(status_code=200)

    @app.get("/", response_class=HTMLResponse)
    async def get_root(
        request: Request,
        category: str = categories.ALL,
        page: int = Query(1, ge=1),
    ) -> Any:
        factory = await service.get_factory_details(storage, settings)
        all_categories = await service.get_all_categories(storage)
        game_page = await service.get_games(storage, category, page, GAMES_PER_PAGE)
        return view(
            request,
            "index.html",
            factory=factory,
            agent_id=settings.agent_id,
            categories=all_categories,
            suggested_categories=list(Category),
            active_category=category,
            all_category=categories.ALL,
            game_page=game_page,
        )

    @app.get("/api/factory")
    async def get_factory_details() -> FactoryContract | None:
        return await service.get_factory_details(storage, settings)

    @app.post("/api/deployments", response_model=RecordOutcome)
    async def record_agent_game_deployment(data: GameDeploymentCreate) -> Any:
        outcome = await service.record_agent_game_deployment(storage, settings, data)
        return outcome_response(outcome)

    @app.post("/api/deployments/receipt", response_model=RecordOutcome)
    async def record_deployment_receipt(data: ReceiptDeploymentCreate) -> Any:
        outcome = await service.record_deployment_receipt(storage, settings, data)
        return outcome_response(outcome)

    @app.get("/api/categories")
    async def get_all_categories() -> list[str]:
        return await service.get_all_categories(storage)

    @app.get("/api/games")
    async def get_games(
        category: str | None = None,
        page: int = Query(1, ge=1),
        limit: int = Query(GAMES_PER_PAGE, ge=1, le=MAX_PAGE_SIZE),
    ) -> GamePage:
        return await service.get_games(storage, category, page, limit)

    return app


def create_app() -> FastAPI:
    settings = Settings.from_env()
    setup_tracing(settings)
    storage = Storage(settings.database_url)
    return build_app(storage, settings)
