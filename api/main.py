import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from core import db
from core.errors import INVALID_PARAMETERS, DatabaseError, ValidationError
from core.log import configure_logging
from core.settings import Settings
from items import router as items_router

logger = logging.getLogger(__name__)


def create_app(connector: db.Connector | None = None, settings: Settings | None = None) -> FastAPI:
    connector = connector or db.get_instance()
    settings = settings or connector.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        # Initialize the DB pool once per process.
        await connector.init_pool()
        if settings.create_tables_on_startup:
            # Failures are logged by the connector and do not stop startup.
            await connector.create_tables()
            await connector.create_tables_orders()
        try:
            yield
        finally:
            await connector.close()

    app = FastAPI(title="Sales items API", lifespan=lifespan)
    app.state.connector = connector

    # Allow local frontend dev server to call this API from the browser.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    @app.exception_handler(RequestValidationError)
    async def invalid_parameters(request: Request, exc: Exception) -> PlainTextResponse:
        logger.debug("invalid_parameters path=%s error=%s", request.url.path, exc)
        return PlainTextResponse(INVALID_PARAMETERS, status_code=400)

    @app.exception_handler(DatabaseError)
    async def database_error(request: Request, exc: DatabaseError) -> JSONResponse:
        # Clients only see the id; the detail stays in the server log.
        error_id = uuid.uuid4().hex
        logger.error(
            "database_error error_id=%s path=%s type=%s",
            error_id,
            request.url.path,
            type(exc).__name__,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Database error.", "error_id": error_id},
        )

    app.include_router(items_router.router, tags=["items"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "pool": connector.stats().as_dict()}

    @app.get("/")
    def root() -> dict:
        return {"message": "sales items api"}

    return app


app = create_app()
