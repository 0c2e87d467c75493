from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from payment_blocks.api import payment_block
from payment_blocks.config import Settings
from payment_blocks.db import DatabaseManager
from payment_blocks.observability import configure_logging
from payment_blocks.schemas.responses import HealthCheckResponseSchema
from payment_blocks.services.block_store import (
    InMemoryPaymentBlockStore,
    PaymentBlockStore,
)
from payment_blocks.services.neo4j_block_store import Neo4jPaymentBlockStore
from payment_blocks.services.payment_block import PaymentBlockService

log = structlog.get_logger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"] if part != "body")
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(messages)


def create_app(
    settings: Settings | None = None, store: PaymentBlockStore | None = None
) -> FastAPI:
    """Build the payment block API application.

    Args:
        settings: Runtime configuration, read from the environment if omitted
        store: Block store to use instead of the configured backend

    Returns:
        The configured FastAPI application
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.environment, settings.log_level)
        db_manager: DatabaseManager | None = None
        block_store = store
        if block_store is None and settings.storage_backend == "memory":
            block_store = InMemoryPaymentBlockStore()
        elif block_store is None:
            db_manager = DatabaseManager.from_settings(settings)
            neo4j_store = Neo4jPaymentBlockStore(db_manager)
            try:
                await db_manager.verify_connectivity()
                await neo4j_store.ensure_constraints()
            except Exception:
                await db_manager.close()
                raise
            block_store = neo4j_store

        app.state.payment_block_service = PaymentBlockService(block_store)
        log.info("payment_block_store_ready", store=type(block_store).__name__)
        try:
            yield
        finally:
            app.state.payment_block_service = None
            if db_manager is not None:
                await db_manager.close()
            log.info("payment_block_store_closed", store=type(block_store).__name__)

    app = FastAPI(
        title="Payment Blocks",
        description="Internal API for blocking and unblocking client payments",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Authorization"],
        expose_headers=["Content-Length"],
        allow_credentials=True,
        max_age=12 * 60 * 60,
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _validation_message(exc)},
        )

    @app.get("/internal/v1/health", response_model=HealthCheckResponseSchema)
    async def health_check() -> HealthCheckResponseSchema:
        return HealthCheckResponseSchema(success=True)

    app.include_router(payment_block.router)
    return app


app = create_app()
