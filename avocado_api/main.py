# avocado_api/main.py

import asyncio
from contextlib import asynccontextmanager, suppress
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from avocado_api import __version__
from avocado_api.api.router import api_router
from avocado_api.core.config import settings
from avocado_api.core.database import mongo_manager
from avocado_api.core.exceptions import DatabaseOperationError
from avocado_api.core.logging_config import add_trace_id_middleware, setup_logging
from avocado_api.models.api_common import ApiIndexResponse, EndpointDescription, error_response
from avocado_api.modules.sales.repository import SalesRecordRepository
from avocado_api.modules.sales.seed import seed_database


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(f"HTTP Exception Caught: {exc.detail} (Status: {exc.status_code})")
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # The only validated input is the create body; unreadable JSON counts as missing fields
    details = "; ".join(str(err.get("msg")) for err in exc.errors())
    logger.warning(f"Validation Error: {details}")
    return error_response(status.HTTP_400_BAD_REQUEST, "All fields are required", details or None)


async def generic_exception_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error(f"Unhandled Exception: {exc}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def start_seed_task(repository: SalesRecordRepository, path: Optional[str] = None) -> asyncio.Task:
    """Starts the database seed in the background; its outcome is only logged."""
    logger.info("RESET_DB set, seeding database in the background...")
    return asyncio.create_task(seed_database(repository, path=path), name="seed-database")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.PROJECT_NAME} v{__version__}...")
    async with mongo_manager:
        repository = SalesRecordRepository(mongo_manager.get_db())
        try:
            await repository.create_indexes()
        except DatabaseOperationError as e:
            logger.error(f"Could not ensure indexes, duplicate ids will not be rejected: {e.details}")

        app.state.seed_task = start_seed_task(repository, settings.SEED_DATA_PATH) if settings.RESET_DB else None
        try:
            yield
        finally:
            logger.info("Shutting down...")
            seed_task = app.state.seed_task
            if seed_task is not None and not seed_task.done():
                logger.warning("Seed still running at shutdown, cancelling it.")
                seed_task.cancel()
                with suppress(asyncio.CancelledError):
                    await seed_task


HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


def list_endpoints(app: FastAPI) -> List[EndpointDescription]:
    """Every documented route with its HTTP methods, in registration order."""
    endpoints = []
    for path, operations in app.openapi().get("paths", {}).items():
        methods = sorted(method.upper() for method in operations if method in HTTP_METHODS)
        if methods:
            endpoints.append(EndpointDescription(path=path, methods=methods))
    return endpoints


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=__version__,
        lifespan=lifespan,
        exception_handlers={
            StarletteHTTPException: http_exception_handler,
            RequestValidationError: validation_exception_handler,
            Exception: generic_exception_handler,
        },
    )

    app.middleware("http")(add_trace_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_model=ApiIndexResponse, tags=["Documentation"], summary="Service metadata and route listing")
    async def read_root():
        return ApiIndexResponse(
            message="Welcome to the Avocado Sales API!",
            documentation=list_endpoints(app),
        )

    app.include_router(api_router)
    return app


app = create_app()


def run():
    """Console entry point: serves the app with uvicorn on HOST:PORT."""
    logger.info(f"Server running on http://{settings.HOST}:{settings.PORT}")
    # log_config=None leaves uvicorn's loggers to the loguru interception
    uvicorn.run("avocado_api.main:app", host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
