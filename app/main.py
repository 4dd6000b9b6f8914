import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.errors import ConfigurationMissing, ContentStoreError
from app.routes.auth import router as auth_router
from app.routes.health import router as health_router
from app.routes.updates import router as updates_router

logger = logging.getLogger(__name__)

def configuration_missing_handler(request: Request, exc: ConfigurationMissing) -> JSONResponse:
    # operator problem: loud in logs, generic to the caller
    logger.error("configuration missing on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})

def content_store_error_handler(request: Request, exc: ContentStoreError) -> JSONResponse:
    logger.error("content store error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})

def create_app() -> FastAPI:
    app = FastAPI(title="site-admin-api", version="0.1.0")
    app.add_exception_handler(ConfigurationMissing, configuration_missing_handler)
    app.add_exception_handler(ContentStoreError, content_store_error_handler)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(updates_router)
    return app

app = create_app()
