"""FastAPI application entry point and configuration."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from backend.api.sentences_router import router as sentences_router
from backend.api.stats_router import router as stats_router
from backend.api.study_router import router as study_router
from backend.config import settings
from backend.database import get_store, open_store
from backend.srs.errors import (
    InvalidInputError,
    MemorizerError,
    NotFoundError,
    StorageUnavailableError,
)
from backend.srs.store import MemorizationStore

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[MemorizerError], int] = {
    NotFoundError: 404,
    InvalidInputError: 400,
    StorageUnavailableError: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the store on startup and dispose of the engine on shutdown."""
    async with open_store(settings.database_url) as store:
        app.state.store = store
        yield


app = FastAPI(
    title=settings.app_name,
    description="English/Korean sentence memorization with adaptive review",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sentences_router)
app.include_router(study_router)
app.include_router(stats_router)


@app.exception_handler(MemorizerError)
async def memorizer_error_handler(request: Request, exc: MemorizerError) -> JSONResponse:
    """Translate core errors into HTTP responses."""
    status_code = next(
        (code for cls, code in ERROR_STATUS_CODES.items() if isinstance(exc, cls)), 500
    )
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.get("/health")
async def health_check(store: MemorizationStore = Depends(get_store)) -> dict[str, str]:
    """Check database connectivity and return status."""
    async with store.session() as session:
        await session.execute(text("SELECT 1"))
    return {"status": "ok"}
