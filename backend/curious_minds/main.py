import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from . import admin_routes, content_routes, resource_routes, results_routes, session_routes, telemetry_pipeline
from .config import get_settings
from .errors import LocalStoreUnavailableError
from .logging_config import configure_logging
from .services import get_local_store, get_sync_engine


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger.info("Local cache database: %s", settings.local_database_url)
    logger.info("Remote store configured: %s", settings.remote_configured)
    telemetry_pipeline.install()
    # A cache that cannot be opened is fatal; let the error stop startup.
    get_local_store()
    get_sync_engine().ensure_bootstrapped()
    yield


app = FastAPI(title="Curious Minds Cache Backend", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(content_routes.router)
app.include_router(results_routes.router)
app.include_router(session_routes.router)
app.include_router(admin_routes.router)
app.include_router(resource_routes.router)


@app.get("/healthz")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/healthz/database")
def database_health() -> Dict[str, object]:
    try:
        store = get_local_store()
        store.ping()
        item_count = store.items.count()
    except (LocalStoreUnavailableError, RuntimeError) as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    last_pull = store.last_pull_at()
    return {
        "status": "ok",
        "items": item_count,
        "last_pull_at": last_pull.isoformat() if last_pull else None,
        "remote_configured": get_settings().remote_configured,
    }
