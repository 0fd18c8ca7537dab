"""Wareongo Backend: FastAPI application entry point.

Provides the cached warehouse listing (/warehouses), warehouse detail and
the listing cache invalidation endpoint.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import settings
from app.database import close_db, create_engine, create_session_factory, get_session_factory, init_db, ping_db
from app.services.cache import CacheError, CacheService, get_cache
from app.warehouses import WarehouseListingService
from app.warehouses.repository import WarehouseRepository, get_repository

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger("wareongo")

_started_at = time.monotonic()


# ═══════════════ LIFESPAN ═══════════════

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Wareongo backend starting")

    engine = create_engine()
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    db_ok = await init_db(engine)
    logger.info("Database: %s", "connected" if db_ok else "unavailable")

    # Redis is optional; the cache falls back to process memory
    cache = CacheService()
    redis_ok = await cache.connect()
    app.state.cache = cache
    logger.info("Redis: %s", "connected" if redis_ok else "unavailable (using in-memory fallback)")

    yield

    await cache.disconnect()
    await close_db(engine)
    logger.info("Wareongo backend shutting down")


# ═══════════════ APP ═══════════════

app = FastAPI(
    title="Wareongo API",
    description="Warehouse listing API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


def get_listing_service(
    repository: WarehouseRepository = Depends(get_repository),
    cache: CacheService = Depends(get_cache),
) -> WarehouseListingService:
    return WarehouseListingService(repository, cache)


def _query_params(request: Request) -> dict[str, list[str]]:
    params = request.query_params
    return {key: params.getlist(key) for key in params.keys()}


# ═══════════════ ENDPOINTS ═══════════════

@app.get("/health")
async def health(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    cache: CacheService = Depends(get_cache),
):
    db_ok = await ping_db(session_factory)
    # The in-memory fallback answers PING but means Redis is unreachable
    redis_ok = not cache.using_fallback and await cache.ping()
    status = "OK" if db_ok and redis_ok else "DEGRADED"
    body = {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - _started_at, 3),
        "services": {
            "server": "OK",
            "database": "OK" if db_ok else "ERROR",
            "redis": "OK" if redis_ok else "ERROR",
            "cacheBackend": cache.backend_name,
        },
    }
    return JSONResponse(status_code=200 if status == "OK" else 503, content=body)


@app.get("/warehouses")
async def list_warehouses(
    request: Request,
    service: WarehouseListingService = Depends(get_listing_service),
):
    """Paginated, filtered warehouse listing backed by the cache."""
    start = time.monotonic()
    try:
        response_data = await service.list_warehouses(_query_params(request))
    except Exception:
        logger.exception("Error fetching warehouses")
        return JSONResponse(
            status_code=500,
            content={"error": "An error occurred while fetching warehouses."},
        )

    elapsed_ms = int((time.monotonic() - start) * 1000)
    logger.info(
        "Listing served | items=%d | total=%d | %dms",
        len(response_data["data"]), response_data["pagination"]["totalItems"], elapsed_ms,
    )
    return JSONResponse(content=response_data)


@app.get("/warehouses/{warehouse_id}")
async def get_warehouse(
    warehouse_id: str,
    service: WarehouseListingService = Depends(get_listing_service),
):
    try:
        parsed_id = int(warehouse_id)
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Invalid warehouse ID format"})

    try:
        warehouse = await service.get_warehouse(parsed_id)
    except Exception:
        logger.exception("Error fetching warehouse details | id=%s", parsed_id)
        return JSONResponse(
            status_code=500,
            content={"error": "An error occurred while fetching warehouse details"},
        )

    if warehouse is None:
        return JSONResponse(status_code=404, content={"error": "Warehouse not found"})
    return JSONResponse(content=warehouse)


@app.delete("/cache/warehouses")
async def clear_warehouse_cache(
    service: WarehouseListingService = Depends(get_listing_service),
):
    """Drop every cached listing page (SCAN-based, safe on large keyspaces)."""
    try:
        cleared = await service.clear_cache()
    except CacheError:
        return JSONResponse(status_code=500, content={"error": "Failed to clear cache"})

    if cleared:
        return {"message": "Cache cleared successfully", "clearedKeys": cleared}
    return {"message": "No cache entries found to clear"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
