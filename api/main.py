import logging
from contextlib import AsyncExitStack, asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core import cache as cache_client
from core import db, log, settings
from lyrics.client import LyricsOvhClient
from tracks.background import DetachedTasks
from tracks.cache import RedisTrackCache
from tracks.repository import TrackRepository
from tracks.router import router as tracks_router
from tracks.service import TrackService
from translation.client import build_translator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.setup_logging()

    # One pool, one Redis client and one HTTP client per process, shared by all requests.
    # Each is registered as soon as it exists, so a failing later step still closes it.
    async with AsyncExitStack() as stack:
        stack.callback(logger.info, "service_stopped")
        pool = await db.create_pool()
        stack.push_async_callback(pool.close)
        redis = cache_client.create_client()
        stack.push_async_callback(cache_client.close_client, redis)
        http = await stack.enter_async_context(httpx.AsyncClient(timeout=settings.http_timeout_s()))
        background = DetachedTasks(timeout_s=settings.cache_write_timeout_s())
        stack.push_async_callback(background.aclose)

        store = TrackRepository(pool)
        await store.ensure_schema()
        cache = RedisTrackCache(redis, ttl_s=settings.cache_ttl_s())

        app.state.track_store = store
        app.state.track_cache = cache
        app.state.track_service = TrackService(
            provider=LyricsOvhClient(http),
            translator=build_translator(http),
            store=store,
            cache=cache,
            background=background,
        )
        logger.info("service_started env=%s translator=%s", settings.app_env(), settings.translator_backend())
        yield


app = FastAPI(lifespan=lifespan)

app.include_router(tracks_router, tags=["lyrics"])


@app.get("/health")
async def health(request: Request) -> JSONResponse:
    """
    Postgres must answer; Redis is reported but does not fail the check.
    """
    store: TrackRepository | None = getattr(request.app.state, "track_store", None)
    cache: RedisTrackCache | None = getattr(request.app.state, "track_cache", None)
    if store is None or cache is None:
        return JSONResponse({"status": "starting"}, status_code=503)

    try:
        await store.ping()
    except Exception as exc:
        logger.error("health_db_failed error=%s", exc)
        return JSONResponse({"status": "error", "database": "down"}, status_code=503)

    cache_state = "up"
    try:
        await cache.ping()
    except Exception as exc:
        logger.warning("health_cache_failed error=%s", exc)
        cache_state = "down"

    return JSONResponse({"status": "ok", "database": "up", "cache": cache_state})


@app.get("/")
def root() -> dict:
    return {"message": "lyrics-library api"}
