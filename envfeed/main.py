import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from envfeed.api.feed import router as feed_router
from envfeed.api.sim import router as sim_router
from envfeed.api.ui import router as ui_router
from envfeed.config import LOG_LEVEL, FeedSettings
from envfeed.pipeline.feed_client import HttpFeedSource, MockFeedSource
from envfeed.schemas.event import SelectionPolicy
from envfeed.services.feed_store import EventFeedStore

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)


def build_store(settings: FeedSettings) -> EventFeedStore:
    if settings.mock_mode:
        source = MockFeedSource()
    else:
        source = HttpFeedSource(
            settings.feed_url,
            timeout_s=settings.http_timeout_s,
            cache_bust=settings.cache_bust,
        )
    return EventFeedStore(source, settings)


def create_app(settings: Optional[FeedSettings] = None, store: Optional[EventFeedStore] = None) -> FastAPI:
    settings = settings or FeedSettings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        feed_store = store or build_store(settings)
        app.state.store = feed_store
        app.state.settings = settings
        logger.info(f"[STARTUP] mode={'mock' if settings.mock_mode else 'api'} url={settings.feed_url or '-'}")
        try:
            # first load is the baseline: show the newest record
            await feed_store.refresh(SelectionPolicy.JUMP_TO_LATEST)
            feed_store.start_background_polling()
            yield
        finally:
            await feed_store.aclose()

    app = FastAPI(title="Environmental Event Feed Viewer", lifespan=lifespan)

    # UI at site root (/)
    app.include_router(ui_router)

    # APIs under /api
    app.include_router(feed_router, prefix="/api")
    app.include_router(sim_router, prefix="/api")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
