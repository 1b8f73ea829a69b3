"""Headless viewing-session runner.

Run against a live API (or the mock in `tools/mock_live_api.py`):
    python -m livevip.main
"""

import asyncio
import random
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from loguru import logger

from livevip.app_config import AppEnvironConfig, get_app_environ_config
from livevip.domain.viewing.viewing_domain import ViewingSession
from livevip.services.live_api.live_api_client import LiveApiClient
from livevip.services.session_store import FileSessionStore, SessionStore
from livevip.shared.scheduler import AsyncioScheduler, Scheduler
from livevip.shared.utils import init_logger


@asynccontextmanager
async def viewing_lifespan(
    settings: AppEnvironConfig | None = None,
    *,
    scheduler: Scheduler | None = None,
    store: SessionStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    rng: random.Random | None = None,
) -> AsyncIterator[ViewingSession]:
    """Acquire the session's capabilities, start it, and release everything on exit."""
    settings = settings or get_app_environ_config()
    scheduler = scheduler or AsyncioScheduler()
    store = store or FileSessionStore(settings.SESSION_STORE_PATH)
    client = LiveApiClient(
        settings.LIVE_API_BASE_URL,
        settings.LIVE_API_KEY,
        timeout=settings.LIVE_API_TIMEOUT_SECONDS,
        transport=transport,
    )
    session = ViewingSession(client, scheduler, store, rng=rng, settings=settings)

    logger.info("Startup viewing session against {}", settings.LIVE_API_BASE_URL)
    await session.start()
    try:
        yield session
    finally:
        logger.info("Shutdown viewing session")
        await session.aclose()
        await scheduler.aclose()


async def run(settings: AppEnvironConfig | None = None) -> None:
    settings = settings or get_app_environ_config()
    async with viewing_lifespan(settings) as session:
        if settings.VIEWER_EMAIL:
            session.login(settings.VIEWER_EMAIL)

        # Give the initial catalog fetch a moment to land.
        for _ in range(50):
            if not session.catalog.loading:
                break
            await asyncio.sleep(0.1)

        if session.catalog.error:
            logger.error("Catalog unavailable: {}", session.catalog.error)
        visible = session.visible_streams
        logger.info(
            "{} visible stream(s), {} VIP-only hidden",
            len(visible),
            session.hidden_vip_count,
        )
        if visible:
            session.select(visible[0])

        elapsed = 0.0
        while elapsed < settings.DEMO_RUN_SECONDS:
            await asyncio.sleep(5)
            elapsed += 5
            feed = session.feed
            logger.info(
                "phase={} stream={} remaining={} comments={} likes={}",
                session.phase,
                session.current_stream.id if session.current_stream else None,
                "unlimited" if session.is_premium else session.remaining_label,
                len(feed.comments) if feed else 0,
                feed.likes.count if feed else 0,
            )


def main() -> None:
    init_logger()
    asyncio.run(run())


if __name__ == "__main__":
    main()
