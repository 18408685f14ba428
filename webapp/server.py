"""aiohttp entry point for the House Harmony command API."""

from __future__ import annotations

import logging

from aiohttp import web

from harmony.config import DB_PATH, LOG_LEVEL, WEBAPP_HOST, WEBAPP_PORT
from harmony.database import Storage
from harmony.engine import GamificationEngine
from harmony.scheduler import setup_scheduler
from harmony.session import SessionManager

from .helpers import ENGINE_KEY, SCHEDULER_KEY, SESSIONS_KEY
from .routes import get_all_routes

logger = logging.getLogger(__name__)


async def on_startup(app: web.Application) -> None:
    engine = app[ENGINE_KEY]
    await engine.storage.init_db()
    await engine.load()
    await app[SESSIONS_KEY].load()
    logger.info("Loaded %d users and %d categories", len(engine.users), len(engine.categories))

    if await engine.check_and_perform_daily_reset():
        logger.info("Daily chores reset on startup")

    app[SCHEDULER_KEY].start()
    logger.info("Scheduler started")


async def on_cleanup(app: web.Application) -> None:
    app[SCHEDULER_KEY].shutdown()
    await app[ENGINE_KEY].storage.close()


def create_app(engine: GamificationEngine, sessions: SessionManager) -> web.Application:
    app = web.Application()
    app[ENGINE_KEY] = engine
    app[SESSIONS_KEY] = sessions

    for routes in get_all_routes():
        app.router.add_routes(routes)

    return app


def main() -> None:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    storage = Storage(DB_PATH)
    engine = GamificationEngine(storage)
    sessions = SessionManager(storage)

    app = create_app(engine, sessions)
    app[SCHEDULER_KEY] = setup_scheduler(engine)
    app.on_startup.append(on_startup)
    app.on_cleanup.append(on_cleanup)

    web.run_app(app, host=WEBAPP_HOST, port=WEBAPP_PORT)


if __name__ == "__main__":
    main()
