from __future__ import annotations

import asyncio

import uvloop
from aiohttp import web
from loguru import logger

from gift_exchange.core.config import Settings, load_settings
from gift_exchange.core.logging import setup_logging
from gift_exchange.db import init_engine, verify_connection
from gift_exchange.web import create_app


async def on_startup(app: web.Application) -> None:
    logger.info("server starting...")
    verify_connection()
    logger.info("database connection verified")


async def on_shutdown(app: web.Application) -> None:
    logger.info("server stopping...")


async def main(settings: Settings) -> None:
    app = create_app(settings)
    app.on_startup.append(on_startup)
    app.on_shutdown.append(on_shutdown)

    runner = web.AppRunner(app, access_log=None)
    await runner.setup()
    site = web.TCPSite(runner, settings.host, settings.port)
    await site.start()

    logger.info("Listening on {host}:{port}", host=settings.host, port=settings.port)
    logger.info("Base URL - {url}", url=settings.base_url)

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
        logger.info("server stopped")


if __name__ == "__main__":
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_path)
    init_engine(settings.database_url)

    if not getattr(asyncio, "debug", False):
        uvloop.install()

    asyncio.run(main(settings))
