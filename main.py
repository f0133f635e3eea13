import asyncio
import logging

from dotenv import load_dotenv

load_dotenv()

import uvicorn

from coach.ai.factory import build_generator
from coach.api.app import create_app
from coach.billing.factory import build_billing_provider
from coach.db.session import engine
from coach.scheduler.setup import setup_scheduler
from config import settings


async def main() -> None:
    logging.basicConfig(level=settings.log_level.upper())

    generator = build_generator(settings)
    billing = build_billing_provider(settings)

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = setup_scheduler(generator)
        scheduler.start()

    app = create_app(generator, billing=billing)
    server_config = uvicorn.Config(
        app, host=settings.host, port=settings.port, log_level=settings.log_level.lower()
    )
    server = uvicorn.Server(server_config)

    try:
        await server.serve()
    finally:
        if scheduler is not None:
            scheduler.shutdown(wait=False)
        await generator.aclose()
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
