import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import async_sessionmaker

from coach.ai.adapter import CoachMessageGenerator
from coach.api import (
    admin,
    ai_coach,
    health,
    notifications,
    progress,
    promo,
    subscriptions,
    users,
)
from coach.api.errors import register_exception_handlers
from coach.billing.adapter import BillingProvider
from coach.db.session import AsyncSessionLocal
from config import settings


logger = logging.getLogger(__name__)


def create_app(
    generator: CoachMessageGenerator,
    billing: BillingProvider | None = None,
    session_factory: async_sessionmaker = AsyncSessionLocal,
    admin_token: str | None = None,
) -> FastAPI:
    app = FastAPI(title="Relationship Coach API", version="1.0.0")

    # Optional collaborators are passed in; routes check them, never globals.
    app.state.generator = generator
    app.state.billing = billing
    app.state.session_factory = session_factory
    app.state.admin_token = settings.admin_api_token if admin_token is None else admin_token
    app.state.environment = settings.environment

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(promo.router)
    app.include_router(ai_coach.router)
    app.include_router(subscriptions.router)
    app.include_router(notifications.router)
    app.include_router(progress.router)
    app.include_router(users.router)
    app.include_router(admin.router)

    logger.info(
        "App created",
        extra={"billing": billing is not None, "ai_provider": generator.name},
    )
    return app
