from datetime import datetime, timezone

from fastapi import APIRouter, Request

from coach.api.errors import ok


router = APIRouter(tags=["health"])


@router.get("/")
async def root() -> dict:
    return ok({"message": "Welcome to the coaching API", "docs": "/api/health"})


@router.get("/api/health")
async def health(request: Request) -> dict:
    state = request.app.state
    return ok(
        {
            "status": "ok",
            "environment": state.environment,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "billing": state.billing is not None,
            "aiProvider": state.generator.name,
        }
    )
