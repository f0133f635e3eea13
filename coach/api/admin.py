from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from coach.api.deps import get_session, require_admin
from coach.api.errors import ok
from coach.api.schemas import AuditLogOut, dump
from coach.repositories.audit_log import list_audit_logs


router = APIRouter(
    prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)]
)


@router.get("/audit-log")
async def audit_log(
    action: Optional[str] = Query(default=None, max_length=128),
    limit: int = Query(default=50, ge=1, le=500),
    session: AsyncSession = Depends(get_session),
) -> dict:
    entries = await list_audit_logs(session, action=action, limit=limit)
    return ok([dump(AuditLogOut.model_validate(entry)) for entry in entries])
