from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coach.db.models import AuditLog


async def add_audit_log(session: AsyncSession, action: str, payload: dict) -> AuditLog:
    entry = AuditLog(action=action, payload=payload)
    session.add(entry)
    return entry


async def list_audit_logs(
    session: AsyncSession, action: str | None = None, limit: int = 50
) -> list[AuditLog]:
    query = select(AuditLog).order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
    if action is not None:
        query = query.where(AuditLog.action == action)
    result = await session.execute(query.limit(limit))
    return list(result.scalars().all())
