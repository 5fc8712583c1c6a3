from datetime import datetime, timezone
from typing import Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Log

logger = logging.getLogger(__name__)


async def log_major_event(db: AsyncSession, action: str, status: str, user: str, details: Optional[str] = None, entity: Optional[str] = None, source: Optional[str] = None):
    """
    Record a major lifecycle event in the audit log.

    The row joins the caller's unit of work and is written on its next commit,
    so an audit entry never outlives a rolled-back change.
    """
    logger.debug(
        f"Audit event: action={action}, status={status}, user={user}, entity={entity}, details={details}, source={source}")
    log_entry = Log(
        timestamp=datetime.now(timezone.utc),
        action=action,
        status=status,
        details=details,
        user=user,
        entity=entity,
        source=source,
    )
    db.add(log_entry)
    return log_entry
