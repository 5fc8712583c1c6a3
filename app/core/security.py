from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.models.user import User
from app.repositories.user_repo import get_user_by_id


async def get_current_user(
    x_user_id: int = Header(..., alias="X-User-Id", description="Authenticated caller, set by the upstream gateway"),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the caller identified upstream into a User"""
    user = await get_user_by_id(db, x_user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
