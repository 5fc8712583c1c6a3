from sqlalchemy.future import select
from app.models.user import User


async def get_user_by_id(db, user_id: int):
    """Get user by user_id"""
    result = await db.execute(select(User).where(User.user_id == user_id))
    return result.scalar_one_or_none()


def profile_for_analysis(user: User) -> dict:
    """Minimal profile consumed by the career analysis prompt; blanks stay None"""
    return {
        "name": user.name,
        "class": user.current_grade or None,
        "age": user.age or None,
    }
