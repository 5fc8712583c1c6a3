from sqlalchemy import Column, Integer, String, DateTime, JSON, func
from app.db.base import Base


class User(Base):
    __tablename__ = "users"
    user_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, nullable=False, index=True)

    # Profile fields used to personalise analysis and chat
    current_grade = Column(String(50), nullable=True)
    age = Column(Integer, nullable=True)
    stream = Column(String(100), nullable=True)
    subjects = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
