from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func

from jobboard.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(120), unique=True, nullable=False, index=True)
    full_name = Column(String(255))
    password_hash = Column(String(512), nullable=False)
    role = Column(String(20), nullable=False, default="student", index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
