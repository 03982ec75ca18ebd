from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String, func

from ..config import get_settings
from . import Base

user_role_enum = Enum("OWNER", "ADMIN", "MEMBER", name="user_role")


def _default_vacation_days() -> int:
    return get_settings().default_vacation_days


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    full_name = Column(String, nullable=False)
    role = Column(user_role_enum, nullable=False, default="MEMBER")
    is_active = Column(Boolean, nullable=False, default=True)
    timezone = Column(String, nullable=True)
    vacation_days_per_year = Column(Integer, nullable=False, default=_default_vacation_days, server_default="30")
    vacation_days_taken = Column(Integer, nullable=False, default=0, server_default="0")
    # null means "use the configured default"
    break_duration_minutes = Column(Integer, nullable=True)
    auto_insert_breaks = Column(Boolean, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())
