from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, Text, func
from sqlalchemy.orm import relationship

from . import Base

vacation_status_enum = Enum("pending", "approved", "rejected", name="vacation_status")


class VacationRequest(Base):
    __tablename__ = "vacation_requests"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    work_days = Column(Integer, nullable=False)
    status = Column(vacation_status_enum, nullable=False, default="pending", server_default="pending")
    description = Column(Text, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    user = relationship("User", foreign_keys=[user_id])
