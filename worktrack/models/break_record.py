from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, UniqueConstraint, func

from . import Base


class BreakRecord(Base):
    __tablename__ = "break_records"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_break_records_user_date"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    minutes = Column(Integer, nullable=False)
    started_at = Column(DateTime, nullable=False)
    ended_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    @property
    def seconds(self) -> int:
        return self.minutes * 60
