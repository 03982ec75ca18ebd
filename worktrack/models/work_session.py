from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, text

from . import Base


class WorkSession(Base):
    __tablename__ = "work_sessions"
    __table_args__ = (
        # at most one open session per user
        Index(
            "uq_work_sessions_open_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("ended_at IS NULL"),
            sqlite_where=text("ended_at IS NULL"),
        ),
        Index("ix_work_sessions_user_started", "user_id", "started_at"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    started_at = Column(DateTime, nullable=False)
    ended_at = Column(DateTime, nullable=True)
    duration_seconds = Column(Integer, nullable=False, default=0, server_default="0")

    @property
    def is_open(self) -> bool:
        return self.ended_at is None
