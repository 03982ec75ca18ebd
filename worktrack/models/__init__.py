from sqlalchemy.orm import declarative_base

Base = declarative_base()

from .audit_log import AuditLog  # noqa: E402,F401
from .break_record import BreakRecord  # noqa: E402,F401
from .user import User  # noqa: E402,F401
from .vacation import VacationRequest  # noqa: E402,F401
from .work_session import WorkSession  # noqa: E402,F401
