"""Seed an owner and a member account into the configured database."""

from worktrack.db import SessionLocal
from worktrack.models import User
from worktrack.routers.auth import get_password_hash

OWNER_EMAIL = "owner@example.com"
MEMBER_EMAIL = "agent@example.com"
DEFAULT_PASSWORD = "demo1234"


def ensure_user(session, email: str, full_name: str, role: str) -> User:
    user = session.query(User).filter(User.email == email).one_or_none()
    if user:
        return user

    user = User(
        email=email,
        full_name=full_name,
        password_hash=get_password_hash(DEFAULT_PASSWORD),
        role=role,
        is_active=True,
        vacation_days_per_year=30,
        vacation_days_taken=0,
    )
    session.add(user)
    session.flush()
    return user


def main() -> None:
    session = SessionLocal()
    try:
        ensure_user(session, OWNER_EMAIL, "Demo Owner", "OWNER")
        ensure_user(session, MEMBER_EMAIL, "Demo Agent", "MEMBER")
        session.commit()
        print("Demo data ready:")
        print(f"  Owner login: {OWNER_EMAIL} / {DEFAULT_PASSWORD}")
        print(f"  Member login: {MEMBER_EMAIL} / {DEFAULT_PASSWORD}")
    finally:
        session.close()


if __name__ == "__main__":
    main()
