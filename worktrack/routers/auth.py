from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
import bcrypt

from ..constants import ADMIN_ROLES
from ..db import get_db
from ..errors import ForbiddenError, UnauthenticatedError
from ..models import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def require_user(request: Request) -> dict:
    user = request.session.get("user")
    if not user or not user.get("id"):
        raise UnauthenticatedError()
    return user


def require_admin(request: Request, db: Session) -> User:
    session_user = require_user(request)
    user = db.query(User).filter(User.id == session_user["id"]).one_or_none()
    if not user or user.role not in ADMIN_ROLES:
        raise ForbiddenError("Admin access required")
    return user


def client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@router.post("/login")
async def login(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.email == email.lower()).one_or_none()
    if not user or not verify_password(password, user.password_hash):
        return JSONResponse({"error": "Invalid credentials"}, status_code=400)
    if not user.is_active:
        return JSONResponse({"error": "Account is restricted. Contact an administrator."}, status_code=403)

    request.session["user"] = {
        "id": user.id,
        "role": user.role,
        "full_name": user.full_name,
        "timezone": user.timezone or "UTC",
    }
    return JSONResponse({"user": request.session["user"]})


@router.post("/logout")
async def logout(request: Request):
    request.session.clear()
    return JSONResponse({"status": "logged_out"})
