# backend/app/api/deps_auth.py

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel

from app.core.config import settings
from app.core.database import SessionLocal
from app.core.errors import ForbiddenError, UnauthorizedError
from app.core.logging import get_logger
from app.core.security import decode_token
from app.services.user_policy import Role, can_list_all

logger = get_logger(__name__)

# Swagger UI "Authorize" flow. auto_error is off so the cookie can be tried
# when no Authorization header is sent.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


class CurrentUser(BaseModel):
    id: int
    role: Role


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    request: Request,
    bearer: Optional[str] = Depends(oauth2_scheme),
) -> CurrentUser:
    token = request.cookies.get(settings.auth_cookie_name) or bearer
    if not token:
        raise UnauthorizedError("Access token is required")

    try:
        payload = decode_token(token)
    except ValueError:
        logger.info("Rejected invalid or expired token")
        raise UnauthorizedError("Invalid or expired token")

    sub = payload.get("sub")
    role = payload.get("role")
    # sub is the user id in decimal string form
    if not isinstance(sub, str):
        raise UnauthorizedError("Invalid or expired token")
    try:
        user_id = int(sub)
        return CurrentUser(id=user_id, role=role)
    except (TypeError, ValueError):
        # ValidationError is a ValueError: covers an unknown role too
        raise UnauthorizedError("Invalid or expired token")


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not can_list_all(user):
        raise ForbiddenError("forbidden-not-admin", "Insufficient permissions")
    return user
