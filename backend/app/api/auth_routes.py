# backend/app/api/auth_routes.py

from fastapi import APIRouter, Depends, Response
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.deps_auth import CurrentUser, get_current_user, get_db
from app.api.routes import UserOut
from app.core.config import settings
from app.core.errors import UnauthorizedError
from app.core.logging import get_logger
from app.core.security import create_access_token, verify_password
from app.models.user import User
from app.services import users as users_service

logger = get_logger(__name__)

router = APIRouter()


class LoginIn(BaseModel):
    email: str
    password: str


class LoginOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


def _authenticate(db: Session, email: str, password: str) -> User:
    user = users_service.get_user_for_login(db, email or "")
    if not user or not verify_password(password, user.password_hash):
        logger.info("Failed login for %s", email)
        raise UnauthorizedError("Invalid email or password")
    return user


def _issue_token(response: Response, user: User) -> LoginOut:
    token = create_access_token({"sub": str(user.id), "role": user.role})
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.app_env != "dev",
        max_age=settings.access_token_expire_minutes * 60,
    )
    logger.info("User %s signed in", user.id)
    return LoginOut(access_token=token, user=UserOut.model_validate(user))


# JSON login
@router.post("/login", response_model=LoginOut)
def login(payload: LoginIn, response: Response, db: Session = Depends(get_db)):
    user = _authenticate(db, payload.email, payload.password)
    return _issue_token(response, user)


# OAuth2 form endpoint (Swagger Authorize uses this); username is the email
@router.post("/token", response_model=LoginOut)
def token(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    user = _authenticate(db, form_data.username, form_data.password or "")
    return _issue_token(response, user)


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(settings.auth_cookie_name)
    return {"message": "Signed out successfully."}


@router.get("/me", response_model=CurrentUser)
def me(current_user: CurrentUser = Depends(get_current_user)):
    return current_user
