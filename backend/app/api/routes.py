# backend/app/api/routes.py

from datetime import datetime
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from sqlalchemy.orm import Session

from app.api.deps_auth import CurrentUser, get_current_user, get_db, require_admin
from app.core.errors import ForbiddenError
from app.core.logging import get_logger
from app.services import user_policy
from app.services import users as users_service
from app.services.user_policy import Role

logger = get_logger(__name__)

router = APIRouter()

# ids are int4 in Postgres; larger values never match a row
MAX_USER_ID = 2**31 - 1

UserId = Annotated[
    int, Path(gt=0, le=MAX_USER_ID, description="User ID must be a positive integer")
]

FORBIDDEN_MESSAGES = {
    "forbidden-not-self": "You can only modify your own account",
    "forbidden-role-change": "Only administrators can change user roles",
    "forbidden-last-admin": "Cannot delete the last admin account",
}

# ---------- SCHEMAS ----------

class UserOut(BaseModel):
    id: int
    name: str
    email: str
    role: Role
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DeletedUserOut(BaseModel):
    id: int
    name: str
    email: str
    role: Role


class UserListResponse(BaseModel):
    message: str
    users: List[UserOut]
    count: int


class UserResponse(BaseModel):
    message: str
    user: UserOut


class UserDeletedResponse(BaseModel):
    message: str
    user: DeletedUserOut


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None

    class Config:
        str_strip_whitespace = True

    @field_validator("name", "email", "role", mode="before")
    @classmethod
    def not_null(cls, v):
        # omitted is fine, explicit null is not
        if v is None:
            raise ValueError("must not be null")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("email")
    @classmethod
    def email_length(cls, v):
        if v is not None and len(v) > 255:
            raise ValueError("must be at most 255 characters")
        return v

    @model_validator(mode="after")
    def at_least_one_field(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        return self


def _enforce(decision: user_policy.Decision) -> None:
    if not decision.allowed:
        raise ForbiddenError(decision.reason, FORBIDDEN_MESSAGES.get(decision.reason))

# ---------- ROUTES ----------

@router.get("/users", response_model=UserListResponse)
def list_users(
    db: Session = Depends(get_db),
    _admin: CurrentUser = Depends(require_admin),
):
    logger.info("Getting all users...")
    all_users = users_service.list_users(db)
    return {
        "message": "Successfully retrieved all users.",
        "users": all_users,
        "count": len(all_users),
    }


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(
    user_id: UserId,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    if not user_policy.can_view(user, user_id):
        raise ForbiddenError("forbidden-not-self", FORBIDDEN_MESSAGES["forbidden-not-self"])

    found = users_service.get_user(db, user_id)
    logger.info("User %s retrieved successfully", found["email"])
    return {"message": "Successfully retrieved user.", "user": found}


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    payload: UserUpdate,
    user_id: UserId,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    updates = payload.model_dump(exclude_unset=True)
    _enforce(user_policy.can_update(user, user_id, updates.keys()))

    logger.info("Updating user %s (fields=%s, by=%s)", user_id, sorted(updates), user.id)
    updated = users_service.update_user(db, user_id, updates)
    return {"message": "User updated successfully.", "user": updated}


@router.delete("/users/{user_id}", response_model=UserDeletedResponse)
def delete_user(
    user_id: UserId,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    admin_count = None
    if user_policy.needs_admin_count(user, user_id):
        admin_count = users_service.count_admins(db)
    _enforce(user_policy.can_delete(user, user_id, admin_count))

    logger.info("Deleting user %s (by=%s)", user_id, user.id)
    deleted = users_service.delete_user(db, user_id)
    return {"message": "User deleted successfully.", "user": deleted}
