"""Persistence for the users table.

Reads go through an explicit column allow-list so credential material
(password_hash) never leaves this module. The session is always passed in by
the caller; nothing here opens its own connection.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import EmailConflictError, UserNotFoundError
from app.core.logging import get_logger
from app.core.security import hash_password
from app.models.user import User

logger = get_logger(__name__)

PUBLIC_COLUMNS = (
    User.id,
    User.name,
    User.email,
    User.role,
    User.created_at,
    User.updated_at,
)

DELETED_COLUMNS = (User.id, User.name, User.email, User.role)

UPDATABLE_FIELDS = frozenset({"name", "email", "role"})


def _project(user: User, columns=PUBLIC_COLUMNS) -> dict[str, Any]:
    return {c.key: getattr(user, c.key) for c in columns}


def _email_taken(db: Session, email: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(User.id).filter(User.email == email)
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    return q.first() is not None


def list_users(db: Session) -> list[dict[str, Any]]:
    rows = db.query(*PUBLIC_COLUMNS).order_by(User.id).all()
    return [dict(r._mapping) for r in rows]


def get_user(db: Session, user_id: int) -> dict[str, Any]:
    row = db.query(*PUBLIC_COLUMNS).filter(User.id == user_id).first()
    if row is None:
        raise UserNotFoundError()
    return dict(row._mapping)


def count_admins(db: Session) -> int:
    return db.query(func.count(User.id)).filter(User.role == "admin").scalar() or 0


def update_user(db: Session, user_id: int, fields: dict[str, Any]) -> dict[str, Any]:
    """Apply a partial update and return the stored result.

    Only keys present in `fields` are written. The email pre-check is a fast
    path; the unique constraint on users.email decides when two writers race.
    """
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields not updatable: {sorted(unknown)}")

    user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError()

    if "email" in fields and _email_taken(db, fields["email"], exclude_id=user_id):
        raise EmailConflictError()

    for k, v in fields.items():
        setattr(user, k, v)
    user.updated_at = datetime.utcnow()

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # only a duplicate email is a conflict; other constraint failures propagate
        if "email" in fields and _email_taken(db, fields["email"], exclude_id=user_id):
            raise EmailConflictError()
        raise

    db.refresh(user)
    logger.info("User updated successfully: %s", user_id)
    return _project(user)


def delete_user(db: Session, user_id: int) -> dict[str, Any]:
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError()

    deleted = _project(user, DELETED_COLUMNS)
    db.delete(user)
    db.commit()

    logger.info("User deleted successfully: %s", user_id)
    return deleted


def get_user_for_login(db: Session, email: str) -> Optional[User]:
    """Full row including password_hash; only for credential checks."""
    return db.query(User).filter(User.email == email.strip().lower()).first()


def create_user(
    db: Session,
    *,
    name: str,
    email: str,
    password: str,
    role: str = "user",
) -> dict[str, Any]:
    email = email.strip().lower()
    if _email_taken(db, email):
        raise EmailConflictError()

    user = User(
        name=name.strip(),
        email=email,
        role=role,
        password_hash=hash_password(password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if _email_taken(db, email):
            raise EmailConflictError()
        raise

    db.refresh(user)
    logger.info("User created: %s (%s)", user.id, user.role)
    return _project(user)
