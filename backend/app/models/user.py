from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String
from app.core.database import Base


class User(Base):
    __tablename__ = "users"

    __table_args__ = (
        CheckConstraint("role IN ('user', 'admin')", name="ck_users_role"),
    )

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(255), nullable=False)
    # stored lowercased; uniqueness is enforced here, not only in code
    email = Column(String(255), unique=True, index=True, nullable=False)

    # "user" | "admin"
    role = Column(String, nullable=False, default="user")

    password_hash = Column(String, nullable=False)

    # timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )
