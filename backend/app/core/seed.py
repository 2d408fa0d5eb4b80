from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.logging import get_logger
from app.services import users as users_service

logger = get_logger(__name__)


def seed_admin_if_missing(db: Session) -> bool:
    """Create the configured first admin when no admin exists yet."""
    if not settings.seed_admin_email or not settings.seed_admin_password:
        return False

    if users_service.count_admins(db) > 0:
        return False

    admin = users_service.create_user(
        db,
        name=settings.seed_admin_name,
        email=settings.seed_admin_email,
        password=settings.seed_admin_password,
        role="admin",
    )
    logger.info("Seeded initial admin %s", admin["email"])
    return True
