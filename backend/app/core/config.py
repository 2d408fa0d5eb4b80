# backend/app/core/config.py

from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_env: str = "dev"
    app_name: str = "Users API"

    database_url: str = "sqlite:///./users.db"

    # Put this on Render as JWT_SECRET_KEY
    jwt_secret_key: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 10080
    auth_cookie_name: str = "token"

    # comma-separated allowlist, e.g. "https://app.example.com,http://localhost:3000"
    cors_origins: str = "http://localhost:3000"

    log_level: str = "INFO"

    # first admin, created on startup when no admin exists
    seed_admin_email: Optional[str] = None
    seed_admin_password: Optional[str] = None
    seed_admin_name: str = "Administrator"

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def allow_origins(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
