# backend/app/main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.auth_routes import router as auth_router
from app.api.routes import router as api_router
from app.core.config import settings
from app.core.database import Base, SessionLocal, engine
from app.core.errors import register_exception_handlers
from app.core.logging import get_logger, setup_logging
from app.core.seed import seed_admin_if_missing

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # make sure tables exist
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        seed_admin_if_missing(db)
    finally:
        db.close()

    logger.info("%s started (env=%s)", settings.app_name, settings.app_env)
    yield


app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
app.include_router(api_router, prefix="/api", tags=["users"])


@app.get("/health")
def health():
    return {"status": "ok"}
