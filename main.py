import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api.routes import router
from app.core.config import settings
from app.db.database import engine
from app.db.base import Base
from app import models  # noqa: F401  registers tables on Base.metadata
from dotenv import load_dotenv
load_dotenv()


logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Career Assessment API")

logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def on_startup():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")

app.include_router(router)


@app.get("/")
async def root():
    return {"status": "healthy", "message": "Career Assessment Backend is running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
