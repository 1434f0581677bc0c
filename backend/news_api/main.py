import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from .database import engine
from .db_models import *  # noqa: F401,F403
from .config import settings
from .auth.router import router as auth_router
from .users.router import router as users_router
from .news.router import router as news_router
from .comments.router import router as comments_router

log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)
logger.info(f"Application starting with log level: {settings.LOG_LEVEL}")

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Serving images from {settings.STATIC_DIR}")
    yield
    await engine.dispose()

app = FastAPI(title="News Aggregator API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(news_router, prefix="/api")
app.include_router(comments_router, prefix="/api")

app.mount("/images", StaticFiles(directory=settings.STATIC_DIR, check_dir=False), name="images")

@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
