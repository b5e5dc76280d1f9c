import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import settings
from app.db import dispose_engine
from app.registration.router import router as chat_router
from app.registration.user_router import router as user_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await dispose_engine()


app = FastAPI(title="FitCoach Registration", version="0.1.0", lifespan=lifespan)
app.include_router(user_router)
app.include_router(chat_router)


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "user": {
            "upsert": "/user",
            "detail": "/user/{id}",
            "profile": "/user/{id}/profile",
        },
        "chat": "/chat",
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
