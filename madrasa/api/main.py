"""FastAPI application.

Assembles CORS and all API routers.  ``madrasa/main.py`` re-exports the
app object for ``uvicorn madrasa.main:app``.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from madrasa.api.routes import academic, content, homepage, newsletter
from madrasa.api.routes.health import router as health_router
from madrasa.core.logging import setup_logging
from madrasa.core.settings import get_settings


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    yield


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

# Restrict origins in production via ALLOWED_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(homepage.news_router)
app.include_router(homepage.gallery_router)
app.include_router(newsletter.router)
app.include_router(content.news_router)
app.include_router(content.gallery_router)
app.include_router(academic.router)
