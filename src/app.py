"""
Users Backend API Server
Core functionality: CRUD for the Users resource
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import Settings, load_settings
from database.connection import init_database, close_database
from api.routes import health, users
from utils.error_handling import setup_error_handling

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    settings: Settings = app.state.settings
    settings.validate()
    await init_database(settings)
    yield
    await close_database()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application for the given settings"""
    settings = settings or load_settings()

    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))

    app = FastAPI(
        title="Users Backend",
        description="REST API for managing users",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings

    # CORS middleware
    if settings.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )

    # Setup centralized error handling
    setup_error_handling(app)

    # Include API routes
    app.include_router(health.router, tags=["Health"])
    app.include_router(users.router, prefix="/users", tags=["Users"])

    return app


# FastAPI app instance is exported for use by uvicorn
# Server startup is handled by main.py at the project root
app = create_app()
