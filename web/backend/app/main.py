"""FastAPI application for the apprepo dashboard API.

Provides REST API endpoints wrapping the apprepo package for:
- Listing installed applications as dashboard views
- Removing installations
- Origin queries (installed at / installed by)
- Per-application state
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apprepo import __version__
from web.backend.app.routers import apps

app = FastAPI(
    title="apprepo API",
    description=(
        "REST API for the application installation registry. "
        "Provides endpoints for dashboards to list, query and remove "
        "installed applications and to manage their state."
    ),
    version=__version__,
)

# ---------------------------------------------------------------------------
# CORS middleware (allow all origins for development)
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(apps.router)


@app.get("/", tags=["meta"])
async def root():
    """Return basic API information."""
    return {
        "name": "apprepo API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


@app.get("/health", tags=["meta"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
