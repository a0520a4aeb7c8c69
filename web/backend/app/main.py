"""FastAPI application for the CMod content moderation service.

Provides REST API endpoints wrapping the cmod package for:
- Text, media and whole-post classification
- Content submission behind the classification gate
- Community reports with immediate threshold evaluation
- Administrative sweep, high-report listing and audit log
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cmod import __version__
from web.backend.app.routers import moderation

app = FastAPI(
    title="CMod API",
    description=(
        "REST API for the CMod content moderation pipeline. "
        "Provides classification, reporting and moderation administration."
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

app.include_router(moderation.router)


# ---------------------------------------------------------------------------
# Root and health-check endpoints
# ---------------------------------------------------------------------------


@app.get("/", tags=["meta"])
async def root():
    """Return basic API information."""
    return {
        "name": "CMod API",
        "version": __version__,
        "description": "Content moderation REST API",
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


@app.get("/health", tags=["meta"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
