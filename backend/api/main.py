"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.routes import dashboard, media_proxy, share, walks, weather
from db import init_db
from services.media import register_heif_opener
from settings import settings

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# Register HEIF/HEIC opener at startup (for iPhone photos)
heif_available = register_heif_opener()

# Create app
app = FastAPI(
    title="Walk Recap API",
    description="Dog walk logging, recap images and share pages",
    version="0.1.0",
)

# CORS middleware for the operator frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount the object store
media_path = Path(settings.MEDIA_ROOT)
media_path.mkdir(parents=True, exist_ok=True)
app.mount("/media", StaticFiles(directory=str(media_path)), name="media")

# Include routers
app.include_router(walks.router, prefix="/walks", tags=["walks"])
app.include_router(weather.router, prefix="/api", tags=["weather"])
app.include_router(media_proxy.router, prefix="/api", tags=["media"])
app.include_router(dashboard.router, tags=["dashboard"])
app.include_router(share.router, tags=["share"])


@app.on_event("startup")
def startup_event():
    """Initialize database tables on startup."""
    init_db()


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Walk Recap API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
