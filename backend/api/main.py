"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.routes import chat, info, venues
from services.chat_rules import get_default_chat_rules
from settings import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create app
app = FastAPI(
    title="Wheelchair Guidance Hub API",
    description="Accessible venues map data, wheelchair help chat and site content",
    version="0.1.0",
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(venues.router, tags=["venues"])
app.include_router(chat.router, prefix="/chat", tags=["chat"])
app.include_router(info.router, prefix="/info", tags=["info"])


@app.on_event("startup")
def startup_event():
    """Load the chat rules once so a broken rules file fails fast."""
    rules = get_default_chat_rules()
    logger.info("Chat rules ready: %d rules", len(rules))


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Wheelchair Guidance Hub API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
