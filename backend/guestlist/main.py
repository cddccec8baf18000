"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from guestlist.config import settings
from guestlist.database import Base, engine
from guestlist.errors import AppError, handle_app_error, handle_request_validation_error

# Import routers
from guestlist.routers import events, guests, rsvp

# Import all models so Base.metadata knows about them
from guestlist.models.organizer import Organizer    # noqa: F401
from guestlist.models.event import Event            # noqa: F401
from guestlist.models.guest import Guest            # noqa: F401
from guestlist.models.invitation import Invitation  # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Guest List & RSVP",
    description="Guest lists, WhatsApp invitations and public RSVP collection for event organizers",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(AppError, handle_app_error)
app.add_exception_handler(RequestValidationError, handle_request_validation_error)

# Register routers
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(guests.router, prefix="/api", tags=["Guests"])
app.include_router(rsvp.router, prefix="/api/rsvp", tags=["RSVP"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/health")
def health_check():
    return {"status": "ok"}
