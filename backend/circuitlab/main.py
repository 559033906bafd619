"""FastAPI entry point for the Circuit Lab backend."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from circuitlab.models.settings import settings
from circuitlab.routers import circuit

app = FastAPI(title="Circuit Lab API", version="0.1.0")

# CORS middleware - must be added before routes
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS or ["http://localhost:9002"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["*"],
    max_age=3600,  # Cache preflight for 1 hour
)

app.include_router(circuit.router)


@app.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    """Basic health-check endpoint."""
    return {"status": "ok", "env": settings.APP_ENV}
