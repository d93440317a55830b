"""
FastAPI application entry point.

Assembles the FastAPI app with the itinerary workflow router.
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from itinerary_agents.shared.config import Settings
from itinerary_agents.shared.logging import setup_logging
from itinerary_agents.workflow.api import router as itinerary_router

# ============================================================================
# Logging configuration (single source of truth for all stages)
# ============================================================================
setup_logging(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    json_format=Settings.from_env().log_json,
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Itinerary Agents",
    description="Research-grounded itinerary generation for travel and corporate events",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(itinerary_router)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Itinerary Agents",
        "version": "0.1.0",
        "endpoints": {
            "generate": "/api/itinerary/generate",
            "refine": "/api/itinerary/refine",
            "export": "/api/itinerary/export",
            "status": "/api/itinerary/status/{session_id}",
            "shareable": "/api/itinerary/shareable/{session_id}",
            "reset": "/api/itinerary/reset/{session_id}",
        },
    }


@app.get("/health")
async def health():
    """Global health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
