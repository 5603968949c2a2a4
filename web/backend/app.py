#!/usr/bin/env python3
"""
Eduprima Matchmaking API - FastAPI Application

Tutor search, tutor account deletion and status lookups.

Usage:
    python -m web.backend.app

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation
"""

import logging

from fastapi import FastAPI, HTTPException

from core.exceptions import EduprimaError
from .config import get_config
from .exceptions import (
    service_exception_handler,
    http_exception_handler,
    general_exception_handler
)
from .routers import (
    matchmaking_router,
    tutors_router,
    status_types_router
)

# Load configuration
config = get_config()

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.logging.level.upper(), logging.INFO),
    format=config.logging.format
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Eduprima Matchmaking API",
    description="Tutor matchmaking and account deletion",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure rate limiting
from .routers.tutors import add_rate_limit_handlers
add_rate_limit_handlers(app)

# Register exception handlers
app.add_exception_handler(EduprimaError, service_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Include routers
app.include_router(matchmaking_router)
app.include_router(tutors_router)
app.include_router(status_types_router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "eduprima-matchmaking"}


def main():
    """Run the web server."""
    import uvicorn

    logger.info(f"Starting Eduprima API on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        "web.backend.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level=config.logging.level.lower()
    )


if __name__ == "__main__":
    main()
