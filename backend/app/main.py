"""
FastAPI main application for the Accessibility Fixer.

This application provides a REST API that rewrites JSX/HTML markup to fix common
accessibility defects, reports every change, and renders a line diff of the result.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import traceback
import logging
import os

from .api import accessibility, system
from ._version import __version__

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Accessibility Fixer API",
    description="API for static accessibility fixes of JSX/HTML markup",
    version=__version__
)

# Add request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"🌐 HTTP {request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(f"🌐 Response: {response.status_code}")
    return response

# Global exception handler so unexpected failures still return structured JSON
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log the full stack trace and return a structured 500 response."""

    full_traceback = traceback.format_exc()

    logger.error(f"🚨 ERROR in {request.method} {request.url}")
    logger.error(f"🚨 Exception: {exc}")
    logger.error(f"🚨 FULL STACK TRACE:\n{full_traceback}")

    error_response = {
        "detail": f"{type(exc).__name__}: {str(exc)}",
        "error_type": type(exc).__name__,
        "error_message": str(exc),
        "request_url": str(request.url),
        "request_method": request.method
    }

    return JSONResponse(
        status_code=500,
        content=error_response
    )

# Allow all origins if CORS_ORIGINS is "*" (for development/testing)
# Otherwise split comma-separated list of allowed origins
cors_origins_env = os.getenv("CORS_ORIGINS", "*")
allowed_origins = ["*"] if cors_origins_env == "*" else cors_origins_env.split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,  # Configurable via environment variable
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(accessibility.router, prefix="/api/accessibility", tags=["accessibility"])
app.include_router(system.router, prefix="/api/system", tags=["system"])

@app.get("/")
async def root():
    """Health check endpoint with version info."""
    return {"message": "Accessibility Fixer API", "status": "running", "version": __version__}

@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": __version__}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000, reload=True)
