"""
Nuacha Budget FastAPI Application
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from nuacha.config import settings
from nuacha.api.v1.router import api_router
from nuacha.core.database import init_models
from nuacha.core.exceptions import NuachaError
import nuacha.models

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Family budgets, allocation rules and category maintenance API",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)

@app.exception_handler(NuachaError)
async def nuacha_error_handler(request: Request, exc: NuachaError):
    """Service errors become JSON errors with the service's status code"""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

@app.on_event("startup")
async def startup_event():
    """Initialize on startup"""
    logger.info("Starting %s v%s", settings.PROJECT_NAME, settings.VERSION)

    if settings.CREATE_TABLES_ON_STARTUP:
        await init_models()
        logger.info("Database initialized")

@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down...")

@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "docs": "/docs",
        "health": "/health"
    }

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "nuacha.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
