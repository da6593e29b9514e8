"""
FastAPI application for SmartStudy
"""
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from smartstudy.api.study_routes import router as study_router
from smartstudy.config import settings
from smartstudy.models.schemas import ErrorResponse, HealthResponse
from smartstudy.utils.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    RemoteError,
    SmartStudyError,
    ValidationError,
)
from smartstudy.utils.logger import get_logger

logger = get_logger(__name__)

API_VERSION = "1.0.0"

# Status code for each service error; anything else is a 500
ERROR_STATUS = {
    ValidationError: 400,
    AuthError: 401,
    NotFoundError: 404,
    ConflictError: 409,
    RemoteError: 502,
}

# Initialize FastAPI app
app = FastAPI(
    title="SmartStudy API",
    description="Study aid API: accounts, notes, quizzes, dictionary and trivia lookups",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.RATE_LIMIT_PER_HOUR}/hour"]
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Include study routes
app.include_router(study_router)


@app.on_event("startup")
async def startup_event():
    """Log configuration on startup"""
    logger.info("Starting SmartStudy API...")
    logger.info(f"API running on {settings.API_HOST}:{settings.API_PORT}")
    logger.info(f"Storage backend: {settings.STORAGE_BACKEND}")
    if settings.STORAGE_BACKEND == "supabase" and not (settings.SUPABASE_URL and settings.SUPABASE_ANON_KEY):
        logger.warning("STORAGE_BACKEND=supabase but SUPABASE_URL / SUPABASE_ANON_KEY are not set")

@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down SmartStudy API...")

@app.get("/", tags=["Root"])
async def root():
    """Root endpoint"""
    return {
        "message": "Welcome to SmartStudy API",
        "version": API_VERSION,
        "docs": "/docs"
    }

@app.get("/api/v1/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(),
        version=API_VERSION,
        storage_backend=settings.STORAGE_BACKEND
    )

@app.exception_handler(SmartStudyError)
async def smartstudy_exception_handler(request: Request, exc: SmartStudyError):
    """Service errors carry a user-facing message; map the type to a status code"""
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
        500
    )
    logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=exc.message).model_dump()
    )

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions"""
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="An unexpected error occurred").model_dump()
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "smartstudy.api.app:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG_MODE
    )
