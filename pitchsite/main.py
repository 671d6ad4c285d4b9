"""
pitchsite - FastAPI Main Application
Personalized marketing microsites with rate limiting and structured logging.
"""

import structlog
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .api.endpoints import router, limiter
from .core.config import settings
from .graph.workflows.generation_workflow import create_generation_workflow
from .models.schemas import ErrorResponse
from .services.fetcher import InvalidURLError
from .services.storage import create_store

# Setup structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.ConsoleRenderer() if settings.ENVIRONMENT == "development" else structlog.processors.JSONRenderer()
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Creates the record store and the generation workflow at startup.
    """
    logger.info(
        "starting_pitchsite_api",
        environment=settings.ENVIRONMENT,
        storage_backend=settings.STORAGE_BACKEND
    )

    try:
        if getattr(app.state, "store", None) is None:
            app.state.store = create_store()
        app.state.generation_workflow = await create_generation_workflow(app.state.store)
        logger.info("workflows_initialized", count=1)
    except Exception as e:
        logger.error("workflow_initialization_failed", error=str(e), exc_info=True)
        raise

    yield

    logger.info("shutting_down_pitchsite_api")
    app.state.generation_workflow = None


app = FastAPI(
    title="pitchsite API",
    description="Personalized B2B marketing microsites generated from a company's website",
    version="1.0.0",
    lifespan=lifespan
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def _error_response(message: str, details: str = None) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(message=message, details=details).model_dump(mode="json")
    )


def _format_errors(errors) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in errors
    )


@app.exception_handler(InvalidURLError)
async def invalid_url_handler(request: Request, exc: InvalidURLError):
    logger.info("invalid_url_rejected", path=request.url.path, error=str(exc))
    return _error_response(str(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return _error_response("Invalid request", _format_errors(exc.errors()))


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    return _error_response("Invalid data", _format_errors(exc.errors()))


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict to the microsite domain
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "pitchsite API",
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pitchsite.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
