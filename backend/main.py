"""
FastAPI Backend for Shorts Studio
"""

import logging
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import time

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=False,
)

logger = structlog.get_logger()

# Import settings
from config import settings
from pipeline.error_handler import PipelineError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("application_startup", message="FastAPI application starting up")

    # Validate configuration
    try:
        settings.validate_provider_config()
        logger.info("config_validated", message="Configuration validated successfully")
    except ValueError as e:
        logger.error("config_validation_failed", error=str(e))
        raise

    if not settings.OPENROUTER_API_KEY:
        logger.warning("provider_not_configured", provider="openrouter", message="Script generation disabled")
    if not settings.FAL_API_KEY:
        logger.warning("provider_not_configured", provider="fal", message="Media generation disabled")

    # Initialize database
    try:
        from database import init_db
        init_db()
        logger.info("database_tables_created", message="Database initialized successfully")
    except Exception as e:
        logger.error("database_init_error", error=str(e))

    # Seed system climates and styles
    if settings.SEED_SYSTEM_DATA:
        try:
            from database import get_db_context
            from seeds import seed_all
            with get_db_context() as db:
                seed_all(db)
        except Exception as e:
            logger.error("seed_error", error=str(e))

    yield

    logger.info("application_shutdown", message="FastAPI application shutting down")


# Initialize FastAPI app
app = FastAPI(
    title="Shorts Studio API",
    description="Backend API for producing short-form videos with climates and styles",
    version="1.0.0",
    lifespan=lifespan,
    swagger_ui_parameters={
        "persistAuthorization": True,
    }
)

# Configure OpenAPI schema to include API key authentication
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    from fastapi.openapi.utils import get_openapi

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )

    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "ApiKeyAuth": {
            "type": "apiKey",
            "in": "header",
            "name": "X-API-Key",
            "description": "API key for authentication. Use the value from your .env file (API_KEY)"
        },
        "UserId": {
            "type": "apiKey",
            "in": "header",
            "name": "X-User-Id",
            "description": "Identity of the calling user"
        }
    }
    # Apply security globally to all endpoints
    openapi_schema["security"] = [{"ApiKeyAuth": [], "UserId": []}]

    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# API Authentication middleware - applies to all /api/ routes
@app.middleware("http")
async def api_authentication_middleware(request: Request, call_next):
    """Authenticate all /api/ routes with API key"""
    # Skip authentication for non-API routes
    if not request.url.path.startswith("/api/"):
        return await call_next(request)

    # Skip authentication for CORS preflight requests
    if request.method == "OPTIONS":
        return await call_next(request)

    # Import here to avoid circular imports
    import auth

    # No key configured: development mode
    if not auth.get_configured_keys():
        return await call_next(request)

    # Get API key from header or query parameter
    api_key = request.headers.get(auth.API_KEY_HEADER) or request.query_params.get(auth.API_KEY_QUERY)

    if not api_key:
        return JSONResponse(
            status_code=401,
            content={
                "error": "Unauthorized",
                "message": "API key missing. Provide X-API-Key header or ?api_key=YOUR_KEY",
                "detail": "Authentication required for /api/ endpoints"
            },
            headers={"WWW-Authenticate": "ApiKey"}
        )

    if not auth.check_api_key(api_key):
        return JSONResponse(
            status_code=401,
            content={
                "error": "Unauthorized",
                "message": "Invalid API key",
                "detail": "The provided API key is not valid"
            },
            headers={"WWW-Authenticate": "ApiKey"}
        )

    return await call_next(request)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests"""
    start_time = time.time()

    logger.info(
        "request_started",
        method=request.method,
        path=request.url.path,
        client_host=request.client.host if request.client else None
    )

    try:
        response = await call_next(request)
        process_time = time.time() - start_time

        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time=f"{process_time:.3f}s"
        )

        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(
            "request_failed",
            method=request.method,
            path=request.url.path,
            error=str(e),
            process_time=f"{process_time:.3f}s"
        )
        raise


# Pipeline errors carry their own HTTP status and user-facing message
@app.exception_handler(PipelineError)
async def pipeline_exception_handler(request: Request, exc: PipelineError):
    exc.log_error()
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Global error handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred. Please try again later.",
            "details": str(exc) if settings.DEBUG else None
        }
    )


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint

    Returns:
        dict: Health status of the API and which AI providers are configured
    """
    return {
        "status": "healthy",
        "service": "shorts-studio",
        "version": "1.0.0",
        "providers": {
            "openrouter": bool(settings.OPENROUTER_API_KEY),
            "fal": bool(settings.FAL_API_KEY),
        }
    }


# Include routers
from routers import climates, styles, shorts, models

app.include_router(climates.router)
app.include_router(styles.router)
app.include_router(shorts.router)
app.include_router(models.router)


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Shorts Studio API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "climates": "/api/climates",
            "climate_rules": "/api/climates/rules",
            "climate_validate": "/api/climates/validate",
            "styles": "/api/styles",
            "style_affinities": "/api/styles/affinities/{content_type}",
            "shorts": "/api/shorts",
            "scene_params": "/api/shorts/scene-params",
            "generate_script": "/api/shorts/{short_id}/generate-script",
            "generate_media": "/api/shorts/{short_id}/generate-media",
            "models": "/api/models/tasks",
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
