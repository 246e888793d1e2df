from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Import logging system
from core.logging import setup_logging, get_logger, app_logger

from core.config import settings
from core.exceptions import setup_exception_handlers
from core.middleware import setup_middleware

# Import routers
from routers import auth, users, courses, circles, messages, chatbot, health

# Initialize logging system early
setup_logging()
logger = get_logger("fastapi")

API_PREFIX = "/api"

# Create FastAPI app instance
app = FastAPI(
    title=settings.app_name,
    description="Backend API for SkillCircle: course sharing, study circles, messaging and an AI study assistant",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Setup global exception handlers
setup_exception_handlers(app)

# Setup security middleware
middleware_config = {
    "enable_security_headers": settings.enable_security_headers,
    "enable_request_logging": settings.enable_request_logging,
    "enable_size_limit": True,
    "max_request_size": settings.max_request_size_bytes,
}
setup_middleware(app, middleware_config)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(users.router, prefix=API_PREFIX)
app.include_router(courses.router, prefix=API_PREFIX)
app.include_router(circles.router, prefix=API_PREFIX)
app.include_router(messages.router, prefix=API_PREFIX)
app.include_router(chatbot.router, prefix=API_PREFIX)
app.include_router(health.router, prefix=API_PREFIX)


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint providing basic API information.
    """
    return {
        "message": "Welcome to the SkillCircle API",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
        "health_checks": {
            "basic": f"{API_PREFIX}/health",
            "detailed": f"{API_PREFIX}/health/detailed",
            "database": f"{API_PREFIX}/health/database",
        }
    }


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """Handle application startup."""
    app_logger.info("FastAPI application starting up", environment=settings.environment)


@app.on_event("shutdown")
async def shutdown_event():
    """Handle application shutdown."""
    app_logger.info("FastAPI application shutting down")
