"""
Main FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logfire

from config import settings
from observability.logfire_config import LogfireConfig
from api.routes import conversation_flow_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Initialize Logfire first so we can use structured logging
    LogfireConfig.initialize(token=settings.logfire_token, environment=settings.environment)

    logfire.info(
        "Starting Flow Screening API Server",
        environment=settings.environment,
        debug=settings.debug,
        default_model=settings.openai_model_default,
    )

    if not settings.openai_api_key:
        logfire.warning(
            "OPENAI_API_KEY is not set",
            hint="Generation requests will fail with 503 until it is configured",
        )

    yield

    logfire.info("Shutting down Flow Screening API Server")


# Initialize FastAPI app
app = FastAPI(
    title="Flow Screening API",
    description="Screened generation of conversation flows and constrained message rendering",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Health Check Endpoints
# ============================================================================

@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, str]:
    """
    Health check endpoint for load balancers and monitoring.

    Returns:
        dict: Health status and whether model credentials are configured
    """
    return {
        "status": "healthy" if settings.openai_api_key else "degraded",
        "service": "flow-screening-api",
        "version": "1.0.0",
        "llm": "configured" if settings.openai_api_key else "missing_api_key",
        "environment": settings.environment,
    }


@app.get("/", tags=["Root"])
async def root() -> Dict[str, str]:
    """
    Root endpoint - API information.

    Returns:
        dict: Basic API information
    """
    return {
        "name": "Flow Screening API",
        "version": "1.0.0",
        "description": "Conversation-flow generation with roleplay screening",
        "docs": "/docs",
        "health": "/health",
    }


# ============================================================================
# API Routers
# ============================================================================

# Flow generation and message rendering (synchronous, one or two model calls)
app.include_router(conversation_flow_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
