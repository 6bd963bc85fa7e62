"""
Assistant Gateway - Main Application Entry Point

This module provides the FastAPI application. The lifespan builds the
process-wide collaborators once, in dependency order:

1. logging
2. tool context (token provider, HTTP client factory)
3. tool registry, filled by discovery
4. model provider, dispatch executor, conversation orchestrator

and stores them on ``app.state`` for the dependency functions in api/deps.py.
The registry is read-only once startup completes.
"""

import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError as FastAPIValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from assistant_gateway import __version__
from assistant_gateway.api.middleware.logging import RequestLoggingMiddleware
from assistant_gateway.api.routes import health_router, messages_router, tools_router
from assistant_gateway.clients.tokens import StaticTokenProvider, TokenProvider
from assistant_gateway.core.config import Settings, get_settings
from assistant_gateway.core.exceptions import ErrorCode, RequestValidationError
from assistant_gateway.observability.logging import configure_logging, get_logger
from assistant_gateway.providers.base import LLMProvider
from assistant_gateway.providers.fake import FakeProvider
from assistant_gateway.providers.openai import OpenAIProvider
from assistant_gateway.services.conversation import ConversationOrchestrator
from assistant_gateway.tools.context import (
    HttpClientFactory,
    ToolContext,
    configure_tool_context,
    reset_tool_context,
)
from assistant_gateway.tools.discovery import discover_tools
from assistant_gateway.tools.executor import ToolExecutor
from assistant_gateway.tools.registry import ToolRegistry

# Application metadata
APP_NAME = "Assistant Gateway"
APP_DESCRIPTION = "Conversational model gateway with tool orchestration"

VALIDATION_FAILED_MESSAGE = "Invalid request data"


def get_cors_origins(settings: Settings) -> list[str]:
    """
    Get CORS allowed origins based on environment.

    - Development: Allow all origins (["*"])
    - Staging/Production: settings.cors_origins (empty blocks all
      cross-origin requests)
    """
    if settings.environment == "development":
        return ["*"]
    return list(settings.cors_origins)


def build_provider(settings: Settings) -> LLMProvider:
    """
    Select the model provider.

    The fake provider is used only when ``use_fake_provider`` is set. Without
    an OpenAI key the OpenAI provider is still built, and each model call
    fails with ModelCallError.
    """
    if settings.use_fake_provider:
        return FakeProvider()
    if not settings.has_openai_key:
        get_logger(__name__).warning(
            "openai api key not configured", environment=settings.environment
        )
    return OpenAIProvider(
        api_key=settings.openai_api_key.get_secret_value(),
        base_url=settings.openai_base_url,
        max_attempts=settings.openai_max_attempts,
    )


# =============================================================================
# Validation Error Translation
# =============================================================================


def _validation_details(exc: FastAPIValidationError) -> list[dict[str, str]]:
    """Flatten FastAPI validation errors to [{field, message}]."""
    details = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        message = str(error.get("msg", "Invalid value"))
        details.append(
            {
                "field": ".".join(location) or "body",
                "message": message.removeprefix("Value error, "),
            }
        )
    return details


async def request_validation_handler(
    request: Request, exc: FastAPIValidationError
) -> JSONResponse:
    """Translate FastAPI's 422 into the gateway's 400 error body."""
    error = RequestValidationError(VALIDATION_FAILED_MESSAGE, details=_validation_details(exc))
    return await gateway_validation_handler(request, error)


async def gateway_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": {
                "message": exc.message,
                "details": exc.details,
                "code": ErrorCode(exc.error_code).value,
            },
        },
    )


# =============================================================================
# Application Factory
# =============================================================================


def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[LLMProvider] = None,
    token_provider: Optional[TokenProvider] = None,
    http_client_factory: Optional[HttpClientFactory] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Settings to use (default: environment settings).
        provider: Model provider (default: chosen by build_provider()).
        token_provider: Token provider for identity-scoped tools (default: an
            empty StaticTokenProvider).
        http_client_factory: Factory for tool HTTP clients (default: pooled
            httpx clients).

    Returns:
        The configured application.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # =====================================================================
        # STARTUP
        # =====================================================================
        configure_logging(level=settings.log_level)
        logger = get_logger(__name__)
        logger.info(
            "service starting",
            service=settings.service_name,
            version=__version__,
            environment=settings.environment,
        )

        configure_tool_context(
            ToolContext(
                token_provider=token_provider or StaticTokenProvider(),
                settings=settings,
                http_client_factory=http_client_factory,
            )
        )

        registry = ToolRegistry()
        report = discover_tools(
            registry,
            settings.tool_packages,
            [Path(directory) for directory in settings.tool_directories],
        )
        if report.failures:
            logger.warning("tool discovery failures", failures=report.failures)

        model_provider = provider or build_provider(settings)
        executor = ToolExecutor(registry, timeout=settings.tool_timeout_seconds)

        app.state.settings = settings
        app.state.registry = registry
        app.state.provider = model_provider
        app.state.orchestrator = ConversationOrchestrator(
            provider=model_provider,
            registry=registry,
            executor=executor,
            settings=settings,
        )
        app.state.started_at = time.monotonic()

        logger.info(
            "service ready",
            provider=model_provider.name,
            tools=registry.names(),
            default_model=settings.default_model,
        )

        yield

        # =====================================================================
        # SHUTDOWN
        # =====================================================================
        logger.info("service shutting down", service=settings.service_name)
        reset_tool_context()

    app = FastAPI(
        title=APP_NAME,
        description=APP_DESCRIPTION,
        version=__version__,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(settings),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(FastAPIValidationError, request_validation_handler)
    app.add_exception_handler(RequestValidationError, gateway_validation_handler)

    app.include_router(health_router)
    app.include_router(messages_router)
    app.include_router(tools_router)

    @app.get("/", tags=["Info"])
    async def root() -> dict[str, Any]:
        """Root endpoint returning basic service information."""
        return {
            "service": APP_NAME,
            "version": __version__,
            "docs": "/docs" if settings.environment != "production" else "disabled",
        }

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the application with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "assistant_gateway.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_config=None,
    )
