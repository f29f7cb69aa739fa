"""FastAPI application factory.

Creates and configures the FastAPI application with middleware,
exception handlers, and route registration.

Run with:
    uvicorn atelier.api.app:create_app --factory
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from atelier import __version__
from atelier.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from atelier.api.routes import register_routes
from atelier.bootstrap import Components, build_components
from atelier.config import get_settings
from atelier.config.settings import Settings
from atelier.errors import AtelierError, PromptNotFoundError, ValidationError
from atelier.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    components: Components | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings override; loaded from config when omitted
        components: Prebuilt wiring; built from settings when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    logging_config = settings.observability.logging
    setup_logging(
        level=logging_config.level,
        format=logging_config.format,
        redact_pii=logging_config.redact_pii,
    )

    app = FastAPI(
        title="Atelier API",
        description="Conversation core for a styling assistant",
        version=__version__,
    )
    app.state.components = components or build_components(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=settings.api.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)
    register_routes(app, metrics_enabled=settings.observability.metrics.enabled)

    logger.info("app_created", debug=settings.debug)
    return app


def _error(status_code: int, code: ErrorCode, message: str, details=None) -> JSONResponse:
    body = ErrorResponse(error=ErrorBody(code=code, message=message, details=details))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        """Caller sent a bad identity."""
        logger.warning("invalid_request", message=exc.message, path=request.url.path)
        return _error(400, ErrorCode.INVALID_REQUEST, exc.message)

    @app.exception_handler(PromptNotFoundError)
    async def prompt_not_found_handler(
        request: Request, exc: PromptNotFoundError
    ) -> JSONResponse:
        logger.error("prompt_missing", key=exc.key, path=request.url.path)
        return _error(500, ErrorCode.INTERNAL_ERROR, "Service is misconfigured")

    @app.exception_handler(AtelierError)
    async def atelier_error_handler(request: Request, exc: AtelierError) -> JSONResponse:
        logger.error(
            "unhandled_atelier_error",
            error=exc.message,
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _error(502, ErrorCode.UPSTREAM_ERROR, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("request_validation_error", errors=exc.errors(), path=request.url.path)
        details = [
            ErrorDetail(field=".".join(str(loc) for loc in error["loc"]), message=error["msg"])
            for error in exc.errors()
        ]
        return _error(400, ErrorCode.INVALID_REQUEST, "Request validation failed", details)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _error(500, ErrorCode.INTERNAL_ERROR, "An unexpected error occurred")
