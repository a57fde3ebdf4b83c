"""
FastAPI Application
==================

HTTP surface of the render worker. A single POST endpoint accepts the render
payload and answers with the JSON envelope; other methods on it are rejected.
"""

from contextlib import asynccontextmanager
import json
import uuid
from typing import AsyncGenerator, Any, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
import structlog
import uvicorn

from pagesnap.config.settings import get_settings, Settings
from pagesnap.config.logging import get_logger
from pagesnap.core.dispatch import InvalidPayloadError, RequestDispatcher
from pagesnap.core.rendering.browser_launcher import BrowserLauncher, RenderingError
from pagesnap.core.rendering.page_renderer import PageRenderer
from pagesnap.models.schemas import HealthStatus

logger = get_logger(__name__)


def build_dispatcher(settings: Settings, launcher: BrowserLauncher) -> RequestDispatcher:
    """Wire a dispatcher to a launcher."""
    return RequestDispatcher(PageRenderer(launcher, settings), settings)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    logger.info("Starting render worker", browser_mode=settings.browser_mode)

    launcher = BrowserLauncher(settings)
    try:
        await launcher.initialize()
    except RenderingError as e:
        logger.error("Browser launcher initialization failed", error=str(e))
        raise RuntimeError(f"Browser launcher initialization failed: {e}")

    app.state.launcher = launcher
    app.state.dispatcher = build_dispatcher(settings, launcher)

    try:
        yield
    finally:
        logger.info("Shutting down render worker")
        try:
            await launcher.close()
        except Exception as e:
            logger.error("Error closing browser launcher", error=str(e))


def get_dispatcher(request: Request) -> RequestDispatcher:
    """Dependency returning the dispatcher created at startup."""
    dispatcher: Optional[RequestDispatcher] = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        # Lifespan did not run (e.g. embedded without startup); launcher starts on first use
        settings: Settings = request.app.state.settings
        launcher = BrowserLauncher(settings)
        request.app.state.launcher = launcher
        dispatcher = build_dispatcher(settings, launcher)
        request.app.state.dispatcher = dispatcher
    return dispatcher


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory function for creating the FastAPI app instance.

    Args:
        settings: Optional settings override (useful for testing)

    Returns:
        FastAPI application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Render HTML, URLs and PDF sources with a headless browser",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_hosts,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    @app.middleware("http")
    async def add_request_id(request: Request, call_next: Any) -> Response:
        """Add request ID to all requests and bind it to log records."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        try:
            response = await call_next(request)
        except Exception as e:
            # Failures outside the route body (dependencies, other middleware)
            logger.error("Unhandled exception", exception=str(e), exc_info=True)
            response = PlainTextResponse(f"Error: {e}", status_code=500)
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(InvalidPayloadError)
    async def invalid_payload_handler(request: Request, exc: InvalidPayloadError) -> Response:
        """Reject payloads that match no render mode."""
        logger.warning("Invalid payload", reason=str(exc))
        return PlainTextResponse(str(exc), status_code=400)

    @app.exception_handler(RenderingError)
    async def rendering_error_handler(request: Request, exc: RenderingError) -> Response:
        """Surface browser failures to the caller."""
        logger.error("Render failed", error=str(exc))
        return PlainTextResponse(f"Error: {exc}", status_code=500)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> Response:
        """General exception handler for unexpected errors."""
        logger.error("Unhandled exception", exception=str(exc), exc_info=True)
        return PlainTextResponse(f"Error: {exc}", status_code=500)

    @app.post("/", tags=["Rendering"])
    async def render(
        request: Request, dispatcher: RequestDispatcher = Depends(get_dispatcher)
    ) -> Response:
        """
        Render the payload and return the JSON envelope.

        Exactly one of html, url or pdfURL selects the mode; see RenderRequest.
        """
        raw = await request.body()
        try:
            payload = json.loads(raw)
        except ValueError:
            raise InvalidPayloadError("Invalid payload: body is not valid JSON")

        try:
            result = await dispatcher.dispatch_payload(payload)
        except (InvalidPayloadError, RenderingError):
            raise
        except Exception as e:
            raise RenderingError(str(e))

        return JSONResponse(content=result.model_dump(by_alias=True))

    @app.api_route(
        "/", methods=["GET", "PUT", "PATCH", "DELETE", "OPTIONS"], include_in_schema=False
    )
    async def method_not_allowed() -> Response:
        return PlainTextResponse("Method Not Allowed", status_code=405, headers={"Allow": "POST"})

    @app.get("/health", response_model=HealthStatus, tags=["Health"])
    async def health_check(request: Request) -> HealthStatus:
        """Report whether the Playwright driver is up and how browsers are reached."""
        launcher: Optional[BrowserLauncher] = getattr(request.app.state, "launcher", None)
        ready = bool(launcher and launcher.is_running)
        return HealthStatus(
            status="healthy" if ready else "unhealthy",
            version=settings.app_version,
            browser_mode=settings.browser_mode,
            browser_ready=ready,
        )

    return app


app = create_app()


def run_development_server() -> None:
    """Run development server with auto-reload."""
    settings = get_settings()
    uvicorn.run(
        "pagesnap.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    run_development_server()
