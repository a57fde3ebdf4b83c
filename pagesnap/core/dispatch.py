"""
Request Dispatcher
==================

Selects one of the render modes for an incoming payload, derives the viewport,
delegates to the page renderer and wraps the output in the JSON envelope.

Mode priority when several sources are set: html, then url, then pdfURL.
"""

from typing import Optional, Any
import base64

from pydantic import ValidationError

from pagesnap.config.logging import get_logger
from pagesnap.config.settings import Settings, get_settings
from pagesnap.core.rendering.browser_launcher import RenderingError
from pagesnap.core.rendering.page_renderer import PageRenderer
from pagesnap.models.schemas import (
    PDF_CONTENT_TYPE,
    PNG_CONTENT_TYPE,
    RenderMode,
    RenderPlan,
    RenderRequest,
    RenderResult,
    Viewport,
)

logger = get_logger(__name__)

NO_VALID_PAYLOAD = "No valid payload found"


class InvalidPayloadError(Exception):
    """Raised when a payload cannot be mapped to a render mode."""

    pass


def select_mode(request: RenderRequest, strict: bool = False) -> RenderMode:
    """
    Pick the render mode for a request.

    Args:
        request: Parsed render request
        strict: Reject payloads that set more than one source field

    Returns:
        The first requested mode in priority order

    Raises:
        InvalidPayloadError: If no source field is set, or several are set in strict mode
    """
    modes = request.requested_modes()
    if not modes:
        raise InvalidPayloadError(NO_VALID_PAYLOAD)

    if len(modes) > 1:
        names = [mode.value for mode in modes]
        if strict:
            raise InvalidPayloadError(
                f"Ambiguous payload: only one of html, url, pdfURL may be set (got {names})"
            )
        logger.warning("Multiple render sources set, using first", modes=names, selected=names[0])

    return modes[0]


def build_render_plan(
    request: RenderRequest, settings: Optional[Settings] = None
) -> RenderPlan:
    """Derive mode, viewport and capture options from a request."""
    settings = settings or get_settings()
    mode = select_mode(request, strict=settings.strict_mode_selection)

    if mode is RenderMode.HTML:
        sized = request.width is not None and request.height is not None
        viewport = Viewport(
            width=request.width if sized else settings.default_html_width,
            height=request.height if sized else settings.default_html_height,
            device_scale_factor=request.quality_factor or 1.0,
        )
        return RenderPlan(
            mode=mode,
            target=request.html,
            viewport=viewport,
            full_page=not sized,
            content_type=PNG_CONTENT_TYPE,
        )

    if mode is RenderMode.URL:
        viewport = Viewport(
            width=request.width or settings.default_url_width,
            height=settings.url_viewport_height,
        )
        return RenderPlan(
            mode=mode,
            target=request.url,
            viewport=viewport,
            full_page=True,
            content_type=PNG_CONTENT_TYPE,
        )

    return RenderPlan(mode=mode, target=request.pdf_url, content_type=PDF_CONTENT_TYPE)


def encode_result(data: bytes, content_type: str) -> RenderResult:
    """Wrap rendered bytes in the success envelope."""
    return RenderResult(
        status_code=200,
        headers={"Content-Type": content_type},
        body=base64.b64encode(data).decode("ascii"),
        is_base64_encoded=True,
    )


class RequestDispatcher:
    """Maps render requests onto page renderer calls."""

    def __init__(self, renderer: PageRenderer, settings: Optional[Settings] = None):
        self.renderer = renderer
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="dispatcher")  # structlog.BoundLoggerBase

    async def dispatch_payload(self, payload: Any) -> RenderResult:
        """Validate a decoded JSON value and dispatch it."""
        if not isinstance(payload, dict):
            raise InvalidPayloadError("Invalid payload: expected a JSON object")

        try:
            request = RenderRequest.model_validate(payload)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise InvalidPayloadError(f"Invalid payload: bad value for {fields}")

        return await self.dispatch(request)

    async def dispatch(self, request: RenderRequest) -> RenderResult:
        """
        Render a request and shape the result.

        Raises:
            InvalidPayloadError: If no render mode matches
            RenderingError: If the browser fails at any step
        """
        plan = build_render_plan(request, self.settings)
        self.logger.info(
            "Dispatching render",
            mode=plan.mode.value,
            full_page=plan.full_page,
            viewport=plan.viewport.model_dump() if plan.viewport else None,
        )

        try:
            if plan.mode is RenderMode.HTML:
                data = await self.renderer.capture_html(plan.target, plan.viewport, plan.full_page)
            elif plan.mode is RenderMode.URL:
                data = await self.renderer.capture_url(plan.target, plan.viewport)
            else:
                data = await self.renderer.print_pdf(plan.target)
        except RenderingError:
            raise
        except Exception as e:
            raise RenderingError(str(e))

        result = encode_result(data, plan.content_type)
        self.logger.info(
            "Render dispatched", mode=plan.mode.value, content_type=plan.content_type, size=len(data)
        )
        return result
