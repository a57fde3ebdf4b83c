"""
Pydantic Models and Schemas
===========================

Data models for render requests, derived render plans and the JSON response envelope.
Wire names follow the camelCase contract; Python attributes are snake_case.
"""

from typing import Optional, Dict, Literal
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, PositiveInt


PNG_CONTENT_TYPE = "image/png"
PDF_CONTENT_TYPE = "application/pdf"


class RenderMode(str, Enum):
    """Render modes, listed in selection priority order."""
    HTML = "html"
    URL = "url"
    PDF = "pdf"


class RenderRequest(BaseModel):
    """Incoming render payload."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    html: Optional[str] = Field(None, description="Raw HTML to render as PNG")
    url: Optional[str] = Field(None, description="Page URL to screenshot as PNG")
    pdf_url: Optional[str] = Field(None, alias="pdfURL", description="Page URL to print as PDF")
    width: Optional[PositiveInt] = Field(None, description="Viewport width in CSS pixels")
    height: Optional[PositiveInt] = Field(None, description="Viewport height in CSS pixels")
    quality_factor: Optional[PositiveFloat] = Field(
        None, alias="qualityFactor", description="Device pixel-density multiplier"
    )

    def requested_modes(self) -> list[RenderMode]:
        """Modes whose source field is set, in priority order."""
        modes = []
        if self.html:
            modes.append(RenderMode.HTML)
        if self.url:
            modes.append(RenderMode.URL)
        if self.pdf_url:
            modes.append(RenderMode.PDF)
        return modes


class Viewport(BaseModel):
    """Browser viewport derived from a request."""
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    device_scale_factor: float = Field(1.0, gt=0)


class RenderPlan(BaseModel):
    """What the dispatcher decided to do with a request."""
    mode: RenderMode
    target: str = Field(..., description="HTML markup or URL, depending on mode")
    viewport: Optional[Viewport] = None
    full_page: bool = False
    content_type: str = PNG_CONTENT_TYPE


class RenderResult(BaseModel):
    """JSON envelope returned on success."""
    model_config = ConfigDict(populate_by_name=True)

    status_code: int = Field(200, alias="statusCode")
    headers: Dict[str, str] = Field(default_factory=dict)
    body: str = Field(..., description="Base64 encoded output")
    is_base64_encoded: bool = Field(True, alias="isBase64Encoded")

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("Content-Type")


class HealthStatus(BaseModel):
    """Health check status."""
    status: Literal["healthy", "unhealthy"] = Field(..., description="Overall status")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="Check timestamp"
    )
    version: str = Field(..., description="Application version")
    browser_mode: Literal["remote", "local"] = Field(..., description="How browsers are acquired")
    browser_ready: bool = Field(..., description="Whether the Playwright driver is running")
