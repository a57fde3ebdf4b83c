"""
Unit Tests for Schemas and Settings
===================================
"""

import pytest
from pydantic import ValidationError

from pagesnap.config.settings import Settings
from pagesnap.models.schemas import RenderMode, RenderRequest, RenderResult


class TestRenderRequest:
    """Test request parsing."""

    def test_wire_names(self):
        request = RenderRequest.model_validate(
            {"pdfURL": "https://example.com", "qualityFactor": 1.5, "width": 10, "height": 20}
        )
        assert request.pdf_url == "https://example.com"
        assert request.quality_factor == 1.5
        assert (request.width, request.height) == (10, 20)

    def test_python_names_accepted(self):
        request = RenderRequest(pdf_url="https://example.com", quality_factor=2)
        assert request.requested_modes() == [RenderMode.PDF]

    def test_unknown_fields_ignored(self):
        request = RenderRequest.model_validate({"html": "<p/>", "imageIdentifier": "abc"})
        assert not hasattr(request, "imageIdentifier")

    @pytest.mark.parametrize("field", ["width", "height", "qualityFactor"])
    @pytest.mark.parametrize("value", [0, -1])
    def test_non_positive_numbers_rejected(self, field, value):
        with pytest.raises(ValidationError):
            RenderRequest.model_validate({"html": "<p/>", field: value})

    def test_requested_modes_order(self):
        request = RenderRequest.model_validate(
            {"pdfURL": "https://c.test", "url": "https://b.test", "html": "<p/>"}
        )
        assert request.requested_modes() == [RenderMode.HTML, RenderMode.URL, RenderMode.PDF]


def test_render_result_dumps_wire_names():
    result = RenderResult(headers={"Content-Type": "image/png"}, body="iVBORw0KGgo=")
    assert result.model_dump(by_alias=True) == {
        "statusCode": 200,
        "headers": {"Content-Type": "image/png"},
        "body": "iVBORw0KGgo=",
        "isBase64Encoded": True,
    }
    assert result.content_type == "image/png"


class TestSettings:
    """Test settings validation."""

    def test_defaults(self):
        settings = Settings(environment="testing")
        assert settings.html_settle_delay == 2.0
        assert settings.default_url_width == 1280
        assert settings.strict_mode_selection is False
        assert settings.browser_mode == "local"

    def test_remote_mode(self):
        settings = Settings(environment="testing", browser_endpoint="ws://browser:9222")
        assert settings.browser_mode == "remote"

    def test_blank_endpoint_is_local(self):
        assert Settings(environment="testing", browser_endpoint="  ").browser_endpoint is None

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(environment="staging")

    def test_log_level_normalized(self):
        assert Settings(environment="testing", log_level="debug").log_level == "DEBUG"

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("PAGESNAP_HTML_SETTLE_DELAY", "0.5")
        monkeypatch.setenv("PAGESNAP_ALLOWED_HOSTS", '["a.test", "b.test"]')
        settings = Settings(environment="testing")
        assert settings.html_settle_delay == 0.5
        assert settings.allowed_hosts == ["a.test", "b.test"]
