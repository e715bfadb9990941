"""
Tests — Product Image Enhancement
====================================
Response parsing, fallback to the original image, and the
validate-enhance-insert flow. External calls are replaced by stubs.
"""

from __future__ import annotations

import pytest

from core.config import StoreSettings
from core.errors import ExternalServiceError, ValidationError
from engines.inventory.services import CatalogStore
from integration.audit_log import STATUS_FAILED, STATUS_FALLBACK, STATUS_SUCCESS, IntegrationAuditLog
from integration.imaging import (
    SOURCE_ENHANCED,
    SOURCE_ORIGINAL,
    EnhancedImage,
    EnhancementRequest,
    HttpImageEnhancer,
    add_product_with_image,
    build_enhancer,
    enhance_with_fallback,
    ensure_data_url,
    parse_enhancement_response,
    strip_data_url_prefix,
)


class StubEnhancer:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.requests = []

    def enhance(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.result


REQUEST = EnhancementRequest(image="data:image/jpeg;base64,RAW", item_name="Redbull",
                             category="Drinks", mime_type="image/jpeg")


class TestDataUrlHelpers:
    def test_strip_prefix(self):
        assert strip_data_url_prefix("data:image/png;base64,AAAA") == "AAAA"
        assert strip_data_url_prefix("AAAA") == "AAAA"

    def test_ensure_data_url(self):
        assert ensure_data_url("AAAA") == "data:image/png;base64,AAAA"
        assert ensure_data_url("AAAA", "image/jpeg") == "data:image/jpeg;base64,AAAA"
        assert ensure_data_url("https://cdn/x.png") == "https://cdn/x.png"
        assert ensure_data_url("data:image/gif;base64,B") == "data:image/gif;base64,B"


class TestEnhancementRequest:
    def test_payload_strips_prefix_and_builds_prompt(self):
        payload = REQUEST.to_payload()
        assert payload["image"] == "RAW"
        assert payload["prompt"].splitlines()[1:] == [
            "Product name: Redbull",
            "Category: Drinks",
            "Ensure the final image feels photorealistic and ready for ecommerce listings.",
        ]
        assert payload["metadata"] == {
            "itemName": "Redbull", "category": "Drinks", "quality": "hd",
        }

    def test_defaults_to_hd_quality(self):
        assert REQUEST.quality == "hd"
        assert REQUEST.prompt.startswith(
            "Transform this into a high-definition, photorealistic ecommerce hero image"
        )

    def test_standard_quality_prompt(self):
        request = EnhancementRequest(image="X", item_name="Chips",
                                     category="Snacks", quality="standard")
        assert request.prompt.splitlines()[0].startswith("Clean up this product photo.")
        assert "Product name: Chips" in request.prompt


    def test_prompt_override(self):
        request = EnhancementRequest(image="X", prompt_override="Just crop it.")
        assert request.prompt == "Just crop it."

    def test_rejects_unknown_quality(self):
        with pytest.raises(ValidationError, match="quality"):
            EnhancementRequest(image="X", quality="ultra")

    def test_rejects_empty_image(self):
        with pytest.raises(ValidationError):
            EnhancementRequest(image="")


class TestParseResponse:
    @pytest.mark.parametrize("data", [
        {"enhancedImageBase64": "NEW"},
        {"enhancedImage": "NEW"},
        {"output": "NEW"},
        {"data": {"enhancedImage": "NEW"}},
        {"data": {"imageBase64": "NEW"}},
    ])
    def test_inline_image_shapes(self, data):
        result = parse_enhancement_response(data, REQUEST)
        assert result.image_url == "data:image/png;base64,NEW"
        assert result.source == SOURCE_ENHANCED

    @pytest.mark.parametrize("data", [
        {"enhancedImageUrl": "https://cdn/1.png"},
        {"data": {"enhancedImageUrl": "https://cdn/1.png"}},
        {"result": {"imageUrl": "https://cdn/1.png"}},
        {"imageUrl": "https://cdn/1.png"},
    ])
    def test_url_shapes(self, data):
        assert parse_enhancement_response(data, REQUEST).image_url == "https://cdn/1.png"

    def test_url_preferred_over_inline(self):
        result = parse_enhancement_response(
            {"enhancedImage": "NEW", "imageUrl": "https://cdn/1.png"}, REQUEST,
        )
        assert result.image_url == "https://cdn/1.png"

    def test_inference_id(self):
        assert parse_enhancement_response({"output": "N", "jobId": "j-7"}, REQUEST).inference_id == "j-7"

    def test_missing_image_falls_back(self):
        result = parse_enhancement_response({"status": "queued"}, REQUEST)
        assert result.source == SOURCE_ORIGINAL
        assert result.image_url == "data:image/jpeg;base64,RAW"
        assert result.is_fallback

    def test_non_object_response(self):
        assert parse_enhancement_response(["x"], REQUEST).is_fallback


class TestEnhanceWithFallback:
    def test_not_configured(self, caplog):
        log = IntegrationAuditLog()
        with caplog.at_level("WARNING", logger="pos.integration"):
            result = enhance_with_fallback(None, REQUEST, log)
        assert result.source == SOURCE_ORIGINAL
        assert result.image_url == REQUEST.image
        assert "not configured" in caplog.text
        assert log.entries[0].status == STATUS_FALLBACK

    def test_service_error_returns_original(self):
        log = IntegrationAuditLog()
        stub = StubEnhancer(error=ExternalServiceError("boom", service="image_enhancement"))
        result = enhance_with_fallback(stub, REQUEST, log)
        assert result.is_fallback
        assert result.error == "boom"
        assert log.entries[0].status == STATUS_FAILED

    def test_success(self):
        log = IntegrationAuditLog()
        stub = StubEnhancer(result=EnhancedImage(image_url="https://cdn/e.png", inference_id="r1"))
        result = enhance_with_fallback(stub, REQUEST, log)
        assert result.image_url == "https://cdn/e.png"
        assert log.entries[0].status == STATUS_SUCCESS
        assert log.entries[0].reference == "r1"

    def test_other_errors_propagate(self):
        stub = StubEnhancer(error=RuntimeError("bug"))
        with pytest.raises(RuntimeError):
            enhance_with_fallback(stub, REQUEST)


class TestBuildEnhancer:
    def test_disabled_without_credentials(self):
        assert build_enhancer(StoreSettings()) is None

    def test_enabled(self):
        settings = StoreSettings(image_endpoint="https://e/v1", image_api_key="k")
        assert isinstance(build_enhancer(settings), HttpImageEnhancer)

    def test_http_enhancer_requires_config(self):
        with pytest.raises(ValidationError):
            HttpImageEnhancer("", "k")


class TestAddProductWithImage:
    def test_enhanced_image_stored(self):
        catalog = CatalogStore()
        stub = StubEnhancer(result=EnhancedImage(image_url="https://cdn/e.png"))
        product = add_product_with_image(
            catalog, {"name": "Redbull", "price": "2.50", "stock": 10, "category": "Drinks"},
            "RAW", enhancer=stub,
        )
        assert product.image_url == "https://cdn/e.png"
        assert stub.requests[0].item_name == "Redbull"
        assert stub.requests[0].category == "Drinks"

    def test_fallback_stores_original(self):
        catalog = CatalogStore()
        product = add_product_with_image(
            catalog, {"name": "Redbull", "price": 1, "stock": 1}, "RAW",
            mime_type="image/jpeg",
        )
        assert product.image_url == "data:image/jpeg;base64,RAW"

    def test_invalid_fields_skip_the_call(self):
        catalog = CatalogStore()
        stub = StubEnhancer(result=EnhancedImage(image_url="x"))
        with pytest.raises(ValidationError):
            add_product_with_image(catalog, {"name": "", "price": 1, "stock": 1}, "RAW", enhancer=stub)
        assert stub.requests == []
        assert len(catalog) == 0
