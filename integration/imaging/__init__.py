"""
POS Integration — Product Image Enhancement
=============================================
Turns a raw product photo into a studio-style product shot through an
external enhancement service.

The core never depends on the service being available:
- no endpoint or key configured   -> original image, warning logged
- transport or HTTP failure       -> original image, error logged
- response without an image       -> original image, warning logged

Images travel as base64 (optionally as a `data:` URL). The result is
always usable as a Product.image_url.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Protocol

from core.config import StoreSettings
from core.errors import ExternalServiceError, ValidationError
from core.primitives.product import Product
from engines.inventory.commands import ProductCreateRequest
from integration.audit_log import (
    STATUS_FAILED,
    STATUS_FALLBACK,
    STATUS_SUCCESS,
    IntegrationAuditLog,
)
from integration.http import post_json

logger = logging.getLogger("pos.integration")

SERVICE_NAME = "image_enhancement"

SOURCE_ENHANCED = "enhanced"
SOURCE_ORIGINAL = "original"

QUALITY_PROMPTS = {
    "standard": (
        "Clean up this product photo. Return a sharp, retail-ready product "
        "shot on a neutral background with accurate colors."
    ),
    "hd": (
        "Transform this into a high-definition, photorealistic ecommerce hero "
        "image with perfect lighting, crisp focus, and a clean neutral backdrop."
    ),
}
DEFAULT_QUALITY = "hd"

PROMPT_CLOSING = (
    "Ensure the final image feels photorealistic and ready for ecommerce listings."
)



# ══════════════════════════════════════════════════════════════
# DATA URL HELPERS
# ══════════════════════════════════════════════════════════════

def strip_data_url_prefix(image: str) -> str:
    """'data:image/png;base64,AAAA' -> 'AAAA'. Plain base64 passes through."""
    if image.startswith("data:") and "," in image:
        return image.split(",", 1)[1]
    return image


def ensure_data_url(image: str, mime_type: str = "image/png") -> str:
    """Remote URLs and data URLs pass through; bare base64 gets a prefix."""
    if image.startswith("data:") or image.startswith("http://") or image.startswith("https://"):
        return image
    return f"data:{mime_type};base64,{image}"


# ══════════════════════════════════════════════════════════════
# REQUEST / RESULT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class EnhancementRequest:
    image: str
    item_name: str = ""
    category: str = ""
    mime_type: str = "image/png"
    quality: str = DEFAULT_QUALITY
    prompt_override: Optional[str] = None

    def __post_init__(self):
        if not self.image:
            raise ValidationError("image must not be empty.")
        if self.quality not in QUALITY_PROMPTS:
            raise ValidationError(
                f"quality must be one of {sorted(QUALITY_PROMPTS)}, got '{self.quality}'."
            )

    @property
    def prompt(self) -> str:
        if self.prompt_override:
            return self.prompt_override
        return "\n".join([
            QUALITY_PROMPTS[self.quality],
            f"Product name: {self.item_name}",
            f"Category: {self.category}",
            PROMPT_CLOSING,
        ])

    @property
    def original_data_url(self) -> str:
        return ensure_data_url(self.image, self.mime_type)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "image": strip_data_url_prefix(self.image),
            "prompt": self.prompt,
            "metadata": {
                "itemName": self.item_name,
                "category": self.category,
                "quality": self.quality,
            },
        }


@dataclass(frozen=True)
class EnhancedImage:
    """
    image_url: remote URL or data URL, ready for Product.image_url
    source:    "enhanced" or "original" (fallback)
    """
    image_url: str
    source: str = SOURCE_ENHANCED
    inference_id: Optional[str] = None
    error: Optional[str] = None
    raw_response: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_fallback(self) -> bool:
        return self.source == SOURCE_ORIGINAL


class ImageEnhancer(Protocol):
    def enhance(self, request: EnhancementRequest) -> EnhancedImage:
        ...


# ══════════════════════════════════════════════════════════════
# RESPONSE PARSING
# ══════════════════════════════════════════════════════════════

def _dig(data: Mapping[str, Any], *path: str) -> Any:
    current: Any = data
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def _first(data: Mapping[str, Any], paths) -> Optional[str]:
    for path in paths:
        value = _dig(data, *path)
        if isinstance(value, str) and value:
            return value
    return None


_IMAGE_PATHS = (
    ("enhancedImageBase64",),
    ("enhancedImage",),
    ("output",),
    ("data", "enhancedImage"),
    ("data", "imageBase64"),
)
_URL_PATHS = (
    ("enhancedImageUrl",),
    ("data", "enhancedImageUrl"),
    ("result", "imageUrl"),
    ("imageUrl",),
)
_ID_PATHS = (("id",), ("jobId",), ("requestId",))


def parse_enhancement_response(
    data: Any, request: EnhancementRequest,
) -> EnhancedImage:
    """
    Extract the enhanced image from the response shapes the service
    is known to return. A hosted URL wins over inline base64.
    """
    if not isinstance(data, Mapping):
        data = {}
    url = _first(data, _URL_PATHS)
    image = _first(data, _IMAGE_PATHS)
    inference_id = _first(data, _ID_PATHS)

    if not url and not image:
        return EnhancedImage(
            image_url=request.original_data_url,
            source=SOURCE_ORIGINAL,
            inference_id=inference_id,
            error="Response did not include an enhanced image.",
            raw_response=dict(data),
        )
    return EnhancedImage(
        image_url=url or ensure_data_url(image, "image/png"),
        source=SOURCE_ENHANCED,
        inference_id=inference_id,
        raw_response=dict(data),
    )


# ══════════════════════════════════════════════════════════════
# HTTP ADAPTER
# ══════════════════════════════════════════════════════════════

class HttpImageEnhancer:
    """POSTs the image as JSON to the enhancement endpoint with a bearer token."""

    def __init__(self, endpoint: str, api_key: str, timeout: float = 30.0):
        if not endpoint or not api_key:
            raise ValidationError("Image enhancement needs an endpoint and an API key.")
        self._endpoint = endpoint
        self._api_key = api_key
        self._timeout = timeout

    def enhance(self, request: EnhancementRequest) -> EnhancedImage:
        data = post_json(
            url=self._endpoint,
            body=request.to_payload(),
            service=SERVICE_NAME,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=self._timeout,
        )
        return parse_enhancement_response(data, request)


def build_enhancer(settings: StoreSettings) -> Optional[HttpImageEnhancer]:
    """None when enhancement is not configured."""
    if not settings.image_enhancement_enabled:
        return None
    return HttpImageEnhancer(
        settings.image_endpoint, settings.image_api_key, settings.request_timeout,
    )


# ══════════════════════════════════════════════════════════════
# FALLBACK FLOW
# ══════════════════════════════════════════════════════════════

def _audit(
    audit_log: Optional[IntegrationAuditLog],
    status: str,
    error_message: Optional[str] = None,
    reference: Optional[str] = None,
) -> None:
    if audit_log is None:
        return
    audit_log.record(
        service=SERVICE_NAME,
        operation="enhance",
        status=status,
        occurred_at=datetime.now(timezone.utc),
        error_message=error_message,
        reference=reference,
    )


def enhance_with_fallback(
    enhancer: Optional[ImageEnhancer],
    request: EnhancementRequest,
    audit_log: Optional[IntegrationAuditLog] = None,
) -> EnhancedImage:
    """Never raises for service trouble: the original image is the fallback."""
    if enhancer is None:
        logger.warning("Image enhancement not configured; keeping original image")
        _audit(audit_log, STATUS_FALLBACK, "not configured")
        return EnhancedImage(
            image_url=request.original_data_url,
            source=SOURCE_ORIGINAL,
            error="Image enhancement is not configured.",
        )

    try:
        result = enhancer.enhance(request)
    except ExternalServiceError as exc:
        logger.error(f"Image enhancement failed for '{request.item_name}': {exc.message}")
        _audit(audit_log, STATUS_FAILED, exc.message)
        return EnhancedImage(
            image_url=request.original_data_url,
            source=SOURCE_ORIGINAL,
            error=exc.message,
        )

    if result.is_fallback:
        logger.warning(
            f"Image enhancement returned no image for '{request.item_name}'; "
            f"keeping original"
        )
        _audit(audit_log, STATUS_FALLBACK, result.error, result.inference_id)
    else:
        logger.info(f"Image enhanced for '{request.item_name}' ({result.inference_id})")
        _audit(audit_log, STATUS_SUCCESS, reference=result.inference_id)
    return result


def add_product_with_image(
    catalog,
    fields: Mapping[str, Any],
    image: str,
    *,
    enhancer: Optional[ImageEnhancer] = None,
    mime_type: str = "image/png",
    quality: str = DEFAULT_QUALITY,
    audit_log: Optional[IntegrationAuditLog] = None,
) -> Product:
    """
    Validate the product fields, enhance the photo, then insert.
    Invalid fields fail before any external call is made.
    """
    validated = ProductCreateRequest.from_fields(fields)
    request = EnhancementRequest(
        image=image,
        item_name=validated.name,
        category=str(validated.category),
        mime_type=mime_type,
        quality=quality,
    )
    result = enhance_with_fallback(enhancer, request, audit_log)
    return catalog.add_product(
        ProductCreateRequest(
            name=validated.name,
            price=validated.price,
            stock=validated.stock,
            category=validated.category,
            cost=validated.cost,
            reorder_level=validated.reorder_level,
            image_url=result.image_url,
        )
    )


__all__ = [
    "QUALITY_PROMPTS",
    "SOURCE_ENHANCED",
    "SOURCE_ORIGINAL",
    "EnhancementRequest",
    "EnhancedImage",
    "ImageEnhancer",
    "HttpImageEnhancer",
    "parse_enhancement_response",
    "strip_data_url_prefix",
    "ensure_data_url",
    "build_enhancer",
    "enhance_with_fallback",
    "add_product_with_image",
]
