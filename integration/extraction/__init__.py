"""
POS Integration — Inventory Extraction From Documents
=======================================================
A photo of an invoice or stock sheet goes to a vision model, which
answers with a JSON array of rows. Rows become ProductDraft objects the
operator reviews before confirm_drafts() inserts them in one bulk call.

The model answer is untrusted text:
- a ```json fence around it is tolerated
- a non-array answer yields no drafts
- rows that are not objects are skipped
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol
from urllib.parse import quote

from core.config import DEFAULT_SETTINGS, StoreSettings
from core.errors import ExternalServiceError, ValidationError
from core.primitives.product import UNCATEGORIZED, Product
from engines.inventory.commands import ProductCreateRequest
from integration.imaging import strip_data_url_prefix
from integration.http import post_json

logger = logging.getLogger("pos.integration")

SERVICE_NAME = "document_extraction"
DEFAULT_MODEL = "gemini-2.5-flash"
API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"

EXTRACTION_PROMPT = (
    "Extract the inventory items from this document. For each item return "
    "its name, stock quantity, unit selling price and unit cost. "
    "Answer with a JSON array only."
)

RESPONSE_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "name": {"type": "STRING"},
            "stock": {"type": "INTEGER"},
            "price": {"type": "NUMBER"},
            "cost": {"type": "NUMBER"},
        },
        "required": ["name", "stock", "price"],
    },
}

UNKNOWN_ITEM_NAME = "Unknown Item"
PLACEHOLDER_IMAGE_URL = "https://picsum.photos/seed/{seed}/200"


# ══════════════════════════════════════════════════════════════
# DRAFTS
# ══════════════════════════════════════════════════════════════

def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass(frozen=True)
class ProductDraft:
    """One extracted row, editable before confirmation. Values are raw."""
    name: Any = None
    stock: Any = None
    price: Any = None
    cost: Any = None
    category: Any = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ProductDraft:
        return cls(
            name=row.get("name"),
            stock=row.get("stock"),
            price=row.get("price"),
            cost=row.get("cost"),
            category=row.get("category"),
        )

    def to_create_request(
        self, settings: StoreSettings = DEFAULT_SETTINGS,
    ) -> ProductCreateRequest:
        """Fill missing values with import defaults and validate."""
        name = UNKNOWN_ITEM_NAME if _blank(self.name) else str(self.name).strip()
        return ProductCreateRequest(
            name=name,
            price=0 if _blank(self.price) else self.price,
            stock=0 if _blank(self.stock) else self.stock,
            cost=0 if _blank(self.cost) else self.cost,
            category=UNCATEGORIZED if _blank(self.category) else self.category,
            reorder_level=settings.import_reorder_level,
            image_url=PLACEHOLDER_IMAGE_URL.format(seed=quote(name)),
        )


def strip_json_fence(text: str) -> str:
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped[3:]
        if stripped.lower().startswith("json"):
            stripped = stripped[4:]
        if stripped.rstrip().endswith("```"):
            stripped = stripped.rstrip()[:-3]
    return stripped.strip()


def parse_extraction_response(text: str) -> List[ProductDraft]:
    """Model text -> drafts. Raises ExternalServiceError on unparseable JSON."""
    body = strip_json_fence(text or "")
    if not body:
        return []
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise ExternalServiceError(
            "Extraction response was not valid JSON.", service=SERVICE_NAME,
        ) from exc
    if not isinstance(data, list):
        logger.warning("Extraction response was not a JSON array; no drafts")
        return []
    return [ProductDraft.from_row(row) for row in data if isinstance(row, Mapping)]


# ══════════════════════════════════════════════════════════════
# EXTRACTOR
# ══════════════════════════════════════════════════════════════

class DocumentExtractor(Protocol):
    def extract(self, image: str, mime_type: str = "image/jpeg") -> str:
        """Return the model's raw text answer."""
        ...


class GeminiRestExtractor:
    """Calls the generateContent REST endpoint with the document inline."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        timeout: float = 30.0,
        base_url: str = API_BASE,
    ):
        if not api_key:
            raise ValidationError("Document extraction needs an API key.")
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")

    def _body(self, image: str, mime_type: str) -> Dict[str, Any]:
        return {
            "contents": [{
                "parts": [
                    {"inlineData": {
                        "mimeType": mime_type,
                        "data": strip_data_url_prefix(image),
                    }},
                    {"text": EXTRACTION_PROMPT},
                ],
            }],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    def extract(self, image: str, mime_type: str = "image/jpeg") -> str:
        data = post_json(
            url=f"{self._base_url}/{self._model}:generateContent",
            body=self._body(image, mime_type),
            service=SERVICE_NAME,
            headers={"x-goog-api-key": self._api_key},
            timeout=self._timeout,
        )
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ExternalServiceError(
                "Extraction response had no candidates.", service=SERVICE_NAME,
            ) from exc
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


def build_extractor(settings: StoreSettings) -> Optional[GeminiRestExtractor]:
    if not settings.extraction_api_key:
        return None
    return GeminiRestExtractor(
        settings.extraction_api_key, timeout=settings.request_timeout,
    )


# ══════════════════════════════════════════════════════════════
# FLOW
# ══════════════════════════════════════════════════════════════

def extract_drafts(
    extractor: DocumentExtractor, image: str, mime_type: str = "image/jpeg",
) -> List[ProductDraft]:
    try:
        drafts = parse_extraction_response(extractor.extract(image, mime_type))
    except ExternalServiceError as exc:
        logger.error(f"Inventory extraction failed: {exc.message}")
        raise ExternalServiceError(
            "Failed to extract inventory from image.",
            service=SERVICE_NAME,
            retryable=exc.retryable,
            details={"cause": exc.message},
        ) from exc
    logger.info(f"Extracted {len(drafts)} inventory drafts")
    return drafts


def confirm_drafts(
    catalog,
    drafts: Iterable[ProductDraft],
    settings: StoreSettings = DEFAULT_SETTINGS,
) -> List[Product]:
    """All-or-nothing insert of reviewed drafts."""
    requests = [draft.to_create_request(settings) for draft in drafts]
    return catalog.add_products(requests)


__all__ = [
    "DEFAULT_MODEL",
    "UNKNOWN_ITEM_NAME",
    "PLACEHOLDER_IMAGE_URL",
    "ProductDraft",
    "DocumentExtractor",
    "GeminiRestExtractor",
    "strip_json_fence",
    "parse_extraction_response",
    "build_extractor",
    "extract_drafts",
    "confirm_drafts",
]
