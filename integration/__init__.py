"""
POS Integration Layer — Public API
====================================
Collaborator contracts and adapters for external services.

Doctrine: external services NEVER write to the catalog or ledger
directly. They return values; the caller applies them through the
normal store operations.

Imaging:    product photo -> enhancement service -> image_url (or original)
Extraction: document photo -> vision model -> ProductDraft rows -> bulk add
Jobs:       run either call off the caller's thread with explicit state
"""

from integration.audit_log import IntegrationAuditEntry, IntegrationAuditLog
from integration.extraction import (
    DocumentExtractor,
    GeminiRestExtractor,
    ProductDraft,
    build_extractor,
    confirm_drafts,
    extract_drafts,
    parse_extraction_response,
)
from integration.imaging import (
    EnhancedImage,
    EnhancementRequest,
    HttpImageEnhancer,
    ImageEnhancer,
    add_product_with_image,
    build_enhancer,
    enhance_with_fallback,
    ensure_data_url,
    strip_data_url_prefix,
)
from integration.jobs import ExternalJob, ExternalJobRunner, JobStatus

__all__ = [
    # Audit
    "IntegrationAuditEntry",
    "IntegrationAuditLog",
    # Imaging
    "EnhancementRequest",
    "EnhancedImage",
    "ImageEnhancer",
    "HttpImageEnhancer",
    "build_enhancer",
    "enhance_with_fallback",
    "add_product_with_image",
    "strip_data_url_prefix",
    "ensure_data_url",
    # Extraction
    "ProductDraft",
    "DocumentExtractor",
    "GeminiRestExtractor",
    "build_extractor",
    "parse_extraction_response",
    "extract_drafts",
    "confirm_drafts",
    # Jobs
    "JobStatus",
    "ExternalJob",
    "ExternalJobRunner",
]
