"""
POS Integration — Audit Log
=============================
Append-only record of calls to external services (image
enhancement, document extraction): what was called, whether it
succeeded, and whether a fallback was used.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional


STATUS_SUCCESS = "SUCCESS"
STATUS_FAILED = "FAILED"
STATUS_FALLBACK = "FALLBACK"


@dataclass(frozen=True)
class IntegrationAuditEntry:
    """Immutable record of one external call."""

    audit_id: uuid.UUID
    service: str
    operation: str
    status: str  # SUCCESS | FAILED | FALLBACK
    occurred_at: datetime
    error_message: Optional[str] = None
    reference: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "audit_id": str(self.audit_id),
            "service": self.service,
            "operation": self.operation,
            "status": self.status,
            "occurred_at": self.occurred_at.isoformat(),
            "error_message": self.error_message,
            "reference": self.reference,
        }


class IntegrationAuditLog:
    """In-memory, append-only. No updates, no deletes."""

    def __init__(self) -> None:
        self._entries: List[IntegrationAuditEntry] = []

    def record(
        self,
        *,
        service: str,
        operation: str,
        status: str,
        occurred_at: datetime,
        error_message: Optional[str] = None,
        reference: Optional[str] = None,
    ) -> IntegrationAuditEntry:
        entry = IntegrationAuditEntry(
            audit_id=uuid.uuid4(),
            service=service,
            operation=operation,
            status=status,
            occurred_at=occurred_at,
            error_message=error_message,
            reference=reference,
        )
        self._entries.append(entry)
        return entry

    def query_by_service(self, service: str) -> List[IntegrationAuditEntry]:
        return [e for e in self._entries if e.service == service]

    def query_failures(self) -> List[IntegrationAuditEntry]:
        return [e for e in self._entries if e.status != STATUS_SUCCESS]

    @property
    def entries(self) -> List[IntegrationAuditEntry]:
        return list(self._entries)
