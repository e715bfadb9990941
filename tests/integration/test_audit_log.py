"""
Tests — Integration Audit Log
=================================
Verifies the append-only record of external calls.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from integration.audit_log import (
    STATUS_FAILED,
    STATUS_FALLBACK,
    STATUS_SUCCESS,
    IntegrationAuditLog,
)


T0 = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestAuditLog:
    def test_record_returns_frozen_entry(self):
        log = IntegrationAuditLog()
        entry = log.record(
            service="image_enhancement", operation="enhance",
            status=STATUS_SUCCESS, occurred_at=T0, reference="job-1",
        )
        with pytest.raises(AttributeError):
            entry.status = STATUS_FAILED
        assert entry.to_dict()["reference"] == "job-1"
        assert entry.to_dict()["occurred_at"] == T0.isoformat()

    def test_queries(self):
        log = IntegrationAuditLog()
        log.record(service="image_enhancement", operation="enhance",
                   status=STATUS_SUCCESS, occurred_at=T0)
        log.record(service="image_enhancement", operation="enhance",
                   status=STATUS_FALLBACK, occurred_at=T0)
        log.record(service="document_extraction", operation="extract",
                   status=STATUS_FAILED, occurred_at=T0, error_message="timeout")
        assert len(log.query_by_service("image_enhancement")) == 2
        assert [e.status for e in log.query_failures()] == [STATUS_FALLBACK, STATUS_FAILED]

    def test_entries_is_a_copy(self):
        log = IntegrationAuditLog()
        log.record(service="s", operation="o", status=STATUS_SUCCESS, occurred_at=T0)
        log.entries.clear()
        assert len(log.entries) == 1
