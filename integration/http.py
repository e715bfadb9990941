"""
POS Integration — JSON over HTTP
==================================
Minimal POST helper shared by the external service adapters.
Transport failures are mapped onto ExternalServiceError so callers
handle one error type.
"""

from __future__ import annotations

import json
import socket
from typing import Any, Dict, Optional
from urllib import error, request

from core.errors import ExternalServiceError


def post_json(
    *,
    url: str,
    body: Dict[str, Any],
    service: str,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 30.0,
) -> Any:
    """POST `body` as JSON and return the decoded JSON response."""
    req_headers = dict(headers or {})
    req_headers["Content-Type"] = "application/json"
    encoded = json.dumps(body).encode("utf-8")

    req = request.Request(url=url, method="POST", headers=req_headers, data=encoded)
    try:
        with request.urlopen(req, timeout=timeout) as response:
            raw = response.read().decode("utf-8")
    except error.HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="replace")
        raise ExternalServiceError(
            f"{service} request failed ({exc.code} {exc.reason}): {detail}",
            service=service,
            retryable=exc.code >= 500 or exc.code == 429,
            details={"status": exc.code},
        ) from exc
    except (error.URLError, socket.timeout, TimeoutError) as exc:
        raise ExternalServiceError(
            f"{service} unreachable: {exc}", service=service, retryable=True,
        ) from exc

    try:
        return json.loads(raw)
    except ValueError as exc:
        raise ExternalServiceError(
            f"{service} returned invalid JSON.", service=service,
        ) from exc
