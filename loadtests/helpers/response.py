"""Response error extraction for load test observability.

Parses Stockflow API error responses into human-readable messages.
Handles three response shapes:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
- Protean validation (400): {"error": {"field": ["msg", ...]}}
- Stockflow failures (409/500/503): {"error": "msg", "code": "InsufficientStock", ...}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    """
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if "detail" in body and isinstance(body["detail"], list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            return " | ".join(f"{k}: {v}" for k, v in error.items())
        code = body.get("code")
        return f"{code}: {error}" if code else str(error)

    return str(body)[:300]


def error_code(response: Response) -> str | None:
    """The stockflow failure type named in the body, if any."""
    try:
        return response.json().get("code")
    except ValueError:
        return None
