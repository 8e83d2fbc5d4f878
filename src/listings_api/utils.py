from __future__ import annotations

from typing import Any, Dict

import httpx


# PUBLIC_INTERFACE
def upstream_error_body(exc: httpx.HTTPError) -> Dict[str, Any]:
    """
    Build the JSON body returned when the upstream backend fails.

    Args:
        exc: The transport or status error raised by the upstream client.

    Returns:
        Dict with keys: error, message, detail.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        detail: Any = {
            "status_code": exc.response.status_code,
            "url": str(exc.request.url),
        }
    else:
        detail = str(exc) or exc.__class__.__name__
    return {
        "error": "UpstreamError",
        "message": "Upstream backend request failed",
        "detail": detail,
    }
