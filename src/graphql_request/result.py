"""Response body decoding."""

from __future__ import annotations

from typing import Any

import httpx


def get_result(response: httpx.Response) -> Any:
    """Return the decoded JSON body, or the raw text when the body is not JSON.

    Malformed JSON under a JSON content type raises ``json.JSONDecodeError``.
    """
    content_type = response.headers.get("Content-Type")
    if content_type and content_type.startswith("application/json"):
        return response.json()
    return response.text
