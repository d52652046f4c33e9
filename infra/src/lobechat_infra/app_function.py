"""Placeholder app Lambda served behind the REST API.

Stands in for the LobeChat HTTP server until it is deployed as a container
image with the Lambda Web Adapter.
"""

from __future__ import annotations

import json
from typing import Any


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Answer every API Gateway proxy request with a plain-text banner."""
    path = event.get("rawPath") or event.get("path") or "/"
    query = event.get("queryStringParameters") or {}
    return {
        "statusCode": 200,
        "headers": {"content-type": "text/plain"},
        "body": (
            "LobeChat placeholder is running.\n"
            f"Path: {path}\n"
            f"Query: {json.dumps(query)}\n"
        ),
    }
