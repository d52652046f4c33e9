"""Tests for the placeholder app Lambda."""
from __future__ import annotations

from lobechat_infra.app_function import handler


def test_handler_echoes_rest_path_and_query() -> None:
    response = handler({"path": "/chat", "queryStringParameters": {"q": "hi"}}, None)
    assert response["statusCode"] == 200
    assert response["headers"] == {"content-type": "text/plain"}
    assert response["body"] == 'LobeChat placeholder is running.\nPath: /chat\nQuery: {"q": "hi"}\n'


def test_handler_prefers_raw_path() -> None:
    response = handler({"rawPath": "/v2", "path": "/v1"}, None)
    assert "Path: /v2\n" in response["body"]


def test_handler_defaults_to_root_and_empty_query() -> None:
    response = handler({"queryStringParameters": None}, None)
    assert response["body"].endswith("Path: /\nQuery: {}\n")
