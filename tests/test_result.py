"""Result decoder tests."""

import json

import httpx
import pytest

from graphql_request.result import get_result


def test_json_content_type_is_parsed() -> None:
    resp = httpx.Response(200, json={"data": {"a": 1}})
    assert get_result(resp) == {"data": {"a": 1}}


def test_json_content_type_with_charset() -> None:
    resp = httpx.Response(
        200,
        content=b'{"data": {"a": 1}}',
        headers={"Content-Type": "application/json; charset=utf-8"},
    )
    assert get_result(resp) == {"data": {"a": 1}}


def test_text_body_is_returned_as_string() -> None:
    resp = httpx.Response(200, text='{"data": 1}')
    assert get_result(resp) == '{"data": 1}'


def test_missing_content_type_is_text() -> None:
    resp = httpx.Response(200, content=b"plain")
    assert get_result(resp) == "plain"


def test_graphql_response_content_type_is_text() -> None:
    resp = httpx.Response(
        200, content=b'{"data": 1}', headers={"Content-Type": "application/graphql-response+json"}
    )
    assert get_result(resp) == '{"data": 1}'


def test_malformed_json_raises() -> None:
    resp = httpx.Response(200, content=b"{", headers={"Content-Type": "application/json"})
    with pytest.raises(json.JSONDecodeError):
        get_result(resp)
