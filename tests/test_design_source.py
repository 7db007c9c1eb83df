"""Tests for design URL parsing, node selection and HTTP fetch."""

import json

import pytest
import requests

from formsmith.errors import DesignFetchError, DesignUrlError, NodeNotFoundError
from formsmith.settings import Settings
from formsmith._internal.io import design_source
from formsmith._internal.io.design_source import (
    DesignLocator,
    is_design_url,
    load_design_tree,
    normalize_node_id,
    parse_design_url,
    select_node,
)


class FakeResponse:
    def __init__(self, payload=None, status_code=200, body=None):
        self.payload = payload
        self.status_code = status_code
        self.body = body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")

    def json(self):
        if self.body is not None:
            return json.loads(self.body)
        return self.payload


@pytest.mark.parametrize("url, file_key", [
    ("https://www.figma.com/file/AbC123/Plan-Screens?node-id=453-32363", "AbC123"),
    ("https://www.figma.com/design/AbC123/Plan-Screens?type=design&node-id=453%3A32363&mode=dev", "AbC123"),
])
def test_parse_design_url(url, file_key):
    locator = parse_design_url(url)
    assert locator == DesignLocator(file_key=file_key, node_id="453:32363")


@pytest.mark.parametrize("url", [
    "ftp://www.figma.com/file/AbC123/x?node-id=1-2",
    "https://www.figma.com/proto/AbC123/x?node-id=1-2",
    "https://www.figma.com/file/AbC123/x",
    "https://www.figma.com/file/AbC123/x?node-id=",
    "not a url",
])
def test_parse_design_url_rejects(url):
    with pytest.raises(DesignUrlError):
        parse_design_url(url)


def test_design_url_errors_are_value_errors():
    with pytest.raises(ValueError):
        parse_design_url("https://example.com/")


def test_normalize_node_id():
    assert normalize_node_id(" 1-2 ") == "1:2"
    assert normalize_node_id("1:2") == "1:2"


def test_is_design_url():
    assert is_design_url("https://www.figma.com/file/x")
    assert not is_design_url("design.json")


def test_select_node(sample_design):
    wrapped = {"nodes": {"1:1": {"document": sample_design}}}
    assert select_node(sample_design) is sample_design
    assert select_node(wrapped, "1-1") is sample_design
    assert select_node(wrapped) is sample_design

    with pytest.raises(NodeNotFoundError):
        select_node(wrapped, "9:9")
    with pytest.raises(NodeNotFoundError):
        select_node({"nodes": {"1:1": None}}, "1:1")
    with pytest.raises(NodeNotFoundError):
        select_node({"nodes": {"1:1": {}, "1:2": {}}})


def test_load_design_tree_from_file(design_file):
    root = load_design_tree(design_file, "1:1")
    assert root.name == "Create Plan Screen"
    assert len(root.children) == 3


def test_fetch_design_tree(monkeypatch, sample_design):
    calls = []

    def fake_get(url, params=None, headers=None, timeout=None):
        calls.append((url, params, headers, timeout))
        return FakeResponse({"nodes": {"453:32363": {"document": sample_design}}})

    monkeypatch.setattr(design_source.requests, "get", fake_get)
    settings = Settings(api_base="https://design.test", token="env-token", timeout_seconds=5)

    root = design_source.fetch_design_tree(DesignLocator("AbC123", "453:32363"), settings=settings)

    assert root.id == "1:1"
    assert calls == [(
        "https://design.test/v1/files/AbC123/nodes",
        {"ids": "453:32363"},
        {"X-Figma-Token": "env-token"},
        5,
    )]


def test_fetch_explicit_token_wins(monkeypatch, sample_design):
    seen = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        seen.update(headers)
        return FakeResponse({"nodes": {"1:1": {"document": sample_design}}})

    monkeypatch.setattr(design_source.requests, "get", fake_get)
    design_source.fetch_design_tree(DesignLocator("k", "1:1"), token="cli-token",
                                    settings=Settings(token="env-token"))
    assert seen == {"X-Figma-Token": "cli-token"}


def test_fetch_http_error(monkeypatch):
    monkeypatch.setattr(design_source.requests, "get",
                        lambda *args, **kwargs: FakeResponse(status_code=403))
    with pytest.raises(DesignFetchError, match="403"):
        design_source.fetch_design_tree(DesignLocator("k", "1:1"), settings=Settings())


def test_fetch_connection_error(monkeypatch):
    def fake_get(*args, **kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(design_source.requests, "get", fake_get)
    with pytest.raises(DesignFetchError, match="connection refused"):
        design_source.fetch_design_tree(DesignLocator("k", "1:1"), settings=Settings())


def test_fetch_invalid_json(monkeypatch):
    monkeypatch.setattr(design_source.requests, "get",
                        lambda *args, **kwargs: FakeResponse(body="<html>"))
    with pytest.raises(DesignFetchError, match="invalid JSON"):
        design_source.fetch_design_tree(DesignLocator("k", "1:1"), settings=Settings())


def test_fetch_missing_node(monkeypatch):
    monkeypatch.setattr(design_source.requests, "get",
                        lambda *args, **kwargs: FakeResponse({"nodes": {}}))
    with pytest.raises(NodeNotFoundError):
        design_source.fetch_design_tree(DesignLocator("k", "1:1"), settings=Settings())
