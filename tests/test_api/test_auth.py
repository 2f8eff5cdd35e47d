"""Tests for X-API-KEY authentication."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from trend_monitor.api.app import create_app
from trend_monitor.api.dependencies import get_keywords_repository
from trend_monitor.config.settings import Settings


@pytest.fixture
def secured_client(mock_keywords_repo):
    app = create_app()
    app.dependency_overrides[get_keywords_repository] = lambda: mock_keywords_repo
    with patch(
        "trend_monitor.api.auth.get_settings",
        return_value=Settings(api_keys="key-one, key-two"),
    ):
        with TestClient(app) as c:
            yield c
    app.dependency_overrides.clear()


def test_missing_key(secured_client):
    resp = secured_client.get("/keywords")

    assert resp.status_code == 401
    assert "Missing API key" in resp.json()["detail"]


def test_wrong_key(secured_client):
    resp = secured_client.get("/keywords", headers={"X-API-KEY": "nope"})
    assert resp.status_code == 401


def test_any_configured_key(secured_client):
    assert secured_client.get("/keywords", headers={"X-API-KEY": "key-two"}).status_code == 200


def test_dev_mode_without_keys(mock_keywords_repo):
    app = create_app()
    app.dependency_overrides[get_keywords_repository] = lambda: mock_keywords_repo
    with patch("trend_monitor.api.auth.get_settings", return_value=Settings(api_keys=None)):
        with TestClient(app) as c:
            assert c.get("/keywords").status_code == 200
