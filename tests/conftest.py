"""Shared fixtures for the RSCMP client tests."""

import json
from unittest.mock import MagicMock

import pytest

from rscmp_client.client.services import RSCMPClient
from rscmp_client.config.settings import ClientSettings
from rscmp_client.core.models import Research, User


def make_response(status_code=200, body=None, content=None):
    """Build a mock requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if content is None:
        content = json.dumps(body).encode("utf-8") if body is not None else b""
    response.content = content
    response.text = content.decode("utf-8", errors="replace")
    if body is not None:
        response.json.return_value = body
    else:
        response.json.side_effect = ValueError("No JSON body")
    return response


def make_user(roles=None, user_id="u1"):
    return User(
        id=user_id,
        email="user@example.com",
        full_name_en="Test User",
        full_name_ar="مستخدم",
        roles=list(roles or []),
    )


def user_payload(roles=None, user_id="u1"):
    return make_user(roles, user_id).model_dump(by_alias=True)


def research_payload(research_id="r1", status="Draft", **extra):
    payload = {
        "id": research_id,
        "titleEn": "A study of conference workflows",
        "titleAr": "دراسة سير عمل المؤتمرات",
        "status": status,
        "conferenceId": "c1",
        "authors": [{"fullNameEn": "Ann Author", "email": "ann@example.com"}],
        "files": [],
    }
    payload.update(extra)
    return payload


def make_research(status="Draft", research_id="r1", **extra):
    return Research.model_validate(research_payload(research_id, status, **extra))


@pytest.fixture
def settings():
    return ClientSettings(base_url="http://rscmp.test/api/", timeout=5)


@pytest.fixture
def session():
    mock_session = MagicMock()
    mock_session.headers = {}
    return mock_session


@pytest.fixture
def client(settings, session):
    return RSCMPClient(settings, session=session)


@pytest.fixture
def logged_in_client(client):
    client.auth_store.login(make_user(["Reviewer"]), "access-1", "refresh-1")
    client.auth_store.set_selected_role("Reviewer")
    return client
