"""Tests for /api/v1/script-approval routes."""

from fastapi.testclient import TestClient

from app.core.config import settings
from app.engines.script.approval import hash_script
from app.providers.script_choice import BUILTIN_SCRIPT


def _base() -> str:
    return f"{settings.API_V1_STR}/script-approval"


def test_pending_requires_superuser(
    client: TestClient, normal_user_token_headers: dict[str, str]
) -> None:
    r = client.get(f"{_base()}/pending", headers=normal_user_token_headers)
    assert r.status_code == 403


def test_pending_list(client: TestClient, superuser_token_headers: dict[str, str]) -> None:
    r = client.get(f"{_base()}/pending", headers=superuser_token_headers)
    assert r.status_code == 200
    assert isinstance(r.json(), list)


def test_approve_unknown_hash(
    client: TestClient, superuser_token_headers: dict[str, str]
) -> None:
    r = client.post(
        f"{_base()}/approve", headers=superuser_token_headers, json={"hash": "a" * 64}
    )
    assert r.status_code == 404


def test_approve_bad_hash(client: TestClient, superuser_token_headers: dict[str, str]) -> None:
    r = client.post(
        f"{_base()}/approve", headers=superuser_token_headers, json={"hash": "short"}
    )
    assert r.status_code == 422


def test_approve_already_approved_hash(
    client: TestClient, superuser_token_headers: dict[str, str]
) -> None:
    r = client.post(
        f"{_base()}/approve",
        headers=superuser_token_headers,
        json={"hash": hash_script(BUILTIN_SCRIPT)},
    )
    assert r.status_code == 409
    assert r.json()["detail"] == "Script already approved"
