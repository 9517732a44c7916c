"""Tests for /api/v1/jobs routes."""

import uuid

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from app.core.config import settings
from app.engines.script.approval import hash_script
from app.models import User
from app.models_permission import PermissionActionEnum
from app.providers import NO_DEFAULT_CHOICE
from tests.utils.job import create_random_job
from tests.utils.user import grant_job_permission


def _base() -> str:
    return f"{settings.API_V1_STR}/jobs"


def _user(db: Session, email: str) -> User:
    return db.exec(select(User).where(User.email == email)).one()


# --- create / list / detail / delete ---


def test_create_job(client: TestClient, superuser_token_headers: dict[str, str]) -> None:
    r = client.post(
        f"{_base()}/create",
        headers=superuser_token_headers,
        json={"name": "create-me", "description": "a job"},
    )
    assert r.status_code == 200
    data = r.json()
    assert data["name"] == "create-me"
    assert data["choice_provider"] is None


def test_create_job_duplicate_name(
    client: TestClient, superuser_token_headers: dict[str, str], db: Session
) -> None:
    create_random_job(db, name="dup-job")
    r = client.post(
        f"{_base()}/create", headers=superuser_token_headers, json={"name": "dup-job"}
    )
    assert r.status_code == 400


def test_create_job_forbidden(
    client: TestClient, normal_user_token_headers: dict[str, str]
) -> None:
    r = client.post(
        f"{_base()}/create", headers=normal_user_token_headers, json={"name": "nope"}
    )
    assert r.status_code == 403


def test_create_job_unauthorized(client: TestClient) -> None:
    r = client.post(f"{_base()}/create", json={"name": "anon"})
    assert r.status_code == 401


def test_list_jobs_filtered_by_permission(
    client: TestClient,
    normal_user_token_headers: dict[str, str],
    normal_user_email: str,
    db: Session,
) -> None:
    visible = create_random_job(db)
    hidden = create_random_job(db)
    grant_job_permission(
        db, _user(db, normal_user_email), PermissionActionEnum.READ, visible.id
    )
    r = client.get(_base(), headers=normal_user_token_headers)
    assert r.status_code == 200
    ids = {j["id"] for j in r.json()}
    assert str(visible.id) in ids
    assert str(hidden.id) not in ids


def test_get_job(
    client: TestClient, superuser_token_headers: dict[str, str], db: Session
) -> None:
    j = create_random_job(db)
    r = client.get(f"{_base()}/{j.id}", headers=superuser_token_headers)
    assert r.status_code == 200
    assert r.json()["name"] == j.name


def test_get_job_not_found(
    client: TestClient, superuser_token_headers: dict[str, str]
) -> None:
    r = client.get(f"{_base()}/{uuid.uuid4()}", headers=superuser_token_headers)
    assert r.status_code == 404


def test_get_job_forbidden(
    client: TestClient, normal_user_token_headers: dict[str, str], db: Session
) -> None:
    j = create_random_job(db)
    r = client.get(f"{_base()}/{j.id}", headers=normal_user_token_headers)
    assert r.status_code == 403


def test_delete_job(
    client: TestClient, superuser_token_headers: dict[str, str], db: Session
) -> None:
    j = create_random_job(db)
    r = client.delete(f"{_base()}/delete/{j.id}", headers=superuser_token_headers)
    assert r.status_code == 200
    r = client.get(f"{_base()}/{j.id}", headers=superuser_token_headers)
    assert r.status_code == 404


# --- choice provider ---


def test_choices_not_configured(
    client: TestClient, superuser_token_headers: dict[str, str], db: Session
) -> None:
    j = create_random_job(db)
    r = client.get(f"{_base()}/{j.id}/choices", headers=superuser_token_headers)
    assert r.status_code == 404


def test_save_provider_and_list_choices(
    client: TestClient, superuser_token_headers: dict[str, str], db: Session
) -> None:
    j = create_random_job(db)
    r = client.post(
        f"{_base()}/{j.id}/choice-provider",
        headers=superuser_token_headers,
        json={
            "giturl": "https://example.com/app.git",
            "script": 'return ["v1", "v2"]',
            "sandbox": True,
            "default_choice": "v2",
        },
    )
    assert r.status_code == 200
    saved = r.json()["choice_provider"]
    assert saved["kind"] == "script"
    assert saved["config"]["giturl"] == "https://example.com/app.git"

    r = client.get(f"{_base()}/{j.id}/choices", headers=superuser_token_headers)
    assert r.status_code == 200
    assert r.json() == {"choices": ["v1", "v2"], "default_choice": "v2"}


def test_save_provider_sentinel_default(
    client: TestClient, superuser_token_headers: dict[str, str], db: Session
) -> None:
    j = create_random_job(db)
    r = client.post(
        f"{_base()}/{j.id}/choice-provider",
        headers=superuser_token_headers,
        json={"script": "return ['a']", "default_choice": NO_DEFAULT_CHOICE},
    )
    assert r.status_code == 200
    assert r.json()["choice_provider"]["config"]["default_choice"] is None


def test_failing_script_gives_empty_choices(
    client: TestClient, superuser_token_headers: dict[str, str], db: Session
) -> None:
    j = create_random_job(db)
    client.post(
        f"{_base()}/{j.id}/choice-provider",
        headers=superuser_token_headers,
        json={"script": "return 1"},
    )
    r = client.get(f"{_base()}/{j.id}/choices", headers=superuser_token_headers)
    assert r.status_code == 200
    assert r.json()["choices"] == []


def test_save_provider_requires_configure(
    client: TestClient,
    normal_user_token_headers: dict[str, str],
    normal_user_email: str,
    db: Session,
) -> None:
    j = create_random_job(db)
    grant_job_permission(db, _user(db, normal_user_email), PermissionActionEnum.READ, j.id)
    r = client.post(
        f"{_base()}/{j.id}/choice-provider",
        headers=normal_user_token_headers,
        json={"script": "return ['a']"},
    )
    assert r.status_code == 403


def test_unrestricted_script_from_non_admin_needs_approval(
    client: TestClient,
    superuser_token_headers: dict[str, str],
    normal_user_token_headers: dict[str, str],
    normal_user_email: str,
    db: Session,
) -> None:
    j = create_random_job(db)
    user = _user(db, normal_user_email)
    grant_job_permission(db, user, PermissionActionEnum.CONFIGURE, j.id)
    grant_job_permission(db, user, PermissionActionEnum.READ, j.id)
    script = 'import os\nreturn ["unrestricted", os.sep]'

    r = client.post(
        f"{_base()}/{j.id}/choice-provider",
        headers=normal_user_token_headers,
        json={"script": script, "sandbox": False},
    )
    assert r.status_code == 200
    r = client.get(f"{_base()}/{j.id}/choices", headers=normal_user_token_headers)
    assert r.json()["choices"] == []

    r = client.post(
        f"{settings.API_V1_STR}/script-approval/approve",
        headers=superuser_token_headers,
        json={"hash": hash_script(script)},
    )
    assert r.status_code == 200
    r = client.get(f"{_base()}/{j.id}/choices", headers=normal_user_token_headers)
    assert r.json()["choices"][0] == "unrestricted"
