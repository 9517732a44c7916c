import os

# One in-memory database shared by the app engine and the fixtures
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "local"

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session  # noqa: E402

from app.core.db import engine, init_db  # noqa: E402
from app.initial_data import seed_roles_and_permissions  # noqa: E402
from app.main import app  # noqa: E402
from tests.utils.user import authentication_token_from_email  # noqa: E402
from tests.utils.utils import get_superuser_token_headers, random_email  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        init_db(session)
        seed_roles_and_permissions(session)
        session.commit()
        yield session


@pytest.fixture(scope="module")
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="module")
def superuser_token_headers(client: TestClient) -> dict[str, str]:
    return get_superuser_token_headers(client)


@pytest.fixture
def normal_user_email() -> str:
    return random_email()


@pytest.fixture
def normal_user_token_headers(
    client: TestClient, db: Session, normal_user_email: str
) -> dict[str, str]:
    """A fresh user with no roles, so no job permissions."""
    return authentication_token_from_email(
        client=client, email=normal_user_email, db=db
    )
