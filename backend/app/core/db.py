import logging
from typing import Any

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from app.core.config import settings
from app.core.security import get_password_hash
from app import models_permission  # noqa: F401  registers permission tables
from app.models import User

_logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict[str, object]:
    # SQLite connections are shared across the request thread pool
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


def _make_engine(url: str) -> Any:
    if url in ("sqlite://", "sqlite:///:memory:"):
        # One shared in-memory database for every session
        return create_engine(url, connect_args=_connect_args(url), poolclass=StaticPool)
    return create_engine(url, connect_args=_connect_args(url))


engine = _make_engine(settings.DATABASE_URL)


def init_db(session: Session) -> None:
    """Create tables (no migrations) and the first superuser if missing."""
    SQLModel.metadata.create_all(session.get_bind())

    user = session.exec(
        select(User).where(User.email == settings.FIRST_SUPERUSER)
    ).first()
    if not user:
        user = User(
            email=settings.FIRST_SUPERUSER,
            hashed_password=get_password_hash(settings.FIRST_SUPERUSER_PASSWORD),
            is_superuser=True,
        )
        session.add(user)
        session.commit()
        _logger.info("Created first superuser %s", settings.FIRST_SUPERUSER)
