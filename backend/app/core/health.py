"""
Health-check helpers: database reachable, host environment started.
"""

import logging

from sqlmodel import Session, select

from app.core.db import engine
from app.core.environment import get_environment

logger = logging.getLogger(__name__)


def check_database() -> bool:
    """Run SELECT 1 against the app DB. Returns True if ok."""
    try:
        with Session(engine) as session:
            session.exec(select(1)).first()
        return True
    except Exception:
        logger.warning("Database health check failed", exc_info=True)
        return False


def check_environment() -> bool:
    return get_environment() is not None


def liveness_check() -> tuple[bool, list[str]]:
    """Return (ok, names of failed checks)."""
    failures: list[str] = []
    if not check_database():
        failures.append("database")
    if not check_environment():
        failures.append("environment")
    return not failures, failures
