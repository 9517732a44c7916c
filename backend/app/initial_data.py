"""Initial data: tables, first superuser, default roles and their job grants."""

import logging

from sqlmodel import Session, select

from app.core.db import engine, init_db
from app.core.permission_resources import get_or_create_permission
from app.models import User
from app.models_permission import (
    PermissionActionEnum,
    ResourceTypeEnum,
    Role,
    RolePermissionLink,
    UserRoleLink,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ROLE_ADMIN = "Admin"
ROLE_CONFIGURER = "Configurer"
ROLE_VIEWER = "Viewer"

Grant = tuple[ResourceTypeEnum, PermissionActionEnum]

# role name -> (description, global grants)
DEFAULT_ROLES: dict[str, tuple[str, list[Grant]]] = {
    ROLE_ADMIN: (
        "Full access to all resources",
        [(rt, action) for rt in ResourceTypeEnum for action in PermissionActionEnum],
    ),
    ROLE_CONFIGURER: (
        "Create, read and configure every job",
        [
            (ResourceTypeEnum.JOB, PermissionActionEnum.READ),
            (ResourceTypeEnum.JOB, PermissionActionEnum.CREATE),
            (ResourceTypeEnum.JOB, PermissionActionEnum.CONFIGURE),
        ],
    ),
    ROLE_VIEWER: (
        "Read jobs and their choices",
        [(ResourceTypeEnum.JOB, PermissionActionEnum.READ)],
    ),
}


def _ensure_role(session: Session, name: str, description: str) -> Role:
    role = session.exec(select(Role).where(Role.name == name)).first()
    if role is None:
        role = Role(name=name, description=description)
        session.add(role)
        session.flush()
        logger.info("Created role: %s", name)
    return role


def _grant(session: Session, role: Role, grants: list[Grant]) -> None:
    linked = set(
        session.exec(
            select(RolePermissionLink.permission_id).where(
                RolePermissionLink.role_id == role.id
            )
        ).all()
    )
    for resource_type, action in grants:
        perm = get_or_create_permission(session, resource_type, action)
        if perm.id not in linked:
            session.add(RolePermissionLink(role_id=role.id, permission_id=perm.id))
            linked.add(perm.id)


def seed_roles_and_permissions(session: Session) -> None:
    """Create the default roles and give every superuser the Admin role. Idempotent."""
    roles = {}
    for name, (description, grants) in DEFAULT_ROLES.items():
        roles[name] = role = _ensure_role(session, name, description)
        _grant(session, role, grants)

    admin = roles[ROLE_ADMIN]
    for user in session.exec(select(User).where(User.is_superuser)).all():
        link = session.get(UserRoleLink, (user.id, admin.id))
        if link is None:
            session.add(UserRoleLink(user_id=user.id, role_id=admin.id))
            logger.info("Assigned Admin role to user: %s", user.email)

    logger.info("Roles and permissions seeded successfully")


def init() -> None:
    with Session(engine) as session:
        init_db(session)
        session.commit()
    with Session(engine) as session:
        seed_roles_and_permissions(session)
        session.commit()


def main() -> None:
    logger.info("Creating initial data")
    init()
    logger.info("Initial data created")


if __name__ == "__main__":
    main()
