"""
Permission rows for individual jobs.

Creating a job adds one permission row per action in JOB_RESOURCE_ACTIONS,
scoped to that job, so a role can be granted access to a single job. Deleting
the job removes those rows together with their role links.
"""

from __future__ import annotations

import uuid

from sqlmodel import Session, delete, select

from app.models_permission import (
    Permission,
    PermissionActionEnum,
    ResourceTypeEnum,
    RolePermissionLink,
)

# CREATE is only meaningful globally
JOB_RESOURCE_ACTIONS = (
    PermissionActionEnum.READ,
    PermissionActionEnum.CONFIGURE,
    PermissionActionEnum.DELETE,
)


def get_or_create_permission(
    session: Session,
    resource_type: ResourceTypeEnum,
    action: PermissionActionEnum,
    resource_id: uuid.UUID | None = None,
) -> Permission:
    """The permission row for (resource_type, action, resource_id); flushed if new."""
    perm = session.exec(
        select(Permission).where(
            Permission.resource_type == resource_type,
            Permission.action == action,
            Permission.resource_id == resource_id,
        )
    ).first()
    if perm is None:
        perm = Permission(
            resource_type=resource_type, action=action, resource_id=resource_id
        )
        session.add(perm)
        session.flush()
    return perm


def ensure_job_permissions(session: Session, job_id: uuid.UUID) -> list[Permission]:
    """Job-scoped permission rows for every action in JOB_RESOURCE_ACTIONS."""
    return [
        get_or_create_permission(session, ResourceTypeEnum.JOB, action, job_id)
        for action in JOB_RESOURCE_ACTIONS
    ]


def remove_job_permissions(session: Session, job_id: uuid.UUID) -> int:
    """Delete the job's scoped permissions and their role links. Returns the count."""
    permission_ids = list(
        session.exec(
            select(Permission.id).where(
                Permission.resource_type == ResourceTypeEnum.JOB,
                Permission.resource_id == job_id,
            )
        ).all()
    )
    if not permission_ids:
        return 0
    session.exec(
        delete(RolePermissionLink).where(
            RolePermissionLink.permission_id.in_(permission_ids)
        )
    )
    session.exec(delete(Permission).where(Permission.id.in_(permission_ids)))
    return len(permission_ids)
