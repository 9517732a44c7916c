"""
Role-based permission checks.

A user holds permissions through roles. A permission row names a resource type,
an action and optionally a resource id; a NULL resource id covers every
resource of that type. Superusers pass every check.

Jobs are the main protected resource: has_job_permission answers "may this user
do X to this job". readable_job_ids narrows a job listing in one query.
job_permission_check binds the job check to a session for the provider
descriptors.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable

from sqlmodel import Session, select

from app.models import Job, User
from app.models_permission import (
    Permission,
    PermissionActionEnum,
    ResourceTypeEnum,
    RolePermissionLink,
    UserRoleLink,
)

JobPermissionCheck = Callable[[Job, PermissionActionEnum], bool]


def get_user_permissions(
    session: Session,
    user_id: uuid.UUID,
    *,
    resource_type: ResourceTypeEnum | None = None,
    action: PermissionActionEnum | None = None,
) -> list[Permission]:
    """Permissions granted to the user through any of their roles."""
    stmt = (
        select(Permission)
        .join(RolePermissionLink, RolePermissionLink.permission_id == Permission.id)
        .join(UserRoleLink, UserRoleLink.role_id == RolePermissionLink.role_id)
        .where(UserRoleLink.user_id == user_id)
    )
    if resource_type is not None:
        stmt = stmt.where(Permission.resource_type == resource_type)
    if action is not None:
        stmt = stmt.where(Permission.action == action)
    return list(session.exec(stmt).unique().all())


def _covers(perms: Iterable[Permission], resource_id: uuid.UUID | None) -> bool:
    for p in perms:
        if p.resource_id is None:
            return True
        if resource_id is not None and p.resource_id == resource_id:
            return True
    return False


def has_permission(
    session: Session,
    user: User,
    resource_type: ResourceTypeEnum,
    action: PermissionActionEnum,
    resource_id: uuid.UUID | None = None,
) -> bool:
    """
    True if the user may perform action on the resource.

    Without resource_id only a global grant (resource_id NULL) counts.
    """
    if user.is_superuser:
        return True
    perms = get_user_permissions(
        session, user.id, resource_type=resource_type, action=action
    )
    return _covers(perms, resource_id)


def has_job_permission(
    session: Session,
    user: User,
    action: PermissionActionEnum,
    job: Job | None = None,
) -> bool:
    """Permission check on one job; job None asks for the global grant."""
    return has_permission(
        session,
        user,
        ResourceTypeEnum.JOB,
        action,
        job.id if job is not None else None,
    )


def readable_job_ids(session: Session, user: User) -> set[uuid.UUID] | None:
    """
    Ids of the jobs the user may read, or None when they may read every job.
    """
    if user.is_superuser:
        return None
    perms = get_user_permissions(
        session,
        user.id,
        resource_type=ResourceTypeEnum.JOB,
        action=PermissionActionEnum.READ,
    )
    ids: set[uuid.UUID] = set()
    for p in perms:
        if p.resource_id is None:
            return None
        ids.add(p.resource_id)
    return ids


def job_permission_check(session: Session, user: User) -> JobPermissionCheck:
    """Bind has_job_permission to a session and user."""

    def _check(job: Job, action: PermissionActionEnum) -> bool:
        return has_job_permission(session, user, action, job)

    return _check
