import uuid
from collections.abc import Callable, Generator
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session

from app.core import security
from app.core.config import settings
from app.core.db import engine
from app.core.permission import has_job_permission, has_permission
from app.models import Job, User
from app.models_permission import PermissionActionEnum, ResourceTypeEnum

reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/login/access-token"
)


def get_db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_db)]
TokenDep = Annotated[str, Depends(reusable_oauth2)]


def get_current_user(session: SessionDep, token: TokenDep) -> User:
    try:
        user_id = security.read_access_token(token)
    except security.InvalidAccessTokenError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        )
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def get_current_active_superuser(current_user: CurrentUser) -> User:
    if not current_user.is_superuser:
        raise HTTPException(
            status_code=403, detail="The user doesn't have enough privileges"
        )
    return current_user


CurrentSuperuser = Annotated[User, Depends(get_current_active_superuser)]


def require_permission(
    resource_type: ResourceTypeEnum,
    action: PermissionActionEnum,
) -> Callable[..., User]:
    """
    Dependency factory: require the current user to have the given permission.
    Use: Depends(require_permission(ResourceTypeEnum.JOB, PermissionActionEnum.CREATE)).
    """

    def _dependency(session: SessionDep, current_user: CurrentUser) -> User:
        if has_permission(session, current_user, resource_type, action, None):
            return current_user
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Permission required: {resource_type.value}.{action.value}",
        )

    return _dependency


def require_job(action: PermissionActionEnum) -> Callable[..., Job]:
    """
    Dependency factory: load the job from the `id` path parameter and require
    the given permission on it (global or scoped to this job).
    """

    def _dependency(id: uuid.UUID, session: SessionDep, current_user: CurrentUser) -> Job:
        job = session.get(Job, id)
        if not job:
            raise HTTPException(status_code=404, detail="Job not found")
        if not has_job_permission(session, current_user, action, job):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission required: {ResourceTypeEnum.JOB.value}.{action.value}",
            )
        return job

    return _dependency
