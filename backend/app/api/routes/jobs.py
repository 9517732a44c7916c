"""
Job management.

Endpoints: list, create, detail, delete, save choice-provider configuration,
list current choices.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import select

from app.api.deps import (
    CurrentUser,
    SessionDep,
    require_job,
    require_permission,
)
from app.core.permission import readable_job_ids
from app.core.permission_resources import ensure_job_permissions, remove_job_permissions
from app.models import Job, Message
from app.models_permission import PermissionActionEnum, ResourceTypeEnum
from app.providers import get_descriptor, script_choice_descriptor
from app.schemas import ChoiceListOut, ChoiceProviderConfigIn, JobCreate, JobPublic

_log = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])


def _to_public(j: Job) -> JobPublic:
    return JobPublic(
        id=j.id,
        name=j.name,
        description=j.description,
        choice_provider=j.choice_provider,
        created_at=j.created_at,
        updated_at=j.updated_at,
    )


@router.get("", response_model=list[JobPublic])
def list_jobs(session: SessionDep, current_user: CurrentUser) -> Any:
    """Jobs the current user can read."""
    stmt = select(Job).order_by(Job.name)
    ids = readable_job_ids(session, current_user)
    if ids is not None:
        if not ids:
            return []
        stmt = stmt.where(Job.id.in_(ids))
    return [_to_public(j) for j in session.exec(stmt).all()]


@router.post(
    "/create",
    response_model=JobPublic,
    dependencies=[
        Depends(require_permission(ResourceTypeEnum.JOB, PermissionActionEnum.CREATE))
    ],
)
def create_job(session: SessionDep, body: JobCreate) -> Any:
    """Create a job (no choice provider yet)."""
    if session.exec(select(Job).where(Job.name == body.name)).first():
        raise HTTPException(status_code=400, detail="Job name already exists")
    j = Job(name=body.name, description=body.description)
    session.add(j)
    ensure_job_permissions(session, j.id)
    session.commit()
    session.refresh(j)
    return _to_public(j)


@router.get("/{id}", response_model=JobPublic)
def get_job(job: Job = Depends(require_job(PermissionActionEnum.READ))) -> Any:
    """Get job detail by id."""
    return _to_public(job)


@router.delete("/delete/{id}", response_model=Message)
def delete_job(
    session: SessionDep,
    job: Job = Depends(require_job(PermissionActionEnum.DELETE)),
) -> Any:
    """Delete a job and its scoped permissions."""
    remove_job_permissions(session, job.id)
    session.delete(job)
    session.commit()
    return Message(message="Job deleted successfully")


@router.post("/{id}/choice-provider", response_model=JobPublic)
def save_choice_provider(
    session: SessionDep,
    current_user: CurrentUser,
    body: ChoiceProviderConfigIn,
    job: Job = Depends(require_job(PermissionActionEnum.CONFIGURE)),
) -> Any:
    """Save the script choice-provider configuration submitted from the job form."""
    provider = script_choice_descriptor.new_instance(
        body, approver_is_admin=current_user.is_superuser
    )
    job.choice_provider = {
        "kind": script_choice_descriptor.id,
        "config": provider.model_dump(mode="json"),
    }
    job.updated_at = datetime.now(timezone.utc)
    session.add(job)
    session.commit()
    session.refresh(job)
    _log.info("Choice provider saved for job %s", job.name)
    return _to_public(job)


@router.get("/{id}/choices", response_model=ChoiceListOut)
def get_choices(job: Job = Depends(require_job(PermissionActionEnum.READ))) -> Any:
    """Current choices of the job's provider."""
    saved = job.choice_provider
    if not saved:
        raise HTTPException(status_code=404, detail="Choice provider not configured")
    descriptor = get_descriptor(saved.get("kind", ""))
    if descriptor is None:
        raise HTTPException(
            status_code=404, detail=f"Unknown choice provider: {saved.get('kind')}"
        )
    provider = descriptor.load(saved.get("config") or {})
    return ChoiceListOut(
        choices=provider.get_choice_list(), default_choice=provider.default_choice
    )
