"""
Choice-provider form endpoints used by the job configuration page.

Endpoints: list registered providers, display name, fill default-choice
dropdown, test script.
"""

import uuid
from typing import Any

from fastapi import APIRouter, HTTPException, status

from app.api.deps import CurrentUser, SessionDep
from app.core.permission import job_permission_check
from app.models import Job
from app.providers import all_descriptors, script_choice_descriptor
from app.providers.script_choice import AccessDeniedError
from app.schemas import (
    DescriptorPublic,
    DisplayNameOut,
    FormValidation,
    ListBoxOption,
    ScriptTestIn,
)

router = APIRouter(prefix="/choice-providers", tags=["choice-providers"])


def _load_job(session: SessionDep, job_id: uuid.UUID | None) -> Job | None:
    if job_id is None:
        return None
    return session.get(Job, job_id)


@router.get("", response_model=list[DescriptorPublic])
def list_choice_providers(current_user: CurrentUser) -> Any:  # noqa: ARG001
    """Providers offered in the provider-selection menu."""
    return [
        DescriptorPublic(id=d.id, display_name=d.display_name)
        for d in all_descriptors()
    ]


@router.get("/script/display-name", response_model=DisplayNameOut)
def get_display_name() -> Any:
    return DisplayNameOut(display_name=script_choice_descriptor.display_name)


@router.get("/script/fill-default-choice-items", response_model=list[ListBoxOption])
def fill_default_choice_items(
    session: SessionDep,
    current_user: CurrentUser,
    script: str = "",
    sandbox: bool = False,
    job_id: uuid.UUID | None = None,
) -> Any:
    """
    Options for the default-choice dropdown: the "no default" sentinel, then
    the choices of the (sandboxed) script being edited.
    """
    return script_choice_descriptor.fill_default_choice_items(
        _load_job(session, job_id),
        script,
        sandbox,
        has_permission=job_permission_check(session, current_user),
    )


@router.post("/script/test", response_model=FormValidation)
def test_script(
    session: SessionDep,
    current_user: CurrentUser,
    body: ScriptTestIn,
) -> Any:
    """Run the script and report its choices (newline-separated) or the failure."""
    try:
        return script_choice_descriptor.test(
            _load_job(session, body.job_id),
            body.script,
            has_permission=job_permission_check(session, current_user),
            approver_is_admin=current_user.is_superuser,
        )
    except AccessDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
