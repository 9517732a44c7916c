"""
Script approval (superuser only): list scripts waiting for approval, approve one.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_current_active_superuser
from app.core.environment import require_environment
from app.models import Message
from app.schemas import PendingScript, ScriptApproveIn

router = APIRouter(
    prefix="/script-approval",
    tags=["script-approval"],
    dependencies=[Depends(get_current_active_superuser)],
)


@router.get("/pending", response_model=list[PendingScript])
def list_pending() -> Any:
    approval = require_environment().approval
    return [PendingScript(hash=h, script=s) for h, s in approval.pending().items()]


@router.post("/approve", response_model=Message)
def approve_script(body: ScriptApproveIn) -> Any:
    approval = require_environment().approval
    if not approval.approve(body.hash):
        if approval.is_hash_approved(body.hash):
            raise HTTPException(status_code=409, detail="Script already approved")
        raise HTTPException(status_code=404, detail="Script not pending approval")
    return Message(message="Script approved")
