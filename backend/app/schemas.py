"""
Request/response schemas for jobs, the choice-provider form endpoints and
script approval.
"""

import traceback
import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Form widgets
# ---------------------------------------------------------------------------


class ListBoxOption(BaseModel):
    """One dropdown option: label shown to the user, value submitted."""

    name: str
    value: str


class FormValidationKind(str, Enum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


class FormValidation(BaseModel):
    """Result of validating a form field; cause carries the traceback on errors."""

    kind: FormValidationKind
    message: str
    cause: str | None = None

    @classmethod
    def ok(cls, message: str = "") -> "FormValidation":
        return cls(kind=FormValidationKind.OK, message=message)

    @classmethod
    def warning(cls, message: str) -> "FormValidation":
        return cls(kind=FormValidationKind.WARNING, message=message)

    @classmethod
    def error(
        cls, message: str, cause: BaseException | None = None
    ) -> "FormValidation":
        if cause is None:
            return cls(kind=FormValidationKind.ERROR, message=message)
        return cls(
            kind=FormValidationKind.ERROR,
            message=f"{message}: {type(cause).__name__}: {cause}",
            cause="".join(
                traceback.format_exception(type(cause), cause, cause.__traceback__)
            ),
        )


# ---------------------------------------------------------------------------
# Choice provider
# ---------------------------------------------------------------------------


class ChoiceProviderConfigIn(BaseModel):
    """Form data submitted from the job configuration page."""

    giturl: str = ""
    script: str | None = None
    sandbox: bool = True
    classpath: list[str] = Field(default_factory=list)
    default_choice: str | None = None


class ScriptTestIn(BaseModel):
    """Body for POST /choice-providers/script/test."""

    job_id: uuid.UUID | None = None
    script: str = ""


class ChoiceListOut(BaseModel):
    choices: list[str]
    default_choice: str | None = None


class DescriptorPublic(BaseModel):
    id: str
    display_name: str


class DisplayNameOut(BaseModel):
    display_name: str


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


class JobCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=512)


class JobPublic(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None = None
    choice_provider: dict | None = None
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Script approval
# ---------------------------------------------------------------------------


class PendingScript(BaseModel):
    hash: str
    script: str


class ScriptApproveIn(BaseModel):
    hash: str = Field(min_length=64, max_length=64)
