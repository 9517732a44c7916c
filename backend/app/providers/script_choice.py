"""
Script choice-list provider: choices come from a Python script.

ScriptChoiceListProvider is the saved configuration; get_choice_list() runs
its script (or BUILTIN_SCRIPT when none is configured) and never fails.

ScriptChoiceListProviderDescriptor serves the configuration form:
fill_default_choice_items() fills the default-choice dropdown from the script
being typed, test() validates a script and reports its output. Both check the
CONFIGURE permission on the job before evaluating anything.
"""

import logging
from collections.abc import Callable
from typing import Any

from pydantic import field_validator

from app.core.environment import (
    EnvironmentProvider,
    get_environment,
    require_environment,
)
from app.engines.script import SecureScript
from app.engines.script.runner import run_script
from app.models import Job
from app.models_permission import PermissionActionEnum
from app.schemas import ChoiceProviderConfigIn, FormValidation, ListBoxOption

from .base import ChoiceListProvider, ChoiceListProviderDescriptor

_log = logging.getLogger(__name__)

NO_DEFAULT_CHOICE = "###NODEFAULTCHOICE###"
NO_DEFAULT_CHOICE_LABEL = "NoDefaultChoice"
DISPLAY_NAME = "Global Script Choice Parameter Provider"

# Entries of the working directory, one per choice (hidden entries skipped)
BUILTIN_SCRIPT = """\
import os

return sorted(name for name in os.listdir(".") if not name.startswith("."))
"""

PermissionCheck = Callable[[Job, PermissionActionEnum], bool]


class AccessDeniedError(PermissionError):
    """The current user lacks a permission on the job."""

    def __init__(self, job: Job, action: PermissionActionEnum) -> None:
        super().__init__(f"Permission required: job.{action.value} on {job.name}")
        self.job = job
        self.action = action


class ScriptChoiceListProvider(ChoiceListProvider):
    """
    giturl: free text, nominally the repository the choices relate to.
    script: the configured script; None falls back to BUILTIN_SCRIPT.
    """

    giturl: str = ""
    script: SecureScript | None = None

    @field_validator("default_choice")
    @classmethod
    def _sentinel_means_none(cls, v: str | None) -> str | None:
        if v is None or v == NO_DEFAULT_CHOICE:
            return None
        return v

    def effective_script(self) -> SecureScript:
        if self.script is not None and self.script.script.strip():
            return self.script
        return SecureScript(script=BUILTIN_SCRIPT, sandbox=False)

    def get_choice_list(
        self, *, environment_provider: EnvironmentProvider = get_environment
    ) -> list[str]:
        try:
            choices = run_script(
                self.effective_script(), environment_provider=environment_provider
            )
        except Exception:
            _log.warning("Failed to execute script", exc_info=True)
            return []
        return choices if choices is not None else []


class ScriptChoiceListProviderDescriptor(ChoiceListProviderDescriptor):
    id = "script"
    display_name = DISPLAY_NAME
    no_default_choice = NO_DEFAULT_CHOICE

    def __init__(
        self, environment_provider: EnvironmentProvider = get_environment
    ) -> None:
        self._environment_provider = environment_provider

    def new_instance(
        self, form: ChoiceProviderConfigIn, *, approver_is_admin: bool = False
    ) -> ScriptChoiceListProvider:
        """
        Build a provider from the submitted form. An unrestricted script is
        registered for approval (approved outright when an admin saves it).
        """
        script = None
        if form.script is not None:
            script = SecureScript(
                script=form.script,
                sandbox=form.sandbox,
                classpath=tuple(form.classpath),
            )
            env = require_environment(self._environment_provider)
            script.configuring(env.approval, approver_is_admin=approver_is_admin)
        return ScriptChoiceListProvider(
            giturl=form.giturl,
            script=script,
            default_choice=form.default_choice,
        )

    def load(self, data: dict[str, Any]) -> ScriptChoiceListProvider:
        return ScriptChoiceListProvider.model_validate(data)

    def fill_default_choice_items(
        self,
        job: Job | None,
        script: str,
        sandbox: bool,
        *,
        has_permission: PermissionCheck,
    ) -> list[ListBoxOption]:
        ret = [ListBoxOption(name=NO_DEFAULT_CHOICE_LABEL, value=NO_DEFAULT_CHOICE)]

        # Never evaluate a script for a caller not checked against this job
        if job is None or not has_permission(job, PermissionActionEnum.CONFIGURE):
            return ret
        # Unrestricted scripts only run once saved, never from a live form field
        if not sandbox:
            return ret

        try:
            choices = run_script(
                SecureScript(script=script, sandbox=True),
                environment_provider=self._environment_provider,
            )
        except Exception:
            _log.warning("Failed to execute script", exc_info=True)
            return ret

        for choice in choices or []:
            ret.append(ListBoxOption(name=choice, value=choice))
        return ret

    def test(
        self,
        job: Job | None,
        script: str,
        *,
        has_permission: PermissionCheck,
        approver_is_admin: bool = False,
    ) -> FormValidation:
        """
        Run script unrestricted and report its choices, one per line.
        Raises AccessDeniedError without CONFIGURE on the job.
        """
        if job is None:
            return FormValidation.warning(
                "You cannot evaluate scripts outside project configurations"
            )
        if not has_permission(job, PermissionActionEnum.CONFIGURE):
            raise AccessDeniedError(job, PermissionActionEnum.CONFIGURE)

        try:
            secure = SecureScript(script=script, sandbox=False)
            env = require_environment(self._environment_provider)
            secure.configuring(env.approval, approver_is_admin=approver_is_admin)
            choices = run_script(secure, environment_provider=self._environment_provider)
        except Exception as e:
            return FormValidation.error("Failed to execute script", cause=e)

        if choices is None:
            return FormValidation.error("Script returned null.")
        return FormValidation.ok("\n".join(choices))
