"""SecureScript: script text plus how it may be evaluated."""

from pydantic import BaseModel, ConfigDict, Field

from .approval import ScriptApproval


class SecureScript(BaseModel):
    """
    Immutable script descriptor.

    - script: Python source.
    - sandbox: True evaluates under RestrictedPython; False runs unrestricted
      and requires approval.
    - classpath: extra directories searched first by `import` (unrestricted only).
    """

    model_config = ConfigDict(frozen=True)

    script: str = ""
    sandbox: bool = True
    classpath: tuple[str, ...] = Field(default=())

    def configuring(
        self, approval: ScriptApproval, *, approver_is_admin: bool
    ) -> "SecureScript":
        """Register an unrestricted script with the approval registry."""
        if not self.sandbox:
            approval.configuring(self.script, approver_is_admin=approver_is_admin)
        return self
