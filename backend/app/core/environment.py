"""
Host environment: the running application's context as seen by scripts.

get_environment() is the default EnvironmentProvider handed to the script
runner. It returns None outside a running application (before the FastAPI
lifespan starts or after it stops); callers turn that into
EnvironmentUnavailableError.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from app.engines.script.approval import ScriptApproval
from app.engines.script.loader import default_importer, make_importer
from app.engines.script.sandbox import Importer

_log = logging.getLogger(__name__)


class EnvironmentUnavailableError(RuntimeError):
    """Raised when a script is evaluated outside a running application."""

    pass


@dataclass
class HostEnvironment:
    """Plugin-aware importer (None when no plugin paths) and the approval registry."""

    importer: Importer | None = None
    approval: ScriptApproval = field(default_factory=ScriptApproval)

    @classmethod
    def from_settings(
        cls, settings: Any, *, preapproved: Iterable[str] = ()
    ) -> "HostEnvironment":
        importer = None
        if settings.script_plugin_paths:
            importer = make_importer(default_importer(), settings.script_plugin_paths)
        approval = ScriptApproval(settings.script_approved_hashes)
        for text in preapproved:
            approval.preapprove(text)
        return cls(importer=importer, approval=approval)


EnvironmentProvider = Callable[[], HostEnvironment | None]

_environment: HostEnvironment | None = None


def get_environment() -> HostEnvironment | None:
    return _environment


def set_environment(env: HostEnvironment) -> None:
    global _environment
    _environment = env
    _log.info("Host environment ready")


def reset_environment() -> None:
    global _environment
    _environment = None


def require_environment(
    provider: EnvironmentProvider = get_environment,
) -> HostEnvironment:
    env = provider()
    if env is None:
        raise EnvironmentUnavailableError(
            "host environment unavailable; is the application running?"
        )
    return env
