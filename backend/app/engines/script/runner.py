"""
Script runner: evaluate a SecureScript and coerce its value to a list of strings.

run_script(script) -> list[str] | None

- None: the script produced no value ("no result").
- list[str]: one string per non-None element, order and duplicates kept.
- Raises EnvironmentUnavailableError outside a running application,
  UnapprovedScriptError for unapproved unrestricted scripts,
  ChoiceScriptTypeError when the value is not a sequence, and whatever the
  script itself raised.
"""

from collections.abc import Sequence
from enum import Enum
from typing import Any

from app.core.environment import (
    EnvironmentProvider,
    get_environment,
    require_environment,
)

from .executor import ScriptExecutor
from .loader import default_importer, make_importer
from .secure_script import SecureScript


class ChoiceScriptTypeError(TypeError):
    """Raised when a script's value is not a list of strings."""

    def __init__(self, value: Any) -> None:
        super().__init__(
            f"script must return a list of strings, got {type(value).__name__}"
        )


class ResultShape(str, Enum):
    ABSENT = "absent"
    SEQUENCE = "sequence"
    OTHER = "other"


def classify_result(value: Any) -> ResultShape:
    """Text is not a sequence of choices; any other Sequence is."""
    if value is None:
        return ResultShape.ABSENT
    if isinstance(value, (str, bytes, bytearray)):
        return ResultShape.OTHER
    if isinstance(value, Sequence):
        return ResultShape.SEQUENCE
    return ResultShape.OTHER


def to_choice_string(value: Any) -> str:
    """Convert one non-None element to its choice label."""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, Enum):
        return to_choice_string(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def run_script(
    script: SecureScript,
    *,
    environment_provider: EnvironmentProvider = get_environment,
    executor: ScriptExecutor | None = None,
) -> list[str] | None:
    env = require_environment(environment_provider)
    importer = env.importer or default_importer()
    if script.classpath:
        importer = make_importer(importer, script.classpath)

    if not script.sandbox:
        env.approval.check(script.script)

    out = (executor or ScriptExecutor()).execute(script, binding={}, importer=importer)

    shape = classify_result(out)
    if shape is ResultShape.ABSENT:
        return None
    if shape is ResultShape.OTHER:
        raise ChoiceScriptTypeError(out)
    return [to_choice_string(v) for v in out if v is not None]
