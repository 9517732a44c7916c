"""
ScriptExecutor: evaluate a SecureScript against a binding and return its value.

Restricted scripts compile with RestrictedPython; unrestricted ones compile
normally and import through the supplied importer. The value is the script's
top-level `return`, else the result of calling `execute()` if defined, else
the global `result` (None if never set).
Optional: SCRIPT_EXEC_TIMEOUT (signal.SIGALRM on Unix, main thread) aborts long-running scripts.
Optional: SCRIPT_EXTRA_MODULES (comma-separated) exposes whitelisted modules in script globals.
"""

import importlib
import logging
import re
import signal
import threading
from typing import Any

from app.core.config import settings

from .loader import default_importer
from .sandbox import (
    Importer,
    build_restricted_globals,
    build_unrestricted_globals,
    compile_script,
)
from .secure_script import SecureScript

_log = logging.getLogger(__name__)

# Only allow top-level module names (e.g. re, math), no submodules
_SAFE_MODULE_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


class ScriptTimeoutError(TimeoutError):
    """Raised when script execution exceeds SCRIPT_EXEC_TIMEOUT."""

    pass


def _inject_extra_modules(g: dict[str, Any]) -> None:
    """Inject whitelisted extra modules into script globals. Names in SCRIPT_EXTRA_MODULES only."""
    raw = (settings.SCRIPT_EXTRA_MODULES or "").strip()
    if not raw:
        return
    for name in (s.strip() for s in raw.split(",") if s.strip()):
        if not _SAFE_MODULE_NAME_RE.match(name):
            _log.warning("Ignoring invalid SCRIPT_EXTRA_MODULES entry %r", name)
            continue
        try:
            g[name] = importlib.import_module(name)
        except ImportError as e:
            _log.warning("SCRIPT_EXTRA_MODULES: cannot import %s: %s", name, e)


def _exec_with_timeout(code: object, g: dict[str, Any], timeout_sec: int) -> None:
    """Run exec(code, g) with signal.SIGALRM. Unix only, main thread only."""

    def _handler(signum: int, frame: Any) -> None:
        raise ScriptTimeoutError(f"Script execution timed out after {timeout_sec}s")

    old = signal.signal(signal.SIGALRM, _handler)
    try:
        signal.alarm(timeout_sec)
        try:
            exec(code, g)
        finally:
            signal.alarm(0)
    finally:
        signal.signal(signal.SIGALRM, old)


def _can_use_alarm(timeout: int | None) -> bool:
    return (
        timeout is not None
        and timeout > 0
        and hasattr(signal, "SIGALRM")
        and threading.current_thread() is threading.main_thread()
    )


class ScriptExecutor:
    """Evaluate choice-list scripts, restricted or unrestricted."""

    def execute(
        self,
        script: SecureScript,
        *,
        binding: dict[str, Any] | None = None,
        importer: Importer | None = None,
    ) -> Any:
        """
        Compile and evaluate script; return its value (None if it produced none).
        Compile and runtime errors propagate unchanged.
        """
        _binding = binding or {}
        code = compile_script(script.script, restricted=script.sandbox)
        if script.sandbox:
            g = build_restricted_globals(_binding)
        else:
            g = build_unrestricted_globals(_binding, importer or default_importer())
        _inject_extra_modules(g)

        timeout = settings.SCRIPT_EXEC_TIMEOUT
        if _can_use_alarm(timeout):
            _exec_with_timeout(code, g, timeout)  # type: ignore[arg-type]
        else:
            exec(code, g)

        execute_fn = g.get("execute")
        if callable(execute_fn):
            return execute_fn()
        return g.get("result")
