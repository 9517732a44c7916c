"""
Script engine (Python, RestrictedPython) for choice-list scripts.

Exports: SecureScript, ScriptExecutor, ScriptApproval, compile_script,
build_restricted_globals. The runner lives in app.engines.script.runner.
"""

from .approval import ScriptApproval, UnapprovedScriptError
from .executor import ScriptExecutor
from .sandbox import build_restricted_globals, compile_script
from .secure_script import SecureScript

__all__ = [
    "SecureScript",
    "ScriptApproval",
    "ScriptExecutor",
    "UnapprovedScriptError",
    "compile_script",
    "build_restricted_globals",
]
