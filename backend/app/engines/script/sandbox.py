"""
Compilation and globals for choice-list scripts.

Restricted scripts compile with RestrictedPython and run against safe builtins
plus guards. Unrestricted scripts compile with the built-in compiler and see
the full builtins, with `import` routed through the host's module importer.

Allowed everywhere: json, datetime, date, time, timedelta.
Blocked when restricted: open, exec, eval, __import__, compile, os, subprocess, etc.

A script hands back its value in one of three ways:

    return ["a", "b"]            # top-level return
    result = ["a", "b"]          # assign `result`
    def execute(): return [...]  # define `execute()`
"""

import ast
import builtins
import json
import operator
from collections.abc import Callable
from datetime import date, datetime, time, timedelta
from typing import Any

from RestrictedPython import compile_restricted
from RestrictedPython.Eval import default_guarded_getitem, default_guarded_getiter
from RestrictedPython.Guards import (
    full_write_guard,
    guarded_iter_unpack_sequence,
    safe_builtins,
    safer_getattr,
)
from RestrictedPython.PrintCollector import PrintCollector

# Name of the function a script body is wrapped into when it uses a top-level return
SCRIPT_FUNCTION = "script_body"

Importer = Callable[..., Any]

_INPLACE_OPS: dict[str, Callable[[Any, Any], Any]] = {
    "+=": operator.iadd,
    "-=": operator.isub,
    "*=": operator.imul,
    "/=": operator.itruediv,
    "//=": operator.ifloordiv,
    "%=": operator.imod,
    "**=": operator.ipow,
    "<<=": operator.ilshift,
    ">>=": operator.irshift,
    "&=": operator.iand,
    "|=": operator.ior,
    "^=": operator.ixor,
}


def guarded_inplacevar(op: str, x: Any, y: Any) -> Any:
    """Apply `x op= y` for a name target; RestrictedPython routes `+=` etc. here."""
    fn = _INPLACE_OPS.get(op)
    if fn is None:
        raise TypeError(f"in-place operator {op} is not allowed")
    return fn(x, y)


def _make_guard_globals() -> dict[str, Any]:
    """Guards required by RestrictedPython's rewritten bytecode."""
    return {
        "_getattr_": safer_getattr,
        "_getiter_": default_guarded_getiter,
        "_getitem_": default_guarded_getitem,
        "_iter_unpack_sequence_": guarded_iter_unpack_sequence,
        "_write_": full_write_guard,
        "_inplacevar_": guarded_inplacevar,
        # print() output is collected into `printed` and otherwise dropped
        "_print_": PrintCollector,
    }


def _make_extra_globals() -> dict[str, Any]:
    """Extra safe symbols: json, datetime, date, time, timedelta."""
    return {
        "json": json,
        "datetime": datetime,
        "date": date,
        "time": time,
        "timedelta": timedelta,
    }


def _has_toplevel_return(tree: ast.Module) -> bool:
    """True if a `return` appears outside any function or class body."""
    stack: list[ast.AST] = list(tree.body)
    while stack:
        node = stack.pop()
        if isinstance(node, ast.Return):
            return True
        if isinstance(
            node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef, ast.Lambda)
        ):
            continue
        stack.extend(ast.iter_child_nodes(node))
    return False


def wrap_script(script: str, filename: str = "<script>") -> ast.Module:
    """
    Parse script. When it uses a top-level `return`, move its statements into a
    function whose return value is assigned to `result`. The rewrite happens on
    the syntax tree, so string literals and line numbers are left as written.

    Raises SyntaxError if the script does not parse.
    """
    tree = ast.parse(script, filename, "exec")
    if not _has_toplevel_return(tree):
        return tree
    wrapper = ast.parse(
        f"def {SCRIPT_FUNCTION}():\n    pass\n\nresult = {SCRIPT_FUNCTION}()\n",
        filename,
        "exec",
    )
    wrapper.body[0].body = tree.body  # type: ignore[attr-defined]
    return ast.fix_missing_locations(wrapper)


def compile_script(
    script: str, filename: str = "<script>", *, restricted: bool = True
) -> Any:
    """
    Compile script (restricted with RestrictedPython, otherwise with compile()).
    Raises SyntaxError on failure.

    Returns a code object suitable for exec(bytecode, globals).
    """
    tree = wrap_script(script, filename)
    if not restricted:
        return compile(tree, filename, "exec")
    code = compile_restricted(tree, filename, "exec")
    if code is None:
        raise SyntaxError("RestrictedPython: compile failed")
    return code


def build_restricted_globals(binding: dict[str, Any]) -> dict[str, Any]:
    """
    Build the globals dict for exec(compiled, globals): safe builtins, guards,
    extra (json, datetime) and the binding.
    """
    safe = dict(safe_builtins)
    g: dict[str, Any] = {
        "__builtins__": safe,
        "__name__": "script",
    }
    g.update(_make_guard_globals())
    g.update(_make_extra_globals())
    # Common container/utility builtins missing from safe_builtins; writes and
    # attribute access stay guarded.
    for name in ("list", "dict", "set", "tuple", "len", "range", "min", "max", "sum", "abs", "sorted"):
        obj = safe.get(name, getattr(builtins, name, None))
        if obj is not None:
            g[name] = obj
    g.update(binding)
    return g


def build_unrestricted_globals(
    binding: dict[str, Any], importer: Importer
) -> dict[str, Any]:
    """
    Build globals for an unrestricted (approved) script: the full builtins with
    __import__ replaced by importer, extra symbols and the binding.
    """
    full = dict(vars(builtins))
    full["__import__"] = importer
    g: dict[str, Any] = {
        "__builtins__": full,
        "__name__": "script",
    }
    g.update(_make_extra_globals())
    g.update(binding)
    return g
