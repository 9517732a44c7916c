"""
Module importers for unrestricted scripts.

An importer is an `__import__`-compatible callable. make_importer layers a list
of extra search directories over a base importer: top-level modules found in
those directories are loaded privately (never placed in sys.modules), everything
else falls through to the base.
"""

import builtins
import importlib.util
import sys
import threading
from collections.abc import Sequence
from importlib.machinery import PathFinder
from types import ModuleType
from typing import Any

from .sandbox import Importer


def default_importer() -> Importer:
    return builtins.__import__


def make_importer(base: Importer, search_paths: Sequence[str]) -> Importer:
    """
    Return an importer that resolves top-level names from search_paths before
    delegating to base. Only single-file modules and packages without relative
    imports load correctly, since nothing is registered in sys.modules.
    """
    paths = [p for p in search_paths if p]
    if not paths:
        return base

    cache: dict[str, ModuleType] = {}
    lock = threading.Lock()

    def _load(name: str) -> ModuleType | None:
        with lock:
            if name in cache:
                return cache[name]
            spec = PathFinder.find_spec(name, paths)
            if spec is None or spec.loader is None:
                return None
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
            cache[name] = module
            return module

    def _import(
        name: str,
        globals: dict[str, Any] | None = None,
        locals: dict[str, Any] | None = None,
        fromlist: Sequence[str] = (),
        level: int = 0,
    ) -> Any:
        if level == 0 and "." not in name and name not in sys.modules:
            module = _load(name)
            if module is not None:
                return module
        return base(name, globals, locals, fromlist, level)

    return _import
