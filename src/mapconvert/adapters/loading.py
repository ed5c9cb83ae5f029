"""Locate and execute Python mapping sources by file path.

Native sources are executed afresh under a hashed module name on every scan.
Annotation sources are imported once under their dotted path relative to the
scanned directory, with that directory on ``sys.path``, so sibling files can
import each other (``from base import Base``) and share one declarative
registry.
"""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
import inspect
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import ModuleType

log = logging.getLogger(__name__)

PYTHON_SOURCE_SUFFIX: Final[str] = ".py"
PACKAGE_INIT: Final[str] = "__init__"
MODULE_PREFIX: Final[str] = "mapconvert_source"

_SOURCE_ROOTS: set[Path] = set()
_LOADED_NAMES: set[str] = set()


def iter_source_files(directory: Path | str, suffix: str) -> Iterator[Path]:
    """Yield files below `directory` whose name ends with `suffix`, in path order.

    Raises FileNotFoundError when `directory` does not exist.
    """

    root = Path(directory)
    if not root.is_dir():
        raise FileNotFoundError(f"Mapping directory not found: {root}")
    for path in sorted(root.rglob(f"*{suffix}")):
        if path.is_file():
            yield path


@contextmanager
def source_root_on_path(directory: Path | str) -> Iterator[Path]:
    """Put `directory` first on ``sys.path`` while the block runs."""

    root = Path(directory).resolve()
    entry = str(root)
    sys.path.insert(0, entry)
    importlib.invalidate_caches()
    try:
        yield root
    finally:
        if entry in sys.path:
            sys.path.remove(entry)


def module_name_for(path: Path) -> str:
    resolved = path.resolve()
    path_key = resolved.as_posix().encode("utf-8")
    path_hash = hashlib.sha1(path_key).hexdigest()[:16]  # noqa: S324
    return f"{MODULE_PREFIX}_{resolved.stem}_{path_hash}"


def tree_module_name(path: Path, root: Path) -> str:
    """Dotted import name of `path` when `root` is on ``sys.path``."""

    parts = list(path.resolve().relative_to(root.resolve()).with_suffix("").parts)
    if parts and parts[-1] == PACKAGE_INIT:
        parts.pop()
    if not parts:
        raise ImportError(f"{path} is the package marker of the source root {root}")
    return ".".join(parts)


def execute_source(path: Path) -> ModuleType:
    """Execute `path` as a fresh module, every time it is called."""

    module_name = module_name_for(path)
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot create module spec for {path}")

    module = importlib.util.module_from_spec(spec)
    # dataclasses and typing resolve annotations through sys.modules during exec
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        raise
    log.debug("Executed mapping source %s as %s", path, module_name)
    return module


def load_source_once(path: Path, root: Path | str | None = None) -> ModuleType:
    """Import `path` relative to `root` (default: its own directory) on first use.

    Later calls return the module already registered in ``sys.modules``.
    """

    source_root = Path(root if root is not None else path.parent).resolve()
    name = tree_module_name(path, source_root)
    _SOURCE_ROOTS.add(source_root)
    with source_root_on_path(source_root):
        _release_stale_modules(name, source_root, path)
        module = importlib.import_module(name)
    _LOADED_NAMES.update(_name_prefixes(name))
    log.debug("Loaded mapping source %s as %s", path, name)
    return module


def load_source_tree(directory: Path | str) -> list[ModuleType]:
    """Import every Python file below `directory` before anything inspects them."""

    root = Path(directory).resolve()
    paths = [
        path
        for path in iter_source_files(root, PYTHON_SOURCE_SUFFIX)
        if not (path.parent == root and path.stem == PACKAGE_INIT)
    ]
    for path in paths:
        _release_stale_modules(tree_module_name(path, root), root, path)
    return [load_source_once(path, root) for path in paths]


def declared_classes(module: ModuleType) -> list[type]:
    """Classes defined by `module` itself, in definition order."""

    return [
        value
        for value in vars(module).values()
        if inspect.isclass(value) and value.__module__ == module.__name__
    ]


def forget_loaded_sources() -> None:
    """Unregister every module imported from a source directory."""

    for name, module in list(sys.modules.items()):
        if name in _LOADED_NAMES or any(_module_within(module, root) for root in _SOURCE_ROOTS):
            del sys.modules[name]
    _LOADED_NAMES.clear()
    _SOURCE_ROOTS.clear()


def _name_prefixes(name: str) -> list[str]:
    parts = name.split(".")
    return [".".join(parts[: index + 1]) for index in range(len(parts))]


def _release_stale_modules(name: str, root: Path, path: Path) -> None:
    for prefix in _name_prefixes(name):
        module = sys.modules.get(prefix)
        if module is None or _module_within(module, root):
            continue
        if prefix not in _LOADED_NAMES and not any(
            _module_within(module, other) for other in _SOURCE_ROOTS
        ):
            raise ImportError(
                f"Cannot load {path} as {name!r}: module {prefix!r} is already imported "
                f"from elsewhere"
            )
        log.debug("Releasing %s loaded from another source directory", prefix)
        del sys.modules[prefix]


def _module_within(module: ModuleType, root: Path) -> bool:
    namespace = getattr(module, "__dict__", {})
    locations = [namespace.get("__file__"), *(namespace.get("__path__") or ())]
    return any(
        Path(location).resolve().is_relative_to(root)
        for location in locations
        if isinstance(location, str)
    )
