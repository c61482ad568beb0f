"""Filesystem template discovery and naming.

Finds template source files under a lookup root and derives the names
views use to address them:

- ``find_all()`` globs ``root/pattern.{ext,...}`` for every engine extension
- ``hash()`` digests the sorted result so build tooling can detect
  added or removed templates
- ``template_path_to_name()`` strips the engine extension and makes the
  path relative to the root (``user/index.html.kida`` -> ``user/index.html``)
- ``module_to_template_root()`` and ``resource_name()`` derive lookup
  paths and assign keys from a view's dotted name

The hash only tracks which files exist. Editing an already discovered
template does not change it.
"""

from __future__ import annotations

import glob
import hashlib
import os
import re
from collections.abc import Iterable, Mapping
from pathlib import PurePath
from typing import Any

from perch.config import DEFAULT_PATTERN

_CAMEL_BOUNDARY_RE = re.compile(r"([A-Z]+)([A-Z][a-z])")
_LOWER_UPPER_RE = re.compile(r"([a-z\d])([A-Z])")


def find_all(
    root: str | os.PathLike[str],
    pattern: str = DEFAULT_PATTERN,
    engines: Mapping[str, Any] | None = None,
) -> list[str]:
    """Return every template path under *root* matching *pattern*.

    A file matches when it is ``root/pattern.<ext>`` for one of the
    engine extensions. ``*`` skips hidden files and ``**`` recurses,
    as in a shell glob.

    Args:
        root: Lookup directory. A missing or empty root finds nothing.
        pattern: Glob pattern without the engine extension.
        engines: Extension -> engine map. Defaults to the engines of
            the process-wide registry.

    Returns:
        Sorted list of matching paths.
    """
    root = os.fspath(root)
    if not root or not os.path.isdir(root):
        return []
    if engines is None:
        from perch.templating.registry import default_registry

        engines = default_registry().engines

    base = os.path.join(glob.escape(root), pattern)
    found: set[str] = set()
    for ext in engines:
        found.update(
            path
            for path in glob.glob(f"{base}.{ext}", recursive=True)
            if os.path.isfile(path)
        )
    return sorted(found)


def hash(  # noqa: A001, mirrors find_all() in the public API
    root: str | os.PathLike[str],
    pattern: str = DEFAULT_PATTERN,
    engines: Mapping[str, Any] | None = None,
) -> str:
    """Return a digest of the template paths found under *root*."""
    return digest_paths(find_all(root, pattern, engines))


def digest_paths(paths: Iterable[str]) -> str:
    """Digest a set of paths independently of iteration order."""
    md5 = hashlib.md5(usedforsecurity=False)
    for path in sorted(paths):
        md5.update(path.encode("utf-8"))
        md5.update(b"\0")
    return md5.hexdigest()


def template_path_to_name(
    path: str | os.PathLike[str],
    root: str | os.PathLike[str],
    *,
    ext: str | None = None,
) -> str:
    """Convert a template file path into its name relative to *root*.

    Only the engine extension is removed. Without *ext* that is the last
    extension of the path::

        >>> template_path_to_name("/var/www/templates/admin/users/show.html.kida",
        ...                       "/var/www/templates")
        'admin/users/show.html'
    """
    path = PurePath(path)
    if ext and path.name.endswith(f".{ext}"):
        stripped = path.with_name(path.name[: -len(ext) - 1])
    else:
        stripped = path.with_suffix("")
    root_path = PurePath(root)
    if stripped.is_relative_to(root_path):
        stripped = stripped.relative_to(root_path)
    return stripped.as_posix()


def module_to_template_root(name: str, namespace: str, suffix: str) -> str:
    """Derive a template lookup path from a view's dotted name.

    The suffix is removed, the namespace segments dropped, and what
    remains underscored and joined with ``/``::

        >>> module_to_template_root("app.admin.UserView", "app", "View")
        'admin/user'
    """
    segments = _unsuffix(name, suffix).split(".")
    prefix = namespace.split(".") if namespace else []
    if segments[: len(prefix)] == prefix:
        segments = segments[len(prefix) :]
    return "/".join(underscore(segment) for segment in segments if segment)


def resource_name(name: str, suffix: str = "View") -> str:
    """Derive the assigns key for a view's resource.

    ``app.UserView`` binds collection elements under ``user``.
    """
    last = name.rsplit(".", 1)[-1]
    return underscore(_unsuffix(last, suffix))


def underscore(value: str) -> str:
    """Convert ``CamelCase`` to ``snake_case``."""
    value = _CAMEL_BOUNDARY_RE.sub(r"\1_\2", value)
    value = _LOWER_UPPER_RE.sub(r"\1_\2", value)
    return value.replace("-", "_").lower()


def _unsuffix(value: str, suffix: str) -> str:
    if suffix and value.endswith(suffix):
        return value[: -len(suffix)]
    return value
