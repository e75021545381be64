"""Utility functions for unit-paths."""

import os
import posixpath
from collections.abc import Iterable
from typing import Any

from .models import SearchPathSet


def canonicalize_path(path: str, cwd: str | None = None) -> str:
    """Canonicalize a path without touching the filesystem.

    Relative paths are anchored at ``cwd``. Repeated separators are
    collapsed, ``.`` segments dropped and ``..`` segments resolved
    syntactically, so symlinks are never followed and nonexistent
    directories are fine.

    Args:
        path: Path to canonicalize
        cwd: Directory relative paths are anchored at (default: os.getcwd())

    Returns:
        Absolute canonical path

    Examples:
        >>> canonicalize_path("/etc//systemd/./system/")
        '/etc/systemd/system'

        >>> canonicalize_path("/usr/lib/../local/lib")
        '/usr/local/lib'

        >>> canonicalize_path("/..")
        '/'

        >>> canonicalize_path("units", cwd="/srv")
        '/srv/units'
    """
    if not posixpath.isabs(path):
        path = posixpath.join(cwd if cwd is not None else os.getcwd(), path)

    normalized = posixpath.normpath(path)

    # normpath keeps a leading "//" (implementation-defined on POSIX)
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")

    return normalized


def join_root(root_prefix: str | None, suffix: str) -> str:
    """Place an absolute suffix under a root prefix.

    Examples:
        >>> join_root(None, "/etc/systemd/system")
        '/etc/systemd/system'

        >>> join_root("/srv/image/", "/etc/systemd/system")
        '/srv/image/etc/systemd/system'
    """
    root = root_prefix or "/"
    return canonicalize_path(root.rstrip("/") + "/" + suffix.lstrip("/"))


def normalize(paths: Iterable[str], cwd: str | None = None) -> SearchPathSet:
    """Canonicalize paths and drop later duplicates.

    First occurrences keep their relative order.

    Args:
        paths: Raw paths in precedence order
        cwd: Directory relative paths are anchored at

    Returns:
        SearchPathSet of unique canonical paths
    """
    return SearchPathSet(tuple(unique_canonical(paths, cwd=cwd)))


def unique_canonical(paths: Iterable[str], cwd: str | None = None) -> list[str]:
    """Canonicalize paths, keeping only the first occurrence of each."""
    seen: set[str] = set()
    result = []

    for raw in paths:
        canonical = canonicalize_path(raw, cwd=cwd)
        if canonical in seen:
            continue
        seen.add(canonical)
        result.append(canonical)

    return result


def deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries with overlay precedence.

    Recursively merges nested dictionaries. Non-dict values in overlay
    completely replace corresponding values in base.

    Args:
        base: Base dictionary
        overlay: Overlay dictionary (takes precedence)

    Returns:
        New merged dictionary (base and overlay are not modified)

    Examples:
        >>> deep_merge({"resolve": {"scope": "system", "root": "/"}}, {"resolve": {"scope": "user"}})
        {'resolve': {'scope': 'user', 'root': '/'}}
    """
    result = base.copy()

    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result
