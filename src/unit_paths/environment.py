"""Environment variable overrides for the unit search path.

Two variables are consulted per scope, each with a scope-specific and a
scope-independent spelling (the scope-specific one wins):

- ``SYSTEMD_<SCOPE>_UNIT_PATH`` / ``SYSTEMD_UNIT_PATH`` replace the computed
  search path entirely.
- ``SYSTEMD_<SCOPE>_UNIT_PATH_EXTRA`` / ``SYSTEMD_UNIT_PATH_EXTRA`` prepend
  entries ahead of the computed search path.

Values are lists separated by ``os.pathsep``. Nothing here touches the
filesystem and no value is ever an error.
"""

import logging
import os
from collections.abc import Mapping

from .models import OverrideResult
from .models import Scope

logger = logging.getLogger(__name__)

UNIT_PATH_VAR = "SYSTEMD_UNIT_PATH"
EXTRA_SUFFIX = "_EXTRA"


def replace_variable_names(scope: Scope) -> tuple[str, str]:
    """Names of the replace variables for a scope, most specific first."""
    return (f"SYSTEMD_{scope.name}_UNIT_PATH", UNIT_PATH_VAR)


def extra_variable_names(scope: Scope) -> tuple[str, str]:
    """Names of the extra variables for a scope, most specific first."""
    specific, generic = replace_variable_names(scope)
    return (specific + EXTRA_SUFFIX, generic + EXTRA_SUFFIX)


def split_path_list(value: str | None) -> list[str]:
    """Split a path list on the platform separator, dropping empty elements.

    Examples:
        >>> split_path_list("/a::/b:")
        ['/a', '/b']

        >>> split_path_list(None)
        []
    """
    if not value:
        return []
    return [entry for entry in value.split(os.pathsep) if entry]


def parse_overrides(scope: Scope, environ: Mapping[str, str] | None = None) -> OverrideResult:
    """Read the override variables relevant to a scope.

    Args:
        scope: Scope selecting the scope-specific variable names
        environ: Read-only variable lookup (default: os.environ)

    Returns:
        OverrideResult with the replace list (or None) and extra entries
    """
    if environ is None:
        environ = os.environ

    replace_name, replace_value = _first_set(environ, replace_variable_names(scope))
    replace = split_path_list(replace_value)
    if replace_value and not replace:
        logger.debug(f"Ignoring {replace_name}: no directories in '{replace_value}'")

    extra_name, extra_value = _first_set(environ, extra_variable_names(scope))
    extra = split_path_list(extra_value)
    if extra:
        logger.debug(f"{extra_name} prepends {len(extra)} entries")

    if replace:
        logger.debug(f"{replace_name} replaces the search path with {len(replace)} entries")
        return OverrideResult(replace=tuple(replace), extra=tuple(extra))

    return OverrideResult(replace=None, extra=tuple(extra))


def _first_set(environ: Mapping[str, str], names: tuple[str, ...]) -> tuple[str | None, str | None]:
    """Return the first (name, value) pair whose value is non-empty."""
    for name in names:
        value = environ.get(name)
        if value:
            return name, value
    return None, None
