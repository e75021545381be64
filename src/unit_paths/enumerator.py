"""Scope directory enumeration.

Each scope maps to a fixed, ordered table of directory tiers. Within a tier
directories are listed from highest to lowest precedence. No existence checks
happen here: directories that do not exist yet are still search locations.
"""

import logging
import os
import posixpath
import pwd
from collections.abc import Mapping

from .environment import split_path_list
from .exceptions import UnknownScopeError
from .models import CandidatePath
from .models import DirectoryTier
from .models import Scope
from .utils import join_root

logger = logging.getLogger(__name__)

TierTable = list[tuple[DirectoryTier, list[str]]]

SYSTEM_TIERS: TierTable = [
    (DirectoryTier.ADMINISTRATOR_OVERRIDE, ["/etc/systemd/system.control", "/etc/systemd/system"]),
    (
        DirectoryTier.RUNTIME_GENERATED,
        ["/run/systemd/system.control", "/run/systemd/transient", "/run/systemd/system"],
    ),
    (
        DirectoryTier.GENERATOR_OUTPUT,
        ["/run/systemd/generator.early", "/run/systemd/generator", "/run/systemd/generator.late"],
    ),
    (DirectoryTier.PERSISTENT_CONFIG, ["/etc/systemd/system.attached", "/run/systemd/system.attached"]),
    (DirectoryTier.VENDOR_SUPPLIED, ["/usr/local/lib/systemd/system", "/usr/lib/systemd/system"]),
]

# Legacy location on systems where /lib is not merged into /usr/lib
SPLIT_USR_SYSTEM_DIR = "/lib/systemd/system"

GLOBAL_TIERS: TierTable = [
    (DirectoryTier.ADMINISTRATOR_OVERRIDE, ["/etc/systemd/user"]),
    (
        DirectoryTier.VENDOR_SUPPLIED,
        [
            "/usr/local/share/systemd/user",
            "/usr/share/systemd/user",
            "/usr/local/lib/systemd/user",
            "/usr/lib/systemd/user",
        ],
    ),
]

DEFAULT_XDG_CONFIG_DIRS = "/etc/xdg"
DEFAULT_XDG_DATA_DIRS = "/usr/local/share:/usr/share"
FALLBACK_HOME = "/"


def enumerate_candidates(
    scope: Scope,
    root_prefix: str | None = None,
    environ: Mapping[str, str] | None = None,
    *,
    split_usr: bool = False,
    exclude_generated: bool = False,
) -> list[CandidatePath]:
    """Enumerate candidate directories for a scope.

    Args:
        scope: Scope to enumerate
        root_prefix: Alternative filesystem root every path is placed under
        environ: Read-only variable lookup for per-user locations (default: os.environ)
        split_usr: Append the legacy /lib vendor directory (system scope only)
        exclude_generated: Leave out generator output directories

    Returns:
        CandidatePaths in tier order, enumeration order within a tier

    Raises:
        UnknownScopeError: If scope is not a known Scope
    """
    if environ is None:
        environ = os.environ

    tiers = scope_tiers(scope, environ, split_usr=split_usr)

    candidates = []
    for tier, suffixes in tiers:
        if exclude_generated and tier is DirectoryTier.GENERATOR_OUTPUT:
            continue
        for suffix in suffixes:
            candidates.append(CandidatePath(join_root(root_prefix, suffix), tier))

    logger.debug(f"Enumerated {len(candidates)} candidate directories for {scope.value} scope")
    return candidates


def scope_tiers(scope: Scope, environ: Mapping[str, str], *, split_usr: bool = False) -> TierTable:
    """Get the tier table for a scope, before root prefixing.

    Raises:
        UnknownScopeError: If scope is not a known Scope
    """
    if scope is Scope.SYSTEM:
        tiers = [(tier, list(suffixes)) for tier, suffixes in SYSTEM_TIERS]
        if split_usr:
            tiers[-1][1].append(SPLIT_USR_SYSTEM_DIR)
        return tiers
    if scope is Scope.USER:
        return _user_tiers(environ)
    if scope is Scope.GLOBAL:
        return [(tier, list(suffixes)) for tier, suffixes in GLOBAL_TIERS]

    raise UnknownScopeError(f"Unknown scope: {scope!r}")


def _user_tiers(environ: Mapping[str, str]) -> TierTable:
    """Per-user tier table, following the XDG base directory conventions."""
    home = _home_dir(environ)
    config_home = _xdg_dir(environ, "XDG_CONFIG_HOME", posixpath.join(home, ".config"))
    data_home = _xdg_dir(environ, "XDG_DATA_HOME", posixpath.join(home, ".local", "share"))
    runtime_dir = _xdg_dir(environ, "XDG_RUNTIME_DIR", f"/run/user/{os.getuid()}")
    config_dirs = _xdg_dir_list(environ, "XDG_CONFIG_DIRS", DEFAULT_XDG_CONFIG_DIRS)
    data_dirs = _xdg_dir_list(environ, "XDG_DATA_DIRS", DEFAULT_XDG_DATA_DIRS)

    return [
        (
            DirectoryTier.ADMINISTRATOR_OVERRIDE,
            [
                posixpath.join(config_home, "systemd", "user.control"),
                posixpath.join(config_home, "systemd", "user"),
                *(posixpath.join(d, "systemd", "user") for d in config_dirs),
                "/etc/systemd/user",
            ],
        ),
        (
            DirectoryTier.RUNTIME_GENERATED,
            [
                posixpath.join(runtime_dir, "systemd", "user.control"),
                posixpath.join(runtime_dir, "systemd", "transient"),
                posixpath.join(runtime_dir, "systemd", "user"),
                "/run/systemd/user",
            ],
        ),
        (
            DirectoryTier.GENERATOR_OUTPUT,
            [
                posixpath.join(runtime_dir, "systemd", "generator.early"),
                posixpath.join(runtime_dir, "systemd", "generator"),
                posixpath.join(runtime_dir, "systemd", "generator.late"),
            ],
        ),
        (DirectoryTier.PERSISTENT_CONFIG, [posixpath.join(data_home, "systemd", "user")]),
        (
            DirectoryTier.VENDOR_SUPPLIED,
            [
                *(posixpath.join(d, "systemd", "user") for d in data_dirs),
                "/usr/local/lib/systemd/user",
                "/usr/lib/systemd/user",
            ],
        ),
    ]


def _home_dir(environ: Mapping[str, str]) -> str:
    """Home directory from HOME, else the passwd entry of the calling uid, else "/"."""
    home = environ.get("HOME")
    if home and posixpath.isabs(home):
        return home

    try:
        return pwd.getpwuid(os.getuid()).pw_dir
    except KeyError:
        logger.debug(f"No HOME and no passwd entry for uid {os.getuid()}, using {FALLBACK_HOME}")
        return FALLBACK_HOME


def _xdg_dir(environ: Mapping[str, str], name: str, default: str) -> str:
    """Read an XDG directory variable; relative or empty values are ignored."""
    value = environ.get(name)
    if value and posixpath.isabs(value):
        return value
    if value:
        logger.debug(f"Ignoring relative {name}='{value}', using {default}")
    return default


def _xdg_dir_list(environ: Mapping[str, str], name: str, default: str) -> list[str]:
    """Read an XDG directory list variable, keeping only absolute entries."""
    entries = [entry for entry in split_path_list(environ.get(name)) if posixpath.isabs(entry)]
    return entries or split_path_list(default)
