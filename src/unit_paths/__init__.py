"""unit-paths: Unit search path resolution for service managers.

This library computes where a unit manager looks for unit definitions.
For a given scope it produces an ordered, duplicate-free list of
directories, highest precedence first:

- Environment-injected directories (SYSTEMD_UNIT_PATH_EXTRA)
- Administrator overrides (e.g. /etc/systemd/system)
- Runtime directories (e.g. /run/systemd/system)
- Generator output (e.g. /run/systemd/generator)
- Persistent configuration (e.g. /etc/systemd/system.attached)
- Vendor directories (e.g. /usr/lib/systemd/system)

Setting SYSTEMD_UNIT_PATH replaces the computed list entirely.

Public API:
    resolve: Resolve the search path for a scope
    resolve_candidates: Same, keeping the tier of each directory
    lookup_paths: Context manager around resolve
    PathResolver: Resolver with injected environment and options
    Scope: Enum for SYSTEM/USER/GLOBAL scopes
    DirectoryTier, CandidatePath, SearchPathSet, ResolveOptions: Data models
    SettingsManager, SettingsPaths: YAML settings for CLI defaults
    UnitPathsError, UnknownScopeError, SettingsError: Exception types

Example:
    ```python
    from unit_paths import Scope, resolve

    for path in resolve(Scope.SYSTEM, environ={}):
        print(path)
    ```
"""

from .enumerator import enumerate_candidates
from .environment import parse_overrides
from .exceptions import SettingsError
from .exceptions import SettingsFileError
from .exceptions import SettingsValidationError
from .exceptions import UnitPathsError
from .exceptions import UnknownScopeError
from .models import CandidatePath
from .models import DirectoryTier
from .models import OverrideResult
from .models import ResolveOptions
from .models import Scope
from .models import SearchPathSet
from .resolver import PathResolver
from .resolver import lookup_paths
from .resolver import resolve
from .resolver import resolve_candidates
from .settings import SettingsManager
from .settings import SettingsPaths
from .utils import canonicalize_path
from .utils import normalize

__version__ = "0.1.0"

__all__ = [
    "resolve",
    "resolve_candidates",
    "lookup_paths",
    "PathResolver",
    "enumerate_candidates",
    "parse_overrides",
    "normalize",
    "canonicalize_path",
    "Scope",
    "DirectoryTier",
    "CandidatePath",
    "OverrideResult",
    "ResolveOptions",
    "SearchPathSet",
    "SettingsManager",
    "SettingsPaths",
    "UnitPathsError",
    "UnknownScopeError",
    "SettingsError",
    "SettingsFileError",
    "SettingsValidationError",
]
