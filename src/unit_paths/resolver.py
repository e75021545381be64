"""Search path resolution for unit directories."""

import logging
import os
from collections.abc import Iterator
from collections.abc import Mapping
from contextlib import contextmanager

from .enumerator import enumerate_candidates
from .environment import parse_overrides
from .exceptions import UnknownScopeError
from .models import CandidatePath
from .models import DirectoryTier
from .models import ResolveOptions
from .models import Scope
from .models import SearchPathSet
from .utils import canonicalize_path
from .utils import normalize

logger = logging.getLogger(__name__)


class PathResolver:
    """Computes unit search paths for a scope.

    The environment and resolution options are injected so that the resolver
    never reaches for hidden process state. Instances hold no state between
    calls; every call builds a fresh result.

    Resolution order (highest to lowest priority):
    1. Extra entries from the environment
    2. Administrator override directories
    3. Runtime directories
    4. Generator output directories
    5. Persistent configuration directories
    6. Vendor directories

    A replace override from the environment bypasses all of the above.

    Args:
        environ: Read-only variable lookup (default: os.environ at call time)
        options: Root prefix and optional tier switches
    """

    def __init__(self, environ: Mapping[str, str] | None = None, options: ResolveOptions | None = None):
        self.environ = environ
        self.options = options or ResolveOptions()

    def resolve(self, scope: Scope) -> SearchPathSet:
        """Resolve the search path for a scope.

        Args:
            scope: Scope to resolve

        Returns:
            SearchPathSet in precedence order

        Raises:
            UnknownScopeError: If scope is not a known Scope
        """
        ordered = self._ordered_candidates(scope)
        paths = normalize(candidate.path for candidate in ordered)
        logger.debug(f"Resolved {len(paths)} search directories for {scope.value} scope")
        return paths

    def resolve_candidates(self, scope: Scope) -> list[CandidatePath]:
        """Resolve the search path, keeping the tier of every entry.

        Replace-mode entries are tagged ENVIRONMENT_INJECTED.

        Args:
            scope: Scope to resolve

        Returns:
            Deduplicated CandidatePaths with canonical paths, in precedence order
        """
        seen: set[str] = set()
        result = []

        for candidate in self._ordered_candidates(scope):
            canonical = canonicalize_path(candidate.path)
            if canonical in seen:
                continue
            seen.add(canonical)
            result.append(CandidatePath(canonical, candidate.tier))

        return result

    # ===== Private Helpers =====

    def _ordered_candidates(self, scope: Scope) -> list[CandidatePath]:
        """Raw candidates in precedence order, duplicates not yet removed."""
        if not isinstance(scope, Scope):
            raise UnknownScopeError(f"Unknown scope: {scope!r}")

        environ = self.environ if self.environ is not None else os.environ
        overrides = parse_overrides(scope, environ)

        if overrides.replace is not None:
            logger.debug(f"Search path for {scope.value} scope replaced by environment")
            return [CandidatePath(path, DirectoryTier.ENVIRONMENT_INJECTED) for path in overrides.replace]

        enumerated = enumerate_candidates(
            scope,
            self.options.root_prefix,
            environ,
            split_usr=self.options.split_usr,
            exclude_generated=self.options.exclude_generated,
        )
        injected = [CandidatePath(path, DirectoryTier.ENVIRONMENT_INJECTED) for path in overrides.extra]

        # sorted() is stable: enumeration order survives within a tier
        return sorted(injected + enumerated, key=lambda candidate: candidate.tier.rank)


def resolve(
    scope: Scope,
    root_prefix: str | None = None,
    environ: Mapping[str, str] | None = None,
    *,
    split_usr: bool = False,
    exclude_generated: bool = False,
) -> SearchPathSet:
    """Resolve the unit search path for a scope.

    Args:
        scope: Scope to resolve
        root_prefix: Alternative filesystem root (default: "/")
        environ: Read-only variable lookup (default: os.environ)
        split_usr: Also search the legacy /lib vendor directory
        exclude_generated: Leave out generator output directories

    Returns:
        SearchPathSet in precedence order (first = highest)
    """
    options = ResolveOptions(root_prefix=root_prefix, split_usr=split_usr, exclude_generated=exclude_generated)
    return PathResolver(environ, options).resolve(scope)


def resolve_candidates(
    scope: Scope,
    root_prefix: str | None = None,
    environ: Mapping[str, str] | None = None,
    *,
    split_usr: bool = False,
    exclude_generated: bool = False,
) -> list[CandidatePath]:
    """Like resolve(), but keeps the tier of every entry."""
    options = ResolveOptions(root_prefix=root_prefix, split_usr=split_usr, exclude_generated=exclude_generated)
    return PathResolver(environ, options).resolve_candidates(scope)


@contextmanager
def lookup_paths(
    scope: Scope,
    environ: Mapping[str, str] | None = None,
    options: ResolveOptions | None = None,
) -> Iterator[SearchPathSet]:
    """Resolve the search path for use within a with-block.

    Example:
        ```python
        with lookup_paths(Scope.SYSTEM) as paths:
            for path in paths:
                print(path)
        ```
    """
    paths = PathResolver(environ, options).resolve(scope)
    logger.debug(f"Acquired {scope.value} search path ({len(paths)} entries)")
    try:
        yield paths
    finally:
        logger.debug(f"Released {scope.value} search path")
