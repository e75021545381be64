"""Data models for unit-paths."""

from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import overload


class Scope(Enum):
    """Execution scope enumeration.

    Determines which directory templates are eligible and which
    environment variables are consulted.
    """

    SYSTEM = "system"
    USER = "user"
    GLOBAL = "global"


class DirectoryTier(Enum):
    """Why a directory is in the search path.

    Declaration order is precedence order: members declared first shadow
    members declared later.
    """

    ENVIRONMENT_INJECTED = "environment-injected"
    ADMINISTRATOR_OVERRIDE = "administrator-override"
    RUNTIME_GENERATED = "runtime-generated"
    GENERATOR_OUTPUT = "generator-output"
    PERSISTENT_CONFIG = "persistent-config"
    VENDOR_SUPPLIED = "vendor-supplied"

    @property
    def rank(self) -> int:
        """Position of this tier in precedence order (0 = highest)."""
        return _TIER_RANKS[self]


_TIER_RANKS = {tier: rank for rank, tier in enumerate(DirectoryTier)}


@dataclass(frozen=True)
class CandidatePath:
    """A directory produced by enumeration, tagged with its tier."""

    path: str
    tier: DirectoryTier


@dataclass(frozen=True)
class OverrideResult:
    """Directories contributed by environment overrides.

    Attributes:
        replace: Full replacement list, or None when no replace override is set
        extra: Entries to prepend ahead of the enumerated directories
    """

    replace: tuple[str, ...] | None = None
    extra: tuple[str, ...] = ()

    @property
    def is_replace(self) -> bool:
        return self.replace is not None


@dataclass(frozen=True)
class ResolveOptions:
    """Optional knobs for a resolution.

    Attributes:
        root_prefix: Alternative filesystem root (None means "/")
        split_usr: Also search the legacy /lib vendor directory (system scope)
        exclude_generated: Leave out generator output directories
    """

    root_prefix: str | None = None
    split_usr: bool = False
    exclude_generated: bool = False


@dataclass(frozen=True)
class SearchPathSet(Sequence[str]):
    """Ordered, duplicate-free sequence of canonical directory paths.

    The first entry has the highest precedence. Instances are immutable and
    are built fresh by every resolution.
    """

    paths: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if len(set(self.paths)) != len(self.paths):
            raise ValueError("SearchPathSet entries must be unique")

    def __len__(self) -> int:
        return len(self.paths)

    @overload
    def __getitem__(self, index: int) -> str: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[str, ...]: ...

    def __getitem__(self, index):
        return self.paths[index]

    def as_list(self) -> list[str]:
        """Return a new list with the paths in precedence order."""
        return list(self.paths)
