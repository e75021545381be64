"""Settings manager for unit-paths defaults."""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from .exceptions import SettingsFileError
from .exceptions import SettingsValidationError
from .models import ResolveOptions
from .models import Scope
from .utils import deep_merge

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "UNIT_PATHS_CONFIG"
SYSTEM_SETTINGS_PATH = Path("/etc/unit-paths/settings.yaml")


class SettingsTarget(Enum):
    """Settings file to write to."""

    SYSTEM = "system"
    USER = "user"


@dataclass(frozen=True)
class SettingsPaths:
    """Paths to the settings files, lowest priority first.

    Attributes:
        system: Machine-wide settings file
        user: Per-user settings file (or an explicitly chosen file)
    """

    system: Path
    user: Path


def default_settings_paths(explicit: Path | None = None) -> SettingsPaths:
    """Get the conventional settings paths.

    Returns:
        SettingsPaths with:
        - System: /etc/unit-paths/settings.yaml
        - User: $UNIT_PATHS_CONFIG, else $XDG_CONFIG_HOME/unit-paths/settings.yaml,
          else ~/.config/unit-paths/settings.yaml

    Args:
        explicit: File that replaces the user settings file (e.g. from --config)

    Raises:
        SettingsFileError: If no user settings location can be determined
    """
    if explicit is not None:
        return SettingsPaths(system=SYSTEM_SETTINGS_PATH, user=explicit)

    if env := os.environ.get(CONFIG_ENV_VAR):
        return SettingsPaths(system=SYSTEM_SETTINGS_PATH, user=Path(env))

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg and os.path.isabs(xdg):
        base_dir = Path(xdg)
    else:
        try:
            base_dir = Path.home() / ".config"
        except RuntimeError as e:
            raise SettingsFileError(f"Cannot locate user settings: {e}") from e
    return SettingsPaths(system=SYSTEM_SETTINGS_PATH, user=base_dir / "unit-paths" / "settings.yaml")


class SettingsManager:
    """Reads and writes unit-paths settings.

    Settings from the user file override settings from the system file.
    Missing files are equivalent to empty ones.

    Args:
        paths: Settings file locations
    """

    def __init__(self, paths: SettingsPaths):
        self.paths = paths

    # ===== Merged Settings =====

    def get_merged_settings(self) -> dict[str, Any]:
        """Get merged settings from both files.

        Merge order (later overrides earlier):
        1. System settings
        2. User settings

        Returns:
            Merged settings dictionary
        """
        merged: dict[str, Any] = {}

        system = self._read_yaml(self.paths.system)
        if system:
            merged = deep_merge(merged, system)

        user = self._read_yaml(self.paths.user)
        if user:
            merged = deep_merge(merged, user)

        return merged

    # ===== Resolution Defaults =====

    def get_default_scope(self) -> Scope | None:
        """Get the default scope from resolve.scope.

        Returns:
            Scope or None if not set

        Raises:
            SettingsValidationError: If the value is not a known scope name
        """
        value = self._resolve_section().get("scope")
        if value is None:
            return None
        try:
            return Scope(value)
        except ValueError as e:
            names = ", ".join(scope.value for scope in Scope)
            raise SettingsValidationError(f"Invalid resolve.scope '{value}' (expected one of: {names})") from e

    def set_default_scope(self, scope: Scope, target: SettingsTarget = SettingsTarget.USER) -> None:
        """Set the default scope in a settings file.

        Args:
            scope: Scope to use when none is given on the command line
            target: Settings file to write (default: USER)
        """
        self.set_value({"resolve": {"scope": scope.value}}, target)
        logger.info(f"Set default scope to '{scope.value}' in {target.value} settings")

    def get_resolve_options(self) -> ResolveOptions:
        """Build ResolveOptions from the resolve section.

        Raises:
            SettingsValidationError: If a value has the wrong type
        """
        section = self._resolve_section()

        root = section.get("root")
        if root is not None and not isinstance(root, str):
            raise SettingsValidationError(f"Invalid resolve.root {root!r} (expected a path)")

        return ResolveOptions(
            root_prefix=root,
            split_usr=self._get_bool(section, "split_usr"),
            exclude_generated=self._get_bool(section, "exclude_generated"),
        )

    def get_log_level(self) -> str | None:
        """Get logging.level, upper-cased, or None if not set."""
        section = self.get_merged_settings().get("logging") or {}
        if not isinstance(section, dict):
            raise SettingsValidationError("Invalid logging section (expected a mapping)")
        level = section.get("level")
        return str(level).upper() if level is not None else None

    # ===== Generic Settings Update =====

    def set_value(self, updates: dict[str, Any], target: SettingsTarget = SettingsTarget.USER) -> None:
        """Deep merge updates into a settings file.

        Args:
            updates: Dictionary of updates to merge
            target: Settings file to write (default: USER)

        Raises:
            SettingsFileError: If the file cannot be written
        """
        self._update_yaml(self.target_to_path(target), updates)

    def target_to_path(self, target: SettingsTarget) -> Path:
        """Get the file path for a settings target."""
        target_map = {
            SettingsTarget.SYSTEM: self.paths.system,
            SettingsTarget.USER: self.paths.user,
        }
        return target_map[target]

    # ===== Private Helpers =====

    def _resolve_section(self) -> dict[str, Any]:
        section = self.get_merged_settings().get("resolve") or {}
        if not isinstance(section, dict):
            raise SettingsValidationError("Invalid resolve section (expected a mapping)")
        return section

    @staticmethod
    def _get_bool(section: dict[str, Any], key: str) -> bool:
        value = section.get(key, False)
        if not isinstance(value, bool):
            raise SettingsValidationError(f"Invalid resolve.{key} {value!r} (expected true or false)")
        return value

    def _read_yaml(self, path: Path) -> dict[str, Any] | None:
        """Read YAML file.

        Args:
            path: Path to YAML file

        Returns:
            Dictionary from YAML or None if the file doesn't exist or can't be parsed
        """
        if not path.exists():
            return None

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read settings from {path}: {e}")
            return None

        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring settings in {path}: top level is not a mapping")
            return None
        return data

    def _write_yaml(self, path: Path, data: dict[str, Any]) -> None:
        """Write YAML file.

        Raises:
            SettingsFileError: If write fails
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as f:
                yaml.dump(data, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise SettingsFileError(f"Failed to write settings to {path}: {e}") from e

    def _update_yaml(self, path: Path, updates: dict[str, Any]) -> None:
        existing = self._read_yaml(path) or {}
        merged = deep_merge(existing, updates)
        self._write_yaml(path, merged)
