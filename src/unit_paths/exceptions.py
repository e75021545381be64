"""Exceptions for unit-paths."""


class UnitPathsError(Exception):
    """Base exception for unit-paths errors."""

    pass


class UnknownScopeError(UnitPathsError):
    """Scope value outside the known set.

    Indicates a bug in the caller rather than bad user input.
    """

    pass


class SettingsError(UnitPathsError):
    """Base exception for settings errors."""

    pass


class SettingsFileError(SettingsError):
    """Error reading or writing a settings file."""

    pass


class SettingsValidationError(SettingsError):
    """Settings file contains an invalid value."""

    pass
