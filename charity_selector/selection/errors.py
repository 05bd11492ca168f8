"""Error taxonomy for the selection engine and its record sources."""

from __future__ import annotations


class SelectionError(Exception):
    """Base class for every error surfaced by a selection call."""


class SupplyError(SelectionError):
    """Eligible candidates cannot fill the requested output size."""

    def __init__(
        self,
        message: str,
        *,
        required: int,
        available: int,
        national: int,
        regional: int,
    ) -> None:
        super().__init__(message)
        self.required = required
        self.available = available
        self.national = national
        self.regional = regional

    @property
    def shortfall(self) -> int:
        return max(0, self.required - self.available)


class ProfileError(SelectionError):
    """The user profile is missing required identifying fields."""


class InvariantError(SelectionError):
    """Internal consistency failure. Indicates a bug, never bad input."""


class RuleShortfallError(SelectionError):
    """A tailoring rule minimum could not be met while strict minimums are on."""


class ConfigError(SelectionError, ValueError):
    """Invalid configuration value or unknown registered type."""


class SourceError(SelectionError):
    """A record source could not supply records."""


class SourceNotFoundError(SourceError):
    pass


class EmptySourceError(SourceError):
    pass


class SourceReadError(SourceError):
    pass
