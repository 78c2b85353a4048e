"""Exception hierarchy for changelog-py.

Every error raised on purpose by this package derives from
:class:`ChangelogPyError`, so callers can catch the whole family
with a single ``except`` clause.
"""

from __future__ import annotations


class ChangelogPyError(Exception):
    """Base class for all changelog-py errors."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigurationError(ChangelogPyError):
    """Invalid or unusable configuration."""


class ConfigNotFoundError(ConfigurationError):
    """No pyproject.toml could be located."""


class ConfigValidationError(ConfigurationError):
    """Configuration values failed validation."""


# =============================================================================
# Classification and rendering
# =============================================================================


class ClassificationError(ChangelogPyError):
    """Commit analysis could not produce a recommendation."""


class UnknownPresetError(ConfigurationError, ClassificationError):
    """The configured preset name does not match any known ruleset."""

    def __init__(self, name: str, available: list[str]) -> None:
        super().__init__(
            f"Unable to load the \"{name}\" preset. Available presets: {', '.join(available)}"
        )
        self.name = name
        self.available = available


class RenderingError(ChangelogPyError):
    """The changelog stream failed before completing."""


# =============================================================================
# I/O
# =============================================================================


class GitError(ChangelogPyError):
    """A git command failed."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        if self.stderr:
            return f"{self.args[0]}: {self.stderr.strip()}"
        return str(self.args[0])


class ChangelogWriteError(ChangelogPyError):
    """Writing the changelog file failed."""
