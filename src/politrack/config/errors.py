"""Configuration error definitions.

Every error in this module is fatal for a running job: the job runner never
catches it, so the batch stops before its checkpoint is advanced.
"""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required configuration values are absent or blank."""


class StoreUnavailableError(ConfigurationError):
    """Raised when the record store cannot be opened or migrated."""
