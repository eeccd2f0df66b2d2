"""Custom exception classes for tfinspect.

Extraction itself never raises for malformed configuration; problems in the
inspected module are reported as diagnostics. These exceptions cover the
outer layers only.
"""


class TfInspectError(Exception):
    """Base exception for all tfinspect errors."""
    pass


class DiscoveryError(TfInspectError):
    """Raised when the module directory is missing or cannot be listed."""
    pass


class ModuleLoadError(TfInspectError):
    """Raised in strict mode when a configuration file cannot be read or parsed."""
    pass


class ConfigError(TfInspectError):
    """Raised when configuration is invalid or missing."""
    pass
