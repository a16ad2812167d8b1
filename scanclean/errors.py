class ScanCleanError(Exception):
    """Base class for every error raised by scanclean."""


class ConfigurationError(ScanCleanError, ValueError):
    """A parameter is outside its valid range. Raised before any computation."""


class ResourceExhaustionError(ScanCleanError):
    """The requested image / window combination would overflow addressable size."""


class DegenerateInputError(ScanCleanError):
    """The input cannot produce a result (empty image, nothing left unmasked)."""
