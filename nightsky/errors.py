class NightSkyError(Exception):
    """Base exception for nightsky errors."""


class InitializationError(NightSkyError):
    """Raised when the astronomical-time backend is used before initialization."""


class StoreError(NightSkyError):
    """Raised when a star or orbit store cannot be opened."""


class ConfigError(NightSkyError):
    """Raised for invalid configuration values."""
