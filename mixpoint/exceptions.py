"""Custom exceptions for mixpoint."""


class MixpointError(Exception):
    """Base class for mixpoint errors."""

    pass


class InvalidFeatureError(MixpointError):
    """Raised when track features violate their invariants at construction."""

    pass


class FeatureFileError(MixpointError):
    """Raised when a feature document cannot be read or decoded."""

    pass


class ConfigError(MixpointError):
    """Raised when an engine configuration is inconsistent."""

    pass
