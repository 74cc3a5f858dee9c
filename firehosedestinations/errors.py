"""Errors raised while configuring delivery stream destinations."""


class DestinationConfigurationError(ValueError):
    """Raised when a destination or delivery stream is given invalid options."""


class ConfigurationConflictError(DestinationConfigurationError):
    """Raised when mutually exclusive destination options are combined."""
