"""Exceptions that end a run with an input error (exit status 2)."""


class ExampleCheckerError(Exception):
    """Base class for unrecoverable input errors."""


class ConfigError(ExampleCheckerError):
    """Configuration file or option is invalid."""


class SourceError(ExampleCheckerError):
    """A requested document path does not exist or cannot be listed."""
