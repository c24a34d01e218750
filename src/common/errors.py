# ABOUTME: Declares the error taxonomy raised at the engine's seams.
# ABOUTME: Separates unknown entities, malformed input, and missing configuration.


class EngineError(Exception):
    """Base class for all errors raised by the analytics engine."""


class NotFoundError(EngineError, LookupError):
    """Requested student or record does not exist."""


class InvalidInputError(EngineError, ValueError):
    """A record or caller action is malformed and cannot be tolerated."""


class ConfigurationMissingError(EngineError, ValueError):
    """A computation needs configuration that the caller did not supply."""
