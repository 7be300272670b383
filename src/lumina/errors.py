class LuminaError(Exception):
    """Base class for errors raised by lumina."""


class SourceUnavailableError(LuminaError):
    """The camera could not be opened."""
