"""Exception types raised by rtmodelingsuite."""


class RtModelingError(Exception):
    """Base class for all rtmodelingsuite errors."""


class ConfigurationError(RtModelingError, ValueError):
    """Invalid or incomplete settings, raised before any inference call."""


class DataError(RtModelingError, ValueError):
    """Degenerate input case series that cannot be turned into model data."""


class InferenceError(RtModelingError, RuntimeError):
    """The inference engine raised while fitting a region."""
