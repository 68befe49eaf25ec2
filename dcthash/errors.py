class DctHashError(Exception):
    """Base class for errors raised by dcthash."""


class ConfigurationError(DctHashError, ValueError):
    """Bit resolution that cannot produce a non-empty sub-band."""


class ImageInputError(DctHashError, ValueError):
    """Image could not be decoded, opened or resized."""


class IncompatibleHashError(DctHashError, ValueError):
    """Two hashes produced by differently configured algorithms were compared."""
