"""Exception taxonomy shared by the fingerprinting and grouping layers."""


class LookalikeError(Exception):
    """Base class for all errors raised by lookalike."""


class InvalidRaster(LookalikeError):
    """Raised when a pixel buffer is empty or does not match its dimensions."""


class IncompatibleFingerprints(LookalikeError):
    """Raised when two fingerprints have different hash or histogram sizes."""


class RasterUnavailable(LookalikeError):
    """Raised when a raster provider fails to deliver pixels for an image."""
