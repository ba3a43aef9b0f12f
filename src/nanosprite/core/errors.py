# core/errors.py


class NanoSpriteError(Exception):
    """Base class for errors raised by the compositing engine."""


class InvalidGeometry(NanoSpriteError, ValueError):
    """A frame rect or display size that cannot be composited (non-positive extent)."""


class DecodeFailure(NanoSpriteError, ValueError):
    """An image payload that is empty or cannot be decoded into an image."""


class SchedulerMisuse(NanoSpriteError, RuntimeError):
    """The animation scheduler was given a non-positive rate or frame count."""
