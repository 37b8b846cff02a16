"""
Error types raised by the welder pipeline.

Every failure is fatal to the current command. The CLI reports the message
together with its ``__cause__`` chain and exits non-zero.
"""


class WelderError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(WelderError):
    """Malformed or missing configuration, or a value outside its bounds."""


class DiscoveryError(WelderError):
    """An include/exclude glob pattern could not be compiled."""


class ImageDecodeError(WelderError):
    """A source sprite could not be read or decoded."""

    def __init__(self, path, reason: str = ""):
        self.path = path
        message = f"cannot decode image {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class LayoutOverflowError(WelderError):
    """The packed sheet does not fit the configured maximum height."""

    def __init__(self, sprite_index: int, required_height: int, max_height: int):
        self.sprite_index = sprite_index
        self.required_height = required_height
        self.max_height = max_height
        super().__init__(
            f"sprite #{sprite_index} needs a sheet height of {required_height}px "
            f"but sheet.max_height is {max_height}px"
        )


class WelderIOError(WelderError, OSError):
    """Filesystem read or write failure."""


class ExternalToolError(WelderError):
    """An external publishing dependency is missing or failed."""
