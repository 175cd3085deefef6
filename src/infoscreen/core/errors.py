"""
Exceptions raised by the infoscreen core.
"""


class InfoscreenError(Exception):
    """Base class for all infoscreen errors."""


class ContentIOError(InfoscreenError):
    """A file could not be opened, read or written."""


class NotAFileError(InfoscreenError):
    """A regular file was expected but a directory was found."""


class CopyError(InfoscreenError):
    """Copying a file into the repository failed."""


class TickerDecodeError(InfoscreenError):
    """Ticker bytes could not be decoded with the legacy codepage."""


class EvictionAccountingError(InfoscreenError):
    """The image cache byte counter went out of sync with its entries."""


class ImageEncodeError(InfoscreenError):
    """An image could not be decoded, resized or encoded."""


class ConfigError(InfoscreenError):
    """The configuration file is missing or invalid."""
