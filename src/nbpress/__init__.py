"""nbpress - Convert Jupyter notebooks into MDX blog posts.

Incremental: notebooks whose bytes have not changed since the last run are
skipped.
"""

__version__ = "0.1.0"


class NbPressError(Exception):
    """Base exception for all nbpress errors."""

    pass


class NotebookParseError(NbPressError):
    """Raised when a notebook cannot be read or parsed."""

    pass


class AssetWriteError(NbPressError):
    """Raised when a rendered document or asset cannot be written."""

    pass


class ConfigurationError(NbPressError):
    """Raised when configuration is invalid."""

    pass
