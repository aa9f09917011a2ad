"""Exception and warning types raised by the export engine."""

from __future__ import annotations


class ExportError(Exception):
    """Base class for every error raised by openexport."""


class AssetLoadError(ExportError):
    """An image could not be fetched or decoded.

    Always recovered locally: the image slot is left blank and a warning is
    logged. It only escapes :meth:`ImageNormalizer.load` itself.
    """

    def __init__(self, source_ref: str, reason: str) -> None:
        super().__init__(f"Failed to load image {source_ref}: {reason}")
        self.source_ref = source_ref
        self.reason = reason


class EncodingError(ExportError):
    """Serialising or writing an artifact failed. Fatal for that artifact."""


class LayoutOverflowWarning(UserWarning):
    """Content could not be made to fit and overflows its region slightly."""
