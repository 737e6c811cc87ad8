"""Exceptions raised by pagebinder."""

from __future__ import annotations


class PageBinderError(Exception):
    """Base exception for pagebinder errors."""


class EmptyInputError(PageBinderError):
    """Raised when a document is composed from an empty image sequence."""

    def __init__(self) -> None:
        super().__init__("The image list is empty.")


class ImageDecodeError(PageBinderError):
    """Raised when image bytes cannot be decoded as a raster image."""


class InvalidImageError(PageBinderError):
    """Raised when the image at *index* cannot be decoded.

    Only the first undecodable position is reported.
    """

    def __init__(self, index: int, source_file_name: str | None = None) -> None:
        self.index = index
        self.source_file_name = source_file_name
        message = f"Cannot decode image at index {index}"
        if source_file_name:
            message += f" ({source_file_name})"
        super().__init__(message + ".")


class MergeProducedEmptyOutputError(PageBinderError):
    """Raised when a merge yields no pages at all."""

    def __init__(self) -> None:
        super().__init__(
            "Merged document has no pages: no input could be read as a PDF."
        )
