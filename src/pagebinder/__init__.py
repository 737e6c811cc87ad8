"""pagebinder: compose images into PDF pages, merge PDFs, and render previews."""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path

from .compositor import CREATOR, DocumentMetadata, compose_pdf, layout_pages
from .errors import (
    EmptyInputError,
    ImageDecodeError,
    InvalidImageError,
    MergeProducedEmptyOutputError,
    PageBinderError,
)
from .geometry import (
    A4,
    DEFAULT_GEOMETRY,
    LETTER,
    Margins,
    Orientation,
    PageGeometry,
    PageSize,
    Rect,
)
from .images import RasterImage
from .merger import MergeResult, merge_pdf_pair, merge_pdfs, merge_pdfs_with_report
from .thumbnail import DEFAULT_THUMBNAIL_SIZE, render_thumbnail

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "A4",
    "CREATOR",
    "DEFAULT_GEOMETRY",
    "DEFAULT_THUMBNAIL_SIZE",
    "DocumentMetadata",
    "EmptyInputError",
    "ImageDecodeError",
    "InvalidImageError",
    "LETTER",
    "Margins",
    "MergeProducedEmptyOutputError",
    "MergeResult",
    "Orientation",
    "PageBinderError",
    "PageGeometry",
    "PageSize",
    "RasterImage",
    "Rect",
    "compose_pdf",
    "layout_pages",
    "merge_pdf_pair",
    "merge_pdfs",
    "merge_pdfs_with_report",
    "render_thumbnail",
]

_INVALID_FILENAME_CHARS = re.compile(r'[/\\?%*|"<>:\x00-\x1f\x7f]')


def _sanitize_file_name(name: str) -> str:
    """Replace characters that are unsafe in file names with ``_``.

    Falls back to ``Document`` when nothing usable remains.
    """
    sanitized = _INVALID_FILENAME_CHARS.sub("_", name).strip()
    return sanitized or "Document"


def _unique_path(folder: Path, stem: str, suffix: str) -> Path:
    """Return ``{folder}/{stem}{suffix}``, or ``{stem} (N){suffix}`` if taken."""
    candidate = folder / f"{stem}{suffix}"
    counter = 1
    while candidate.exists():
        candidate = folder / f"{stem} ({counter}){suffix}"
        counter += 1
    return candidate


def _resolve_output_path(
    *,
    output: Path | str | None,
    title: str,
    suffix: str = ".pdf",
) -> Path:
    """Resolve the file an output document is written to.

    Rules:
        - ``None`` → ``{cwd}/{title}{suffix}``
        - Ends in *suffix* → treated as literal file path
        - Otherwise → treated as directory: ``{path}/{title}{suffix}``

    Derived names are sanitized and never overwrite an existing file.
    """
    if output is not None:
        output = Path(output)
        if output.suffix.lower() == suffix:
            return output.resolve()
        folder = output
    else:
        folder = Path.cwd()

    stem = _sanitize_file_name(title)
    if stem.lower().endswith(suffix):
        stem = stem[: -len(suffix)].strip() or "Document"
    return _unique_path(folder, stem, suffix).resolve()


def _merged_title(titles: Sequence[str]) -> str:
    """Title for a merged document: source titles joined by ``_`` plus ``_merged``."""
    return "_".join([*titles, "merged"])
