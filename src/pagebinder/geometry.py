"""Page geometry: sizes, margins, and scale-to-fit placement.

All lengths are PDF points (1/72 inch). Rectangles use a top-left origin
with y growing downward; :func:`to_pdf_origin` converts to PDF user space.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class Orientation(str, enum.Enum):
    """Page orientation applied on top of a :class:`PageSize`."""

    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


@dataclass(frozen=True)
class PageSize:
    """Full page dimensions in points."""

    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Page size must be positive, got {self.width} x {self.height}"
            )

    def swapped(self) -> PageSize:
        return PageSize(width=self.height, height=self.width)


A4 = PageSize(width=595.2, height=841.8)
LETTER = PageSize(width=612.0, height=792.0)

PAGE_SIZES: dict[str, PageSize] = {
    "a4": A4,
    "letter": LETTER,
}


@dataclass(frozen=True)
class Margins:
    """Page margins in points."""

    top: float = 36.0
    left: float = 36.0
    bottom: float = 36.0
    right: float = 36.0

    @classmethod
    def uniform(cls, value: float) -> Margins:
        return cls(top=value, left=value, bottom=value, right=value)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle with a top-left origin."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def contains(self, other: Rect, *, tolerance: float = 1e-6) -> bool:
        """Return True if *other* lies entirely inside this rectangle."""
        return (
            other.x >= self.x - tolerance
            and other.y >= self.y - tolerance
            and other.x + other.width <= self.x + self.width + tolerance
            and other.y + other.height <= self.y + self.height + tolerance
        )


@dataclass(frozen=True)
class PageGeometry:
    """A page size plus the margins that bound its content area."""

    page_size: PageSize = A4
    margins: Margins = field(default_factory=Margins)

    def resolve(self, orientation: Orientation) -> PageGeometry:
        """Apply *orientation*.

        Landscape swaps the page width and height. Margins keep their
        top/left/bottom/right meaning relative to the rotated page.
        """
        if Orientation(orientation) is Orientation.LANDSCAPE:
            return PageGeometry(page_size=self.page_size.swapped(), margins=self.margins)
        return self

    @property
    def content_rect(self) -> Rect:
        """Page minus margins, clamped so width and height are never negative."""
        m = self.margins
        return Rect(
            x=m.left,
            y=m.top,
            width=max(0.0, self.page_size.width - (m.left + m.right)),
            height=max(0.0, self.page_size.height - (m.top + m.bottom)),
        )


DEFAULT_GEOMETRY = PageGeometry()


def fit_scale(
    width: float,
    height: float,
    box_width: float,
    box_height: float,
) -> float:
    """Uniform scale factor that fits ``width x height`` inside the box."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Object size must be positive, got {width} x {height}")
    return max(0.0, min(box_width / width, box_height / height))


def fit_rect(width: float, height: float, box: Rect) -> Rect:
    """Scale ``width x height`` to fit *box* and centre it there."""
    scale = fit_scale(width, height, box.width, box.height)
    scaled_width = width * scale
    scaled_height = height * scale
    return Rect(
        x=box.x + (box.width - scaled_width) / 2,
        y=box.y + (box.height - scaled_height) / 2,
        width=scaled_width,
        height=scaled_height,
    )


def to_pdf_origin(rect: Rect, page_height: float) -> Rect:
    """Convert a top-left-origin rect to PDF user space (bottom-left origin)."""
    return Rect(
        x=rect.x,
        y=page_height - (rect.y + rect.height),
        width=rect.width,
        height=rect.height,
    )
