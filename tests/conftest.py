"""Shared helpers for building test images and PDFs in memory."""

from __future__ import annotations

import struct
import zlib
from io import BytesIO

import pytest
from PIL import Image
from pypdf import PdfWriter


def _create_minimal_png(*, width: int = 100, height: int = 100) -> bytes:
    """Create a minimal valid RGB PNG."""

    def _chunk(chunk_type: bytes, data: bytes) -> bytes:
        c = chunk_type + data
        crc = struct.pack(">I", zlib.crc32(c) & 0xFFFFFFFF)
        return struct.pack(">I", len(data)) + c + crc

    signature = b"\x89PNG\r\n\x1a\n"
    ihdr_data = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    ihdr = _chunk(b"IHDR", ihdr_data)

    raw_data = b""
    for _ in range(height):
        raw_data += b"\x00" + b"\xff\x00\x00" * width
    idat = _chunk(b"IDAT", zlib.compress(raw_data))
    iend = _chunk(b"IEND", b"")

    return signature + ihdr + idat + iend


def _encode(img: Image.Image, fmt: str, **params) -> bytes:
    buffer = BytesIO()
    img.save(buffer, format=fmt, **params)
    return buffer.getvalue()


def _blank_pdf(widths: list[float], *, height: float = 400) -> bytes:
    """PDF with one blank page per entry in *widths*, used to tell pages apart."""
    writer = PdfWriter()
    for width in widths:
        writer.add_blank_page(width=width, height=height)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def _multiply(m: tuple[float, ...], n: tuple[float, ...]) -> tuple[float, ...]:
    a, b, c, d, e, f = m
    a2, b2, c2, d2, e2, f2 = n
    return (
        a * a2 + b * c2,
        a * b2 + b * d2,
        c * a2 + d * c2,
        c * b2 + d * d2,
        e * a2 + f * c2 + e2,
        e * b2 + f * d2 + f2,
    )


def _drawn_image_boxes(page) -> list[tuple[float, float, float, float]]:
    """Return ``(x, y, width, height)`` in PDF user space for each ``Do``."""
    contents = page.get_contents()
    if contents is None:
        return []

    ctm: tuple[float, ...] = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)
    stack = []
    boxes = []
    for operands, operator in contents.operations:
        if operator == b"q":
            stack.append(ctm)
        elif operator == b"Q":
            ctm = stack.pop()
        elif operator == b"cm":
            ctm = _multiply(tuple(float(v) for v in operands), ctm)
        elif operator == b"Do":
            a, _, _, d, e, f = ctm
            boxes.append((e, f, a, d))
    return boxes


@pytest.fixture
def make_png():
    return _create_minimal_png


@pytest.fixture
def make_image():
    """Encode a solid-colour Pillow image in the given format."""

    def _make(
        *,
        width: int = 100,
        height: int = 100,
        fmt: str = "JPEG",
        mode: str = "RGB",
        color="red",
        **params,
    ) -> bytes:
        return _encode(Image.new(mode, (width, height), color), fmt, **params)

    return _make


@pytest.fixture
def blank_pdf():
    return _blank_pdf


@pytest.fixture
def image_boxes():
    return _drawn_image_boxes
