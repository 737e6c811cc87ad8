"""Tests for the ``pagebinder`` command line."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image
from pypdf import PdfReader

from pagebinder.cli import main


def _page_count(path: Path) -> int:
    return len(PdfReader(path).pages)


class TestCompose:
    def test_writes_pdf(self, tmp_path: Path, make_png):
        images = []
        for i in range(3):
            img = tmp_path / f"page_{i + 1:02d}.png"
            img.write_bytes(make_png())
            images.append(str(img))
        out = tmp_path / "out.pdf"

        main(["compose", *images, "--output", str(out), "--title", "Trip"])

        reader = PdfReader(out)
        assert len(reader.pages) == 3
        assert reader.metadata.title == "Trip"

    def test_title_names_output_in_directory(self, tmp_path: Path, make_png):
        img = tmp_path / "a.png"
        img.write_bytes(make_png())
        out_dir = tmp_path / "nested" / "dir"

        main(["compose", str(img), "--output", str(out_dir), "--title", "Trip"])

        assert (out_dir / "Trip.pdf").exists()

    def test_landscape_and_page_size(self, tmp_path: Path, make_png):
        img = tmp_path / "a.png"
        img.write_bytes(make_png())
        out = tmp_path / "out.pdf"

        main([
            "compose", str(img),
            "--output", str(out),
            "--page-size", "letter",
            "--margins", "10,20,30,40",
            "--landscape",
        ])

        page = PdfReader(out).pages[0]
        assert float(page.mediabox.width) == pytest.approx(792)
        assert float(page.mediabox.height) == pytest.approx(612)

    def test_invalid_image_exits_with_error(self, tmp_path: Path):
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"not an image")

        with pytest.raises(SystemExit) as excinfo:
            main(["compose", str(bad), "--output", str(tmp_path / "out.pdf")])

        assert excinfo.value.code == 1
        assert not (tmp_path / "out.pdf").exists()

    def test_missing_file_exits_with_error(self, tmp_path: Path):
        with pytest.raises(SystemExit) as excinfo:
            main(["compose", str(tmp_path / "missing.png")])

        assert excinfo.value.code == 1

    def test_bad_margins_rejected_by_parser(self, tmp_path: Path):
        with pytest.raises(SystemExit) as excinfo:
            main(["compose", "a.png", "--margins", "1,2"])

        assert excinfo.value.code == 2


class TestMerge:
    def test_merges_and_names_output(self, tmp_path: Path, blank_pdf, monkeypatch):
        (tmp_path / "Trip.pdf").write_bytes(blank_pdf([100, 200]))
        (tmp_path / "Receipts.pdf").write_bytes(blank_pdf([300]))
        monkeypatch.chdir(tmp_path)

        main(["merge", "Trip.pdf", "Receipts.pdf"])

        merged = tmp_path / "Trip_Receipts_merged.pdf"
        assert _page_count(merged) == 3

    def test_skips_unreadable_input(self, tmp_path: Path, blank_pdf):
        good = tmp_path / "good.pdf"
        good.write_bytes(blank_pdf([100]))
        junk = tmp_path / "junk.pdf"
        junk.write_bytes(b"junk")
        out = tmp_path / "out.pdf"

        main(["merge", str(junk), str(good), "--output", str(out)])

        assert _page_count(out) == 1

    def test_all_unreadable_exits_with_error(self, tmp_path: Path):
        junk = tmp_path / "junk.pdf"
        junk.write_bytes(b"junk")

        with pytest.raises(SystemExit) as excinfo:
            main(["merge", str(junk), str(junk), "--output", str(tmp_path / "out.pdf")])

        assert excinfo.value.code == 1


class TestThumbnail:
    def test_writes_png(self, tmp_path: Path, blank_pdf):
        pdf = tmp_path / "doc.pdf"
        pdf.write_bytes(blank_pdf([200], height=400))
        out = tmp_path / "thumb.png"

        main(["thumbnail", str(pdf), "--output", str(out), "--max-size", "100x100"])

        image = Image.open(BytesIO(out.read_bytes()))
        assert image.size == (50, 100)

    def test_no_preview_exits_with_one(self, tmp_path: Path):
        pdf = tmp_path / "doc.pdf"
        pdf.write_bytes(b"garbage")

        with pytest.raises(SystemExit) as excinfo:
            main(["thumbnail", str(pdf), "--output", str(tmp_path / "thumb.png")])

        assert excinfo.value.code == 1
        assert not (tmp_path / "thumb.png").exists()
