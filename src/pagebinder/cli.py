"""Command-line interface for pagebinder."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from . import _merged_title, _resolve_output_path
from .compositor import DocumentMetadata, compose_pdf
from .errors import PageBinderError
from .geometry import PAGE_SIZES, Margins, Orientation, PageGeometry, PageSize
from .images import RasterImage
from .merger import merge_pdfs_with_report
from .thumbnail import DEFAULT_THUMBNAIL_SIZE, render_thumbnail


def _format_size(num_bytes: int) -> str:
    """Format a byte count as a human-readable string."""
    value = float(num_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if abs(value) < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} TB"


def _parse_dimensions(value: str) -> tuple[float, float]:
    try:
        width, height = (float(part) for part in value.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"expected WIDTHxHEIGHT, got {value!r}"
        ) from None
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(f"dimensions must be positive, got {value!r}")
    return width, height


def _parse_page_size(value: str) -> PageSize:
    preset = PAGE_SIZES.get(value.lower())
    if preset is not None:
        return preset
    width, height = _parse_dimensions(value)
    return PageSize(width=width, height=height)


def _parse_thumbnail_size(value: str) -> tuple[int, int]:
    width, height = _parse_dimensions(value)
    return int(width), int(height)


def _parse_margins(value: str) -> Margins:
    try:
        parts = [float(part) for part in value.split(",")]
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid margins: {value!r}") from None
    if len(parts) == 1:
        return Margins.uniform(parts[0])
    if len(parts) == 4:
        top, left, bottom, right = parts
        return Margins(top=top, left=left, bottom=bottom, right=right)
    raise argparse.ArgumentTypeError(
        f"expected one value or TOP,LEFT,BOTTOM,RIGHT, got {value!r}"
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagebinder",
        description=(
            "Lay out images as PDF pages, merge PDF documents, and render"
            " first-page thumbnails."
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Show debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    compose = subparsers.add_parser(
        "compose",
        help="Create a PDF with one page per image",
    )
    compose.add_argument("images", nargs="+", type=Path, help="Image files, in page order")
    compose.add_argument(
        "--output",
        type=Path,
        default=None,
        help=(
            "Output path: a .pdf file path, a directory, or omit for"
            " {title}.pdf in CWD"
        ),
    )
    compose.add_argument("--title", default=None, help="Document title")
    compose.add_argument(
        "--landscape",
        action="store_true",
        default=False,
        help="Swap page width and height",
    )
    compose.add_argument(
        "--page-size",
        type=_parse_page_size,
        default=PAGE_SIZES["a4"],
        help="a4, letter, or WIDTHxHEIGHT in points (default: a4)",
    )
    compose.add_argument(
        "--margins",
        type=_parse_margins,
        default=Margins(),
        help="Margin in points, or TOP,LEFT,BOTTOM,RIGHT (default: 36)",
    )
    compose.set_defaults(handler=_run_compose)

    merge = subparsers.add_parser(
        "merge",
        help="Concatenate the pages of several PDFs",
    )
    merge.add_argument("documents", nargs="+", type=Path, help="PDF files, in order")
    merge.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output path: a .pdf file path, a directory, or omit for CWD",
    )
    merge.add_argument(
        "--title",
        default=None,
        help="Output name (default: input names joined with '_merged')",
    )
    merge.set_defaults(handler=_run_merge)

    thumbnail = subparsers.add_parser(
        "thumbnail",
        help="Render the first page of a PDF as a PNG",
    )
    thumbnail.add_argument("document", type=Path, help="PDF file")
    thumbnail.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output path: a .png file path, a directory, or omit for CWD",
    )
    thumbnail.add_argument(
        "--max-size",
        type=_parse_thumbnail_size,
        default=DEFAULT_THUMBNAIL_SIZE,
        help="Maximum WIDTHxHEIGHT in pixels (default: 240x240)",
    )
    thumbnail.set_defaults(handler=_run_thumbnail)

    return parser


def _print_summary(
    console: Console,
    *,
    lines: list[str],
    elapsed: float,
    warnings: bool = False,
) -> None:
    console.print(Panel(
        "\n".join(lines),
        title=f"[bold green]Done in {elapsed:.1f}s[/bold green]",
        border_style="yellow" if warnings else "green",
    ))


def _run_compose(args: argparse.Namespace, console: Console) -> int:
    start_time = time.monotonic()
    images = [
        RasterImage(data=path.read_bytes(), source_file_name=path.name)
        for path in args.images
    ]
    geometry = PageGeometry(page_size=args.page_size, margins=args.margins)
    orientation = Orientation.LANDSCAPE if args.landscape else Orientation.PORTRAIT

    with console.status("[bold blue]Composing PDF..."):
        pdf_bytes = compose_pdf(
            images,
            geometry=geometry,
            orientation=orientation,
            metadata=DocumentMetadata(title=args.title),
        )

    pdf_path = _resolve_output_path(output=args.output, title=args.title or "Document")
    pdf_path.parent.mkdir(parents=True, exist_ok=True)
    pdf_path.write_bytes(pdf_bytes)

    _print_summary(
        console,
        lines=[
            f"[bold]Pages:[/bold] {len(images)}",
            f"[bold]PDF size:[/bold] {_format_size(len(pdf_bytes))}",
            f"[bold]Output:[/bold] {pdf_path}",
        ],
        elapsed=time.monotonic() - start_time,
    )
    return 0


def _run_merge(args: argparse.Namespace, console: Console) -> int:
    start_time = time.monotonic()
    documents = [path.read_bytes() for path in args.documents]

    with console.status("[bold blue]Merging PDFs..."):
        result = merge_pdfs_with_report(documents)

    title = args.title or _merged_title([path.stem for path in args.documents])
    pdf_path = _resolve_output_path(output=args.output, title=title)
    pdf_path.parent.mkdir(parents=True, exist_ok=True)
    pdf_path.write_bytes(result.data)

    lines = [
        f"[bold]Documents merged:[/bold] "
        f"{len(documents) - len(result.skipped)}/{len(documents)}",
    ]
    if result.skipped:
        lines.append(f"[bold yellow]Skipped:[/bold yellow] {len(result.skipped)}")
        for index in result.skipped:
            lines.append(f"  [yellow]- {args.documents[index].name}[/yellow]")
    lines.append(f"[bold]Pages:[/bold] {result.page_count}")
    lines.append(f"[bold]PDF size:[/bold] {_format_size(len(result.data))}")
    lines.append(f"[bold]Output:[/bold] {pdf_path}")

    _print_summary(
        console,
        lines=lines,
        elapsed=time.monotonic() - start_time,
        warnings=bool(result.skipped),
    )
    return 0


def _run_thumbnail(args: argparse.Namespace, console: Console) -> int:
    png_bytes = render_thumbnail(args.document.read_bytes(), max_size=args.max_size)
    if png_bytes is None:
        console.print(f"[yellow]No preview available for {args.document.name}[/yellow]")
        return 1

    png_path = _resolve_output_path(
        output=args.output,
        title=f"{args.document.stem}_thumbnail",
        suffix=".png",
    )
    png_path.parent.mkdir(parents=True, exist_ok=True)
    png_path.write_bytes(png_bytes)
    console.print(f"Saved preview to [bold]{png_path}[/bold]")
    return 0


def _configure_logging(*, verbose: bool, console: Console) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``pagebinder`` CLI command."""
    console = Console()
    error_console = Console(stderr=True)
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(verbose=args.verbose, console=error_console)

    try:
        exit_code = args.handler(args, console)
    except (PageBinderError, OSError) as exc:
        error_console.print(f"[bold red]Error:[/bold red] {exc}")
        sys.exit(1)
    except KeyboardInterrupt:
        error_console.print("\n[dim]Interrupted.[/dim]")
        sys.exit(130)

    if exit_code:
        sys.exit(exit_code)
