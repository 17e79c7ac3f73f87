#!/usr/bin/env python3
"""
Create a printable PDF deck of Spot It cards.

Builds a deck where any two cards share exactly one symbol from a folder of
symbol images, lays the cards out on A4 pages (square or round cards) and
writes a single PDF, ready for printing and cutting.
"""

import argparse
import io
import random
import sys
from typing import List, Optional, Sequence

from PyPDF2 import PdfReader, PdfWriter
from PyPDF2.errors import PdfReadError
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from card_layout import SHAPE_ROUND, SHAPE_SQUARE, PageGrid, place_card, randomize_transform
from generate_all_cards import build_deck, parse_positive_int, required_symbol_count, validate_deck_request
from spot_it_errors import ConfigurationError, RenderFailure, SpotItError
from symbol_images import DEFAULT_DPI, DEFAULT_IMAGE_DIR, discover_symbol_images, transform_symbol

# =========================
# Constants Section
# =========================

PDF_OUTPUT = "dobble_cards.pdf"

# Card outline
OUTLINE_GRAY = 0.0
OUTLINE_WIDTH_MM = 0.2

# =========================
# End of Constants Section
# =========================


class PdfPage:
    """
    A4 drawing surface in millimetres, origin at the top-left of the page.

    The document is kept in memory until finalize() writes it out, so a
    failed render never leaves a partial file behind.
    """

    def __init__(self):
        self._buffer = io.BytesIO()
        self._canvas = canvas.Canvas(self._buffer, pagesize=A4)
        self._canvas.setLineWidth(OUTLINE_WIDTH_MM * mm)
        self._canvas.setStrokeGray(OUTLINE_GRAY)
        self.page_height = A4[1] / mm
        self.page_count = 0
        self._page_open = False

    def new_page(self) -> None:
        if self._page_open:
            self._canvas.showPage()
            self._canvas.setLineWidth(OUTLINE_WIDTH_MM * mm)
            self._canvas.setStrokeGray(OUTLINE_GRAY)
        self._page_open = True
        self.page_count += 1

    def _y(self, y: float) -> float:
        # reportlab measures y upwards from the bottom edge
        return (self.page_height - y) * mm

    def draw_rectangle(self, x: float, y: float, width: float, height: float) -> None:
        self._canvas.rect(x * mm, self._y(y + height), width * mm, height * mm, stroke=1, fill=0)

    def draw_circle(self, cx: float, cy: float, r: float) -> None:
        self._canvas.circle(cx * mm, self._y(cy), r * mm, stroke=1, fill=0)

    def place_image(self, image: io.BytesIO, x: float, y: float, width: float, height: float) -> None:
        self._canvas.drawImage(
            ImageReader(image),
            x * mm,
            self._y(y + height),
            width * mm,
            height * mm,
            mask="auto",
            preserveAspectRatio=True,
            anchor="c",
        )

    def finalize(self, output_pdf: str, background_pdf: Optional[str] = None) -> None:
        """
        Write the document to output_pdf.

        Args:
            output_pdf: Output PDF filename
            background_pdf: Optional PDF whose first page is inserted after
                every card page for double-sided printing
        """
        if self._page_open:
            self._canvas.showPage()
            self._page_open = False
        self._canvas.save()
        self._buffer.seek(0)

        if background_pdf is None:
            with open(output_pdf, "wb") as output_file:
                output_file.write(self._buffer.getvalue())
        else:
            add_background_pages(self._buffer, background_pdf, output_pdf)


def add_background_pages(cards_pdf, background_pdf: str, output_pdf: str) -> None:
    """
    Insert the background page after each card page for double-sided printing.

    Args:
        cards_pdf: Path or binary file object of the PDF with card pages
        background_pdf: Path to the background PDF (its first page is used)
        output_pdf: Output PDF filename with backgrounds inserted
    """
    cards_reader = PdfReader(cards_pdf)
    background_reader = PdfReader(background_pdf)
    background_page = background_reader.pages[0]

    writer = PdfWriter()
    for page in cards_reader.pages:
        writer.add_page(page)
        writer.add_page(background_page)

    with open(output_pdf, "wb") as output_file:
        writer.write(output_file)


def render_card(page: PdfPage, layout, rng: random.Random, dpi: int) -> None:
    if layout.shape == SHAPE_ROUND:
        cx, cy = layout.center
        page.draw_circle(cx, cy, layout.size / 2)
    else:
        page.draw_rectangle(layout.origin_x, layout.origin_y, layout.size, layout.size)

    for slot in layout.placements:
        placement = randomize_transform(slot, rng)
        with transform_symbol(
            placement.symbol,
            placement.size,
            rotation_deg=placement.rotation,
            scale=placement.scale,
            dpi=dpi,
        ) as image:
            try:
                page.place_image(
                    image,
                    placement.drawn_x,
                    placement.drawn_y,
                    placement.drawn_size,
                    placement.drawn_size,
                )
            except OSError as e:
                raise RenderFailure(
                    f"Failed to place symbol image {placement.symbol}: {e}",
                    image_path=placement.symbol,
                ) from e


def render_deck(
    deck: Sequence[Sequence[str]],
    shape: str,
    page: PdfPage,
    grid: Optional[PageGrid] = None,
    rng: Optional[random.Random] = None,
    dpi: int = DEFAULT_DPI,
    verbose: bool = False,
) -> int:
    """
    Draw every card of the deck, starting a new page whenever the grid is full.

    Args:
        deck: Cards as lists of symbol image paths
        shape: SHAPE_SQUARE or SHAPE_ROUND
        page: Drawing surface
        grid: Page geometry
        rng: Random source for jitter, scale and rotation
        dpi: Raster resolution of the symbol images
        verbose: Print per-card details

    Returns:
        Number of pages drawn
    """
    if grid is None:
        grid = PageGrid()
    if rng is None:
        rng = random.Random()

    total_pages = (len(deck) + grid.cards_per_page - 1) // grid.cards_per_page
    current_page = -1

    for i, card in enumerate(deck):
        layout = place_card(i, card, shape, grid, rng)
        if layout.page_index != current_page:
            current_page = layout.page_index
            page.new_page()
            print(f"Processing page {current_page + 1}/{total_pages}...")

        if verbose:
            print(f"Generating card {i + 1}/{len(deck)} at ({layout.origin_x:.1f}, {layout.origin_y:.1f}) mm: {list(card)}")
        else:
            print(f"Generating card {i + 1}/{len(deck)}...")

        try:
            render_card(page, layout, rng, dpi)
        except RenderFailure as e:
            raise RenderFailure(
                f"Failed to render {shape} card {i}: {e}",
                image_path=e.image_path,
                card_index=i,
            ) from e

    return total_pages


def prompt_for_missing(args: argparse.Namespace) -> None:
    """Ask on the terminal for the values not given on the command line."""
    if args.cards is None:
        args.cards = input("Enter the total number of cards: ")
    if args.symbols is None:
        args.symbols = input("Enter the number of images per card: ")
    if args.round is None:
        answer = input("Do you want round cards? [y/N] ")
        args.round = answer.strip().lower() in ("y", "yes")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a printable PDF of Spot It cards")
    parser.add_argument("--cards", "-n", default=None, help="Total number of cards (clamped to the deck size)")
    parser.add_argument("--symbols", "-k", default=None, help="Number of symbols per card")
    shape = parser.add_mutually_exclusive_group()
    shape.add_argument("--round", dest="round", action="store_true", default=None, help="Round cards")
    shape.add_argument("--square", dest="round", action="store_false", default=None, help="Square cards")
    parser.add_argument("--images", "-i", default=DEFAULT_IMAGE_DIR, help="Directory containing symbol images")
    parser.add_argument("--output", "-o", default=PDF_OUTPUT, help="Output PDF filename")
    parser.add_argument("--dpi", type=int, default=DEFAULT_DPI, help="Resolution of the symbol images in the PDF")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--backs", default=None, help="PDF whose first page is added after every card page")
    parser.add_argument("--verify", action="store_true", help="Check the deck properties before rendering")
    parser.add_argument("--no-input", dest="interactive", action="store_false",
                        help="Never prompt; fail when --cards or --symbols is missing")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main function to create the printable PDF."""
    args = parse_args(argv)

    try:
        if args.interactive:
            prompt_for_missing(args)
        if args.cards is None or args.symbols is None:
            raise ConfigurationError("Both --cards and --symbols are required with --no-input")

        total_cards = parse_positive_int(args.cards, "total number of cards")
        symbols_per_card = parse_positive_int(args.symbols, "number of images per card")
        validate_deck_request(total_cards, symbols_per_card)
        shape = SHAPE_ROUND if args.round else SHAPE_SQUARE
        rng = random.Random(args.seed)

        pool = discover_symbol_images(args.images, required=required_symbol_count(symbols_per_card))
        print(f"Found {len(pool)} symbol images in {args.images}")

        deck = build_deck(total_cards, symbols_per_card, pool, rng=rng, verify=args.verify)
        print(f"Generated {len(deck)} cards with {symbols_per_card} symbols each "
              f"(deck of {required_symbol_count(symbols_per_card)} possible)")

        page = PdfPage()
        total_pages = render_deck(deck, shape, page, rng=rng, dpi=args.dpi, verbose=args.verbose)
        page.finalize(args.output, background_pdf=args.backs)

    except (SpotItError, PdfReadError, OSError, EOFError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"\nPDF created successfully: {args.output}")
    print(f"Total cards: {len(deck)}")
    print(f"Card shape: {shape}")
    print(f"Pages: {total_pages}")
    if args.backs:
        print("Note: Background pages were added for double-sided printing")
    return 0


if __name__ == "__main__":
    sys.exit(main())
