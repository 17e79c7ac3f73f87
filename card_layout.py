"""Placement of cards on A4 pages and of symbols inside each card.

All coordinates are in millimetres with the origin at the top-left corner
of the page, y growing downwards.
"""

import math
import random
from dataclasses import dataclass, field, replace
from typing import List, Sequence

# =========================
# Constants Section
# =========================

# A4 page
PAGE_WIDTH_MM = 210.0
PAGE_HEIGHT_MM = 297.0

# Nominal card; cards are tiled on squares of the smaller side
CARD_WIDTH_MM = 55.0
CARD_HEIGHT_MM = 85.0
MARGIN_MM = 5.0

# Distance between the card edge and the area symbols may use
CARD_INSET_MM = 5.0

# Round cards place symbols on a ring at this fraction of the usable radius
RING_DISTANCE_FRAC = 0.6

# Per-symbol visual variety
MIN_SCALE_FACTOR = 0.7
MAX_SCALE_FACTOR = 1.0
ROTATIONS_DEG = (0, 90, 180, 270)

SHAPE_SQUARE = "square"
SHAPE_ROUND = "round"
SHAPES = (SHAPE_SQUARE, SHAPE_ROUND)

# =========================
# End of Constants Section
# =========================


@dataclass(frozen=True)
class PageGrid:
    """Fixed page and card geometry and the resulting card grid."""
    page_width: float = PAGE_WIDTH_MM
    page_height: float = PAGE_HEIGHT_MM
    card_size: float = min(CARD_WIDTH_MM, CARD_HEIGHT_MM)
    margin: float = MARGIN_MM

    @property
    def cards_per_row(self) -> int:
        return int((self.page_width - 2 * self.margin) // (self.card_size + self.margin))

    @property
    def cards_per_col(self) -> int:
        return int((self.page_height - 2 * self.margin) // (self.card_size + self.margin))

    @property
    def cards_per_page(self) -> int:
        return self.cards_per_row * self.cards_per_col


@dataclass(frozen=True)
class Placement:
    """Slot of one symbol on a card, in page millimetres."""
    symbol: str
    x: float
    y: float
    size: float
    rotation: int = 0
    scale: float = 1.0

    @property
    def drawn_size(self) -> float:
        return self.size * self.scale

    @property
    def drawn_x(self) -> float:
        # Scaled symbols stay centred in their slot
        return self.x + (self.size - self.drawn_size) / 2

    @property
    def drawn_y(self) -> float:
        return self.y + (self.size - self.drawn_size) / 2


@dataclass
class CardLayout:
    card_index: int
    page_index: int
    origin_x: float
    origin_y: float
    size: float
    shape: str
    placements: List[Placement] = field(default_factory=list)

    @property
    def center(self):
        half = self.size / 2
        return self.origin_x + half, self.origin_y + half


def card_origin(card_index: int, grid: PageGrid):
    """
    Page index and top-left corner of a card, tiling pages row by row.

    Returns:
        Tuple of (page_index, x, y)
    """
    page_index = card_index // grid.cards_per_page
    col = card_index % grid.cards_per_row
    row = (card_index // grid.cards_per_row) % grid.cards_per_col
    x = grid.margin + col * (grid.card_size + grid.margin)
    y = grid.margin + row * (grid.card_size + grid.margin)
    return page_index, x, y


def square_symbol_size(card_size: float, count: int) -> float:
    available = card_size - 2 * CARD_INSET_MM
    return min(available / 2, available / count)


def place_square_symbols(
    x: float,
    y: float,
    card_size: float,
    symbols: Sequence[str],
    rng: random.Random,
) -> List[Placement]:
    """
    One symbol per horizontal band of the usable area, jittered inside its band.

    The slot never leaves its band: the vertical jitter is bounded by the band
    height minus the slot size, and the slot size is at most one band high.
    """
    count = len(symbols)
    available_width = card_size - 2 * CARD_INSET_MM
    available_height = card_size - 2 * CARD_INSET_MM
    band_height = available_height / count
    size = square_symbol_size(card_size, count)

    placements = []
    for i, symbol in enumerate(symbols):
        x_jitter = rng.uniform(0.0, max(0.0, available_width - size))
        y_jitter = rng.uniform(0.0, max(0.0, band_height - size))
        placements.append(
            Placement(
                symbol=symbol,
                x=x + CARD_INSET_MM + x_jitter,
                y=y + CARD_INSET_MM + i * band_height + y_jitter,
                size=size,
            )
        )
    return placements


def round_symbol_size(card_size: float, count: int) -> float:
    radius = card_size / 2
    available_radius = radius - CARD_INSET_MM
    size = available_radius * 2 / math.sqrt(count)
    # With one or two symbols the ring slot would cross the card edge
    max_size = 2 * (radius - available_radius * RING_DISTANCE_FRAC)
    return min(size, max_size)


def place_round_symbols(
    x: float,
    y: float,
    card_size: float,
    symbols: Sequence[str],
) -> List[Placement]:
    """Symbols evenly spaced on a ring around the card centre."""
    count = len(symbols)
    radius = card_size / 2
    available_radius = radius - CARD_INSET_MM
    distance = available_radius * RING_DISTANCE_FRAC
    size = round_symbol_size(card_size, count)
    cx = x + radius
    cy = y + radius

    placements = []
    for i, symbol in enumerate(symbols):
        angle = 2 * math.pi * i / count
        placements.append(
            Placement(
                symbol=symbol,
                x=cx + distance * math.cos(angle) - size / 2,
                y=cy + distance * math.sin(angle) - size / 2,
                size=size,
            )
        )
    return placements


def place_card(
    card_index: int,
    symbols: Sequence[str],
    shape: str,
    grid: PageGrid,
    rng: random.Random,
) -> CardLayout:
    """
    Compute the page, position and symbol slots of one card.

    Args:
        card_index: Position of the card in the deck
        symbols: Symbols of the card, in drawing order
        shape: SHAPE_SQUARE or SHAPE_ROUND
        grid: Page geometry
        rng: Random source for the square-card jitter

    Returns:
        CardLayout with one unscaled, unrotated Placement per symbol
    """
    if shape not in SHAPES:
        raise ValueError(f"Unknown card shape: {shape!r}")

    page_index, x, y = card_origin(card_index, grid)
    if shape == SHAPE_ROUND:
        placements = place_round_symbols(x, y, grid.card_size, symbols)
    else:
        placements = place_square_symbols(x, y, grid.card_size, symbols, rng)

    return CardLayout(
        card_index=card_index,
        page_index=page_index,
        origin_x=x,
        origin_y=y,
        size=grid.card_size,
        shape=shape,
        placements=placements,
    )


def randomize_transform(placement: Placement, rng: random.Random) -> Placement:
    """Pick a random scale in [0.7, 1.0] and a random right-angle rotation."""
    return replace(
        placement,
        scale=rng.uniform(MIN_SCALE_FACTOR, MAX_SCALE_FACTOR),
        rotation=rng.choice(ROTATIONS_DEG),
    )
