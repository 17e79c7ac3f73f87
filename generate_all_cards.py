import random
from typing import List, Optional, Sequence

from spot_it_errors import ConfigurationError, InsufficientResourcesError

# =========================
# Constants Section
# =========================

# Smallest deck that still works: order 1, two symbols per card
MIN_SYMBOLS_PER_CARD = 2

# =========================
# End of Constants Section
# =========================

def required_symbol_count(symbols_per_card: int) -> int:
    """Number of distinct symbols (and cards) of the plane of order symbols_per_card - 1."""
    n = symbols_per_card - 1
    return n * n + n + 1


def parse_positive_int(value: str, name: str) -> int:
    """
    Parse a user supplied value as a strictly positive integer.

    Raises:
        ConfigurationError: if the value is not an integer or is not positive
    """
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"Invalid {name}: {value!r} is not an integer") from None
    if number <= 0:
        raise ConfigurationError(f"Invalid {name}: must be positive, got {number}")
    return number


def validate_deck_request(total_cards: int, symbols_per_card: int) -> None:
    """Reject requests that cannot produce a deck, before any combinatorics run."""
    if total_cards <= 0:
        raise ConfigurationError(f"Total number of cards must be positive, got {total_cards}")
    if symbols_per_card < MIN_SYMBOLS_PER_CARD:
        raise ConfigurationError(
            f"Each card needs at least {MIN_SYMBOLS_PER_CARD} symbols, got {symbols_per_card}"
        )


def check_symbol_pool(symbols_per_card: int, pool: Sequence[str]) -> None:
    required = required_symbol_count(symbols_per_card)
    if len(pool) < required:
        raise InsufficientResourcesError(required=required, available=len(pool))


def create_pencil_cards(n: int) -> List[List[int]]:
    """
    Cards through symbol 1: the n + 1 lines of the pencil of the first point.

    Card i holds symbol 1 followed by the block of n symbols i*n + 2 .. i*n + n + 1.
    """
    cards = []
    for i in range(n + 1):
        card = [1]
        for j in range(n):
            card.append((j + 1) + i * n + 1)
        cards.append(card)
    return cards


def create_grid_cards(n: int) -> List[List[int]]:
    """
    The remaining n * n lines.

    Line (i, j) holds symbol i + 2 and, from each of the n blocks after the
    first, the symbol at offset (i*k + j) mod n.
    """
    cards = []
    for i in range(n):
        for j in range(n):
            card = [i + 2]
            for k in range(n):
                card.append((n + 1 + n * k + (i * k + j) % n) + 1)
            cards.append(card)
    return cards


def create_spot_it_combinations(symbols_per_card: int) -> List[List[int]]:
    """
    Create the symbol slots of every card of a deck with symbols_per_card
    symbols per card, such that any two cards share exactly one symbol.

    This follows the standard construction of a finite projective plane of
    order n = symbols_per_card - 1:
    - Each card represents a line, each symbol slot a point
    - Two lines intersect at exactly one point
    - Each line contains n + 1 points, each point lies on n + 1 lines

    The pattern is only a valid plane when n is prime; other orders still
    produce n^2 + n + 1 cards but some pairs share more than one symbol.
    Use verify_spot_it_properties to check.

    Args:
        symbols_per_card: Number of symbols on each card (at least 2)

    Returns:
        List of n^2 + n + 1 cards, each a list of n + 1 slots in 1 .. n^2 + n + 1
    """
    n = symbols_per_card - 1
    return create_pencil_cards(n) + create_grid_cards(n)


def verify_spot_it_properties(cards: List[List[int]], symbols_per_card: int) -> None:
    """
    Verify that the cards satisfy the spot-it game properties.

    Args:
        cards: List of cards, each a list of symbol slots
        symbols_per_card: Expected number of symbols on each card

    Raises:
        ValueError: describing the first violated property
    """
    total_symbols = required_symbol_count(symbols_per_card)

    if len(cards) != total_symbols:
        raise ValueError(f"Generated {len(cards)} cards, expected {total_symbols}")

    for i, card in enumerate(cards):
        if len(card) != symbols_per_card:
            raise ValueError(f"Card {i} has {len(card)} symbols, expected {symbols_per_card}")
        if len(set(card)) != symbols_per_card:
            raise ValueError(f"Card {i} has duplicate symbols")

    for i in range(len(cards)):
        for j in range(i + 1, len(cards)):
            intersection = set(cards[i]) & set(cards[j])
            if len(intersection) != 1:
                raise ValueError(f"Cards {i} and {j} share {len(intersection)} symbols, expected 1")

    symbol_card_count = {}
    for card in cards:
        for symbol in card:
            symbol_card_count[symbol] = symbol_card_count.get(symbol, 0) + 1

    if len(symbol_card_count) != total_symbols:
        raise ValueError(f"Deck uses {len(symbol_card_count)} symbols, expected {total_symbols}")
    for symbol, count in sorted(symbol_card_count.items()):
        if count != symbols_per_card:
            raise ValueError(f"Symbol {symbol} appears on {count} cards, expected {symbols_per_card}")


def bind_symbols(cards: List[List[int]], pool: Sequence[str]) -> List[List[str]]:
    """
    Replace every symbol slot by a concrete symbol: slot s becomes pool[s - 1].

    Args:
        cards: Cards as lists of 1-based symbol slots
        pool: Symbol identifiers, already shuffled by the caller

    Returns:
        Cards as lists of symbol identifiers
    """
    symbols_per_card = len(cards[0]) if cards else 0
    if cards:
        check_symbol_pool(symbols_per_card, pool)
    return [[pool[slot - 1] for slot in card] for card in cards]


def shuffle_deck(deck: List[List[str]], rng: random.Random) -> None:
    """Shuffle card order and, independently, the symbol order of every card, in place."""
    rng.shuffle(deck)
    for card in deck:
        rng.shuffle(card)


def build_deck(
    total_cards: int,
    symbols_per_card: int,
    pool: Sequence[str],
    rng: Optional[random.Random] = None,
    verify: bool = False,
) -> List[List[str]]:
    """
    Build a shuffled, bound deck of at most total_cards cards.

    Args:
        total_cards: Number of cards requested; clamped to the size of the plane
        symbols_per_card: Number of symbols per card
        pool: Available symbol identifiers (e.g. image paths)
        rng: Random source; a fresh unseeded one when omitted
        verify: Check the incidence structure before binding

    Returns:
        List of cards, each a list of symbol identifiers
    """
    if rng is None:
        rng = random.Random()

    validate_deck_request(total_cards, symbols_per_card)
    check_symbol_pool(symbols_per_card, pool)

    shuffled_pool = list(pool)
    rng.shuffle(shuffled_pool)

    cards = create_spot_it_combinations(symbols_per_card)
    if verify:
        try:
            verify_spot_it_properties(cards, symbols_per_card)
        except ValueError as e:
            raise ConfigurationError(
                f"{symbols_per_card} symbols per card does not give a valid deck: {e}"
            ) from e

    deck = bind_symbols(cards, shuffled_pool)
    shuffle_deck(deck, rng)

    return deck[:total_cards]
