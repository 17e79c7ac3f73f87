"""
Tests for the mathematical properties of spot-it card combinations and for
building a bound, shuffled deck from them.
"""

import random
from collections import Counter

import pytest

from generate_all_cards import (
    bind_symbols,
    build_deck,
    create_grid_cards,
    create_pencil_cards,
    create_spot_it_combinations,
    parse_positive_int,
    required_symbol_count,
    shuffle_deck,
    validate_deck_request,
    verify_spot_it_properties,
)
from spot_it_errors import ConfigurationError, InsufficientResourcesError

PRIME_ORDERS = [1, 2, 3, 5, 7]


def make_pool(count):
    return [f"symbol_{i:03d}.png" for i in range(count)]


def test_minimal_deck():
    assert create_spot_it_combinations(2) == [[1, 2], [1, 3], [2, 3]]


def test_pencil_and_grid_blocks():
    n = 3
    pencil = create_pencil_cards(n)
    grid = create_grid_cards(n)

    assert len(pencil) == n + 1
    assert all(card[0] == 1 for card in pencil)
    assert len(grid) == n * n
    assert [card[0] for card in grid] == [2, 2, 2, 3, 3, 3, 4, 4, 4]
    assert create_spot_it_combinations(n + 1) == pencil + grid


@pytest.mark.parametrize("n", PRIME_ORDERS)
def test_card_and_symbol_counts(n):
    symbols_per_card = n + 1
    total = n * n + n + 1
    cards = create_spot_it_combinations(symbols_per_card)

    assert len(cards) == total
    assert all(len(card) == symbols_per_card for card in cards)
    assert {symbol for card in cards for symbol in card} == set(range(1, total + 1))


@pytest.mark.parametrize("n", PRIME_ORDERS)
def test_any_two_cards_share_exactly_one_symbol(n):
    cards = create_spot_it_combinations(n + 1)

    intersection_counts = Counter()
    for i in range(len(cards)):
        for j in range(i + 1, len(cards)):
            intersection_counts[len(set(cards[i]) & set(cards[j]))] += 1

    assert set(intersection_counts) == {1}


@pytest.mark.parametrize("n", PRIME_ORDERS + [4, 6])
def test_every_symbol_appears_on_n_plus_one_cards(n):
    cards = create_spot_it_combinations(n + 1)
    appearances = Counter(symbol for card in cards for symbol in card)

    assert set(appearances.values()) == {n + 1}


@pytest.mark.parametrize("n", PRIME_ORDERS)
def test_verify_accepts_prime_orders(n):
    verify_spot_it_properties(create_spot_it_combinations(n + 1), n + 1)


def test_verify_rejects_order_without_plane_pattern():
    with pytest.raises(ValueError, match="share 2 symbols"):
        verify_spot_it_properties(create_spot_it_combinations(5), 5)


def test_verify_rejects_duplicate_symbols():
    cards = [[1, 1], [1, 3], [2, 3]]
    with pytest.raises(ValueError, match="duplicate"):
        verify_spot_it_properties(cards, 2)


def test_required_symbol_count():
    assert required_symbol_count(2) == 3
    assert required_symbol_count(3) == 7
    assert required_symbol_count(8) == 57


@pytest.mark.parametrize("symbols_per_card", [0, 1, -3])
def test_degenerate_symbol_counts_rejected(symbols_per_card):
    with pytest.raises(ConfigurationError):
        validate_deck_request(10, symbols_per_card)
    with pytest.raises(ConfigurationError):
        build_deck(10, symbols_per_card, make_pool(100))


def test_non_positive_total_rejected():
    with pytest.raises(ConfigurationError):
        validate_deck_request(0, 3)


@pytest.mark.parametrize("value", ["abc", "", "2.5", "0", "-1"])
def test_parse_positive_int_rejects(value):
    with pytest.raises(ConfigurationError):
        parse_positive_int(value, "number of cards")


def test_parse_positive_int_accepts_padded_input():
    assert parse_positive_int(" 12\n", "number of cards") == 12


def test_bind_maps_slots_to_pool_positions():
    pool = ["a", "b", "c", "d"]
    assert bind_symbols([[1, 2], [1, 3], [2, 3]], pool) == [["a", "b"], ["a", "c"], ["b", "c"]]


def test_bind_rejects_small_pool():
    cards = create_spot_it_combinations(3)
    with pytest.raises(InsufficientResourcesError) as excinfo:
        bind_symbols(cards, make_pool(6))
    assert excinfo.value.required == 7
    assert excinfo.value.available == 6


def test_build_deck_checks_pool_before_construction(monkeypatch):
    import generate_all_cards

    def fail(*args):
        raise AssertionError("construction should not run")

    monkeypatch.setattr(generate_all_cards, "create_spot_it_combinations", fail)
    with pytest.raises(InsufficientResourcesError, match="required 13, found 12"):
        build_deck(13, 4, make_pool(12))


def test_shuffle_preserves_cards_and_symbols():
    deck = bind_symbols(create_spot_it_combinations(4), make_pool(13))
    original = [sorted(card) for card in deck]

    shuffle_deck(deck, random.Random(3))

    assert sorted(sorted(card) for card in deck) == sorted(original)
    assert [sorted(card) for card in deck] != original


def test_end_to_end_seven_cards():
    pool = make_pool(9)
    deck = build_deck(7, 3, pool, rng=random.Random(1))

    assert len(deck) == 7
    for card in deck:
        assert len(card) == 3
        assert len(set(card)) == 3
        assert set(card) <= set(pool)
    for i in range(len(deck)):
        for j in range(i + 1, len(deck)):
            assert len(set(deck[i]) & set(deck[j])) == 1


def test_request_is_clamped_to_deck_size():
    deck = build_deck(100, 3, make_pool(7), rng=random.Random(5))
    assert len(deck) == 7


def test_request_smaller_than_deck_truncates():
    deck = build_deck(10, 8, make_pool(57), rng=random.Random(5))
    assert len(deck) == 10


def test_same_seed_gives_same_deck():
    pool = make_pool(31)
    assert build_deck(31, 6, pool, rng=random.Random(42)) == build_deck(31, 6, pool, rng=random.Random(42))


def test_verify_flag_reports_invalid_order():
    with pytest.raises(ConfigurationError, match="5 symbols per card"):
        build_deck(21, 5, make_pool(21), verify=True)
