from unittest.mock import patch

import pytest

from cardwise.domain.errors import InvalidDeck
from cardwise.infrastructure.adapters.deck_loader import load_deck, parse_deck, parse_tsv


class TestTsv:
    def test_pairs_and_trimming(self):
        deck = parse_tsv(b"Hello\thola\n  Apple  \t  manzana  \n", name="es")

        assert deck.name == "es"
        assert deck.pairs == [("Hello", "hola"), ("Apple", "manzana")]
        assert deck.skipped == 0

    def test_incomplete_lines_skipped_blank_lines_ignored(self):
        deck = parse_tsv("Cat\tGato\nno_tab_here\n\n   \nDog\t\n\tPerro\nBird\tPájaro\n")

        assert deck.pairs == [("Cat", "Gato"), ("Bird", "Pájaro")]
        assert deck.skipped == 3

    def test_back_keeps_later_tabs(self):
        deck = parse_tsv("Q\tpart one\tpart two\n")
        assert deck.pairs == [("Q", "part one\tpart two")]

    def test_empty_file(self):
        deck = parse_tsv(b"")
        assert deck.cards == []
        assert deck.skipped == 0

    def test_card_limit_counts_overflow_as_skipped(self):
        with patch("cardwise.infrastructure.adapters.deck_loader.MAX_DECK_CARDS", 2):
            deck = parse_tsv("a\t1\nb\t2\nc\t3\nd\t4\n")

        assert deck.pairs == [("a", "1"), ("b", "2")]
        assert deck.skipped == 2

    def test_size_limit(self):
        with patch("cardwise.infrastructure.adapters.deck_loader.MAX_DECK_BYTES", 10):
            with pytest.raises(InvalidDeck, match="size limit"):
                parse_tsv(b"Hello\thola\n")

    def test_invalid_utf8(self):
        with pytest.raises(InvalidDeck, match="UTF-8"):
            parse_tsv(b"\xff\xfe\x00")


class TestYaml:
    def test_load_deck(self, tmp_path):
        path = tmp_path / "spanish.yaml"
        path.write_text(
            """
deck: Spanish basics
cards:
  - question: Hello
    answer: hola
  - question: Goodbye
    answer: adiós
""",
            encoding="utf-8",
        )

        deck = load_deck(path)

        assert deck.name == "Spanish basics"
        assert deck.pairs == [("Hello", "hola"), ("Goodbye", "adiós")]

    def test_deck_name_defaults_to_file_stem(self, tmp_path):
        path = tmp_path / "verbs.yaml"
        path.write_text("cards:\n  - {question: to be, answer: ser}\n", encoding="utf-8")

        assert load_deck(path).name == "verbs"

    def test_numbers_become_strings(self):
        deck = parse_deck("cards:\n  - {question: 2+2, answer: 4}\n")
        assert deck.cards[0].answer == "4"

    def test_empty_file(self):
        assert parse_deck("").cards == []

    def test_incomplete_entries_skipped(self):
        deck = parse_deck(
            "cards:\n"
            "  - {question: Hello, answer: hola}\n"
            "  - question: missing answer\n"
            "  - just a string\n"
        )

        assert deck.pairs == [("Hello", "hola")]
        assert deck.skipped == 2

    @pytest.mark.parametrize(
        "text",
        [
            "cards: [unclosed",
            "- just a list",
            "cards: not-a-list",
        ],
    )
    def test_invalid_files_rejected(self, text):
        with pytest.raises(InvalidDeck):
            parse_deck(text)

    def test_invalid_deck_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_deck("cards: [unclosed")


def test_load_deck_picks_tsv_by_suffix(tmp_path):
    path = tmp_path / "french.tsv"
    path.write_bytes("Hello\tbonjour\nbroken line\n".encode("utf-8"))

    deck = load_deck(path)

    assert deck.name == "french"
    assert deck.pairs == [("Hello", "bonjour")]
    assert deck.skipped == 1


def test_load_deck_rejects_oversized_file(tmp_path):
    path = tmp_path / "big.tsv"
    path.write_bytes(b"a\tb\n" * 10)

    with patch("cardwise.infrastructure.adapters.deck_loader.MAX_DECK_BYTES", 8):
        with pytest.raises(InvalidDeck, match="size limit"):
            load_deck(path)
