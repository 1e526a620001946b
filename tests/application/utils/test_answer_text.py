import math

import pytest

from cardwise.application.utils.text import answers_match, normalize_answer, word_overlap
from cardwise.application.utils.vectors import cosine_similarity


class TestNormalizeAnswer:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("hola", "hola"),
            ("  Hola  ", "hola"),
            ("¿Hola?", "hola"),
            ("Hello,   World!", "hello world"),
            ("STRASSE", "strasse"),
            ("Straße", "strasse"),
            ("snake_case", "snake case"),
            ("tab\tand\nnewline", "tab and newline"),
        ],
    )
    def test_normalization(self, raw, expected):
        assert normalize_answer(raw) == expected

    def test_fullwidth_folds(self):
        assert normalize_answer("ＡＢＣ") == "abc"

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("-5", "-5"),
            ("+1", "+1"),
            ("C++", "c++"),
            ("C#", "c#"),
            ("1/2", "1/2"),
            ("3.14", "3.14"),
            ("e.g.", "e.g"),
            ("The end.", "the end"),
            ("C++.", "c++"),
            ("before - after", "before after"),
            ("...", ""),
        ],
    )
    def test_attached_symbols_are_kept(self, raw, expected):
        assert normalize_answer(raw) == expected


class TestAnswersMatch:
    def test_literal_match(self):
        assert answers_match("hola", "hola")

    def test_case_and_punctuation_insensitive(self):
        assert answers_match("The Eiffel Tower", "the eiffel tower.")

    def test_different_words(self):
        assert not answers_match("hola", "adios")

    @pytest.mark.parametrize(
        "expected,submitted",
        [("-5", "5"), ("C++", "C"), ("C#", "c"), ("1/2", "1 2"), ("3.14", "314")],
    )
    def test_meaningful_symbols_distinguish_answers(self, expected, submitted):
        assert not answers_match(expected, submitted)

    def test_symbols_match_themselves(self):
        assert answers_match("C++", " c++. ")
        assert answers_match("-5", "-5!")

    def test_word_boundaries_matter(self):
        assert not answers_match("ice cream", "icecream")

    def test_punctuation_only_expected(self):
        assert answers_match("?", " ? ")
        assert not answers_match("?", "!")


def test_word_overlap():
    assert word_overlap("the cat sat", "the cat sat") == 1.0
    assert word_overlap("the cat", "the dog") == pytest.approx(1 / 3)
    assert word_overlap("", "") == 0.0


class TestCosineSimilarity:
    def test_self_similarity_is_one(self):
        v = [0.3, -1.2, 4.5, 0.01]
        assert math.isclose(cosine_similarity(v, v), 1.0, rel_tol=1e-9)

    def test_symmetric(self):
        a = [1.0, 2.0, 3.0]
        b = [-2.0, 0.5, 1.0]
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))

    def test_orthogonal(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_zero_vector(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0

    def test_empty_and_mismatched(self):
        assert cosine_similarity([], []) == 0.0
        assert cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0]) == 0.0
