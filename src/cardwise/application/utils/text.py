import re
import unicodedata

# ---------- Answer normalization ----------

# Punctuation with no meaning of its own ("¿", "!", ",", "_", quotes ...).
_NOISE_RE = re.compile(r"[^\w+\-#/.]|_", re.UNICODE)
# Symbols that change the answer when attached to a word or number: -5, C++, C#, 1/2, 3.14.
_SYMBOLS_RE = re.compile(r"[+\-#/.]+")


def _attached_symbols(match: re.Match) -> str:
    text, start, end = match.string, match.start(), match.end()
    before = start > 0 and text[start - 1].isalnum()
    after = end < len(text) and text[end].isalnum()
    if after:
        return match.group()
    if before:
        # A trailing full stop ends the sentence, it is not part of the answer.
        return match.group().replace(".", "") or " "
    return " "


def normalize_answer(text: str) -> str:
    """
    Canonical form used for exact comparison.

    NFKC-folds, case-folds, drops punctuation and collapses whitespace.
    ``+ - # / .`` survive when attached to a letter or digit, so "-5" and "5"
    or "C++" and "C" stay distinct; a sentence-final period is dropped.

        >>> normalize_answer("  ¿Hola,   Mundo? ")
        'hola mundo'
        >>> normalize_answer("C++ and 1/2.")
        'c++ and 1/2'
    """
    folded = unicodedata.normalize("NFKC", text).casefold()
    folded = _NOISE_RE.sub(" ", folded)
    return " ".join(_SYMBOLS_RE.sub(_attached_symbols, folded).split())


def answers_match(expected: str, submitted: str) -> bool:
    norm_expected = normalize_answer(expected)
    if not norm_expected:
        # Punctuation-only answers: compare what is left after trimming.
        return expected.strip().casefold() == submitted.strip().casefold()
    return norm_expected == normalize_answer(submitted)


# ---------- Word overlap ----------


def word_overlap(a: str, b: str) -> float:
    """Jaccard similarity of the normalized word sets of two strings."""
    words_a = set(normalize_answer(a).split())
    words_b = set(normalize_answer(b).split())
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)
