"""Load decks of question/answer pairs from TSV or YAML files.

TSV is one card per line, ``front<TAB>back``::

    Hello	hola
    Goodbye	adiós

YAML names the deck and lists the cards::

    deck: Spanish basics
    cards:
      - question: Hello
        answer: hola

A whole file is rejected when it is over 10 MB, not UTF-8 or not parseable.
Individual entries missing a question or an answer, and entries beyond the
2,000-card limit, are skipped and counted.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from cardwise.domain.constants import MAX_DECK_BYTES, MAX_DECK_CARDS
from cardwise.domain.errors import InvalidDeck

logger = logging.getLogger(__name__)

TSV_SUFFIXES = {".tsv", ".txt"}


@dataclass
class DeckEntry:
    question: str
    answer: str


@dataclass
class DeckFile:
    name: str
    cards: list[DeckEntry] = field(default_factory=list)
    skipped: int = 0

    def add(self, question: str, answer: str) -> None:
        if len(self.cards) >= MAX_DECK_CARDS:
            self.skipped += 1
            return
        self.cards.append(DeckEntry(question=question, answer=answer))

    @property
    def pairs(self) -> list[tuple[str, str]]:
        return [(c.question, c.answer) for c in self.cards]


def _decode(data: bytes | str) -> str:
    size = len(data) if isinstance(data, bytes) else len(data.encode("utf-8"))
    if size > MAX_DECK_BYTES:
        raise InvalidDeck("Deck file exceeds the 10 MB size limit")
    if isinstance(data, str):
        return data
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidDeck("Deck file is not valid UTF-8") from e


def parse_tsv(data: bytes | str, name: str = "Default") -> DeckFile:
    """
    Parse ``front<TAB>back`` lines.

    Blank lines are ignored; lines missing either side are skipped.

    Raises:
        InvalidDeck: If the file is too large or not valid UTF-8.
    """
    deck = DeckFile(name=name)
    for line_no, raw in enumerate(_decode(data).splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue

        front, _, back = line.partition("\t")
        front, back = front.strip(), back.strip()
        if not front or not back:
            missing = "front" if not front else "back"
            logger.warning(f"Skipping TSV line {line_no} (missing {missing})")
            deck.skipped += 1
            continue

        deck.add(front, back)

    return deck


def parse_deck(data: bytes | str, default_name: str = "Default") -> DeckFile:
    """
    Parse deck YAML.

    Raises:
        InvalidDeck: If the file is too large, not UTF-8, malformed YAML or
            not a mapping with a ``cards`` list.
    """
    try:
        parsed = yaml.safe_load(_decode(data)) or {}
    except yaml.YAMLError as e:
        raise InvalidDeck(f"Invalid deck YAML: {e}") from e

    if not isinstance(parsed, dict):
        raise InvalidDeck("Deck file must be a mapping with a 'cards' list")

    raw_cards = parsed.get("cards", [])
    if not isinstance(raw_cards, list):
        raise InvalidDeck("'cards' must be a list")

    deck = DeckFile(name=str(parsed.get("deck") or default_name))
    for index, raw in enumerate(raw_cards, start=1):
        if not isinstance(raw, dict) or not raw.get("question") or not raw.get("answer"):
            logger.warning(f"Skipping card #{index} (needs both 'question' and 'answer')")
            deck.skipped += 1
            continue
        deck.add(str(raw["question"]), str(raw["answer"]))

    return deck


def load_deck(path: Path) -> DeckFile:
    """Read a deck file; ``.tsv``/``.txt`` are parsed as TSV, anything else as YAML."""
    if path.stat().st_size > MAX_DECK_BYTES:
        raise InvalidDeck(f"{path.name} exceeds the 10 MB size limit")

    data = path.read_bytes()
    if path.suffix.lower() in TSV_SUFFIXES:
        deck = parse_tsv(data, name=path.stem)
    else:
        deck = parse_deck(data, default_name=path.stem)

    logger.info(f"Loaded {len(deck.cards)} cards from {path} ({deck.skipped} skipped)")
    return deck
