"""Typed error taxonomy surfaced by the review core.

Every failure a caller can observe is one of these. The server maps
``http_status`` straight onto the response code.
"""


class CardwiseError(Exception):
    """Base class for all errors raised by cardwise."""

    http_status = 500


class NotFound(CardwiseError):
    """The referenced card does not exist."""

    http_status = 404

    def __init__(self, card_id: str):
        super().__init__(f"Card not found: {card_id}")
        self.card_id = card_id


class ValidatorUnavailable(CardwiseError):
    """An external scoring call failed, timed out or returned garbage."""

    http_status = 503

    def __init__(self, tier: str, reason: str):
        super().__init__(f"{tier} validation unavailable: {reason}")
        self.tier = tier
        self.reason = reason


class PersistenceConflict(CardwiseError):
    """The card was written by another review since it was loaded."""

    http_status = 409

    def __init__(self, card_id: str, expected_version: int, actual_version: int | None = None):
        msg = f"Concurrent review on card {card_id} (expected version {expected_version}"
        if actual_version is not None:
            msg += f", found {actual_version}"
        super().__init__(msg + ")")
        self.card_id = card_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class SerializationError(CardwiseError):
    """Scheduling state could not be read or written in its persisted shape."""

    http_status = 500


class InvalidDeck(CardwiseError, ValueError):
    """An import file was rejected as a whole (too large, not UTF-8, unparseable)."""

    http_status = 400
