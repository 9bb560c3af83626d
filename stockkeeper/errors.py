"""Error taxonomy shared by the repositories and services."""
from __future__ import annotations


class StockKeeperError(Exception):
    """Base class for every error raised by stockkeeper."""


class DuplicateKeyError(StockKeeperError):
    def __init__(self, key: str):
        super().__init__(f"Duplicate key: {key}")
        self.key = key


class NotFoundError(StockKeeperError, LookupError):
    def __init__(self, key: str, action: str = "get"):
        super().__init__(f"No entity with key, so cannot {action}: {key}")
        self.key = key
        self.action = action


class ValidationError(StockKeeperError, ValueError):
    """Raised while constructing an entity with invalid fields."""


class AnomalyWarning(UserWarning):
    """
    Non-fatal condition met while reconciling a batch (an unknown key).

    Never raised by the services; instances are collected on the batch result
    and logged, so the rest of the batch still applies.
    """

    def __init__(self, key: str, message: str):
        super().__init__(message)
        self.key = key
        self.message = message

    def __eq__(self, other):
        return isinstance(other, AnomalyWarning) and (self.key, self.message) == (other.key, other.message)

    def __hash__(self):
        return hash((self.key, self.message))

    def to_dict(self) -> dict:
        return {"key": self.key, "message": self.message}
