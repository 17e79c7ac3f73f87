"""Exceptions raised while building and printing a spot-it deck."""

from typing import Optional


class SpotItError(Exception):
    """Base class for all deck generation errors."""


class ConfigurationError(SpotItError, ValueError):
    """Raised for missing, non-numeric or out-of-range user input."""


class InsufficientResourcesError(SpotItError):
    """Raised when the symbol pool is too small for the requested deck."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"Not enough symbol images: required {required}, found {available}"
        )


class RenderFailure(SpotItError):
    """Raised when a single symbol cannot be transformed or placed."""

    def __init__(self, message: str, image_path: Optional[str] = None, card_index: Optional[int] = None):
        self.image_path = image_path
        self.card_index = card_index
        super().__init__(message)
