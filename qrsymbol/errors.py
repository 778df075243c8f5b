"""
Exceptions raised by the QR symbol encoder.

All encoder failures derive from :class:`EncodingError`, which is itself a
``ValueError``. Callers that only need to know that the input could not be
encoded may catch ``ValueError``.
"""

from __future__ import annotations

from typing import Optional


class EncodingError(ValueError):
    """Base class for every failure reported by ``encode``."""


class UnsupportedCharacter(EncodingError):
    """
    Input text contains a character the requested mode cannot represent.

    Parameters
    ----------
    character : str
        Offending character.
    position : int
        Index of the character in the input text.
    mode : str
        Name of the mode (or byte encoding) that rejected the character.
    """

    def __init__(self, character: str, position: int, mode: str) -> None:
        self.character = character
        self.position = position
        self.mode = mode
        super().__init__(
            f"character {character!r} at index {position} cannot be "
            f"encoded in {mode} mode"
        )


class DataTooLong(EncodingError):
    """
    No symbol version up to 40 holds the data at the requested level.

    Parameters
    ----------
    bits : int
        Encoded length of the data in bits, measured with the count
        indicators of version 40.
    capacity : int
        Data capacity in bits of version 40 at the requested level.
    """

    def __init__(self, bits: int, capacity: int) -> None:
        self.bits = bits
        self.capacity = capacity
        super().__init__(
            f"data needs {bits} bits but the largest symbol holds {capacity}"
        )


class InvalidErrorCorrectionLevel(EncodingError):
    """Error-correction level is not one of L, M, Q or H."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(
            f"error-correction level must be one of 'L', 'M', 'Q', 'H'; "
            f"got {value!r}"
        )


class InvalidVersionFloor(EncodingError):
    """Minimum version is not an integer in the range 1..40."""

    def __init__(self, value: object, reason: Optional[str] = None) -> None:
        self.value = value
        super().__init__(
            reason or f"min_version must be an integer in 1..40; got {value!r}"
        )
