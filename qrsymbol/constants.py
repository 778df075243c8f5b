"""
Fixed QR Code Model 2 parameters.

The tables below follow ISO/IEC 18004:2015. Rows are indexed by
``version - 1`` and columns by ``ErrorCorrectionLevel.ordinal``
(L, M, Q, H).
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Union

from .errors import InvalidErrorCorrectionLevel, InvalidVersionFloor


MIN_VERSION = 1
MAX_VERSION = 40

# 45-symbol alphanumeric alphabet; index is the encoded value
ALPHANUMERIC_CHARS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ $%*+-./:"
ALPHANUMERIC_VALUES = {ch: i for i, ch in enumerate(ALPHANUMERIC_CHARS)}

PAD_CODEWORDS = (0xEC, 0x11)
TERMINATOR_BITS = 4
MODE_INDICATOR_BITS = 4


class ErrorCorrectionLevel(Enum):
    """
    Error-correction level of a symbol.

    Each member carries its column index in the block tables and the two
    bits written into the format information.

    Levels
    ------
    L
        Low (approximately 7% codewords restored).
    M
        Medium (approximately 15%).
    Q
        Quartile (approximately 25%).
    H
        High (approximately 30%).
    """

    L = (0, 0b01)
    M = (1, 0b00)
    Q = (2, 0b11)
    H = (3, 0b10)

    def __init__(self, ordinal: int, format_bits: int) -> None:
        self.ordinal = ordinal
        self.format_bits = format_bits

    @classmethod
    def parse(cls, value: Union["ErrorCorrectionLevel", str]) -> "ErrorCorrectionLevel":
        """
        Normalize a level given as a member or a case-insensitive name.

        Raises
        ------
        InvalidErrorCorrectionLevel
            If `value` does not name one of L, M, Q or H.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.upper() in cls.__members__:
            return cls[value.upper()]
        raise InvalidErrorCorrectionLevel(value)

    @classmethod
    def from_format_bits(cls, bits: int) -> "ErrorCorrectionLevel":
        for level in cls:
            if level.format_bits == bits:
                return level
        raise InvalidErrorCorrectionLevel(bits)


class Mode(Enum):
    """Data encoding modes with their indicators and count-field widths."""

    NUMERIC = (0b0001, (10, 12, 14))
    ALPHANUMERIC = (0b0010, (9, 11, 13))
    BYTE = (0b0100, (8, 16, 16))
    KANJI = (0b1000, (8, 10, 12))

    def __init__(self, indicator: int, count_widths: tuple[int, int, int]) -> None:
        self.indicator = indicator
        self.count_widths = count_widths

    def char_count_bits(self, version: int) -> int:
        """Width of the character count indicator in `version`."""
        return self.count_widths[version_tier(version)]

    def payload_bits(self, char_count: int) -> int:
        """Number of data bits for `char_count` characters in this mode."""
        if self is Mode.NUMERIC:
            groups, rest = divmod(char_count, 3)
            return groups * 10 + (0, 4, 7)[rest]
        if self is Mode.ALPHANUMERIC:
            pairs, rest = divmod(char_count, 2)
            return pairs * 11 + rest * 6
        if self is Mode.BYTE:
            return char_count * 8
        return char_count * 13

    @classmethod
    def from_indicator(cls, indicator: int) -> "Mode":
        for mode in cls:
            if mode.indicator == indicator:
                return mode
        raise ValueError(f"unknown mode indicator {indicator:#06b}")


_EC_CODEWORDS_PER_BLOCK = (
    (7, 10, 13, 17), (10, 16, 22, 28), (15, 26, 18, 22), (20, 18, 26, 16),
    (26, 24, 18, 22), (18, 16, 24, 28), (20, 18, 18, 26), (24, 22, 22, 26),
    (30, 22, 20, 24), (18, 26, 24, 28), (20, 30, 28, 24), (24, 22, 26, 28),
    (26, 22, 24, 22), (30, 24, 20, 24), (22, 24, 30, 24), (24, 28, 24, 30),
    (28, 28, 28, 28), (30, 26, 28, 28), (28, 26, 26, 26), (28, 26, 30, 28),
    (28, 26, 28, 30), (28, 28, 30, 24), (30, 28, 30, 30), (30, 28, 30, 30),
    (26, 28, 30, 30), (28, 28, 28, 30), (30, 28, 30, 30), (30, 28, 30, 30),
    (30, 28, 30, 30), (30, 28, 30, 30), (30, 28, 30, 30), (30, 28, 30, 30),
    (30, 28, 30, 30), (30, 28, 30, 30), (30, 28, 30, 30), (30, 28, 30, 30),
    (30, 28, 30, 30), (30, 28, 30, 30), (30, 28, 30, 30), (30, 28, 30, 30),
)

_NUM_EC_BLOCKS = (
    (1, 1, 1, 1), (1, 1, 1, 1), (1, 1, 2, 2), (1, 2, 2, 4),
    (1, 2, 4, 4), (2, 4, 4, 4), (2, 4, 6, 5), (2, 4, 6, 6),
    (2, 5, 8, 8), (4, 5, 8, 8), (4, 5, 8, 11), (4, 8, 10, 11),
    (4, 9, 12, 16), (4, 9, 16, 16), (6, 10, 12, 18), (6, 10, 17, 16),
    (6, 11, 16, 19), (6, 13, 18, 21), (7, 14, 21, 25), (8, 16, 20, 25),
    (8, 17, 23, 25), (9, 17, 23, 34), (9, 18, 25, 30), (10, 20, 27, 32),
    (12, 21, 29, 35), (12, 23, 34, 37), (12, 25, 34, 40), (13, 26, 35, 42),
    (14, 28, 38, 45), (15, 29, 40, 48), (16, 31, 43, 51), (17, 33, 45, 54),
    (18, 35, 48, 57), (19, 37, 51, 60), (19, 38, 53, 63), (20, 40, 56, 66),
    (21, 43, 59, 70), (22, 45, 62, 74), (24, 47, 65, 77), (25, 49, 68, 81),
)


def check_version(version: object) -> int:
    """
    Validate a symbol version.

    Raises
    ------
    InvalidVersionFloor
        If `version` is not an integer in 1..40.
    """
    if isinstance(version, bool) or not isinstance(version, int):
        raise InvalidVersionFloor(version)
    if not MIN_VERSION <= version <= MAX_VERSION:
        raise InvalidVersionFloor(version)
    return version


def version_tier(version: int) -> int:
    """Index of the count-indicator tier: 0 for 1-9, 1 for 10-26, 2 for 27-40."""
    if version <= 9:
        return 0
    if version <= 26:
        return 1
    return 2


def symbol_size(version: int) -> int:
    return 4 * version + 17


def ec_codewords_per_block(version: int, level: ErrorCorrectionLevel) -> int:
    return _EC_CODEWORDS_PER_BLOCK[version - 1][level.ordinal]


def num_ec_blocks(version: int, level: ErrorCorrectionLevel) -> int:
    return _NUM_EC_BLOCKS[version - 1][level.ordinal]


@lru_cache(maxsize=None)
def num_raw_data_modules(version: int) -> int:
    """
    Number of modules left for codewords once function patterns are drawn.

    Includes the remainder bits, so the result need not be a multiple
    of 8.
    """
    result = (16 * version + 128) * version + 64
    if version >= 2:
        num_align = version // 7 + 2
        result -= (25 * num_align - 10) * num_align - 55
        if version >= 7:
            result -= 36
    return result


def num_total_codewords(version: int) -> int:
    return num_raw_data_modules(version) // 8


def num_data_codewords(version: int, level: ErrorCorrectionLevel) -> int:
    """Data codeword capacity of `version` at `level`."""
    return num_total_codewords(version) - (
        ec_codewords_per_block(version, level) * num_ec_blocks(version, level)
    )


@lru_cache(maxsize=None)
def alignment_positions(version: int) -> tuple[int, ...]:
    """
    Row/column coordinates of alignment pattern centres.

    Returns
    -------
    tuple of int
        Ascending coordinates; the pattern centres are all pairs of them
        except the three overlapping the finder patterns. Empty for
        version 1.
    """
    if version == 1:
        return ()
    num_align = version // 7 + 2
    step = (version * 8 + num_align * 3 + 5) // (num_align * 4 - 4) * 2
    last = symbol_size(version) - 7
    positions = [last - i * step for i in range(num_align - 1)]
    positions.append(6)
    return tuple(reversed(positions))
