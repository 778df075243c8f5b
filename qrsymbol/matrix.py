"""
Module matrix construction.

A ``ModuleMatrix`` holds two boolean NumPy arrays of shape (size, size):
``modules`` (True for a dark module) and ``reserved`` (True for cells that
belong to function patterns or to the format/version information areas).
Codeword placement and masking only ever touch unreserved cells.

The builder runs in four steps:

1. draw finder, separator, timing and alignment patterns, the dark module
   and reserve the format and version areas (in ``__init__``);
2. place the interleaved codewords along the zig-zag path
   (``place_codewords``);
3. score all eight masks and pick the lowest penalty (``select_mask``);
4. apply the mask, write format and version information and freeze the
   arrays (``build_matrix``).
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .constants import (
    ErrorCorrectionLevel,
    alignment_positions,
    check_version,
    num_raw_data_modules,
    symbol_size,
)


logger = logging.getLogger(__name__)

FORMAT_GENERATOR = 0x537  # x^10 + x^8 + x^5 + x^4 + x^2 + x + 1
FORMAT_XOR_MASK = 0x5412
VERSION_GENERATOR = 0x1F25  # x^12 + x^11 + x^10 + x^9 + x^8 + x^5 + x^2 + 1

PENALTY_N1 = 3
PENALTY_N2 = 3
PENALTY_N3 = 40
PENALTY_N4 = 10

# Mask conditions over (row, column) index arrays
MASK_PATTERNS: tuple[Callable[[np.ndarray, np.ndarray], np.ndarray], ...] = (
    lambda r, c: (r + c) % 2 == 0,
    lambda r, c: r % 2 == 0,
    lambda r, c: c % 3 == 0,
    lambda r, c: (r + c) % 3 == 0,
    lambda r, c: (r // 2 + c // 3) % 2 == 0,
    lambda r, c: (r * c) % 2 + (r * c) % 3 == 0,
    lambda r, c: ((r * c) % 2 + (r * c) % 3) % 2 == 0,
    lambda r, c: ((r + c) % 2 + (r * c) % 3) % 2 == 0,
)

_FINDER_LIKE = (
    np.array([1, 0, 1, 1, 1, 0, 1, 0, 0, 0, 0], dtype=bool),
    np.array([0, 0, 0, 0, 1, 0, 1, 1, 1, 0, 1], dtype=bool),
)


# ---------- Format and version information ----------

def format_bits(ec_level: ErrorCorrectionLevel, mask: int) -> int:
    """
    15-bit format information word for `ec_level` and `mask`.

    The five data bits (level bits followed by the mask number) are
    extended with a BCH(15,5) remainder and XORed with 0x5412.
    """
    data = (ec_level.format_bits << 3) | mask
    rem = data
    for _ in range(10):
        rem = (rem << 1) ^ ((rem >> 9) * FORMAT_GENERATOR)
    return ((data << 10) | rem) ^ FORMAT_XOR_MASK


def version_bits(version: int) -> int:
    """18-bit version information word (6 data bits, BCH(18,6) remainder)."""
    rem = version
    for _ in range(12):
        rem = (rem << 1) ^ ((rem >> 11) * VERSION_GENERATOR)
    return (version << 12) | rem


def format_positions(size: int) -> tuple[list[tuple[int, int]], list[tuple[int, int]]]:
    """
    (row, col) of format bits 0..14 (bit 0 is least significant).

    Returns
    -------
    tuple of list
        Positions of the copy around the top-left finder pattern and of
        the copy split between the other two finder patterns.
    """
    first = [(i, 8) for i in range(6)]
    first += [(7, 8), (8, 8), (8, 7)]
    first += [(8, 14 - i) for i in range(9, 15)]
    second = [(8, size - 1 - i) for i in range(8)]
    second += [(size - 15 + i, 8) for i in range(8, 15)]
    return first, second


def version_positions(size: int) -> tuple[list[tuple[int, int]], list[tuple[int, int]]]:
    """(row, col) of version bits 0..17 in the top-right and bottom-left blocks."""
    top_right = [(i // 3, size - 11 + i % 3) for i in range(18)]
    bottom_left = [(size - 11 + i % 3, i // 3) for i in range(18)]
    return top_right, bottom_left


# ---------- Masking and penalty ----------

def mask_grid(mask: int, size: int) -> np.ndarray:
    """Boolean (size, size) array that is True where `mask` inverts a module."""
    if not 0 <= mask < len(MASK_PATTERNS):
        raise ValueError(f"mask must be in 0..7; got {mask!r}")
    rows, cols = np.indices((size, size))
    return MASK_PATTERNS[mask](rows, cols)


def _run_penalty(lines: np.ndarray) -> int:
    score = 0
    for line in lines:
        edges = np.flatnonzero(line[1:] != line[:-1]) + 1
        runs = np.diff(np.concatenate(([0], edges, [line.size])))
        long_runs = runs[runs >= 5]
        score += int(np.sum(PENALTY_N1 + long_runs - 5))
    return score


def _finder_like_count(lines: np.ndarray) -> int:
    if lines.shape[1] < 11:
        return 0
    windows = sliding_window_view(lines, 11, axis=1)
    return sum(int(np.all(windows == p, axis=-1).sum()) for p in _FINDER_LIKE)


def penalty_terms(modules: np.ndarray) -> tuple[int, int, int, int]:
    """
    The four penalty terms of a masked matrix.

    Returns
    -------
    tuple of int
        (N1, N2, N3, N4):

        N1
            Rows and columns with runs of five or more same-coloured
            modules: 3 + (run - 5) per run.
        N2
            3 for every 2x2 block of one colour (blocks may overlap).
        N3
            40 for every 1:1:3:1:1 dark/light sequence with four light
            modules on one side, in rows and columns.
        N4
            10 for each 5% band the dark-module ratio lies beyond the
            45-55% range.
    """
    m = np.asarray(modules, dtype=bool)
    n1 = _run_penalty(m) + _run_penalty(m.T)

    top, bottom = m[:-1], m[1:]
    same = (top[:, :-1] == top[:, 1:]) & (top[:, :-1] == bottom[:, :-1]) & (
        top[:, :-1] == bottom[:, 1:]
    )
    n2 = PENALTY_N2 * int(same.sum())

    n3 = PENALTY_N3 * (_finder_like_count(m) + _finder_like_count(m.T))

    dark = int(m.sum())
    total = m.size
    k = max(0, (abs(dark * 20 - total * 10) + total - 1) // total - 1)
    n4 = PENALTY_N4 * k
    return n1, n2, n3, n4


def penalty_score(modules: np.ndarray) -> int:
    """Total penalty of a masked matrix; lower is better."""
    return sum(penalty_terms(modules))


# ---------- Matrix ----------

class ModuleMatrix:
    """
    Square grid of modules for one symbol version.

    Parameters
    ----------
    version : int
        Symbol version, 1..40.

    Attributes
    ----------
    version : int
        Symbol version.
    size : int
        Modules per side, ``4 * version + 17``.
    modules : numpy.ndarray
        Boolean array; True marks a dark module.
    reserved : numpy.ndarray
        Boolean array; True marks function-pattern and format/version
        cells.
    """

    def __init__(self, version: int) -> None:
        self.version = check_version(version)
        self.size = symbol_size(version)
        self.modules = np.zeros((self.size, self.size), dtype=bool)
        self.reserved = np.zeros((self.size, self.size), dtype=bool)
        self._draw_function_patterns()

    def __repr__(self) -> str:
        return f"ModuleMatrix(version={self.version}, size={self.size})"

    # ---------- Step 1: function patterns ----------

    def _set_function(self, row: int, col: int, dark: bool) -> None:
        self.modules[row, col] = dark
        self.reserved[row, col] = True

    def _draw_function_patterns(self) -> None:
        size = self.size
        for i in range(size):
            self._set_function(6, i, i % 2 == 0)
            self._set_function(i, 6, i % 2 == 0)

        # Finder patterns with their light separators
        for row, col in ((3, 3), (3, size - 4), (size - 4, 3)):
            for dr in range(-4, 5):
                for dc in range(-4, 5):
                    r, c = row + dr, col + dc
                    if 0 <= r < size and 0 <= c < size:
                        self._set_function(r, c, max(abs(dr), abs(dc)) not in (2, 4))

        positions = alignment_positions(self.version)
        last = len(positions) - 1
        for i, row in enumerate(positions):
            for j, col in enumerate(positions):
                if (i, j) in ((0, 0), (0, last), (last, 0)):
                    continue
                for dr in range(-2, 3):
                    for dc in range(-2, 3):
                        self._set_function(row + dr, col + dc, max(abs(dr), abs(dc)) != 1)

        for area in format_positions(size):
            for r, c in area:
                self._set_function(r, c, False)
        self._set_function(size - 8, 8, True)

        if self.version >= 7:
            for area in version_positions(size):
                for r, c in area:
                    self._set_function(r, c, False)

    # ---------- Step 2: data placement ----------

    def place_codewords(self, codewords: Sequence[int]) -> None:
        """
        Lay the codeword bits along the zig-zag path.

        Columns are visited in pairs from the right edge, skipping the
        vertical timing column, alternately bottom-to-top and
        top-to-bottom; within a pair the right module comes first.
        Unreserved modules left over after the last bit stay light.
        """
        size = self.size
        total_bits = len(codewords) * 8
        if total_bits > num_raw_data_modules(self.version):
            raise ValueError("too many codewords for this version")
        i = 0
        for right in range(size - 1, 0, -2):
            if right <= 6:
                right -= 1
            upward = ((right + 1) & 2) == 0
            for vert in range(size):
                row = size - 1 - vert if upward else vert
                for col in (right, right - 1):
                    if self.reserved[row, col] or i >= total_bits:
                        continue
                    self.modules[row, col] = (codewords[i >> 3] >> (7 - (i & 7))) & 1
                    i += 1
        if i != total_bits:
            raise ValueError(f"placed {i} of {total_bits} codeword bits")

    # ---------- Step 3: masking ----------

    def masked(self, mask: int) -> np.ndarray:
        """Copy of the modules with `mask` applied to unreserved cells."""
        return self.modules ^ (mask_grid(mask, self.size) & ~self.reserved)

    def apply_mask(self, mask: int) -> None:
        """XOR `mask` into the unreserved modules in place; fails once frozen."""
        self.modules ^= mask_grid(mask, self.size) & ~self.reserved

    # ---------- Step 4: format/version information ----------

    def _write_reserved(self, positions: Sequence[tuple[int, int]], word: int) -> None:
        for bit, (r, c) in enumerate(positions):
            if not self.reserved[r, c]:
                raise ValueError(f"cell ({r}, {c}) is not reserved")
            self.modules[r, c] = (word >> bit) & 1

    def draw_format_info(self, ec_level: ErrorCorrectionLevel, mask: int) -> None:
        word = format_bits(ec_level, mask)
        for area in format_positions(self.size):
            self._write_reserved(area, word)

    def draw_version_info(self) -> None:
        if self.version < 7:
            return
        word = version_bits(self.version)
        for area in version_positions(self.size):
            self._write_reserved(area, word)

    def freeze(self) -> None:
        """Make both arrays read-only."""
        self.modules.setflags(write=False)
        self.reserved.setflags(write=False)

    # ---------- Output helpers ----------

    def to_text(self, border: int = 4, dark: str = "██",
                light: str = "  ") -> str:
        """Render the matrix as text, two characters per module."""
        blank = light * (self.size + 2 * border)
        lines = [blank] * border
        for row in self.modules:
            cells = "".join(dark if cell else light for cell in row)
            lines.append(light * border + cells + light * border)
        lines.extend([blank] * border)
        return "\n".join(lines)


def select_mask(matrix: ModuleMatrix) -> tuple[int, list[int]]:
    """
    Score every mask over `matrix` and return the best one.

    Returns
    -------
    tuple of (int, list of int)
        Mask with the lowest penalty (the lowest index on ties) and the
        penalty of each mask 0..7.
    """
    scores = [penalty_score(matrix.masked(mask)) for mask in range(len(MASK_PATTERNS))]
    best = scores.index(min(scores))
    logger.debug("mask penalties %s, selected mask %d", scores, best)
    return best, scores


def build_matrix(codewords: Sequence[int], version: int,
                 ec_level: ErrorCorrectionLevel,
                 mask: Optional[int] = None) -> tuple[ModuleMatrix, int]:
    """
    Run all builder steps for the final interleaved `codewords`.

    Parameters
    ----------
    codewords : sequence of int
        Interleaved data and EC codewords.
    version : int
        Symbol version.
    ec_level : ErrorCorrectionLevel
        Level recorded in the format information.
    mask : int, optional
        Use this mask instead of the lowest-penalty one.

    Returns
    -------
    tuple of (ModuleMatrix, int)
        Frozen matrix and the mask that was applied.
    """
    matrix = ModuleMatrix(version)
    matrix.place_codewords(codewords)
    if mask is None:
        mask, _ = select_mask(matrix)
    matrix.apply_mask(mask)
    matrix.draw_format_info(ec_level, mask)
    matrix.draw_version_info()
    matrix.freeze()
    return matrix, mask
