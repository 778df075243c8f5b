"""
Reed-Solomon error correction, block splitting and interleaving.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from itertools import zip_longest
from typing import Sequence

import numpy as np

from . import gf256
from .constants import (
    ErrorCorrectionLevel,
    ec_codewords_per_block,
    num_data_codewords,
    num_ec_blocks,
    num_total_codewords,
)


@dataclass(frozen=True)
class CodewordBlock:
    """Data codewords of one block and their Reed-Solomon codewords."""

    data: tuple[int, ...]
    ec: tuple[int, ...]

    def __len__(self) -> int:
        return len(self.data) + len(self.ec)


@lru_cache(maxsize=None)
def generator_polynomial(degree: int) -> np.ndarray:
    """
    Generator polynomial (x - a^0)(x - a^1)...(x - a^(degree-1)).

    Returns
    -------
    numpy.ndarray
        Read-only ``uint8`` array of ``degree + 1`` coefficients, highest
        degree first; the leading coefficient is 1.
    """
    if degree < 1:
        raise ValueError("degree must be positive")
    poly = np.ones(1, dtype=np.uint8)
    for i in range(degree):
        poly = gf256.poly_multiply(poly, [1, gf256.power(gf256.GENERATOR, i)])
    poly.setflags(write=False)
    return poly


def ec_codewords(data: Sequence[int], degree: int) -> tuple[int, ...]:
    """Reed-Solomon remainder of `data` for a code with `degree` EC codewords."""
    remainder = gf256.poly_remainder(data, generator_polynomial(degree))
    return tuple(int(c) for c in remainder)


def split_blocks(data_codewords: Sequence[int], version: int,
                 ec_level: ErrorCorrectionLevel) -> list[CodewordBlock]:
    """
    Divide the data codewords into blocks and compute each block's EC.

    Short blocks come first; the remaining blocks carry one more data
    codeword. Every block has the same number of EC codewords.
    """
    expected = num_data_codewords(version, ec_level)
    if len(data_codewords) != expected:
        raise ValueError(
            f"version {version}-{ec_level.name} takes {expected} data "
            f"codewords; got {len(data_codewords)}"
        )
    num_blocks = num_ec_blocks(version, ec_level)
    ec_len = ec_codewords_per_block(version, ec_level)
    total = num_total_codewords(version)
    num_short = num_blocks - total % num_blocks
    short_data_len = total // num_blocks - ec_len

    blocks = []
    pos = 0
    for i in range(num_blocks):
        length = short_data_len + (0 if i < num_short else 1)
        chunk = tuple(int(c) for c in data_codewords[pos:pos + length])
        blocks.append(CodewordBlock(chunk, ec_codewords(chunk, ec_len)))
        pos += length
    return blocks


def interleave(blocks: Sequence[CodewordBlock]) -> list[int]:
    """
    Interleave blocks into the final codeword sequence.

    Codeword i of every block is taken in block order, first across all
    data codewords (exhausted short blocks contribute nothing), then
    across all EC codewords.
    """
    result = []
    for column in zip_longest(*(b.data for b in blocks)):
        result.extend(c for c in column if c is not None)
    for column in zip(*(b.ec for b in blocks)):
        result.extend(column)
    return result


def add_error_correction(data_codewords: Sequence[int], version: int,
                         ec_level: ErrorCorrectionLevel) -> list[int]:
    """Blocks, EC codewords and interleaving in one step."""
    final = interleave(split_blocks(data_codewords, version, ec_level))
    if len(final) != num_total_codewords(version):
        raise ValueError(
            f"interleaved {len(final)} codewords; version {version} holds "
            f"{num_total_codewords(version)}"
        )
    return final
