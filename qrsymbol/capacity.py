"""
Version selection: the smallest symbol whose data capacity fits the segments.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

from .constants import (
    MAX_VERSION,
    ErrorCorrectionLevel,
    Mode,
    check_version,
    num_data_codewords,
)
from .errors import DataTooLong
from .segments import Segment, analyze


logger = logging.getLogger(__name__)

# Versions sharing the same character count field widths
VERSION_TIERS = ((1, 9), (10, 26), (27, 40))


def segment_bit_length(segment: Segment, version: int) -> int:
    """
    Encoded length of one segment in `version`, or -1 if its character
    count overflows the count indicator of that version.
    """
    if segment.char_count >= 1 << segment.mode.char_count_bits(version):
        return -1
    return segment.bit_length(version)


def total_bit_length(segments: Sequence[Segment], version: int) -> int:
    """
    Sum of mode indicators, count fields and payloads for `version`.

    Returns -1 if any segment cannot be represented in `version`. The
    terminator is not included: it is truncated when the data fills the
    symbol exactly.
    """
    total = 0
    for segment in segments:
        bits = segment_bit_length(segment, version)
        if bits < 0:
            return -1
        total += bits
    return total


def _first_fit(segments: Sequence[Segment], ec_level: ErrorCorrectionLevel,
               first: int, last: int) -> Optional[int]:
    for version in range(first, last + 1):
        bits = total_bit_length(segments, version)
        capacity = num_data_codewords(version, ec_level) * 8
        if 0 <= bits <= capacity:
            logger.debug(
                "version %d-%s selected: %d of %d data bits",
                version, ec_level.name, bits, capacity,
            )
            return version
    return None


def _too_long(segments: Sequence[Segment], ec_level: ErrorCorrectionLevel) -> DataTooLong:
    return DataTooLong(
        sum(s.bit_length(MAX_VERSION) for s in segments),
        num_data_codewords(MAX_VERSION, ec_level) * 8,
    )


def select_version(segments: Sequence[Segment],
                   ec_level: ErrorCorrectionLevel = ErrorCorrectionLevel.M,
                   min_version: int = 1) -> int:
    """
    Pick the smallest version at or above `min_version` that fits.

    Parameters
    ----------
    segments : sequence of Segment
        A fixed segment plan.
    ec_level : ErrorCorrectionLevel, optional
        Requested error-correction level. The default is M.
    min_version : int, optional
        Smallest version to consider. The default is 1.

    Returns
    -------
    int
        Selected version in ``min_version..40``.

    Raises
    ------
    InvalidVersionFloor
        If `min_version` is not an integer in 1..40.
    DataTooLong
        If the segments do not fit any version up to 40.
    """
    check_version(min_version)
    version = _first_fit(segments, ec_level, min_version, MAX_VERSION)
    if version is None:
        raise _too_long(segments, ec_level)
    return version


def fit_text(text: str,
             ec_level: ErrorCorrectionLevel = ErrorCorrectionLevel.M,
             min_version: int = 1,
             *,
             mode: Union[Mode, str, None] = None,
             encoding: str = "utf-8") -> tuple[int, list[Segment]]:
    """
    Segment `text` and pick the smallest version that holds it.

    The segment plan depends on the count field widths, so the text is
    analyzed once per version tier, starting at the tier of
    `min_version`, and each plan is only checked against the versions of
    its own tier.

    Returns
    -------
    tuple of (int, list of Segment)
        Selected version and the segments to encode in it.

    Raises
    ------
    InvalidVersionFloor
        If `min_version` is not an integer in 1..40.
    UnsupportedCharacter
        If a character cannot be encoded (see ``analyze``).
    DataTooLong
        If no version up to 40 holds the text.
    """
    check_version(min_version)
    segments: list[Segment] = []
    for first, last in VERSION_TIERS:
        if last < min_version:
            continue
        first = max(first, min_version)
        segments = analyze(text, mode=mode, encoding=encoding, version=first)
        version = _first_fit(segments, ec_level, first, last)
        if version is not None:
            return version, segments
    raise _too_long(segments, ec_level)
