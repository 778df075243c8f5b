"""
QR Code symbol encoding entry point.

``encode`` runs the whole pipeline::

    text -> fit_text (analyze per version tier) -> make_data_codewords
         -> add_error_correction -> build_matrix -> EncodedSymbol

Every call is independent: all intermediate values are created and owned
by the call, so ``encode`` may be used from several threads at once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from .bitstream import make_data_codewords
from .capacity import fit_text
from .constants import ErrorCorrectionLevel, Mode, check_version
from .ecc import add_error_correction
from .errors import EncodingError
from .matrix import ModuleMatrix, build_matrix
from .segments import Segment


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncodedSymbol:
    """
    Result of encoding: the module matrix and its parameters.

    Attributes
    ----------
    version : int
        Symbol version, 1..40.
    ec_level : ErrorCorrectionLevel
        Error-correction level.
    mask : int
        Applied mask pattern, 0..7.
    matrix : ModuleMatrix
        Frozen module matrix including function patterns.
    segments : tuple of Segment
        Segments the text was encoded as.
    """

    version: int
    ec_level: ErrorCorrectionLevel
    mask: int
    matrix: ModuleMatrix
    segments: tuple[Segment, ...]

    @property
    def size(self) -> int:
        return self.matrix.size

    @property
    def modules(self) -> np.ndarray:
        """Read-only boolean module array; True is dark."""
        return self.matrix.modules

    def to_text(self, border: int = 4) -> str:
        return self.matrix.to_text(border=border)


def encode(text: str,
           ec_level: Union[ErrorCorrectionLevel, str] = ErrorCorrectionLevel.M,
           min_version: int = 1,
           *,
           mode: Union[Mode, str, None] = None,
           encoding: str = "utf-8",
           mask: Optional[int] = None) -> EncodedSymbol:
    """
    Encode `text` as a QR Code symbol.

    Parameters
    ----------
    text : str
        Text to encode. May be empty.
    ec_level : ErrorCorrectionLevel or {'L', 'M', 'Q', 'H'}, optional
        Error-correction level, case-insensitive when given as a string.
        The default is M.
    min_version : int, optional
        Smallest version to use. The default is 1.
    mode : Mode or str, optional
        Encode the whole text in this mode instead of choosing modes
        automatically. Kanji mode is only used when requested here.
    encoding : str, optional
        Codec for byte-mode segments. The default is 'utf-8'.
    mask : int, optional
        Apply this mask (0..7) instead of the lowest-penalty mask.

    Returns
    -------
    EncodedSymbol
        Version, level, mask and frozen module matrix.

    Raises
    ------
    InvalidErrorCorrectionLevel
        If `ec_level` is not L, M, Q or H.
    InvalidVersionFloor
        If `min_version` is not an integer in 1..40.
    UnsupportedCharacter
        If a character cannot be encoded in the requested mode or byte
        encoding.
    DataTooLong
        If no version up to 40 holds the data.
    EncodingError
        If `mode` or `mask` is invalid.
    """
    level = ErrorCorrectionLevel.parse(ec_level)
    check_version(min_version)
    if mask is not None and (
        isinstance(mask, bool) or not isinstance(mask, int) or not 0 <= mask <= 7
    ):
        raise EncodingError(f"mask must be an integer in 0..7; got {mask!r}")

    version, segments = fit_text(text, level, min_version, mode=mode, encoding=encoding)
    data_codewords = make_data_codewords(segments, version, level)
    codewords = add_error_correction(data_codewords, version, level)
    matrix, mask = build_matrix(codewords, version, level, mask)

    logger.debug(
        "encoded %d characters as version %d-%s, mask %d",
        len(text), version, level.name, mask,
    )
    return EncodedSymbol(version, level, mask, matrix, tuple(segments))
