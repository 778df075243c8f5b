"""
Data analysis: splitting input text into encoding segments.

The analyzer assigns every character to numeric, alphanumeric or byte mode
so that the total encoded length, including the mode indicator and
character count field of each segment, is as small as possible for the
count-field widths of a given version. Consecutive characters in the same
mode form one segment. Kanji mode is only used when it is requested
explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import groupby
from typing import Optional, Union

from .constants import ALPHANUMERIC_VALUES, MODE_INDICATOR_BITS, Mode
from .errors import EncodingError, UnsupportedCharacter


logger = logging.getLogger(__name__)

# Each mode can represent every character of the modes before it
_GENERALITY = {Mode.NUMERIC: 0, Mode.ALPHANUMERIC: 1, Mode.BYTE: 2}

_AUTO_MODES = (Mode.BYTE, Mode.ALPHANUMERIC, Mode.NUMERIC)
_SIXTHS_PER_CHAR = {Mode.ALPHANUMERIC: 33, Mode.NUMERIC: 20}


@dataclass(frozen=True)
class Segment:
    """
    A run of input characters encoded in a single mode.

    Attributes
    ----------
    mode : Mode
        Encoding mode of the segment.
    text : str
        Slice of the input text covered by the segment.
    data : bytes
        Bytes written to the bit stream: ASCII digits or alphanumeric
        characters, the byte-mode encoding of `text`, or its Shift JIS
        form for kanji.
    """

    mode: Mode
    text: str
    data: bytes

    @property
    def char_count(self) -> int:
        """Value of the character count indicator for this segment."""
        if self.mode is Mode.BYTE:
            return len(self.data)
        if self.mode is Mode.KANJI:
            return len(self.data) // 2
        return len(self.text)

    def bit_length(self, version: int) -> int:
        """Encoded size including mode indicator and count field."""
        return (
            MODE_INDICATOR_BITS
            + self.mode.char_count_bits(version)
            + self.mode.payload_bits(self.char_count)
        )


def parse_mode(mode: Union[Mode, str, None]) -> Optional[Mode]:
    """
    Normalize a mode hint given as a member, a name, or None for auto.

    Raises
    ------
    EncodingError
        If `mode` does not name a supported mode.
    """
    if mode is None or isinstance(mode, Mode):
        return mode
    if isinstance(mode, str):
        name = mode.strip().upper()
        if name in ("", "AUTO"):
            return None
        if name in Mode.__members__:
            return Mode[name]
    raise EncodingError(
        f"mode must be one of 'numeric', 'alphanumeric', 'byte', 'kanji' "
        f"or None; got {mode!r}"
    )


def _classify(ch: str) -> Mode:
    if "0" <= ch <= "9":
        return Mode.NUMERIC
    if ch in ALPHANUMERIC_VALUES:
        return Mode.ALPHANUMERIC
    return Mode.BYTE


def _encode_bytes(text: str, start: int, encoding: str) -> bytes:
    try:
        return text.encode(encoding)
    except UnicodeEncodeError as exc:
        raise UnsupportedCharacter(
            exc.object[exc.start], start + exc.start, f"byte ({encoding})"
        ) from exc


def _encode_kanji(text: str, start: int) -> bytes:
    out = bytearray()
    for offset, ch in enumerate(text):
        try:
            code = ch.encode("shift_jis")
        except UnicodeEncodeError:
            code = b""
        value = int.from_bytes(code, "big") if len(code) == 2 else 0
        if not (0x8140 <= value <= 0x9FFC or 0xE040 <= value <= 0xEBBF):
            raise UnsupportedCharacter(ch, start + offset, "kanji")
        out += code
    return bytes(out)


def make_segment(text: str, mode: Mode, start: int = 0,
                 encoding: str = "utf-8") -> Segment:
    """
    Build a segment of `text` in `mode`, checking every character.

    Parameters
    ----------
    text : str
        Characters to encode.
    mode : Mode
        Target mode.
    start : int, optional
        Index of `text` within the full input, used in error reports.
    encoding : str, optional
        Codec for byte mode. The default is 'utf-8'.

    Raises
    ------
    UnsupportedCharacter
        If a character cannot be represented in `mode`.
    """
    if mode is Mode.BYTE:
        return Segment(mode, text, _encode_bytes(text, start, encoding))
    if mode is Mode.KANJI:
        return Segment(mode, text, _encode_kanji(text, start))
    for offset, ch in enumerate(text):
        if _GENERALITY[_classify(ch)] > _GENERALITY[mode]:
            raise UnsupportedCharacter(ch, start + offset, mode.name.lower())
    return Segment(mode, text, text.encode("ascii"))


def _char_modes(text: str, version: int, encoding: str) -> list[Mode]:
    """
    Mode of every character in a partition of minimal encoded length.

    Costs are kept in sixths of a bit so that numeric (10/3 bits per
    digit) and alphanumeric (11/2 bits per character) stay integral.
    ``costs[j]`` is the cheapest encoding of the text so far that leaves a
    segment in ``_AUTO_MODES[j]`` open, its header already paid.
    """
    heads = [
        (MODE_INDICATOR_BITS + mode.char_count_bits(version)) * 6
        for mode in _AUTO_MODES
    ]
    costs = list(heads)
    history = []
    for pos, ch in enumerate(text):
        generality = _GENERALITY[_classify(ch)]
        current = [None] * len(_AUTO_MODES)
        came_from = [None] * len(_AUTO_MODES)
        for j, mode in enumerate(_AUTO_MODES):
            if mode is Mode.BYTE:
                current[j] = costs[j] + 48 * len(_encode_bytes(ch, pos, encoding))
                came_from[j] = mode
            elif generality <= _GENERALITY[mode]:
                current[j] = costs[j] + _SIXTHS_PER_CHAR[mode]
                came_from[j] = mode

        # Close the segment after this character and open another one
        extended = list(current)
        for j in range(len(_AUTO_MODES)):
            for k, mode in enumerate(_AUTO_MODES):
                if extended[k] is None:
                    continue
                switched = (extended[k] + 5) // 6 * 6 + heads[j]
                if current[j] is None or switched < current[j]:
                    current[j] = switched
                    came_from[j] = mode
        history.append(came_from)
        costs = current

    best = min(range(len(_AUTO_MODES)), key=lambda j: (costs[j] + 5) // 6)
    mode = _AUTO_MODES[best]
    modes = [mode] * len(text)
    for pos in range(len(text) - 1, -1, -1):
        mode = history[pos][_AUTO_MODES.index(mode)]
        modes[pos] = mode
    return modes


def analyze(text: str, mode: Union[Mode, str, None] = None,
            encoding: str = "utf-8", version: int = 1) -> list[Segment]:
    """
    Partition `text` into segments covering it without gaps or overlaps.

    Parameters
    ----------
    text : str
        Input text.
    mode : Mode or str, optional
        Force a single segment in this mode. None (the default) selects
        modes automatically among numeric, alphanumeric and byte.
    encoding : str, optional
        Codec used for byte segments. The default is 'utf-8'.
    version : int, optional
        Version whose count-field widths are used to price each segment.
        The partition is shortest for every version of the same count
        width tier (1-9, 10-26, 27-40). The default is 1.

    Returns
    -------
    list of Segment
        Segments in input order. Empty when `text` is empty.

    Raises
    ------
    UnsupportedCharacter
        If a character cannot be represented in the forced mode or in
        `encoding`.
    EncodingError
        If `mode` is not a known mode name.
    """
    if not isinstance(text, str):
        raise TypeError(f"text must be a str, not {type(text).__name__}")
    forced = parse_mode(mode)
    if not text:
        return []
    if forced is not None:
        return [make_segment(text, forced, 0, encoding)]

    segments = []
    start = 0
    for run_mode, run in groupby(_char_modes(text, version, encoding)):
        length = len(list(run))
        segments.append(make_segment(text[start:start + length], run_mode, start, encoding))
        start += length

    logger.debug(
        "analyzed %d characters into %d segment(s): %s",
        len(text), len(segments),
        ", ".join(f"{s.mode.name}[{s.char_count}]" for s in segments),
    )
    return segments
