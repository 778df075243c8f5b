"""
Serialization of segments into the padded data codeword sequence.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from .constants import (
    ALPHANUMERIC_VALUES,
    MODE_INDICATOR_BITS,
    PAD_CODEWORDS,
    TERMINATOR_BITS,
    ErrorCorrectionLevel,
    Mode,
    num_data_codewords,
)
from .errors import DataTooLong
from .segments import Segment


class BitBuffer(list):
    """Growable sequence of 0/1 ints, most significant bit first."""

    def append_bits(self, value: int, length: int) -> None:
        if length < 0 or value >> length:
            raise ValueError(f"value {value} does not fit in {length} bits")
        self.extend((value >> i) & 1 for i in range(length - 1, -1, -1))

    def to_bytes(self) -> bytes:
        """Pack the bits into bytes; the length must be a multiple of 8."""
        if len(self) % 8:
            raise ValueError("bit length is not a multiple of 8")
        out = bytearray()
        for i in range(0, len(self), 8):
            byte = 0
            for bit in self[i:i + 8]:
                byte = (byte << 1) | bit
            out.append(byte)
        return bytes(out)

    def __str__(self) -> str:
        return "".join(map(str, self))


def _kanji_values(data: bytes) -> Iterable[int]:
    for i in range(0, len(data), 2):
        code = (data[i] << 8) | data[i + 1]
        code -= 0x8140 if code <= 0x9FFC else 0xC140
        yield (code >> 8) * 0xC0 + (code & 0xFF)


def write_segment(buffer: BitBuffer, segment: Segment, version: int) -> None:
    """Append mode indicator, count indicator and payload of `segment`."""
    mode = segment.mode
    buffer.append_bits(mode.indicator, MODE_INDICATOR_BITS)
    buffer.append_bits(segment.char_count, mode.char_count_bits(version))

    if mode is Mode.NUMERIC:
        digits = segment.text
        for i in range(0, len(digits), 3):
            group = digits[i:i + 3]
            buffer.append_bits(int(group), (0, 4, 7, 10)[len(group)])
    elif mode is Mode.ALPHANUMERIC:
        chars = segment.text
        for i in range(0, len(chars) - 1, 2):
            value = ALPHANUMERIC_VALUES[chars[i]] * 45 + ALPHANUMERIC_VALUES[chars[i + 1]]
            buffer.append_bits(value, 11)
        if len(chars) % 2:
            buffer.append_bits(ALPHANUMERIC_VALUES[chars[-1]], 6)
    elif mode is Mode.BYTE:
        for byte in segment.data:
            buffer.append_bits(byte, 8)
    else:
        for value in _kanji_values(segment.data):
            buffer.append_bits(value, 13)


def encode_segments(segments: Sequence[Segment], version: int) -> BitBuffer:
    """Serialize `segments` for `version` without terminator or padding."""
    buffer = BitBuffer()
    for segment in segments:
        write_segment(buffer, segment, version)
    return buffer


def make_data_codewords(segments: Sequence[Segment], version: int,
                        ec_level: ErrorCorrectionLevel) -> bytes:
    """
    Build the complete data codeword sequence for one symbol.

    Writes the segments, then up to four terminator bits, zero bits up to
    the next byte boundary and alternating 0xEC/0x11 pad codewords until
    the data capacity of `version` at `ec_level` is reached.

    Returns
    -------
    bytes
        Exactly ``num_data_codewords(version, ec_level)`` codewords.

    Raises
    ------
    DataTooLong
        If the segments exceed the capacity of `version`.
    """
    capacity = num_data_codewords(version, ec_level) * 8
    buffer = encode_segments(segments, version)
    if len(buffer) > capacity:
        raise DataTooLong(len(buffer), capacity)

    buffer.append_bits(0, min(TERMINATOR_BITS, capacity - len(buffer)))
    buffer.append_bits(0, -len(buffer) % 8)
    codewords = bytearray(buffer.to_bytes())
    pad = 0
    while len(codewords) < capacity // 8:
        codewords.append(PAD_CODEWORDS[pad % 2])
        pad += 1
    return bytes(codewords)
