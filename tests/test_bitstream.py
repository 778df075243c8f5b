import pytest

from qrsymbol.bitstream import BitBuffer, encode_segments, make_data_codewords
from qrsymbol.constants import ErrorCorrectionLevel
from qrsymbol.errors import DataTooLong
from qrsymbol.segments import analyze

M = ErrorCorrectionLevel.M
Q = ErrorCorrectionLevel.Q


def test_append_bits():
    buf = BitBuffer()
    buf.append_bits(5, 4)
    buf.append_bits(0, 0)
    assert str(buf) == "0101"
    with pytest.raises(ValueError):
        buf.append_bits(16, 4)


def test_to_bytes_requires_whole_bytes():
    buf = BitBuffer()
    buf.append_bits(0xA5, 8)
    assert buf.to_bytes() == b"\xa5"
    buf.append_bits(1, 1)
    with pytest.raises(ValueError):
        buf.to_bytes()


def test_hello_alphanumeric_bits():
    bits = encode_segments(analyze("HELLO"), 1)
    assert str(bits) == "0010" "000000101" "01100001011" "01111000110" "011000"


def test_hello_q_data_codewords():
    data = make_data_codewords(analyze("HELLO"), 1, Q)
    assert list(data) == [32, 43, 11, 120, 204, 0, 236, 17, 236, 17, 236, 17, 236]


def test_numeric_data_codewords():
    data = make_data_codewords(analyze("01234567"), 1, M)
    assert list(data[:6]) == [16, 32, 12, 86, 97, 128]
    assert list(data[6:]) == [236, 17] * 5


def test_hello_world_data_codewords():
    data = make_data_codewords(analyze("HELLO WORLD"), 1, M)
    assert list(data) == [32, 91, 11, 120, 209, 114, 220, 77, 67, 64,
                          236, 17, 236, 17, 236, 17]


def test_empty_text_is_terminator_and_padding():
    data = make_data_codewords([], 1, M)
    assert list(data) == [0] + [236, 17] * 7 + [236]


def test_kanji_bits():
    bits = encode_segments(analyze("点茗", mode="kanji"), 1)
    assert str(bits) == "1000" "00000010" "0110110011111" "1101010101010"


def test_terminator_truncated_when_capacity_is_exact():
    # 41 digits use 151 of the 152 bits in 1-L, leaving one terminator bit
    segments = analyze("1" * 41)
    assert len(encode_segments(segments, 1)) == 151
    data = make_data_codewords(segments, 1, ErrorCorrectionLevel.L)
    assert len(data) == 19
    # last two digits "11" as 7 bits, then the single terminator bit
    assert data[-1] == 0b00010110
    assert 0xEC not in data


def test_overflow_raises():
    with pytest.raises(DataTooLong) as info:
        make_data_codewords(analyze("a" * 20), 1, ErrorCorrectionLevel.L)
    assert info.value.capacity == 152
    assert info.value.bits == 4 + 8 + 160
