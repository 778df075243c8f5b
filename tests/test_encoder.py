from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from qr_reader import decode_modules, read_version
from qrsymbol import (
    DataTooLong,
    EncodingError,
    ErrorCorrectionLevel,
    InvalidErrorCorrectionLevel,
    InvalidVersionFloor,
    Mode,
    UnsupportedCharacter,
    encode,
)
from qrsymbol.bitstream import make_data_codewords
from qrsymbol.ecc import add_error_correction
from qrsymbol.matrix import ModuleMatrix, penalty_score, version_bits


SAMPLES = [
    ("HELLO WORLD", "M"),
    ("01234567", "L"),
    ("https://example.com/path?q=1", "Q"),
    ("abc123456789012def", "H"),
    ("Grüße aus Köln", "M"),
    ("THE QUICK BROWN FOX " * 20, "L"),
    ("x" * 500, "H"),
]


@pytest.mark.parametrize("text, level", SAMPLES)
def test_round_trip(text, level):
    symbol = encode(text, level)
    decoded, version, ec_level, mask, _ = decode_modules(symbol.modules)
    assert decoded == text
    assert version == symbol.version
    assert ec_level is symbol.ec_level
    assert mask == symbol.mask


def test_hello_q_is_version_1_alphanumeric():
    symbol = encode("HELLO", "Q")
    assert symbol.version == 1
    assert symbol.size == 21
    assert [s.mode for s in symbol.segments] == [Mode.ALPHANUMERIC]
    _, _, _, _, data = decode_modules(symbol.modules)
    assert data == [32, 43, 11, 120, 204, 0, 236, 17, 236, 17, 236, 17, 236]


def test_default_level_is_m():
    assert encode("HELLO").ec_level is ErrorCorrectionLevel.M


def test_deterministic():
    a = encode("determinism", "H")
    b = encode("determinism", "H")
    assert (a.version, a.mask) == (b.version, b.mask)
    assert np.array_equal(a.modules, b.modules)


def test_empty_text():
    symbol = encode("")
    assert symbol.version == 1
    assert symbol.segments == ()
    decoded, _, _, _, data = decode_modules(symbol.modules)
    assert decoded == ""
    assert data == [0] + [236, 17] * 7 + [236]


def test_min_version_floor():
    symbol = encode("HELLO", "Q", min_version=10)
    assert symbol.version == 10
    assert decode_modules(symbol.modules)[0] == "HELLO"


def test_version_information_present_from_7():
    symbol = encode("a" * 150, "M")
    assert symbol.version >= 7
    modules = symbol.modules
    size = symbol.size
    assert read_version(modules) == symbol.version
    bottom_left = sum(
        int(modules[size - 11 + i % 3, i // 3]) << i for i in range(18)
    )
    assert bottom_left == version_bits(symbol.version)


def test_selected_mask_has_minimum_penalty():
    symbol = encode("mask selection", "M")
    level, version = symbol.ec_level, symbol.version
    codewords = add_error_correction(
        make_data_codewords(list(symbol.segments), version, level), version, level,
    )
    matrix = ModuleMatrix(version)
    matrix.place_codewords(codewords)
    scores = [penalty_score(matrix.masked(m)) for m in range(8)]
    assert scores[symbol.mask] == min(scores)
    assert symbol.mask == scores.index(min(scores))


@pytest.mark.parametrize("mask", range(8))
def test_forced_mask(mask):
    symbol = encode("FORCED MASK", "Q", mask=mask)
    assert symbol.mask == mask
    decoded, _, _, read_mask, _ = decode_modules(symbol.modules)
    assert (decoded, read_mask) == ("FORCED MASK", mask)


@pytest.mark.parametrize("mask", [-1, 8, 1.0, True, "3"])
def test_invalid_mask(mask):
    with pytest.raises(EncodingError):
        encode("x", mask=mask)


def test_largest_symbol():
    symbol = encode("a" * 2953, "L")
    assert symbol.version == 40
    assert symbol.size == 177
    assert decode_modules(symbol.modules)[0] == "a" * 2953


def test_data_too_long():
    with pytest.raises(DataTooLong):
        encode("a" * 2954, "L")
    with pytest.raises(DataTooLong):
        encode("1" * 7090, "L")


def test_largest_numeric_payload():
    assert encode("1" * 7089, "L").version == 40


@pytest.mark.parametrize("level", ["X", "", None, 2])
def test_invalid_level(level):
    with pytest.raises(InvalidErrorCorrectionLevel):
        encode("x", level)


@pytest.mark.parametrize("floor", [0, 41, 2.5, "3", None])
def test_invalid_version_floor(floor):
    with pytest.raises(InvalidVersionFloor):
        encode("x", "M", floor)


def test_unsupported_character_in_forced_mode():
    with pytest.raises(UnsupportedCharacter):
        encode("hello", mode="alphanumeric")


def test_errors_are_value_errors():
    with pytest.raises(ValueError):
        encode("a" * 3000, "L")


def test_kanji_round_trip():
    symbol = encode("点茗", "M", mode="kanji")
    assert symbol.segments[0].mode is Mode.KANJI
    assert decode_modules(symbol.modules)[0] == "点茗"


def test_custom_byte_encoding():
    symbol = encode("héllo", encoding="latin-1")
    assert decode_modules(symbol.modules, encoding="latin-1")[0] == "héllo"


def test_modules_are_read_only():
    symbol = encode("frozen")
    with pytest.raises(ValueError):
        symbol.modules[0, 0] = False


def test_to_text_has_quiet_zone():
    lines = encode("HELLO", "Q").to_text(border=2).splitlines()
    assert len(lines) == 25
    assert lines[0].strip() == ""


def test_concurrent_encoding_matches_sequential():
    texts = [f"item-{i}" * (i + 1) for i in range(16)]
    expected = [encode(t).modules for t in texts]
    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(encode, texts))
    for symbol, modules in zip(results, expected):
        assert np.array_equal(symbol.modules, modules)


def test_mixed_text_at_capacity_limit():
    text = "a" * 1000 + "123456" + "a" * 1947
    symbol = encode(text, "L")
    assert symbol.version == 40
    assert [s.mode for s in symbol.segments] == [Mode.BYTE]
    assert decode_modules(symbol.modules)[0] == text


def test_mixed_text_round_trip_in_every_tier():
    for text in ("abc123456789012def", "x" * 300 + "0123456789" * 3 + "y" * 300):
        symbol = encode(text, "M")
        assert decode_modules(symbol.modules)[0] == text


def test_returned_matrix_cannot_be_remasked():
    symbol = encode("HELLO", "Q")
    before = symbol.modules.copy()
    with pytest.raises(ValueError):
        symbol.matrix.apply_mask(3)
    assert np.array_equal(symbol.modules, before)
    assert decode_modules(symbol.modules)[0] == "HELLO"
