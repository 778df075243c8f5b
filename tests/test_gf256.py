import numpy as np
import pytest

from qrsymbol import gf256


def test_exp_log_tables_are_inverse():
    for x in range(1, 256):
        assert gf256.EXP[gf256.LOG[x]] == x
    assert gf256.EXP[8] == 29
    assert len(set(gf256.EXP[:255].tolist())) == 255


def test_tables_are_read_only():
    with pytest.raises(ValueError):
        gf256.EXP[0] = 5


def test_multiply_divide_inverse():
    assert gf256.multiply(0, 7) == 0
    assert gf256.multiply(2, 128) == 29
    for a in (1, 2, 3, 29, 200, 255):
        assert gf256.multiply(a, gf256.inverse(a)) == 1
        assert gf256.divide(gf256.multiply(a, 77), 77) == a
    with pytest.raises(ZeroDivisionError):
        gf256.divide(3, 0)
    with pytest.raises(ZeroDivisionError):
        gf256.inverse(0)


def test_power():
    assert gf256.power(2, 0) == 1
    assert gf256.power(2, 8) == 29
    assert gf256.power(2, 255) == 1
    assert gf256.power(0, 3) == 0


def test_scale_keeps_zero_coefficients():
    out = gf256.scale([0, 1, 2], 3)
    assert out.dtype == np.uint8
    assert out.tolist() == [0, 3, 6]
    assert gf256.scale([4, 5], 0).tolist() == [0, 0]


def test_poly_multiply_and_evaluate():
    # (x - 1)(x - 2) vanishes at both roots
    p = gf256.poly_multiply([1, 1], [1, 2])
    assert p.tolist() == [1, 3, 2]
    assert gf256.poly_evaluate(p, 1) == 0
    assert gf256.poly_evaluate(p, 2) == 0
    assert gf256.poly_evaluate(p, 0) == 2


def test_poly_remainder_requires_monic_divisor():
    with pytest.raises(ValueError):
        gf256.poly_remainder([1, 2, 3], [2, 1])


def test_poly_remainder_of_multiple_is_zero():
    divisor = gf256.poly_multiply([1, 1], [1, 2])
    rem = gf256.poly_remainder([5, 9, 0], divisor)
    # message * x^2 + remainder is divisible by the divisor
    codeword = [5, 9, 0] + rem.tolist()
    assert gf256.poly_evaluate(codeword, 1) == 0
    assert gf256.poly_evaluate(codeword, 2) == 0
