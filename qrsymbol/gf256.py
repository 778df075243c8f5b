"""
Arithmetic in GF(2^8) as used by QR Code Reed-Solomon coding.

The field is built from the primitive polynomial x^8 + x^4 + x^3 + x^2 + 1
(0x11D) with generator alpha = 2. Multiplication and division go through
precomputed exponent and logarithm tables held in NumPy arrays, so that a
whole polynomial can be scaled by a field element in one vectorised step.

Polynomials are NumPy ``uint8`` arrays with the highest-degree coefficient
first, which is also the order in which codewords appear in a block.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np


PRIMITIVE_POLY = 0x11D
GENERATOR = 0x02

Poly = Union[np.ndarray, Sequence[int]]


def _build_tables() -> tuple[np.ndarray, np.ndarray]:
    exp = np.zeros(512, dtype=np.int64)
    log = np.zeros(256, dtype=np.int64)
    x = 1
    for i in range(255):
        exp[i] = x
        log[x] = i
        x <<= 1
        if x & 0x100:
            x ^= PRIMITIVE_POLY
    # Second copy lets log sums index without a modulo
    exp[255:510] = exp[:255]
    return exp, log


EXP, LOG = _build_tables()
EXP.setflags(write=False)
LOG.setflags(write=False)


def multiply(a: int, b: int) -> int:
    if a == 0 or b == 0:
        return 0
    return int(EXP[LOG[a] + LOG[b]])


def divide(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError("division by zero in GF(256)")
    if a == 0:
        return 0
    return int(EXP[(LOG[a] - LOG[b]) % 255])


def power(a: int, n: int) -> int:
    """Raise `a` to the integer power `n`."""
    if a == 0:
        return 0 if n > 0 else 1
    return int(EXP[(LOG[a] * n) % 255])


def inverse(a: int) -> int:
    if a == 0:
        raise ZeroDivisionError("zero has no inverse in GF(256)")
    return int(EXP[255 - LOG[a]])


def scale(poly: Poly, factor: int) -> np.ndarray:
    """Multiply every coefficient of `poly` by the field element `factor`."""
    coeffs = np.asarray(poly, dtype=np.int64)
    if factor == 0:
        return np.zeros(coeffs.shape, dtype=np.uint8)
    out = EXP[LOG[coeffs] + LOG[factor]]
    out[coeffs == 0] = 0
    return out.astype(np.uint8)


def poly_multiply(p: Poly, q: Poly) -> np.ndarray:
    """Product of two polynomials."""
    p = np.asarray(p, dtype=np.uint8)
    q = np.asarray(q, dtype=np.uint8)
    result = np.zeros(len(p) + len(q) - 1, dtype=np.uint8)
    for i, coef in enumerate(p):
        result[i:i + len(q)] ^= scale(q, int(coef))
    return result


def poly_remainder(dividend: Poly, divisor: Poly) -> np.ndarray:
    """
    Remainder of `dividend` * x^n divided by the monic `divisor`.

    Parameters
    ----------
    dividend : array_like of int
        Message coefficients, highest degree first.
    divisor : array_like of int
        Monic polynomial of degree n, highest degree first (the leading
        coefficient must be 1).

    Returns
    -------
    numpy.ndarray
        The n remainder coefficients, highest degree first.
    """
    divisor = np.asarray(divisor, dtype=np.uint8)
    if divisor[0] != 1:
        raise ValueError("divisor must be monic")
    tail = divisor[1:]
    remainder = np.zeros(len(tail), dtype=np.uint8)
    for coef in np.asarray(dividend, dtype=np.uint8):
        factor = int(coef) ^ int(remainder[0])
        remainder = np.concatenate((remainder[1:], np.zeros(1, dtype=np.uint8)))
        if factor:
            remainder ^= scale(tail, factor)
    return remainder


def poly_evaluate(poly: Poly, x: int) -> int:
    """Evaluate `poly` at `x` with Horner's rule."""
    result = 0
    for coef in np.asarray(poly, dtype=np.uint8):
        result = multiply(result, x) ^ int(coef)
    return result
