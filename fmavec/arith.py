#
# Exact arithmetic and correct rounding to binary formats
#
# (c) Neil Booth 2007-2021.  All rights reserved.
#

from fractions import Fraction
from math import floor

from .values import (
    ExactValue, SignedFloat, ValueKind, make_infinity,
    ROUND_HALF_EVEN, ROUND_CEILING, ROUND_FLOOR, ROUND_DOWN,
)


__all__ = ('round_value', 'times', 'plus', 'minus', 'negate', 'fma',
           'binade', 'largest_finite', 'smallest_subnormal', 'is_representable')


HALF = Fraction(1, 2)


def scale(value, exponent):
    '''Return value * 2^exponent exactly.'''
    if exponent >= 0:
        return Fraction(value) * (1 << exponent)
    return Fraction(value) / (1 << -exponent)


def binade(magnitude):
    '''Return the exponent e such that 2^(e-1) <= magnitude < 2^e.  magnitude is a
    positive Fraction.

    A power of two lies at the bottom of its binade, so 1 has exponent 1 and a mantissa
    of 1/2.
    '''
    exponent = magnitude.numerator.bit_length() - magnitude.denominator.bit_length()
    # Now 2^(exponent-1) < magnitude < 2^(exponent+1)
    if magnitude >= scale(1, exponent):
        exponent += 1
    return exponent


def _finite(sign, magnitude):
    return SignedFloat(sign, ExactValue.number(magnitude))


def largest_finite(fmt, sign):
    '''Return the finite number of maximal magnitude with the given sign.'''
    bits = fmt.mantissa_bits
    return _finite(sign, scale((1 << bits) - 1, fmt.max_exp - bits))


def smallest_subnormal(fmt, sign):
    '''Return the smallest non-zero magnitude with the given sign.'''
    return _finite(sign, scale(1, fmt.min_exp - fmt.mantissa_bits))


def round_value(f, fmt, rounding):
    '''Return f rounded to the format fmt with the given rounding mode.

    NaNs and infinities are returned unchanged.  Finite values round to a finite value of
    the format, a zero, or an infinity; the sign of the input is kept.
    '''
    if f.value.kind != ValueKind.NUM:
        return f

    sign = f.sign
    magnitude = f.value.magnitude
    bits = fmt.mantissa_bits

    exponent = binade(magnitude) if magnitude else 0

    # Subnormals lose a bit of precision for every binade below the normal range
    denorm = fmt.min_exp - exponent
    if denorm > 0:
        bits -= denorm
    # Beyond the smallest subnormal; only a rounding increment can leave a non-zero
    if bits < 0:
        exponent -= bits
        bits = 0

    mant = scale(magnitude, bits - exponent)
    ipart = floor(mant)
    fpart = mant - ipart

    if rounding == ROUND_HALF_EVEN:
        if fpart > HALF or (fpart == HALF and ipart & 1):
            ipart += 1
    elif rounding == ROUND_CEILING:
        if not sign:
            if fpart:
                ipart += 1
        elif exponent > fmt.max_exp:
            return largest_finite(fmt, sign)
    elif rounding == ROUND_FLOOR:
        if sign:
            if fpart:
                ipart += 1
        elif exponent > fmt.max_exp:
            return largest_finite(fmt, sign)
    elif rounding == ROUND_DOWN:
        if exponent > fmt.max_exp:
            return largest_finite(fmt, sign)
    else:
        raise ValueError(f'unknown rounding mode {rounding!r}')

    mant = Fraction(ipart, 1 << bits)
    # Rounding carried out of the significand
    if mant >= 1:
        exponent += 1
        mant /= 2

    if exponent > fmt.max_exp:
        return make_infinity(sign)

    return _finite(sign, scale(mant, exponent))


def is_representable(f, fmt):
    '''Return True if f is a value of the format.  NaNs and infinities always are.'''
    return round_value(f, fmt, ROUND_HALF_EVEN) == f


def negate(a):
    return a.copy_negate()


def times(a, b):
    '''Return the exact product of a and b.  Nothing is rounded.'''
    sign = a.sign ^ b.sign

    if a.is_nan():
        return a
    if b.is_nan():
        return b

    if a.is_infinite():
        if b.is_zero():
            return SignedFloat(sign, ExactValue.nan())
        return make_infinity(sign)
    if b.is_infinite():
        if a.is_zero():
            return SignedFloat(sign, ExactValue.nan())
        return make_infinity(sign)

    product = a.value.magnitude * b.value.magnitude
    return SignedFloat(sign, ExactValue.number(product))


def plus(a, b):
    '''Return the exact sum of a and b.  Nothing is rounded.

    Adding opposite-signed infinities gives a NaN with its sign bit set, the NaN the
    reference vectors record.  A sum that cancels exactly to zero takes the sign of a.
    '''
    if a.is_nan():
        return a
    if b.is_nan():
        return b

    if a.is_infinite():
        if b.is_infinite() and a.sign != b.sign:
            return SignedFloat(True, ExactValue.nan())
        return a
    if b.is_infinite():
        return b

    total = a.as_fraction() + b.as_fraction()
    sign = a.sign if total == 0 else total < 0
    return SignedFloat(sign, ExactValue.number(total))


def minus(a, b):
    '''Return the exact difference a - b.'''
    return plus(a, negate(b))


def fma(x, y, z):
    '''Return x * y + z computed exactly.  The caller rounds the result once.'''
    return plus(times(x, y), z)
