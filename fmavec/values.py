#
# Exact values, signed floats and binary format descriptors
#
# (c) Neil Booth 2007-2021.  All rights reserved.
#

from decimal import Decimal
from enum import IntEnum
from fractions import Fraction
from math import copysign, isinf, isnan
from typing import NamedTuple

import attr


__all__ = ('ValueKind', 'RoundingMode', 'ExactValue', 'SignedFloat', 'FormatDescriptor',
           'ROUND_HALF_EVEN', 'ROUND_CEILING', 'ROUND_FLOOR', 'ROUND_DOWN', 'ALL_ROUNDINGS',
           'make', 'make_nan', 'make_infinity', 'make_zero',
           'IEEEsingle', 'IEEEdouble', 'x87extended', 'IEEEquad', 'FORMATS')


class ValueKind(IntEnum):
    NUM = 0
    NAN = 1
    INF = 2


class RoundingMode(IntEnum):
    ROUND_HALF_EVEN = 0     # To nearest with ties towards even
    ROUND_CEILING = 1       # Towards +infinity
    ROUND_FLOOR = 2         # Towards -infinity
    ROUND_DOWN = 3          # Towards zero


ROUND_HALF_EVEN = RoundingMode.ROUND_HALF_EVEN
ROUND_CEILING = RoundingMode.ROUND_CEILING
ROUND_FLOOR = RoundingMode.ROUND_FLOOR
ROUND_DOWN = RoundingMode.ROUND_DOWN

# The order in which rounded results appear in a vector row
ALL_ROUNDINGS = (ROUND_HALF_EVEN, ROUND_CEILING, ROUND_FLOOR, ROUND_DOWN)


def _to_magnitude(value):
    if isinstance(value, (int, Fraction, Decimal)):
        return abs(Fraction(value))
    raise TypeError(f'cannot hold {type(value).__name__} exactly')


@attr.s(slots=True, frozen=True)
class ExactValue:
    '''A real number held without rounding, or a NaN, or an infinity.

    Only NUM values have a magnitude, a non-negative Fraction.  The owning SignedFloat
    carries the sign, so a negative number given to the constructor loses its sign.
    '''

    kind = attr.ib(validator=attr.validators.instance_of(ValueKind))
    magnitude = attr.ib(default=0, converter=_to_magnitude)

    @classmethod
    def number(cls, value):
        return cls(ValueKind.NUM, value)

    @classmethod
    def nan(cls):
        return cls(ValueKind.NAN)

    @classmethod
    def infinity(cls):
        return cls(ValueKind.INF)


@attr.s(slots=True, frozen=True, repr=False)
class SignedFloat:
    '''An exact value with an explicit sign bit, so that zeroes, NaNs and infinities are
    signed as IEEE-754 requires.'''

    sign = attr.ib(converter=bool)
    value = attr.ib(validator=attr.validators.instance_of(ExactValue))

    def is_finite(self):
        return self.value.kind == ValueKind.NUM

    def is_nan(self):
        return self.value.kind == ValueKind.NAN

    def is_infinite(self):
        return self.value.kind == ValueKind.INF

    def is_zero(self):
        return self.value.kind == ValueKind.NUM and self.value.magnitude == 0

    def as_fraction(self):
        '''Return the signed exact value of a finite number.  Zeroes of either sign are 0.'''
        if self.value.kind != ValueKind.NUM:
            raise ValueError(f'{self!r} has no exact value')
        magnitude = self.value.magnitude
        return -magnitude if self.sign else magnitude

    def copy_negate(self):
        return SignedFloat(not self.sign, self.value)

    def __repr__(self):
        kind = self.value.kind
        sign = '-' if self.sign else '+'
        if kind == ValueKind.NAN:
            return f'<SignedFloat {sign}nan>'
        if kind == ValueKind.INF:
            return f'<SignedFloat {sign}inf>'
        return f'<SignedFloat {sign}{self.value.magnitude}>'


def make(literal):
    '''Lift a Python number to a SignedFloat.  The sign follows the literal's algebraic
    sign; +0 has a clear sign bit.  Floats keep their sign bit, so -0.0 is a negative
    zero, and float infinities and NaNs map to the matching variants.'''
    if isinstance(literal, bool):
        raise TypeError('booleans are not numbers here')
    if isinstance(literal, float):
        sign = copysign(1.0, literal) < 0
        if isnan(literal):
            return SignedFloat(sign, ExactValue.nan())
        if isinf(literal):
            return SignedFloat(sign, ExactValue.infinity())
        value = Fraction(literal)
    elif isinstance(literal, Decimal):
        if literal.is_nan():
            return SignedFloat(literal.is_signed(), ExactValue.nan())
        if literal.is_infinite():
            return SignedFloat(literal.is_signed(), ExactValue.infinity())
        sign = literal.is_signed()
        value = Fraction(literal)
    elif isinstance(literal, (int, Fraction)):
        value = Fraction(literal)
        sign = value < 0
    else:
        raise TypeError(f'cannot make a SignedFloat from {type(literal).__name__}')
    return SignedFloat(sign, ExactValue.number(value))


def make_nan(sign=False):
    return SignedFloat(sign, ExactValue.nan())


def make_infinity(sign=False):
    return SignedFloat(sign, ExactValue.infinity())


def make_zero(sign=False):
    return SignedFloat(sign, ExactValue.number(0))


class FormatDescriptor(NamedTuple):
    '''A binary floating point format given by its significand and exponent widths.  Only
    instantiate through from_pair().

    mantissa_bits is the number of bits in the significand including the integer bit.

    Finite values are m * 2^e with m in [1/2, 1).  min_exp is the smallest e of a normal
    number; smaller exponents are subnormal and lose precision.  max_exp is the largest e
    of a finite number.
    '''

    mantissa_bits: int
    exponent_bits: int

    # Functions of the two values above
    min_exp: int
    max_exp: int

    # Identifier used for emitted tables and command line selection, and the C literal
    # suffix of the format
    name: str
    suffix: str

    @classmethod
    def from_pair(cls, mantissa_bits, exponent_bits, name='', suffix=''):
        '''Make a FormatDescriptor with pre-calculated exponent bounds.'''
        if not all(isinstance(arg, int) for arg in (mantissa_bits, exponent_bits)):
            raise TypeError('mantissa_bits and exponent_bits must be integers')
        if mantissa_bits < 2:
            raise ValueError('mantissa_bits must be at least 2')
        if exponent_bits < 3:
            raise ValueError('exponent_bits must be at least 3')
        max_exp = 1 << (exponent_bits - 1)
        min_exp = 3 - max_exp
        name = name or f'binary{mantissa_bits}e{exponent_bits}'
        return cls(mantissa_bits, exponent_bits, min_exp, max_exp, name, suffix)

    def __repr__(self):
        return (f'FormatDescriptor(mantissa_bits={self.mantissa_bits}, '
                f'exponent_bits={self.exponent_bits})')

    def __eq__(self, other):
        '''Return True if two formats have the same widths.'''
        return (isinstance(other, FormatDescriptor) and
                (self.mantissa_bits, self.exponent_bits)
                == (other.mantissa_bits, other.exponent_bits))

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((self.mantissa_bits, self.exponent_bits))


#
# Predefined formats
#

IEEEsingle = FormatDescriptor.from_pair(24, 8, 'single', 'f')
IEEEdouble = FormatDescriptor.from_pair(53, 11, 'double', '')
# 80387 extended precision; the significand has an explicit integer bit
x87extended = FormatDescriptor.from_pair(64, 15, 'extended', 'l')
IEEEquad = FormatDescriptor.from_pair(113, 15, 'quad', 'q')

FORMATS = {fmt.name: fmt for fmt in (IEEEsingle, IEEEdouble, x87extended, IEEEquad)}
