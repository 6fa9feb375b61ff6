#
# Fused multiply-add reference vectors
#
# (c) Neil Booth 2007-2021.  All rights reserved.
#

from typing import NamedTuple

import attr

from .arith import binade, fma, round_value, scale
from .values import ALL_ROUNDINGS, ROUND_HALF_EVEN, make


__all__ = ('Row', 'TextFormat', 'DefaultTextFormat',
           'first_exp', 'last_exp', 'next_exp', 'exponents', 'boundary_value', 'operand',
           'generate', 'column_width', 'format_value', 'format_row', 'emit_table')


class Row(NamedTuple):
    '''One test vector: the operands and the FMA result under each rounding mode.'''

    x: object
    y: object
    z: object
    nearest: object
    upward: object
    downward: object
    toward_zero: object

    def operands(self):
        return self.x, self.y, self.z

    def results(self):
        '''Return a dictionary of rounded results keyed by rounding mode.'''
        return dict(zip(ALL_ROUNDINGS, self[3:]))


@attr.s(slots=True, kw_only=True, frozen=True)
class TextFormat:
    '''Controls how values are written as C floating literals.'''

    # If True positive exponents display a '+'.
    force_exp_sign = attr.ib(default=True)
    # If True, the hex indicator 'x', the exponent character 'p' and hexadecimal digits
    # are in upper case.  The literal suffix and the nan and inf tokens are unchanged.
    upper_case = attr.ib(default=False)
    # If True, trailing insignificant zeroes of the significand are stripped
    rstrip_zeroes = attr.ib(default=False)
    # The strings output for infinity and NaN; a leading '-' is added for negative ones
    inf = attr.ib(default='inf')
    nan = attr.ib(default='nan')

    def exponent_str(self, exponent):
        '''Return the formatted exponent.'''
        sign = '-' if exponent < 0 else '+' if self.force_exp_sign else ''
        return f'{sign}{abs(exponent)}'

    def format_non_finite(self, value):
        '''Return the token for an infinity or NaN.'''
        special = self.inf if value.is_infinite() else self.nan
        return ('-' if value.sign else '') + special

    def format_hex(self, value, fmt):
        '''Return the finite value, which must be a value of fmt, as a normalized
        hexadecimal literal without suffix.  Zeroes are written as 0.0.'''
        sign = '-' if value.sign else ''
        magnitude = value.value.magnitude
        if magnitude == 0:
            return f'{sign}0.0'

        # The leading 1 is at 2^exponent; subnormals are normalized too
        exponent = binade(magnitude) - 1
        significand = scale(magnitude, fmt.mantissa_bits - 1 - exponent)
        if significand.denominator != 1:
            raise ValueError(f'{value!r} is not a value of {fmt!r}')
        # Shift the significand left up to 3 bits so that the integer bit is a hex digit
        # of its own
        significand = significand.numerator << ((fmt.mantissa_bits & 3) ^ 1)
        hex_sig = f'{significand:x}'
        if self.rstrip_zeroes:
            hex_sig = hex_sig.rstrip('0')
        if len(hex_sig) > 1:
            hex_sig = hex_sig[0] + '.' + hex_sig[1:]

        result = f'{sign}0x{hex_sig}p{self.exponent_str(exponent)}'
        if self.upper_case:
            result = result.upper()
        return result

    def to_string(self, value, fmt):
        if not value.is_finite():
            return self.format_non_finite(value)
        return self.format_hex(value, fmt) + fmt.suffix


DefaultTextFormat = TextFormat()


#
# Exponent walk
#

def first_exp(fmt):
    '''The lowest operand exponent; it lies below half the smallest subnormal.'''
    return fmt.min_exp - fmt.mantissa_bits - 2


def last_exp(fmt):
    '''The highest operand exponent; operands there overflow.'''
    return fmt.max_exp


def next_exp(exponent, fmt):
    '''Return the operand exponent following exponent, or None after the last.

    The walk covers three exponents around the smallest subnormal, then jumps to four
    around the subnormal/normal transition, then to the binades either side of 1, then to
    the top three binades.  Jumps never go backwards, so formats too narrow for separate
    ranges are walked linearly.
    '''
    if exponent == first_exp(fmt) + 2:
        result = fmt.min_exp - 2
    elif exponent == fmt.min_exp + 1:
        result = -1
    elif exponent == 1:
        result = fmt.max_exp - 2
    else:
        result = exponent + 1
    result = max(result, exponent + 1)
    return result if result <= last_exp(fmt) else None


def exponents(fmt):
    '''Yield the operand exponents in walk order.'''
    exponent = first_exp(fmt)
    while exponent is not None:
        yield exponent
        exponent = next_exp(exponent, fmt)


def boundary_value(fmt):
    '''1 + 2^-(bits-1): one unit in the last place above 1.  Its square and its sums land
    on rounding ties.'''
    return 1 + scale(1, 1 - fmt.mantissa_bits)


def operand(fmt, negative, exponent):
    '''Return the boundary value scaled by 2^exponent and rounded to nearest in fmt.'''
    value = scale(boundary_value(fmt), exponent)
    return round_value(make(-value if negative else value), fmt, ROUND_HALF_EVEN)


def generate(fmt):
    '''Yield a Row for every combination of z sign, z exponent, y exponent, x sign and x
    exponent, in that nesting order.  y is always positive.'''
    walk = list(exponents(fmt))
    signs = (False, True)
    operands = {(negative, exponent): operand(fmt, negative, exponent)
                for negative in signs for exponent in walk}

    for z_sign in signs:
        for z_exp in walk:
            z = operands[z_sign, z_exp]
            for y_exp in walk:
                y = operands[False, y_exp]
                for x_sign in signs:
                    for x_exp in walk:
                        x = operands[x_sign, x_exp]
                        exact = fma(x, y, z)
                        yield Row(x, y, z, *(round_value(exact, fmt, rounding)
                                             for rounding in ALL_ROUNDINGS))


#
# Output
#

def column_width(fmt, text_format=None):
    '''The length of the longest finite literal of the format.'''
    text_format = text_format or DefaultTextFormat
    sig_digits = (fmt.mantissa_bits + 6) // 4
    exp_len = max(len(text_format.exponent_str(fmt.min_exp - fmt.mantissa_bits)),
                  len(text_format.exponent_str(fmt.max_exp - 1)))
    # sign, "0x", integer digit, point, fraction digits, "p", exponent, suffix
    return 1 + 2 + 1 + 1 + (sig_digits - 1) + 1 + exp_len + len(fmt.suffix)


def format_value(value, fmt, text_format=None):
    text_format = text_format or DefaultTextFormat
    return text_format.to_string(value, fmt)


def format_row(row, fmt, text_format=None):
    '''Return the row as one line of a C initializer with fixed-width columns.'''
    text_format = text_format or DefaultTextFormat
    width = column_width(fmt, text_format)
    fields = [text_format.to_string(value, fmt) for value in row]
    cells = [(field + ',').ljust(width + 1) for field in fields[:-1]]
    cells.append(fields[-1].ljust(width))
    return '    { ' + ' '.join(cells) + ' },'


def emit_table(fmt, file, text_format=None):
    '''Write the vectors of fmt to file as a C array definition.  Return the number of
    rows written.'''
    text_format = text_format or DefaultTextFormat
    count = 0
    file.write(f'/* fma vectors for {fmt.name}: {fmt.mantissa_bits}-bit significand, '
               f'{fmt.exponent_bits}-bit exponent */\n')
    file.write('/* x, y, z, to nearest even, upward, downward, toward zero */\n')
    file.write(f'static const struct fma_vec_{fmt.name} fma_vec_{fmt.name}[] = {{\n')
    for row in generate(fmt):
        file.write(format_row(row, fmt, text_format))
        file.write('\n')
        count += 1
    file.write('};\n')
    return count
