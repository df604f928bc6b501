'''
Numeric records in Compact RINEX are Nth-order differences
from previous records.

A value such as the F14.3 field `  23619095.450' is carried as the exact
integer 23619095450 (scaled by 10**decimals); arithmetic never goes through
floating point.  Each series keeps the last differences at every order
0..k in a DifferenceState.  On the wire a symbol is either
    `k&value'   reset: value is absolute, series restarts with order k
    `value'     the k-th difference (fewer while the series warms up)
    `'          blank field, state left alone
'''

import re
from decimal import Decimal

import numpy as np

from .errors import RinexFormatError, DecodeStateError, DifferenceOverflowError

INT64 = np.iinfo(np.int64)

NUMBER = re.compile(r'^([+-]?)(\d*)(?:\.(\d*))?$')
TOKEN = re.compile(r'^(?:(\d)&)?([+-]?\d+)$')


def checked(value):
    '''Raise DifferenceOverflowError unless value fits in a signed 64-bit int.'''
    if not INT64.min <= value <= INT64.max:
        raise DifferenceOverflowError('Scaled value %d exceeds 64 bits' % value)
    return value


def scale(text, decimals):
    '''Turn fixed-point text into an exact scaled integer; None if blank.'''
    s = text.strip()
    if not s:
        return None
    match = NUMBER.match(s)
    if match is None or not (match.group(2) or match.group(3)):
        raise RinexFormatError('Non-numeric content ' + repr(text))
    sign, whole, frac = match.groups()
    frac = frac or ''
    if len(frac) > decimals:
        raise RinexFormatError('More than %d decimals in %r' % (decimals, text))
    scaled = int((whole or '0') + frac.ljust(decimals, '0'))
    return checked(-scaled if sign == '-' else scaled)


def fixed(scaled, decimals):
    '''Format a scaled integer as fixed-point text, e.g. -353 -> -0.353'''
    sign = '-' if scaled < 0 else ''
    whole, frac = divmod(abs(scaled), 10 ** decimals)
    if decimals:
        return '%s%d.%0*d' % (sign, whole, decimals, frac)
    return '%s%d' % (sign, whole)


def parse_token(token):
    '''Split a compact numeric field into (order, symbol).

    order is None for a plain difference; for `k&value' it is k.
    A blank token gives (None, None).
    '''
    if not token:
        return None, None
    match = TOKEN.match(token)
    if match is None:
        raise RinexFormatError('Non-numeric content ' + repr(token))
    order = match.group(1)
    return (None if order is None else int(order)), checked(int(match.group(2)))


def format_token(symbol, order=None):
    if order is None:
        return str(symbol)
    return '%d&%d' % (order, symbol)


class DifferenceState(object):
    '''
    Differencing history of one series (one satellite and observable).

    `order' is the maximum difference order, `diffs' the differences of the
    last sample at orders 0..min(count - 1, order), `count' how many
    samples the series has seen since it was (re)started.
    '''
    def __init__(self, order=3):
        if not 0 <= order <= 9:
            raise ValueError('Difference order must be a single digit')
        self.order = order
        self.diffs = []
        self.count = 0

    def reset(self, order=None):
        '''Forget history; the next sample is absolute.'''
        if order is not None:
            if not 0 <= order <= 9:
                raise ValueError('Difference order must be a single digit')
            self.order = order
        self.diffs = []
        self.count = 0

    @property
    def empty(self):
        return not self.count

    def get(self):
        '''The last reconstructed (scaled) value, or None.'''
        if self.diffs:
            return self.diffs[0]
        return None

    def __repr__(self):
        return 'DifferenceState(order=%d, count=%d, diffs=%r)' % (
            self.order, self.count, self.diffs)


class NumericDifferenceCodec(object):
    '''
    Order-k differencing of one scalar series over scaled integers.

    While a series warms up (fewer than order + 1 samples) the effective
    order is the number of samples seen so far.
    '''
    def __init__(self, decimals=3):
        self.decimals = decimals

    def scale(self, text):
        return scale(text, self.decimals)

    def unscale(self, scaled):
        '''Exact value of a scaled integer, as a Decimal.'''
        return Decimal(scaled).scaleb(-self.decimals)

    def fixed(self, scaled):
        return fixed(scaled, self.decimals)

    def encode(self, scaled, state):
        '''Push a new value into state, returning the symbol to transmit.'''
        checked(scaled)
        m = min(state.count, state.order)
        new = [scaled]
        for i in range(1, m + 1):
            new.append(checked(new[i - 1] - state.diffs[i - 1]))
        state.diffs = new
        state.count += 1
        return new[m]

    def decode(self, symbol, state, absolute=False):
        '''Reconstruct the next scaled value of the series from a symbol.

        With absolute=True the state is restarted and symbol is the value.
        '''
        checked(symbol)
        if absolute:
            state.reset()
        elif state.empty:
            raise DecodeStateError('Difference received with no prior value')
        m = min(state.count, state.order)
        new = [0] * m + [symbol]
        for i in range(m, 0, -1):
            new[i - 1] = checked(new[i] + state.diffs[i - 1])
        state.diffs = new
        state.count += 1
        return new[0]
