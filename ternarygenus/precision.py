r"""

Numeric precision strategies

A genus is built either with exact arithmetic over ZZ (the default) or with
machine integers of a fixed width. The fixed-width strategy wraps around
silently just like machine arithmetic does; the neighbor construction detects
this afterwards and raises PrecisionOverflowError.

AUTHORS:

- Brandon Williams

"""

# ****************************************************************************
#       Copyright (C) 2020-2024 Brandon Williams
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 2 of the License, or
# (at your option) any later version.
#                  https://www.gnu.org/licenses/
# ****************************************************************************

import numpy

from sage.matrix.constructor import matrix
from sage.rings.integer import Integer
from sage.rings.integer_ring import ZZ

from .errors import PrecisionOverflowError

_dtypes = {8: numpy.int8, 16: numpy.int16, 32: numpy.int32, 64: numpy.int64}


class ArbitraryPrecision(object):
    r"""
    Exact arithmetic over ZZ.

    EXAMPLES::

        sage: from ternarygenus import *
        sage: P = ArbitraryPrecision()
        sage: P.fits(2**200)
        True
    """

    def __repr__(self):
        return 'Arbitrary precision'

    def __eq__(self, other):
        return isinstance(other, ArbitraryPrecision)

    def __hash__(self):
        return hash('arbitrary')

    def bits(self):
        return None

    def fits(self, x):
        return True

    def coerce(self, x):
        return ZZ(x)

    def gram_product(self, S, G):
        r"""
        Return S.transpose() * G * S.
        """
        return S.transpose() * G * S


class FixedWidthPrecision(object):
    r"""
    Signed machine integers of a fixed width.

    INPUT:
    - ``bits`` -- one of 8, 16, 32, 64 (default 64)

    EXAMPLES::

        sage: from ternarygenus import *
        sage: P = FixedWidthPrecision(8)
        sage: P.fits(127), P.fits(128)
        (True, False)
        sage: P.coerce(200)
        Traceback (most recent call last):
        ...
        ternarygenus.errors.PrecisionOverflowError: 200 does not fit in 8 bits
    """

    def __init__(self, bits = 64):
        bits = Integer(bits)
        if bits not in _dtypes:
            raise ValueError('Unsupported width: %s'%bits)
        self.__bits = bits
        self.__dtype = _dtypes[bits]
        self.__bound = Integer(2) ** (bits - 1)

    def __repr__(self):
        return 'Fixed width precision (%s bits)'%self.__bits

    def __eq__(self, other):
        return isinstance(other, FixedWidthPrecision) and self.bits() == other.bits()

    def __hash__(self):
        return hash(('fixed', self.__bits))

    def bits(self):
        return self.__bits

    def fits(self, x):
        return -self.__bound <= x < self.__bound

    def coerce(self, x):
        if not self.fits(x):
            raise PrecisionOverflowError('%s does not fit in %s bits'%(x, self.__bits))
        return ZZ(x)

    def _array(self, A):
        return numpy.array([[int(self.coerce(x)) for x in r] for r in A.rows()], dtype = self.__dtype)

    def gram_product(self, S, G):
        r"""
        Return S.transpose() * G * S computed with wrapping fixed-width integers.
        """
        s = self._array(S)
        g = self._array(G)
        with numpy.errstate(over = 'ignore'):
            h = s.transpose().dot(g).dot(s)
        return matrix(ZZ, [[int(x) for x in r] for r in h])


def precision_strategy(x = None):
    r"""
    Normalize a precision specification.

    INPUT:
    - ``x`` -- None or 'arbitrary' (exact arithmetic), 'int8', 'int16', 'int32', 'int64', an integer width, or a strategy instance

    EXAMPLES::

        sage: from ternarygenus import *
        sage: precision_strategy('int32')
        Fixed width precision (32 bits)
        sage: precision_strategy()
        Arbitrary precision
    """
    if x is None:
        return ArbitraryPrecision()
    if isinstance(x, (ArbitraryPrecision, FixedWidthPrecision)):
        return x
    if isinstance(x, str):
        if x == 'arbitrary':
            return ArbitraryPrecision()
        if x.startswith('int'):
            try:
                return FixedWidthPrecision(int(x[3:]))
            except ValueError:
                pass
        raise ValueError('Unknown precision: %s'%x)
    return FixedWidthPrecision(x)
