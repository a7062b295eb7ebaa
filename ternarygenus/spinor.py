r"""

Spinor norms of rational isometries of ternary forms

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

from sage.matrix.special import identity_matrix
from sage.rings.integer_ring import ZZ

class Spinor(object):
    r"""
    Spinor characters attached to the primes dividing a discriminant.

    For a proper rotation sigma = S/scalar of a ternary form, the spinor norm is (1 + tr(sigma)) modulo squares,
    unless sigma is a half-turn (tr(sigma) = -1). A half-turn about the axis v has spinor norm disc * q(v).
    The value returned by norm() is a bit-vector whose i-th bit is the parity of the valuation of the spinor norm at
    the i-th prime. Since the scalars that occur are products of primes not dividing the discriminant, we may
    use scalar + tr(S) in place of 1 + tr(S/scalar).

    INPUT:
    - ``primes`` -- a list of primes

    EXAMPLES::

        sage: from ternarygenus import *
        sage: spin = Spinor([2, 3])
        sage: q = TernaryForm([1, 1, 1, 0, 0, 0])
        sage: spin.norm(q, Isometry.identity(), 1)
        0
        sage: s = Isometry([[0, -1, 0], [1, 0, 0], [0, 0, 1]])
        sage: spin.norm(q, s, 1)
        1
        sage: spin.character(3, 1), spin.character(3, 3)
        (-1, 1)
    """

    def __init__(self, primes):
        self.__primes = [ZZ(p) for p in primes]

    def __repr__(self):
        return 'Spinor characters at the primes %s'%self.__primes

    def primes(self):
        return self.__primes

    def _compute_vals(self, x):
        val = 0
        mask = 1
        for p in self.__primes:
            if x.valuation(p) % 2:
                val ^= mask
            mask <<= 1
        return val

    def norm(self, q, s, scalar):
        r"""
        Compute the spinor character values of the isometry s/scalar of q.

        INPUT:
        - ``q`` -- a TernaryForm
        - ``s`` -- an Isometry with q(s*x) = scalar^2 * q(x) and positive determinant
        - ``scalar`` -- an integer

        OUTPUT: an integer whose i-th bit is 1 if the spinor norm has odd valuation at the i-th prime
        """
        scalar = ZZ(scalar)
        x = s.trace() + scalar
        if x:
            return self._compute_vals(x)
        A = s.matrix() + scalar * identity_matrix(ZZ, 3)
        v = next(v for v in A.columns() if v)
        return self._compute_vals(q.discriminant() * q(v))

    @staticmethod
    def character(vals, mask):
        r"""
        Return (-1)^(number of primes selected by both vals and mask).
        """
        return 1 - 2 * (bin(vals & mask).count('1') % 2)
