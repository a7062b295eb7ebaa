r"""

Rational isometries between ternary forms

An Isometry is an integral 3x3 matrix S. The denominator is not stored:
if q1(S*x) = d^2 * q2(x) then S/d is an isometry from q2 to q1 and the genus
keeps track of d through the primes at which neighbors were taken.

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

from sage.matrix.constructor import matrix
from sage.matrix.special import identity_matrix
from sage.rings.integer_ring import ZZ


class Isometry(object):
    r"""
    This class represents integral matrices that are isometries up to scaling.

    EXAMPLES::

        sage: from ternarygenus import *
        sage: S = Isometry([[1, 1, 0], [0, 1, 0], [0, 0, 1]])
        sage: T = S * S
        sage: T.matrix()
        [1 2 0]
        [0 1 0]
        [0 0 1]
        sage: (S * S.scaled_inverse(1)) == Isometry.identity()
        True
    """

    def __init__(self, M):
        M = matrix(ZZ, M)
        if M.dimensions() != (3, 3):
            raise ValueError('An isometry is a 3x3 matrix.')
        M.set_immutable()
        self.__matrix = M

    def __repr__(self):
        return 'Isometry with matrix\n%s'%str(self.__matrix)

    def __eq__(self, other):
        if not isinstance(other, Isometry):
            return False
        return self.__matrix == other.matrix()

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash(self.__matrix)

    def __mul__(self, other):
        r"""
        Composition: (S * T)(x) = S(T(x)).
        """
        return Isometry(self.__matrix * other.matrix())

    def __call__(self, v):
        return self.__matrix * v

    @staticmethod
    def identity():
        return Isometry(identity_matrix(ZZ, 3))

    def matrix(self):
        return self.__matrix

    def determinant(self):
        return self.__matrix.determinant()

    def trace(self):
        return self.__matrix.trace()

    def scaled_inverse(self, p):
        r"""
        Return the isometry p^2 * self^(-1).

        If self comes from a p-neighbor step (so q1(self*x) = p^2 * q2(x)) then the result is integral and q2(result*x) = p^2 * q1(x).
        """
        X = p * p * self.__matrix.inverse()
        if X.denominator() != 1:
            raise ValueError('The matrix %s is not invertible with denominator %s.'%(self.__matrix.list(), p))
        return Isometry(X.change_ring(ZZ))

    def is_isometry(self, q1, q2, scale):
        r"""
        Determine whether q1(self*x) = scale^2 * q2(x).
        """
        S = self.__matrix
        return S.transpose() * q1.gram_matrix() * S == scale * scale * q2.gram_matrix()
