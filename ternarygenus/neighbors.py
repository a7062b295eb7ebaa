r"""

Kneser p-neighbors of ternary forms

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

import random

from itertools import product

from sage.matrix.constructor import matrix
from sage.matrix.special import identity_matrix
from sage.modules.free_module_element import vector
from sage.rings.finite_rings.finite_field_constructor import FiniteField as GF
from sage.rings.integer_ring import ZZ

from .errors import GenusConsistencyError, PrecisionOverflowError
from .isometry import Isometry
from .precision import FixedWidthPrecision, precision_strategy
from .quadform import TernaryForm


class FiniteFieldSampler(object):
    r"""
    Seeded source of random elements of GF(p).

    Two samplers with the same prime and seed produce the same sequence of elements.

    EXAMPLES::

        sage: from ternarygenus import *
        sage: x = FiniteFieldSampler(7, 12345)
        sage: y = FiniteFieldSampler(7, 12345)
        sage: [x.random_element() for _ in range(5)] == [y.random_element() for _ in range(5)]
        True
    """

    def __init__(self, p, seed):
        p = ZZ(p)
        if not p.is_prime():
            raise ValueError('%s is not prime.'%p)
        self.__p = p
        self.__seed = seed
        self.__field = GF(p)
        self.__random = random.Random('%s:%s'%(seed, p))

    def __repr__(self):
        return 'Random elements of %s with seed %s'%(self.__field, self.__seed)

    def field(self):
        return self.__field

    def prime(self):
        return self.__p

    def seed(self):
        return self.__seed

    def random_element(self):
        return self.__field(self.__random.randrange(self.__p))

    def shuffle(self, X):
        self.__random.shuffle(X)


class NeighborManager(object):
    r"""
    Compute the p-neighbors of a ternary form.

    The isotropic lines of q modulo p are the points of a smooth conic. We fix one isotropic vector v0
    (chosen at random by the sampler) and parametrize the conic by the lines through v0: the line in direction d
    meets the conic again in q(d)*v0 - B(v0, d)*d. The directions are d = w1 + t*w2 (0 <= t < p) and d = w2 (t = p),
    so the parameter t runs over the projective line over GF(p) and every one of the p+1 neighbors is reached exactly once.

    INPUT:
    - ``q`` -- a positive-definite TernaryForm
    - ``sampler`` -- a FiniteFieldSampler; its prime p must not divide the discriminant of q
    - ``precision`` -- a precision strategy (default exact arithmetic)
    - ``check`` -- boolean (default False); if True then every isotropic vector and isometry is verified

    EXAMPLES::

        sage: from ternarygenus import *
        sage: q = TernaryForm([1, 1, 4, 1, 1, 1])
        sage: N = NeighborManager(q, FiniteFieldSampler(2, 1))
        sage: L = list(N.neighbors())
        sage: len(L)
        3
        sage: all(s.is_isometry(q, r, 2) for r, s in L)
        True
    """

    def __init__(self, q, sampler, precision = None, check = False):
        p = sampler.prime()
        if not q.discriminant() % p:
            raise ValueError('The prime %s divides the discriminant %s.'%(p, q.discriminant()))
        self.__q = q
        self.__p = p
        self.__sampler = sampler
        self.__precision = precision_strategy(precision)
        self.__check = check
        v0 = self._base_isotropic_vector()
        i = next(i for i, x in enumerate(v0) if x % p)
        e = identity_matrix(ZZ, 3).rows()
        j, k = [m for m in range(3) if m != i]
        self.__vec = v0
        self.__w1 = e[j]
        self.__w2 = e[k]

    def __repr__(self):
        return '%s-neighbor manager of %s'%(self.__p, self.__q)

    def form(self):
        return self.__q

    def prime(self):
        return self.__p

    def _fail(self, message):
        if isinstance(self.__precision, FixedWidthPrecision):
            raise PrecisionOverflowError(message + ' (%s)'%self.__precision)
        raise GenusConsistencyError(message)

    def _base_isotropic_vector(self):
        r"""
        Find an isotropic vector of q modulo p using the sampler.
        """
        q = self.__q
        p = self.__p
        sampler = self.__sampler
        if p == 2:
            V = [vector(ZZ, v) for v in product(range(2), repeat = 3) if any(v)]
            sampler.shuffle(V)
            return next(v for v in V if q(v) % 2 == 0)
        a, b, c, f, g, h = q.coefficients()
        if not c % p:
            return vector(ZZ, [0, 0, 1])
        while 1:
            x = sampler.random_element()
            y = sampler.random_element()
            if not (x or y):
                continue
            B = f * y + g * x
            C = a * x * x + b * y * y + h * x * y
            d = B * B - 4 * c * C
            if d.is_square():
                z = (d.sqrt() - B) / (c + c)
                return vector(ZZ, [x.lift(), y.lift(), z.lift()])

    def isotropic_vector(self, t):
        r"""
        Return the isotropic vector modulo p attached to the parameter t (0 <= t <= p, where t = p means infinity).
        """
        p = self.__p
        q = self.__q
        if t == p:
            d = self.__w2
        else:
            d = self.__w1 + t * self.__w2
        v0 = self.__vec
        v = q(d) * v0 - q.bilinear(v0, d) * d
        v = vector(ZZ, [x % p for x in v])
        if self.__check and q(v) % p:
            raise GenusConsistencyError('The vector %s is not isotropic modulo %s.'%(v, p))
        return v

    def get_neighbor(self, t):
        r"""
        Construct the p-neighbor attached to t.

        OUTPUT: a pair (Q, S) where Q is a TernaryForm and S is an Isometry with q(S*x) = p^2 * Q(x).
        The columns of S are p times a basis of the neighbor lattice.
        """
        q = self.__q
        p = self.__p
        psqr = p * p
        G = q.gram_matrix()
        x = self.isotropic_vector(t)
        Gx = G * x
        j = next(j for j in range(3) if Gx[j] % p)
        u = ZZ(Gx[j]).inverse_mod(p)
        e = identity_matrix(ZZ, 3).rows()
        # lift x to a vector with q(x) = 0 mod p^2
        qx = q(x)
        if qx % psqr:
            x += p * ((-(qx // p) * u) % p) * e[j]
        X = [x] + [p * (e[i] - ((Gx[i] * u) % p) * e[j]) for i in range(3) if i != j] + [psqr * e[j]]
        S = matrix(ZZ, X).hermite_form()[:3, :].transpose()
        P = self.__precision.gram_product(S, G)
        if any(y % psqr for y in P.list()) or any((P[i, i] // psqr) % 2 for i in range(3)):
            self._fail('The %s-neighbor Gram matrix %s is not divisible by %s.'%(p, P.list(), psqr))
        Q = TernaryForm.from_gram_matrix((P / psqr).change_ring(ZZ))
        if Q.discriminant() != q.discriminant() or not Q.is_positive_definite():
            self._fail('The %s-neighbor %s of %s has the wrong discriminant.'%(p, Q, q))
        return Q, Isometry(S)

    def get_reduced_neighbor(self, t):
        r"""
        Construct the reduced p-neighbor attached to t.

        OUTPUT: a pair (R, s) where R is Eisenstein reduced and s is an Isometry with q(s*x) = p^2 * R(x).
        """
        p = self.__p
        Q, S = self.get_neighbor(t)
        R, M = Q.reduce()
        s = Isometry(S.matrix() * M)
        for y in s.matrix().list():
            self.__precision.coerce(y)
        if self.__check and not s.is_isometry(self.__q, R, p):
            raise GenusConsistencyError('The matrix %s is not a %s-neighbor isometry.'%(s.matrix().list(), p))
        return R, s

    def neighbors(self):
        r"""
        Iterate over the p+1 reduced p-neighbors (R, s) of q.
        """
        for t in range(self.__p + 1):
            yield self.get_reduced_neighbor(t)

