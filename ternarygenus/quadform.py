r"""

Positive-definite ternary quadratic forms

A ternary form [a, b, c, f, g, h] is the polynomial

Q(x, y, z) = a*x^2 + b*y^2 + c*z^2 + f*y*z + g*x*z + h*x*y.

Its discriminant is 4abc + fgh - af^2 - bg^2 - ch^2, i.e. half the determinant of its (even) Gram matrix.

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

import cypari2
pari = cypari2.Pari()

from sage.arith.misc import hilbert_symbol
from sage.matrix.constructor import matrix
from sage.misc.misc_c import prod
from sage.modules.free_module_element import vector
from sage.quadratic_forms.ternary_qf import TernaryQF
from sage.rings.integer import Integer
from sage.rings.integer_ring import ZZ

from .errors import GenusConsistencyError


class TernaryForm(object):
    r"""
    This class represents integral ternary quadratic forms.

    INPUT: a TernaryForm is constructed by calling ``TernaryForm(v)``, where:
    - ``v`` -- a list [a, b, c, f, g, h] of integers; or
    - ``v`` -- a TernaryQF (whose coefficients are ordered the same way)

    EXAMPLES::

        sage: from ternarygenus import *
        sage: q = TernaryForm([1, 1, 4, 1, 1, 1])
        sage: q.discriminant()
        11
        sage: q(vector([1, 1, 1]))
        9
    """

    def __init__(self, v):
        if isinstance(v, (TernaryForm, TernaryQF)):
            v = v.coefficients()
        v = tuple(ZZ(x) for x in v)
        if len(v) != 6:
            raise ValueError('A ternary form has six coefficients.')
        self.__coefficients = v

    def __repr__(self):
        return 'Ternary form %s'%list(self.__coefficients)

    def __eq__(self, other):
        if not isinstance(other, TernaryForm):
            return False
        return self.__coefficients == other.coefficients()

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash(self.__coefficients)

    def __call__(self, v):
        r"""
        Evaluate self at a vector v, or transform self by a matrix v.

        If v is a 3x3 matrix then the output is the form x -> Q(v*x).
        """
        if hasattr(v, 'nrows'):
            return TernaryForm.from_gram_matrix(v.transpose() * self.gram_matrix() * v)
        a, b, c, f, g, h = self.__coefficients
        x, y, z = v
        return a*x*x + b*y*y + c*z*z + f*y*z + g*x*z + h*x*y

    @staticmethod
    def from_gram_matrix(G):
        r"""
        Construct the form x -> x*G*x / 2 from an even symmetric 3x3 matrix G.
        """
        if not G.is_symmetric() or any(G[i, i] % 2 for i in range(3)):
            raise ValueError('This is not an even symmetric matrix.')
        return TernaryForm([G[0, 0] // 2, G[1, 1] // 2, G[2, 2] // 2, G[1, 2], G[0, 2], G[0, 1]])

    ## Attributes

    def coefficients(self):
        return self.__coefficients

    def discriminant(self):
        try:
            return self.__disc
        except AttributeError:
            a, b, c, f, g, h = self.__coefficients
            self.__disc = 4*a*b*c + f*g*h - a*f*f - b*g*g - c*h*h
            return self.__disc

    def gram_matrix(self):
        r"""
        Return the Gram matrix of the bilinear form B(x, y) = Q(x + y) - Q(x) - Q(y).

        The diagonal is 2a, 2b, 2c.
        """
        try:
            return self.__gram_matrix
        except AttributeError:
            a, b, c, f, g, h = self.__coefficients
            G = matrix(ZZ, [[a + a, h, g], [h, b + b, f], [g, f, c + c]])
            G.set_immutable()
            self.__gram_matrix = G
            return G

    def bilinear(self, u, v):
        return vector(ZZ, u) * self.gram_matrix() * vector(ZZ, v)

    def is_positive_definite(self):
        a, b, c, f, g, h = self.__coefficients
        return a > 0 and 4*a*b - h*h > 0 and self.discriminant() > 0

    def hasse_pair(self):
        r"""
        Return the pair (h^2 - 4ab, -a * disc).

        The Hilbert symbol of this pair at p is -1 exactly when the quaternion algebra
        attached to self (its even Clifford algebra) is ramified at p.
        """
        a, b, c, f, g, h = self.__coefficients
        return h*h - 4*a*b, -a * self.discriminant()

    def is_ramified(self, p):
        r"""
        Determine whether the quaternion algebra of self is ramified at p.

        EXAMPLES::

            sage: from ternarygenus import *
            sage: q = TernaryForm([1, 1, 4, 1, 1, 1])
            sage: q.is_ramified(11), q.is_ramified(3)
            (True, False)
        """
        x, y = self.hasse_pair()
        return hilbert_symbol(x, y, p) == -1

    ## Reduction

    def reduce(self):
        r"""
        Compute the Eisenstein-reduced form in the class of self.

        OUTPUT: a pair (R, M) where R is Eisenstein reduced and M is a matrix of determinant 1 with self(M*x) = R(x).

        EXAMPLES::

            sage: from ternarygenus import *
            sage: q = TernaryForm([3, 5, 7, 2, 1, 3])
            sage: R, M = q.reduce()
            sage: R.discriminant(), q.discriminant()
            (346, 346)
            sage: q(M) == R, M.determinant()
            (True, 1)
            sage: R.reduce()[0] == R
            True
        """
        try:
            return self.__reduction
        except AttributeError:
            pass
        if not self.is_positive_definite():
            raise ValueError('This form is not positive-definite.')
        R, M = TernaryQF(list(self.__coefficients)).reduced_form_eisenstein(matrix = True)
        M = matrix(ZZ, M)
        if M.determinant() < 0:
            M = -M
        M.set_immutable()
        self.__reduction = TernaryForm(R), M
        return self.__reduction

    def is_reduced(self):
        return self.reduce()[0] == self

    ## Automorphisms

    def automorphisms(self):
        r"""
        Compute the automorphism group of self.

        OUTPUT: a list of all integral matrices M (of determinant +1 or -1) with self(M) = self.

        EXAMPLES::

            sage: from ternarygenus import *
            sage: TernaryForm([1, 1, 1, 0, 0, 0]).number_of_automorphisms()
            48
            sage: len(TernaryForm([1, 1, 1, 0, 0, 0]).proper_automorphisms())
            24
        """
        try:
            return self.__auts
        except AttributeError:
            pass
        G = self.gram_matrix()
        a, b, c = [G[i, i] // 2 for i in range(3)]
        _, _, vs_matrix = pari(G).qfminim(c + c)
        by_norm = {a: [], b: [], c: []}
        for v in vs_matrix.sage().columns():
            n = v * G * v / 2
            if n in by_norm:
                by_norm[n].extend([v, -v])
        auts = []
        for x in by_norm[a]:
            for y in by_norm[b]:
                if x * G * y != G[0, 1]:
                    continue
                for z in by_norm[c]:
                    if x * G * z == G[0, 2] and y * G * z == G[1, 2]:
                        M = matrix(ZZ, [x, y, z]).transpose()
                        M.set_immutable()
                        auts.append(M)
        self.__auts = auts
        return auts

    def proper_automorphisms(self):
        try:
            return self.__proper_auts
        except AttributeError:
            self.__proper_auts = [M for M in self.automorphisms() if M.determinant() == 1]
            return self.__proper_auts

    def number_of_automorphisms(self):
        return Integer(len(self.automorphisms()))


class PrimeSymbol(object):
    r"""
    A prime dividing the discriminant together with a flag recording whether the quaternion algebra is ramified there.
    """

    def __init__(self, p, ramified = False):
        p = ZZ(p)
        if not p.is_prime():
            raise ValueError('%s is not prime.'%p)
        self.__p = p
        self.__ramified = bool(ramified)

    def __repr__(self):
        return 'Prime symbol (%s, %s)'%(self.__p, ['unramified', 'ramified'][self.__ramified])

    def __eq__(self, other):
        if not isinstance(other, PrimeSymbol):
            return False
        return self.prime() == other.prime() and self.is_ramified() == other.is_ramified()

    def __hash__(self):
        return hash((self.__p, self.__ramified))

    def prime(self):
        return self.__p

    def is_ramified(self):
        return self.__ramified


def prime_symbols(symbols):
    r"""
    Normalize a list of PrimeSymbol's or pairs (p, ramified).
    """
    L = []
    for x in symbols:
        if not isinstance(x, PrimeSymbol):
            x = PrimeSymbol(*x)
        L.append(x)
    primes = [x.prime() for x in L]
    if len(set(primes)) != len(primes):
        raise ValueError('The primes %s are not distinct.'%primes)
    return L


def _forms_of_discriminant(N):
    r"""
    Iterate over candidate positive-definite forms [a, b, c, f, g, h] of discriminant N.

    Every class contains an Eisenstein-reduced form, which satisfies a <= b <= c, |g|, |h| <= a, |f| <= b and abc <= N/2,
    so every class is visited.
    """
    a = 1
    while a ** 3 <= N:
        b = a
        while a * b * b <= N:
            for h in range(-a, a + 1):
                D = 4*a*b - h*h
                for g in range(-a, a + 1):
                    for f in range(-b, b + 1):
                        num = N - f*g*h + a*f*f + b*g*g
                        if num % D == 0 and num // D >= b:
                            yield TernaryForm([a, b, num // D, f, g, h])
            b += 1
        a += 1


def form_from_symbols(symbols):
    r"""
    Construct a reduced positive-definite ternary form with the given local data.

    INPUT:
    - ``symbols`` -- a list of PrimeSymbol's (or pairs (p, ramified)); an odd number of them must be ramified

    OUTPUT: an Eisenstein-reduced TernaryForm of discriminant prod(p) whose quaternion algebra is ramified exactly at the ramified primes

    EXAMPLES::

        sage: from ternarygenus import *
        sage: q = form_from_symbols([(11, True)])
        sage: q.discriminant(), q.is_ramified(11), q.is_reduced()
        (11, True, True)

        sage: q = form_from_symbols([(3, False), (5, True), (7, False)])
        sage: q.discriminant(), q.is_ramified(3), q.is_ramified(5), q.is_ramified(7)
        (105, False, True, False)
    """
    symbols = prime_symbols(symbols)
    ramified = [x.prime() for x in symbols if x.is_ramified()]
    if len(ramified) % 2 == 0:
        raise ValueError('A definite form must be ramified at an odd number of primes.')
    N = prod(x.prime() for x in symbols)
    for q in _forms_of_discriminant(N):
        if all(q.is_ramified(x.prime()) == x.is_ramified() for x in symbols):
            return q.reduce()[0]
    raise GenusConsistencyError('No form of discriminant %s has the prime symbols %s.'%(N, symbols))


def mass_x24(q, symbols):
    r"""
    Compute 24 times the mass of the genus of q.

    This is the sum of 48 / |Aut(L)| over the classes L in the genus and it is always an integer.

    EXAMPLES::

        sage: from ternarygenus import *
        sage: mass_x24(TernaryForm([1, 1, 4, 1, 1, 1]), [(11, True)])
        10
        sage: mass_x24(TernaryForm([1, 1, 1, 1, 1, 1]), [(2, True)])
        1
    """
    symbols = prime_symbols(symbols)
    x, y = q.hasse_pair()
    mass = 2 * q.discriminant()
    for s in symbols:
        p = s.prime()
        mass = mass * (p + hilbert_symbol(x, y, p)) / (p + p)
    if mass not in ZZ:
        raise GenusConsistencyError('The mass %s/24 is not compatible with the prime symbols %s.'%(mass, symbols))
    return ZZ(mass)
