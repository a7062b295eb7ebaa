r"""

Genera of positive-definite ternary quadratic forms and their Hecke matrices

The genus is enumerated with Kneser's neighbor method. The enumeration stops exactly when the sum of
48 / |Aut(L)| over the classes found so far equals 24 times the mass of the genus.

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

from copy import copy

from sage.arith.misc import next_prime
from sage.matrix.constructor import matrix
from sage.misc.misc_c import prod
from sage.rings.integer import Integer
from sage.rings.integer_ring import ZZ

from .errors import GenusConsistencyError
from .genusrep import GenusRep, GenusRepTable
from .isometry import Isometry
from .neighbors import FiniteFieldSampler, NeighborManager
from .precision import precision_strategy
from .quadform import TernaryForm, form_from_symbols, mass_x24, prime_symbols
from .spinor import Spinor


class Genus(object):
    r"""
    This class represents the genus of a positive-definite ternary quadratic form of squarefree discriminant.

    INPUT: a Genus is constructed by calling ``Genus(symbols)``, where:
    - ``symbols`` -- a list of PrimeSymbol's or pairs (p, ramified). The discriminant is the product of the primes p.
      An odd number of them must be ramified. At most 63 primes are allowed.

    Optional keyword arguments:
    - ``seed`` -- a nonzero integer that determines the order of the representatives (default 0: choose a random seed)
    - ``precision`` -- 'arbitrary' (default), 'int64', 'int32', ... or a precision strategy
    - ``check`` -- boolean (default False). If True then every isotropic vector and every isometry is verified
    - ``form`` -- a TernaryForm (or a list of six coefficients) to use as the mother form
    - ``prime_bound`` -- if given, the enumeration fails if it needs neighbors at primes larger than this
    - ``verbose`` -- boolean (default False); if True then we add commentary throughout the computation

    EXAMPLES::

        sage: from ternarygenus import *
        sage: G = Genus([(11, True)], seed = 1)
        sage: G
        Genus of discriminant 11 with 2 classes
        sage: G.mass_x24(), sum(48 / q.number_of_automorphisms() for q in G.representatives())
        (10, 10)
        sage: G.dimension_map()[1]
        2
    """

    def __init__(self, symbols, seed = 0, precision = None, check = False, form = None, prime_bound = None, verbose = False):
        symbols = list(symbols)
        if len(symbols) > 63:
            raise ValueError('Must have 63 or fewer prime divisors.')
        symbols = prime_symbols(symbols)
        if not seed:
            seed = random.SystemRandom().randrange(1, 2 ** 64)
        self.__seed = Integer(seed)
        self.__precision = precision_strategy(precision)
        self.__check = check
        self.__symbols = symbols
        self.__prime_divisors = [x.prime() for x in symbols]
        if form is None:
            q = form_from_symbols(symbols)
        else:
            q = self._mother_form(form)
        self.__disc = self.__precision.coerce(q.discriminant())
        self.__spinor = Spinor(self.__prime_divisors)
        primes = self.__prime_divisors
        self.__conductors = [prod((p for i, p in enumerate(primes) if (n >> i) & 1), Integer(1)) for n in range(1 << len(primes))]
        self.__mass_x24 = mass_x24(q, symbols)
        self.__hecke_dense = {}
        self.__hecke_sparse = {}
        if verbose:
            print('I will enumerate the genus of %s (discriminant %s, mass %s/24).'%(q, self.__disc, self.__mass_x24))
        self._enumerate(q, prime_bound = prime_bound, verbose = verbose)
        self._compute_lookup_tables()

    def __repr__(self):
        return 'Genus of discriminant %s with %d classes'%(self.__disc, self.size())

    def __len__(self):
        return self.size()

    def _mother_form(self, form):
        q = TernaryForm(form)
        if not q.is_positive_definite():
            raise ValueError('This form is not positive-definite.')
        N = prod(self.__prime_divisors, Integer(1))
        if q.discriminant() != N:
            raise ValueError('The form %s does not have discriminant %s.'%(q, N))
        if any(q.is_ramified(x.prime()) != x.is_ramified() for x in self.__symbols):
            raise ValueError('The form %s does not have the prime symbols %s.'%(q, self.__symbols))
        return q.reduce()[0]

    ## Enumeration

    def _enumerate(self, q, prime_bound = None, verbose = False):
        r"""
        Compute the classes in the genus of the mother form q by repeatedly taking p-neighbors.

        For each good prime p (in increasing order) we run through the representatives in the order they were found,
        including the ones found along the way, until the mass is reached.
        """
        table = GenusRepTable()
        table.add(GenusRep(q))
        target = self.__mass_x24
        sum_mass_x24 = Integer(48) / q.number_of_automorphisms()
        spinor_primes = []
        p = Integer(1)
        done = sum_mass_x24 == target
        while not done:
            p = next_prime(p)
            while not self.__disc % p:
                p = next_prime(p)
            if prime_bound is not None and p > prime_bound:
                raise GenusConsistencyError('The mass %s/24 was not reached with neighbors at primes up to %s (found %s/24).'%(target, prime_bound, sum_mass_x24))
            if verbose:
                print('I will compute %s-neighbors. So far there are %d classes (mass %s/24).'%(p, table.size(), sum_mass_x24))
            sampler = FiniteFieldSampler(p, self.__seed)
            size = table.size()
            current = 0
            while not done and current < table.size():
                manager = NeighborManager(table.get(current).q, sampler, precision = self.__precision, check = self.__check)
                t = 0
                while not done and t <= p:
                    R, s = manager.get_reduced_neighbor(t)
                    if table.add(GenusRep(R, s, parent = current, p = p)):
                        sum_mass_x24 += Integer(48) / R.number_of_automorphisms()
                        if sum_mass_x24 > target:
                            raise GenusConsistencyError('The classes found have mass %s/24, which exceeds the mass %s/24 of the genus.'%(sum_mass_x24, target))
                        done = sum_mass_x24 == target
                        if p not in spinor_primes:
                            spinor_primes.append(p)
                    t += 1
                current += 1
            if not done and table.size() == size:
                # the p-neighbor graph of a genus is connected
                raise GenusConsistencyError('No new classes were found with %s-neighbors but the mass %s/24 was not reached (found %s/24).'%(p, target, sum_mass_x24))
        if verbose:
            print('Done. The genus contains %d classes (neighbors at primes %s).'%(table.size(), spinor_primes))
        self.__hash = table
        self.__spinor_primes = spinor_primes

    def _compute_lookup_tables(self):
        r"""
        Compose the neighbor isometries back to the mother form and decide which representatives contribute to each conductor.

        A representative is excluded from the subspace of conductor d if one of its proper automorphisms
        has nontrivial spinor character at d.
        """
        table = self.__hash
        mother = table.get(0)
        spinor = self.__spinor
        precision = self.__precision
        num_conductors = len(self.__conductors)
        dims = [0] * num_conductors
        lut_positions = [[None] * table.size() for _ in range(num_conductors)]
        for n, rep in enumerate(table):
            if n:
                parent = table.get(rep.parent)
                rep.sinv = rep.s.scaled_inverse(rep.p) * parent.sinv
                rep.s = parent.s * rep.s
                rep.es = dict(parent.es)
                rep.es[rep.p] = rep.es.get(rep.p, 0) + 1
                for x in rep.s.matrix().list() + rep.sinv.matrix().list():
                    precision.coerce(x)
                if self.__check:
                    scale = rep.scale()
                    if not (rep.s.is_isometry(mother.q, rep.q, scale) and rep.sinv.is_isometry(rep.q, mother.q, scale)):
                        raise GenusConsistencyError('The isometries between %s and the mother form %s are incorrect.'%(rep.q, mother.q))
            vals = [spinor.norm(rep.q, Isometry(s), 1) for s in rep.q.proper_automorphisms()]
            for k in range(num_conductors):
                if all(Spinor.character(v, k) == 1 for v in vals):
                    lut_positions[k][n] = dims[k]
                    dims[k] += 1
        self.__dims = dims
        self.__lut_positions = lut_positions

    ## Attributes

    def check(self):
        return self.__check

    def conductors(self):
        r"""
        Return the squarefree divisors of the discriminant.

        The k-th conductor is the product of the primes prime_divisors()[i] for which bit i of k is set.
        """
        return list(self.__conductors)

    def _conductor_index(self, d):
        try:
            return self.__conductors.index(d)
        except ValueError:
            raise ValueError('The conductor %s is not a squarefree divisor of the discriminant %s.'%(d, self.__disc)) from None

    def dimension(self, d = 1):
        r"""
        Return the dimension of the subspace of conductor d.
        """
        return self.__dims[self._conductor_index(d)]

    def dimension_map(self):
        r"""
        Return a dictionary mapping each conductor to the dimension of its subspace.
        """
        return {d: self.__dims[k] for k, d in enumerate(self.__conductors)}

    def discriminant(self):
        return self.__disc

    def lut_positions(self, d = 1):
        r"""
        Return a list whose n-th entry is the row of the n-th representative in the Hecke matrices of conductor d,
        or None if that representative does not contribute.
        """
        return list(self.__lut_positions[self._conductor_index(d)])

    def mass(self):
        r"""
        Return the mass, i.e. the sum of 2 / |Aut(L)| over the classes L in the genus.
        """
        return self.__mass_x24 / Integer(24)

    def mass_x24(self):
        return self.__mass_x24

    def mother(self):
        return self.__hash.get(0).q

    def precision(self):
        return self.__precision

    def prime_divisors(self):
        return list(self.__prime_divisors)

    def prime_symbols(self):
        return list(self.__symbols)

    def representative(self, i):
        r"""
        Return the i-th GenusRep.
        """
        return self.__hash.get(i)

    def representatives(self):
        r"""
        Return the reduced forms of the classes in the genus, in the order in which they were found.
        """
        return [x.q for x in self.__hash]

    def seed(self):
        r"""
        Return the seed. Constructing a genus with the same prime symbols and the same seed reproduces self exactly.
        """
        return self.__seed

    def size(self):
        return self.__hash.size()

    def spinor(self):
        return self.__spinor

    def spinor_primes(self):
        r"""
        Return the primes at which new classes were found, in the order in which they were used.
        """
        return list(self.__spinor_primes)

    ## Conversion

    def convert(self, precision):
        r"""
        Return a copy of self that uses another precision strategy.

        Every stored integer is checked against the new strategy first; a PrecisionOverflowError is raised if one does not fit.

        EXAMPLES::

            sage: from ternarygenus import *
            sage: G = Genus([(11, True)], seed = 1)
            sage: H = G.convert('int64')
            sage: H.precision()
            Fixed width precision (64 bits)
            sage: H.hecke_matrix_dense(3) == G.hecke_matrix_dense(3)
            True
        """
        precision = precision_strategy(precision)
        values = [self.__disc] + self.__conductors
        for rep in self.__hash:
            values.extend(rep.q.coefficients())
            values.extend(rep.s.matrix().list())
            values.extend(rep.sinv.matrix().list())
        for x in values:
            precision.coerce(x)
        G = copy(self)
        G.__precision = precision
        G.__hecke_dense = {}
        G.__hecke_sparse = {}
        return G

    ## Hecke matrices

    def _hecke_prime(self, p):
        p = ZZ(p)
        if not p.is_prime():
            raise ValueError('%s is not prime.'%p)
        if not self.__disc % p:
            raise ValueError('Prime must not divide the discriminant.')
        return p

    def _neighbor_targets(self, p):
        r"""
        For every representative cur, compute its p+1 reduced p-neighbors.

        OUTPUT: a generator of tuples (n, cur, L) where L is a list of pairs (r, s): r is the index of the neighbor
        and s is the Isometry with cur.q(s*x) = p^2 * q_r(x).
        """
        table = self.__hash
        sampler = FiniteFieldSampler(p, self.__seed)
        for n, cur in enumerate(table):
            manager = NeighborManager(cur.q, sampler, precision = self.__precision, check = self.__check)
            L = []
            for R, s in manager.neighbors():
                r = table.indexof(R)
                if r is None:
                    raise GenusConsistencyError('The %s-neighbor %s of %s is not in the genus.'%(p, R, cur.q))
                L.append((r, s))
            yield n, cur, L

    def neighbor_isometries(self, p):
        r"""
        Iterate over the p-neighbor relations between representatives as rational isometries of the mother form.

        INPUT:
        - ``p`` -- a prime not dividing the discriminant

        OUTPUT: a generator of tuples (n, r, s, d) with one entry for each of the p+1 neighbors of each representative:
        the n-th representative has a p-neighbor isometric to the r-th representative, and s/d is a proper isometry of
        the mother form (i.e. mother(s*x) = d^2 * mother(x)).

        This can be used to construct Hecke operators twisted by other representations of SO(mother).

        EXAMPLES::

            sage: from ternarygenus import *
            sage: G = Genus([(11, True)], seed = 1)
            sage: q = G.mother()
            sage: X = list(G.neighbor_isometries(2))
            sage: len(X)
            6
            sage: all(s.is_isometry(q, q, d) and s.determinant() > 0 for _, _, s, d in X)
            True
        """
        p = self._hecke_prime(p)
        table = self.__hash
        for n, cur, L in self._neighbor_targets(p):
            for r, s in L:
                rep = table.get(r)
                yield n, r, cur.s * s * rep.sinv, p * cur.scale() * rep.scale()

    def _hecke_rows(self, p):
        r"""
        For every representative, pack the index r of each neighbor together with its spinor character values.

        OUTPUT: a generator of pairs (n, vals) where each entry of vals is (r << number of primes) | spinor values.
        """
        table = self.__hash
        mother = table.get(0)
        spinor = self.__spinor
        num_primes = len(self.__prime_divisors)
        for n, cur, L in self._neighbor_targets(p):
            vals = []
            for r, s in L:
                if r == n:
                    if self.__check and not s.is_isometry(cur.q, cur.q, p):
                        raise GenusConsistencyError('The matrix %s is not a similitude of %s.'%(s.matrix().list(), cur.q))
                    spin_vals = spinor.norm(cur.q, s, p)
                else:
                    rep = table.get(r)
                    s = cur.s * s * rep.sinv
                    scalar = p * cur.scale() * rep.scale()
                    if self.__check and not s.is_isometry(mother.q, mother.q, scalar):
                        raise GenusConsistencyError('The matrix %s is not a similitude of the mother form.'%s.matrix().list())
                    spin_vals = spinor.norm(mother.q, s, scalar)
                vals.append((r << num_primes) | spin_vals)
            yield n, vals

    def hecke_matrix_dense(self, p, verbose = False):
        r"""
        Compute the Hecke matrices at p on every conductor subspace.

        INPUT:
        - ``p`` -- a prime not dividing the discriminant

        OUTPUT: a dictionary mapping each conductor d to the matrix of T_p (over ZZ) on the subspace of conductor d.
        The entry (i, j) is the sum of the spinor characters over the p-neighbors of the i-th representative that are isometric to the j-th.

        EXAMPLES::

            sage: from ternarygenus import *
            sage: G = Genus([(11, True)], seed = 1)
            sage: T = G.hecke_matrix_dense(2)[1]
            sage: T.charpoly()
            x^2 - x - 6
            sage: all(sum(r) == 3 for r in T.rows())
            True

            sage: G.hecke_matrix_dense(11)
            Traceback (most recent call last):
            ...
            ValueError: Prime must not divide the discriminant.
        """
        p = self._hecke_prime(p)
        try:
            return self.__hecke_dense[p]
        except KeyError:
            pass
        dims = self.__dims
        luts = self.__lut_positions
        num_primes = len(self.__prime_divisors)
        num_conductors = len(self.__conductors)
        if verbose:
            print('I will compute the Hecke matrices at %s in dimensions %s.'%(p, dims))
        rows = [[[0] * dim for _ in range(dim)] for dim in dims]
        for n, vals in self._hecke_rows(p):
            for k in range(num_conductors):
                lut = luts[k]
                npos = lut[n]
                if npos is None:
                    continue
                row = rows[k][npos]
                for x in vals:
                    rpos = lut[x >> num_primes]
                    if rpos is None:
                        continue
                    row[rpos] += Spinor.character(x, k)
        matrices = {d: matrix(ZZ, dims[k], dims[k], rows[k]) for k, d in enumerate(self.__conductors)}
        self.__hecke_dense[p] = matrices
        return matrices

    def hecke_matrix_sparse(self, p, verbose = False):
        r"""
        Compute the Hecke matrices at p on every conductor subspace in compressed sparse row form.

        OUTPUT: a dictionary mapping each conductor d to a HeckeSparseMatrix with the same entries as hecke_matrix_dense(p)[d].

        EXAMPLES::

            sage: from ternarygenus import *
            sage: G = Genus([(11, True)], seed = 1)
            sage: X = G.hecke_matrix_sparse(3)
            sage: all(X[d].dense() == T for d, T in G.hecke_matrix_dense(3).items())
            True
        """
        p = self._hecke_prime(p)
        try:
            return self.__hecke_sparse[p]
        except KeyError:
            pass
        dims = self.__dims
        luts = self.__lut_positions
        num_primes = len(self.__prime_divisors)
        num_conductors = len(self.__conductors)
        if verbose:
            print('I will compute the sparse Hecke matrices at %s in dimensions %s.'%(p, dims))
        data = [[] for _ in dims]
        indices = [[] for _ in dims]
        indptr = [[0] * (dim + 1) for dim in dims]
        rowdata = [[0] * dim for dim in dims]
        for n, vals in self._hecke_rows(p):
            for k in range(num_conductors):
                lut = luts[k]
                npos = lut[n]
                if npos is None:
                    continue
                row = rowdata[k]
                for x in vals:
                    rpos = lut[x >> num_primes]
                    if rpos is None:
                        continue
                    row[rpos] += Spinor.character(x, k)
                nnz = 0
                for pos, y in enumerate(row):
                    if y:
                        data[k].append(y)
                        indices[k].append(pos)
                        row[pos] = 0
                        nnz += 1
                indptr[k][npos + 1] = indptr[k][npos] + nnz
        matrices = {d: HeckeSparseMatrix(data[k], indices[k], indptr[k]) for k, d in enumerate(self.__conductors)}
        self.__hecke_sparse[p] = matrices
        return matrices

    def hecke_matrix(self, p, d = 1, sparse = False):
        r"""
        Compute the Hecke matrix at p on the subspace of conductor d.

        INPUT:
        - ``p`` -- a prime not dividing the discriminant
        - ``d`` -- a squarefree divisor of the discriminant (default 1)
        - ``sparse`` -- boolean (default False); if True then return a HeckeSparseMatrix
        """
        self._conductor_index(d)
        if sparse:
            return self.hecke_matrix_sparse(p)[d]
        return self.hecke_matrix_dense(p)[d]


class HeckeSparseMatrix(object):
    r"""
    A square integer matrix in compressed sparse row form.

    Row i has the nonzero entries data[indptr[i]:indptr[i+1]] in the columns indices[indptr[i]:indptr[i+1]].

    EXAMPLES::

        sage: from ternarygenus import *
        sage: X = HeckeSparseMatrix([1, 2, 3], [0, 1, 0], [0, 2, 3])
        sage: X.dense()
        [1 2]
        [3 0]
        sage: X[1, 1], X.nnz()
        (0, 3)
        sage: X.sparse().is_sparse(), X.sparse() == X.dense()
        (True, True)
    """

    def __init__(self, data, indices, indptr):
        if len(data) != len(indices) or not indptr or indptr[0] != 0 or indptr[-1] != len(data):
            raise ValueError('Invalid compressed sparse row data.')
        self.data = list(data)
        self.indices = list(indices)
        self.indptr = list(indptr)

    def __repr__(self):
        n = self.nrows()
        return '%d x %d sparse Hecke matrix with %d nonzero entries'%(n, n, self.nnz())

    def __eq__(self, other):
        if not isinstance(other, HeckeSparseMatrix):
            return False
        return self.data == other.data and self.indices == other.indices and self.indptr == other.indptr

    def __ne__(self, other):
        return not self.__eq__(other)

    def __getitem__(self, ij):
        i, j = ij
        for pos in range(self.indptr[i], self.indptr[i + 1]):
            if self.indices[pos] == j:
                return self.data[pos]
        return 0

    def nrows(self):
        return len(self.indptr) - 1

    def nnz(self):
        return len(self.data)

    def dict(self):
        r"""
        Return a dictionary (i, j) -> nonzero entry.
        """
        d = {}
        for i in range(self.nrows()):
            for pos in range(self.indptr[i], self.indptr[i + 1]):
                d[(i, self.indices[pos])] = self.data[pos]
        return d

    def dense(self):
        n = self.nrows()
        return matrix(ZZ, n, n, self.dict())

    def sparse(self):
        n = self.nrows()
        return matrix(ZZ, n, n, self.dict(), sparse = True)
