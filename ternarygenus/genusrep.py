r"""

Genus representatives and the table that deduplicates them

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

from sage.misc.misc_c import prod
from sage.rings.integer import Integer

from .isometry import Isometry

class GenusRep(object):
    r"""
    A representative of a class in the genus.

    Attributes:
    - ``q`` -- the Eisenstein-reduced TernaryForm
    - ``s`` -- an Isometry with mother(s*x) = scale^2 * q(x) (after enumeration; before, the isometry from the parent)
    - ``sinv`` -- an Isometry with q(sinv*x) = scale^2 * mother(x)
    - ``parent`` -- index of the parent representative (-1 for the mother form)
    - ``p`` -- the prime of the neighbor step from the parent (1 for the mother form)
    - ``es`` -- dictionary prime -> number of neighbor steps at that prime between the mother form and q
    """

    def __init__(self, q, s = None, sinv = None, parent = -1, p = 1, es = None):
        self.q = q
        self.s = s if s is not None else Isometry.identity()
        self.sinv = sinv if sinv is not None else Isometry.identity()
        self.parent = parent
        self.p = Integer(p)
        self.es = dict(es) if es else {}

    def __repr__(self):
        return 'Genus representative %s (parent %s, prime %s)'%(self.q, self.parent, self.p)

    def __eq__(self, other):
        if not isinstance(other, GenusRep):
            return False
        return self.q == other.q

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash(self.q)

    def scale(self):
        r"""
        Return prod p^e over the primes used to reach self from the mother form.
        """
        return prod((p ** e for p, e in self.es.items()), Integer(1))

class GenusRepTable(object):
    r"""
    Insertion-ordered table of genus representatives.

    Representatives are stored in a list and indexed by a dictionary keyed by their reduced forms,
    so two representatives with the same reduced form are never both inserted.
    The position of a representative in the list is its index in every Hecke matrix.

    EXAMPLES::

        sage: from ternarygenus import *
        sage: T = GenusRepTable()
        sage: T.add(GenusRep(TernaryForm([1, 1, 4, 1, 1, 1])))
        True
        sage: T.add(GenusRep(TernaryForm([1, 1, 4, 1, 1, 1]), parent = 0, p = 2))
        False
        sage: T.add(GenusRep(TernaryForm([1, 2, 2, 1, 1, 1])))
        True
        sage: T.size(), T.indexof(TernaryForm([1, 2, 2, 1, 1, 1]))
        (2, 1)
        sage: T.indexof(TernaryForm([1, 1, 1, 0, 0, 0])) is None
        True
    """

    def __init__(self):
        self.__reps = []
        self.__index = {}

    def __repr__(self):
        return 'Table of %d genus representatives'%len(self.__reps)

    def __len__(self):
        return len(self.__reps)

    def __iter__(self):
        return iter(self.__reps)

    def __contains__(self, x):
        return self.indexof(x) is not None

    def add(self, rep):
        r"""
        Insert rep unless a representative with the same form is already present.

        OUTPUT: True if rep was inserted
        """
        if rep.q in self.__index:
            return False
        self.__index[rep.q] = len(self.__reps)
        self.__reps.append(rep)
        return True

    def get(self, i):
        return self.__reps[i]

    def indexof(self, x):
        r"""
        Return the index of the GenusRep or TernaryForm x, or None if it is not present.
        """
        try:
            x = x.q
        except AttributeError:
            pass
        return self.__index.get(x)

    def size(self):
        return len(self.__reps)

    def keys(self):
        r"""
        Return the representatives in insertion order.
        """
        return list(self.__reps)
