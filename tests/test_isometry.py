import pytest

from sage.matrix.constructor import matrix
from sage.matrix.special import identity_matrix
from sage.rings.integer_ring import ZZ

from ternarygenus import FiniteFieldSampler, Isometry, NeighborManager, TernaryForm


def test_composition_and_identity():
    S = Isometry([[1, 2, 0], [0, 1, 0], [0, 0, 1]])
    assert S * Isometry.identity() == S
    assert (S * S).matrix() == matrix(ZZ, [[1, 4, 0], [0, 1, 0], [0, 0, 1]])
    assert S.determinant() == 1
    assert S.trace() == 3


def test_scaled_inverse_of_neighbor_isometry():
    q = TernaryForm([1, 1, 4, 1, 1, 1])
    for R, s in NeighborManager(q, FiniteFieldSampler(3, 5)).neighbors():
        sinv = s.scaled_inverse(3)
        assert (s * sinv).matrix() == 9 * identity_matrix(ZZ, 3)
        assert sinv.is_isometry(R, q, 3)


def test_scaled_inverse_rejects_non_integral():
    with pytest.raises(ValueError):
        Isometry([[2, 0, 0], [0, 1, 0], [0, 0, 1]]).scaled_inverse(1)


def test_is_isometry():
    q = TernaryForm([1, 1, 1, 0, 0, 0])
    s = Isometry([[0, -1, 0], [1, 0, 0], [0, 0, 1]])
    assert s.is_isometry(q, q, 1)
    assert not Isometry([[1, 1, 0], [0, 1, 0], [0, 0, 1]]).is_isometry(q, q, 1)


def test_wrong_shape():
    with pytest.raises(ValueError):
        Isometry([[1, 0], [0, 1]])
