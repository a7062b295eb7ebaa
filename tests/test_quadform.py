import pytest

from sage.modules.free_module_element import vector
from sage.rings.integer_ring import ZZ

from ternarygenus import GenusConsistencyError, PrimeSymbol, TernaryForm, form_from_symbols, mass_x24, prime_symbols


def test_discriminant_is_half_gram_determinant():
    q = TernaryForm([3, 5, 7, 2, 1, 3])
    assert q.gram_matrix().determinant() == 2 * q.discriminant()


def test_evaluation_and_transformation():
    q = TernaryForm([1, 1, 4, 1, 1, 1])
    assert q(vector(ZZ, [1, 0, 0])) == 1
    assert q(vector(ZZ, [0, 0, 1])) == 4
    R, M = q.reduce()
    assert q(M) == R


def test_from_gram_matrix_rejects_odd_diagonal():
    q = TernaryForm([1, 1, 1, 0, 0, 0])
    G = q.gram_matrix()
    assert TernaryForm.from_gram_matrix(G) == q
    with pytest.raises(ValueError):
        TernaryForm.from_gram_matrix(G / 2)


def test_reduction_is_idempotent():
    q = TernaryForm([7, 3, 2, -1, 2, 1])
    R, M = q.reduce()
    assert M.determinant() == 1
    assert R.is_reduced()
    assert R.discriminant() == q.discriminant()


def test_reduction_requires_positive_definite():
    with pytest.raises(ValueError):
        TernaryForm([1, -1, 1, 0, 0, 0]).reduce()


def test_automorphisms_are_automorphisms():
    q = TernaryForm([1, 1, 4, 1, 1, 1])
    for M in q.automorphisms():
        assert M.transpose() * q.gram_matrix() * M == q.gram_matrix()
    assert 2 * len(q.proper_automorphisms()) == q.number_of_automorphisms()


def test_prime_symbols():
    L = prime_symbols([(3, False), PrimeSymbol(5, True)])
    assert [x.prime() for x in L] == [3, 5]
    assert [x.is_ramified() for x in L] == [False, True]
    with pytest.raises(ValueError):
        prime_symbols([(3, True), (3, False)])
    with pytest.raises(ValueError):
        prime_symbols([(4, True)])


def test_form_from_symbols():
    q = form_from_symbols([(2, True)])
    assert q.discriminant() == 2
    assert q.is_ramified(2)
    with pytest.raises(ValueError):
        form_from_symbols([(3, True), (5, True)])


def test_mass():
    assert mass_x24(TernaryForm([1, 1, 4, 1, 1, 1]), [(11, True)]) == 10
    assert mass_x24(TernaryForm([1, 1, 1, 1, 1, 1]), [(2, True)]) == 1


def test_mass_rejects_inconsistent_symbols():
    with pytest.raises(GenusConsistencyError):
        mass_x24(TernaryForm([1, 1, 4, 1, 1, 1]), [(11, False), (3, True), (7, True)])


def test_form_from_symbols_without_candidates(monkeypatch):
    monkeypatch.setattr('ternarygenus.quadform._forms_of_discriminant', lambda N: iter([]))
    with pytest.raises(GenusConsistencyError):
        form_from_symbols([(11, True)])
