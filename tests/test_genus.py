import pytest

from sage.arith.misc import primes_first_n
from sage.matrix.constructor import matrix
from sage.rings.integer_ring import ZZ

from ternarygenus import Genus, GenusConsistencyError, HeckeSparseMatrix, TernaryForm


def test_mass_is_reached(genus11, genus105):
    for G in [genus11, genus105]:
        assert sum(ZZ(48) / q.number_of_automorphisms() for q in G.representatives()) == G.mass_x24()
        assert G.mass() == G.mass_x24() / 24


def test_representatives_are_distinct_and_reduced(genus105):
    reps = genus105.representatives()
    assert len(set(reps)) == len(reps) == genus105.size() == len(genus105)
    for q in reps:
        assert q.is_reduced()
        assert q.discriminant() == 105
        assert q.is_ramified(5) and not q.is_ramified(3) and not q.is_ramified(7)


def test_genus_of_discriminant_11(genus11):
    assert genus11.size() == 2
    assert genus11.mass_x24() == 10
    assert genus11.conductors() == [1, 11]
    T = genus11.hecke_matrix_dense(2)[1]
    assert T.trace() == 1
    assert T.charpoly().list() == [-6, -1, 1]


def test_genus_of_discriminant_2():
    G = Genus([(2, True)], seed = 3)
    assert G.size() == 1
    assert G.mass_x24() == 1
    assert G.spinor_primes() == []
    assert G.hecke_matrix_dense(3)[1] == matrix(ZZ, [[4]])


@pytest.mark.parametrize('p', [2, 11, 13])
def test_row_sums(genus105, p):
    T = genus105.hecke_matrix_dense(p)[1]
    assert all(sum(r) == p + 1 for r in T.rows())


def test_hecke_operators_commute(genus105):
    T2 = genus105.hecke_matrix(2)
    T11 = genus105.hecke_matrix(11)
    assert T2 * T11 == T11 * T2


def test_dense_and_sparse_agree(genus105):
    dense = genus105.hecke_matrix_dense(2)
    sparse = genus105.hecke_matrix_sparse(2)
    assert sorted(dense) == sorted(sparse) == sorted(genus105.conductors())
    for d in genus105.conductors():
        X = sparse[d]
        assert isinstance(X, HeckeSparseMatrix)
        assert X.dense() == dense[d]
        assert X.nrows() == genus105.dimension(d)
        assert X.nnz() == len([x for x in dense[d].list() if x])
        assert genus105.hecke_matrix(2, d, sparse = True) == X


def test_dimensions(genus105):
    dims = genus105.dimension_map()
    assert dims[1] == genus105.size()
    assert genus105.lut_positions(1) == list(range(genus105.size()))
    for d in genus105.conductors():
        lut = genus105.lut_positions(d)
        assert len([x for x in lut if x is not None]) == dims[d]
        assert genus105.hecke_matrix(11, d).nrows() == dims[d]


def test_same_seed_same_genus():
    G = Genus([(3, False), (5, True), (7, False)], seed = 11)
    H = Genus([(3, False), (5, True), (7, False)], seed = 11)
    assert G.representatives() == H.representatives()
    assert G.hecke_matrix_dense(2) == H.hecke_matrix_dense(2)
    assert G.hecke_matrix_sparse(11) == H.hecke_matrix_sparse(11)


def test_random_seed():
    G = Genus([(11, True)])
    assert G.seed() != 0
    assert G.size() == 2


def test_bad_hecke_primes(genus11):
    with pytest.raises(ValueError):
        genus11.hecke_matrix_dense(11)
    with pytest.raises(ValueError):
        genus11.hecke_matrix_sparse(11)
    with pytest.raises(ValueError):
        genus11.hecke_matrix(4)
    with pytest.raises(ValueError):
        genus11.hecke_matrix(2, 3)


def test_too_many_primes():
    with pytest.raises(ValueError):
        Genus([(p, True) for p in primes_first_n(64)])


def test_even_number_of_ramified_primes():
    with pytest.raises(ValueError):
        Genus([(3, True), (5, True)])


def test_mother_form():
    G = Genus([(11, True)], seed = 1, form = [1, 1, 4, 1, 1, 1])
    assert G.mother() == TernaryForm([1, 1, 4, 1, 1, 1]).reduce()[0]
    with pytest.raises(ValueError):
        Genus([(11, True)], form = [1, 1, 1, 0, 0, 0])
    with pytest.raises(ValueError):
        Genus([(3, False), (5, True), (7, True), (11, True)], form = [1, 1, 4, 1, 1, 1])


def test_prime_bound():
    with pytest.raises(GenusConsistencyError):
        Genus([(11, True)], seed = 1, prime_bound = 1)


def test_check_mode():
    G = Genus([(3, False), (5, True), (7, False)], seed = 7, check = True)
    for d in G.conductors():
        assert G.hecke_matrix_sparse(2)[d].dense() == G.hecke_matrix_dense(2)[d]


def test_composed_isometries(genus105):
    q = genus105.mother()
    for i in range(genus105.size()):
        rep = genus105.representative(i)
        assert rep.s.is_isometry(q, rep.q, rep.scale())
        assert rep.sinv.is_isometry(rep.q, q, rep.scale())


def test_neighbor_isometries(genus105):
    q = genus105.mother()
    X = list(genus105.neighbor_isometries(2))
    assert len(X) == 3 * genus105.size()
    for n, r, s, d in X:
        assert s.is_isometry(q, q, d)
        assert s.determinant() > 0


def test_spinor_primes(genus105):
    P = genus105.spinor_primes()
    assert P == sorted(P)
    assert all(105 % p for p in P)


def test_convert(genus11):
    H = genus11.convert('int32')
    assert H.precision().bits() == 32
    assert genus11.precision().bits() is None
    assert H.hecke_matrix_dense(5) == genus11.hecke_matrix_dense(5)


def test_verbose(capsys):
    Genus([(11, True)], seed = 1, verbose = True)
    assert 'enumerate' in capsys.readouterr().out


def test_unreachable_mass(monkeypatch):
    monkeypatch.setattr('ternarygenus.genus.mass_x24', lambda q, symbols: ZZ(11))
    with pytest.raises(GenusConsistencyError):
        Genus([(11, True)], seed = 1)


def test_mass_overshoot(monkeypatch):
    monkeypatch.setattr('ternarygenus.genus.mass_x24', lambda q, symbols: ZZ(9))
    with pytest.raises(GenusConsistencyError):
        Genus([(11, True)], seed = 1)


def test_genus_of_discriminant_37():
    G = Genus([(37, True)], seed = 1)
    assert G.dimension_map() == {1: 2, 37: 1}
    assert G.hecke_matrix(2, 37) == matrix(ZZ, [[-2]])
    assert G.hecke_matrix(2, 37, sparse = True).dense() == matrix(ZZ, [[-2]])


def test_dimension_map_105(genus105):
    assert genus105.dimension_map() == {1: 4, 3: 2, 5: 0, 15: 0, 7: 1, 21: 1, 35: 3, 105: 1}


def test_sparse_matrix_conversions(genus105):
    X = genus105.hecke_matrix(2, sparse = True)
    assert X.sparse().is_sparse()
    assert X.sparse() == X.dense() == genus105.hecke_matrix(2)
    assert X.dict() == genus105.hecke_matrix(2).dict()
