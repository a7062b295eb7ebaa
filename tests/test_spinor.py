from sage.matrix.constructor import matrix
from sage.matrix.special import identity_matrix
from sage.rings.integer_ring import ZZ
from sage.rings.rational_field import QQ

from ternarygenus import Isometry, Spinor, TernaryForm


def test_identity_has_trivial_norm():
    spin = Spinor([2, 3, 5])
    q = TernaryForm([1, 1, 1, 0, 0, 0])
    assert spin.norm(q, Isometry.identity(), 1) == 0


def test_scaled_rotation():
    spin = Spinor([2, 3])
    q = TernaryForm([1, 1, 1, 0, 0, 0])
    s = Isometry(5 * matrix(ZZ, [[0, -1, 0], [1, 0, 0], [0, 0, 1]]))
    # tr(s) + 5 = 10
    assert spin.norm(q, s, 5) == 1


def test_half_turn():
    spin = Spinor([2, 3])
    q = TernaryForm([1, 1, 3, 0, 0, 0])
    s = Isometry([[-1, 0, 0], [0, -1, 0], [0, 0, 1]])
    # axis 2*e3: disc * q(2*e3) = 144
    assert spin.norm(q, s, 1) == 0
    s = Isometry([[1, 0, 0], [0, -1, 0], [0, 0, -1]])
    # axis 2*e1: disc * q(2*e1) = 48
    assert spin.norm(q, s, 1) == 2


def test_character():
    assert Spinor.character(0, 7) == 1
    assert Spinor.character(5, 1) == -1
    assert Spinor.character(5, 5) == 1
    assert Spinor.character(5, 2) == 1


def reflection_spinor_norm(q, A):
    # write A as a product of reflections and multiply their norms
    G = q.gram_matrix()
    I = identity_matrix(QQ, 3)
    theta = QQ(1)
    while A != I:
        v = next(v for v in (A - I).columns() if v)
        n = v * G * v / 2
        theta *= n
        A = (I - matrix(QQ, v).transpose() * matrix(QQ, v) * G / n) * A
    return theta


def test_norm_agrees_with_reflections(genus105):
    spin = genus105.spinor()
    primes = spin.primes()
    q = genus105.mother()
    for _, _, s, d in genus105.neighbor_isometries(2):
        theta = reflection_spinor_norm(q, s.matrix().change_ring(QQ) / d)
        vals = sum((theta.valuation(p) % 2) << i for i, p in enumerate(primes))
        assert spin.norm(q, s, d) == vals
