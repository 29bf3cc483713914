import math
import random

import pytest

from threshcrypt.errors import InterpolationError, InvalidDegree
from threshcrypt.group import init_group
from threshcrypt.polynomial import Lagrange, Polynomial, interpolate, lagrange_coefficient

ORDER = init_group().order


def test_normalization():
    poly = Polynomial([ORDER + 3, 5, 0, ORDER], ORDER)
    assert poly.coeffs == [3, 5]
    assert poly.degree == 1
    assert Polynomial([0, 0], ORDER).is_zero()
    assert Polynomial.zero(ORDER).degree == -math.inf
    assert Polynomial([1, 2], ORDER) == Polynomial([1, 2, 0], ORDER)
    assert Polynomial([1, 2], ORDER) != Polynomial([1, 2], 101)
    pytest.raises(ValueError, Polynomial, [1], 1)


def test_random():
    poly = Polynomial.random(4, ORDER)
    assert poly.degree <= 4
    assert all(0 <= c < ORDER for c in poly.coeffs)
    assert Polynomial.random(0, ORDER).degree in (0, -math.inf)
    pytest.raises(InvalidDegree, Polynomial.random, -1, ORDER)


def test_arithmetic():
    p = 101
    a = Polynomial([1, 2], p)
    b = Polynomial([3, 0, 1], p)
    assert (a + b).coeffs == [4, 2, 1]
    assert (a * b).coeffs == [3, 6, 1, 2]
    assert a.mult_scalar(50).coeffs == [50, 100]
    assert a.mult_scalar(p).is_zero()
    assert (a * Polynomial.zero(p)).is_zero()
    assert (a + Polynomial([p - 1, p - 2], p)).is_zero()
    pytest.raises(ValueError, a.add, Polynomial([1], 103))


def test_evaluate():
    p = 101
    poly = Polynomial([7, 0, 3], p)
    assert poly.evaluate(0) == 7
    assert poly.evaluate(2) == 19
    assert poly.evaluate(10) == 307 % p
    assert Polynomial.zero(p).evaluate(5) == 0


def test_clone_is_independent():
    poly = Polynomial([1, 2, 3], ORDER)
    other = poly.clone()
    assert other == poly
    assert other is not poly
    other.coeffs.append(9)
    assert other == poly


@pytest.mark.parametrize("degree", [0, 1, 2, 5])
def test_interpolation_roundtrip(degree):
    poly = Polynomial.random(degree, ORDER)
    xs = random.sample(range(1, 1000), degree + 1)
    points = [(x, poly.evaluate(x)) for x in xs]
    lagrange = interpolate(points, ORDER)
    assert lagrange == poly
    assert Lagrange.interpolate(points, ORDER).coeffs == poly.coeffs


def test_lagrange_evaluation():
    p = 101
    poly = Polynomial([5, 3, 9], p)
    points = [(x, poly.evaluate(x)) for x in (1, 4, 7)]
    lagrange = Lagrange(points, p)
    # exact pass-through at the samples
    for x, y in points:
        assert lagrange.evaluate(x) == y
    for z in (0, 2, 50, 100, 105):
        assert lagrange.evaluate(z) == poly.evaluate(z)


def test_interpolation_errors():
    p = 101
    pytest.raises(InterpolationError, Lagrange, [(1, 2), (1, 3)], p)
    pytest.raises(InterpolationError, Lagrange, [(1, 2), (102, 3)], p)
    pytest.raises(InterpolationError, Lagrange, [(x, 0) for x in range(12)], 11)


def test_lagrange_coefficient():
    p = 101
    poly = Polynomial([42, 17, 5], p)
    indexes = [2, 3, 5]
    secret = sum(lagrange_coefficient(i, indexes, p) * poly.evaluate(i) for i in indexes) % p
    assert secret == 42
    assert lagrange_coefficient(1, [1], p) == 1
    pytest.raises(InterpolationError, lagrange_coefficient, 1, [1, 2, 2], p)
    pytest.raises(InterpolationError, lagrange_coefficient, 1, [1, 102], p)
