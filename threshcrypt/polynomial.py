"""
Polynomials over the scalar field of a group and Lagrange interpolation.

Nothing here touches group elements: a polynomial only knows the order
its coefficients are reduced by.
"""

import math
import secrets
from typing import List, Sequence, Tuple

from .errors import InterpolationError, InvalidDegree


class Polynomial:
    """
    Coefficients are stored lowest degree first, reduced mod order, with
    trailing zeros trimmed. The zero polynomial has degree -inf.
    """

    def __init__(self, coeffs: Sequence[int], order: int):
        if order <= 1:
            raise ValueError("Order must be > 1")
        coeffs = [c % order for c in coeffs]
        while coeffs and coeffs[-1] == 0:
            coeffs.pop()
        self._coeffs = coeffs
        self._order = order

    @classmethod
    def zero(cls, order: int) -> "Polynomial":
        return cls([], order)

    @classmethod
    def random(cls, degree: int, order: int) -> "Polynomial":
        """degree + 1 uniform coefficients (the leading one may be zero)."""
        if degree < 0:
            raise InvalidDegree(f"Polynomial degree must be >= 0: {degree}")
        return cls([secrets.randbelow(order) for _ in range(degree + 1)], order)

    @property
    def coeffs(self) -> List[int]:
        return list(self._coeffs)

    @property
    def order(self) -> int:
        return self._order

    @property
    def degree(self):
        return len(self._coeffs) - 1 if self._coeffs else -math.inf

    def is_zero(self) -> bool:
        return not self._coeffs

    def clone(self) -> "Polynomial":
        return Polynomial(self._coeffs, self._order)

    def __eq__(self, other):
        if not isinstance(other, Polynomial):
            return NotImplemented
        return self._order == other._order and self._coeffs == other._coeffs

    def __repr__(self):
        return f"Polynomial({self._coeffs}, order={self._order})"

    def _check_order(self, other: "Polynomial"):
        if self._order != other.order:
            raise ValueError("Polynomials have different orders")

    def add(self, other: "Polynomial") -> "Polynomial":
        self._check_order(other)
        a, b = self._coeffs, other._coeffs
        if len(a) < len(b):
            a, b = b, a
        coeffs = list(a)
        for i, c in enumerate(b):
            coeffs[i] += c
        return Polynomial(coeffs, self._order)

    def mult(self, other: "Polynomial") -> "Polynomial":
        self._check_order(other)
        if self.is_zero() or other.is_zero():
            return Polynomial.zero(self._order)
        coeffs = [0] * (len(self._coeffs) + len(other._coeffs) - 1)
        for i, a in enumerate(self._coeffs):
            for j, b in enumerate(other._coeffs):
                coeffs[i + j] += a * b
        return Polynomial(coeffs, self._order)

    def mult_scalar(self, scalar: int) -> "Polynomial":
        return Polynomial([scalar * c for c in self._coeffs], self._order)

    __add__ = add
    __mul__ = mult

    def evaluate(self, x: int) -> int:
        # Horner: ((a_d * x + a_{d-1}) * x + ...) + a_0
        y = 0
        for c in reversed(self._coeffs):
            y = (y * x + c) % self._order
        return y


class Lagrange(Polynomial):
    """
    The unique polynomial of degree < k through k points with distinct
    x coordinates. Keeps the barycentric weights so evaluation at a new
    point does not need the coefficient form.
    """

    def __init__(self, points: Sequence[Tuple[int, int]], order: int):
        k = len(points)
        if k > order:
            raise InterpolationError("Number of provided points exceeds order")
        xs = [x % order for x, _ in points]
        ys = [y % order for _, y in points]
        if len(set(xs)) != k:
            raise InterpolationError("Not all provided x's are distinct modulo order")

        ws = []
        coeffs = [0] * k
        for j in range(k):
            w = 1
            # basis numerator prod_{i != j} (X - x_i), lowest degree first
            basis = [1]
            for i in range(k):
                if i == j:
                    continue
                w = w * (xs[j] - xs[i]) % order
                shifted = [0] + basis
                for a in range(len(basis)):
                    shifted[a] = (shifted[a] - xs[i] * basis[a]) % order
                basis = shifted
            w = pow(w, -1, order)
            ws.append(w)
            f = ys[j] * w % order
            for a, b in enumerate(basis):
                coeffs[a] = (coeffs[a] + f * b) % order

        super().__init__(coeffs, order)
        self._xs = xs
        self._ys = ys
        self._ws = ws

    @classmethod
    def interpolate(cls, points: Sequence[Tuple[int, int]], order: int) -> "Lagrange":
        return cls(points, order)

    def evaluate(self, x: int) -> int:
        order = self._order
        x %= order
        num = 0
        den = 0
        for xj, yj, wj in zip(self._xs, self._ys, self._ws):
            if x == xj:
                return yj
            a = wj * pow(x - xj, -1, order)
            num += a * yj
            den += a
        if not self._xs:
            return 0
        return num * pow(den, -1, order) % order


def interpolate(points: Sequence[Tuple[int, int]], order: int) -> Lagrange:
    return Lagrange(points, order)


def lagrange_coefficient(index: int, indexes: Sequence[int], order: int) -> int:
    """
    Weight of the share at `index` when interpolating at x = 0 over the
    qualified set `indexes`: prod_{j != i} j / (j - i) mod order.
    """
    if len(set(indexes)) != len(indexes):
        raise InterpolationError("Duplicate indexes in qualified set")
    num = 1
    den = 1
    for j in indexes:
        if j == index:
            continue
        num = num * j % order
        den = den * (j - index) % order
    if den == 0:
        raise InterpolationError("Not all provided indexes are distinct modulo order")
    return num * pow(den, -1, order) % order
