"""
Prime order groups over elliptic curves.

Point arithmetic is delegated to python-ecdsa. This module only fixes the
encodings, the neutral element and the validation policy:

    * scalars travel as little-endian byte strings, zero padded to the
      byte length of the field modulus
    * Weierstrass points use the SEC 1 compressed form, the neutral
      element is the single byte 0x00
    * Edwards points use the RFC 8032 encoding, the neutral element is
      the encoding of (0, 1)
    * unpack() accepts the neutral encoding and rejects the order 2 point
      (0, -1); validate_point() rejects the neutral element only when
      called with allow_neutral=False

Group instances are immutable after construction and can be shared freely.
"""

import secrets
from abc import ABC, abstractmethod
from collections import namedtuple

from ecdsa import curves, numbertheory
from ecdsa.ellipticcurve import INFINITY, PointEdwards, PointJacobi
from ecdsa.errors import MalformedPointError

from .enums import Elliptic, DEFAULT_GROUP
from .errors import BadEncoding, BadPoint, BadScalar


Keypair = namedtuple('Keypair', ['secret', 'public'])


class Group(ABC):
    """
    Abstract prime order group. Two groups are equal iff their labels are.

    Concrete backends provide the arithmetic; everything else in the
    package talks to this interface only.
    """

    def __init__(self, label: Elliptic, modulus: int, order: int, generator, neutral):
        self.label = label
        self.modulus = modulus
        self.order = order
        self.generator = generator
        self.neutral = neutral
        self.scalar_len = (modulus.bit_length() + 7) // 8

    def __eq__(self, other):
        if not isinstance(other, Group):
            return NotImplemented
        return self.label == other.label

    def __hash__(self):
        return hash(self.label)

    def __repr__(self):
        return f"{type(self).__name__}({self.label.value})"

    @abstractmethod
    def exp(self, point, scalar: int):
        """scalar * point in additive notation."""

    @abstractmethod
    def operate(self, a, b):
        """The group law."""

    @abstractmethod
    def invert(self, point):
        pass

    @abstractmethod
    def is_neutral(self, point) -> bool:
        pass

    def equals(self, a, b) -> bool:
        if self.is_neutral(a) or self.is_neutral(b):
            return self.is_neutral(a) and self.is_neutral(b)
        return a == b

    @abstractmethod
    def point_to_bytes(self, point) -> bytes:
        pass

    @abstractmethod
    def unpack(self, data: bytes):
        """Decode a point. Raises BadEncoding on malformed input."""

    @abstractmethod
    def validate_point(self, point, allow_neutral: bool = True, raise_on_invalid: bool = True) -> bool:
        pass

    def random_bytes(self) -> bytes:
        return secrets.token_bytes(self.scalar_len)

    def random_scalar(self) -> int:
        """Uniform non-zero scalar from the system CSPRNG."""
        return 1 + secrets.randbelow(self.order - 1)

    def random_point(self):
        return self.exp(self.generator, self.random_scalar())

    def generate_keypair(self, secret: int = None) -> Keypair:
        if secret is None:
            secret = self.random_scalar()
        else:
            self.validate_scalar(secret, allow_zero=False)
        return Keypair(secret=secret, public=self.exp(self.generator, secret))

    def validate_scalar(self, scalar: int, allow_zero: bool = True, raise_on_invalid: bool = True) -> bool:
        lower = 0 if allow_zero else 1
        valid = isinstance(scalar, int) and lower <= scalar < self.order
        if not valid and raise_on_invalid:
            raise BadScalar(f"Scalar not in range [{lower}, order)")
        return valid

    def scalar_to_bytes(self, scalar: int) -> bytes:
        return (scalar % self.order).to_bytes(self.scalar_len, byteorder='little')

    def scalar_from_bytes(self, data: bytes) -> int:
        if len(data) != self.scalar_len:
            raise BadEncoding(f"Scalar must be {self.scalar_len} bytes, got {len(data)}")
        scalar = int.from_bytes(data, byteorder='little')
        self.validate_scalar(scalar)
        return scalar

    def unpack_valid(self, data: bytes, allow_neutral: bool = True):
        point = self.unpack(data)
        self.validate_point(point, allow_neutral=allow_neutral)
        return point

    @property
    def modulus_bytes(self) -> bytes:
        return self.modulus.to_bytes(self.scalar_len, byteorder='little')

    @property
    def order_bytes(self) -> bytes:
        return self.order.to_bytes(self.scalar_len, byteorder='little')

    @property
    def generator_bytes(self) -> bytes:
        return self.point_to_bytes(self.generator)


class EllipticGroup(Group):
    """
    Group of prime order points on a curve from ecdsa.curves.

    The neutral element is ecdsa's INFINITY for every curve.
    """

    def __init__(self, label: Elliptic, curve):
        self.curve = curve
        self.edwards = isinstance(curve.generator, PointEdwards)
        super().__init__(label, curve.curve.p(), curve.order, curve.generator, INFINITY)
        if self.edwards:
            point_len = len(curve.generator.to_bytes())
            self._neutral_bytes = (1).to_bytes(point_len, byteorder='little')
        else:
            self._neutral_bytes = b"\x00"

    def is_neutral(self, point) -> bool:
        return point is INFINITY or point == INFINITY

    def exp(self, point, scalar: int):
        scalar %= self.order
        if scalar == 0 or self.is_neutral(point):
            return self.neutral
        return point * scalar

    def operate(self, a, b):
        if self.is_neutral(a):
            return b
        if self.is_neutral(b):
            return a
        return a + b

    def invert(self, point):
        return self.exp(point, self.order - 1)

    def point_to_bytes(self, point) -> bytes:
        if self.is_neutral(point):
            return self._neutral_bytes
        if self.edwards:
            return point.to_bytes()
        return point.to_bytes("compressed")

    def unpack(self, data: bytes):
        data = bytes(data)
        if data == self._neutral_bytes:
            return self.neutral
        try:
            if self.edwards:
                point = PointEdwards.from_bytes(self.curve.curve, data)
            else:
                point = PointJacobi.from_bytes(
                    self.curve.curve, data, validate_encoding=True,
                    valid_encodings=("compressed",))
        except (MalformedPointError, numbertheory.Error, ValueError) as e:
            raise BadEncoding(f"Invalid {self.label.value} point encoding") from e
        if self.is_neutral(point):
            # (0, -1) on Edwards curves, which ecdsa treats as the identity
            raise BadPoint("Small order point")
        return point

    def validate_point(self, point, allow_neutral: bool = True, raise_on_invalid: bool = True) -> bool:
        if self.is_neutral(point):
            valid = allow_neutral
        elif not isinstance(point, (PointEdwards, PointJacobi)) or point.curve() != self.curve.curve:
            valid = False
        else:
            # (order + 1) * P == P iff P lies in the prime order subgroup
            valid = self.equals(point * (self.order + 1), point)
        if not valid and raise_on_invalid:
            raise BadPoint("Point not in subgroup")
        return valid


_CURVES = {
    Elliptic.ED25519: curves.Ed25519,
    Elliptic.ED448: curves.Ed448,
    Elliptic.SECP256K1: curves.SECP256k1,
    Elliptic.P256: curves.NIST256p,
}

_groups = {}


def init_group(label=DEFAULT_GROUP) -> Group:
    """Return the (cached) group for a backend label or its string value."""
    label = Elliptic(label)
    if label not in _groups:
        _groups[label] = EllipticGroup(label, _CURVES[label])
    return _groups[label]
