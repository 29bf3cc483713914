"""
Shamir secret sharing with Feldman and Pedersen verifiable commitments.

The threshold scheme is based on values t, n:
t = minimum number of shares that reconstruct the secret
n = total number of participants.

Shares are indexed 1..n; the secret is the constant term of a degree t - 1
polynomial over the scalars of the group. Every party can check its share
against the published commitments (section 2.8 of
https://eprint.iacr.org/2020/540.pdf for the Feldman equation).
"""

import logging
from collections import namedtuple
from typing import List, Sequence, Tuple

from .enums import Algorithm
from .errors import (InsufficientShares, InvalidPublicShare, InvalidShare, ShamirError,
                     TooManyPredefined)
from .group import Group
from .polynomial import Lagrange, Polynomial, lagrange_coefficient
from .sigma import DlogPair, SigmaProtocol


logger = logging.getLogger(__name__)

SecretShare = namedtuple('SecretShare', ['index', 'value'])
PublicShare = namedtuple('PublicShare', ['index', 'value'])
SecretSharePacket = namedtuple('SecretSharePacket', ['index', 'value', 'binding'], defaults=[None])
PublicSharePacket = namedtuple('PublicSharePacket', ['index', 'value', 'proof'])
FeldmanPackets = namedtuple('FeldmanPackets', ['packets', 'commitments'])
PedersenPackets = namedtuple('PedersenPackets', ['packets', 'bindings', 'commitments'])


def _index_bytes(group: Group, index: int) -> bytes:
    return group.scalar_to_bytes(index)


class ShamirSharing:
    """
    A dealt sharing: the hidden polynomial plus the (n, t) parameters.

    Built by distribute_secret; never construct it with a polynomial whose
    degree exceeds t - 1.
    """

    def __init__(self, group: Group, polynomial: Polynomial, n: int, t: int):
        self.group = group
        self.polynomial = polynomial
        self.n = n
        self.t = t

    @property
    def secret(self) -> int:
        return self.polynomial.evaluate(0)

    def _padded_coeffs(self) -> List[int]:
        coeffs = self.polynomial.coeffs
        return coeffs + [0] * (self.t - len(coeffs))

    def get_secret_shares(self) -> List[SecretShare]:
        return [SecretShare(i, self.polynomial.evaluate(i)) for i in range(1, self.n + 1)]

    def get_public_shares(self) -> List[PublicShare]:
        g = self.group.generator
        return [PublicShare(s.index, self.group.exp(g, s.value)) for s in self.get_secret_shares()]

    def get_commitments(self) -> list:
        """Feldman commitments: one point per coefficient, t in total."""
        g = self.group.generator
        return [self.group.exp(g, c) for c in self._padded_coeffs()]

    def create_feldman_packets(self) -> FeldmanPackets:
        packets = [SecretSharePacket(s.index, s.value) for s in self.get_secret_shares()]
        return FeldmanPackets(packets=packets, commitments=self.get_commitments())

    def create_pedersen_packets(self, h) -> PedersenPackets:
        """
        Commit with a second generator h whose discrete log to g is unknown
        to the dealer; hiding no longer relies on the hardness of dlog.
        """
        group = self.group
        group.validate_point(h, allow_neutral=False)
        g = group.generator
        blinding = [group.random_scalar() for _ in range(self.t)]
        blinding_poly = Polynomial(blinding, group.order)
        commitments = [group.operate(group.exp(g, a), group.exp(h, b))
                       for a, b in zip(self._padded_coeffs(), blinding)]
        packets = []
        bindings = []
        for s in self.get_secret_shares():
            binding = blinding_poly.evaluate(s.index)
            bindings.append(binding)
            packets.append(SecretSharePacket(s.index, s.value, binding))
        return PedersenPackets(packets=packets, bindings=bindings, commitments=commitments)


def distribute_secret(group: Group, secret: int, n: int, t: int,
                      predefined: Sequence[Tuple[int, int]] = None) -> ShamirSharing:
    """
    Deal a t-of-n sharing of secret.

    Arguments:
    group: the group whose order bounds the scalar field.
    secret: the scalar to share.
    n: total number of shares, indexed 1..n.
    t: threshold, any t shares reconstruct the secret.
    predefined: optional (index, value) pairs fixing the shares of specific
        parties; fewer than t are allowed.
    """
    order = group.order
    if not 1 <= t <= n:
        raise ShamirError(f"Threshold must satisfy 1 <= t <= n: t={t}, n={n}")
    if n >= order:
        raise ShamirError("Number of shares must be smaller than the group order")
    group.validate_scalar(secret)

    predefined = list(predefined or [])
    if len(predefined) >= t:
        raise TooManyPredefined(f"At most {t - 1} predefined points are allowed, got {len(predefined)}")
    if not predefined:
        coeffs = [secret] + [group.random_scalar() for _ in range(t - 1)]
        return ShamirSharing(group, Polynomial(coeffs, order), n, t)

    for index, value in predefined:
        if not 1 <= index <= n:
            raise ShamirError(f"Predefined index out of range: {index}")
        group.validate_scalar(value)
    points = [(0, secret)] + [(index, value) for index, value in predefined]
    used = {x for x, _ in points}
    x = 1
    while len(points) < t:
        if x not in used:
            points.append((x, group.random_scalar()))
        x += 1
    # Lagrange rejects duplicate predefined indexes
    polynomial = Polynomial(Lagrange(points, order).coeffs, order)
    return ShamirSharing(group, polynomial, n, t)


def evaluate_commitments(group: Group, index: int, commitments: Sequence):
    # sum_j index^j * C_j, Horner in the exponent
    acc = group.neutral
    for c in reversed(commitments):
        acc = group.operate(group.exp(acc, index), c)
    return acc


def verify_feldman(group: Group, share, commitments: Sequence, raise_on_invalid: bool = False) -> bool:
    """
    Check value * g == sum_j index^j * C_j for a share (index, value).
    """
    index, value = share[0], share[1]
    valid = (group.validate_scalar(value, raise_on_invalid=False)
             and group.equals(group.exp(group.generator, value), evaluate_commitments(group, index, commitments)))
    if not valid:
        logger.debug("Feldman verification failed for share %d", index)
        if raise_on_invalid:
            raise InvalidShare(f"Share {index} does not match the commitments")
    return valid


def verify_pedersen(group: Group, share, binding: int, h, commitments: Sequence,
                    raise_on_invalid: bool = False) -> bool:
    """
    Check value * g + binding * h == sum_j index^j * C_j.
    """
    index, value = share[0], share[1]
    valid = (group.validate_scalar(value, raise_on_invalid=False)
             and group.validate_scalar(binding, raise_on_invalid=False))
    if valid:
        lhs = group.operate(group.exp(group.generator, value), group.exp(h, binding))
        valid = group.equals(lhs, evaluate_commitments(group, index, commitments))
    if not valid:
        logger.debug("Pedersen verification failed for share %d", index)
        if raise_on_invalid:
            raise InvalidShare(f"Share {index} does not match the commitments")
    return valid


def parse_feldman_packet(group: Group, packet: SecretSharePacket, commitments: Sequence) -> SecretShare:
    verify_feldman(group, packet, commitments, raise_on_invalid=True)
    return SecretShare(packet.index, packet.value)


def parse_pedersen_packet(group: Group, packet: SecretSharePacket, h, commitments: Sequence) -> SecretShare:
    if packet.binding is None:
        raise InvalidShare(f"Packet {packet.index} carries no binding")
    verify_pedersen(group, packet, packet.binding, h, commitments, raise_on_invalid=True)
    return SecretShare(packet.index, packet.value)


def create_public_share_packet(group: Group, share: SecretShare, nonce: bytes = None,
                               algorithm=Algorithm.DEFAULT) -> PublicSharePacket:
    """
    Advertise value * g together with a proof of knowledge of value.
    """
    g = group.generator
    value = group.exp(g, share.value)
    proof = SigmaProtocol(group, algorithm).prove_dlog(
        share.value, DlogPair(g, value), nonce=nonce, extras=[_index_bytes(group, share.index)])
    return PublicSharePacket(share.index, value, proof)


def parse_public_share_packet(group: Group, packet: PublicSharePacket, nonce: bytes = None) -> PublicShare:
    if not group.validate_point(packet.value, allow_neutral=False, raise_on_invalid=False):
        raise InvalidPublicShare(f"Public share {packet.index} is not a valid point")
    valid = SigmaProtocol(group).verify_dlog(
        DlogPair(group.generator, packet.value), packet.proof, nonce=nonce,
        extras=[_index_bytes(group, packet.index)])
    if not valid:
        logger.debug("Rejected public share packet %d", packet.index)
        raise InvalidPublicShare(f"Invalid proof for public share {packet.index}")
    return PublicShare(packet.index, packet.value)


def _check_threshold(shares: Sequence, threshold: int):
    if threshold is not None and len(shares) < threshold:
        raise InsufficientShares(f"Need at least {threshold} shares, got {len(shares)}")
    if not shares:
        raise InsufficientShares("No shares provided")


def reconstruct_secret(group: Group, shares: Sequence, threshold: int = None) -> int:
    """
    Interpolate the scalar shares at x = 0.

    With threshold=None the count is not checked and fewer than t shares
    silently yield a wrong value.
    """
    _check_threshold(shares, threshold)
    indexes = [s[0] for s in shares]
    secret = 0
    for index, value in shares:
        secret += lagrange_coefficient(index, indexes, group.order) * value
    logger.info("Reconstructed secret from %d shares", len(shares))
    return secret % group.order


def reconstruct_public(group: Group, shares: Sequence, threshold: int = None):
    """
    Same as reconstruct_secret, lifted into the exponent: sum_i lambda_i * P_i.
    """
    _check_threshold(shares, threshold)
    indexes = [s[0] for s in shares]
    acc = group.neutral
    for index, value in shares:
        acc = group.operate(acc, group.exp(value, lagrange_coefficient(index, indexes, group.order)))
    logger.info("Reconstructed group element from %d shares", len(shares))
    return acc
