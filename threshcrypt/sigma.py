"""
Non interactive zero knowledge proofs of linear discrete log relations.

A single engine proves knowledge of scalars x_1..x_n such that

    v_i = x_1 * u_i1 + ... + x_n * u_in        for every row i

over group elements u_ij, v_i. Every concrete proof in the package (dlog,
DDH, equality of discrete logs, Okamoto representation, AND composition
and Schnorr signatures) is a thin relation builder on top of it.

The three move Sigma protocol is collapsed with the Fiat-Shamir transform.
For the single row, single witness case please refer to
https://tools.ietf.org/html/rfc8235#section-3.3
"""

import hashlib
import logging
from collections import namedtuple
from typing import List, Sequence

from .enums import Algorithm
from .group import Group


logger = logging.getLogger(__name__)

LinearRelation = namedtuple('LinearRelation', ['us', 'vs'])
DlogPair = namedtuple('DlogPair', ['u', 'v'])
# v = z * g and w = z * u
DDHTuple = namedtuple('DDHTuple', ['u', 'v', 'w'])
SigmaProof = namedtuple('SigmaProof', ['commitments', 'response', 'algorithm'])

DOMAIN = b"threshcrypt/sigma"


class SigmaProtocol:
    """
    Prover and verifier for linear relations over one group.

    Arguments:
    group: the group all relation elements live in.
    algorithm: hash used to derive the challenge.
    """

    def __init__(self, group: Group, algorithm=Algorithm.DEFAULT):
        self.group = group
        self.algorithm = Algorithm(algorithm)

    def challenge(self, points: Sequence, extras: Sequence[bytes] = (), nonce: bytes = None,
                  algorithm=None) -> int:
        """
        c = H(domain || modulus || order || generator || points || extras || nonce) mod order
        """
        group = self.group
        algorithm = Algorithm(algorithm or self.algorithm)
        h = hashlib.new(algorithm.value)
        h.update(DOMAIN + group.label.value.encode())
        h.update(group.modulus_bytes)
        h.update(group.order_bytes)
        h.update(group.generator_bytes)
        for point in points:
            h.update(group.point_to_bytes(point))
        for extra in extras:
            h.update(extra)
        if nonce is not None:
            h.update(nonce)
        return int.from_bytes(h.digest(), byteorder='little') % group.order

    def _check_relation(self, relation: LinearRelation, n: int):
        us, vs = relation
        if len(us) != len(vs):
            raise ValueError("Relation needs exactly one target per row")
        for row in us:
            if len(row) != n:
                raise ValueError(f"Relation row has {len(row)} bases, expected {n}")

    def _combine(self, row, scalars):
        group = self.group
        acc = group.neutral
        for u, s in zip(row, scalars):
            acc = group.operate(acc, group.exp(u, s))
        return acc

    @staticmethod
    def _transcript(relation: LinearRelation, commitments) -> List:
        us, vs = relation
        return [u for row in us for u in row] + list(vs) + list(commitments)

    def prove_linear(self, witnesses: Sequence[int], relation: LinearRelation,
                     extras: Sequence[bytes] = (), nonce: bytes = None) -> SigmaProof:
        group = self.group
        self._check_relation(relation, len(witnesses))
        masks = [group.random_scalar() for _ in witnesses]
        commitments = [self._combine(row, masks) for row in relation.us]
        c = self.challenge(self._transcript(relation, commitments), extras, nonce)
        response = [(k + c * x) % group.order for k, x in zip(masks, witnesses)]
        return SigmaProof(commitments=commitments, response=response, algorithm=self.algorithm)

    def verify_linear(self, relation: LinearRelation, proof: SigmaProof,
                      extras: Sequence[bytes] = (), nonce: bytes = None) -> bool:
        """
        Check sum_j r_j * u_ij == t_i + c * v_i for every row. Returns False on
        any failed row or on a malformed proof; never raises for the latter.
        """
        group = self.group
        n = len(relation.us[0]) if relation.us else 0
        self._check_relation(relation, n)
        try:
            commitments, response, algorithm = proof
            dimensions = len(commitments) == len(relation.vs) and len(response) == n
        except (TypeError, ValueError):
            logger.debug("Malformed proof")
            return False
        if not dimensions:
            logger.debug("Proof dimensions do not match the relation")
            return False
        try:
            algorithm = Algorithm(algorithm)
        except (TypeError, ValueError):
            logger.debug("Unknown proof algorithm %r", algorithm)
            return False
        for t in commitments:
            if not group.validate_point(t, raise_on_invalid=False):
                logger.debug("Proof commitment outside the group")
                return False
        for r in response:
            if not group.validate_scalar(r, raise_on_invalid=False):
                logger.debug("Proof response out of range")
                return False

        c = self.challenge(self._transcript(relation, commitments), extras, nonce, algorithm)
        for row, v, t in zip(relation.us, relation.vs, commitments):
            lhs = self._combine(row, response)
            rhs = group.operate(t, group.exp(v, c))
            if not group.equals(lhs, rhs):
                logger.debug("Relation row does not hold")
                return False
        return True

    # dlog: v = x * u

    def prove_dlog(self, x: int, pair: DlogPair, nonce: bytes = None, extras: Sequence[bytes] = ()) -> SigmaProof:
        u, v = pair
        return self.prove_linear([x], LinearRelation([[u]], [v]), extras, nonce)

    def verify_dlog(self, pair: DlogPair, proof: SigmaProof, nonce: bytes = None,
                    extras: Sequence[bytes] = ()) -> bool:
        u, v = pair
        return self.verify_linear(LinearRelation([[u]], [v]), proof, extras, nonce)

    # equality of discrete logs: v_i = z * u_i for every pair

    def prove_eq_dlog(self, z: int, pairs: Sequence[DlogPair], nonce: bytes = None) -> SigmaProof:
        relation = LinearRelation([[u] for u, _ in pairs], [v for _, v in pairs])
        return self.prove_linear([z], relation, (), nonce)

    def verify_eq_dlog(self, pairs: Sequence[DlogPair], proof: SigmaProof, nonce: bytes = None) -> bool:
        relation = LinearRelation([[u] for u, _ in pairs], [v for _, v in pairs])
        return self.verify_linear(relation, proof, (), nonce)

    # DDH: v = z * g and w = z * u

    def prove_ddh(self, z: int, ddh: DDHTuple, nonce: bytes = None) -> SigmaProof:
        u, v, w = ddh
        return self.prove_eq_dlog(z, [DlogPair(self.group.generator, v), DlogPair(u, w)], nonce)

    def verify_ddh(self, ddh: DDHTuple, proof: SigmaProof, nonce: bytes = None) -> bool:
        u, v, w = ddh
        return self.verify_eq_dlog([DlogPair(self.group.generator, v), DlogPair(u, w)], proof, nonce)

    # Okamoto: u = s * g + t * h

    def prove_okamoto(self, s: int, t: int, h, u, nonce: bytes = None) -> SigmaProof:
        relation = LinearRelation([[self.group.generator, h]], [u])
        return self.prove_linear([s, t], relation, (), nonce)

    def verify_okamoto(self, h, u, proof: SigmaProof, nonce: bytes = None) -> bool:
        relation = LinearRelation([[self.group.generator, h]], [u])
        return self.verify_linear(relation, proof, (), nonce)

    # AND composition of independent dlogs under one challenge

    def _and_relation(self, pairs: Sequence[DlogPair]) -> LinearRelation:
        m = len(pairs)
        us = [[self.group.neutral] * m for _ in range(m)]
        for i, (u, _) in enumerate(pairs):
            us[i][i] = u
        return LinearRelation(us, [v for _, v in pairs])

    def prove_and_dlog(self, witnesses: Sequence[int], pairs: Sequence[DlogPair],
                       nonce: bytes = None) -> SigmaProof:
        if len(witnesses) != len(pairs):
            raise ValueError("One witness per pair is required")
        return self.prove_linear(witnesses, self._and_relation(pairs), (), nonce)

    def verify_and_dlog(self, pairs: Sequence[DlogPair], proof: SigmaProof, nonce: bytes = None) -> bool:
        return self.verify_linear(self._and_relation(pairs), proof, (), nonce)
