"""
Threshold decryption: validate partial decryptors, interpolate them in the
exponent and open the ciphertext with the result.

Each shareholder i holding x_i contributes d_i = x_i * beta plus a DDH proof
against its public share x_i * g. For a qualified set S,

    decryptor = sum_{i in S} lambda_i * d_i = x * beta

with lambda_i the Lagrange coefficients at 0 (page 14 section 3.2 of
https://eprint.iacr.org/2020/540.pdf uses the same remapping for signing).

Functions taking threshold=None skip the share count check; below the real
threshold they return a wrong decryptor instead of failing.
"""

import logging
from collections import namedtuple
from enum import Enum
from typing import Dict, List, Sequence

from .elgamal import Ciphertext, ElGamal, scheme_of, verify_decryptor
from .enums import Algorithm
from .errors import InsufficientShares, InvalidPartialDecryptor
from .group import Group
from .shamir import PublicShare, reconstruct_public as _reconstruct_public, reconstruct_secret
from .sigma import DDHTuple, SigmaProtocol


logger = logging.getLogger(__name__)

PartialDecryptor = namedtuple('PartialDecryptor', ['index', 'value', 'proof'])
PartialValidation = namedtuple('PartialValidation', ['all_valid', 'invalid_indexes'])


def compute_partial_decryptor(group: Group, ciphertext: Ciphertext, index: int, share: int,
                              nonce: bytes = None, algorithm=Algorithm.DEFAULT) -> PartialDecryptor:
    beta = ciphertext.beta
    group.validate_point(beta, allow_neutral=False)
    value = group.exp(beta, share)
    ddh = DDHTuple(u=beta, v=group.exp(group.generator, share), w=value)
    proof = SigmaProtocol(group, algorithm).prove_ddh(share, ddh, nonce=nonce)
    return PartialDecryptor(index=index, value=value, proof=proof)


def validate_partial_decryptor(group: Group, ciphertext: Ciphertext, public_share: PublicShare,
                               partial: PartialDecryptor, nonce: bytes = None,
                               raise_on_invalid: bool = False) -> bool:
    valid = (public_share.index == partial.index
             and verify_decryptor(group, ciphertext, public_share.value, partial.value, partial.proof,
                                  nonce=nonce))
    if not valid:
        logger.debug("Rejected partial decryptor %d", partial.index)
        if raise_on_invalid:
            raise InvalidPartialDecryptor(f"Invalid partial decryptor: {partial.index}")
    return valid


def validate_partial_decryptors(group: Group, ciphertext: Ciphertext, public_shares: Sequence[PublicShare],
                                partials: Sequence[PartialDecryptor], threshold: int = None,
                                nonce: bytes = None, raise_on_invalid: bool = False) -> PartialValidation:
    """
    Check every partial against the public share with the same index.

    All partials are checked before anything is raised so the result lists
    every offending index, in the order the partials were given.
    """
    if threshold is not None and len(partials) < threshold:
        raise InsufficientShares(f"Need at least {threshold} partial decryptors, got {len(partials)}")
    by_index = {share.index: share for share in public_shares}
    invalid = []
    for partial in partials:
        public_share = by_index.get(partial.index)
        if public_share is None:
            logger.debug("No public share for partial decryptor %d", partial.index)
            invalid.append(partial.index)
        elif not validate_partial_decryptor(group, ciphertext, public_share, partial, nonce=nonce):
            invalid.append(partial.index)
    if invalid and raise_on_invalid:
        raise InvalidPartialDecryptor(f"Invalid partial decryptors: {invalid}")
    return PartialValidation(all_valid=not invalid, invalid_indexes=invalid)


def reconstruct_decryptor(group: Group, partials: Sequence[PartialDecryptor], threshold: int = None):
    """Raises BadPoint for a partial outside the prime order subgroup."""
    for p in partials:
        group.validate_point(p.value, allow_neutral=False)
    return _reconstruct_public(group, [(p.index, p.value) for p in partials], threshold)


def reconstruct_key(group: Group, shares: Sequence, threshold: int = None) -> int:
    return reconstruct_secret(group, shares, threshold)


def reconstruct_public(group: Group, shares: Sequence, threshold: int = None):
    return _reconstruct_public(group, shares, threshold)


def decrypt(group: Group, ciphertext: Ciphertext, partials: Sequence[PartialDecryptor], scheme=None,
            threshold: int = None) -> bytes:
    """
    Reconstruct the decryptor and open the ciphertext. Only group membership
    of the partials is checked here; see validate_partial_decryptors.
    """
    if scheme is None:
        scheme = scheme_of(ciphertext)
    decryptor = reconstruct_decryptor(group, partials, threshold)
    return ElGamal(group, scheme).decrypt_with_decryptor(ciphertext, decryptor)


class State(Enum):
    COLLECTING = "collecting"
    VALIDATING = "validating"
    AGGREGATING = "aggregating"
    DECRYPTING = "decrypting"
    DECRYPTED = "decrypted"
    ABORTED = "aborted"


class ThresholdDecryption:
    """
    One decryption session for one ciphertext.

    Partials are collected with add(), then run() validates them, drops the
    invalid ones, and decrypts if at least threshold valid partials remain.
    Any failure moves the session to ABORTED with a reason and re-raises.
    """

    def __init__(self, group: Group, ciphertext: Ciphertext, public_shares: Sequence[PublicShare],
                 threshold: int, scheme=None, nonce: bytes = None):
        if threshold < 1:
            raise ValueError(f"Threshold must be >= 1: {threshold}")
        self.group = group
        self.ciphertext = ciphertext
        self.public_shares = list(public_shares)
        self.threshold = threshold
        self.scheme = scheme
        self.nonce = nonce
        self.state = State.COLLECTING
        self.reason = None
        self.partials: Dict[int, PartialDecryptor] = {}
        self.invalid_indexes: List[int] = []
        self.plaintext = None

    def __repr__(self):
        return f"ThresholdDecryption(state={self.state.value}, partials={len(self.partials)})"

    def add(self, partial: PartialDecryptor):
        if self.state is not State.COLLECTING:
            raise ValueError(f"Cannot add partials in state {self.state.value}")
        if partial.index in self.partials:
            raise ValueError(f"Duplicate partial decryptor: {partial.index}")
        self.partials[partial.index] = partial

    def abort(self, reason: str):
        logger.info("Threshold decryption aborted: %s", reason)
        self.state = State.ABORTED
        self.reason = reason

    def run(self) -> bytes:
        if self.state is not State.COLLECTING:
            raise ValueError(f"Session already {self.state.value}")
        group = self.group
        partials = list(self.partials.values())
        try:
            self.state = State.VALIDATING
            result = validate_partial_decryptors(group, self.ciphertext, self.public_shares, partials,
                                                 nonce=self.nonce)
            self.invalid_indexes = result.invalid_indexes
            valid = [p for p in partials if p.index not in result.invalid_indexes]
            if len(valid) < self.threshold:
                raise InsufficientShares(
                    f"Need at least {self.threshold} valid partial decryptors, got {len(valid)}")

            self.state = State.AGGREGATING
            decryptor = reconstruct_decryptor(group, valid, self.threshold)

            self.state = State.DECRYPTING
            scheme = self.scheme if self.scheme is not None else scheme_of(self.ciphertext)
            plaintext = ElGamal(group, scheme).decrypt_with_decryptor(self.ciphertext, decryptor)
        except Exception as e:
            self.abort(str(e) or type(e).__name__)
            raise
        self.plaintext = plaintext
        self.state = State.DECRYPTED
        return plaintext
