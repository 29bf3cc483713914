"""
Schnorr signatures as a message bound proof of knowledge of the secret key.

The signature is the (commitment, response) pair of a dlog proof for
pub = secret * g whose challenge additionally hashes the message.
Please refer to https://tools.ietf.org/html/rfc8235#section-3.3
"""

from collections import namedtuple

from .enums import Algorithm
from .group import Group
from .sigma import SigmaProtocol, SigmaProof, DlogPair


SchnorrSignature = namedtuple('SchnorrSignature', ['commitment', 'response'])


def sign(group: Group, secret: int, message: bytes, nonce: bytes = None,
         algorithm=Algorithm.DEFAULT) -> SchnorrSignature:
    g = group.generator
    pub = group.exp(g, secret)
    proof = SigmaProtocol(group, algorithm).prove_dlog(
        secret, DlogPair(g, pub), nonce=nonce, extras=[message])
    return SchnorrSignature(commitment=proof.commitments[0], response=proof.response[0])


def verify(group: Group, pub, message: bytes, signature: SchnorrSignature, nonce: bytes = None,
           algorithm=Algorithm.DEFAULT) -> bool:
    """
    Verify the above signature against the public key.
    """
    if not group.validate_point(pub, allow_neutral=False, raise_on_invalid=False):
        return False
    algorithm = Algorithm(algorithm)
    proof = SigmaProof(commitments=[signature.commitment], response=[signature.response],
                       algorithm=algorithm)
    return SigmaProtocol(group, algorithm).verify_dlog(
        DlogPair(group.generator, pub), proof, nonce=nonce, extras=[message])
