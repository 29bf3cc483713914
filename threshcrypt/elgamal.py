"""
ElGamal encryption over a prime order group, in three flavours:

    plain   the message is a group element, alpha = decryptor + message
    kem     the decryptor is hashed into an AES key (DH key encapsulation)
    ies     as kem, plus an HMAC over the AES output (integrated encryption)

beta = randomness * g and decryptor = randomness * pub = secret * beta for
all three. Only alpha differs; its shape is tied to the scheme, so a
ciphertext produced under one scheme is refused by the others.

The randomness must be fresh for every encryption. Reusing it under the same
public key reveals the ratio of the two messages (plain) or reuses the AES
key (kem, ies); this is not detected here.
"""

import logging
from collections import namedtuple

from .enums import AesMode, Algorithm, ElgamalScheme, IES_HASH, KEM_HASH
from .errors import (BadEncoding, BadPoint, DecryptionError, InvalidDecryptor,
                     InvalidEncryptionProof, InvalidPointEncoding)
from .group import Group
from .sigma import DDHTuple, DlogPair, SigmaProof, SigmaProtocol
from .symmetric import KEY_SIZE, aes_decrypt, aes_encrypt, digest, mac, verify_mac


logger = logging.getLogger(__name__)

Ciphertext = namedtuple('Ciphertext', ['alpha', 'beta'])
Encryption = namedtuple('Encryption', ['ciphertext', 'decryptor', 'randomness'])
KemAlpha = namedtuple('KemAlpha', ['ciphered', 'iv', 'tag', 'mode'])
IesAlpha = namedtuple('IesAlpha', ['ciphered', 'iv', 'mac', 'tag', 'mode', 'algorithm'])


class ElGamal:
    """
    Encrypt and decrypt under one scheme.

    Arguments:
    group: group the keys live in.
    scheme: plain, kem or ies.
    mode: AES mode for kem and ies.
    algorithm: HMAC hash for ies.
    """

    def __init__(self, group: Group, scheme=ElgamalScheme.KEM, mode=AesMode.DEFAULT,
                 algorithm=Algorithm.DEFAULT):
        self.group = group
        self.scheme = ElgamalScheme(scheme)
        self.mode = AesMode(mode)
        self.algorithm = Algorithm(algorithm)

    def __repr__(self):
        return f"ElGamal({self.group.label.value}, {self.scheme.value})"

    def _keys(self, decryptor, algorithm: Algorithm) -> bytes:
        return digest(self.group.point_to_bytes(decryptor), algorithm)

    def _seal(self, message: bytes, decryptor):
        group = self.group
        if self.scheme is ElgamalScheme.PLAIN:
            try:
                point = group.unpack_valid(message, allow_neutral=False)
            except (BadEncoding, BadPoint) as e:
                raise InvalidPointEncoding("Message is not a valid point encoding") from e
            return group.operate(decryptor, point)
        elif self.scheme is ElgamalScheme.KEM:
            key = self._keys(decryptor, KEM_HASH)
            ciphered, iv, tag = aes_encrypt(key, message, self.mode)
            return KemAlpha(ciphered=ciphered, iv=iv, tag=tag, mode=self.mode)
        elif self.scheme is ElgamalScheme.IES:
            key = self._keys(decryptor, IES_HASH)
            key_aes, key_mac = key[:KEY_SIZE], key[KEY_SIZE:2 * KEY_SIZE]
            ciphered, iv, tag = aes_encrypt(key_aes, message, self.mode)
            return IesAlpha(ciphered=ciphered, iv=iv, mac=mac(key_mac, ciphered, self.algorithm),
                            tag=tag, mode=self.mode, algorithm=self.algorithm)
        raise ValueError(f"Unsupported scheme: {self.scheme}")

    def _open(self, alpha, decryptor) -> bytes:
        group = self.group
        if self.scheme is ElgamalScheme.PLAIN:
            if isinstance(alpha, (KemAlpha, IesAlpha)) or not group.validate_point(alpha, raise_on_invalid=False):
                raise DecryptionError("Plain ciphertext must carry a group element")
            return group.point_to_bytes(group.operate(alpha, group.invert(decryptor)))
        elif self.scheme is ElgamalScheme.KEM:
            if not isinstance(alpha, KemAlpha):
                raise DecryptionError("Expected a KEM ciphertext")
            key = self._keys(decryptor, KEM_HASH)
            return aes_decrypt(key, alpha.ciphered, alpha.iv, alpha.mode, alpha.tag)
        elif self.scheme is ElgamalScheme.IES:
            if not isinstance(alpha, IesAlpha):
                raise DecryptionError("Expected an IES ciphertext")
            key = self._keys(decryptor, IES_HASH)
            key_aes, key_mac = key[:KEY_SIZE], key[KEY_SIZE:2 * KEY_SIZE]
            # authenticate before touching AES
            verify_mac(key_mac, alpha.ciphered, alpha.mac, alpha.algorithm)
            return aes_decrypt(key_aes, alpha.ciphered, alpha.iv, alpha.mode, alpha.tag)
        raise ValueError(f"Unsupported scheme: {self.scheme}")

    def encrypt(self, message: bytes, pub, randomness: int = None) -> Encryption:
        group = self.group
        group.validate_point(pub, allow_neutral=False)
        if randomness is None:
            randomness = group.random_scalar()
        else:
            group.validate_scalar(randomness, allow_zero=False)
        beta = group.exp(group.generator, randomness)
        decryptor = group.exp(pub, randomness)
        alpha = self._seal(message, decryptor)
        return Encryption(ciphertext=Ciphertext(alpha=alpha, beta=beta), decryptor=decryptor,
                          randomness=randomness)

    def decrypt(self, ciphertext: Ciphertext, secret: int) -> bytes:
        group = self.group
        group.validate_point(ciphertext.beta, allow_neutral=False)
        return self._open(ciphertext.alpha, group.exp(ciphertext.beta, secret))

    def decrypt_with_decryptor(self, ciphertext: Ciphertext, decryptor) -> bytes:
        return self._open(ciphertext.alpha, decryptor)

    def decrypt_with_randomness(self, ciphertext: Ciphertext, pub, randomness: int) -> bytes:
        self.group.validate_point(pub, allow_neutral=False)
        return self._open(ciphertext.alpha, self.group.exp(pub, randomness))


def elgamal(group: Group, scheme=ElgamalScheme.KEM, mode=AesMode.DEFAULT,
            algorithm=Algorithm.DEFAULT) -> ElGamal:
    return ElGamal(group, scheme, mode, algorithm)


def plain_elgamal(group: Group) -> ElGamal:
    """Not CCA secure; do not use directly unless you know what you do."""
    return ElGamal(group, ElgamalScheme.PLAIN)


def kem_elgamal(group: Group, mode=AesMode.DEFAULT) -> ElGamal:
    return ElGamal(group, ElgamalScheme.KEM, mode)


def ies_elgamal(group: Group, mode=AesMode.DEFAULT, algorithm=Algorithm.DEFAULT) -> ElGamal:
    return ElGamal(group, ElgamalScheme.IES, mode, algorithm)


def scheme_of(ciphertext: Ciphertext) -> ElgamalScheme:
    if isinstance(ciphertext.alpha, IesAlpha):
        return ElgamalScheme.IES
    if isinstance(ciphertext.alpha, KemAlpha):
        return ElgamalScheme.KEM
    return ElgamalScheme.PLAIN


# proofs about ciphertexts

def prove_encryption(group: Group, ciphertext: Ciphertext, randomness: int, nonce: bytes = None,
                     algorithm=Algorithm.DEFAULT) -> SigmaProof:
    """Proof of knowledge of the randomness r with beta = r * g."""
    return SigmaProtocol(group, algorithm).prove_dlog(
        randomness, DlogPair(group.generator, ciphertext.beta), nonce=nonce)


def verify_encryption(group: Group, ciphertext: Ciphertext, proof: SigmaProof, nonce: bytes = None,
                      raise_on_invalid: bool = False) -> bool:
    valid = (group.validate_point(ciphertext.beta, allow_neutral=False, raise_on_invalid=False)
             and SigmaProtocol(group).verify_dlog(DlogPair(group.generator, ciphertext.beta), proof,
                                                  nonce=nonce))
    if not valid:
        logger.debug("Rejected encryption proof")
        if raise_on_invalid:
            raise InvalidEncryptionProof("Invalid encryption proof")
    return valid


def compute_decryptor(group: Group, ciphertext: Ciphertext, secret: int):
    group.validate_point(ciphertext.beta, allow_neutral=False)
    return group.exp(ciphertext.beta, secret)


def prove_decryptor(group: Group, ciphertext: Ciphertext, secret: int, nonce: bytes = None,
                    algorithm=Algorithm.DEFAULT) -> SigmaProof:
    """
    DDH proof that (beta, secret * g, secret * beta) share the exponent secret.
    """
    g = group.generator
    beta = ciphertext.beta
    ddh = DDHTuple(u=beta, v=group.exp(g, secret), w=group.exp(beta, secret))
    return SigmaProtocol(group, algorithm).prove_ddh(secret, ddh, nonce=nonce)


def verify_decryptor(group: Group, ciphertext: Ciphertext, pub, decryptor, proof: SigmaProof,
                     nonce: bytes = None, raise_on_invalid: bool = False) -> bool:
    valid = all(group.validate_point(p, allow_neutral=False, raise_on_invalid=False)
                for p in (ciphertext.beta, pub, decryptor))
    if valid:
        ddh = DDHTuple(u=ciphertext.beta, v=pub, w=decryptor)
        valid = SigmaProtocol(group).verify_ddh(ddh, proof, nonce=nonce)
    if not valid:
        logger.debug("Rejected decryptor proof")
        if raise_on_invalid:
            raise InvalidDecryptor("Invalid decryptor proof")
    return valid
