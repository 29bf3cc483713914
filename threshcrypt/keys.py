"""
Key objects bundling a group with a secret, a public point or a share of
either, so callers do not have to thread the group through every call.
"""

from typing import Sequence, Tuple

from . import elgamal as _elgamal
from . import schnorr
from .combiner import PartialDecryptor, compute_partial_decryptor, validate_partial_decryptor
from .elgamal import Ciphertext, ElGamal, Encryption, scheme_of
from .enums import AesMode, Algorithm, DEFAULT_GROUP, ElgamalScheme
from .errors import BadEncoding, InvalidIdentity, InvalidSignature
from .group import Group, init_group
from .shamir import PublicShare, SecretShare, ShamirSharing, distribute_secret
from .sigma import DlogPair, SigmaProof, SigmaProtocol


class PublicKey:
    def __init__(self, group: Group, point):
        group.validate_point(point, allow_neutral=False)
        self.group = group
        self.point = point

    def __eq__(self, other):
        if not isinstance(other, PublicKey):
            return NotImplemented
        return self.group == other.group and self.group.equals(self.point, other.point)

    def __hash__(self):
        return hash((self.group, self.to_bytes()))

    def __repr__(self):
        return f"PublicKey({self.group.label.value}, {self.to_bytes().hex()})"

    def to_bytes(self) -> bytes:
        return self.group.point_to_bytes(self.point)

    @classmethod
    def from_bytes(cls, data: bytes, label=DEFAULT_GROUP) -> "PublicKey":
        group = init_group(label)
        return cls(group, group.unpack_valid(data, allow_neutral=False))

    def serialize(self) -> dict:
        return {'group': self.group.label.value, 'value': self.to_bytes().hex()}

    @classmethod
    def deserialize(cls, data: dict) -> "PublicKey":
        try:
            raw = bytes.fromhex(data['value'])
        except (KeyError, TypeError, ValueError) as e:
            raise BadEncoding("Malformed public key") from e
        return cls.from_bytes(raw, data['group'])

    def verify_identity(self, proof: SigmaProof, nonce: bytes = None, raise_on_invalid: bool = False) -> bool:
        """Check a proof that the holder knows the matching secret."""
        group = self.group
        valid = SigmaProtocol(group).verify_dlog(DlogPair(group.generator, self.point), proof, nonce=nonce)
        if not valid and raise_on_invalid:
            raise InvalidIdentity("Invalid identity proof")
        return valid

    def verify_signature(self, message: bytes, signature: schnorr.SchnorrSignature, nonce: bytes = None,
                         algorithm=Algorithm.DEFAULT, raise_on_invalid: bool = False) -> bool:
        valid = schnorr.verify(self.group, self.point, message, signature, nonce=nonce, algorithm=algorithm)
        if not valid and raise_on_invalid:
            raise InvalidSignature("Invalid signature")
        return valid

    def encrypt(self, message: bytes, scheme=ElgamalScheme.KEM, mode=AesMode.DEFAULT,
                algorithm=Algorithm.DEFAULT, randomness: int = None) -> Encryption:
        return ElGamal(self.group, scheme, mode, algorithm).encrypt(message, self.point, randomness)

    def prove_encryption(self, ciphertext: Ciphertext, randomness: int, nonce: bytes = None,
                         algorithm=Algorithm.DEFAULT) -> SigmaProof:
        return _elgamal.prove_encryption(self.group, ciphertext, randomness, nonce=nonce, algorithm=algorithm)

    def verify_decryptor(self, ciphertext: Ciphertext, decryptor, proof: SigmaProof, nonce: bytes = None,
                         raise_on_invalid: bool = False) -> bool:
        return _elgamal.verify_decryptor(self.group, ciphertext, self.point, decryptor, proof,
                                         nonce=nonce, raise_on_invalid=raise_on_invalid)


class PrivateKey:
    def __init__(self, group: Group, secret: int):
        group.validate_scalar(secret, allow_zero=False)
        self.group = group
        self.secret = secret

    def __repr__(self):
        return f"PrivateKey({self.group.label.value})"

    @classmethod
    def generate(cls, label=DEFAULT_GROUP) -> "PrivateKey":
        group = init_group(label)
        return cls(group, group.random_scalar())

    def public_key(self) -> PublicKey:
        return PublicKey(self.group, self.group.exp(self.group.generator, self.secret))

    def to_bytes(self) -> bytes:
        return self.group.scalar_to_bytes(self.secret)

    @classmethod
    def from_bytes(cls, data: bytes, label=DEFAULT_GROUP) -> "PrivateKey":
        group = init_group(label)
        return cls(group, group.scalar_from_bytes(data))

    def serialize(self) -> dict:
        return {'group': self.group.label.value, 'value': self.to_bytes().hex()}

    @classmethod
    def deserialize(cls, data: dict) -> "PrivateKey":
        try:
            raw = bytes.fromhex(data['value'])
        except (KeyError, TypeError, ValueError) as e:
            raise BadEncoding("Malformed private key") from e
        return cls.from_bytes(raw, data['group'])

    def prove_identity(self, nonce: bytes = None, algorithm=Algorithm.DEFAULT) -> SigmaProof:
        group = self.group
        pub = group.exp(group.generator, self.secret)
        return SigmaProtocol(group, algorithm).prove_dlog(self.secret, DlogPair(group.generator, pub), nonce=nonce)

    def sign(self, message: bytes, nonce: bytes = None, algorithm=Algorithm.DEFAULT) -> schnorr.SchnorrSignature:
        return schnorr.sign(self.group, self.secret, message, nonce=nonce, algorithm=algorithm)

    def decrypt(self, ciphertext: Ciphertext, scheme=None) -> bytes:
        """The scheme is read off the ciphertext unless given."""
        if scheme is None:
            scheme = scheme_of(ciphertext)
        return ElGamal(self.group, scheme).decrypt(ciphertext, self.secret)

    def verify_encryption(self, ciphertext: Ciphertext, proof: SigmaProof, nonce: bytes = None,
                          raise_on_invalid: bool = False) -> bool:
        return _elgamal.verify_encryption(self.group, ciphertext, proof, nonce=nonce,
                                          raise_on_invalid=raise_on_invalid)

    def compute_decryptor(self, ciphertext: Ciphertext):
        return _elgamal.compute_decryptor(self.group, ciphertext, self.secret)

    def prove_decryptor(self, ciphertext: Ciphertext, nonce: bytes = None,
                        algorithm=Algorithm.DEFAULT) -> Tuple[object, SigmaProof]:
        decryptor = self.compute_decryptor(ciphertext)
        proof = _elgamal.prove_decryptor(self.group, ciphertext, self.secret, nonce=nonce, algorithm=algorithm)
        return decryptor, proof

    def generate_sharing(self, n: int, t: int, predefined: Sequence[Tuple[int, int]] = None) -> ShamirSharing:
        return distribute_secret(self.group, self.secret, n, t, predefined)

    def diffie_hellman(self, pub: PublicKey):
        if pub.group != self.group:
            raise ValueError("Keys belong to different groups")
        return self.group.exp(pub.point, self.secret)


class PartialPublic:
    """Public share x_i * g of a shareholder."""

    def __init__(self, group: Group, index: int, value):
        self.group = group
        self.index = index
        self.value = value

    def __repr__(self):
        return f"PartialPublic({self.index})"

    @property
    def share(self) -> PublicShare:
        return PublicShare(self.index, self.value)

    def verify_partial_decryptor(self, ciphertext: Ciphertext, partial: PartialDecryptor, nonce: bytes = None,
                                 raise_on_invalid: bool = False) -> bool:
        return validate_partial_decryptor(self.group, ciphertext, self.share, partial, nonce=nonce,
                                          raise_on_invalid=raise_on_invalid)


class PartialKey:
    """Secret share x_i of a shareholder."""

    def __init__(self, group: Group, index: int, value: int):
        group.validate_scalar(value)
        self.group = group
        self.index = index
        self.value = value

    def __repr__(self):
        return f"PartialKey({self.index})"

    @classmethod
    def from_share(cls, group: Group, share: SecretShare) -> "PartialKey":
        return cls(group, share.index, share.value)

    @property
    def share(self) -> SecretShare:
        return SecretShare(self.index, self.value)

    def public_share(self) -> PartialPublic:
        return PartialPublic(self.group, self.index, self.group.exp(self.group.generator, self.value))

    def compute_partial_decryptor(self, ciphertext: Ciphertext, nonce: bytes = None,
                                  algorithm=Algorithm.DEFAULT) -> PartialDecryptor:
        return compute_partial_decryptor(self.group, ciphertext, self.index, self.value,
                                         nonce=nonce, algorithm=algorithm)
