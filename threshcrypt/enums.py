"""
Closed configuration enums shared by every module.

Each enum carries a DEFAULT alias that is substituted whenever a caller
omits the option.
"""

from enum import Enum


class Elliptic(Enum):
    """Supported curve backends."""
    ED25519 = "ed25519"
    ED448 = "ed448"
    SECP256K1 = "secp256k1"
    P256 = "p256"


class Algorithm(Enum):
    """Hash algorithms, named as hashlib names them."""
    SHA224 = "sha224"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"
    SHA3_224 = "sha3_224"
    SHA3_256 = "sha3_256"
    SHA3_384 = "sha3_384"
    SHA3_512 = "sha3_512"
    DEFAULT = "sha256"


class AesMode(Enum):
    AES_256_CBC = "aes-256-cbc"
    AES_256_CFB = "aes-256-cfb"
    AES_256_OFB = "aes-256-ofb"
    AES_256_CTR = "aes-256-ctr"
    AES_256_GCM = "aes-256-gcm"
    DEFAULT = "aes-256-cbc"


class ElgamalScheme(Enum):
    PLAIN = "plain"
    KEM = "kem"
    IES = "ies"


DEFAULT_GROUP = Elliptic.ED25519

# key derivation from the decryptor
KEM_HASH = Algorithm.SHA256
IES_HASH = Algorithm.SHA512
