"""
Hash, HMAC and AES adapters consumed by the KEM and IES schemes.

AES and HMAC come from the cryptography package; plain digests use hashlib.
All failures are translated into DecryptionError / InvalidMac.
"""

import hashlib
import os
from collections import namedtuple

from cryptography.exceptions import InvalidSignature, InvalidTag
from cryptography.hazmat.decrepit.ciphers.modes import CFB, OFB
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .enums import Algorithm, AesMode
from .errors import DecryptionError, InvalidMac


KEY_SIZE = 32    # AES-256
GCM_IV_SIZE = 12
IV_SIZE = 16
BLOCK_BITS = 128
TAG_SIZE = 16

AesCiphered = namedtuple('AesCiphered', ['ciphered', 'iv', 'tag'])

_HASHES = {
    Algorithm.SHA224: hashes.SHA224,
    Algorithm.SHA256: hashes.SHA256,
    Algorithm.SHA384: hashes.SHA384,
    Algorithm.SHA512: hashes.SHA512,
    Algorithm.SHA3_224: hashes.SHA3_224,
    Algorithm.SHA3_256: hashes.SHA3_256,
    Algorithm.SHA3_384: hashes.SHA3_384,
    Algorithm.SHA3_512: hashes.SHA3_512,
}

_STREAM_MODES = {
    AesMode.AES_256_CFB: CFB,
    AesMode.AES_256_OFB: OFB,
    AesMode.AES_256_CTR: modes.CTR,
}


def digest(data: bytes, algorithm=Algorithm.DEFAULT) -> bytes:
    return hashlib.new(Algorithm(algorithm).value, data).digest()


def mac(key: bytes, data: bytes, algorithm=Algorithm.DEFAULT) -> bytes:
    h = hmac.HMAC(key, _HASHES[Algorithm(algorithm)]())
    h.update(data)
    return h.finalize()


def verify_mac(key: bytes, data: bytes, tag: bytes, algorithm=Algorithm.DEFAULT):
    """Constant time check; raises InvalidMac on mismatch."""
    h = hmac.HMAC(key, _HASHES[Algorithm(algorithm)]())
    h.update(data)
    try:
        h.verify(bytes(tag))
    except InvalidSignature as e:
        raise InvalidMac("Invalid MAC") from e


def iv_size(mode) -> int:
    return GCM_IV_SIZE if AesMode(mode) is AesMode.AES_256_GCM else IV_SIZE


def aes_encrypt(key: bytes, message: bytes, mode=AesMode.DEFAULT, iv: bytes = None) -> AesCiphered:
    mode = AesMode(mode)
    if len(key) != KEY_SIZE:
        raise ValueError("Invalid key length")
    if iv is None:
        iv = os.urandom(iv_size(mode))
    if len(iv) != iv_size(mode):
        raise ValueError("Invalid IV length")

    if mode is AesMode.AES_256_GCM:
        sealed = AESGCM(key).encrypt(iv, message, None)
        return AesCiphered(ciphered=sealed[:-TAG_SIZE], iv=iv, tag=sealed[-TAG_SIZE:])
    if mode is AesMode.AES_256_CBC:
        padder = padding.PKCS7(BLOCK_BITS).padder()
        message = padder.update(message) + padder.finalize()
        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    else:
        encryptor = Cipher(algorithms.AES(key), _STREAM_MODES[mode](iv)).encryptor()
    return AesCiphered(ciphered=encryptor.update(message) + encryptor.finalize(), iv=iv, tag=None)


def aes_decrypt(key: bytes, ciphered: bytes, iv: bytes, mode=AesMode.DEFAULT, tag: bytes = None) -> bytes:
    mode = AesMode(mode)
    if len(key) != KEY_SIZE:
        raise DecryptionError("Invalid key length")
    if len(iv) != iv_size(mode):
        raise DecryptionError("Invalid IV length")

    if mode is AesMode.AES_256_GCM:
        if tag is None:
            raise DecryptionError("Missing authentication tag")
        try:
            return AESGCM(key).decrypt(iv, bytes(ciphered) + bytes(tag), None)
        except InvalidTag as e:
            raise DecryptionError("AES decryption failure") from e
    if mode is AesMode.AES_256_CBC:
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        try:
            padded = decryptor.update(ciphered) + decryptor.finalize()
            unpadder = padding.PKCS7(BLOCK_BITS).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            raise DecryptionError("AES decryption failure") from e
    decryptor = Cipher(algorithms.AES(key), _STREAM_MODES[mode](iv)).decryptor()
    return decryptor.update(ciphered) + decryptor.finalize()
