"""
Error taxonomy.

Everything derives from ValueError so callers catching ValueError around
sharing and reconstruction keep working.
"""


class ThresholdError(ValueError):
    pass


class BadEncoding(ThresholdError):
    """Malformed point or scalar bytes."""


class BadPoint(ThresholdError):
    """Well formed point outside the prime order subgroup (or neutral when disallowed)."""


class BadScalar(ThresholdError):
    """Scalar outside the allowed range."""


class InvalidDegree(ThresholdError):
    pass


class InterpolationError(ThresholdError):
    pass


class ShamirError(ThresholdError):
    pass


class TooManyPredefined(ShamirError):
    pass


class InvalidShare(ThresholdError):
    """Secret share does not match the published commitments."""


class InvalidPublicShare(ThresholdError):
    pass


class InvalidProof(ThresholdError):
    pass


class InvalidSignature(InvalidProof):
    pass


class InvalidIdentity(InvalidProof):
    pass


class InvalidEncryptionProof(InvalidProof):
    pass


class InvalidDecryptor(InvalidProof):
    pass


class InvalidPartialDecryptor(InvalidDecryptor):
    pass


class InvalidPointEncoding(ThresholdError):
    pass


class InvalidMac(ThresholdError):
    pass


class DecryptionError(ThresholdError):
    pass


class InsufficientShares(ThresholdError):
    pass
