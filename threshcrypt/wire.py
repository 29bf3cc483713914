"""
JSON ready dict forms of proofs, share packets and ciphertexts.

Byte fields are hex strings; points use the group's canonical encoding and
scalars the fixed width little-endian encoding. Decoding fails with
BadEncoding on malformed fields and BadPoint / BadScalar on well formed
values outside the group.
"""

from .elgamal import Ciphertext, IesAlpha, KemAlpha, scheme_of
from .enums import AesMode, Algorithm, ElgamalScheme
from .errors import BadEncoding
from .group import Group
from .shamir import PublicSharePacket, SecretSharePacket
from .sigma import SigmaProof


def _hex(data: bytes) -> str:
    return bytes(data).hex()


def _unhex(value) -> bytes:
    try:
        return bytes.fromhex(value)
    except (TypeError, ValueError) as e:
        raise BadEncoding(f"Invalid hex field: {value!r}") from e


def _field(data: dict, key: str):
    try:
        return data[key]
    except (KeyError, TypeError) as e:
        raise BadEncoding(f"Missing field: {key}") from e


def _enum(cls, value):
    try:
        return cls(value)
    except ValueError as e:
        raise BadEncoding(f"Unknown {cls.__name__}: {value!r}") from e


def _point(group: Group, value):
    return group.unpack_valid(_unhex(value))


def _scalar(group: Group, value) -> int:
    return group.scalar_from_bytes(_unhex(value))


def _index(value) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise BadEncoding(f"Invalid share index: {value!r}")
    return value


def proof_to_dict(group: Group, proof: SigmaProof) -> dict:
    return {
        'commitments': [_hex(group.point_to_bytes(c)) for c in proof.commitments],
        'response': [_hex(group.scalar_to_bytes(r)) for r in proof.response],
        'algorithm': Algorithm(proof.algorithm).value,
    }


def proof_from_dict(group: Group, data: dict) -> SigmaProof:
    return SigmaProof(
        commitments=[_point(group, c) for c in _field(data, 'commitments')],
        response=[_scalar(group, r) for r in _field(data, 'response')],
        algorithm=_enum(Algorithm, _field(data, 'algorithm')),
    )


def secret_packet_to_dict(group: Group, packet: SecretSharePacket) -> dict:
    data = {'index': packet.index, 'value': _hex(group.scalar_to_bytes(packet.value))}
    if packet.binding is not None:
        data['binding'] = _hex(group.scalar_to_bytes(packet.binding))
    return data


def secret_packet_from_dict(group: Group, data: dict) -> SecretSharePacket:
    binding = data.get('binding') if isinstance(data, dict) else None
    return SecretSharePacket(
        index=_index(_field(data, 'index')),
        value=_scalar(group, _field(data, 'value')),
        binding=_scalar(group, binding) if binding is not None else None,
    )


def public_packet_to_dict(group: Group, packet: PublicSharePacket) -> dict:
    return {
        'index': packet.index,
        'value': _hex(group.point_to_bytes(packet.value)),
        'proof': proof_to_dict(group, packet.proof),
    }


def public_packet_from_dict(group: Group, data: dict) -> PublicSharePacket:
    return PublicSharePacket(
        index=_index(_field(data, 'index')),
        value=_point(group, _field(data, 'value')),
        proof=proof_from_dict(group, _field(data, 'proof')),
    )


def ciphertext_to_dict(group: Group, ciphertext: Ciphertext) -> dict:
    scheme = scheme_of(ciphertext)
    alpha = ciphertext.alpha
    if scheme is ElgamalScheme.PLAIN:
        alpha_dict = _hex(group.point_to_bytes(alpha))
    else:
        alpha_dict = {
            'ciphered': _hex(alpha.ciphered),
            'iv': _hex(alpha.iv),
            'tag': _hex(alpha.tag) if alpha.tag is not None else None,
            'mode': AesMode(alpha.mode).value,
        }
        if scheme is ElgamalScheme.IES:
            alpha_dict['mac'] = _hex(alpha.mac)
            alpha_dict['algorithm'] = Algorithm(alpha.algorithm).value
    return {
        'scheme': scheme.value,
        'alpha': alpha_dict,
        'beta': _hex(group.point_to_bytes(ciphertext.beta)),
    }


def ciphertext_from_dict(group: Group, data: dict) -> Ciphertext:
    scheme = _enum(ElgamalScheme, _field(data, 'scheme'))
    raw = _field(data, 'alpha')
    beta = _point(group, _field(data, 'beta'))
    if scheme is ElgamalScheme.PLAIN:
        return Ciphertext(alpha=_point(group, raw), beta=beta)

    tag = raw.get('tag') if isinstance(raw, dict) else None
    ciphered = _unhex(_field(raw, 'ciphered'))
    iv = _unhex(_field(raw, 'iv'))
    tag = _unhex(tag) if tag is not None else None
    mode = _enum(AesMode, _field(raw, 'mode'))
    if scheme is ElgamalScheme.KEM:
        alpha = KemAlpha(ciphered=ciphered, iv=iv, tag=tag, mode=mode)
    else:
        alpha = IesAlpha(ciphered=ciphered, iv=iv, mac=_unhex(_field(raw, 'mac')), tag=tag, mode=mode,
                         algorithm=_enum(Algorithm, _field(raw, 'algorithm')))
    return Ciphertext(alpha=alpha, beta=beta)
