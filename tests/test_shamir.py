import itertools
import os
import random

import pytest

from threshcrypt.enums import Elliptic
from threshcrypt.errors import (BadScalar, InsufficientShares, InterpolationError, InvalidPublicShare,
                                InvalidShare, ShamirError, TooManyPredefined)
from threshcrypt.group import init_group
from threshcrypt.shamir import (SecretShare, SecretSharePacket, create_public_share_packet, distribute_secret,
                                parse_feldman_packet, parse_pedersen_packet, parse_public_share_packet,
                                reconstruct_public, reconstruct_secret, verify_feldman, verify_pedersen)


def generate_t_n():
    t = random.randint(1, 5)
    n = random.randint(t, 7)
    return t, n


@pytest.mark.parametrize("t,n", [(1, 1), (1, 3), (2, 3), (3, 5), (5, 5)])
def test_any_t_shares_recover_secret(t, n):
    group = init_group()
    secret = group.random_scalar()
    sharing = distribute_secret(group, secret, n, t)
    shares = sharing.get_secret_shares()
    assert [s.index for s in shares] == list(range(1, n + 1))
    assert sharing.polynomial.degree <= t - 1
    for subset in itertools.combinations(shares, t):
        assert reconstruct_secret(group, subset, t) == secret
    assert reconstruct_secret(group, shares, t) == secret


def test_fewer_than_t_shares_do_not_recover_secret():
    group = init_group()
    hits = 0
    for _ in range(10):
        secret = group.random_scalar()
        shares = distribute_secret(group, secret, 5, 3).get_secret_shares()
        subset = random.sample(shares, 2)
        if reconstruct_secret(group, subset) == secret:
            hits += 1
    assert hits == 0
    pytest.raises(InsufficientShares, reconstruct_secret, group, shares[:2], 3)
    pytest.raises(InsufficientShares, reconstruct_secret, group, [])


@pytest.mark.parametrize("label", [Elliptic.ED25519, Elliptic.SECP256K1])
def test_public_shares_reconstruct_public(label):
    group = init_group(label)
    secret = group.random_scalar()
    sharing = distribute_secret(group, secret, 5, 3)
    public_shares = sharing.get_public_shares()
    for share, public in zip(sharing.get_secret_shares(), public_shares):
        assert group.equals(public.value, group.exp(group.generator, share.value))
    pub = reconstruct_public(group, random.sample(public_shares, 3), 3)
    assert group.equals(pub, group.exp(group.generator, secret))


def test_distribute_parameter_checks():
    group = init_group()
    pytest.raises(ShamirError, distribute_secret, group, 1, 3, 0)
    pytest.raises(ShamirError, distribute_secret, group, 1, 3, 4)
    pytest.raises(ShamirError, distribute_secret, group, 1, group.order, 2)
    pytest.raises(BadScalar, distribute_secret, group, group.order, 3, 2)


def test_predefined_points():
    group = init_group()
    secret = group.random_scalar()
    predefined = [(2, 11), (4, 22)]
    sharing = distribute_secret(group, secret, 5, 3, predefined)
    shares = {s.index: s.value for s in sharing.get_secret_shares()}
    assert shares[2] == 11
    assert shares[4] == 22
    assert sharing.secret == secret
    assert reconstruct_secret(group, sharing.get_secret_shares()[2:], 3) == secret

    pytest.raises(TooManyPredefined, distribute_secret, group, secret, 5, 3, [(1, 1), (2, 2), (3, 3)])
    pytest.raises(InterpolationError, distribute_secret, group, secret, 5, 3, [(2, 1), (2, 2)])
    pytest.raises(ShamirError, distribute_secret, group, secret, 5, 3, [(6, 1)])


def test_feldman():
    group = init_group()
    t, n = generate_t_n()
    print(f"\nt={t} n={n}")
    sharing = distribute_secret(group, group.random_scalar(), n, t)
    packets, commitments = sharing.create_feldman_packets()
    assert len(commitments) == t
    assert len(packets) == n
    for packet in packets:
        assert verify_feldman(group, packet, commitments)
        assert parse_feldman_packet(group, packet, commitments) == SecretShare(packet.index, packet.value)

    packet = packets[0]
    forged = packet._replace(value=(packet.value + 1) % group.order)
    assert not verify_feldman(group, forged, commitments)
    pytest.raises(InvalidShare, verify_feldman, group, forged, commitments, True)
    pytest.raises(InvalidShare, parse_feldman_packet, group, forged, commitments)

    bad_commitments = list(commitments)
    bad_commitments[-1] = group.operate(bad_commitments[-1], group.generator)
    assert not verify_feldman(group, packet, bad_commitments)


def test_feldman_commitments_padded():
    group = init_group()
    # t - 1 == 2 but the polynomial only has degree 0
    sharing = distribute_secret(group, 9, 4, 3, [(1, 9), (2, 9)])
    packets, commitments = sharing.create_feldman_packets()
    assert len(commitments) == 3
    assert group.is_neutral(commitments[2])
    assert all(verify_feldman(group, p, commitments) for p in packets)


def test_pedersen():
    group = init_group(Elliptic.SECP256K1)
    h = group.random_point()
    sharing = distribute_secret(group, group.random_scalar(), 4, 3)
    packets, bindings, commitments = sharing.create_pedersen_packets(h)
    assert len(commitments) == 3
    assert [p.binding for p in packets] == bindings
    for packet in packets:
        assert verify_pedersen(group, packet, packet.binding, h, commitments)
        assert parse_pedersen_packet(group, packet, h, commitments).value == packet.value

    packet = packets[1]
    assert not verify_pedersen(group, packet, (packet.binding + 1) % group.order, h, commitments)
    forged = packet._replace(value=(packet.value + 1) % group.order)
    assert not verify_pedersen(group, forged, forged.binding, h, commitments)
    pytest.raises(InvalidShare, parse_pedersen_packet, group, forged, h, commitments)
    pytest.raises(InvalidShare, parse_pedersen_packet, group, SecretSharePacket(1, 1), h, commitments)
    bad_commitments = [group.random_point()] + commitments[1:]
    assert not verify_pedersen(group, packet, packet.binding, h, bad_commitments)


def test_public_share_packet():
    group = init_group()
    shares = distribute_secret(group, group.random_scalar(), 3, 2).get_secret_shares()
    nonce = os.urandom(16)
    packet = create_public_share_packet(group, shares[0], nonce=nonce)
    public = parse_public_share_packet(group, packet, nonce=nonce)
    assert public.index == 1
    assert group.equals(public.value, group.exp(group.generator, shares[0].value))

    pytest.raises(InvalidPublicShare, parse_public_share_packet, group, packet)
    pytest.raises(InvalidPublicShare, parse_public_share_packet, group, packet._replace(index=2), nonce)
    pytest.raises(InvalidPublicShare, parse_public_share_packet, group,
                  packet._replace(value=group.random_point()), nonce)
    pytest.raises(InvalidPublicShare, parse_public_share_packet, group,
                  packet._replace(value=group.neutral), nonce)


@pytest.mark.skipif(not os.environ.get('SOAK_TEST'), reason="No need to run every time.")
def test_random_threshold_sharing():
    group = init_group()
    for _ in range(5):
        t, n = generate_t_n()
        secret = group.random_scalar()
        sharing = distribute_secret(group, secret, n, t)
        packets, commitments = sharing.create_feldman_packets()
        assert all(verify_feldman(group, p, commitments) for p in packets)
        assert reconstruct_secret(group, random.sample(sharing.get_secret_shares(), t), t) == secret
