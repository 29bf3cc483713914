import secrets

import pytest

from threshcrypt.enums import Algorithm, Elliptic
from threshcrypt.group import init_group
from threshcrypt.sigma import DDHTuple, DlogPair, LinearRelation, SigmaProof, SigmaProtocol

GROUPS = [Elliptic.ED25519, Elliptic.SECP256K1]


def tampered_response(proof, group):
    response = list(proof.response)
    response[0] = (response[0] + 1) % group.order
    return proof._replace(response=response)


def tampered_commitment(proof, group):
    commitments = list(proof.commitments)
    commitments[0] = group.operate(commitments[0], group.generator)
    return proof._replace(commitments=commitments)


def other_algorithm(proof):
    algorithm = Algorithm.SHA512 if proof.algorithm is not Algorithm.SHA512 else Algorithm.SHA256
    return proof._replace(algorithm=algorithm)


def assert_sound(verify, proof, group):
    assert verify(proof)
    assert not verify(tampered_response(proof, group))
    assert not verify(tampered_commitment(proof, group))
    assert not verify(other_algorithm(proof))


@pytest.mark.parametrize("label", GROUPS)
def test_dlog(label):
    group = init_group(label)
    sigma = SigmaProtocol(group)
    u = group.random_point()
    x = group.random_scalar()
    pair = DlogPair(u, group.exp(u, x))
    proof = sigma.prove_dlog(x, pair)
    assert_sound(lambda p: sigma.verify_dlog(pair, p), proof, group)
    wrong = DlogPair(u, group.random_point())
    assert not sigma.verify_dlog(wrong, proof)


@pytest.mark.parametrize("algorithm", [Algorithm.SHA256, Algorithm.SHA3_512, Algorithm.SHA224])
def test_algorithms(algorithm):
    group = init_group()
    sigma = SigmaProtocol(group, algorithm)
    x = group.random_scalar()
    pair = DlogPair(group.generator, group.exp(group.generator, x))
    proof = sigma.prove_dlog(x, pair)
    assert proof.algorithm is algorithm
    # the verifier follows the algorithm recorded in the proof
    assert SigmaProtocol(group).verify_dlog(pair, proof)
    assert not SigmaProtocol(group).verify_dlog(pair, other_algorithm(proof))


def test_nonce_binding():
    group = init_group()
    sigma = SigmaProtocol(group)
    x = group.random_scalar()
    pair = DlogPair(group.generator, group.exp(group.generator, x))
    nonce = secrets.token_bytes(16)

    with_nonce = sigma.prove_dlog(x, pair, nonce=nonce)
    assert sigma.verify_dlog(pair, with_nonce, nonce=nonce)
    assert not sigma.verify_dlog(pair, with_nonce)
    assert not sigma.verify_dlog(pair, with_nonce, nonce=secrets.token_bytes(16))

    without_nonce = sigma.prove_dlog(x, pair)
    assert sigma.verify_dlog(pair, without_nonce)
    assert not sigma.verify_dlog(pair, without_nonce, nonce=nonce)


def test_extras_binding():
    group = init_group()
    sigma = SigmaProtocol(group)
    x = group.random_scalar()
    pair = DlogPair(group.generator, group.exp(group.generator, x))
    proof = sigma.prove_dlog(x, pair, extras=[b"context"])
    assert sigma.verify_dlog(pair, proof, extras=[b"context"])
    assert not sigma.verify_dlog(pair, proof, extras=[b"other"])
    assert not sigma.verify_dlog(pair, proof)


@pytest.mark.parametrize("label", GROUPS)
def test_ddh(label):
    group = init_group(label)
    sigma = SigmaProtocol(group)
    z = group.random_scalar()
    u = group.random_point()
    ddh = DDHTuple(u=u, v=group.exp(group.generator, z), w=group.exp(u, z))
    proof = sigma.prove_ddh(z, ddh)
    assert len(proof.commitments) == 2 and len(proof.response) == 1
    assert_sound(lambda p: sigma.verify_ddh(ddh, p), proof, group)
    # w built from a different exponent
    fake = ddh._replace(w=group.exp(u, group.random_scalar()))
    assert not sigma.verify_ddh(fake, sigma.prove_ddh(z, fake))


def test_eq_dlog_many_pairs():
    group = init_group()
    sigma = SigmaProtocol(group)
    z = group.random_scalar()
    bases = [group.random_point() for _ in range(4)]
    pairs = [DlogPair(u, group.exp(u, z)) for u in bases]
    proof = sigma.prove_eq_dlog(z, pairs)
    assert_sound(lambda p: sigma.verify_eq_dlog(pairs, p), proof, group)
    pairs[2] = DlogPair(bases[2], group.random_point())
    assert not sigma.verify_eq_dlog(pairs, proof)


@pytest.mark.parametrize("label", GROUPS)
def test_okamoto(label):
    group = init_group(label)
    sigma = SigmaProtocol(group)
    h = group.random_point()
    s = group.random_scalar()
    t = group.random_scalar()
    u = group.operate(group.exp(group.generator, s), group.exp(h, t))
    proof = sigma.prove_okamoto(s, t, h, u)
    assert len(proof.response) == 2
    assert_sound(lambda p: sigma.verify_okamoto(h, u, p), proof, group)
    bad = sigma.prove_okamoto(s, (t + 1) % group.order, h, u)
    assert not sigma.verify_okamoto(h, u, bad)


def test_and_dlog():
    group = init_group(Elliptic.SECP256K1)
    sigma = SigmaProtocol(group)
    witnesses = [group.random_scalar() for _ in range(3)]
    bases = [group.random_point() for _ in range(3)]
    pairs = [DlogPair(u, group.exp(u, x)) for u, x in zip(bases, witnesses)]
    proof = sigma.prove_and_dlog(witnesses, pairs)
    assert len(proof.commitments) == 3 and len(proof.response) == 3
    assert_sound(lambda p: sigma.verify_and_dlog(pairs, p), proof, group)

    # a single wrong witness breaks the whole proof
    witnesses[1] = group.random_scalar()
    assert not sigma.verify_and_dlog(pairs, sigma.prove_and_dlog(witnesses, pairs))
    pytest.raises(ValueError, sigma.prove_and_dlog, witnesses[:2], pairs)


def test_linear_relation():
    group = init_group()
    sigma = SigmaProtocol(group)
    g = group.generator
    h = group.random_point()
    x1 = group.random_scalar()
    x2 = group.random_scalar()
    us = [[g, h], [h, g]]
    vs = [group.operate(group.exp(g, x1), group.exp(h, x2)),
          group.operate(group.exp(h, x1), group.exp(g, x2))]
    relation = LinearRelation(us, vs)
    proof = sigma.prove_linear([x1, x2], relation)
    assert sigma.verify_linear(relation, proof)
    assert not sigma.verify_linear(LinearRelation(us, [vs[0], group.random_point()]), proof)


def test_malformed_proofs_rejected():
    group = init_group()
    sigma = SigmaProtocol(group)
    x = group.random_scalar()
    pair = DlogPair(group.generator, group.exp(group.generator, x))
    proof = sigma.prove_dlog(x, pair)
    assert not sigma.verify_dlog(pair, proof._replace(response=[]))
    assert not sigma.verify_dlog(pair, proof._replace(response=proof.response * 2))
    assert not sigma.verify_dlog(pair, proof._replace(commitments=[]))
    assert not sigma.verify_dlog(pair, proof._replace(response=[group.order + 1]))
    assert not sigma.verify_dlog(pair, proof._replace(algorithm="md4"))
    other = init_group(Elliptic.SECP256K1)
    assert not sigma.verify_dlog(pair, proof._replace(commitments=[other.generator]))


def test_garbage_proofs_rejected():
    group = init_group()
    sigma = SigmaProtocol(group)
    x = group.random_scalar()
    pair = DlogPair(group.generator, group.exp(group.generator, x))
    assert not sigma.verify_dlog(pair, None)
    assert not sigma.verify_dlog(pair, ("x",))
    assert not sigma.verify_dlog(pair, SigmaProof(None, None, None))
    assert not sigma.verify_dlog(pair, SigmaProof(["t"], [None], Algorithm.SHA256))
    assert not sigma.verify_ddh(DDHTuple(group.generator, pair.v, pair.v), None)


def test_malformed_relation_raises():
    group = init_group()
    sigma = SigmaProtocol(group)
    relation = LinearRelation([[group.generator]], [])
    pytest.raises(ValueError, sigma.prove_linear, [1], relation)
    proof = SigmaProof(commitments=[], response=[1], algorithm=Algorithm.SHA256)
    pytest.raises(ValueError, sigma.verify_linear, relation, proof)
