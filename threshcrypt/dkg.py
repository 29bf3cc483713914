"""
Distributed key generation over Feldman sharings.

Every party deals a t-of-n sharing of its own random secret and publishes
the commitments. Party i verifies the packet it received from every dealer
(the vss equation in section 2.8 of https://eprint.iacr.org/2020/540.pdf)
and adds them up into its key share. The joint secret is the sum of the
dealt secrets and is never assembled anywhere.
"""

import logging
from typing import List, Sequence

from .errors import InvalidShare
from .group import Group
from .shamir import (FeldmanPackets, PublicShare, SecretShare, SecretSharePacket, evaluate_commitments,
                     distribute_secret, verify_feldman)


logger = logging.getLogger(__name__)


class Dealer:
    """
    One party's contribution: a Feldman sharing of a fresh random secret.
    """

    def __init__(self, group: Group, index: int, n: int, t: int):
        self.group = group
        self.index = index
        self.sharing = distribute_secret(group, group.random_scalar(), n, t)
        self.feldman: FeldmanPackets = self.sharing.create_feldman_packets()

    def __repr__(self):
        return f"Dealer({self.index})"

    @property
    def commitments(self) -> list:
        return self.feldman.commitments

    def packet_for(self, index: int) -> SecretSharePacket:
        return self.feldman.packets[index - 1]


def combine_feldman_shares(group: Group, index: int, packets: Sequence[SecretSharePacket],
                           commitment_sets: Sequence[list]) -> SecretShare:
    """
    Verify the packets party `index` received, one per dealer in the same
    order as commitment_sets, and sum them into its final key share.
    """
    if len(packets) != len(commitment_sets):
        raise ValueError("Expected one packet per commitment set")
    value = 0
    for dealer, (packet, commitments) in enumerate(zip(packets, commitment_sets), start=1):
        if packet.index != index:
            raise InvalidShare(f"Packet from dealer {dealer} is addressed to {packet.index}, not {index}")
        if not verify_feldman(group, packet, commitments):
            raise InvalidShare(f"Packet from dealer {dealer} does not match its commitments")
        value += packet.value
    logger.info("Party %d combined %d verified shares", index, len(packets))
    return SecretShare(index, value % group.order)


def combine_commitments(group: Group, commitment_sets: Sequence[list]) -> List:
    """Commitments to the sum of the dealt polynomials."""
    size = max(len(c) for c in commitment_sets)
    combined = [group.neutral] * size
    for commitments in commitment_sets:
        for j, c in enumerate(commitments):
            combined[j] = group.operate(combined[j], c)
    return combined


def combine_public_key(group: Group, commitment_sets: Sequence[list]):
    """The joint public key: sum of every dealer's constant term commitment."""
    acc = group.neutral
    for commitments in commitment_sets:
        acc = group.operate(acc, commitments[0])
    return acc


def derive_public_share(group: Group, index: int, commitment_sets: Sequence[list]) -> PublicShare:
    return PublicShare(index, evaluate_commitments(group, index, combine_commitments(group, commitment_sets)))
