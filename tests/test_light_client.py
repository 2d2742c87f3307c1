"""
Proof checks against small hand-built Jellyfish Merkle trees.

Keys are picked by scanning candidates until their hashed paths have the
first-bit relationship a test needs, so the trees stay tiny and exact.
"""

import hashlib
from itertools import count

import pytest

from grug_sdk.errors import ProofValidationError
from grug_sdk.light_client.verify import (
    PROOF_OP_TYPE,
    MembershipProof,
    NonMembershipProof,
    ProofNode,
    check_proof_ops,
    hash_internal_node,
    hash_leaf_node,
    verify_membership,
    verify_non_membership,
)
from grug_sdk.rpc.base import ProofOp
from grug_sdk.utils.serde import serialize


def _h(b: bytes) -> bytes:
    return hashlib.sha256(b).digest()


def _first_bit(key: bytes) -> int:
    return _h(key)[0] >> 7


def _key_with_first_bit(bit: int, exclude=()) -> bytes:
    for i in count():
        k = f"key-{i}".encode()
        if k not in exclude and _first_bit(k) == bit:
            return k
    raise AssertionError("unreachable")


def _leaf(key: bytes, value: bytes) -> bytes:
    return hash_leaf_node(_h(key), _h(value))


def _two_leaf_tree():
    left = _key_with_first_bit(0)
    right = _key_with_first_bit(1)
    root = hash_internal_node(_leaf(left, b"L"), _leaf(right, b"R"))
    return left, right, root


def test_node_hash_prefixes():
    assert hash_leaf_node(b"\x01" * 32, b"\x02" * 32) == _h(b"\x01" + b"\x01" * 32 + b"\x02" * 32)
    assert hash_internal_node(None, b"\x03" * 32) == _h(b"\x00" + b"\x00" * 32 + b"\x03" * 32)


def test_single_leaf_membership():
    root = _leaf(b"only", b"v")
    verify_membership(root, b"only", b"v", MembershipProof(sibling_hashes=()))
    with pytest.raises(ProofValidationError):
        verify_membership(root, b"only", b"other", MembershipProof(sibling_hashes=()))


def test_two_leaf_membership_both_sides():
    left, right, root = _two_leaf_tree()
    verify_membership(root, left, b"L", MembershipProof(sibling_hashes=(_leaf(right, b"R"),)))
    verify_membership(root, right, b"R", MembershipProof(sibling_hashes=(_leaf(left, b"L"),)))


def test_membership_fails_against_wrong_root():
    left, right, _ = _two_leaf_tree()
    with pytest.raises(ProofValidationError):
        verify_membership(b"\x00" * 32, left, b"L", MembershipProof(sibling_hashes=(_leaf(right, b"R"),)))


def test_non_membership_via_other_leaf_on_path():
    left, right, root = _two_leaf_tree()
    missing = _key_with_first_bit(0, exclude=(left,))
    proof = NonMembershipProof(node=ProofNode.leaf(_h(left), _h(b"L")), sibling_hashes=(_leaf(right, b"R"),))
    verify_non_membership(root, missing, proof)


def test_non_membership_rejects_leaf_of_requested_key():
    left, right, root = _two_leaf_tree()
    proof = NonMembershipProof(node=ProofNode.leaf(_h(left), _h(b"L")), sibling_hashes=(_leaf(right, b"R"),))
    with pytest.raises(ProofValidationError):
        verify_non_membership(root, left, proof)


def test_non_membership_via_empty_child():
    present = _key_with_first_bit(0)
    missing = _key_with_first_bit(1)
    node = ProofNode.internal(_leaf(present, b"v"), None)
    root = node.hash()
    verify_non_membership(root, missing, NonMembershipProof(node=node, sibling_hashes=()))
    # The present key's slot is occupied, so the same node cannot prove it absent.
    with pytest.raises(ProofValidationError):
        verify_non_membership(root, present, NonMembershipProof(node=node, sibling_hashes=()))


def test_leaf_without_hashes_is_rejected():
    with pytest.raises(ProofValidationError):
        ProofNode(kind="leaf").hash()
    proof = NonMembershipProof(node=ProofNode(kind="leaf", value_hash=_h(b"v")), sibling_hashes=())
    with pytest.raises(ProofValidationError):
        verify_non_membership(_h(b"root"), b"k", proof)


def _op(key: bytes, proof, type_: str = PROOF_OP_TYPE) -> ProofOp:
    return ProofOp(type=type_, key=key, data=serialize(proof.to_wire()))


def test_check_proof_ops_decodes_valid_envelope():
    proof = MembershipProof(sibling_hashes=(b"\x05" * 32, None))
    assert check_proof_ops([_op(b"k", proof)], b"k") == proof


def test_check_proof_ops_requires_exactly_one_op():
    proof = MembershipProof(sibling_hashes=())
    with pytest.raises(ProofValidationError) as ei:
        check_proof_ops([], b"k")
    assert ei.value.found == 0
    with pytest.raises(ProofValidationError):
        check_proof_ops([_op(b"k", proof), _op(b"k", proof)], b"k")


def test_check_proof_ops_rejects_wrong_type():
    with pytest.raises(ProofValidationError) as ei:
        check_proof_ops([_op(b"k", MembershipProof(sibling_hashes=()), type_="ics23:iavl")], b"k")
    assert ei.value.found == "ics23:iavl"


def test_check_proof_ops_rejects_key_mismatch():
    with pytest.raises(ProofValidationError) as ei:
        check_proof_ops([_op(b"other", MembershipProof(sibling_hashes=()))], b"k")
    assert ei.value.found == b"other"


def test_check_proof_ops_wraps_malformed_payload():
    with pytest.raises(ProofValidationError):
        check_proof_ops([ProofOp(type=PROOF_OP_TYPE, key=b"k", data=b"not json")], b"k")
