"""
grug_sdk.light_client.verify
============================

Store-proof checks for ``/store`` ABCI queries:

  * ``check_proof_ops`` validates the proof envelope returned by the node
    (exactly one op, the expected scheme, the exact key that was asked for)
    and only then decodes the payload into a :class:`Proof`.
  * ``verify_membership`` / ``verify_non_membership`` recompute a Jellyfish
    Merkle Tree root from that proof and compare it with a trusted root hash.

Tree hashing (SHA-256):

    leaf     = sha256(0x01 || sha256(key) || sha256(value))
    internal = sha256(0x00 || left || right)      # a missing child hashes as 32 zero bytes

The path of a key is the bit string of ``sha256(key)``, most significant bit
first: bit ``d`` picks the right child at depth ``d`` when set. Sibling hashes
in a proof are ordered from the leaf up to the root, so with ``n`` siblings the
first one sits at depth ``n - 1``.

Proof payload (JSON, as serialised by the node):

    {"membership": {"sibling_hashes": ["<hex>" | null, ...]}}
    {"non_membership": {"node": {"internal": {"left_hash": ..., "right_hash": ...}}
                                | {"leaf": {"key_hash": ..., "value_hash": ...}},
                        "sibling_hashes": [...]}}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from ..errors import ProofValidationError, UnexpectedResponseShape
from ..utils.bytes import BytesLike, decode_hex, encode_hex
from ..utils.hash import ZERO_HASH, Sha256, sha256
from ..utils.serde import SerdeError, deserialize

PROOF_OP_TYPE = "grug_jmt::Proof"

INTERNAL_NODE_PREFIX = b"\x00"
LEAF_NODE_PREFIX = b"\x01"

Hash = bytes


# --- Proof model -------------------------------------------------------------


def _hash_or_none(v: Any) -> Optional[Hash]:
    return decode_hex(v) if v is not None else None


def _hash_to_wire(h: Optional[Hash]) -> Optional[str]:
    return encode_hex(h) if h is not None else None


@dataclass(slots=True, frozen=True)
class ProofNode:
    """The node a non-membership proof stops at: an internal node or another key's leaf."""

    kind: str  # "internal" | "leaf"
    left_hash: Optional[Hash] = None
    right_hash: Optional[Hash] = None
    key_hash: Optional[Hash] = None
    value_hash: Optional[Hash] = None

    @classmethod
    def internal(cls, left_hash: Optional[Hash], right_hash: Optional[Hash]) -> "ProofNode":
        return cls(kind="internal", left_hash=left_hash, right_hash=right_hash)

    @classmethod
    def leaf(cls, key_hash: Hash, value_hash: Hash) -> "ProofNode":
        return cls(kind="leaf", key_hash=key_hash, value_hash=value_hash)

    def hash(self) -> Hash:
        if self.kind == "internal":
            return hash_internal_node(self.left_hash, self.right_hash)
        if self.key_hash is None or self.value_hash is None:
            raise ProofValidationError("leaf node is missing its key or value hash")
        return hash_leaf_node(self.key_hash, self.value_hash)

    def to_wire(self) -> dict:
        if self.kind == "internal":
            return {
                "internal": {
                    "left_hash": _hash_to_wire(self.left_hash),
                    "right_hash": _hash_to_wire(self.right_hash),
                }
            }
        return {"leaf": {"key_hash": _hash_to_wire(self.key_hash), "value_hash": _hash_to_wire(self.value_hash)}}

    @staticmethod
    def from_wire(obj: Mapping[str, Any]) -> "ProofNode":
        if "internal" in obj and len(obj) == 1:
            body = obj["internal"]
            return ProofNode.internal(_hash_or_none(body.get("left_hash")), _hash_or_none(body.get("right_hash")))
        if "leaf" in obj and len(obj) == 1:
            body = obj["leaf"]
            return ProofNode.leaf(decode_hex(body["key_hash"]), decode_hex(body["value_hash"]))
        raise UnexpectedResponseShape(expected="internal or leaf proof node", got=obj)


@dataclass(slots=True, frozen=True)
class MembershipProof:
    sibling_hashes: Tuple[Optional[Hash], ...]

    def to_wire(self) -> dict:
        return {"membership": {"sibling_hashes": [_hash_to_wire(h) for h in self.sibling_hashes]}}


@dataclass(slots=True, frozen=True)
class NonMembershipProof:
    node: ProofNode
    sibling_hashes: Tuple[Optional[Hash], ...]

    def to_wire(self) -> dict:
        return {
            "non_membership": {
                "node": self.node.to_wire(),
                "sibling_hashes": [_hash_to_wire(h) for h in self.sibling_hashes],
            }
        }


Proof = Union[MembershipProof, NonMembershipProof]


def proof_from_wire(obj: Any) -> Proof:
    if not isinstance(obj, Mapping) or len(obj) != 1:
        raise UnexpectedResponseShape(expected="single-key proof", got=obj)
    ((tag, body),) = obj.items()
    siblings = tuple(_hash_or_none(h) for h in body.get("sibling_hashes") or [])
    if tag == "membership":
        return MembershipProof(sibling_hashes=siblings)
    if tag == "non_membership":
        return NonMembershipProof(node=ProofNode.from_wire(body["node"]), sibling_hashes=siblings)
    raise UnexpectedResponseShape(expected="membership or non_membership proof", got=tag)


# --- Envelope checks ---------------------------------------------------------


def check_proof_ops(ops: Sequence[Any], key: BytesLike) -> Proof:
    """
    Validate the proof ops of a proven ``/store`` query for *key*.

    *ops* are objects with ``type``, ``key`` and ``data`` attributes
    (:class:`grug_sdk.rpc.ProofOp`). The payload is decoded only after every
    envelope check has passed.
    """
    key = bytes(key)
    if len(ops) != 1:
        raise ProofValidationError("expecting exactly one proof op", key=key, found=len(ops))
    op = ops[0]
    if op.type != PROOF_OP_TYPE:
        raise ProofValidationError(f"unexpected proof op type, want {PROOF_OP_TYPE}", key=key, found=op.type)
    if bytes(op.key) != key:
        raise ProofValidationError("proof op key does not match the requested key", key=key, found=bytes(op.key))
    try:
        return proof_from_wire(deserialize(op.data))
    except (SerdeError, UnexpectedResponseShape, KeyError, ValueError, TypeError, AttributeError) as e:
        raise ProofValidationError(f"malformed proof payload: {e}", key=key) from e


# --- Tree hashing ------------------------------------------------------------


def hash_internal_node(left_hash: Optional[Hash], right_hash: Optional[Hash]) -> Hash:
    h = Sha256()
    h.update(INTERNAL_NODE_PREFIX)
    h.update(left_hash if left_hash is not None else ZERO_HASH)
    h.update(right_hash if right_hash is not None else ZERO_HASH)
    return h.digest()


def hash_leaf_node(key_hash: Hash, value_hash: Hash) -> Hash:
    h = Sha256()
    h.update(LEAF_NODE_PREFIX)
    h.update(key_hash)
    h.update(value_hash)
    return h.digest()


def _bit(key_hash: Hash, depth: int) -> int:
    return (key_hash[depth // 8] >> (7 - depth % 8)) & 1


def _root_from(node_hash: Hash, key_hash: Hash, sibling_hashes: Sequence[Optional[Hash]]) -> Hash:
    acc = node_hash
    n = len(sibling_hashes)
    for i, sibling in enumerate(sibling_hashes):
        if _bit(key_hash, n - 1 - i):
            acc = hash_internal_node(sibling, acc)
        else:
            acc = hash_internal_node(acc, sibling)
    return acc


def _check_root(computed: Hash, root_hash: Hash, key: bytes) -> None:
    if computed != bytes(root_hash):
        raise ProofValidationError("computed root does not match the trusted root", key=key, found=computed)


def verify_membership(root_hash: Hash, key: BytesLike, value: BytesLike, proof: MembershipProof) -> None:
    """Raise ProofValidationError unless *proof* shows ``key -> value`` under *root_hash*."""
    key = bytes(key)
    key_hash = sha256(key)
    leaf = hash_leaf_node(key_hash, sha256(bytes(value)))
    _check_root(_root_from(leaf, key_hash, proof.sibling_hashes), root_hash, key)


def verify_non_membership(root_hash: Hash, key: BytesLike, proof: NonMembershipProof) -> None:
    """Raise ProofValidationError unless *proof* shows *key* is absent under *root_hash*."""
    key = bytes(key)
    key_hash = sha256(key)
    depth = len(proof.sibling_hashes)
    node = proof.node
    if node.kind == "internal":
        # The path must end at an empty child slot of this node.
        child = node.right_hash if _bit(key_hash, depth) else node.left_hash
        if child is not None:
            raise ProofValidationError("non-membership proof node has a child on the key's path", key=key)
    else:
        # Another key's leaf sits where ours would be.
        if node.key_hash is None:
            raise ProofValidationError("non-membership proof leaf has no key hash", key=key)
        if node.key_hash == key_hash:
            raise ProofValidationError("non-membership proof leaf belongs to the requested key", key=key)
        if any(_bit(node.key_hash, d) != _bit(key_hash, d) for d in range(depth)):
            raise ProofValidationError("non-membership proof leaf is not on the key's path", key=key)
    _check_root(_root_from(node.hash(), key_hash, proof.sibling_hashes), root_hash, key)


__all__ = [
    "PROOF_OP_TYPE",
    "Proof",
    "ProofNode",
    "MembershipProof",
    "NonMembershipProof",
    "proof_from_wire",
    "check_proof_ops",
    "hash_internal_node",
    "hash_leaf_node",
    "verify_membership",
    "verify_non_membership",
]
