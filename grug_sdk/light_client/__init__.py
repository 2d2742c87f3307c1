"""
grug_sdk.light_client
=====================

Proof checks for proven store queries. See :mod:`grug_sdk.light_client.verify`.
"""

from __future__ import annotations

from .verify import (
    PROOF_OP_TYPE,
    MembershipProof,
    NonMembershipProof,
    Proof,
    ProofNode,
    check_proof_ops,
    hash_internal_node,
    hash_leaf_node,
    proof_from_wire,
    verify_membership,
    verify_non_membership,
)

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
