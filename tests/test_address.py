import hashlib

import pytest

from grug_sdk.address import (
    AddressError,
    KeyType,
    compute_code_hash,
    derive_address,
    derive_salt,
    is_valid,
    normalize,
    to_bytes,
)
from grug_sdk.errors import InvalidKeyType

DEPLOYER = "0x" + "12" * 32
CODE_HASH = hashlib.sha256(b"contract code").digest()


def test_derive_address_matches_independent_hash():
    salt = b"salt-1"
    expected = "0x" + hashlib.sha256(bytes.fromhex("12" * 32) + CODE_HASH + salt).hexdigest()
    assert derive_address(DEPLOYER, CODE_HASH, salt) == expected


def test_derive_address_is_deterministic_and_salt_sensitive():
    a1 = derive_address(DEPLOYER, CODE_HASH, b"a")
    a2 = derive_address(DEPLOYER, CODE_HASH, b"a")
    b = derive_address(DEPLOYER, CODE_HASH, b"b")
    assert a1 == a2
    assert a1 != b
    assert is_valid(a1)


def test_derive_address_ignores_prefix_case():
    upper = "0X" + "12" * 32
    assert derive_address(upper, CODE_HASH, b"x") == derive_address(DEPLOYER, CODE_HASH, b"x")


def test_derive_address_requires_32_byte_code_hash():
    with pytest.raises(AddressError):
        derive_address(DEPLOYER, b"\x00" * 31, b"x")


def test_derive_salt_layout():
    pk = bytes([2]) + b"\x07" * 32
    expected = hashlib.sha256(b"secp256k1" + pk + (5).to_bytes(4, "big")).digest()
    assert derive_salt("secp256k1", pk, 5) == expected
    assert derive_salt(KeyType.SECP256K1, pk, 5) == expected
    assert derive_salt("secp256r1", pk, 5) != expected


def test_derive_salt_rejects_unknown_key_type():
    with pytest.raises(InvalidKeyType):
        derive_salt("ed25519", b"\x00" * 32, 0)


def test_derive_salt_serial_must_fit_32_bits():
    with pytest.raises(ValueError):
        derive_salt("secp256k1", b"\x00" * 33, 2**32)


def test_code_hash_is_content_addressed():
    assert compute_code_hash(b"abc") == compute_code_hash(bytearray(b"abc"))
    assert compute_code_hash(b"abc") == hashlib.sha256(b"abc").digest()


@pytest.mark.parametrize("bad", ["", "0x", "0x1234", "zz" * 32, "0x" + "00" * 33])
def test_invalid_addresses(bad):
    assert not is_valid(bad)
    with pytest.raises(AddressError):
        to_bytes(bad)


def test_normalize_lowercases():
    assert normalize("0x" + "AB" * 32) == "0x" + "ab" * 32
