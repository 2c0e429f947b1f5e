from __future__ import annotations

import bcrypt

from crm.core.security import hash_password, needs_rehash, verify_password


def test_argon2_hash_round_trip():
    stored = hash_password("s3cret-pass")
    assert stored.startswith("argon2$")
    assert verify_password("s3cret-pass", stored) is True
    assert verify_password("wrong", stored) is False
    assert needs_rehash(stored) is False


def test_legacy_bcrypt_hash_is_accepted_and_flagged_for_rehash():
    legacy = bcrypt.hashpw(b"from-node", bcrypt.gensalt(rounds=4)).decode()
    assert verify_password("from-node", legacy) is True
    assert verify_password("nope", legacy) is False
    assert needs_rehash(legacy) is True


def test_unknown_or_empty_hashes_never_verify():
    assert verify_password("x", None) is False
    assert verify_password("x", "") is False
    assert verify_password("x", "plain-text") is False
    assert verify_password("x", "argon2$garbage") is False
