"""
Credential hasher tests - round trips, mismatches, malformed stored values.
"""

import pytest

from accounts.config import Settings
from accounts.core.hashing import CryptContextHasher, Pbkdf2Hasher, hasher_from_settings
from accounts.errors import HashError


@pytest.fixture
def pbkdf2() -> Pbkdf2Hasher:
    return Pbkdf2Hasher(rounds=1000)


@pytest.fixture
def bcrypt() -> CryptContextHasher:
    return CryptContextHasher(["bcrypt"], bcrypt_rounds=4)


@pytest.mark.parametrize("password", ["abc", "mypass", "Z9" * 15])
def test_pbkdf2_round_trip(pbkdf2: Pbkdf2Hasher, password: str):
    derived = pbkdf2.derive(password)
    assert derived.salt
    assert password not in derived.hash
    assert pbkdf2.verify(password, derived.hash, derived.salt) is True


def test_pbkdf2_wrong_password(pbkdf2: Pbkdf2Hasher):
    derived = pbkdf2.derive("mypass")
    assert pbkdf2.verify("wrong", derived.hash, derived.salt) is False


def test_pbkdf2_salts_differ(pbkdf2: Pbkdf2Hasher):
    first = pbkdf2.derive("mypass")
    second = pbkdf2.derive("mypass")
    assert first.salt != second.salt
    assert first.hash != second.hash


def test_pbkdf2_empty_stored_hash_is_mismatch(pbkdf2: Pbkdf2Hasher):
    derived = pbkdf2.derive("mypass")
    assert pbkdf2.verify("mypass", "", derived.salt) is False


def test_pbkdf2_requires_salt(pbkdf2: Pbkdf2Hasher):
    derived = pbkdf2.derive("mypass")
    with pytest.raises(HashError):
        pbkdf2.verify("mypass", derived.hash, None)


def test_pbkdf2_malformed_hash(pbkdf2: Pbkdf2Hasher):
    derived = pbkdf2.derive("mypass")
    with pytest.raises(HashError) as exc_info:
        pbkdf2.verify("mypass", "***not base64***", derived.salt)
    assert exc_info.value.kind == "hash"


@pytest.mark.parametrize("password", ["abc", "mypass"])
def test_bcrypt_round_trip(bcrypt: CryptContextHasher, password: str):
    derived = bcrypt.derive(password)
    assert derived.salt is None
    assert derived.hash.startswith("$2")
    assert bcrypt.verify(password, derived.hash) is True
    assert bcrypt.verify("wrong", derived.hash) is False


def test_bcrypt_malformed_hash(bcrypt: CryptContextHasher):
    with pytest.raises(HashError):
        bcrypt.verify("mypass", "not-a-hash")


def test_bcrypt_empty_hash_is_mismatch(bcrypt: CryptContextHasher):
    assert bcrypt.verify("mypass", "") is False


def test_valid_hash_needing_upgrade_still_matches():
    old = CryptContextHasher(["pbkdf2_sha256"])
    stored = old.derive("mypass").hash
    current = CryptContextHasher(["bcrypt", "pbkdf2_sha256"], bcrypt_rounds=4)
    assert current.context.needs_update(stored)
    assert current.verify("mypass", stored) is True
    assert current.verify("wrong", stored) is False


def test_hasher_from_settings():
    pbkdf2 = hasher_from_settings(Settings(_env_file=None, pbkdf2_rounds=1234))
    assert isinstance(pbkdf2, Pbkdf2Hasher)
    assert pbkdf2.requires_salt is True
    assert pbkdf2.rounds == 1234

    crypt = hasher_from_settings(Settings(_env_file=None, hash_scheme="crypt", bcrypt_rounds=4))
    assert isinstance(crypt, CryptContextHasher)
    assert crypt.requires_salt is False


def test_pbkdf2_malformed_salt(pbkdf2: Pbkdf2Hasher):
    derived = pbkdf2.derive("mypass")
    with pytest.raises(HashError):
        pbkdf2.verify("mypass", derived.hash, "***not base64***")


def test_pbkdf2_unknown_digest_fails_derivation():
    with pytest.raises(HashError):
        Pbkdf2Hasher(digest="nope", rounds=1000).derive("abc")


def test_pbkdf2_unencodable_password_is_mismatch(pbkdf2: Pbkdf2Hasher):
    derived = pbkdf2.derive("mypass")
    assert pbkdf2.verify("\ud800", derived.hash, derived.salt) is False


def test_bcrypt_null_byte_password_is_mismatch(bcrypt: CryptContextHasher):
    derived = bcrypt.derive("mypass")
    assert bcrypt.verify("my\x00pass", derived.hash) is False


def test_bcrypt_unencodable_password_is_mismatch(bcrypt: CryptContextHasher):
    derived = bcrypt.derive("mypass")
    assert bcrypt.verify("\ud800", derived.hash) is False
