"""
Credential hashing: pluggable strategies behind one capability interface.
Challenge: No plain-text passwords at rest; storage shape depends on the scheme.
Design: Pbkdf2Hasher keeps an explicit salt (own column), CryptContextHasher is self-salting.
"""

import base64
import binascii
import logging
import secrets
from dataclasses import dataclass
from typing import Protocol

from passlib.context import CryptContext
from passlib.crypto.digest import pbkdf2_hmac
from passlib.exc import PasswordValueError
from passlib.utils import consteq

from accounts.config import Settings
from accounts.errors import HashError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DerivedCredential:
    """Output of derive(). salt is None for self-salting schemes."""

    hash: str
    salt: str | None = None


class CredentialHasher(Protocol):
    """Capability: turn a password into a storable hash and check it later."""

    # True when verify() needs the salt returned by derive(), i.e. the table needs a salt column
    requires_salt: bool

    def derive(self, password: str) -> DerivedCredential: ...

    def verify(self, password: str, hash: str, salt: str | None = None) -> bool: ...


def _b64decode(value: str, field: str) -> bytes:
    try:
        return base64.b64decode(value.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        logger.warning("stored %s is not valid base64", field)
        raise HashError(f"Malformed stored {field}") from exc


class Pbkdf2Hasher:
    """Salted PBKDF2-HMAC. Hash and salt are base64 text, stored in separate columns."""

    requires_salt = True

    def __init__(
        self,
        digest: str = "sha512",
        rounds: int = 10000,
        key_length: int = 128,
        salt_length: int = 64,
    ):
        self.digest = digest
        self.rounds = rounds
        self.key_length = key_length
        self.salt_length = salt_length

    def _derive_key(self, secret: bytes, salt: bytes) -> bytes:
        try:
            return pbkdf2_hmac(self.digest, secret, salt, self.rounds, self.key_length)
        except (ValueError, TypeError) as exc:
            logger.warning("pbkdf2 derivation failed: digest=%s error=%s", self.digest, exc)
            raise HashError("Credential derivation failed") from exc

    def derive(self, password: str) -> DerivedCredential:
        salt = secrets.token_bytes(self.salt_length)
        key = self._derive_key(password.encode("utf-8"), salt)
        return DerivedCredential(
            hash=base64.b64encode(key).decode("ascii"),
            salt=base64.b64encode(salt).decode("ascii"),
        )

    def verify(self, password: str, hash: str, salt: str | None = None) -> bool:
        if salt is None:
            raise HashError("Salt is required to verify a pbkdf2 credential")
        expected = _b64decode(hash, "hash")
        # Unencodable input (lone surrogates) can never equal a stored password: derive it anyway, it compares False.
        secret = password.encode("utf-8", "surrogatepass")
        key = self._derive_key(secret, _b64decode(salt, "salt"))
        # Full derivation runs even for an empty stored hash; consteq compares in constant time.
        return consteq(key, expected)


class CryptContextHasher:
    """Self-salting modular-crypt hashes (bcrypt by default). Salt lives inside the hash string."""

    requires_salt = False

    def __init__(self, schemes: list[str] | None = None, bcrypt_rounds: int = 12):
        schemes = schemes or ["bcrypt"]
        settings = {}
        if "bcrypt" in schemes:
            settings["bcrypt__rounds"] = bcrypt_rounds
        # deprecated="auto": every scheme after the first verifies but is flagged for rehash
        self.context = CryptContext(schemes=schemes, deprecated="auto", **settings)

    def derive(self, password: str) -> DerivedCredential:
        try:
            return DerivedCredential(hash=self.context.hash(password))
        except (ValueError, TypeError) as exc:
            logger.warning("crypt derivation failed: %s", exc)
            raise HashError("Credential derivation failed") from exc

    def verify(self, password: str, hash: str, salt: str | None = None) -> bool:
        # passlib treats a None hash as "no such user": dummy verify, then False.
        try:
            valid, _new_hash = self.context.verify_and_update(password, hash or None)
        except (PasswordValueError, UnicodeEncodeError):
            # The presented password is unusable for this scheme (NULL bytes, lone surrogates): a mismatch.
            self.context.dummy_verify()
            return False
        except (ValueError, TypeError) as exc:
            logger.warning("stored crypt hash could not be verified: %s", exc)
            raise HashError("Malformed stored hash") from exc
        # A valid hash that needs upgrading still authenticates.
        return valid


def hasher_from_settings(settings: Settings) -> CredentialHasher:
    """Build the configured hasher. Fixed for the lifetime of a Users instance."""
    if settings.hash_scheme == "crypt":
        return CryptContextHasher(settings.crypt_schemes, bcrypt_rounds=settings.bcrypt_rounds)
    return Pbkdf2Hasher(
        digest=settings.pbkdf2_digest,
        rounds=settings.pbkdf2_rounds,
        key_length=settings.pbkdf2_key_length,
        salt_length=settings.pbkdf2_salt_length,
    )
