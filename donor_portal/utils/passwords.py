"""
Password Hashing

Portal passwords are stored on the Contact (Password__c) as salted
PBKDF2-HMAC-SHA256 hashes:

    pbkdf2_sha256$<iterations>$<salt b64>$<hash b64>

Values written by the previous backend are plain Base64 of the password.
They still verify, and needs_rehash() reports them so callers can upgrade
the stored value after a successful login.
"""

import base64
import binascii
import hmac
import os
from typing import Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from donor_portal.config import settings

ALGORITHM = "pbkdf2_sha256"
SALT_BYTES = 16
KEY_LENGTH = 32


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def hash_password(password: str, iterations: Optional[int] = None) -> str:
    """Hash a password with a fresh random salt."""
    iterations = iterations or settings.password_hash_iterations
    salt = os.urandom(SALT_BYTES)
    digest = _derive(password, salt, iterations)
    return f"{ALGORITHM}${iterations}${_b64(salt)}${_b64(digest)}"


def is_legacy_hash(stored: Optional[str]) -> bool:
    return bool(stored) and not stored.startswith(f"{ALGORITHM}$")


def _verify_legacy(password: str, stored: str) -> bool:
    try:
        decoded = base64.b64decode(stored.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError):
        return False
    return hmac.compare_digest(decoded.encode("utf-8"), password.encode("utf-8"))


def verify_password(password: str, stored: Optional[str]) -> bool:
    """Check a plain password against a stored hash (or legacy Base64 value)."""
    if not stored or password is None:
        return False

    if is_legacy_hash(stored):
        return _verify_legacy(password, stored)

    try:
        _, iterations, salt_b64, digest_b64 = stored.split("$")
        salt = base64.b64decode(salt_b64)
        expected = base64.b64decode(digest_b64)
        actual = _derive(password, salt, int(iterations))
    except (ValueError, binascii.Error):
        return False

    return hmac.compare_digest(actual, expected)


def needs_rehash(stored: Optional[str]) -> bool:
    """True when the stored value should be replaced by a fresh hash."""
    if is_legacy_hash(stored):
        return True
    try:
        iterations = int(stored.split("$")[1])
    except (AttributeError, IndexError, ValueError):
        return True
    return iterations < settings.password_hash_iterations
