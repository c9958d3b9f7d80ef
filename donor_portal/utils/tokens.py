"""
Link Token Utilities

Helpers for the activation and password-reset links emailed by Salesforce.
A link carries the URL-safe Base64 of the email and a SHA-256 token derived
from the email and the issuance time.
"""

import base64
import binascii
import hashlib
import secrets
import string
import time
from typing import Optional

from donor_portal.config import settings

ACTIVATION_PATH = "activate"
RESET_PASSWORD_PATH = "reset-password"


def encode_email(email: str) -> str:
    """URL-safe Base64 of the UTF-8 email."""
    return base64.urlsafe_b64encode(email.encode("utf-8")).decode("ascii")


def decode_email(encoded: str) -> str:
    """
    Decode an email segment produced by encode_email.

    Standard Base64 and missing padding are accepted so links issued by the
    previous portal backend keep working.

    Characters outside the Base64 alphabet are rejected, not skipped.

    Raises:
        ValueError: If the segment is not valid Base64 UTF-8
    """
    normalized = encoded.strip().replace("+", "-").replace("/", "_")
    normalized += "=" * (-len(normalized) % 4)
    try:
        return base64.b64decode(
            normalized.encode("ascii"), altchars=b"-_", validate=True
        ).decode("utf-8")
    except (binascii.Error, UnicodeError) as e:
        raise ValueError(f"Invalid email segment: {e}") from e


def generate_link_token(email: str, timestamp: Optional[int] = None) -> str:
    """SHA-256 hex digest of the email followed by the unix timestamp."""
    if timestamp is None:
        timestamp = int(time.time())
    return hashlib.sha256(f"{email}{timestamp}".encode("utf-8")).hexdigest()


def build_link(path: str, email: str, base_url: Optional[str] = None) -> str:
    base_url = base_url or settings.public_base_url
    return f"{base_url}/{path}/{encode_email(email)}/{generate_link_token(email)}"


def build_activation_link(email: str) -> str:
    return build_link(ACTIVATION_PATH, email)


def build_reset_password_link(email: str) -> str:
    return build_link(RESET_PASSWORD_PATH, email)


def generate_random_string(length: int) -> str:
    """Random uppercase ASCII letters."""
    return "".join(secrets.choice(string.ascii_uppercase) for _ in range(length))
