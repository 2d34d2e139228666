"""
Password hashing helpers.

Passwords are write‑only: the API accepts them on create and update
but never returns them.  Before storage each password is hashed with
PBKDF2‑HMAC‑SHA256 and a per‑password random salt.  The stored value
has the form ``"<salt hex>$<hash hex>"``.
"""

import hashlib
import os

PBKDF2_ITERATIONS = 100_000
SALT_BYTES = 16


def _derive(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2‑HMAC with SHA‑256.

    Parameters
    ----------
    password : str
        The plain text password to hash.

    Returns
    -------
    str
        Salt and hash concatenated with ``$``.
    """
    salt = os.urandom(SALT_BYTES)
    return f"{salt.hex()}${_derive(password, salt).hex()}"

