"""
Password hashing for the local auth provider.

PBKDF2-HMAC-SHA256 with a random per-password salt.  Hashes are stored as
``pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>``.
"""
import hashlib
import hmac
import os

from smartstudy.config import settings

_ALGORITHM = "pbkdf2_sha256"


def hash_password(password: str, iterations: int = None) -> str:
    iterations = iterations or settings.PASSWORD_HASH_ITERATIONS
    salt = os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{_ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    """Constant-time check of a password against a stored hash"""
    try:
        algorithm, iterations, salt_hex, digest_hex = stored.split("$")
        if algorithm != _ALGORITHM:
            return False
        digest = hashlib.pbkdf2_hmac(
            "sha256", password.encode("utf-8"), bytes.fromhex(salt_hex), int(iterations)
        )
    except (AttributeError, ValueError):
        return False
    return hmac.compare_digest(digest.hex(), digest_hex)
