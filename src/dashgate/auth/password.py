"""Password hashing utilities.

Learn: Uses bcrypt for hashed dashboard passwords. bcrypt stores its salt
and work factor inside the hash ("$2b$12$<salt><digest>"), so verifying
re-derives the digest from the stored salt instead of comparing strings.
Hashes made by other bcrypt implementations ("$2a$", "$2y$") verify too.

Plain-text passwords are compared with secrets.compare_digest so the
comparison time does not depend on where the strings differ.
"""

import secrets

import bcrypt

DEFAULT_ROUNDS = 12


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password with bcrypt.

    Learn: bcrypt includes a random salt automatically, so hashing the
    same password twice gives two different strings that both verify.
    Passwords are truncated to 72 bytes (bcrypt's limit).
    """
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a bcrypt hash.

    A malformed hash verifies as False rather than raising.
    """
    try:
        pw_bytes = password.encode("utf-8")[:72]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError):
        return False


def verify_plain(password: str, expected: str) -> bool:
    """Exact, case-sensitive comparison of plain-text passwords."""
    return secrets.compare_digest(password.encode("utf-8"), expected.encode("utf-8"))
