"""Password hashing utilities.

Learn: Uses bcrypt for password hashing. bcrypt salts automatically
and produces hashes starting with "$2b$". The cost factor is fixed at
10, which keeps login around ~50ms on modern hardware.
"""

import bcrypt

BCRYPT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes of the input
_BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password with bcrypt. Never store the plaintext."""
    pw_bytes = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash.

    Returns False on mismatch and on a stored hash bcrypt can't parse.
    """
    try:
        pw_bytes = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
        return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False
