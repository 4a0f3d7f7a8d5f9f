"""Password hashing with bcrypt"""

import bcrypt

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72
BCRYPT_ROUNDS = 10


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a plain password with a fresh salt"""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plain password against a stored hash"""
    if not hashed_password:
        return False
    return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
