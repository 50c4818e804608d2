from pwdlib import PasswordHash
from pwdlib.hashers.argon2 import Argon2Hasher

password_hash = PasswordHash((Argon2Hasher(),))

# Verified against when the email is unknown so both login failures cost the same.
DUMMY_HASH = password_hash.hash("todo-api-dummy-password")


def hash_password(password: str) -> str:
    """Hash a password with Argon2 (salted, one-way)."""
    return password_hash.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return password_hash.verify(plain_password, hashed_password)


def burn_verify(plain_password: str) -> bool:
    """Spend a verify on the dummy hash; always False."""
    password_hash.verify(plain_password, DUMMY_HASH)
    return False
