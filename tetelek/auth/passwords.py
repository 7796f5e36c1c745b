"""Password hashing helpers built on :class:`passlib.context.CryptContext`.

Hashes are argon2 with a per-hash random salt. ``verify_password`` never
raises for a wrong password; a stored value passlib cannot identify is logged
and treated as a mismatch.
"""

import logging

from passlib.context import CryptContext

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        logger.warning("Stored password hash has an unrecognized format")
        return False
