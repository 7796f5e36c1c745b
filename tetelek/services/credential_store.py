"""Persistence of user identities and password hashes.

The store is the only code that reads or writes the ``user`` table. Callers
get a :class:`StoredUser` projection; the hash itself stays inside it and is
only reachable through :meth:`StoredUser.verify_password`.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tetelek.auth.passwords import hash_password, verify_password
from tetelek.core.exceptions import DuplicateKeyError
from tetelek.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredUser:
    id: int
    username: str
    email: str
    superuser: bool
    _password_hash: str = field(repr=False, compare=False)

    def verify_password(self, candidate: str) -> bool:
        return verify_password(candidate, self._password_hash)

    @classmethod
    def from_row(cls, row: User) -> 'StoredUser':
        return cls(
            id=row.id,
            username=row.username,
            email=row.email,
            superuser=bool(row.superuser),
            _password_hash=row.password,
        )


class CredentialStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_username(self, username: str) -> StoredUser | None:
        row = self.db.query(User).filter(User.username == username).first()
        return StoredUser.from_row(row) if row else None

    def find_by_id(self, user_id: int) -> StoredUser | None:
        row = self.db.query(User).filter(User.id == user_id).first()
        return StoredUser.from_row(row) if row else None

    def find_by_email(self, email: str) -> StoredUser | None:
        row = self.db.query(User).filter(User.email == email).first()
        return StoredUser.from_row(row) if row else None

    def create(self, username: str, password: str, email: str, superuser: bool = False) -> int:
        """Insert a new user and return its id.

        Uniqueness of username and e-mail is left to the table constraints, so
        two concurrent registrations cannot both succeed.
        """
        user = User(
            username=username,
            password=hash_password(password),
            email=email,
            superuser=superuser,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateKeyError(self._conflicting_field(username, email)) from exc
        self.db.refresh(user)
        logger.info("Created user %s (id=%s, superuser=%s)", username, user.id, superuser)
        return user.id

    def update_password(self, user_id: int, new_password: str) -> bool:
        # Last write wins; there is no version column to detect concurrent rotations.
        affected = (
            self.db.query(User)
            .filter(User.id == user_id)
            .update({User.password: hash_password(new_password)}, synchronize_session=False)
        )
        self.db.commit()
        if affected != 1:
            logger.info("Password update for unknown user id %s", user_id)
        return affected == 1

    def _conflicting_field(self, username: str, email: str) -> str | None:
        if self.find_by_username(username) is not None:
            return 'username'
        if self.find_by_email(email) is not None:
            return 'email'
        return None
