"""Authentication state handed explicitly to client-side controllers."""

import logging
from dataclasses import dataclass

import jwt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSession:
    username: str | None = None
    is_superuser: bool = False
    token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @classmethod
    def anonymous(cls) -> 'AuthSession':
        return cls()

    @classmethod
    def from_token(cls, token: str) -> 'AuthSession':
        """Build a session from an access token issued by ``/auth/login``.

        The signature is not checked here; the API verifies every request.
        The claims only decide which affordances the client shows.
        """
        claims = jwt.decode(token, options={'verify_signature': False})
        return cls(username=claims.get('sub'), is_superuser=bool(claims.get('superuser')), token=token)


class SessionStore:
    def __init__(self, session: AuthSession | None = None):
        self.current = session or AuthSession.anonymous()

    def login(self, token: str) -> AuthSession:
        self.current = AuthSession.from_token(token)
        logger.info('Signed in as %s', self.current.username)
        return self.current

    def logout(self) -> None:
        if self.current.is_authenticated:
            logger.info('Signed out %s', self.current.username)
        self.current = AuthSession.anonymous()
