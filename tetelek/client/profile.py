import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol

from pydantic import ValidationError

from tetelek.client.notify import LoggingNotifier, Navigate, Notifier
from tetelek.client.session import SessionStore
from tetelek.core.exceptions import ApiError, NetworkFailure, UnauthorizedError
from tetelek.schemas.user import PasswordChangeRequest, field_errors

logger = logging.getLogger(__name__)

PASSWORD_UPDATED = 'Jelszó sikeresen frissítve!'
PASSWORD_UPDATE_FAILED = 'Hiba történt a jelszó frissítésekor'
LOGOUT_SUCCEEDED = 'Sikeres kijelentkezés!'
LOGOUT_FAILED = 'Hiba történt a kijelentkezés során'


class PasswordUpdater(Protocol):
    async def update_password(self, current_password: str, new_password: str, confirm_password: str) -> None: ...


@dataclass
class PasswordChangeResult:
    errors: dict[str, str] = field(default_factory=dict)
    success_message: str | None = None
    # The page shows the offline placeholder instead of the form.
    offline: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors and not self.offline


class ProfileController:
    def __init__(
        self,
        api: PasswordUpdater,
        sessions: SessionStore,
        navigate: Navigate,
        notifier: Notifier | None = None,
        *,
        is_online: Callable[[], bool] = lambda: True,
    ):
        self.api = api
        self.sessions = sessions
        self.navigate = navigate
        self.notifier = notifier or LoggingNotifier()
        self._is_online = is_online

    @property
    def offline(self) -> bool:
        return not self._is_online()

    async def change_password(
        self,
        current_password: str,
        new_password: str,
        confirm_password: str,
    ) -> PasswordChangeResult:
        """Validate the form locally, then send it.

        Nothing is sent when a field is invalid or the client is offline.
        """
        if self.offline:
            return PasswordChangeResult(offline=True)

        try:
            form = PasswordChangeRequest(
                currentPassword=current_password,
                newPassword=new_password,
                confirmPassword=confirm_password,
            )
        except ValidationError as exc:
            return PasswordChangeResult(errors=field_errors(exc))

        try:
            await self.api.update_password(form.currentPassword, form.newPassword, form.confirmPassword)
        except ApiError as exc:
            if exc.field_errors:
                return PasswordChangeResult(errors=dict(exc.field_errors))
            return PasswordChangeResult(errors={'general': exc.detail or PASSWORD_UPDATE_FAILED})
        except NetworkFailure as exc:
            if self.offline:
                return PasswordChangeResult(offline=True)
            logger.warning('Password update failed: %s', exc)
            return PasswordChangeResult(errors={'general': PASSWORD_UPDATE_FAILED})
        except UnauthorizedError as exc:
            logger.warning('Password update failed: %s', exc)
            return PasswordChangeResult(errors={'general': PASSWORD_UPDATE_FAILED})

        return PasswordChangeResult(success_message=PASSWORD_UPDATED)

    def logout(self) -> bool:
        try:
            self.sessions.logout()
        except Exception:
            logger.exception('Logout failed')
            self.notifier.error(LOGOUT_FAILED)
            return False
        self.notifier.success(LOGOUT_SUCCEEDED)
        self.navigate('/login')
        return True
