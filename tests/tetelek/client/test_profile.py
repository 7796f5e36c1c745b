import asyncio

import pytest

from tetelek.client.profile import ProfileController
from tetelek.client.session import AuthSession, SessionStore
from tetelek.core.exceptions import ApiError, NetworkFailure


class FakePasswordApi:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls: list[tuple[str, str, str]] = []

    async def update_password(self, current_password: str, new_password: str, confirm_password: str) -> None:
        self.calls.append((current_password, new_password, confirm_password))
        if self.error is not None:
            raise self.error


class RecordingNotifier:
    def __init__(self):
        self.successes: list[str] = []
        self.errors: list[str] = []

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


def make_profile(api=None, sessions=None, **kwargs):
    navigated: list[str] = []
    notifier = RecordingNotifier()
    sessions = sessions or SessionStore(AuthSession(username='anna', token='anna-token'))
    controller = ProfileController(api or FakePasswordApi(), sessions, navigated.append, notifier, **kwargs)
    return controller, navigated, notifier


@pytest.mark.parametrize(
    ('current', 'new', 'confirm', 'field'),
    [
        ('', 'uj-jelszo-1', 'uj-jelszo-1', 'currentPassword'),
        ('regi-jelszo', 'rovid', 'rovid', 'newPassword'),
        ('regi-jelszo', 'regi-jelszo', 'regi-jelszo', 'newPassword'),
        ('regi-jelszo', 'uj-jelszo-1', 'uj-jelszo-2', 'confirmPassword'),
    ],
)
def test_invalid_form_reports_field_error_and_sends_nothing(current: str, new: str, confirm: str, field: str) -> None:
    api = FakePasswordApi()
    controller, _, _ = make_profile(api)

    result = asyncio.run(controller.change_password(current, new, confirm))

    assert not result.ok
    assert field in result.errors
    assert result.success_message is None
    assert api.calls == []


def test_mismatch_message_is_readable() -> None:
    controller, _, _ = make_profile()

    result = asyncio.run(controller.change_password('regi-jelszo', 'uj-jelszo-1', 'masik-jelszo'))

    assert result.errors == {'confirmPassword': 'A jelszavak nem egyeznek.'}


def test_valid_form_is_sent_and_reports_success() -> None:
    api = FakePasswordApi()
    controller, _, _ = make_profile(api)

    result = asyncio.run(controller.change_password('regi-jelszo', 'uj-jelszo-1', 'uj-jelszo-1'))

    assert result.ok
    assert result.success_message == 'Jelszó sikeresen frissítve!'
    assert api.calls == [('regi-jelszo', 'uj-jelszo-1', 'uj-jelszo-1')]


def test_api_error_detail_becomes_general_error() -> None:
    api = FakePasswordApi(ApiError(400, 'A jelenlegi jelszó hibás.'))
    controller, _, _ = make_profile(api)

    result = asyncio.run(controller.change_password('rossz-jelszo', 'uj-jelszo-1', 'uj-jelszo-1'))

    assert result.errors == {'general': 'A jelenlegi jelszó hibás.'}


def test_network_failure_while_online_becomes_generic_error() -> None:
    api = FakePasswordApi(NetworkFailure('offline'))
    controller, _, _ = make_profile(api)

    result = asyncio.run(controller.change_password('regi-jelszo', 'uj-jelszo-1', 'uj-jelszo-1'))

    assert result.errors == {'general': 'Hiba történt a jelszó frissítésekor'}
    assert result.offline is False


def test_offline_client_shows_placeholder_and_sends_nothing() -> None:
    api = FakePasswordApi()
    controller, _, _ = make_profile(api, is_online=lambda: False)

    result = asyncio.run(controller.change_password('regi-jelszo', 'uj-jelszo-1', 'uj-jelszo-1'))

    assert controller.offline is True
    assert result.offline is True
    assert result.ok is False
    assert result.errors == {}
    assert api.calls == []


def test_connection_lost_during_request_is_reported_as_offline() -> None:
    online = [True]

    class DroppingApi(FakePasswordApi):
        async def update_password(self, current_password, new_password, confirm_password):
            online[0] = False
            await super().update_password(current_password, new_password, confirm_password)

    api = DroppingApi(NetworkFailure('no route to host'))
    controller, _, _ = make_profile(api, is_online=lambda: online[0])

    result = asyncio.run(controller.change_password('regi-jelszo', 'uj-jelszo-1', 'uj-jelszo-1'))

    assert len(api.calls) == 1
    assert result.offline is True
    assert result.errors == {}


def test_server_validation_errors_map_back_to_fields() -> None:
    api = FakePasswordApi(
        ApiError(
            422,
            'A jelszavak nem egyeznek.',
            field_errors={'confirmPassword': 'A jelszavak nem egyeznek.'},
        )
    )
    controller, _, _ = make_profile(api)

    result = asyncio.run(controller.change_password('regi-jelszo', 'uj-jelszo-1', 'uj-jelszo-1'))

    assert result.errors == {'confirmPassword': 'A jelszavak nem egyeznek.'}


def test_logout_clears_session_and_navigates_to_login() -> None:
    sessions = SessionStore(AuthSession(username='anna', token='anna-token'))
    controller, navigated, notifier = make_profile(sessions=sessions)

    assert controller.logout() is True

    assert sessions.current.is_authenticated is False
    assert sessions.current.username is None
    assert navigated == ['/login']
    assert notifier.successes == ['Sikeres kijelentkezés!']


def test_failed_logout_is_reported() -> None:
    class BrokenSessions(SessionStore):
        def logout(self) -> None:
            raise RuntimeError('storage unavailable')

    controller, navigated, notifier = make_profile(sessions=BrokenSessions())

    assert controller.logout() is False

    assert navigated == []
    assert notifier.errors == ['Hiba történt a kijelentkezés során']
