"""Detail page of a single study item.

:class:`DetailViewController` drives the fetch of one tétel through
``Idle -> Loading -> Ready | Failed``, derives the reading time and the speech
text from the response, and gates the edit and delete actions on the
:class:`~tetelek.client.session.AuthSession` it was given.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from pydantic import ValidationError

from tetelek.client.deferred import DeferredUnit
from tetelek.client.notify import LoggingNotifier, Navigate, Notifier
from tetelek.client.query_cache import QueryCache
from tetelek.client.session import AuthSession
from tetelek.core import config
from tetelek.core.exceptions import ApiError, NetworkFailure, UnauthorizedError
from tetelek.schemas.tetel import Osszegzes, Section, TetelDetailsResponse, TetelSummary

logger = logging.getLogger(__name__)

TEXT_DERIVATION_UNIT = 'tetelek.text.markdown'
LISTING_QUERY_KEY = ('tetelek',)
NOT_PERMITTED = 'Nincs engedélyed a művelethez'
DELETE_SUCCEEDED = 'Sikeresen törölted a tételt.'

FETCH_ERRORS = (ApiError, NetworkFailure, UnauthorizedError, ValidationError)


class Phase(enum.Enum):
    IDLE = 'idle'
    LOADING = 'loading'
    READY = 'ready'
    FAILED = 'failed'


@dataclass(frozen=True)
class DetailState:
    phase: Phase
    data: TetelDetailsResponse | None = None
    error: Exception | None = None
    offline: bool = False


@dataclass(frozen=True)
class DetailView:
    tetel: TetelSummary
    sections: list[Section]
    osszegzes: Osszegzes | None
    reading_minutes: int | None
    speech_text: str
    can_edit: bool
    can_delete: bool


class TetelDetailsSource(Protocol):
    async def fetch_tetel_details(self, tetel_id: int) -> TetelDetailsResponse: ...

    async def delete_tetel(self, tetel_id: int) -> None: ...


def parse_tetel_id(raw: Any) -> int | None:
    """Return the positive integer id in ``raw`` (e.g. a route parameter), else ``None``."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw > 0 else None
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    return value if value > 0 else None


def default_retry_delay(attempt: int) -> float:
    return min(2.0 ** attempt, 30.0)


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, NetworkFailure):
        return True
    if isinstance(exc, ApiError):
        return exc.retryable
    return False


class DetailViewController:
    refetch_on_focus = False

    def __init__(
        self,
        raw_id: Any,
        api: TetelDetailsSource,
        session: AuthSession,
        cache: QueryCache,
        navigate: Navigate,
        notifier: Notifier | None = None,
        *,
        is_online: Callable[[], bool] = lambda: True,
        retries: int = config.DETAIL_FETCH_RETRIES,
        retry_delay: Callable[[int], float] = default_retry_delay,
    ):
        self.tetel_id = parse_tetel_id(raw_id)
        self.api = api
        self.session = session
        self.cache = cache
        self.navigate = navigate
        self.notifier = notifier or LoggingNotifier()
        self.retries = retries
        self._is_online = is_online
        self._retry_delay = retry_delay
        self._text = DeferredUnit(TEXT_DERIVATION_UNIT)
        self._task: asyncio.Task | None = None
        self._closed = False
        self._derived_for: tuple | None = None
        self._derived: tuple[int, str] | None = None
        self.state = DetailState(Phase.IDLE)

    @property
    def query_key(self) -> tuple:
        return ('tetelDetail', self.tetel_id)

    @property
    def can_edit(self) -> bool:
        return self.session.is_authenticated

    @property
    def can_delete(self) -> bool:
        return self.session.is_authenticated and self.session.is_superuser

    async def load(self) -> DetailState:
        if self.tetel_id is None or self._closed:
            return self.state

        await self._text.resolve()
        if self._closed:
            return self.state

        cached = self.cache.get(self.query_key)
        if cached is not None:
            self.state = DetailState(Phase.READY, data=cached)
            return self.state

        self.state = DetailState(Phase.LOADING)
        self._task = asyncio.ensure_future(self._fetch_with_retry(self.tetel_id))
        try:
            data = await self._task
        except asyncio.CancelledError:
            if self._closed:
                return self.state
            raise
        except FETCH_ERRORS as exc:
            if self._closed:
                return self.state
            offline = not self._is_online()
            logger.warning('Loading tétel %s failed (offline=%s): %s', self.tetel_id, offline, exc)
            self.state = DetailState(Phase.FAILED, error=exc, offline=offline)
            return self.state

        if self._closed:
            return self.state
        self.cache.set(self.query_key, data)
        self.state = DetailState(Phase.READY, data=data)
        return self.state

    async def _fetch_with_retry(self, tetel_id: int) -> TetelDetailsResponse:
        attempt = 0
        while True:
            try:
                return await self.api.fetch_tetel_details(tetel_id)
            except (ApiError, NetworkFailure) as exc:
                if attempt >= self.retries or not _is_retryable(exc):
                    raise
                logger.info('Retrying tétel %s after attempt %d failed: %s', tetel_id, attempt + 1, exc)
                await asyncio.sleep(self._retry_delay(attempt))
                attempt += 1

    async def on_window_focus(self) -> None:
        if not self.refetch_on_focus or self.state.phase is not Phase.READY:
            return
        self.cache.invalidate(self.query_key)
        await self.load()

    def close(self) -> None:
        """Tear the view down; a fetch still in flight can no longer change the state."""
        self._closed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    def _derive(self, data: TetelDetailsResponse) -> tuple[int | None, str]:
        markdown = self._text.get()
        if markdown is None:
            return None, ''

        # Memoized on the identity of the response parts, not their contents.
        if (
            self._derived_for is not None
            and data.sections is self._derived_for[0]
            and data.osszegzes is self._derived_for[1]
            and data.tetel.name == self._derived_for[2]
        ):
            return self._derived

        self._derived = (
            markdown.estimate_reading_minutes(data.sections, data.osszegzes),
            markdown.build_speech_text(data.tetel, data.sections, data.osszegzes),
        )
        self._derived_for = (data.sections, data.osszegzes, data.tetel.name)
        return self._derived

    def view(self) -> DetailView | None:
        if self.state.phase is not Phase.READY:
            return None

        data = self.state.data
        reading_minutes, speech_text = self._derive(data)
        return DetailView(
            tetel=data.tetel,
            sections=data.sections,
            osszegzes=data.osszegzes,
            reading_minutes=reading_minutes,
            speech_text=speech_text,
            can_edit=self.can_edit,
            can_delete=self.can_delete,
        )

    def edit(self) -> str:
        if not self.can_edit:
            self.notifier.error(NOT_PERMITTED)
            raise UnauthorizedError(NOT_PERMITTED)
        path = f'/tetelek/{self.tetel_id}/details/edit'
        self.navigate(path)
        return path

    async def delete(self) -> None:
        """Delete the item on the server, then leave the page.

        Nothing is removed locally before the server confirms the deletion.
        """
        if not self.can_delete:
            self.notifier.error(NOT_PERMITTED)
            raise UnauthorizedError(NOT_PERMITTED)
        if self.tetel_id is None:
            raise ValueError('No study item is selected.')

        try:
            await self.api.delete_tetel(self.tetel_id)
        except (ApiError, NetworkFailure, UnauthorizedError) as exc:
            self.notifier.error(f'Hiba történt a törlés során: {exc}')
            raise

        self.cache.invalidate(LISTING_QUERY_KEY)
        self.cache.invalidate(self.query_key)
        self.notifier.success(DELETE_SUCCEEDED)
        self.navigate('/tetelek')
