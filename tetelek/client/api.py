"""Async client for the tételek HTTP API."""

import logging
from typing import Any

import httpx

from tetelek.core import config
from tetelek.core.exceptions import ApiError, NetworkFailure, UnauthorizedError
from tetelek.schemas.tetel import TetelDetailsResponse, TetelSummary

logger = logging.getLogger(__name__)

INVALID_RESPONSE_BODY = 'Invalid response body'


class TetelApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.token = token
        self._client = client or httpx.AsyncClient(
            base_url=base_url or config.API_BASE_URL,
            timeout=config.API_TIMEOUT_SECONDS,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> 'TetelApiClient':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {'Authorization': f'Bearer {self.token}'}

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, url, headers=self._headers(), **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            detail = _error_detail(exc.response)
            if status_code in (401, 403):
                raise UnauthorizedError(detail) from exc
            raise ApiError(status_code, detail, _validation_errors(exc.response)) from exc
        except httpx.TransportError as exc:
            logger.warning('%s %s failed: %s', method, url, exc)
            raise NetworkFailure(str(exc) or exc.__class__.__name__) from exc
        return response

    async def _request_json(self, method: str, url: str, **kwargs) -> Any:
        response = await self._request(method, url, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            # e.g. a captive portal answering 200 with an HTML page
            logger.warning('%s %s returned a non-JSON body (%s)', method, url, response.headers.get('content-type'))
            raise ApiError(response.status_code, INVALID_RESPONSE_BODY) from exc

    async def login(self, username: str, password: str) -> str:
        body = await self._request_json('POST', '/auth/login', json={'username': username, 'password': password})
        try:
            self.token = body['access_token']
        except (KeyError, TypeError) as exc:
            raise ApiError(200, INVALID_RESPONSE_BODY) from exc
        return self.token

    async def list_tetelek(self) -> list[TetelSummary]:
        body = await self._request_json('GET', '/tetelek')
        return [TetelSummary.model_validate(item) for item in body]

    async def fetch_tetel_details(self, tetel_id: int) -> TetelDetailsResponse:
        body = await self._request_json('GET', f'/tetelek/{tetel_id}/details')
        return TetelDetailsResponse.model_validate(body)

    async def delete_tetel(self, tetel_id: int) -> None:
        await self._request('DELETE', f'/tetelek/{tetel_id}')

    async def update_password(self, current_password: str, new_password: str, confirm_password: str) -> None:
        await self._request(
            'PUT',
            '/auth/password',
            json={
                'currentPassword': current_password,
                'newPassword': new_password,
                'confirmPassword': confirm_password,
            },
        )


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _error_detail(response: httpx.Response) -> str:
    body = _error_body(response)
    if body is None:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        detail = body.get('detail') or body.get('error')
        if isinstance(detail, str):
            return detail
        if isinstance(detail, list):
            messages = _validation_errors(response)
            if messages:
                return '; '.join(messages.values())
        if detail is not None:
            return str(detail)
    return response.reason_phrase


def _validation_errors(response: httpx.Response) -> dict[str, str]:
    """Per-field messages from a FastAPI 422 body (``detail`` is a list of errors)."""
    body = _error_body(response)
    if not isinstance(body, dict) or not isinstance(body.get('detail'), list):
        return {}

    errors: dict[str, str] = {}
    for entry in body['detail']:
        if not isinstance(entry, dict):
            continue
        loc = entry.get('loc') or []
        # ('body',) or an empty location is a whole-request error
        field = str(loc[-1]) if loc and loc[-1] != 'body' else 'general'
        message = str(entry.get('msg') or '')
        message = message.removeprefix('Value error, ')
        errors.setdefault(field, message)
    return errors
