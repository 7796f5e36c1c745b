class DuplicateKeyError(Exception):
    """A username or e-mail address is already registered."""

    def __init__(self, field: str | None = None):
        self.field = field
        super().__init__(f'Duplicate value for {field}' if field else 'Duplicate key')


class UnauthorizedError(Exception):
    """The current session may not perform the requested action."""


class NetworkFailure(Exception):
    """The API could not be reached."""


class ApiError(Exception):
    def __init__(self, status_code: int, detail: str, field_errors: dict[str, str] | None = None):
        self.status_code = status_code
        self.detail = detail
        self.field_errors = field_errors or {}
        super().__init__(f'{status_code}: {detail}')

    @property
    def retryable(self) -> bool:
        return self.status_code >= 500
