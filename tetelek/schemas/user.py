"""Request and response models for the authentication endpoints."""

from pydantic import BaseModel, ValidationError, ValidationInfo, field_validator

MIN_PASSWORD_LENGTH = 8


class RegisterRequest(BaseModel):
    username: str
    password: str
    email: str

    @field_validator('username')
    @classmethod
    def validate_username(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('A felhasználónév megadása kötelező.')
        return normalized

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if '@' not in normalized:
            raise ValueError('Érvénytelen e-mail cím.')
        return normalized

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'A jelszónak legalább {MIN_PASSWORD_LENGTH} karakterből kell állnia.')
        return value


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = 'bearer'


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    superuser: bool

    class Config:
        from_attributes = True


class PasswordChangeRequest(BaseModel):
    """Password change form; validated on the client before sending and again by the API."""

    currentPassword: str
    newPassword: str
    confirmPassword: str

    @field_validator('currentPassword')
    @classmethod
    def validate_current_password(cls, value: str) -> str:
        if not value:
            raise ValueError('A jelenlegi jelszó megadása kötelező.')
        return value

    @field_validator('newPassword')
    @classmethod
    def validate_new_password(cls, value: str, info: ValidationInfo) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Az új jelszónak legalább {MIN_PASSWORD_LENGTH} karakterből kell állnia.')
        if value == info.data.get('currentPassword'):
            raise ValueError('Az új jelszó nem egyezhet meg a jelenlegivel.')
        return value

    @field_validator('confirmPassword')
    @classmethod
    def validate_confirmation(cls, value: str, info: ValidationInfo) -> str:
        if 'newPassword' in info.data and value != info.data['newPassword']:
            raise ValueError('A jelszavak nem egyeznek.')
        return value


def field_errors(exc: ValidationError) -> dict[str, str]:
    """Flatten a validation error into one message per form field."""
    errors: dict[str, str] = {}
    for issue in exc.errors():
        field = str(issue['loc'][0]) if issue['loc'] else 'general'
        error = issue.get('ctx', {}).get('error')
        errors.setdefault(field, str(error) if error is not None else issue['msg'])
    return errors
