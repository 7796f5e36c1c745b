import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tetelek.auth import jwt_handler
from tetelek.auth.dependencies import get_current_user
from tetelek.core.exceptions import DuplicateKeyError
from tetelek.database import ensure_user_schema, get_db
from tetelek.schemas.user import (
    LoginRequest,
    PasswordChangeRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from tetelek.services.credential_store import CredentialStore, StoredUser

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE = 'Database unavailable. Verify DATABASE_URL and database credentials.'
DUPLICATE_MESSAGES = {
    'username': 'Ez a felhasználónév már foglalt.',
    'email': 'Ez az e-mail cím már regisztrálva van.',
}


def ensure_database_ready() -> None:
    try:
        ensure_user_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE,
        ) from exc


def to_user_response(user: StoredUser) -> UserResponse:
    return UserResponse(id=user.id, username=user.username, email=user.email, superuser=user.superuser)


@router.post('/register', response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    store = CredentialStore(db)
    try:
        user_id = store.create(data.username, data.password, data.email)
        user = store.find_by_id(user_id)
    except DuplicateKeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=DUPLICATE_MESSAGES.get(exc.field, 'A felhasználó már létezik.'),
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Registration failed for %s', data.username)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE,
        ) from exc

    return to_user_response(user)


@router.post('/login', response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        user = CredentialStore(db).find_by_username(data.username.strip())
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE,
        ) from exc

    if user is None or not user.verify_password(data.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Hibás felhasználónév vagy jelszó.')

    token = jwt_handler.create_access_token(subject=user.username, superuser=user.superuser)
    return TokenResponse(access_token=token)


@router.get('/me', response_model=UserResponse)
def me(current_user: StoredUser = Depends(get_current_user)):
    return to_user_response(current_user)


@router.put('/password')
def change_password(
    data: PasswordChangeRequest,
    current_user: StoredUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    if not current_user.verify_password(data.currentPassword):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='A jelenlegi jelszó hibás.')

    try:
        updated = CredentialStore(db).update_password(current_user.id, data.newPassword)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Password update failed for user id %s', current_user.id)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE,
        ) from exc

    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='User not found')

    return {'message': 'Jelszó sikeresen frissítve!'}
