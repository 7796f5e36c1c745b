import pytest

from tetelek.core.exceptions import DuplicateKeyError
from tetelek.models.user import User
from tetelek.services.credential_store import CredentialStore


@pytest.fixture
def store(db) -> CredentialStore:
    return CredentialStore(db)


def test_create_then_find_by_username_verifies_password(store: CredentialStore, db) -> None:
    user_id = store.create('anna', 'titkos-jelszo', 'anna@example.hu')

    user = store.find_by_username('anna')

    assert user is not None
    assert user.id == user_id
    assert user.email == 'anna@example.hu'
    assert user.superuser is False
    assert user.verify_password('titkos-jelszo') is True
    stored_hash = db.query(User.password).filter(User.id == user_id).scalar()
    assert stored_hash != 'titkos-jelszo'
    assert stored_hash.startswith('$argon2')


def test_same_password_gets_a_different_salted_hash(store: CredentialStore, db) -> None:
    first_id = store.create('anna', 'ugyanaz-a-jelszo', 'anna@example.hu')
    second_id = store.create('bela', 'ugyanaz-a-jelszo', 'bela@example.hu')

    hashes = {
        user_id: db.query(User.password).filter(User.id == user_id).scalar()
        for user_id in (first_id, second_id)
    }

    assert hashes[first_id] != hashes[second_id]


def test_verify_password_returns_false_for_wrong_password(store: CredentialStore) -> None:
    store.create('anna', 'titkos-jelszo', 'anna@example.hu')

    user = store.find_by_username('anna')

    assert user.verify_password('rossz-jelszo') is False
    assert user.verify_password('') is False


def test_verify_password_returns_false_for_unrecognized_hash(store: CredentialStore, db) -> None:
    db.add(User(username='regi', password='plain-legacy-value', email='regi@example.hu', superuser=False))
    db.commit()

    user = store.find_by_username('regi')

    assert user.verify_password('plain-legacy-value') is False


def test_lookups_by_id_and_email(store: CredentialStore) -> None:
    user_id = store.create('admin', 'admin-jelszo', 'admin@example.hu', superuser=True)

    by_id = store.find_by_id(user_id)
    by_email = store.find_by_email('admin@example.hu')

    assert by_id == by_email
    assert by_id.username == 'admin'
    assert by_id.superuser is True


def test_lookups_return_none_when_missing(store: CredentialStore) -> None:
    assert store.find_by_username('nincs') is None
    assert store.find_by_id(999) is None
    assert store.find_by_email('nincs@example.hu') is None


def test_lookup_input_is_not_interpreted_as_sql(store: CredentialStore) -> None:
    store.create('anna', 'titkos-jelszo', 'anna@example.hu')

    assert store.find_by_username("anna' OR '1'='1") is None


@pytest.mark.parametrize(
    ('username', 'email', 'field'),
    [
        ('anna', 'masik@example.hu', 'username'),
        ('masik', 'anna@example.hu', 'email'),
    ],
)
def test_create_rejects_duplicates(store: CredentialStore, username: str, email: str, field: str) -> None:
    store.create('anna', 'titkos-jelszo', 'anna@example.hu')

    with pytest.raises(DuplicateKeyError) as exception_info:
        store.create(username, 'masik-jelszo', email)

    assert exception_info.value.field == field
    assert store.find_by_username('masik') is None


def test_update_password_rotates_hash(store: CredentialStore) -> None:
    user_id = store.create('anna', 'regi-jelszo', 'anna@example.hu')

    assert store.update_password(user_id, 'uj-jelszo-123') is True

    user = store.find_by_id(user_id)
    assert user.verify_password('uj-jelszo-123') is True
    assert user.verify_password('regi-jelszo') is False


def test_update_password_for_unknown_id_changes_nothing(store: CredentialStore, db) -> None:
    user_id = store.create('anna', 'regi-jelszo', 'anna@example.hu')
    hash_before = db.query(User.password).filter(User.id == user_id).scalar()

    assert store.update_password(user_id + 1, 'uj-jelszo-123') is False

    assert db.query(User.password).filter(User.id == user_id).scalar() == hash_before


def test_stored_user_repr_hides_password_hash(store: CredentialStore) -> None:
    store.create('anna', 'titkos-jelszo', 'anna@example.hu')

    user = store.find_by_username('anna')

    assert 'argon2' not in repr(user)
    assert 'titkos' not in repr(user)
