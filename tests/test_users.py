import pytest

from ecotrade import users
from ecotrade.errors import AuthenticationFailed, DuplicateIdentity, ValidationError
from ecotrade.models import db, User, PointTransaction, PointReason


def test_create_user_hashes_password(app):
    created = users.create_user({'name': 'Leo', 'username': 'leo', 'email': 'leo@example.com',
                                 'password': 'secret'})

    stored = db.session.get(User, created['id'])
    assert stored.password != 'secret'
    assert created['role'] == 'USER'
    assert created['full_name'] == 'Leo'
    assert 'password' not in created


def test_create_user_with_initial_points_books_ledger_entry(app):
    created = users.create_user({'name': 'Mia', 'email': 'mia@example.com', 'password': 'x',
                                 'eco_points': 40})

    assert created['eco_points'] == 40
    assert PointTransaction.query.filter_by(user_id=created['id']).one().delta == 40


def test_duplicate_email_and_username(user):
    with pytest.raises(DuplicateIdentity):
        users.create_user({'name': 'Other', 'email': 'ana@example.com', 'password': 'x'})
    with pytest.raises(DuplicateIdentity):
        users.create_user({'name': 'Other', 'username': 'ana', 'email': 'o@example.com',
                           'password': 'x'})


def test_update_user_checks_duplicates(user):
    other = users.create_user({'name': 'Bo', 'username': 'bo', 'email': 'bo@example.com',
                               'password': 'x'})

    with pytest.raises(DuplicateIdentity):
        users.update_user(other['id'], {'email': 'ana@example.com'})
    db.session.rollback()

    updated = users.update_user(other['id'], {'email': 'bo@new.example.com', 'role': 'admin'})
    assert updated['email'] == 'bo@new.example.com'
    assert updated['role'] == 'ADMIN'


def test_update_balance_goes_through_ledger(user):
    updated = users.update_user(user.id, {'eco_points': 60})

    assert updated['eco_points'] == 60
    entry = PointTransaction.query.one()
    assert entry.delta == -40
    assert entry.reason is PointReason.MANUAL_ADJUSTMENT


def test_unknown_role_rejected(app):
    with pytest.raises(ValidationError):
        users.create_user({'name': 'Z', 'email': 'z@example.com', 'password': 'x',
                           'role': 'superuser'})


def test_register_grants_welcome_points(app):
    created = users.register({'name': 'Kim', 'email': 'kim@example.com', 'password': 'pw'})

    assert created['username'] == 'kim'
    assert created['eco_points'] == 100
    entry = PointTransaction.query.one()
    assert entry.reason is PointReason.WELCOME_BONUS


def test_register_derives_free_username(app):
    users.create_user({'name': 'Kim', 'username': 'kim', 'email': 'kim@a.example.com',
                       'password': 'pw'})

    created = users.register({'name': 'Kim B', 'email': 'kim@b.example.com', 'password': 'pw'})

    assert created['username'] == 'kim2'


def test_register_duplicate_email(user):
    with pytest.raises(DuplicateIdentity):
        users.register({'name': 'Ana', 'email': 'ana@example.com', 'password': 'pw'})


def test_authenticate(app):
    users.register({'name': 'Kim', 'email': 'kim@example.com', 'password': 'pw'})

    assert users.authenticate('kim@example.com', 'pw').username == 'kim'
    with pytest.raises(AuthenticationFailed):
        users.authenticate('kim@example.com', 'wrong')
    with pytest.raises(AuthenticationFailed):
        users.authenticate('nobody@example.com', 'pw')


def test_delete_user_removes_owned_records(user):
    users.update_user(user.id, {'eco_points': 10})
    users.delete_user(user.id)

    assert User.query.count() == 0
    assert PointTransaction.query.count() == 0
