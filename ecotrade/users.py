# users.py
from flask import current_app
from werkzeug.security import generate_password_hash, check_password_hash

from ecotrade import ledger
from ecotrade.errors import DuplicateIdentity, AuthenticationFailed, ValidationError, require, as_number
from ecotrade.models import db, User, PointReason, get_or_raise

ROLES = ('USER', 'ADMIN')


def _check_email_free(email):
    if User.query.filter_by(email=email).first():
        raise DuplicateIdentity('Email already in use')


def _role(value):
    role = (value or 'USER').upper()
    if role not in ROLES:
        raise ValidationError(f'Unknown role: {value}')
    return role


def _check_username_free(username):
    if username and User.query.filter_by(username=username).first():
        raise DuplicateIdentity('Username already in use')


def _set_balance(user, target):
    # admin balance corrections are still booked as ledger adjustments
    if target < 0:
        raise ValidationError('Eco points cannot be negative')
    delta = target - (user.eco_points or 0)
    if delta > 0:
        ledger.credit(user, delta, PointReason.MANUAL_ADJUSTMENT, 'Balance set by administrator')
    elif delta < 0:
        ledger.debit(user, -delta, PointReason.MANUAL_ADJUSTMENT, 'Balance set by administrator')


def list_users():
    return [u.to_dict() for u in User.query.order_by(User.id).all()]


def get_user(user_id):
    return get_or_raise(User, user_id, 'User').to_dict()


def create_user(data):
    name, email, password = require(data, 'name', 'email', 'password')
    username = data.get('username')

    _check_email_free(email)
    _check_username_free(username)

    user = User(
        name=name,
        full_name=data.get('full_name') or name,
        username=username,
        email=email,
        password=generate_password_hash(password),
        eco_points=0,
        role=_role(data.get('role')),
    )
    db.session.add(user)
    db.session.flush()
    if data.get('eco_points'):
        _set_balance(user, as_number(data['eco_points'], 'eco_points', int))
    db.session.commit()
    return user.to_dict()


def update_user(user_id, data):
    user = get_or_raise(User, user_id, 'User')

    if data.get('name'):
        user.name = data['name']
    if data.get('full_name') is not None:
        user.full_name = data['full_name']

    username = data.get('username')
    if username and username != user.username:
        _check_username_free(username)
        user.username = username

    email = data.get('email')
    if email and email != user.email:
        _check_email_free(email)
        user.email = email

    if data.get('password'):
        user.password = generate_password_hash(data['password'])

    if data.get('eco_points') is not None:
        _set_balance(user, as_number(data['eco_points'], 'eco_points', int))

    if data.get('role'):
        user.role = _role(data['role'])

    db.session.commit()
    return user.to_dict()


def delete_user(user_id):
    user = get_or_raise(User, user_id, 'User')
    db.session.delete(user)
    db.session.commit()


def register(data):
    name, email, password = require(data, 'name', 'email', 'password')
    _check_email_free(email)

    # username is the local part of the email, suffixed when taken
    base = email.split('@')[0]
    username = base
    suffix = 1
    while User.query.filter_by(username=username).first():
        suffix += 1
        username = f'{base}{suffix}'

    user = User(
        name=name,
        full_name=name,
        username=username,
        email=email,
        password=generate_password_hash(password),
        eco_points=0,
        role='USER',
    )
    db.session.add(user)
    db.session.flush()

    welcome = current_app.config.get('WELCOME_POINTS', 0)
    if welcome > 0:
        ledger.credit(user, welcome, PointReason.WELCOME_BONUS, 'Welcome to EcoTrade')

    db.session.commit()
    return user.to_dict()


def authenticate(email, password):
    user = User.query.filter_by(email=email).first()
    if user is None or not check_password_hash(user.password, password or ''):
        raise AuthenticationFailed('Invalid email or password')
    return user
