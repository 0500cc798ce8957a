"""EcoPoints ledger.

Every balance change in the application goes through :func:`credit` or
:func:`debit`. Both append a :class:`PointTransaction` row and leave the
commit to the caller, so a ledger movement is part of whatever larger
operation triggered it.
"""
import math

from flask import current_app

from ecotrade.errors import InsufficientPoints, ValidationError
from ecotrade.models import db, User, PointTransaction, PointReason, get_or_raise


def round_points(value):
    """Round half up, 22.5 -> 23."""
    return int(math.floor(value + 0.5))


def _check_amount(points):
    if isinstance(points, bool) or not isinstance(points, int):
        raise ValidationError('Points must be an integer')
    if points <= 0:
        raise ValidationError('Points must be greater than zero')


def _record(user, delta, reason, detail):
    user.eco_points = (user.eco_points or 0) + delta
    entry = PointTransaction(
        user=user,
        delta=delta,
        reason=reason,
        detail=detail,
        balance_after=user.eco_points,
    )
    db.session.add(entry)
    current_app.logger.info('EcoPoints %+d for user %s (%s): %s -> balance %s',
                            delta, user.id, reason.value, detail or '-', user.eco_points)
    return entry


def credit(user, points, reason, detail=None):
    _check_amount(points)
    return _record(user, points, reason, detail)


def debit(user, points, reason, detail=None, allow_overdraft=False):
    _check_amount(points)
    if not allow_overdraft and (user.eco_points or 0) < points:
        raise InsufficientPoints(
            f'User does not have enough eco points (balance {user.eco_points}, requested {points})')
    return _record(user, -points, reason, detail)


# Ledger operations exposed to the API

def add_eco_points(user_id, points, reason=PointReason.MANUAL_ADJUSTMENT, detail=None):
    user = get_or_raise(User, user_id, 'User')
    credit(user, points, reason, detail)
    db.session.commit()
    return user.to_dict()


def use_eco_points(user_id, points, reason=PointReason.MANUAL_ADJUSTMENT, detail=None):
    user = get_or_raise(User, user_id, 'User')
    debit(user, points, reason, detail)
    db.session.commit()
    return user.to_dict()


def history(user_id):
    get_or_raise(User, user_id, 'User')
    entries = PointTransaction.query.filter_by(user_id=user_id)\
        .order_by(PointTransaction.created_at.desc(), PointTransaction.id.desc()).all()
    return [e.to_dict() for e in entries]
