import pytest

from ecotrade import plastic
from ecotrade.errors import InvalidStateTransition, NotFound, ValidationError
from ecotrade.models import db, PlasticSubmission, SubmissionStatus


@pytest.mark.parametrize('weight, kind, expected', [
    (2.5, 'PET', 30.0),
    (1.8, 'HDPE', 21.6),
    (1.0, 'pet', 12.0),
    (3.0, 'PVC', 30.0),
    (2.0, 'LDPE', 20.0),
    (2.0, None, 20.0),
])
def test_calculate_eco_points(weight, kind, expected):
    assert plastic.calculate_eco_points(weight, kind) == pytest.approx(expected)


def test_create_submission_is_pending(user):
    created = plastic.create_submission({'user_id': user.id, 'weight': 2.5, 'plastic_type': 'PET',
                                         'location': 'Main square'})

    assert created['status'] == 'PENDING'
    assert created['eco_points'] == pytest.approx(30.0)
    assert created['user_name'] == 'Ana'
    assert user.eco_points == 100


def test_create_submission_validates_weight(user):
    with pytest.raises(ValidationError):
        plastic.create_submission({'user_id': user.id, 'weight': 0})
    with pytest.raises(ValidationError):
        plastic.create_submission({'user_id': user.id})


def test_create_submission_unknown_user(app):
    with pytest.raises(NotFound):
        plastic.create_submission({'user_id': 5, 'weight': 1})


def test_verify_credits_rounded_points(user):
    created = plastic.create_submission({'user_id': user.id, 'weight': 1.8, 'plastic_type': 'HDPE'})

    verified = plastic.verify_submission(created['id'], 'looks clean')

    assert verified['status'] == 'VERIFIED'
    assert verified['verification_notes'] == 'looks clean'
    assert verified['verification_date'] is not None
    assert user.eco_points == 100 + 22


def test_reject_gives_no_points(user):
    created = plastic.create_submission({'user_id': user.id, 'weight': 3, 'plastic_type': 'PVC'})

    rejected = plastic.reject_submission(created['id'], 'mixed waste')

    assert rejected['status'] == 'REJECTED'
    assert rejected['verification_notes'] == 'mixed waste'
    assert user.eco_points == 100


@pytest.mark.parametrize('first, second', [
    (plastic.verify_submission, plastic.verify_submission),
    (plastic.verify_submission, plastic.reject_submission),
    (plastic.reject_submission, plastic.verify_submission),
])
def test_processed_submissions_are_final(user, first, second):
    created = plastic.create_submission({'user_id': user.id, 'weight': 1, 'plastic_type': 'PET'})
    first(created['id'])
    balance = user.eco_points

    with pytest.raises(InvalidStateTransition):
        second(created['id'])

    db.session.rollback()
    assert user.eco_points == balance


def test_list_and_delete(user):
    a = plastic.create_submission({'user_id': user.id, 'weight': 1})
    plastic.create_submission({'user_id': user.id, 'weight': 2})

    assert len(plastic.list_user_submissions(user.id)) == 2

    plastic.delete_submission(a['id'])

    assert [s['weight'] for s in plastic.list_submissions()] == [2]
    assert db.session.get(PlasticSubmission, a['id']) is None
    assert PlasticSubmission.query.first().status == SubmissionStatus.PENDING
