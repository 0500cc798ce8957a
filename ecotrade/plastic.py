# plastic.py
from datetime import datetime

from ecotrade import ledger
from ecotrade.errors import InvalidStateTransition, ValidationError, require, as_number
from ecotrade.models import db, User, PlasticSubmission, SubmissionStatus, PointReason, get_or_raise

POINTS_PER_KG = 10
# more valuable resins
BONUS_TYPES = {'PET': 1.2, 'HDPE': 1.2}


def calculate_eco_points(weight, plastic_type=None):
    points = weight * POINTS_PER_KG
    if plastic_type:
        points *= BONUS_TYPES.get(plastic_type.strip().upper(), 1)
    return points


def list_submissions():
    return [s.to_dict() for s in PlasticSubmission.query.order_by(PlasticSubmission.id).all()]


def get_submission(submission_id):
    return get_or_raise(PlasticSubmission, submission_id, 'Plastic submission').to_dict()


def list_user_submissions(user_id):
    query = PlasticSubmission.query.filter_by(user_id=user_id).order_by(PlasticSubmission.id)
    return [s.to_dict() for s in query]


def create_submission(data):
    user_id, weight = require(data, 'user_id', 'weight')
    weight = as_number(weight, 'weight')
    if weight <= 0:
        raise ValidationError('Weight must be greater than zero')

    user = get_or_raise(User, user_id, 'User')
    plastic_type = data.get('plastic_type')

    submission = PlasticSubmission(
        user=user,
        weight=weight,
        plastic_type=plastic_type,
        description=data.get('description'),
        image_url=data.get('image_url'),
        location=data.get('location'),
        submission_date=datetime.utcnow(),
        eco_points=calculate_eco_points(weight, plastic_type),
        status=SubmissionStatus.PENDING,
    )
    db.session.add(submission)
    db.session.commit()
    return submission.to_dict()


def _close(submission, status, notes):
    # only pending submissions can be processed
    if submission.status != SubmissionStatus.PENDING:
        raise InvalidStateTransition(
            f'Submission was already processed (status {submission.status.value})')
    submission.status = status
    submission.verification_date = datetime.utcnow()
    submission.verification_notes = notes


def verify_submission(submission_id, notes=None):
    submission = get_or_raise(PlasticSubmission, submission_id, 'Plastic submission')
    _close(submission, SubmissionStatus.VERIFIED, notes)

    points = ledger.round_points(submission.eco_points)
    if points > 0:
        ledger.credit(submission.user, points, PointReason.PLASTIC_VERIFIED,
                      f'{submission.weight} kg {submission.plastic_type or "plastic"} verified')

    db.session.commit()
    return submission.to_dict()


def reject_submission(submission_id, notes=None):
    submission = get_or_raise(PlasticSubmission, submission_id, 'Plastic submission')
    _close(submission, SubmissionStatus.REJECTED, notes)
    db.session.commit()
    return submission.to_dict()


def delete_submission(submission_id):
    submission = get_or_raise(PlasticSubmission, submission_id, 'Plastic submission')
    db.session.delete(submission)
    db.session.commit()
