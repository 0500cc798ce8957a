# errors.py


class EcoTradeError(Exception):
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'success': False, 'error': self.message}


class NotFound(EcoTradeError):
    status_code = 404


class InvalidStateTransition(EcoTradeError):
    status_code = 409


class InsufficientStock(EcoTradeError):
    status_code = 409


class InsufficientPoints(EcoTradeError):
    status_code = 400


class DuplicateIdentity(EcoTradeError):
    status_code = 409


class InvalidOperation(EcoTradeError):
    status_code = 400


class ValidationError(EcoTradeError):
    status_code = 400


class AuthenticationFailed(EcoTradeError):
    status_code = 401


def require(data, *fields):
    """Return the values of the required request fields, in order."""
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    missing = [f for f in fields if data.get(f) in (None, '')]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")
    return [data[f] for f in fields]


def as_number(value, field, cast=float):
    if cast is int and isinstance(value, float) and not value.is_integer():
        raise ValidationError(f'Field {field} must be a whole number')
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Field {field} must be a number')
