from flask import request
from bargen.errors import ValidationError
import logging
import math

logger = logging.getLogger(__name__)


def json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def require_text(data, field, allow_empty=False, max_length=None):
    value = data.get(field)
    if value is None and allow_empty:
        return ''
    if not isinstance(value, str):
        raise ValidationError(f'{field} is required')
    value = value.strip()
    if not value and not allow_empty:
        raise ValidationError(f'{field} cannot be empty')
    if max_length is not None and len(value) > max_length:
        raise ValidationError(
            f'{field} must be at most {max_length} characters')
    return value


def optional_text(data, field):
    value = data.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f'{field} must be a string')
    value = value.strip()
    return value or None


def require_int(data, field, minimum=None, maximum=None):
    value = data.get(field)
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f'{field} must be an integer')
    if minimum is not None and value < minimum:
        raise ValidationError(f'{field} must be at least {minimum}')
    if maximum is not None and value > maximum:
        raise ValidationError(f'{field} must be at most {maximum}')
    return value


def optional_int(data, field, minimum=None):
    if data.get(field) is None:
        return None
    return require_int(data, field, minimum=minimum)


def require_number(data, field, minimum=None):
    value = data.get(field)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f'{field} must be a number')
    if not math.isfinite(value):
        raise ValidationError(f'{field} must be a finite number')
    if minimum is not None and value < minimum:
        raise ValidationError(f'{field} must be at least {minimum}')
    return float(value)


def require_bool(data, field):
    value = data.get(field)
    if not isinstance(value, bool):
        raise ValidationError(f'{field} must be true or false')
    return value


def query_number(name, minimum=None):
    raw = request.args.get(name)
    if raw is None or raw == '':
        raise ValidationError(f'{name} is required')
    try:
        value = float(raw)
    except ValueError:
        raise ValidationError(f'{name} must be a number')
    if not math.isfinite(value):
        raise ValidationError(f'{name} must be a finite number')
    if minimum is not None and value < minimum:
        raise ValidationError(f'{name} must be at least {minimum}')
    return value
