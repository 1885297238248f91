"""Error taxonomy shared by the store service and the client layer.

The store raises these from services; the app-level handler renders them
as ``{"error": ..., "kind": ...}`` with the matching status code. The
client raises the same classes back out of HTTP responses.
"""


class BargenError(Exception):
    kind = 'error'
    status_code = 500

    def __init__(self, message=''):
        super().__init__(message)
        self.message = message or self.__class__.__name__

    def to_dict(self):
        return {'error': self.message, 'kind': self.kind}


class AuthenticationRequired(BargenError):
    kind = 'authentication_required'
    status_code = 401

    def __init__(self, message='Unauthorized: please login to continue'):
        super().__init__(message)


class AuthorizationDenied(BargenError):
    kind = 'authorization_denied'
    status_code = 403

    def __init__(self, message='You do not have permission for this action'):
        super().__init__(message)


class NotFound(BargenError):
    kind = 'not_found'
    status_code = 404


class ValidationError(BargenError):
    kind = 'validation'
    status_code = 400


class ServiceUnavailable(BargenError):
    kind = 'unavailable'
    status_code = 503

    def __init__(self, message='Service not available'):
        super().__init__(message)


ERRORS_BY_KIND = {
    cls.kind: cls
    for cls in (
        AuthenticationRequired,
        AuthorizationDenied,
        NotFound,
        ValidationError,
        ServiceUnavailable,
    )
}

ERRORS_BY_STATUS = {cls.status_code: cls for cls in ERRORS_BY_KIND.values()}

_AUTH_MARKERS = (
    'unauthorized', 'unauthenticated', 'only users', 'only authenticated',
    'sign in', 'login',
)
_PERMISSION_MARKERS = ('permission', 'access denied', 'forbidden')
_NOT_FOUND_MARKERS = ('not found', 'does not exist', 'not available')
_VALIDATION_MARKERS = ('invalid', 'must be', 'required', 'cannot be')
_TRANSPORT_MARKERS = (
    'service not available', 'connection', 'network', 'timed out',
)


def classify_error(error):
    """Map an exception or raw message to an error class.

    Typed errors classify as themselves. Anything else is matched against
    the message heuristics, transport markers first so that "Service not
    available" is not mistaken for a missing entity.
    """
    if isinstance(error, BargenError):
        return type(error)
    message = str(error or '').lower()
    if any(m in message for m in _AUTH_MARKERS):
        return AuthenticationRequired
    if any(m in message for m in _PERMISSION_MARKERS):
        return AuthorizationDenied
    if any(m in message for m in _TRANSPORT_MARKERS):
        return ServiceUnavailable
    if any(m in message for m in _NOT_FOUND_MARKERS):
        return NotFound
    if any(m in message for m in _VALIDATION_MARKERS):
        return ValidationError
    return BargenError


def is_authentication_error(error):
    return classify_error(error) is AuthenticationRequired


def is_retryable(error):
    return classify_error(error) is ServiceUnavailable


def normalize_error_message(error):
    """User-facing text for an error.

    Validation messages are actionable and pass through verbatim.
    """
    if not error:
        return 'An unexpected error occurred'
    message = error.message if isinstance(error, BargenError) else str(error)
    cls = classify_error(error)
    if cls is AuthenticationRequired:
        return 'Please log in to perform this action'
    if cls is AuthorizationDenied:
        return 'You do not have permission to perform this action'
    if cls is NotFound:
        return 'The requested item could not be found'
    if cls is ValidationError:
        return message
    if cls is ServiceUnavailable:
        return 'Unable to connect to the service. Please try again'
    if len(message) < 100 and 'Error:' not in message:
        return message
    return 'An error occurred. Please try again'
