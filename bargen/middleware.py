from flask import current_app, jsonify, request
from flask_login import current_user
from functools import wraps
from datetime import datetime, timedelta
import logging

from bargen.errors import AuthenticationRequired, AuthorizationDenied

logger = logging.getLogger(__name__)

AUTH_SCHEME = 'Principal'

MUTATING_METHODS = ('POST', 'PUT', 'PATCH', 'DELETE')


def principal_from_header(header_value):
    if not header_value:
        return None
    parts = header_value.split(None, 1)
    if len(parts) != 2 or parts[0] != AUTH_SCHEME:
        return None
    principal = parts[1].strip()
    return principal or None


def load_principal(req):
    """Flask-Login request loader: resolve the caller's principal.

    Unknown principals get a user row on first sight. Principals listed in
    ADMIN_PRINCIPALS start out as admins.
    """
    from bargen.extensions import db
    from bargen.models import User, UserRole

    principal = principal_from_header(req.headers.get('Authorization'))
    if principal is None:
        return None

    user = User.query.filter_by(principal=principal).first()
    if user is None:
        role = UserRole.USER
        if principal in current_app.config.get('ADMIN_PRINCIPALS', []):
            role = UserRole.ADMIN
        user = User(principal=principal, role=role)
        db.session.add(user)
        logger.info("Registered principal %s as %s", principal, role.value)

    now = datetime.utcnow()
    interval = timedelta(
        seconds=current_app.config.get('LAST_SEEN_INTERVAL_SECONDS', 300))
    if user.last_seen_at is None or now - user.last_seen_at >= interval:
        user.last_seen_at = now
        db.session.commit()
    return user


def setup_auth_middleware(app):

    @app.before_request
    def reject_anonymous_mutations():
        if not request.path.startswith('/api/'):
            return None
        if request.method.upper() not in MUTATING_METHODS:
            return None
        if current_user.is_authenticated:
            return None
        err = AuthenticationRequired()
        return jsonify(err.to_dict()), err.status_code


def role_required(*allowed_roles):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                raise AuthenticationRequired()

            # allowed_roles is a list of role values.
            if current_user.role.value not in allowed_roles:
                logger.warning(
                    "User %s attempted to access roles %s, current role: %s",
                    current_user.principal,
                    allowed_roles,
                    current_user.role.value,
                )
                raise AuthorizationDenied(
                    'You do not have permission: admin access required')

            return f(*args, **kwargs)
        return decorated_function
    return decorator
