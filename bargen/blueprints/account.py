from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from bargen.errors import NotFound, ValidationError
from bargen.extensions import db
from bargen.middleware import role_required
from bargen.models import User, UserRole
from bargen.services.audit_service import log_audit
from bargen.utils import json_body, optional_text, require_text
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('account', __name__)


@bp.route('/api/me/profile', methods=['GET'])
@login_required
def get_profile():
    return jsonify(current_user.profile_dict())


@bp.route('/api/me/profile', methods=['PUT'])
@login_required
def save_profile():
    data = json_body()
    current_user.name = require_text(data, 'name', max_length=100)
    current_user.email = optional_text(data, 'email')
    current_user.phone = optional_text(data, 'phone')
    log_audit(
        actor=current_user,
        action='PROFILE_UPDATE',
        target_type='USER',
        target_id=current_user.id)
    db.session.commit()
    return jsonify(current_user.profile_dict())


@bp.route('/api/users/<principal>/profile', methods=['GET'])
@login_required
def get_user_profile(principal):
    user = User.query.filter_by(principal=principal).first()
    if user is None:
        return jsonify(None)
    return jsonify(user.profile_dict())


@bp.route('/api/me/role', methods=['GET'])
@login_required
def get_role():
    return jsonify({'role': current_user.role.value})


@bp.route('/api/me/is-admin', methods=['GET'])
def is_admin():
    admin = (
        current_user.is_authenticated
        and current_user.role == UserRole.ADMIN
    )
    return jsonify({'is_admin': admin})


@bp.route('/api/users/<principal>/role', methods=['PUT'])
@login_required
@role_required('admin')
def assign_role(principal):
    data = json_body()
    try:
        role = UserRole(data.get('role'))
    except ValueError:
        raise ValidationError('role must be one of: admin, user, guest')

    user = User.query.filter_by(principal=principal).first()
    if user is None:
        raise NotFound(f'User {principal} not found')

    previous = user.role
    user.role = role
    log_audit(
        actor=current_user,
        action='ROLE_ASSIGN',
        target_type='USER',
        target_id=user.id,
        payload={'principal': principal, 'from': previous.value,
                 'to': role.value})
    db.session.commit()
    logger.info(
        "Role of %s changed from %s to %s by %s",
        principal, previous.value, role.value, current_user.principal)
    return jsonify({'principal': user.principal, 'role': user.role.value})
