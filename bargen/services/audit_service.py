from bargen.extensions import db
from bargen.models import AuditLog
from flask import has_request_context, request
import logging
import json

logger = logging.getLogger(__name__)
major_logger = logging.getLogger('major_events')
if not major_logger.handlers:
    handler = logging.FileHandler('major_events.log')
    formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s')
    handler.setFormatter(formatter)
    major_logger.addHandler(handler)
    major_logger.setLevel(logging.INFO)
    major_logger.propagate = False

MAJOR_ACTION_PREFIXES = (
    'BARGAIN_',
    'DELIVERY_',
    'ROLE_',
    'PRODUCT_DELETE',
)


def _should_log_major(action: str) -> bool:
    if not action:
        return False
    return action.startswith(MAJOR_ACTION_PREFIXES)


def _brief(payload):
    if payload is None:
        return None
    try:
        brief = json.dumps(payload, ensure_ascii=False, separators=(',', ':'))
    except (TypeError, ValueError):
        return None
    if len(brief) > 600:
        brief = brief[:600] + '...'
    return brief


def log_audit(
        actor=None,
        action='',
        target_type=None,
        target_id=None,
        payload=None):
    """Record a state change in audit_logs and the application log.

    Runs inside the caller's transaction; the caller commits. Failures
    are logged and never break the request.
    """
    path = method = ip = user_agent = None
    if has_request_context():
        path = request.path
        method = request.method
        ip = request.remote_addr
        user_agent = request.headers.get('User-Agent')

    actor_id = actor.id if actor is not None else None
    actor_role = actor.role.value if actor is not None else 'SYSTEM'

    try:
        audit = AuditLog(
            actor_id=actor_id,
            actor_role=actor_role,
            action=action,
            target_type=target_type,
            target_id=target_id,
            ip=ip,
            user_agent=user_agent
        )
        if payload:
            audit.set_payload(payload)
        db.session.add(audit)
    except Exception as e:
        logger.error(f"Failed to log audit: {e}", exc_info=True)
        return

    payload_brief = _brief(payload)
    logger.info(
        "AUDIT action=%s actor_role=%s actor=%s target_type=%s "
        "target_id=%s method=%s path=%s payload=%s",
        action,
        actor_role,
        actor.principal if actor is not None else None,
        target_type,
        target_id,
        method,
        path,
        payload_brief,
    )

    if _should_log_major(action):
        major_logger.info(
            "action=%s actor_role=%s actor_id=%s target_type=%s "
            "target_id=%s payload=%s",
            action,
            actor_role,
            actor_id,
            target_type,
            target_id,
            payload_brief,
        )
