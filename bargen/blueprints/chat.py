from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from sqlalchemy import or_

from bargen.errors import NotFound, ValidationError
from bargen.extensions import db
from bargen.models import ChatMessage, User
from bargen.services.catalog_service import require_product
from bargen.utils import json_body, require_int, require_text
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('chat', __name__)

MAX_MESSAGE_LENGTH = 2000


@bp.route('/api/messages', methods=['POST'])
@login_required
def send_message():
    data = json_body()
    to_principal = require_text(data, 'to', max_length=200)
    content = require_text(data, 'content', max_length=MAX_MESSAGE_LENGTH)
    product = require_product(require_int(data, 'product_id'))

    if to_principal == current_user.principal:
        raise ValidationError('Cannot send a message to yourself')
    recipient = User.query.filter_by(principal=to_principal).first()
    if recipient is None:
        raise NotFound(f'User {to_principal} not found')

    message = ChatMessage(
        sender_id=current_user.id,
        recipient_id=recipient.id,
        product_id=product.id,
        content=content,
    )
    db.session.add(message)
    db.session.commit()
    logger.info(
        "Message %s on product %s from %s to %s",
        message.id, product.id, current_user.principal, to_principal)
    return jsonify({'id': message.id, 'message': message.to_dict()}), 201


@bp.route('/api/products/<int:product_id>/messages', methods=['GET'])
@login_required
def get_messages(product_id):
    """Every message on the product the caller sent or received."""
    messages = (
        ChatMessage.query.filter(
            ChatMessage.product_id == product_id,
            or_(
                ChatMessage.sender_id == current_user.id,
                ChatMessage.recipient_id == current_user.id,
            ),
        )
        .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
        .all()
    )
    return jsonify([m.to_dict() for m in messages])
