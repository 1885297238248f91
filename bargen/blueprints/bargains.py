from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from bargen.services import bargain_service
from bargen.utils import json_body
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('bargains', __name__)


@bp.route('/api/products/<int:product_id>/bargains', methods=['POST'])
@login_required
def send_bargain(product_id):
    bargain = bargain_service.submit_bargain(
        current_user, product_id, json_body())
    logger.info(
        "Bargain %s on product %s from %s at %s",
        bargain.id, product_id, current_user.principal, bargain.desired_price)
    return jsonify({'id': bargain.id, 'bargain': bargain.to_dict()}), 201


@bp.route('/api/products/<int:product_id>/bargains', methods=['GET'])
@login_required
def list_bargains(product_id):
    bargains = bargain_service.bargains_for_product(current_user, product_id)
    return jsonify([b.to_dict() for b in bargains])


@bp.route('/api/bargains/<int:bargain_id>/accept', methods=['POST'])
@login_required
def accept_bargain(bargain_id):
    bargain = bargain_service.accept_bargain(current_user, bargain_id)
    return jsonify(bargain.to_dict())
