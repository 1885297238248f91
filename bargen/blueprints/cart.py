from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from bargen.errors import ValidationError
from bargen.services import cart_service
from bargen.utils import json_body, query_number
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('cart', __name__)


@bp.route('/api/cart/items', methods=['POST'])
@login_required
def add_cart_item():
    item = cart_service.add_to_cart(current_user, json_body())
    return jsonify(item.to_dict()), 201


@bp.route('/api/cart/items', methods=['GET'])
@login_required
def get_cart_items():
    items = cart_service.cart_items(current_user)
    return jsonify([item.to_dict() for item in items])


@bp.route('/api/cart/total', methods=['GET'])
@login_required
def get_cart_total():
    return jsonify(cart_service.cart_total(current_user))


@bp.route('/api/insurance/options', methods=['GET'])
def insurance_options():
    return jsonify(cart_service.insurance_options())


@bp.route('/api/insurance/selected', methods=['GET'])
@login_required
def get_selected_insurance():
    return jsonify(cart_service.selected_insurance(current_user))


@bp.route('/api/insurance/selected', methods=['PUT'])
@login_required
def select_insurance():
    # The body is the plan object, or JSON null to clear the selection.
    raw = request.get_data(as_text=True).strip()
    if not raw or raw == 'null':
        insurance = None
    else:
        insurance = request.get_json(silent=True)
        if not isinstance(insurance, dict):
            raise ValidationError('insurance must be an object or null')
    return jsonify(cart_service.select_insurance(current_user, insurance))


@bp.route('/api/insurance/recommend', methods=['GET'])
def recommend_insurance():
    total = query_number('cart_total')
    return jsonify(cart_service.recommend_insurance(total))
