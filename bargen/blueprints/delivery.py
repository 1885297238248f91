from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from bargen.services import delivery_service
from bargen.utils import json_body
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('delivery', __name__)


def _partner_dict(partner):
    return {
        'id': partner.id,
        'principal': partner.user.principal,
        'name': partner.name,
        'vehicle_type': partner.vehicle_type,
        'location': partner.location,
        'is_available': partner.is_available,
    }


@bp.route('/api/delivery/partners', methods=['POST'])
@login_required
def register_partner():
    partner = delivery_service.register_partner(current_user, json_body())
    return jsonify({'id': partner.id, 'partner': _partner_dict(partner)}), 201


@bp.route('/api/delivery/partners/<int:partner_id>/availability',
          methods=['PUT'])
@login_required
def set_availability(partner_id):
    partner = delivery_service.set_partner_availability(
        current_user, partner_id, json_body())
    return jsonify(_partner_dict(partner))


@bp.route('/api/delivery/rate', methods=['GET'])
def delivery_rate():
    return jsonify({'rate_per_km': delivery_service.rate_per_km()})


@bp.route('/api/delivery/orders', methods=['GET'])
@login_required
def own_orders():
    orders = delivery_service.orders_for_user(current_user)
    return jsonify([
        delivery_service.order_view(o, current_user) for o in orders])


@bp.route('/api/delivery/orders', methods=['POST'])
@login_required
def create_order():
    order = delivery_service.create_order(current_user, json_body())
    return jsonify({
        'id': order.id,
        'order': delivery_service.order_view(order, current_user),
    }), 201


@bp.route('/api/delivery/orders/<int:order_id>/assign', methods=['POST'])
@login_required
def assign_order(order_id):
    order = delivery_service.assign_order(current_user, order_id)
    return jsonify(delivery_service.order_view(order, current_user))


@bp.route('/api/delivery/orders/<int:order_id>/status', methods=['POST'])
@login_required
def advance_order(order_id):
    order = delivery_service.advance_order(
        current_user, order_id, json_body())
    return jsonify(delivery_service.order_view(order, current_user))


@bp.route('/api/delivery/orders/<int:order_id>/complete', methods=['POST'])
@login_required
def complete_order(order_id):
    order = delivery_service.complete_order(
        current_user, order_id, json_body())
    return jsonify(delivery_service.order_view(order, current_user))
