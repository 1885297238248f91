from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from bargen.models import ShopProfile
from bargen.services import catalog_service, delivery_service
from bargen.services.notification_service import notifications_for_shop
from bargen.utils import json_body, query_number
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('shops', __name__)


@bp.route('/api/shops', methods=['POST'])
@login_required
def create_shop():
    shop = catalog_service.create_shop(current_user, json_body())
    logger.info("Shop %s created by %s", shop.id, current_user.principal)
    return jsonify({'id': shop.id, 'shop': shop.to_dict()}), 201


@bp.route('/api/shops/mine', methods=['GET'])
@login_required
def own_shops():
    shops = (
        ShopProfile.query.filter_by(owner_id=current_user.id)
        .order_by(ShopProfile.id.asc())
        .all()
    )
    return jsonify([s.to_dict() for s in shops])


@bp.route('/api/shops', methods=['GET'])
def all_shops():
    shops = ShopProfile.query.order_by(ShopProfile.id.asc()).all()
    return jsonify([s.to_dict() for s in shops])


@bp.route('/api/shops/<int:shop_id>/products', methods=['POST'])
@login_required
def create_product(shop_id):
    product = catalog_service.create_product(current_user, shop_id, json_body())
    return jsonify({'id': product.id, 'product': product.to_dict()}), 201


@bp.route('/api/shops/<int:shop_id>/products', methods=['GET'])
def shop_products(shop_id):
    products = catalog_service.products_for_shop(shop_id)
    return jsonify([p.to_dict(with_shop=False) for p in products])


@bp.route('/api/shops/<int:shop_id>/delivery-fee', methods=['GET'])
def delivery_fee(shop_id):
    distance_km = query_number('distance_km', minimum=0)
    fee = delivery_service.calculate_fee(shop_id, distance_km)
    return jsonify({
        'shop_id': shop_id,
        'distance_km': distance_km,
        'delivery_fee': fee,
    })


@bp.route('/api/shops/<int:shop_id>/notifications', methods=['GET'])
@login_required
def shop_notifications(shop_id):
    notifications = notifications_for_shop(current_user, shop_id)
    return jsonify([n.to_dict() for n in notifications])
