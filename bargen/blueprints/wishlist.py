from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from bargen.extensions import db
from bargen.models import ShopkeeperAction, WishlistItem
from bargen.services.catalog_service import live_product, require_product
from bargen.services.notification_service import notify_shopkeeper
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('wishlist', __name__)


@bp.route('/api/products/<int:product_id>/like', methods=['PUT'])
@login_required
def like_product(product_id):
    product = require_product(product_id)
    item = db.session.get(WishlistItem, (current_user.id, product.id))
    if item is None:
        db.session.add(WishlistItem(
            user_id=current_user.id, product_id=product.id))
        if product.shop.owner_id != current_user.id:
            notify_shopkeeper(product, current_user, ShopkeeperAction.LIKED)
        db.session.commit()
    return jsonify({'product_id': product.id, 'liked': True})


@bp.route('/api/products/<int:product_id>/like', methods=['DELETE'])
@login_required
def remove_like(product_id):
    # Works on deleted products too, so stale likes can be cleared.
    item = db.session.get(WishlistItem, (current_user.id, product_id))
    if item is not None:
        db.session.delete(item)
        db.session.commit()
    return jsonify({'product_id': product_id, 'liked': False})


@bp.route('/api/products/<int:product_id>/like', methods=['GET'])
@login_required
def has_liked(product_id):
    item = db.session.get(WishlistItem, (current_user.id, product_id))
    return jsonify({'product_id': product_id, 'liked': item is not None})


@bp.route('/api/wishlist', methods=['GET'])
@login_required
def get_wishlist():
    """Liked products that still exist, most recent first."""
    items = (
        WishlistItem.query.filter_by(user_id=current_user.id)
        .order_by(WishlistItem.created_at.desc())
        .all()
    )
    products = []
    for item in items:
        product = live_product(item.product_id)
        if product is None:
            continue
        products.append(product.to_dict())
    return jsonify(products)
