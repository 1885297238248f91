from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from bargen.middleware import role_required
from bargen.models import Product
from bargen.services import catalog_service
from bargen.utils import json_body
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('products', __name__)


@bp.route('/api/products', methods=['GET'])
def browse_products():
    """Full catalog joined with each product's shop."""
    products = catalog_service.browse_products()
    return jsonify([p.to_dict() for p in products])


@bp.route('/api/products/<int:product_id>', methods=['GET'])
def get_product(product_id):
    product = catalog_service.live_product(product_id)
    if product is None:
        return jsonify(None)
    return jsonify(product.to_dict())


@bp.route('/api/products/<int:product_id>', methods=['PUT'])
@login_required
def update_product(product_id):
    product = catalog_service.update_product(
        current_user, product_id, json_body())
    return jsonify(product.to_dict())


@bp.route('/api/products/<int:product_id>', methods=['DELETE'])
@login_required
def delete_product(product_id):
    catalog_service.delete_product(current_user, product_id)
    return jsonify({'message': 'Product deleted'})


# Admin variants: same operations without the ownership check.

@bp.route('/api/admin/products', methods=['GET'])
@login_required
@role_required('admin')
def admin_browse_products():
    products = Product.query.order_by(Product.id.asc()).all()
    items = []
    for product in products:
        data = product.to_dict()
        data['is_deleted'] = product.is_deleted
        items.append(data)
    return jsonify(items)


@bp.route('/api/admin/products/<int:product_id>', methods=['PUT'])
@login_required
@role_required('admin')
def admin_update_product(product_id):
    product = catalog_service.update_product(
        current_user, product_id, json_body(), as_admin=True)
    return jsonify(product.to_dict())


@bp.route('/api/admin/products/<int:product_id>', methods=['DELETE'])
@login_required
@role_required('admin')
def admin_delete_product(product_id):
    catalog_service.delete_product(current_user, product_id, as_admin=True)
    logger.info(
        "Admin %s deleted product %s", current_user.principal, product_id)
    return jsonify({'message': 'Product deleted'})
