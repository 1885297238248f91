from datetime import datetime
import logging

from bargen.errors import AuthorizationDenied, NotFound, ValidationError
from bargen.extensions import db
from bargen.models import (
    AGE_KINDS_WITH_AMOUNT,
    AgeKind,
    Blob,
    Condition,
    Product,
    ShopProfile,
    UserRole,
    VerificationLabel,
)
from bargen.services.audit_service import log_audit
from bargen.utils import (
    optional_int,
    require_int,
    require_number,
    require_text,
)

logger = logging.getLogger(__name__)


def live_product(product_id):
    """The product, or None when it never existed or was deleted."""
    if product_id is None:
        return None
    return Product.query.filter_by(id=product_id, is_deleted=False).first()


def require_product(product_id):
    product = live_product(product_id)
    if product is None:
        raise NotFound(f'Product {product_id} not found')
    return product


def require_shop(shop_id):
    shop = db.session.get(ShopProfile, shop_id)
    if shop is None:
        raise NotFound(f'Shop {shop_id} not found')
    return shop


def require_shop_owner(shop, user, allow_admin=False):
    if shop.owner_id == user.id:
        return
    if allow_admin and user.role == UserRole.ADMIN:
        return
    logger.warning(
        "User %s attempted to manage shop %s", user.principal, shop.id)
    raise AuthorizationDenied(
        'You do not have permission: only the shop owner can do this')


def create_shop(owner, data):
    shop = ShopProfile(
        owner_id=owner.id,
        name=require_text(data, 'name', max_length=120),
        rating=require_int(data, 'rating', minimum=1, maximum=5),
        address=require_text(data, 'address', allow_empty=True),
        distance_km=require_number(data, 'distance_km', minimum=0),
        price_info=require_text(data, 'price_info', allow_empty=True),
        phone=require_text(data, 'phone', allow_empty=True),
        location_url=require_text(data, 'location_url', allow_empty=True),
    )
    db.session.add(shop)
    db.session.flush()
    log_audit(
        actor=owner,
        action='SHOP_CREATE',
        target_type='SHOP',
        target_id=shop.id,
        payload={'name': shop.name})
    db.session.commit()
    return shop


def parse_condition(data):
    raw = data.get('condition')
    try:
        return Condition(raw)
    except ValueError:
        raise ValidationError('condition must be one of: new, used')


def parse_age(raw):
    """Decode the tagged product age; None when absent."""
    if raw is None:
        return None, None, None
    if not isinstance(raw, dict) or not isinstance(raw.get('time'), dict):
        raise ValidationError(
            'age must be an object with condition_description and time')
    time = raw['time']
    try:
        kind = AgeKind(time.get('kind'))
    except ValueError:
        raise ValidationError(
            'age.time.kind must be one of: days, months, years, '
            'brandNew, unknown')
    amount = None
    if kind in AGE_KINDS_WITH_AMOUNT:
        amount = require_int(time, 'amount', minimum=0)
    description = raw.get('condition_description') or ''
    if not isinstance(description, str):
        raise ValidationError('age.condition_description must be a string')
    return kind, amount, description.strip()


def parse_labels(raw):
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationError('verification_labels must be a list')
    labels = []
    for position, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValidationError('verification_labels entries must be objects')
        labels.append(VerificationLabel(
            position=position,
            label_text=require_text(item, 'label_text', max_length=100),
            description=require_text(item, 'description', allow_empty=True),
        ))
    return labels


def parse_photos(raw):
    """Validate an ordered list of blob references, None when absent."""
    if raw is None:
        return None
    if not isinstance(raw, list) or not all(isinstance(r, str) for r in raw):
        raise ValidationError('photos must be a list of blob references')
    missing = [r for r in raw if db.session.get(Blob, r) is None]
    if missing:
        raise ValidationError(f'Unknown photo reference: {missing[0]}')
    return raw


def _apply_product_fields(product, data, with_score):
    product.name = require_text(data, 'name', max_length=200)
    product.description = require_text(data, 'description', allow_empty=True)
    product.price = require_int(data, 'price', minimum=0)
    product.condition = parse_condition(data)
    product.return_policy = require_text(
        data, 'return_policy', allow_empty=True)
    kind, amount, description = parse_age(data.get('age'))
    product.age_kind = kind
    product.age_amount = amount
    product.age_description = description
    product.set_photos(parse_photos(data.get('photos')))
    product.labels = parse_labels(data.get('verification_labels'))
    if with_score:
        product.listing_quality_score = optional_int(
            data, 'listing_quality_score', minimum=0)


def create_product(user, shop_id, data):
    shop = require_shop(shop_id)
    require_shop_owner(shop, user, allow_admin=True)
    product = Product(shop_id=shop.id)
    _apply_product_fields(product, data, with_score=False)
    db.session.add(product)
    db.session.flush()
    log_audit(
        actor=user,
        action='PRODUCT_CREATE',
        target_type='PRODUCT',
        target_id=product.id,
        payload={'shop_id': shop.id, 'price': product.price})
    db.session.commit()
    return product


def update_product(user, product_id, data, as_admin=False):
    product = require_product(product_id)
    if not as_admin:
        require_shop_owner(product.shop, user)
    _apply_product_fields(product, data, with_score=True)
    log_audit(
        actor=user,
        action='PRODUCT_UPDATE_ADMIN' if as_admin else 'PRODUCT_UPDATE',
        target_type='PRODUCT',
        target_id=product.id,
        payload={'price': product.price})
    db.session.commit()
    return product


def delete_product(user, product_id, as_admin=False):
    """Soft delete. Cart lines, likes and bargains keep the dangling id."""
    product = require_product(product_id)
    if not as_admin:
        require_shop_owner(product.shop, user)
    product.is_deleted = True
    product.deleted_at = datetime.utcnow()
    product.deleted_by = user.id
    log_audit(
        actor=user,
        action='PRODUCT_DELETE',
        target_type='PRODUCT',
        target_id=product.id,
        payload={'admin': as_admin})
    db.session.commit()


def browse_products():
    return (
        Product.query.filter_by(is_deleted=False)
        .order_by(Product.id.asc())
        .all()
    )


def products_for_shop(shop_id):
    require_shop(shop_id)
    return (
        Product.query.filter_by(shop_id=shop_id, is_deleted=False)
        .order_by(Product.id.asc())
        .all()
    )
