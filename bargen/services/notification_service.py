from bargen.extensions import db
from bargen.models import ShopkeeperNotification
from bargen.services.catalog_service import require_shop, require_shop_owner
import logging

logger = logging.getLogger(__name__)


def notify_shopkeeper(product, user, action):
    """Queue a notification in the caller's transaction."""
    notification = ShopkeeperNotification(
        shop_id=product.shop_id,
        product_id=product.id,
        user_id=user.id,
        action=action,
    )
    db.session.add(notification)
    logger.info(
        "Notify shop %s: %s %s product %s",
        product.shop_id, user.principal, action.value, product.id)
    return notification


def notifications_for_shop(user, shop_id):
    shop = require_shop(shop_id)
    require_shop_owner(shop, user)
    return (
        ShopkeeperNotification.query.filter_by(shop_id=shop.id)
        .order_by(
            ShopkeeperNotification.created_at.desc(),
            ShopkeeperNotification.id.desc())
        .all()
    )
