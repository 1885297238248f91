from bargen.extensions import db
from flask_login import UserMixin
from datetime import datetime
from sqlalchemy import CheckConstraint
import enum
import json


class UserRole(enum.Enum):
    ADMIN = 'admin'
    USER = 'user'
    GUEST = 'guest'


class Condition(enum.Enum):
    NEW = 'new'
    USED = 'used'


class AgeKind(enum.Enum):
    DAYS = 'days'
    MONTHS = 'months'
    YEARS = 'years'
    BRAND_NEW = 'brandNew'
    UNKNOWN = 'unknown'


# Kinds that carry a numeric amount.
AGE_KINDS_WITH_AMOUNT = (AgeKind.DAYS, AgeKind.MONTHS, AgeKind.YEARS)


class BargainStatus(enum.Enum):
    PENDING = 'pending'
    ACCEPTED = 'accepted'


class DeliveryOption(enum.Enum):
    PICKUP = 'pickup'
    DELIVERY = 'delivery'


class DeliveryStatus(enum.Enum):
    DRIVER_PENDING_ASSIGNMENT = 'driver_pending_assignment'
    PENDING = 'pending'
    DRIVER_ASSIGNED = 'driver_assigned'
    PICKING_UP = 'picking_up'
    IN_TRANSIT = 'in_transit'
    DELIVERED = 'delivered'
    COMPLETED = 'completed'
    FAILED = 'failed'


class ShopkeeperAction(enum.Enum):
    LIKED = 'liked'
    IN_CART = 'in_cart'


def _iso(ts):
    return ts.isoformat() if ts else None


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    # Opaque identity token; equality-comparable only.
    principal = db.Column(
        db.String(200),
        unique=True,
        nullable=False,
        index=True)
    role = db.Column(
        db.Enum(UserRole),
        nullable=False,
        default=UserRole.USER)
    name = db.Column(db.String(100), nullable=True)
    email = db.Column(db.String(120), nullable=True)
    phone = db.Column(db.String(30), nullable=True)
    created_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        nullable=False)
    last_seen_at = db.Column(db.DateTime, nullable=True)

    shops = db.relationship('ShopProfile', backref='owner', lazy='dynamic')
    cart = db.relationship(
        'Cart',
        backref='user',
        uselist=False,
        cascade='all, delete-orphan')

    def get_id(self):
        return self.principal

    def profile_dict(self):
        if not self.name:
            return None
        return {
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
        }

    def __repr__(self):
        return f'<User {self.principal}>'


class ShopProfile(db.Model):
    __tablename__ = 'shop_profiles'

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(
        db.Integer,
        db.ForeignKey(
            'users.id',
            ondelete='CASCADE'),
        nullable=False,
        index=True)
    name = db.Column(db.String(120), nullable=False)
    address = db.Column(db.String(255), nullable=False, default='')
    distance_km = db.Column(db.Float, nullable=False, default=0.0)
    rating = db.Column(db.Integer, nullable=False)
    price_info = db.Column(db.Text, nullable=False, default='')
    phone = db.Column(db.String(30), nullable=False, default='')
    location_url = db.Column(db.String(500), nullable=False, default='')
    created_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        nullable=False)

    products = db.relationship('Product', backref='shop', lazy='dynamic')

    __table_args__ = (
        CheckConstraint(
            'rating >= 1 AND rating <= 5',
            name='check_shop_rating_range'),
        CheckConstraint('distance_km >= 0', name='check_distance_positive'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'owner': self.owner.principal,
            'name': self.name,
            'address': self.address,
            'distance_km': self.distance_km,
            'rating': self.rating,
            'price_info': self.price_info,
            'phone': self.phone,
            'location_url': self.location_url,
        }

    def __repr__(self):
        return f'<ShopProfile {self.name}>'


class Product(db.Model):
    __tablename__ = 'products'

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(
        db.Integer,
        db.ForeignKey('shop_profiles.id'),
        nullable=False,
        index=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False, default='')
    # Minor currency units.
    price = db.Column(db.Integer, nullable=False)
    condition = db.Column(
        db.Enum(Condition),
        nullable=False,
        default=Condition.NEW)
    return_policy = db.Column(db.Text, nullable=False, default='')
    age_kind = db.Column(db.Enum(AgeKind), nullable=True)
    age_amount = db.Column(db.Integer, nullable=True)
    age_description = db.Column(db.Text, nullable=True)
    # Ordered list of blob references, JSON encoded.
    photos_json = db.Column(db.Text, nullable=True)
    listing_quality_score = db.Column(db.Integer, nullable=True)
    created_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        nullable=False)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False)

    # Soft delete
    is_deleted = db.Column(db.Boolean, default=False, nullable=False)
    deleted_at = db.Column(db.DateTime, nullable=True)
    deleted_by = db.Column(
        db.Integer,
        db.ForeignKey('users.id'),
        nullable=True)

    labels = db.relationship(
        'VerificationLabel',
        backref='product',
        order_by='VerificationLabel.position',
        cascade='all, delete-orphan')

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_price_non_negative'),
    )

    def get_photos(self):
        if self.photos_json is None:
            return None
        return json.loads(self.photos_json)

    def set_photos(self, refs):
        self.photos_json = None if refs is None else json.dumps(list(refs))

    def age_dict(self):
        if self.age_kind is None:
            return None
        time = {'kind': self.age_kind.value}
        if self.age_kind in AGE_KINDS_WITH_AMOUNT:
            time['amount'] = self.age_amount
        return {
            'condition_description': self.age_description or '',
            'time': time,
        }

    def to_dict(self, with_shop=True):
        data = {
            'id': self.id,
            'shop_id': self.shop_id,
            'name': self.name,
            'description': self.description,
            'price': self.price,
            'condition': self.condition.value,
            'return_policy': self.return_policy,
            'age': self.age_dict(),
            'verification_labels': [
                {'label_text': lb.label_text, 'description': lb.description}
                for lb in self.labels
            ],
            'photos': self.get_photos(),
            'listing_quality_score': self.listing_quality_score,
        }
        if with_shop:
            data['shop'] = self.shop.to_dict()
        return data

    def __repr__(self):
        return f'<Product {self.name}>'


class VerificationLabel(db.Model):
    __tablename__ = 'verification_labels'

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey(
            'products.id',
            ondelete='CASCADE'),
        nullable=False,
        index=True)
    position = db.Column(db.Integer, nullable=False, default=0)
    label_text = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')

    def __repr__(self):
        return f'<VerificationLabel {self.label_text}>'


class BargainRequest(db.Model):
    __tablename__ = 'bargain_requests'

    id = db.Column(db.Integer, primary_key=True)
    # No foreign key: the product may be deleted under a live bargain.
    product_id = db.Column(db.Integer, nullable=False, index=True)
    shop_id = db.Column(db.Integer, nullable=False, index=True)
    customer_id = db.Column(
        db.Integer,
        db.ForeignKey('users.id'),
        nullable=False,
        index=True)
    shopkeeper_id = db.Column(
        db.Integer,
        db.ForeignKey('users.id'),
        nullable=False,
        index=True)
    # Zero means "best deal, shopkeeper proposes".
    desired_price = db.Column(db.Integer, nullable=False)
    note = db.Column(db.Text, nullable=True)
    status = db.Column(
        db.Enum(BargainStatus),
        nullable=False,
        default=BargainStatus.PENDING)
    mutually_accepted = db.Column(db.Boolean, nullable=False, default=False)
    accepted_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True)

    customer = db.relationship('User', foreign_keys=[customer_id])
    shopkeeper = db.relationship('User', foreign_keys=[shopkeeper_id])

    __table_args__ = (
        CheckConstraint(
            'desired_price >= 0',
            name='check_desired_price_non_negative'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'product_id': self.product_id,
            'customer': self.customer.principal,
            'shopkeeper': self.shopkeeper.principal,
            'desired_price': self.desired_price,
            'note': self.note,
            'status': self.status.value,
            'mutually_accepted': self.mutually_accepted,
            'timestamp': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<BargainRequest {self.id} status={self.status}>'


class Cart(db.Model):
    __tablename__ = 'carts'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey(
            'users.id',
            ondelete='CASCADE'),
        unique=True,
        nullable=False)
    # Selected deal protection; all NULL when none is chosen.
    insurance_name = db.Column(db.String(100), nullable=True)
    insurance_details = db.Column(db.Text, nullable=True)
    insurance_premium = db.Column(db.Integer, nullable=True)
    insurance_coverage = db.Column(db.Integer, nullable=True)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False)

    items = db.relationship(
        'CartItem',
        backref='cart',
        lazy='dynamic',
        cascade='all, delete-orphan')

    def selected_insurance(self):
        if self.insurance_name is None:
            return None
        return {
            'name': self.insurance_name,
            'details': self.insurance_details,
            'premium': self.insurance_premium,
            'coverage_amount': self.insurance_coverage,
        }

    def __repr__(self):
        return f'<Cart {self.id} for user {self.user_id}>'


class CartItem(db.Model):
    __tablename__ = 'cart_items'

    cart_id = db.Column(
        db.Integer,
        db.ForeignKey(
            'carts.id',
            ondelete='CASCADE'),
        primary_key=True)
    # No foreign key: readers tolerate deleted products.
    product_id = db.Column(db.Integer, primary_key=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_quantity_positive'),
    )

    def to_dict(self):
        return {'product_id': self.product_id, 'quantity': self.quantity}

    def __repr__(self):
        return (
            f"<CartItem cart={self.cart_id} product={self.product_id} "
            f"qty={self.quantity}>"
        )


class WishlistItem(db.Model):
    __tablename__ = 'wishlist_items'

    user_id = db.Column(
        db.Integer,
        db.ForeignKey(
            'users.id',
            ondelete='CASCADE'),
        primary_key=True)
    product_id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        nullable=False)

    def __repr__(self):
        return f'<WishlistItem user={self.user_id} product={self.product_id}>'


class ChatMessage(db.Model):
    __tablename__ = 'chat_messages'

    id = db.Column(db.Integer, primary_key=True)
    sender_id = db.Column(
        db.Integer,
        db.ForeignKey('users.id'),
        nullable=False,
        index=True)
    recipient_id = db.Column(
        db.Integer,
        db.ForeignKey('users.id'),
        nullable=False,
        index=True)
    # Thread key together with the participant pair.
    product_id = db.Column(db.Integer, nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True)

    sender = db.relationship('User', foreign_keys=[sender_id])
    recipient = db.relationship('User', foreign_keys=[recipient_id])

    def to_dict(self):
        return {
            'id': self.id,
            'from': self.sender.principal,
            'to': self.recipient.principal,
            'content': self.content,
            'product_id': self.product_id,
            'timestamp': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<ChatMessage {self.id} product={self.product_id}>'


class ShopkeeperNotification(db.Model):
    __tablename__ = 'shopkeeper_notifications'

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, nullable=False, index=True)
    product_id = db.Column(db.Integer, nullable=False)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey('users.id'),
        nullable=False)
    action = db.Column(db.Enum(ShopkeeperAction), nullable=False)
    created_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True)

    user = db.relationship('User', foreign_keys=[user_id])

    def to_dict(self):
        return {
            'action': self.action.value,
            'user': self.user.principal,
            'product_id': self.product_id,
            'timestamp': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<ShopkeeperNotification {self.action} shop={self.shop_id}>'


class DeliveryPartner(db.Model):
    __tablename__ = 'delivery_partners'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey(
            'users.id',
            ondelete='CASCADE'),
        nullable=False,
        index=True)
    name = db.Column(db.String(100), nullable=False)
    vehicle_type = db.Column(db.String(50), nullable=False)
    location = db.Column(db.String(255), nullable=False, default='')
    is_available = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        nullable=False)

    user = db.relationship('User', foreign_keys=[user_id])

    def __repr__(self):
        return f'<DeliveryPartner {self.name}>'


class DeliveryOrder(db.Model):
    __tablename__ = 'delivery_orders'

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(
        db.Integer,
        db.ForeignKey('shop_profiles.id'),
        nullable=False,
        index=True)
    customer_id = db.Column(
        db.Integer,
        db.ForeignKey('users.id'),
        nullable=False,
        index=True)
    driver_id = db.Column(
        db.Integer,
        db.ForeignKey('delivery_partners.id'),
        nullable=True,
        index=True)
    status = db.Column(db.Enum(DeliveryStatus), nullable=False)
    delivery_option = db.Column(db.Enum(DeliveryOption), nullable=False)
    pickup_location = db.Column(db.String(255), nullable=False, default='')
    dropoff_location = db.Column(db.String(255), nullable=False, default='')
    # Authoritative charged fee, minor units.
    delivery_fee = db.Column(db.Integer, nullable=False, default=0)
    completion_code = db.Column(db.String(12), nullable=False)
    created_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        nullable=False)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False)

    shop = db.relationship('ShopProfile', foreign_keys=[shop_id])
    customer = db.relationship('User', foreign_keys=[customer_id])
    driver = db.relationship('DeliveryPartner', foreign_keys=[driver_id])

    __table_args__ = (
        CheckConstraint(
            'delivery_fee >= 0',
            name='check_delivery_fee_non_negative'),
    )

    def to_dict(self, include_code=False):
        data = {
            'id': self.id,
            'shop_id': self.shop_id,
            'customer': self.customer.principal,
            'driver_id': self.driver_id,
            'status': self.status.value,
            'delivery_option': self.delivery_option.value,
            'pickup_location': self.pickup_location,
            'dropoff_location': self.dropoff_location,
            'delivery_fee': self.delivery_fee,
            'completion_code': None,
            'timestamp': _iso(self.created_at),
        }
        if include_code:
            data['completion_code'] = self.completion_code
        return data

    def __repr__(self):
        return f'<DeliveryOrder {self.id} status={self.status}>'


class Blob(db.Model):
    __tablename__ = 'blobs'

    # sha256 hex digest of the content.
    ref = db.Column(db.String(64), primary_key=True)
    content_type = db.Column(db.String(100), nullable=True)
    size = db.Column(db.Integer, nullable=False)
    uploaded_by = db.Column(
        db.Integer,
        db.ForeignKey('users.id'),
        nullable=True)
    created_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        nullable=False)

    def __repr__(self):
        return f'<Blob {self.ref}>'


class AuditLog(db.Model):
    __tablename__ = 'audit_logs'

    id = db.Column(db.Integer, primary_key=True)
    actor_id = db.Column(
        db.Integer,
        db.ForeignKey(
            'users.id',
            ondelete='SET NULL'),
        nullable=True)
    actor_role = db.Column(db.String(20), nullable=False)
    # e.g., BARGAIN_ACCEPT, DELIVERY_COMPLETE
    action = db.Column(db.String(100), nullable=False)
    # BARGAIN, PRODUCT, DELIVERY_ORDER, etc.
    target_type = db.Column(db.String(50), nullable=True)
    target_id = db.Column(db.Integer, nullable=True)
    ip = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(500), nullable=True)
    # JSON format key field snapshot
    payload_json = db.Column(db.Text, nullable=True)
    created_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True)

    actor = db.relationship('User', foreign_keys=[actor_id])

    def set_payload(self, data):
        self.payload_json = json.dumps(data, ensure_ascii=False)

    def get_payload(self):
        if self.payload_json:
            return json.loads(self.payload_json)
        return {}

    def __repr__(self):
        return f'<AuditLog {self.id} action={self.action}>'

