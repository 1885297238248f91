"""Actor-call layer over the store's JSON API.

Every operation is a method named verb-object. Store failures come back
as the ``bargen.errors`` classes, resolved by the response ``kind``, then
by status code, then by the message heuristics of ``classify_error``.
"""
import logging

from bargen.errors import (
    ERRORS_BY_KIND,
    ERRORS_BY_STATUS,
    ValidationError,
    classify_error,
)
from bargen.pricing import delivery_fee
from bargen.client.records import (
    BargainRequest,
    CartItem,
    CartTotal,
    DeliveryOrder,
    DeliveryPartner,
    ExternalBlob,
    FeeEstimate,
    Insurance,
    Message,
    Product,
    SessionContext,
    Shop,
    ShopkeeperNotification,
    UserProfile,
)

logger = logging.getLogger(__name__)


def error_from_response(response):
    """Build the typed error for a failed store response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    message = ''
    kind = None
    if isinstance(body, dict):
        message = body.get('error') or ''
        kind = body.get('kind')
    if not message:
        message = f'Request failed with status {response.status_code}'

    cls = ERRORS_BY_KIND.get(kind) or ERRORS_BY_STATUS.get(
        response.status_code)
    if cls is None:
        cls = classify_error(message)
    return cls(message)


def _product_payload(name, description, price, condition, return_policy,
                     age, verification_labels, photos):
    return {
        'name': name,
        'description': description,
        'price': price,
        'condition': condition,
        'return_policy': return_policy,
        'age': age.to_dict() if age is not None else None,
        'verification_labels': [
            lb.to_dict() for lb in verification_labels or ()],
        'photos': list(photos) if photos is not None else None,
    }


class BargenClient:
    def __init__(self, transport, session, base_url=''):
        if not isinstance(session, SessionContext):
            raise TypeError('session must be a SessionContext')
        self.transport = transport
        self.session = session
        self.base_url = base_url

    def with_session(self, session):
        """Same store, different caller."""
        return BargenClient(self.transport, session, self.base_url)

    def _call(self, method, path, json=None, files=None, params=None):
        response = self.transport.request(
            method,
            path,
            json=json,
            files=files,
            params=params,
            principal=self.session.principal,
        )
        if response.status_code >= 400:
            error = error_from_response(response)
            logger.info(
                "%s %s failed for %s: %s (%s)",
                method, path, self.session.principal, error.message,
                error.kind)
            raise error
        return response

    def _json(self, method, path, json=None, params=None):
        return self._call(method, path, json=json, params=params).json()

    # Shops

    def create_shop_profile(self, name, rating, address, distance_km,
                            price_info, phone, location_url):
        data = self._json('POST', '/api/shops', json={
            'name': name,
            'rating': rating,
            'address': address,
            'distance_km': distance_km,
            'price_info': price_info,
            'phone': phone,
            'location_url': location_url,
        })
        return data['id']

    def get_own_shop_profiles(self):
        return [Shop.from_dict(s) for s in self._json('GET', '/api/shops/mine')]

    def get_all_shops(self):
        return [Shop.from_dict(s) for s in self._json('GET', '/api/shops')]

    # Products

    def create_product(self, shop_id, name, description, price, condition,
                       return_policy='', age=None, verification_labels=(),
                       photos=None):
        payload = _product_payload(
            name, description, price, condition, return_policy, age,
            verification_labels, photos)
        data = self._json(
            'POST', f'/api/shops/{shop_id}/products', json=payload)
        return data['id']

    def update_product(self, product_id, name, description, price, condition,
                       return_policy='', age=None, verification_labels=(),
                       photos=None, listing_quality_score=None):
        payload = _product_payload(
            name, description, price, condition, return_policy, age,
            verification_labels, photos)
        payload['listing_quality_score'] = listing_quality_score
        return Product.from_dict(
            self._json('PUT', f'/api/products/{product_id}', json=payload))

    def delete_product(self, product_id):
        self._call('DELETE', f'/api/products/{product_id}')

    def get_product(self, product_id):
        """The product, or None when it does not exist."""
        data = self._json('GET', f'/api/products/{product_id}')
        return Product.from_dict(data) if data is not None else None

    def get_products_for_shop(self, shop_id):
        return [
            Product.from_dict(p)
            for p in self._json('GET', f'/api/shops/{shop_id}/products')
        ]

    def browse_products_with_shop(self):
        return [Product.from_dict(p) for p in self._json('GET', '/api/products')]

    def admin_browse_products(self):
        return [
            Product.from_dict(p)
            for p in self._json('GET', '/api/admin/products')
        ]

    def admin_update_product(self, product_id, name, description, price,
                             condition, return_policy='', age=None,
                             verification_labels=(), photos=None,
                             listing_quality_score=None):
        payload = _product_payload(
            name, description, price, condition, return_policy, age,
            verification_labels, photos)
        payload['listing_quality_score'] = listing_quality_score
        return Product.from_dict(self._json(
            'PUT', f'/api/admin/products/{product_id}', json=payload))

    def admin_delete_product(self, product_id):
        self._call('DELETE', f'/api/admin/products/{product_id}')

    # Blobs

    def upload_blob(self, filename, content, content_type='image/jpeg'):
        files = {'file': (filename, content, content_type)}
        data = self._call('POST', '/api/blobs', files=files).json()
        return self.blob(data['ref'])

    def fetch_blob_bytes(self, ref):
        return self._call('GET', f'/api/blobs/{ref}').content

    def blob(self, ref):
        return ExternalBlob(ref, self.base_url, fetcher=self.fetch_blob_bytes)

    # Cart and deal protection

    def add_to_cart(self, product_id, quantity=1):
        self._call('POST', '/api/cart/items', json={
            'product_id': product_id,
            'quantity': quantity,
        })

    def get_cart_items(self):
        return [
            CartItem.from_dict(i) for i in self._json('GET', '/api/cart/items')
        ]

    def get_cart_total_with_insurance(self):
        return CartTotal.from_dict(self._json('GET', '/api/cart/total'))

    def get_default_insurance_options(self):
        return [
            Insurance.from_dict(o)
            for o in self._json('GET', '/api/insurance/options')
        ]

    def get_selected_insurance(self):
        return Insurance.from_dict(self._json('GET', '/api/insurance/selected'))

    def select_insurance(self, insurance):
        """Select a plan, or clear the selection with None."""
        body = insurance.to_dict() if insurance is not None else None
        return Insurance.from_dict(
            self._json('PUT', '/api/insurance/selected', json=body))

    def recommend_best_insurance(self, cart_total):
        return Insurance.from_dict(self._json(
            'GET', '/api/insurance/recommend',
            params={'cart_total': cart_total}))

    # Bargains

    def send_bargain_request(self, product_id, desired_price, note=None):
        data = self._json('POST', f'/api/products/{product_id}/bargains', json={
            'desired_price': desired_price,
            'note': note,
        })
        return data['id']

    def bargains_by_product(self, product_id):
        return [
            BargainRequest.from_dict(b)
            for b in self._json('GET', f'/api/products/{product_id}/bargains')
        ]

    def accept_bargain(self, bargain_id):
        return BargainRequest.from_dict(
            self._json('POST', f'/api/bargains/{bargain_id}/accept'))

    # Messaging

    def send_message(self, to, content, product_id):
        data = self._json('POST', '/api/messages', json={
            'to': to,
            'content': content,
            'product_id': product_id,
        })
        return data['id']

    def get_chat_messages(self, product_id):
        return [
            Message.from_dict(m)
            for m in self._json('GET', f'/api/products/{product_id}/messages')
        ]

    # Wishlist

    def like_product(self, product_id):
        self._call('PUT', f'/api/products/{product_id}/like')

    def remove_like(self, product_id):
        self._call('DELETE', f'/api/products/{product_id}/like')

    def has_liked_product(self, product_id):
        return self._json('GET', f'/api/products/{product_id}/like')['liked']

    def get_wishlist(self):
        return [Product.from_dict(p) for p in self._json('GET', '/api/wishlist')]

    # Identity and roles

    def get_caller_user_profile(self):
        return UserProfile.from_dict(self._json('GET', '/api/me/profile'))

    def save_caller_user_profile(self, profile):
        return UserProfile.from_dict(
            self._json('PUT', '/api/me/profile', json=profile.to_dict()))

    def get_user_profile(self, principal):
        return UserProfile.from_dict(
            self._json('GET', f'/api/users/{principal}/profile'))

    def get_caller_user_role(self):
        return self._json('GET', '/api/me/role')['role']

    def is_caller_admin(self):
        return self._json('GET', '/api/me/is-admin')['is_admin']

    def assign_caller_user_role(self, principal, role):
        self._call('PUT', f'/api/users/{principal}/role', json={'role': role})

    # Delivery

    def register_delivery_partner(self, name, vehicle_type, location):
        data = self._json('POST', '/api/delivery/partners', json={
            'name': name,
            'vehicle_type': vehicle_type,
            'location': location,
        })
        return data['id']

    def set_delivery_partner_availability(self, partner_id, is_available):
        data = self._json(
            'PUT', f'/api/delivery/partners/{partner_id}/availability',
            json={'is_available': is_available})
        return DeliveryPartner.from_dict(data)

    def get_delivery_rate(self):
        return self._json('GET', '/api/delivery/rate')['rate_per_km']

    def calculate_delivery_fee(self, shop_id, distance_km):
        """Authoritative fee from the store."""
        data = self._json(
            'GET', f'/api/shops/{shop_id}/delivery-fee',
            params={'distance_km': distance_km})
        return data['delivery_fee']

    def estimate_delivery_fee(self, shop_id, distance_km, rate_per_km=None):
        """Local preview using the store's published rate."""
        if rate_per_km is None:
            rate_per_km = self.get_delivery_rate()
        try:
            amount = delivery_fee(distance_km, rate_per_km)
        except ValueError as e:
            raise ValidationError(str(e))
        return FeeEstimate(
            shop_id=shop_id,
            distance_km=distance_km,
            amount=amount,
            rate_per_km=rate_per_km,
        )

    def create_delivery_order(self, shop_id, delivery_option,
                              dropoff_location=None):
        data = self._json('POST', '/api/delivery/orders', json={
            'shop_id': shop_id,
            'delivery_option': delivery_option,
            'dropoff_location': dropoff_location,
        })
        return DeliveryOrder.from_dict(data['order'])

    def get_own_delivery_orders(self):
        return [
            DeliveryOrder.from_dict(o)
            for o in self._json('GET', '/api/delivery/orders')
        ]

    def assign_delivery_order(self, order_id):
        return DeliveryOrder.from_dict(
            self._json('POST', f'/api/delivery/orders/{order_id}/assign'))

    def advance_delivery_order(self, order_id, status):
        return DeliveryOrder.from_dict(self._json(
            'POST', f'/api/delivery/orders/{order_id}/status',
            json={'status': status}))

    def complete_delivery_order(self, order_id, completion_code):
        return DeliveryOrder.from_dict(self._json(
            'POST', f'/api/delivery/orders/{order_id}/complete',
            json={'completion_code': completion_code}))

    # Notifications

    def get_shopkeeper_notifications(self, shop_id):
        return [
            ShopkeeperNotification.from_dict(n)
            for n in self._json('GET', f'/api/shops/{shop_id}/notifications')
        ]

