"""
Tests for shops, products, photos and roles
===========================================
"""

import pytest

from bargen.client.records import (
    AgeTime,
    ProductAge,
    UserProfile,
    VerificationLabel,
)
from bargen.errors import AuthorizationDenied, NotFound, ValidationError
from bargen.models import User
from tests.conftest import create_product, create_shop

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 32


class TestShops:
    """Shop profiles."""

    def test_create_and_list(self, shopkeeper, customer):
        """Owners see their shops; everyone sees all shops."""
        first = create_shop(shopkeeper, name='First')
        second = create_shop(shopkeeper, name='Second')
        create_shop(customer, name='Other Owner')

        assert [s.id for s in shopkeeper.get_own_shop_profiles()] == [
            first, second]
        assert len(customer.get_all_shops()) == 3
        assert shopkeeper.get_own_shop_profiles()[0].owner == (
            'shopkeeper-principal')

    @pytest.mark.parametrize('rating', [0, 6])
    def test_rating_range(self, shopkeeper, rating):
        """Ratings run from 1 to 5."""
        with pytest.raises(ValidationError):
            create_shop(shopkeeper, rating=rating)

    def test_negative_distance(self, shopkeeper):
        """Distance cannot be negative."""
        with pytest.raises(ValidationError):
            create_shop(shopkeeper, distance_km=-1)


class TestProducts:
    """Product listing, update and soft delete."""

    def test_product_roundtrip_fields(self, shopkeeper, shop_id):
        """Tagged age and labels come back as sent."""
        age = ProductAge('Lightly worn', AgeTime.months(3))
        product_id = create_product(
            shopkeeper, shop_id,
            condition='used',
            age=age,
            verification_labels=[VerificationLabel('Original box', 'Included')],
        )
        product = shopkeeper.get_product(product_id)
        assert product.age == age
        assert product.age.time.describe() == '3 months old'
        assert product.verification_labels[0].label_text == 'Original box'
        assert product.shop.id == shop_id

    def test_brand_new_age_has_no_amount(self, shopkeeper, shop_id):
        """brandNew carries no amount on the wire."""
        product_id = create_product(
            shopkeeper, shop_id, age=ProductAge('', AgeTime.brand_new()))
        product = shopkeeper.get_product(product_id)
        assert product.age.time == AgeTime.brand_new()

    def test_age_amount_required_for_months(self):
        """The record refuses a months age without an amount."""
        with pytest.raises(ValueError):
            AgeTime('months')

    def test_invalid_condition(self, shopkeeper, shop_id):
        """Condition is new or used."""
        with pytest.raises(ValidationError):
            create_product(shopkeeper, shop_id, condition='refurbished')

    def test_only_owner_adds_products(self, customer, shop_id):
        """Other users cannot list in someone else's shop."""
        with pytest.raises(AuthorizationDenied):
            create_product(customer, shop_id)

    def test_update_sets_quality_score(self, shopkeeper, product_id):
        """Updates may carry a listing quality score."""
        product = shopkeeper.update_product(
            product_id, 'Red Shoes', 'Resoled', 450, 'used',
            listing_quality_score=8)
        assert product.price == 450
        assert product.listing_quality_score == 8

    def test_deleted_product_reads_as_missing(self, shopkeeper, customer,
                                              shop_id, product_id):
        """Deleted products are gone from every read."""
        shopkeeper.delete_product(product_id)
        assert customer.get_product(product_id) is None
        assert customer.get_products_for_shop(shop_id) == []
        assert customer.browse_products_with_shop() == []
        with pytest.raises(NotFound):
            shopkeeper.delete_product(product_id)

    def test_customer_cannot_delete(self, customer, product_id):
        """Only the shop owner deletes."""
        with pytest.raises(AuthorizationDenied):
            customer.delete_product(product_id)

    def test_browse_joins_shop(self, customer, product_id):
        """Browsing returns products with their shop."""
        products = customer.browse_products_with_shop()
        assert products[0].shop.name == 'Corner Store'


class TestAdminProducts:
    """Admin variants skip ownership checks."""

    def test_admin_update_and_delete(self, admin, shopkeeper, product_id):
        """An admin edits and removes any product."""
        product = admin.admin_update_product(
            product_id, 'Red Shoes', 'Checked', 400, 'new')
        assert product.price == 400
        admin.admin_delete_product(product_id)
        assert shopkeeper.get_product(product_id) is None

    def test_admin_browse_requires_admin(self, customer, product_id):
        """Regular users are denied."""
        with pytest.raises(AuthorizationDenied):
            customer.admin_browse_products()


class TestRolesAndProfiles:
    """Identity, profiles and roles."""

    def test_roles(self, admin, customer):
        """Configured admins start as admin, others as user."""
        assert admin.is_caller_admin() is True
        assert customer.is_caller_admin() is False
        assert customer.get_caller_user_role() == 'user'

    def test_admin_assigns_role(self, admin, customer):
        """Admins change other users' roles."""
        customer.get_caller_user_role()
        admin.assign_caller_user_role('customer-principal', 'guest')
        assert customer.get_caller_user_role() == 'guest'

    def test_user_cannot_assign_role(self, customer, other_customer):
        """Role changes need admin."""
        other_customer.get_caller_user_role()
        with pytest.raises(AuthorizationDenied):
            customer.assign_caller_user_role(
                'other-customer-principal', 'admin')

    def test_polling_reads_do_not_rewrite_last_seen(self, app, customer):
        """last_seen_at is refreshed at most once per interval."""
        customer.get_caller_user_role()
        with app.app_context():
            first = User.query.filter_by(
                principal='customer-principal').one().last_seen_at
        customer.get_caller_user_role()
        with app.app_context():
            again = User.query.filter_by(
                principal='customer-principal').one().last_seen_at
        assert first is not None
        assert again == first

        app.config['LAST_SEEN_INTERVAL_SECONDS'] = 0
        customer.get_caller_user_role()
        with app.app_context():
            refreshed = User.query.filter_by(
                principal='customer-principal').one().last_seen_at
        assert refreshed > first

    def test_profile(self, customer, other_customer):
        """Profiles save and read back by principal."""
        assert customer.get_caller_user_profile() is None
        saved = customer.save_caller_user_profile(
            UserProfile('Asha', 'asha@example.com', '+91 99999 00000'))
        assert saved.name == 'Asha'
        assert other_customer.get_user_profile('customer-principal') == saved
        assert other_customer.get_user_profile('nobody') is None


class TestWishlistAndChat:
    """Likes and product threads."""

    def test_like_and_unlike(self, customer, shopkeeper, shop_id, product_id):
        """Liking notifies the shop; unliking clears it from the list."""
        customer.like_product(product_id)
        customer.like_product(product_id)
        assert customer.has_liked_product(product_id) is True
        assert [p.id for p in customer.get_wishlist()] == [product_id]

        notifications = shopkeeper.get_shopkeeper_notifications(shop_id)
        assert [n.action for n in notifications] == ['liked']

        customer.remove_like(product_id)
        assert customer.has_liked_product(product_id) is False
        assert customer.get_wishlist() == []

    def test_wishlist_hides_deleted(self, customer, shopkeeper, product_id):
        """Liked products that were deleted drop out of the wishlist."""
        customer.like_product(product_id)
        shopkeeper.delete_product(product_id)
        assert customer.get_wishlist() == []
        assert customer.has_liked_product(product_id) is True

    def test_notifications_owner_only(self, customer, shop_id):
        """Only the shop owner reads notifications."""
        with pytest.raises(AuthorizationDenied):
            customer.get_shopkeeper_notifications(shop_id)

    def test_chat_thread(self, customer, shopkeeper, other_customer,
                         product_id):
        """Both participants read the thread; outsiders see nothing."""
        customer.send_message('shopkeeper-principal', 'Is it available?',
                              product_id)
        shopkeeper.send_message('customer-principal', 'Yes', product_id)

        messages = customer.get_chat_messages(product_id)
        assert [m.content for m in messages] == ['Is it available?', 'Yes']
        assert messages[0].sender == 'customer-principal'
        assert shopkeeper.get_chat_messages(product_id) == messages
        assert other_customer.get_chat_messages(product_id) == []

    def test_message_to_unknown_user(self, customer, product_id):
        """Recipients must exist."""
        with pytest.raises(NotFound):
            customer.send_message('ghost', 'Hello', product_id)

    def test_empty_message(self, customer, shopkeeper, product_id):
        """Blank content is rejected."""
        with pytest.raises(ValidationError):
            customer.send_message('shopkeeper-principal', '   ', product_id)


class TestBlobs:
    """Content-addressed photos."""

    def test_upload_and_fetch(self, shopkeeper, customer, shop_id):
        """Uploads are addressed by content and readable as bytes."""
        blob = shopkeeper.upload_blob('shoe.png', PNG_BYTES, 'image/png')
        again = shopkeeper.upload_blob('copy.png', PNG_BYTES, 'image/png')
        assert blob.ref == again.ref
        assert len(blob.ref) == 64
        assert blob.direct_url == (
            f'http://localhost/api/blobs/{blob.ref}')
        assert blob.get_bytes() == PNG_BYTES

        product_id = create_product(shopkeeper, shop_id, photos=[blob.ref])
        assert customer.get_product(product_id).photos == [blob.ref]

    def test_unknown_photo_reference(self, shopkeeper, shop_id):
        """Products cannot point at photos that were never uploaded."""
        with pytest.raises(ValidationError):
            create_product(shopkeeper, shop_id, photos=['0' * 64])

    def test_unsupported_type(self, shopkeeper):
        """Only image files are accepted."""
        with pytest.raises(ValidationError):
            shopkeeper.upload_blob('notes.txt', b'hello', 'text/plain')

    def test_missing_blob(self, customer):
        """Unknown references are not found."""
        with pytest.raises(NotFound):
            customer.fetch_blob_bytes('f' * 64)
