"""
Tests for the cart and deal protection
======================================
"""

import pytest

from bargen.client import cart as cart_view
from bargen.client.records import Insurance
from bargen.errors import NotFound, ValidationError
from tests.conftest import create_product

SMALL_PLAN = {
    'name': 'Small Protection',
    'details': 'Test plan',
    'premium': 150,
    'coverage_amount': 2000,
}


@pytest.fixture
def two_products(shopkeeper, shop_id):
    first = create_product(shopkeeper, shop_id, name='Red Shoes', price=500)
    second = create_product(shopkeeper, shop_id, name='Blue Hat', price=300)
    return first, second


class TestCartTotals:
    """Subtotal, insurance premium and total."""

    def test_subtotal_and_insurance(self, app, customer, two_products):
        """2 x 500 + 1 x 300 is 1300; a 150 premium makes 1450."""
        app.config['INSURANCE_OPTIONS'] = [SMALL_PLAN]
        first, second = two_products
        customer.add_to_cart(first, 2)
        customer.add_to_cart(second, 1)

        total = customer.get_cart_total_with_insurance()
        assert total.subtotal == 1300
        assert total.insurance is None
        assert total.insurance_premium == 0
        assert total.total == 1300

        customer.select_insurance(Insurance.from_dict(SMALL_PLAN))
        total = customer.get_cart_total_with_insurance()
        assert total.subtotal == 1300
        assert total.insurance_premium == 150
        assert total.total == 1450

    def test_clearing_insurance_zeroes_premium(self, app, customer,
                                               two_products):
        """Selecting None removes the premium."""
        app.config['INSURANCE_OPTIONS'] = [SMALL_PLAN]
        customer.add_to_cart(two_products[0], 1)
        customer.select_insurance(Insurance.from_dict(SMALL_PLAN))
        assert customer.select_insurance(None) is None

        total = customer.get_cart_total_with_insurance()
        assert total.insurance is None
        assert total.insurance_premium == 0
        assert total.total == total.subtotal == 500
        assert customer.get_selected_insurance() is None

    def test_empty_cart(self, customer):
        """A customer with no cart reads an empty total."""
        total = customer.get_cart_total_with_insurance()
        assert total.cart_items == []
        assert total.total == 0


class TestDanglingCartLines:
    """Deleted products never break cart reads."""

    def test_deleted_product_is_flagged(self, customer, shopkeeper,
                                        two_products):
        """The line stays, is excluded from the subtotal and listed."""
        first, second = two_products
        customer.add_to_cart(first, 2)
        customer.add_to_cart(second, 1)
        shopkeeper.delete_product(first)

        items = customer.get_cart_items()
        assert {i.product_id for i in items} == {first, second}

        total = customer.get_cart_total_with_insurance()
        assert total.subtotal == 300
        assert total.unavailable_items == [first]

    def test_cart_view_flags_unknown_products(self, customer, shopkeeper,
                                              two_products):
        """The joined view marks stale lines and stays in sync."""
        first, second = two_products
        customer.add_to_cart(first, 1)
        customer.add_to_cart(second, 3)
        shopkeeper.delete_product(second)

        view = cart_view.load_cart_view(customer)
        assert [line.item.product_id for line in view.unavailable_lines] == [
            second]
        assert view.local_subtotal == 500
        assert view.in_sync is True
        assert view.grand_total == 500

    def test_cannot_add_deleted_product(self, customer, shopkeeper,
                                        product_id):
        """Adding a deleted product is not found."""
        shopkeeper.delete_product(product_id)
        with pytest.raises(NotFound):
            customer.add_to_cart(product_id, 1)


class TestAddToCart:
    """Write-then-reread cart updates."""

    def test_quantities_accumulate(self, customer, product_id):
        """Adding the same product twice adds up."""
        customer.add_to_cart(product_id, 2)
        view = cart_view.add_and_reload(customer, product_id, 3)
        assert view.lines[0].item.quantity == 5
        assert view.subtotal == 2500

    def test_zero_quantity_rejected(self, customer, product_id):
        """Quantity must be at least one."""
        with pytest.raises(ValidationError):
            customer.add_to_cart(product_id, 0)

    def test_missing_product_id_is_invalid(self, transport):
        """A line without a product id is a validation error."""
        response = transport.request(
            'POST', '/api/cart/items', json={'quantity': 1},
            principal='customer-principal')
        assert response.status_code == 400
        assert response.json()['kind'] == 'validation'

    def test_non_integer_product_id_is_invalid(self, transport, product_id):
        """Product ids must be plain integers."""
        response = transport.request(
            'POST', '/api/cart/items',
            json={'product_id': [product_id], 'quantity': 1},
            principal='customer-principal')
        assert response.status_code == 400
        assert response.json()['kind'] == 'validation'

    def test_notifies_shopkeeper(self, customer, shopkeeper, shop_id,
                                 product_id):
        """Another user's add shows up as an in_cart notification."""
        customer.add_to_cart(product_id, 1)
        notifications = shopkeeper.get_shopkeeper_notifications(shop_id)
        assert [(n.action, n.user) for n in notifications] == [
            ('in_cart', 'customer-principal')]

    def test_owner_add_does_not_notify(self, shopkeeper, shop_id,
                                       product_id):
        """The owner's own cart activity is not a notification."""
        shopkeeper.add_to_cart(product_id, 1)
        assert shopkeeper.get_shopkeeper_notifications(shop_id) == []


class TestInsuranceOptions:
    """Configured plans, selection and recommendation."""

    def test_default_options(self, customer):
        """Three plans are offered."""
        options = customer.get_default_insurance_options()
        assert [o.name for o in options] == [
            'Basic Protection', 'Standard Protection', 'Premium Protection']

    def test_unknown_plan_rejected(self, customer):
        """Only configured plans can be selected."""
        fake = Insurance('Made Up', 'none', 1, 1000000000)
        with pytest.raises(ValidationError):
            customer.select_insurance(fake)

    def test_selected_plan_uses_stored_terms(self, customer):
        """The store keeps its own premium, not the caller's."""
        plan = customer.get_default_insurance_options()[0]
        tampered = Insurance(plan.name, plan.details, 1, plan.coverage_amount)
        selected = customer.select_insurance(tampered)
        assert selected.premium == plan.premium

    def test_recommend_cheapest_covering_plan(self, customer):
        """The cheapest plan whose cover reaches the total wins."""
        assert customer.recommend_best_insurance(40000).name == (
            'Basic Protection')
        assert customer.recommend_best_insurance(150000).name == (
            'Standard Protection')

    def test_recommend_widest_when_nothing_covers(self, customer):
        """Totals above every cover get the largest plan."""
        assert customer.recommend_best_insurance(5000000).name == (
            'Premium Protection')

    def test_recommend_nothing_for_empty_total(self, customer):
        """A zero total needs no protection."""
        assert customer.recommend_best_insurance(0) is None
