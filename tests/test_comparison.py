"""
Tests for cross-shop comparison
===============================
"""

from bargen.client.comparison import apply_sorting, find_matching_products
from bargen.client.records import Product, Shop


def listing(product_id, name, price, rating=3, distance_km=1.0):
    shop = Shop(
        id=product_id * 10,
        owner=f'owner-{product_id}',
        name=f'Shop {product_id}',
        address='',
        distance_km=distance_km,
        rating=rating,
    )
    return Product(
        id=product_id,
        shop_id=shop.id,
        name=name,
        description='',
        price=price,
        condition='new',
        shop=shop,
    )


class TestFindMatchingProducts:
    """Exact name matching across the catalog."""

    def test_case_and_whitespace_insensitive(self):
        """Variants of the same name all match."""
        catalog = [
            listing(1, 'red shoes', 100),
            listing(2, ' Red Shoes ', 200),
            listing(3, 'RED SHOES', 300),
            listing(4, 'Red Shoes Deluxe', 400),
        ]
        matches = find_matching_products('Red Shoes', catalog, exclude_id=99)
        assert [p.id for p in matches] == [1, 2, 3]

    def test_excludes_current_product(self):
        """The product being viewed is left out even though it matches."""
        catalog = [listing(5, 'Red Shoes', 100), listing(6, 'red shoes', 90)]
        matches = find_matching_products('Red Shoes', catalog, exclude_id=5)
        assert [p.id for p in matches] == [6]

    def test_no_matches(self):
        """An unmatched name gives an empty list."""
        assert find_matching_products('Kettle', [listing(1, 'Pan', 5)], 0) == []


class TestApplySorting:
    """Stable ordering by price, rating or distance."""

    def test_price_ascending_and_stable(self):
        """Equal prices keep their input order."""
        listings = [
            listing(1, 'x', 300),
            listing(2, 'x', 100),
            listing(3, 'x', 300),
            listing(4, 'x', 100),
        ]
        result = apply_sorting(listings, 'price')
        assert [p.price for p in result] == [100, 100, 300, 300]
        assert [p.id for p in result] == [2, 4, 1, 3]

    def test_rating_descending_and_stable(self):
        """Highest rated first; ties keep input order."""
        listings = [
            listing(1, 'x', 1, rating=3),
            listing(2, 'x', 1, rating=5),
            listing(3, 'x', 1, rating=3),
            listing(4, 'x', 1, rating=5),
        ]
        result = apply_sorting(listings, 'rating')
        assert [p.shop.rating for p in result] == [5, 5, 3, 3]
        assert [p.id for p in result] == [2, 4, 1, 3]

    def test_distance_ascending(self):
        """Nearest shop first."""
        listings = [
            listing(1, 'x', 1, distance_km=4.0),
            listing(2, 'x', 1, distance_km=0.5),
            listing(3, 'x', 1, distance_km=2.0),
        ]
        assert [p.id for p in apply_sorting(listings, 'distance')] == [2, 3, 1]

    def test_unknown_key_keeps_order(self):
        """Unsupported keys leave the listings as they were."""
        listings = [listing(2, 'x', 5), listing(1, 'x', 1)]
        assert apply_sorting(listings, 'popularity') == listings

    def test_input_not_mutated(self):
        """Sorting returns a new list."""
        listings = [listing(2, 'x', 5), listing(1, 'x', 1)]
        apply_sorting(listings, 'price')
        assert [p.id for p in listings] == [2, 1]
