"""Compare one product's listings across shops.

Pure functions over catalog snapshots; they never call the store.
"""

SORT_KEYS = ('price', 'rating', 'distance')


def _normalize(name):
    return (name or '').strip().lower()


def find_matching_products(name, all_products, exclude_id):
    """Listings whose name matches ignoring case and surrounding spaces."""
    wanted = _normalize(name)
    return [
        p for p in all_products
        if p.id != exclude_id and _normalize(p.name) == wanted
    ]


def _shop_rating(product):
    return product.shop.rating if product.shop is not None else 0


def _shop_distance(product):
    if product.shop is None:
        return float('inf')
    return product.shop.distance_km


def apply_sorting(listings, key):
    """Stable sort; ties keep their input order.

    price ascending, rating descending, distance ascending. Any other key
    returns the listings unchanged.
    """
    if key == 'price':
        return sorted(listings, key=lambda p: p.price)
    if key == 'rating':
        # sorted() is stable with reverse=True as well.
        return sorted(listings, key=_shop_rating, reverse=True)
    if key == 'distance':
        return sorted(listings, key=_shop_distance)
    return list(listings)
