from decimal import Decimal, ROUND_HALF_UP


def delivery_fee(distance_km, rate_per_km):
    """Fee in minor units for a distance, rounded half up.

    This is the only place the fee formula lives. The store calls it with
    its configured rate; client previews call it with the rate the store
    publishes.
    """
    if distance_km is None or distance_km < 0:
        raise ValueError('distance_km must be a non-negative number')
    if rate_per_km < 0:
        raise ValueError('rate_per_km must be a non-negative number')
    amount = Decimal(str(distance_km)) * Decimal(int(rate_per_km))
    return int(amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP))
