"""
Tests for the bargain protocol
==============================
"""

import pytest

from bargen.client import negotiation
from bargen.client.records import BargainRequest
from bargen.errors import AuthorizationDenied, NotFound, ValidationError
from bargen.models import AuditLog
from tests.conftest import create_product


class TestSubmitBargain:
    """Customers submit pending offers."""

    def test_best_deal_price_zero_is_preserved(self, customer, product_id):
        """A best deal request stores desired_price 0, not null."""
        negotiation.request_best_deal(customer, product_id)

        bargains = customer.bargains_by_product(product_id)
        assert len(bargains) == 1
        assert bargains[0].desired_price == 0
        assert bargains[0].desired_price is not None
        assert bargains[0].is_best_deal is True
        assert bargains[0].note == negotiation.BEST_DEAL_NOTE

    def test_submitted_bargain_is_pending(self, customer, product_id):
        """New bargains start pending and not mutually accepted."""
        negotiation.submit_offer(customer, product_id, 450, 'Cash today')

        bargain = customer.bargains_by_product(product_id)[0]
        assert bargain.status == 'pending'
        assert bargain.mutually_accepted is False
        assert bargain.customer == 'customer-principal'
        assert bargain.shopkeeper == 'shopkeeper-principal'

    def test_many_pending_bargains_allowed(self, customer, product_id):
        """No deduplication for the same customer and product."""
        for price in (400, 420, 440):
            negotiation.submit_offer(customer, product_id, price)
        assert len(customer.bargains_by_product(product_id)) == 3

    def test_negative_price_rejected_locally(self, customer, product_id):
        """The client refuses negative prices before calling the store."""
        with pytest.raises(ValidationError):
            negotiation.submit_offer(customer, product_id, -1)

    def test_bool_price_rejected_by_store(self, customer, product_id):
        """The store rejects booleans posing as integers."""
        with pytest.raises(ValidationError):
            customer.send_bargain_request(product_id, True)

    def test_float_price_rejected_by_store(self, customer, product_id):
        """Prices are whole minor units."""
        with pytest.raises(ValidationError):
            customer.send_bargain_request(product_id, 10.5)

    def test_missing_product(self, customer):
        """Bargaining on an unknown product is not found."""
        with pytest.raises(NotFound):
            customer.send_bargain_request(9999, 100)

    def test_submit_is_audited(self, app, customer, product_id):
        """Submitting leaves an audit row."""
        bargain_id = negotiation.submit_offer(customer, product_id, 300)
        with app.app_context():
            audit = AuditLog.query.filter_by(
                action='BARGAIN_SUBMIT', target_id=bargain_id).one()
            assert audit.get_payload()['desired_price'] == 300
            assert audit.actor.principal == 'customer-principal'


class TestAcceptBargain:
    """Only the shopkeeper accepts; accepting is idempotent."""

    def test_accept_twice(self, customer, shopkeeper, product_id):
        """A second accept succeeds and keeps mutually_accepted true."""
        bargain_id = negotiation.submit_offer(customer, product_id, 450)

        first = shopkeeper.accept_bargain(bargain_id)
        second = shopkeeper.accept_bargain(bargain_id)

        assert first.mutually_accepted is True
        assert second.mutually_accepted is True
        assert second.status == 'accepted'
        assert second == first

    def test_customer_cannot_accept(self, customer, product_id):
        """The customer is known but not entitled."""
        bargain_id = negotiation.submit_offer(customer, product_id, 450)
        with pytest.raises(AuthorizationDenied):
            customer.accept_bargain(bargain_id)

    def test_admin_cannot_accept(self, customer, admin, product_id):
        """Admins do not accept on the shopkeeper's behalf."""
        bargain_id = negotiation.submit_offer(customer, product_id, 450)
        with pytest.raises(AuthorizationDenied):
            admin.accept_bargain(bargain_id)

    def test_unknown_bargain(self, shopkeeper):
        """Accepting a missing bargain is not found."""
        with pytest.raises(NotFound):
            shopkeeper.accept_bargain(12345)

    def test_accept_after_product_deleted(
            self, customer, shopkeeper, product_id):
        """The recorded shopkeeper can still accept a dangling bargain."""
        bargain_id = negotiation.submit_offer(customer, product_id, 450)
        shopkeeper.delete_product(product_id)

        bargain = shopkeeper.accept_bargain(bargain_id)
        assert bargain.mutually_accepted is True

    def test_accept_and_refresh_rereads(
            self, customer, shopkeeper, product_id):
        """The helper returns the store's list after accepting."""
        bargain_id = negotiation.submit_offer(customer, product_id, 450)
        bargains = negotiation.accept_and_refresh(
            shopkeeper, bargain_id, product_id)
        assert [b.id for b in bargains] == [bargain_id]
        assert bargains[0].mutually_accepted is True


class TestBargainVisibility:
    """Shop owners and admins see all bargains; others see their own."""

    def test_customers_see_only_their_own(
            self, customer, other_customer, product_id):
        """Other customers' offers are hidden."""
        negotiation.submit_offer(customer, product_id, 400)
        negotiation.submit_offer(other_customer, product_id, 410)

        mine = customer.bargains_by_product(product_id)
        assert [b.desired_price for b in mine] == [400]

    def test_shopkeeper_and_admin_see_all(
            self, customer, other_customer, shopkeeper, admin, product_id):
        """Both offers show up for the owner and the admin."""
        negotiation.submit_offer(customer, product_id, 400)
        negotiation.submit_offer(other_customer, product_id, 410)

        assert len(shopkeeper.bargains_by_product(product_id)) == 2
        assert len(admin.bargains_by_product(product_id)) == 2

    def test_newest_first(self, customer, product_id):
        """The store lists the latest offer first."""
        first = negotiation.submit_offer(customer, product_id, 400)
        second = negotiation.submit_offer(customer, product_id, 420)
        ids = [b.id for b in negotiation.refresh_bargains(customer, product_id)]
        assert ids == [second, first]

    def test_customer_still_sees_bargains_on_deleted_product(
            self, customer, shopkeeper, product_id):
        """Dangling bargains stay readable."""
        negotiation.submit_offer(customer, product_id, 400)
        shopkeeper.delete_product(product_id)
        assert len(customer.bargains_by_product(product_id)) == 1


class TestDisplayHelpers:
    """Client-side ordering and the advisory delivery preview."""

    def _bargain(self, bargain_id, timestamp, accepted=False,
                 customer='c'):
        return BargainRequest(
            id=bargain_id,
            product_id=1,
            customer=customer,
            shopkeeper='s',
            desired_price=100,
            note=None,
            status='accepted' if accepted else 'pending',
            mutually_accepted=accepted,
            timestamp=timestamp,
        )

    def test_sort_for_display_newest_first(self):
        """Sorting is by timestamp descending, not by id."""
        bargains = [
            self._bargain(3, '2026-01-01T10:00:00'),
            self._bargain(1, '2026-01-03T10:00:00'),
            self._bargain(2, '2026-01-02T10:00:00'),
        ]
        ids = [b.id for b in negotiation.sort_for_display(bargains)]
        assert ids == [1, 2, 3]

    def test_delivery_available_needs_own_accepted_bargain(self):
        """Someone else's accepted bargain does not count."""
        bargains = [
            self._bargain(1, '2026-01-01T10:00:00', accepted=True,
                          customer='someone-else'),
            self._bargain(2, '2026-01-01T11:00:00', customer='c'),
        ]
        assert negotiation.delivery_available(bargains, 'c') is False
        bargains.append(
            self._bargain(3, '2026-01-01T12:00:00', accepted=True))
        assert negotiation.delivery_available(bargains, 'c') is True

    def test_pending_filter(self):
        """Only pending bargains are returned."""
        bargains = [
            self._bargain(1, '2026-01-01T10:00:00', accepted=True),
            self._bargain(2, '2026-01-01T11:00:00'),
        ]
        assert [b.id for b in negotiation.pending_bargains(bargains)] == [2]


class TestBargainAcrossProducts:
    """Bargains are scoped to their product."""

    def test_lists_are_per_product(self, customer, shopkeeper, shop_id,
                                   product_id):
        """An offer on one product does not show on another."""
        other_id = create_product(shopkeeper, shop_id, name='Blue Hat')
        negotiation.submit_offer(customer, product_id, 400)
        assert customer.bargains_by_product(other_id) == []
