"""
Unit tests for OrderService

Order creation from reservations and order item stock movements.
"""
import pytest

from kamioun.core.auth import TokenUser
from kamioun.core.errors import BusinessError, NotFoundError
from kamioun.core.metrics import registry
from kamioun.models import Order
from kamioun.services.order_service import ORDER_ITEMS_ROUTE, OrderService
from kamioun.services.reservation_service import ReservationService


@pytest.fixture
def reservation(db_session, seed, reservation_payload):
    return ReservationService(db_session).create_reservations([reservation_payload])[0]


@pytest.fixture
def order(db_session, reservation):
    return OrderService(db_session).create_from_reservation({"reservation_id": reservation.id, "is_active": True})


class TestCreateFromReservation:
    """Test OrderService.create_from_reservation"""

    def test_order_takes_physical_stock(self, db_session, seed, order):
        assert order.state.name == "new"
        assert order.status.name == "open"
        assert order.amount_ttc == 62.5
        assert [(i.qte_ordered, i.sku) for i in order.items] == [(5, "SKU-OLV-1")]
        assert seed.stock.stock_quantity == 95
        assert seed.stock.sealable == 45

    def test_inactive_order_is_canceled(self, db_session, seed, reservation):
        order = OrderService(db_session).create_from_reservation(
            {"reservation_id": reservation.id, "is_active": False, "amount_ttc": 60}
        )

        assert order.state.name == "canceled"
        assert order.is_active is False
        assert order.amount_ttc == 60

    def test_insufficient_stock_rolls_back(self, db_session, seed, reservation):
        # Arrange
        seed.stock.stock_quantity = 2
        db_session.commit()

        # Act
        with pytest.raises(BusinessError) as exc_info:
            OrderService(db_session).create_from_reservation({"reservation_id": reservation.id, "is_active": True})

        # Assert
        assert exc_info.value.code == "STOCK_INSUFFICIENT"
        assert "Available: 2.0, required: 5.0" in exc_info.value.message
        assert db_session.query(Order).count() == 0
        assert seed.stock.stock_quantity == 2

    def test_missing_state(self, db_session, seed, reservation):
        db_session.delete(seed.state_canceled)
        db_session.commit()

        with pytest.raises(BusinessError) as exc_info:
            OrderService(db_session).create_from_reservation({"reservation_id": reservation.id, "is_active": False})

        assert exc_info.value.code == "STATE_NOT_FOUND"

    def test_unknown_reservation(self, db_session, seed):
        with pytest.raises(NotFoundError) as exc_info:
            OrderService(db_session).create_from_reservation({"reservation_id": "missing", "is_active": True})

        assert exc_info.value.message == "Reservation #missing not found."


class TestUpdateOrderItem:
    """Test OrderService.update_order_item"""

    def _stock_updates(self, seed):
        value = registry.get_sample_value("stock_operation_total", {
            "operation": "update",
            "result": "success",
            "route": ORDER_ITEMS_ROUTE,
            "product_id": seed.product.id,
            "source_id": seed.source.id,
        })
        return value or 0

    def test_shipping_and_canceling_move_stock(self, db_session, seed, order):
        item_id = order.items[0].id
        before = self._stock_updates(seed)

        result = OrderService(db_session).update_order_item(item_id, {"qte_shipped": 2, "qte_canceled": 1})

        # shipped leaves the warehouse, canceled comes back
        assert seed.stock.stock_quantity == 94
        assert result["stock_change"] == {"shipped": -2, "refunded": 0, "canceled": 1}
        assert result["amounts"] == {"refunded": 0, "canceled": 12.5, "shipped": 25.0}
        assert result["price_used"] == 12.5
        assert result["details"]["shipped"] == {"old": 0, "new": 2}
        assert self._stock_updates(seed) == before + 1

    def test_order_amounts_follow_item_quantities(self, db_session, seed, order):
        item_id = order.items[0].id

        OrderService(db_session).update_order_item(item_id, {"qte_refunded": 2, "discounted_price": 10})

        refreshed = db_session.get(Order, order.id)
        assert refreshed.amount_refunded == 20
        assert refreshed.amount_shipped == 0
        assert refreshed.items[0].discounted_price == 10
        assert seed.stock.stock_quantity == 97

    def test_unknown_item(self, db_session, seed):
        with pytest.raises(NotFoundError) as exc_info:
            OrderService(db_session).update_order_item("missing", {"qte_shipped": 1})

        assert exc_info.value.code == "ORDER_ITEM_NOT_FOUND"


class TestUpdateOrderItems:
    """Test OrderService.update_order_items"""

    def test_batch_without_id_is_aborted(self, db_session, seed, order):
        item_id = order.items[0].id

        with pytest.raises(BusinessError) as exc_info:
            OrderService(db_session).update_order_items([{"id": item_id, "qte_shipped": 2}, {"qte_shipped": 1}])

        assert exc_info.value.code == "ORDER_ITEM_ID_REQUIRED"
        assert seed.stock.stock_quantity == 95
        assert db_session.get(Order, order.id).items[0].qte_shipped == 0

    def test_batch_applies_every_update(self, db_session, seed, order):
        item_id = order.items[0].id

        results = OrderService(db_session).update_order_items([
            {"id": item_id, "qte_shipped": 2},
            {"id": item_id, "qte_shipped": 3},
        ])

        assert [r["stock_change"]["shipped"] for r in results] == [-2, -1]
        assert seed.stock.stock_quantity == 92


class TestUpdateOrder:
    def test_notification_names_the_author(self, db_session, seed, order):
        user = TokenUser(id=seed.customer.id, phone=seed.customer.telephone)

        updated, notification = OrderService(db_session).update_order(order.id, {"comment": "call first"}, user)

        assert updated.comment == "call first"
        assert notification["name"] == "+21620123456"
        assert notification["message"] == f"Order #{order.id} was updated by +21620123456"
        assert notification["id"].startswith(f"{order.id}-")

    def test_nested_items_are_updated(self, db_session, seed, order):
        item_id = order.items[0].id
        user = TokenUser(id=seed.customer.id, phone=seed.customer.telephone, name="Amine Ben Salah")

        updated, notification = OrderService(db_session).update_order(
            order.id, {"order_items": [{"id": item_id, "weight": 4}, {"id": "other", "weight": 9}]}, user
        )

        assert updated.items[0].weight == 4
        assert notification["name"] == "Amine Ben Salah"

    def test_relations_are_checked_before_any_change(self, db_session, seed, order):
        user = TokenUser(id=seed.customer.id, phone=seed.customer.telephone)
        item_id = order.items[0].id

        with pytest.raises(NotFoundError) as exc_info:
            OrderService(db_session).update_order(order.id, {
                "weight": 99,
                "state_id": "missing-state",
                "payment_method_id": "missing-method",
                "order_items": [{"id": item_id, "source_id": "missing-source"}],
            }, user)

        assert exc_info.value.code == "RELATION_NOT_FOUND"
        assert exc_info.value.message == (
            "Relations not found: State (missing-state) Payment method (missing-method) Source (missing-source)"
        )
        db_session.refresh(order)
        assert order.weight != 99
        assert order.state_id == seed.state_new.id

    def test_known_status_is_accepted(self, db_session, seed, order):
        user = TokenUser(id=seed.customer.id, phone=seed.customer.telephone)

        updated, _ = OrderService(db_session).update_order(
            order.id, {"status_id": order.status_id, "state_id": seed.state_canceled.id}, user
        )

        assert updated.state.name == "canceled"
