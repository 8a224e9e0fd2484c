"""Tests for the OrderFulfillmentService domain service."""

import pytest

from pharmstock.domain.exceptions import PartialFailureError, ValidationError
from pharmstock.domain.model.order import Order, OrderLineItem
from pharmstock.domain.model.product import Product
from pharmstock.domain.model.stock_movement import MovementType, ReasonCode
from pharmstock.domain.model.value_objects import Money
from pharmstock.domain.service.order_fulfillment_service import OrderFulfillmentService
from pharmstock.domain.service.stock_ledger_service import StockLedgerService
from tests.fakes import (
    FakeIdentityProvider,
    FakeProductRepository,
    FakeStockLedgerRepository,
    RecordingNotifier,
    TickingClock,
)


def _setup(notifier=None):
    products = FakeProductRepository([
        Product(id="P1", name="Paracetamol 500mg", price=Money.of("1.20"), stock_quantity=50),
        Product(id="P2", name="Cetirizine 10mg", price=Money.of("0.80"), stock_quantity=12),
        Product(id="P3", name="Insulin pen", price=Money.of("30.00"), stock_quantity=3,
                min_stock_level=2),
    ])
    ledger_repo = FakeStockLedgerRepository(products)
    ledger = StockLedgerService(
        products, ledger_repo, FakeIdentityProvider(), clock=TickingClock(), backoff_base=0
    )
    notifier = notifier or RecordingNotifier()
    service = OrderFulfillmentService(ledger, products, notifier)
    return service, products, ledger_repo, notifier


def _item(product_id, quantity, name=None):
    return OrderLineItem(product_id, name or f"Item {product_id}", quantity, Money.of("1.00"))


def _order(*items, order_id="7"):
    return Order(id=order_id, customer_name="R. Iyer", items=list(items))


class TestReduceStock:

    def test_each_item_gets_an_out_movement(self):
        service, products, ledger_repo, _ = _setup()
        service.reduce_stock_for_order(_order(_item("P1", 5), _item("P2", 2)))

        assert products.get_by_id("P1").stock_quantity == 45
        assert products.get_by_id("P2").stock_quantity == 10
        assert {m.type for m in ledger_repo.movements} == {MovementType.OUT}
        assert {m.reason for m in ledger_repo.movements} == {"Order delivered: #7"}
        assert {m.reason_code for m in ledger_repo.movements} == {ReasonCode.ORDER_DELIVERED}
        assert {m.order_id for m in ledger_repo.movements} == {"7"}

    def test_notes_name_the_product(self):
        service, _, ledger_repo, _ = _setup()
        service.reduce_stock_for_order(_order(_item("P1", 1, name="Paracetamol 500mg")))
        assert ledger_repo.movements[0].notes.endswith("Product: Paracetamol 500mg")

    def test_failed_item_does_not_stop_the_others(self):
        service, products, ledger_repo, _ = _setup()
        order = _order(_item("P1", 5), _item(None, 1, name="Loose strip"), _item("P2", 2))

        with pytest.raises(PartialFailureError) as exc_info:
            service.reduce_stock_for_order(order)

        assert exc_info.value.failed_product_ids == [None]
        assert "Loose strip" in str(exc_info.value)
        assert isinstance(exc_info.value.failures[0].cause, ValidationError)
        assert products.get_by_id("P1").stock_quantity == 45
        assert products.get_by_id("P2").stock_quantity == 10
        assert len(ledger_repo.movements) == 2

    def test_unknown_product_is_reported(self):
        service, products, _, _ = _setup()
        with pytest.raises(PartialFailureError) as exc_info:
            service.reduce_stock_for_order(_order(_item("P1", 1), _item("ghost", 1)))
        assert exc_info.value.failed_product_ids == ["ghost"]
        assert products.get_by_id("P1").stock_quantity == 49

    def test_over_reduction_clamps(self):
        service, products, _, _ = _setup()
        service.reduce_stock_for_order(_order(_item("P3", 10)))
        assert products.get_by_id("P3").stock_quantity == 0

    def test_empty_order_is_a_no_op(self):
        service, _, ledger_repo, notifier = _setup()
        service.reduce_stock_for_order(_order())
        assert ledger_repo.movements == []
        assert notifier.alerts == []

    def test_zero_quantity_item_is_skipped(self):
        service, products, ledger_repo, _ = _setup()
        service.reduce_stock_for_order(_order(_item("P1", 0), _item("P2", 1)))
        assert products.get_by_id("P1").stock_quantity == 50
        assert [m.product_id for m in ledger_repo.movements] == ["P2"]


class TestLowStockAlerts:

    def test_alert_when_crossing_threshold(self):
        service, _, _, notifier = _setup()
        service.reduce_stock_for_order(_order(_item("P2", 3)))
        (alert,) = notifier.alerts
        assert alert.product_id == "P2"
        assert alert.current_stock == 9
        assert alert.message == "Cetirizine 10mg is running low. Current stock: 9"

    def test_alert_when_reaching_zero(self):
        service, _, _, notifier = _setup()
        service.reduce_stock_for_order(_order(_item("P3", 3)))
        assert [a.current_stock for a in notifier.alerts] == [0]

    def test_no_alert_above_threshold(self):
        service, _, _, notifier = _setup()
        service.reduce_stock_for_order(_order(_item("P1", 1)))
        assert notifier.alerts == []

    def test_one_alert_per_product(self):
        service, _, _, notifier = _setup()
        service.reduce_stock_for_order(_order(_item("P2", 1), _item("P2", 2)))
        assert len(notifier.alerts) == 1
        assert notifier.alerts[0].current_stock == 9

    def test_alerts_still_sent_on_partial_failure(self):
        service, _, _, notifier = _setup()
        with pytest.raises(PartialFailureError):
            service.reduce_stock_for_order(_order(_item("P2", 5), _item("ghost", 1)))
        assert [a.product_id for a in notifier.alerts] == ["P2"]

    def test_notifier_failure_is_swallowed(self):
        service, products, _, _ = _setup(notifier=RecordingNotifier(fail=True))
        service.reduce_stock_for_order(_order(_item("P2", 5)))
        assert products.get_by_id("P2").stock_quantity == 7


class TestRestoreStock:

    def test_reduce_then_restore_round_trip(self):
        service, products, ledger_repo, _ = _setup()
        order = _order(_item("P1", 5), _item("P2", 2))
        service.reduce_stock_for_order(order)
        service.restore_stock_for_order(order)

        assert products.get_by_id("P1").stock_quantity == 50
        assert products.get_by_id("P2").stock_quantity == 12
        restored = ledger_repo.movements[2:]
        assert {m.type for m in restored} == {MovementType.IN}
        assert {m.reason for m in restored} == {"Order cancelled/returned: #7"}
        assert {m.reason_code for m in restored} == {ReasonCode.ORDER_CANCELLED}

    def test_returned_reason_code(self):
        service, _, ledger_repo, _ = _setup()
        order = _order(_item("P1", 1))
        service.reduce_stock_for_order(order)
        service.restore_stock_for_order(order, returned=True)
        assert ledger_repo.movements[-1].reason_code == ReasonCode.ORDER_RETURNED

    def test_restore_counts_as_restock(self):
        service, products, ledger_repo, _ = _setup()
        order = _order(_item("P1", 1))
        service.reduce_stock_for_order(order)
        service.restore_stock_for_order(order)
        assert products.get_by_id("P1").last_restocked == ledger_repo.movements[-1].timestamp

    def test_items_never_reduced_are_not_restored(self):
        service, products, ledger_repo, _ = _setup()
        order = _order(_item("P1", 5), _item("P2", 2))
        ledger_repo.fail_next_commit = OSError("disk full")
        with pytest.raises(PartialFailureError):
            service.reduce_stock_for_order(order)
        assert products.get_by_id("P1").stock_quantity == 50

        service.restore_stock_for_order(order)

        assert products.get_by_id("P1").stock_quantity == 50
        assert products.get_by_id("P2").stock_quantity == 12
        assert [m.product_id for m in ledger_repo.movements] == ["P2", "P2"]

    def test_item_without_product_id_is_skipped(self):
        service, products, ledger_repo, _ = _setup()
        order = _order(_item(None, 1, name="Loose strip"), _item("P1", 1))
        with pytest.raises(PartialFailureError):
            service.reduce_stock_for_order(order)
        service.restore_stock_for_order(order)
        assert products.get_by_id("P1").stock_quantity == 50

    def test_nothing_to_restore_without_reduction(self):
        service, products, ledger_repo, _ = _setup()
        service.restore_stock_for_order(_order(_item("P1", 5)))
        assert products.get_by_id("P1").stock_quantity == 50
        assert ledger_repo.movements == []

    def test_repeat_restore_only_covers_what_is_outstanding(self):
        service, products, ledger_repo, _ = _setup()
        order = _order(_item("P1", 5), _item("P2", 2))
        service.reduce_stock_for_order(order)

        ledger_repo.fail_next_commit = OSError("disk full")
        with pytest.raises(PartialFailureError, match="restore stock") as exc_info:
            service.restore_stock_for_order(order)
        assert exc_info.value.failed_product_ids == ["P1"]
        assert products.get_by_id("P2").stock_quantity == 12

        service.restore_stock_for_order(order)
        assert products.get_by_id("P1").stock_quantity == 50
        assert products.get_by_id("P2").stock_quantity == 12

        service.restore_stock_for_order(order)
        assert len(ledger_repo.movements) == 4

    def test_same_product_on_two_lines(self):
        service, products, _, _ = _setup()
        order = _order(_item("P1", 2), _item("P1", 3))
        service.reduce_stock_for_order(order)
        service.restore_stock_for_order(order)
        assert products.get_by_id("P1").stock_quantity == 50

    def test_restore_sends_no_alerts(self):
        service, _, _, notifier = _setup()
        order = _order(_item("P1", 1))
        service.reduce_stock_for_order(order)
        service.restore_stock_for_order(order)
        assert notifier.alerts == []


class TestValidateStock:

    def test_sufficient_stock(self):
        service, _, _, _ = _setup()
        result = service.validate_stock_for_delivery(_order(_item("P1", 50), _item("P2", 12)))
        assert result.valid
        assert result.errors == []

    def test_collects_every_problem(self):
        service, _, _, _ = _setup()
        order = _order(
            _item("P3", 4),
            _item("ghost", 1, name="Ghost syrup"),
            _item(None, 1, name="Loose strip"),
        )
        result = service.validate_stock_for_delivery(order)
        assert not result.valid
        assert result.errors == [
            'Insufficient stock for "Insulin pen". Required: 4, Available: 3',
            'Product "Ghost syrup" not found in inventory',
            'Product "Loose strip" has no product ID',
        ]

    def test_empty_order(self):
        service, _, _, _ = _setup()
        result = service.validate_stock_for_delivery(_order())
        assert not result.valid
        assert result.errors == ["Order has no products"]

    def test_validation_is_read_only(self):
        service, products, ledger_repo, _ = _setup()
        service.validate_stock_for_delivery(_order(_item("P1", 5)))
        assert products.get_by_id("P1").stock_quantity == 50
        assert ledger_repo.movements == []
