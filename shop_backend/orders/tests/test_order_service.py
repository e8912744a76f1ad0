# orders/tests/test_order_service.py

import uuid
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase

from orders.models import Order
from orders.services import order_service
from orders.services.exceptions import (
    ForbiddenError,
    InsufficientStockError,
    InvalidTransitionError,
    NotFoundError,
    OrderValidationError,
)
from permissions.roles import ROLE_ADMIN
from products.models import Product
from products.services import catalog

User = get_user_model()

ADDRESS = {
    "name": "John Doe",
    "phone": "9876543210",
    "street": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "zip_code": "560001",
    "country": "India",
}

AMOUNTS = {
    "items_total": "300000.00",
    "tax": "54000.00",
    "shipping": "0.00",
    "grand_total": "354000.00",
}


class OrderServiceTestCase(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(email="buyer@example.com", password="x")
        self.other = User.objects.create_user(email="other@example.com", password="x")
        self.admin = User.objects.create_user(
            email="admin@example.com", password="x", role=ROLE_ADMIN
        )
        self.laptop = Product.objects.create(
            name="Dell XPS 15",
            description="Laptop",
            brand="Dell",
            category=Product.Category.LAPTOPS,
            price=Decimal("150000.00"),
            images=["https://example.com/xps.jpg"],
            stock=5,
        )

    def _stock(self, product=None):
        product = product or self.laptop
        product.refresh_from_db()
        return product.stock

    def _create(self, quantity=2, product=None, owner=None):
        product = product or self.laptop
        return order_service.create_order(
            owner=owner or self.owner,
            line_items=[
                {
                    "product": product.id,
                    "name": product.name,
                    "quantity": quantity,
                    "unit_price": "150000.00",
                }
            ],
            shipping_address=ADDRESS,
            amounts=AMOUNTS,
        )

    def _to_cancel_requested(self, order):
        order_service.mark_paid(order_id=order.id, payment_reference={"id": "pi_sim_1"})
        return self._to_cancel_requested_after_payment(order)

    def _to_cancel_requested_after_payment(self, order):
        result = order_service.request_cancel(order_id=order.id, caller=self.owner)
        self.assertFalse(result.direct_cancel)
        return result.order


class CreateOrderTests(OrderServiceTestCase):
    def test_creation_reserves_exact_quantity(self):
        order = self._create(quantity=2)

        self.assertEqual(order.status, Order.Status.PENDING)
        self.assertFalse(order.is_paid)
        self.assertEqual(self._stock(), 3)
        self.assertEqual(order.grand_total, Decimal("354000.00"))

        item = order.items.get()
        self.assertEqual(item.quantity, 2)
        self.assertEqual(item.product_id, self.laptop.id)
        self.assertEqual(item.image, "https://example.com/xps.jpg")

    def test_insufficient_stock_rejects_whole_order(self):
        with self.assertRaisesMessage(
            InsufficientStockError, "Insufficient stock for Dell XPS 15. Available: 5"
        ):
            self._create(quantity=10)

        self.assertEqual(self._stock(), 5)
        self.assertFalse(Order.objects.exists())

    def test_repeated_product_lines_are_checked_together(self):
        with self.assertRaises(InsufficientStockError):
            order_service.create_order(
                owner=self.owner,
                line_items=[
                    {"product": self.laptop.id, "quantity": 3},
                    {"product": self.laptop.id, "quantity": 3},
                ],
                shipping_address=ADDRESS,
                amounts=AMOUNTS,
            )

        self.assertEqual(self._stock(), 5)
        self.assertFalse(Order.objects.exists())

    def test_one_bad_line_leaves_other_products_untouched(self):
        phone = Product.objects.create(
            name="iPhone 15 Pro Max",
            description="Phone",
            brand="Apple",
            category=Product.Category.SMARTPHONES,
            price=Decimal("159900.00"),
            stock=1,
        )

        with self.assertRaises(InsufficientStockError):
            order_service.create_order(
                owner=self.owner,
                line_items=[
                    {"product": self.laptop.id, "quantity": 1},
                    {"product": phone.id, "quantity": 2},
                ],
                shipping_address=ADDRESS,
                amounts=AMOUNTS,
            )

        self.assertEqual(self._stock(), 5)
        self.assertEqual(self._stock(phone), 1)

    def test_lost_reservation_race_rolls_back_whole_order(self):
        real_find_product = catalog.find_product

        def stale_find_product(product_id):
            # availability read sees stock that another order has since taken
            product = real_find_product(product_id)
            product.stock = 99
            return product

        with mock.patch.object(catalog, "find_product", side_effect=stale_find_product):
            with self.assertRaisesMessage(
                InsufficientStockError, "Insufficient stock for Dell XPS 15. Available: 5"
            ):
                self._create(quantity=10)

        self.assertFalse(Order.objects.exists())
        self.assertEqual(self._stock(), 5)

    def test_unknown_product_is_not_found(self):
        with self.assertRaises(NotFoundError):
            order_service.create_order(
                owner=self.owner,
                line_items=[{"product": uuid.uuid4(), "name": "Ghost", "quantity": 1}],
                shipping_address=ADDRESS,
                amounts=AMOUNTS,
            )

        self.assertFalse(Order.objects.exists())

    def test_empty_items_is_validation_error(self):
        with self.assertRaisesMessage(OrderValidationError, "No order items"):
            order_service.create_order(
                owner=self.owner,
                line_items=[],
                shipping_address=ADDRESS,
                amounts=AMOUNTS,
            )

    def test_invalid_quantity_and_amounts(self):
        with self.assertRaises(OrderValidationError):
            self._create(quantity=0)

        with self.assertRaises(OrderValidationError):
            order_service.create_order(
                owner=self.owner,
                line_items=[{"product": self.laptop.id, "quantity": 1}],
                shipping_address=ADDRESS,
                amounts={**AMOUNTS, "tax": "-1"},
            )

        self.assertEqual(self._stock(), 5)

    def test_missing_snapshot_fields_come_from_catalog(self):
        order = order_service.create_order(
            owner=self.owner,
            line_items=[{"product": self.laptop.id, "quantity": 1}],
            shipping_address=ADDRESS,
            amounts=AMOUNTS,
        )

        item = order.items.get()
        self.assertEqual(item.name, "Dell XPS 15")
        self.assertEqual(item.unit_price, Decimal("150000.00"))


class PaymentAndStatusTests(OrderServiceTestCase):
    def test_mark_paid_moves_to_processing(self):
        order = self._create()

        paid = order_service.mark_paid(
            order_id=order.id,
            payment_reference={"id": "pi_sim_1", "status": "succeeded"},
        )

        self.assertTrue(paid.is_paid)
        self.assertIsNotNone(paid.paid_at)
        self.assertEqual(paid.status, Order.Status.PROCESSING)
        self.assertEqual(paid.payment_reference["id"], "pi_sim_1")

    def test_repeat_payment_is_a_no_op(self):
        order = self._create()
        first = order_service.mark_paid(order_id=order.id, payment_reference={"id": "pi_sim_1"})
        order_service.set_status(order_id=order.id, status=Order.Status.SHIPPED)

        again = order_service.mark_paid(order_id=order.id, payment_reference={"id": "pi_sim_2"})

        self.assertEqual(again.status, Order.Status.SHIPPED)
        self.assertEqual(again.paid_at, first.paid_at)
        self.assertEqual(again.payment_reference["id"], "pi_sim_1")

    def test_mark_paid_unknown_order(self):
        with self.assertRaises(NotFoundError):
            order_service.mark_paid(order_id=uuid.uuid4(), payment_reference={})

    def test_delivered_stamps_delivery(self):
        order = self._create()

        delivered = order_service.set_status(order_id=order.id, status="delivered")

        self.assertTrue(delivered.is_delivered)
        self.assertIsNotNone(delivered.delivered_at)

    def test_admin_override_ignores_previous_status(self):
        order = self._create()
        order_service.set_status(order_id=order.id, status="delivered")

        back = order_service.set_status(order_id=order.id, status="pending")
        self.assertEqual(back.status, Order.Status.PENDING)

    def test_admin_cannot_set_cancel_requested(self):
        order = self._create()

        with self.assertRaises(OrderValidationError):
            order_service.set_status(order_id=order.id, status="cancel_requested")

    def test_admin_force_cancel_keeps_stock_reserved(self):
        order = self._create(quantity=2)

        with self.assertLogs("orders.services.order_service", level="WARNING") as logs:
            cancelled = order_service.set_status(order_id=order.id, status="cancelled")

        self.assertEqual(cancelled.status, Order.Status.CANCELLED)
        self.assertEqual(self._stock(), 3)
        self.assertTrue(any("without stock restoration" in line for line in logs.output))


class CancellationFlowTests(OrderServiceTestCase):
    def test_pending_cancel_restores_stock(self):
        order = self._create(quantity=2)
        self.assertEqual(self._stock(), 3)

        result = order_service.request_cancel(order_id=order.id, caller=self.owner)

        self.assertTrue(result.direct_cancel)
        self.assertEqual(result.order.status, Order.Status.CANCELLED)
        self.assertEqual(result.order.cancel_reason, "Cancelled by user")
        self.assertEqual(self._stock(), 5)

    def test_processing_cancel_then_approve(self):
        order = self._create(quantity=2)
        order_service.mark_paid(order_id=order.id, payment_reference={"id": "pi_sim_1"})

        result = order_service.request_cancel(
            order_id=order.id, caller=self.owner, reason="Changed my mind"
        )

        self.assertFalse(result.direct_cancel)
        self.assertEqual(result.order.status, Order.Status.CANCEL_REQUESTED)
        self.assertEqual(result.order.cancel_reason, "Changed my mind")
        self.assertIsNotNone(result.order.cancel_requested_at)
        self.assertEqual(self._stock(), 3)

        approved = order_service.approve_cancel_request(order_id=order.id)

        self.assertEqual(approved.status, Order.Status.CANCELLED)
        self.assertEqual(self._stock(), 5)

    def test_processing_cancel_then_reject(self):
        order = self._create(quantity=2)
        self._to_cancel_requested(order)

        rejected = order_service.reject_cancel_request(order_id=order.id)

        self.assertEqual(rejected.status, Order.Status.PROCESSING)
        self.assertIsNone(rejected.cancel_reason)
        self.assertIsNone(rejected.cancel_requested_at)
        self.assertEqual(self._stock(), 3)

    def test_default_request_reason(self):
        order = self._create()
        requested = self._to_cancel_requested(order)
        self.assertEqual(requested.cancel_reason, "Cancellation requested by user")

    def test_blank_reason_uses_default(self):
        order = self._create()
        result = order_service.request_cancel(order_id=order.id, caller=self.owner, reason="   ")
        self.assertEqual(result.order.cancel_reason, "Cancelled by user")

    def test_double_cancel_rejected_without_extra_restoration(self):
        order = self._create(quantity=2)
        order_service.request_cancel(order_id=order.id, caller=self.owner)
        self.assertEqual(self._stock(), 5)

        with self.assertRaisesMessage(InvalidTransitionError, "Order is already cancelled"):
            order_service.request_cancel(order_id=order.id, caller=self.owner)

        self.assertEqual(self._stock(), 5)

    def test_second_request_while_pending_approval_is_rejected(self):
        order = self._create()
        self._to_cancel_requested(order)

        with self.assertRaisesMessage(
            InvalidTransitionError, "Cancel request is already pending admin approval"
        ):
            order_service.request_cancel(order_id=order.id, caller=self.owner)

    def test_approve_twice_restores_once(self):
        order = self._create(quantity=2)
        self._to_cancel_requested(order)
        order_service.approve_cancel_request(order_id=order.id)

        with self.assertRaises(InvalidTransitionError):
            order_service.approve_cancel_request(order_id=order.id)

        self.assertEqual(self._stock(), 5)

    def test_payment_after_direct_cancel_cannot_release_stock_again(self):
        order = self._create(quantity=2)
        order_service.request_cancel(order_id=order.id, caller=self.owner)
        self.assertEqual(self._stock(), 5)

        order_service.mark_paid(order_id=order.id, payment_reference={"id": "pi_sim_1"})
        self._to_cancel_requested_after_payment(order)

        with self.assertLogs("orders.services.order_service", level="WARNING") as logs:
            approved = order_service.approve_cancel_request(order_id=order.id)

        self.assertEqual(approved.status, Order.Status.CANCELLED)
        self.assertEqual(self._stock(), 5)
        self.assertTrue(any("already released" in line for line in logs.output))

    def test_admin_reopen_after_direct_cancel_cannot_release_stock_again(self):
        order = self._create(quantity=2)
        order_service.request_cancel(order_id=order.id, caller=self.owner)
        released_at = Order.objects.get(id=order.id).stock_released_at
        self.assertIsNotNone(released_at)

        order_service.set_status(order_id=order.id, status="pending")
        result = order_service.request_cancel(order_id=order.id, caller=self.owner)

        self.assertTrue(result.direct_cancel)
        self.assertEqual(result.order.status, Order.Status.CANCELLED)
        self.assertEqual(result.order.stock_released_at, released_at)
        self.assertEqual(self._stock(), 5)

    def test_force_cancelled_order_reopened_releases_once(self):
        order = self._create(quantity=2)
        order_service.set_status(order_id=order.id, status="cancelled")
        self.assertIsNone(Order.objects.get(id=order.id).stock_released_at)

        order_service.set_status(order_id=order.id, status="pending")
        order_service.request_cancel(order_id=order.id, caller=self.owner)

        self.assertEqual(self._stock(), 5)

    def test_decisions_require_pending_request(self):
        order = self._create()

        with self.assertRaisesMessage(
            InvalidTransitionError, "No cancel request pending for this order"
        ):
            order_service.approve_cancel_request(order_id=order.id)

        with self.assertRaises(InvalidTransitionError):
            order_service.reject_cancel_request(order_id=order.id)

    def test_shipped_and_delivered_cannot_be_cancelled(self):
        for target in ("shipped", "delivered"):
            with self.subTest(status=target):
                order = self._create(quantity=1)
                order_service.set_status(order_id=order.id, status=target)
                stock_before = self._stock()

                with self.assertRaises(InvalidTransitionError):
                    order_service.request_cancel(order_id=order.id, caller=self.owner)

                order.refresh_from_db()
                self.assertEqual(order.status, target)
                self.assertIsNone(order.cancel_reason)
                self.assertEqual(self._stock(), stock_before)

    def test_non_owner_cannot_cancel_in_any_status(self):
        order = self._create()

        for target in ("pending", "processing", "shipped"):
            with self.subTest(status=target):
                order_service.set_status(order_id=order.id, status=target)

                with self.assertRaises(ForbiddenError):
                    order_service.request_cancel(order_id=order.id, caller=self.other)

        self.assertEqual(self._stock(), 3)

    def test_admin_cannot_use_customer_cancel(self):
        order = self._create()

        with self.assertRaises(ForbiddenError):
            order_service.request_cancel(order_id=order.id, caller=self.admin)

    def test_cancel_unknown_order(self):
        with self.assertRaises(NotFoundError):
            order_service.request_cancel(order_id=uuid.uuid4(), caller=self.owner)

    def test_restore_to_deleted_product_is_logged_and_cancel_succeeds(self):
        order = self._create(quantity=2)
        self.laptop.delete()

        with self.assertLogs("orders.services.order_service", level="ERROR") as logs:
            result = order_service.request_cancel(order_id=order.id, caller=self.owner)

        self.assertEqual(result.order.status, Order.Status.CANCELLED)
        self.assertTrue(any("Dell XPS 15" in line for line in logs.output))


class ReadTests(OrderServiceTestCase):
    def test_get_order_owner_or_admin(self):
        order = self._create()

        self.assertEqual(order_service.get_order(order_id=order.id, caller=self.owner), order)
        self.assertEqual(order_service.get_order(order_id=order.id, caller=self.admin), order)

        with self.assertRaises(ForbiddenError):
            order_service.get_order(order_id=order.id, caller=self.other)

    def test_get_order_not_found(self):
        with self.assertRaises(NotFoundError):
            order_service.get_order(order_id=uuid.uuid4(), caller=self.admin)

        with self.assertRaises(NotFoundError):
            order_service.get_order(order_id="not-a-uuid", caller=self.admin)

    def test_lists(self):
        mine = self._create(quantity=1)
        theirs = self._create(quantity=1, owner=self.other)

        self.assertEqual(list(order_service.list_own_orders(owner=self.owner)), [mine])
        self.assertEqual(
            {o.id for o in order_service.list_all_orders()}, {mine.id, theirs.id}
        )
