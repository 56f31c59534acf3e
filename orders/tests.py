"""
Tests for order and order item bookkeeping.

Test Cases:
1. Adding an item sets its subtotal and the order total
2. Changing an item quantity recomputes subtotal and total
3. Removing the last item resets the total to 0.00
4. Insufficient stock rejects the item and leaves the total unchanged
5. Delivered orders cannot be cancelled
6. Client-supplied totals are discarded on save
7. Deleting an order deletes its items
8. Reconciliation repairs drifted subtotals and totals
9. REST endpoints map service errors to 400/404
10. A failed total update rolls back the item write
11. Admin item deletes recompute the order total
"""
from datetime import datetime, time, timedelta
from decimal import Decimal
from unittest.mock import patch

from django.contrib import admin
from django.test import RequestFactory, TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from catalog.models import Category, Product
from config.container import build_services
from core.exceptions import DomainValidationError, NotFoundError
from customers.models import Customer
from orders.calculations import calculate_subtotal, calculate_total
from orders.models import Order, OrderItem
from orders.tasks import generate_daily_order_report, reconcile_order_totals


class OrderFixturesMixin:
    """Shared catalogue, customer and order used by the test cases."""

    def create_fixtures(self):
        self.services = build_services()
        self.category = Category.objects.create(name='Electronics')
        self.mouse = Product.objects.create(
            name='Mouse Logitech MX Master',
            price=Decimal('79.99'),
            stock=50,
            category=self.category
        )
        self.laptop = Product.objects.create(
            name='Laptop HP Pavilion',
            price=Decimal('899.99'),
            stock=5,
            category=self.category
        )
        self.customer = Customer.objects.create(
            first_name='Juan',
            last_name='Perez',
            email='juan.perez@email.com'
        )
        self.order = self.services.orders.save(Order(
            order_number='ORD-TEST-001',
            customer=self.customer
        ))

    def add_item(self, product, quantity, order=None):
        return self.services.order_items.save(OrderItem(
            order=order or self.order,
            product=product,
            quantity=quantity,
            unit_price=product.price
        ))


class CalculationTestCase(TestCase):
    """Pure derived-value functions."""

    def test_subtotal_is_quantity_times_unit_price(self):
        self.assertEqual(calculate_subtotal(2, Decimal('79.99')), Decimal('159.98'))

    def test_subtotal_with_missing_input_is_zero(self):
        self.assertEqual(calculate_subtotal(None, Decimal('10.00')), Decimal('0.00'))
        self.assertEqual(calculate_subtotal(3, None), Decimal('0.00'))

    def test_subtotal_is_idempotent(self):
        first = calculate_subtotal(3, Decimal('29.99'))
        second = calculate_subtotal(3, Decimal('29.99'))
        self.assertEqual(first, second)
        self.assertEqual(first, Decimal('89.97'))

    def test_total_of_no_subtotals_is_zero(self):
        self.assertEqual(calculate_total([]), Decimal('0.00'))

    def test_total_sums_subtotals(self):
        total = calculate_total([Decimal('899.99'), Decimal('79.99'), Decimal('129.99')])
        self.assertEqual(total, Decimal('1109.97'))


class OrderTotalTestCase(OrderFixturesMixin, TestCase):
    """Order totals follow every item create/update/delete."""

    def setUp(self):
        self.create_fixtures()

    def test_new_order_starts_at_zero(self):
        self.assertEqual(self.order.total_amount, Decimal('0.00'))
        self.assertEqual(self.order.status, Order.Status.PENDING)

    def test_add_item_sets_subtotal_and_total(self):
        """
        Given: An empty order
        When: Adding 2 x 79.99
        Then: Subtotal and order total are both 159.98
        """
        item = self.add_item(self.mouse, 2)

        self.assertEqual(item.subtotal, Decimal('159.98'))
        self.order.refresh_from_db()
        self.assertEqual(self.order.total_amount, Decimal('159.98'))

    def test_update_quantity_recomputes_total(self):
        item = self.add_item(self.mouse, 2)

        item = self.services.order_items.update_quantity(item.pk, 3)

        self.assertEqual(item.subtotal, Decimal('239.97'))
        self.order.refresh_from_db()
        self.assertEqual(self.order.total_amount, Decimal('239.97'))

    def test_delete_last_item_resets_total(self):
        item = self.add_item(self.mouse, 2)

        self.services.order_items.delete_by_id(item.pk)

        self.order.refresh_from_db()
        self.assertEqual(self.order.total_amount, Decimal('0.00'))
        self.assertEqual(self.services.order_items.count_by_order_id(self.order.pk), 0)

    def test_total_spans_multiple_items(self):
        self.add_item(self.mouse, 2)
        self.add_item(self.laptop, 1)

        self.order.refresh_from_db()
        self.assertEqual(self.order.total_amount, Decimal('1059.97'))
        self.assertEqual(self.services.orders.calculate_total(self.order), Decimal('1059.97'))

    def test_insufficient_stock_leaves_total_unchanged(self):
        """
        Given: Laptop has 5 units in stock
        When: Requesting 10 units
        Then: Item is rejected, no item stored, total unchanged
        """
        self.add_item(self.mouse, 1)

        with self.assertRaises(DomainValidationError) as ctx:
            self.add_item(self.laptop, 10)

        self.assertIn('Insufficient stock', str(ctx.exception))
        self.order.refresh_from_db()
        self.assertEqual(self.order.total_amount, Decimal('79.99'))
        self.assertEqual(OrderItem.objects.filter(order=self.order).count(), 1)

    def test_update_quantity_beyond_stock_is_rejected(self):
        item = self.add_item(self.laptop, 2)

        with self.assertRaises(DomainValidationError):
            self.services.order_items.update_quantity(item.pk, 6)

        item.refresh_from_db()
        self.assertEqual(item.quantity, 2)
        self.order.refresh_from_db()
        self.assertEqual(self.order.total_amount, Decimal('1799.98'))

    def test_exact_stock_is_accepted(self):
        item = self.add_item(self.laptop, 5)
        self.assertEqual(item.subtotal, Decimal('4499.95'))

    def test_stock_is_not_decremented(self):
        self.add_item(self.laptop, 3)
        self.laptop.refresh_from_db()
        self.assertEqual(self.laptop.stock, 5)

    def test_non_positive_quantity_is_rejected(self):
        with self.assertRaises(DomainValidationError):
            self.add_item(self.mouse, 0)
        item = self.add_item(self.mouse, 1)
        with self.assertRaises(DomainValidationError):
            self.services.order_items.update_quantity(item.pk, -1)

    def test_negative_unit_price_is_rejected(self):
        with self.assertRaises(DomainValidationError):
            self.services.order_items.save(OrderItem(
                order=self.order,
                product=self.mouse,
                quantity=1,
                unit_price=Decimal('-1.00')
            ))

    def test_unit_price_with_three_decimals_is_rejected(self):
        """
        Given: A unit price of 79.999 (the column keeps 2 places)
        When: Adding the item
        Then: It is rejected instead of being rounded to 80.00 on storage
        """
        with self.assertRaises(DomainValidationError):
            self.services.order_items.save(OrderItem(
                order=self.order,
                product=self.mouse,
                quantity=2,
                unit_price='79.999'
            ))

        self.assertEqual(OrderItem.objects.filter(order=self.order).count(), 0)
        self.order.refresh_from_db()
        self.assertEqual(self.order.total_amount, Decimal('0.00'))

    def test_unit_price_with_trailing_zero_is_accepted(self):
        item = self.services.order_items.save(OrderItem(
            order=self.order,
            product=self.mouse,
            quantity=2,
            unit_price='79.990'
        ))
        item.refresh_from_db()
        self.assertEqual(item.subtotal, Decimal('159.98'))

    def test_failed_total_update_rolls_back_new_item(self):
        """
        Given: The parent total update fails after the item row is written
        When: Adding an item
        Then: The error propagates and no item or total change is visible
        """
        with patch.object(self.services.orders, 'recalculate_total', side_effect=RuntimeError('db down')):
            with self.assertRaises(RuntimeError):
                self.add_item(self.mouse, 2)

        self.assertFalse(OrderItem.objects.filter(order=self.order).exists())
        self.order.refresh_from_db()
        self.assertEqual(self.order.total_amount, Decimal('0.00'))

    def test_failed_total_update_rolls_back_quantity_change(self):
        item = self.add_item(self.mouse, 2)

        with patch.object(self.services.orders, 'recalculate_total', side_effect=RuntimeError('db down')):
            with self.assertRaises(RuntimeError):
                self.services.order_items.update_quantity(item.pk, 3)

        item.refresh_from_db()
        self.assertEqual(item.quantity, 2)
        self.assertEqual(item.subtotal, Decimal('159.98'))
        self.order.refresh_from_db()
        self.assertEqual(self.order.total_amount, Decimal('159.98'))

    def test_failed_total_update_rolls_back_item_delete(self):
        item = self.add_item(self.mouse, 2)

        with patch.object(self.services.orders, 'recalculate_total', side_effect=RuntimeError('db down')):
            with self.assertRaises(RuntimeError):
                self.services.order_items.delete_by_id(item.pk)

        self.assertTrue(OrderItem.objects.filter(pk=item.pk).exists())
        self.order.refresh_from_db()
        self.assertEqual(self.order.total_amount, Decimal('159.98'))

    def test_item_for_unknown_product_is_rejected(self):
        with self.assertRaises(DomainValidationError):
            self.services.order_items.save(OrderItem(
                order=self.order,
                product_id=99999,
                quantity=1,
                unit_price=Decimal('1.00')
            ))

    def test_update_quantity_of_missing_item(self):
        with self.assertRaises(NotFoundError):
            self.services.order_items.update_quantity(99999, 1)

    def test_moving_item_recomputes_both_orders(self):
        other = self.services.orders.save(Order(order_number='ORD-TEST-002', customer=self.customer))
        item = self.add_item(self.mouse, 2)

        item.order = other
        self.services.order_items.save(item)

        self.order.refresh_from_db()
        other.refresh_from_db()
        self.assertEqual(self.order.total_amount, Decimal('0.00'))
        self.assertEqual(other.total_amount, Decimal('159.98'))

    def test_unit_price_is_kept_after_product_price_change(self):
        item = self.add_item(self.mouse, 2)

        self.services.products.update_price(self.mouse.pk, Decimal('99.99'))

        item.refresh_from_db()
        self.assertEqual(item.unit_price, Decimal('79.99'))
        self.order.refresh_from_db()
        self.assertEqual(self.order.total_amount, Decimal('159.98'))


class OrderLifecycleTestCase(OrderFixturesMixin, TestCase):
    """Order creation rules, status changes and deletion."""

    def setUp(self):
        self.create_fixtures()

    def test_client_total_is_discarded(self):
        order = self.services.orders.save(Order(
            order_number='ORD-TEST-002',
            customer=self.customer,
            total_amount=Decimal('999.99')
        ))
        self.assertEqual(order.total_amount, Decimal('0.00'))

    def test_update_recomputes_total_from_items(self):
        self.add_item(self.mouse, 2)
        self.order.refresh_from_db()
        self.order.total_amount = Decimal('1.00')
        self.order.notes = 'Leave at the door'

        order = self.services.orders.save(self.order)

        self.assertEqual(order.total_amount, Decimal('159.98'))

    def test_duplicate_order_number_is_rejected(self):
        with self.assertRaises(DomainValidationError):
            self.services.orders.save(Order(order_number='ORD-TEST-001', customer=self.customer))

    def test_blank_order_number_is_rejected(self):
        with self.assertRaises(DomainValidationError):
            self.services.orders.save(Order(order_number='  ', customer=self.customer))

    def test_unknown_customer_is_rejected(self):
        with self.assertRaises(DomainValidationError):
            self.services.orders.save(Order(order_number='ORD-TEST-003', customer_id=99999))

    def test_cancel_pending_order(self):
        order = self.services.orders.cancel(self.order.pk)
        self.assertEqual(order.status, Order.Status.CANCELLED)
        self.assertTrue(order.is_cancelled)

    def test_cancel_delivered_order_is_rejected(self):
        self.services.orders.update_status(self.order.pk, Order.Status.DELIVERED)

        with self.assertRaises(DomainValidationError) as ctx:
            self.services.orders.cancel(self.order.pk)

        self.assertEqual(str(ctx.exception), 'Cannot cancel a delivered order')
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.Status.DELIVERED)

    def test_any_status_transition_is_allowed(self):
        self.services.orders.update_status(self.order.pk, Order.Status.CANCELLED)
        order = self.services.orders.update_status(self.order.pk, 'pending')
        self.assertEqual(order.status, Order.Status.PENDING)

    def test_unknown_status_is_rejected(self):
        with self.assertRaises(DomainValidationError):
            self.services.orders.update_status(self.order.pk, 'LOST')

    def test_delete_order_deletes_items(self):
        item = self.add_item(self.mouse, 2)

        self.services.orders.delete_by_id(self.order.pk)

        self.assertFalse(Order.objects.filter(pk=self.order.pk).exists())
        self.assertFalse(OrderItem.objects.filter(pk=item.pk).exists())
        self.assertTrue(Product.objects.filter(pk=self.mouse.pk).exists())

    def test_delete_missing_order(self):
        with self.assertRaises(NotFoundError):
            self.services.orders.delete_by_id(99999)

    def test_find_with_items_by_customer(self):
        self.add_item(self.mouse, 1)
        self.add_item(self.laptop, 1)

        orders = self.services.orders.find_with_items_by_customer(self.customer.pk)

        self.assertEqual(len(orders), 1)
        with self.assertNumQueries(0):
            self.assertEqual(len(orders[0].items.all()), 2)

    def test_check_product_stock(self):
        self.assertTrue(self.services.orders.check_product_stock(self.laptop.pk, 5))
        self.assertFalse(self.services.orders.check_product_stock(self.laptop.pk, 6))
        self.assertFalse(self.services.orders.check_product_stock(99999, 1))

    def test_check_product_stock_requires_positive_quantity(self):
        with self.assertRaises(DomainValidationError):
            self.services.orders.check_product_stock(self.laptop.pk, None)
        with self.assertRaises(DomainValidationError):
            self.services.orders.check_product_stock(self.laptop.pk, 0)

    def test_find_by_order_date_between(self):
        now = timezone.now()
        found = self.services.orders.find_by_order_date_between(now - timedelta(days=1), now + timedelta(days=1))
        self.assertEqual([o.pk for o in found], [self.order.pk])

        self.assertEqual(
            self.services.orders.find_by_order_date_between(now + timedelta(days=1), now + timedelta(days=2)),
            []
        )
        with self.assertRaises(DomainValidationError):
            self.services.orders.find_by_order_date_between(None, now)

    def test_statistics_exclude_cancelled_revenue(self):
        self.add_item(self.mouse, 2)
        other = self.services.orders.save(Order(order_number='ORD-TEST-002', customer=self.customer))
        self.add_item(self.laptop, 1, order=other)
        self.services.orders.cancel(other.pk)

        stats = self.services.orders.statistics()

        self.assertEqual(stats['total_orders'], 2)
        self.assertEqual(stats['pending_orders'], 1)
        self.assertEqual(stats['cancelled_orders'], 1)
        self.assertEqual(stats['total_revenue'], Decimal('159.98'))
        self.assertEqual(stats['avg_order_value'], Decimal('159.98'))


class ReconciliationTestCase(OrderFixturesMixin, TestCase):
    """Repairing totals changed behind the services' back."""

    def setUp(self):
        self.create_fixtures()
        self.item = self.add_item(self.mouse, 2)

    def test_reconcile_repairs_drift(self):
        OrderItem.objects.filter(pk=self.item.pk).update(subtotal=Decimal('1.00'))
        Order.objects.filter(pk=self.order.pk).update(total_amount=Decimal('1.00'))

        corrected = self.services.orders.reconcile_totals()

        self.assertEqual(corrected, 1)
        self.item.refresh_from_db()
        self.order.refresh_from_db()
        self.assertEqual(self.item.subtotal, Decimal('159.98'))
        self.assertEqual(self.order.total_amount, Decimal('159.98'))

    def test_reconcile_consistent_data(self):
        self.assertEqual(self.services.orders.reconcile_totals(), 0)

    def test_reconcile_task(self):
        Order.objects.filter(pk=self.order.pk).update(total_amount=Decimal('0.00'))

        result = reconcile_order_totals()

        self.assertEqual(result, {'corrected': 1})

    def test_daily_report_covers_previous_day(self):
        yesterday = timezone.localdate() - timedelta(days=1)
        Order.objects.filter(pk=self.order.pk).update(
            order_date=timezone.make_aware(datetime.combine(yesterday, time(12, 0)))
        )

        report = generate_daily_order_report()

        self.assertEqual(report['total_orders'], 1)
        self.assertEqual(report['pending_orders'], 1)
        self.assertEqual(report['total_revenue'], '159.98')
        self.assertEqual(report['date'], yesterday.isoformat())


@override_settings(RATE_LIMIT_ENABLED=False)
class OrderAPITestCase(OrderFixturesMixin, APITestCase):
    """REST endpoints for orders and order items."""

    def setUp(self):
        self.create_fixtures()

    def test_health_check(self):
        response = self.client.get('/health/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {'status': 'healthy', 'service': 'order-api'})

    def test_create_order_ignores_total(self):
        response = self.client.post(reverse('orders:order-list'), {
            'order_number': 'ORD-API-001',
            'customer_id': self.customer.pk,
            'total_amount': '500.00'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_amount'], '0.00')
        self.assertEqual(response.data['status'], Order.Status.PENDING)

    def test_create_order_duplicate_number(self):
        response = self.client.post(reverse('orders:order-list'), {
            'order_number': 'ORD-TEST-001',
            'customer_id': self.customer.pk
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Validation Error')

    def test_add_item_updates_order(self):
        response = self.client.post(reverse('orders:order-item-list'), {
            'order_id': self.order.pk,
            'product_id': self.mouse.pk,
            'quantity': 2,
            'unit_price': '79.99'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['subtotal'], '159.98')

        response = self.client.get(reverse('orders:order-detail', args=[self.order.pk]))
        self.assertEqual(response.data['total_amount'], '159.98')
        self.assertEqual(len(response.data['items']), 1)

    def test_add_item_insufficient_stock(self):
        response = self.client.post(reverse('orders:order-item-list'), {
            'order_id': self.order.pk,
            'product_id': self.laptop.pk,
            'quantity': 10,
            'unit_price': '899.99'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Insufficient stock', response.data['detail'])

    def test_patch_item_quantity(self):
        item = self.add_item(self.mouse, 2)

        response = self.client.patch(
            reverse('orders:order-item-quantity', args=[item.pk]), {'quantity': 3}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['subtotal'], '239.97')

    def test_delete_item(self):
        item = self.add_item(self.mouse, 2)

        response = self.client.delete(reverse('orders:order-item-detail', args=[item.pk]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.order.refresh_from_db()
        self.assertEqual(self.order.total_amount, Decimal('0.00'))

    def test_order_not_found(self):
        response = self.client.get(reverse('orders:order-detail', args=[99999]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['detail'], 'Order not found with id: 99999')

    def test_order_by_number(self):
        response = self.client.get(reverse('orders:order-by-number', args=['ORD-TEST-001']))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.order.pk)

        response = self.client.get(reverse('orders:order-by-number', args=['ORD-NOPE']))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {
            'error': 'Not Found',
            'detail': 'Order not found with order number: ORD-NOPE'
        })

    def test_orders_by_status(self):
        response = self.client.get(reverse('orders:order-by-status', args=['pending']))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

        response = self.client.get(reverse('orders:order-by-status', args=['LOST']))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_update_and_cancel_delivered(self):
        response = self.client.patch(
            reverse('orders:order-status', args=[self.order.pk]), {'status': 'DELIVERED'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Order.Status.DELIVERED)

        response = self.client.post(reverse('orders:order-cancel', args=[self.order.pk]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['detail'], 'Cannot cancel a delivered order')

    def test_counts(self):
        self.add_item(self.mouse, 1)
        self.add_item(self.laptop, 1)

        response = self.client.get(reverse('orders:order-count'))
        self.assertEqual(response.data, {'count': 1})

        response = self.client.get(reverse('orders:order-item-count-by-order', args=[self.order.pk]))
        self.assertEqual(response.data['count'], 2)

    def test_stats(self):
        self.add_item(self.mouse, 2)

        response = self.client.get(reverse('orders:order-stats'), {'customer_id': self.customer.pk})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_orders'], 1)
        self.assertEqual(response.data['total_revenue'], '159.98')


class OrderItemAdminTestCase(OrderFixturesMixin, TestCase):
    """Admin deletes go through OrderItemService; amounts cannot be edited."""

    def setUp(self):
        self.create_fixtures()
        self.model_admin = admin.site._registry[OrderItem]
        self.request = RequestFactory().post('/admin/orders/orderitem/')

    def test_amount_fields_are_read_only(self):
        readonly = self.model_admin.get_readonly_fields(self.request)
        for field in ('order', 'product', 'quantity', 'unit_price', 'subtotal'):
            self.assertIn(field, readonly)
        self.assertFalse(self.model_admin.has_add_permission(self.request))

    def test_delete_model_recomputes_total(self):
        mouse_item = self.add_item(self.mouse, 2)
        self.add_item(self.laptop, 1)

        self.model_admin.delete_model(self.request, mouse_item)

        self.order.refresh_from_db()
        self.assertEqual(self.order.total_amount, Decimal('899.99'))

    def test_delete_queryset_recomputes_total(self):
        self.add_item(self.mouse, 2)
        self.add_item(self.laptop, 1)

        self.model_admin.delete_queryset(self.request, OrderItem.objects.filter(order=self.order))

        self.order.refresh_from_db()
        self.assertEqual(self.order.total_amount, Decimal('0.00'))
        self.assertFalse(OrderItem.objects.filter(order=self.order).exists())
