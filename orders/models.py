"""
Order Models - Order and OrderItem entities with status tracking.

Order Status Flow:
    PENDING -> PROCESSING -> SHIPPED -> DELIVERED
    any status except DELIVERED -> CANCELLED

Derived fields (Order.total_amount, OrderItem.subtotal) are stored but
only ever written by the services, from orders.calculations.
"""
from decimal import Decimal

from django.db import models
from django.db.models import Q
from django.utils import timezone

from catalog.models import Product
from customers.models import Customer


class Order(models.Model):
    """
    Order entity representing a customer order.

    Status:
        - PENDING: Order created, nothing done yet
        - PROCESSING: Being prepared
        - SHIPPED: Handed to the carrier
        - DELIVERED: Received by the customer, cannot be cancelled
        - CANCELLED: Terminal
    """

    class Status(models.TextChoices):
        PENDING = 'PENDING', 'Pending'
        PROCESSING = 'PROCESSING', 'Processing'
        SHIPPED = 'SHIPPED', 'Shipped'
        DELIVERED = 'DELIVERED', 'Delivered'
        CANCELLED = 'CANCELLED', 'Cancelled'

    order_number = models.CharField(
        max_length=50,
        unique=True,
        help_text="Unique business order number"
    )
    order_date = models.DateTimeField(default=timezone.now, db_index=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
        help_text="Current order status"
    )
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Sum of item subtotals, recomputed on every write"
    )
    shipping_address = models.CharField(max_length=500, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    customer = models.ForeignKey(
        Customer,
        on_delete=models.CASCADE,
        related_name='orders',
        help_text="Customer who placed the order"
    )

    class Meta:
        db_table = 'orders'
        verbose_name = 'Order'
        verbose_name_plural = 'Orders'
        ordering = ['id']
        constraints = [
            models.CheckConstraint(
                condition=Q(status__in=[
                    'PENDING', 'PROCESSING', 'SHIPPED', 'DELIVERED', 'CANCELLED'
                ]),
                name='chk_order_status'
            ),
            models.CheckConstraint(condition=Q(total_amount__gte=0), name='chk_order_total'),
        ]

    def __str__(self):
        return f"Order {self.order_number} ({self.status})"

    @property
    def is_delivered(self) -> bool:
        return self.status == self.Status.DELIVERED

    @property
    def is_cancelled(self) -> bool:
        return self.status == self.Status.CANCELLED


class OrderItem(models.Model):
    """
    OrderItem entity representing a product line in an order.

    Stores the unit price at time of order to preserve historical pricing.
    Products referenced by items cannot be deleted directly.
    """
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='items',
        help_text="Parent order"
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name='order_items',
        help_text="Ordered product"
    )
    quantity = models.IntegerField(help_text="Quantity ordered")
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Price per unit at time of order"
    )
    subtotal = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="quantity x unit_price"
    )

    class Meta:
        db_table = 'order_items'
        verbose_name = 'Order Item'
        verbose_name_plural = 'Order Items'
        ordering = ['id']
        constraints = [
            models.CheckConstraint(condition=Q(quantity__gt=0), name='chk_orderitem_quantity'),
            models.CheckConstraint(condition=Q(unit_price__gte=0), name='chk_orderitem_price'),
            models.CheckConstraint(condition=Q(subtotal__gte=0), name='chk_orderitem_subtotal'),
        ]

    def __str__(self):
        return f"{self.quantity}x {self.product.name} @ ${self.unit_price}"
