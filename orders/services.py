"""
Order Service Layer - orders, order items and their derived amounts.

Consistency rules:
1. OrderItem.subtotal = quantity x unit_price, recomputed before every item write
2. Order.total_amount = sum of its item subtotals, recomputed and persisted
   after every item create/update/delete and before every order save
3. Item quantities are checked against product stock (stock is never deducted)
4. Delivered orders cannot be cancelled

Every write runs in one atomic transaction, so a failure while updating
the parent total also rolls back the item change.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from django.db import transaction

from core.exceptions import DomainValidationError, NotFoundError
from core.validators import coerce_choice, decimal_places_of, is_blank, to_decimal
from .calculations import ZERO, calculate_subtotal, calculate_total
from .models import Order, OrderItem
from .repositories import OrderItemRepository, OrderRepository

logger = logging.getLogger(__name__)

UNIT_PRICE_PLACES = decimal_places_of(OrderItem, 'unit_price')


class OrderService:
    """Order lifecycle: creation, status changes, totals and deletion."""

    def __init__(
        self,
        order_repository: OrderRepository,
        order_item_repository: OrderItemRepository,
        customer_repository,
        product_repository,
    ):
        self.order_repository = order_repository
        self.order_item_repository = order_item_repository
        self.customer_repository = customer_repository
        self.product_repository = product_repository

    def find_by_id(self, pk) -> Optional[Order]:
        return self.order_repository.find_by_id(pk)

    def find_all(self) -> List[Order]:
        return self.order_repository.find_all()

    def find_by_customer_id(self, customer_id) -> List[Order]:
        return self.order_repository.find_by_customer_id(customer_id)

    def find_by_status(self, status) -> List[Order]:
        status = coerce_choice(Order.Status, status)
        return self.order_repository.find_by_status(status)

    def find_by_order_number(self, order_number: str) -> Optional[Order]:
        return self.order_repository.find_by_order_number(order_number)

    def find_by_order_date_between(self, start: datetime, end: datetime) -> List[Order]:
        if start is None or end is None:
            raise DomainValidationError("Both start and end dates are required")
        return self.order_repository.find_by_order_date_between(start, end)

    def find_with_items_by_customer(self, customer_id) -> List[Order]:
        return self.order_repository.find_with_items_by_customer(customer_id)

    def calculate_total(self, order: Order) -> Decimal:
        """
        Sum of the subtotals of the order's current items.

        Reads only; nothing is persisted.

        Raises:
            DomainValidationError: If order is None
        """
        if order is None:
            raise DomainValidationError("Order must not be null")
        if order.pk is None:
            return ZERO
        return calculate_total(item.subtotal for item in order.items.all())

    def check_product_stock(self, product_id, quantity: int) -> bool:
        """
        True if the product exists and has at least `quantity` units.

        Raises:
            DomainValidationError: If quantity is missing or not positive
        """
        if quantity is None or quantity <= 0:
            raise DomainValidationError("Quantity must be greater than zero")
        product = self.product_repository.find_by_id(product_id)
        if product is None:
            return False
        return product.stock >= quantity

    @transaction.atomic
    def save(self, order: Order) -> Order:
        """
        Create or update an order.

        total_amount is always recomputed from the persisted items, any
        value supplied by the caller is discarded.

        Raises:
            DomainValidationError: If any order rule fails
        """
        self._validate_order(order)

        if order.pk is None:
            order.total_amount = ZERO
        else:
            order.total_amount = calculate_total(
                self.order_item_repository.subtotals_for_order(order.pk)
            )

        is_new = order.pk is None
        order = self.order_repository.save(order)
        logger.info(
            f"{'Created' if is_new else 'Updated'} order #{order.pk} "
            f"{order.order_number} ({order.status}), total ${order.total_amount}"
        )
        return order

    @transaction.atomic
    def update_status(self, pk, new_status) -> Order:
        """Set any status; transitions are not enforced here."""
        new_status = coerce_choice(Order.Status, new_status)
        order = self.order_repository.find_by_id(pk)
        if order is None:
            raise NotFoundError('Order', pk)

        previous = order.status
        order.status = new_status
        order = self.order_repository.save(order)
        logger.info(f"Order #{pk} status {previous} -> {new_status}")
        return order

    @transaction.atomic
    def cancel(self, pk) -> Order:
        """
        Cancel an order unless it was already delivered.

        Product stock is not restored.

        Raises:
            NotFoundError: If the order does not exist
            DomainValidationError: If the order is DELIVERED
        """
        order = self.order_repository.find_by_id(pk)
        if order is None:
            raise NotFoundError('Order', pk)
        if order.status == Order.Status.DELIVERED:
            logger.warning(f"Refused to cancel delivered order #{pk}")
            raise DomainValidationError("Cannot cancel a delivered order")

        order.status = Order.Status.CANCELLED
        order = self.order_repository.save(order)
        logger.info(f"Order #{pk} cancelled")
        return order

    @transaction.atomic
    def delete_by_id(self, pk) -> None:
        if not self.order_repository.exists_by_id(pk):
            raise NotFoundError('Order', pk)
        self.order_repository.delete_by_id(pk)
        logger.info(f"Deleted order #{pk} with its items")

    @transaction.atomic
    def recalculate_total(self, order_id) -> Decimal:
        """Recompute an order's total from its items and persist it."""
        total = calculate_total(self.order_item_repository.subtotals_for_order(order_id))
        self.order_repository.update_total(order_id, total)
        logger.debug(f"Order #{order_id} total recalculated: ${total}")
        return total

    @transaction.atomic
    def reconcile_totals(self) -> int:
        """
        Recompute every stored subtotal and total, fixing any drift.

        Returns the number of orders whose total changed.
        """
        corrected = 0
        for order in self.order_repository.find_all():
            for item in self.order_item_repository.find_by_order_id(order.pk):
                expected = calculate_subtotal(item.quantity, item.unit_price)
                if item.subtotal != expected:
                    logger.warning(
                        f"Item #{item.pk} subtotal drift: stored ${item.subtotal}, expected ${expected}"
                    )
                    item.subtotal = expected
                    self.order_item_repository.save(item)

            total = calculate_total(self.order_item_repository.subtotals_for_order(order.pk))
            if order.total_amount != total:
                logger.warning(
                    f"Order #{order.pk} total drift: stored ${order.total_amount}, expected ${total}"
                )
                self.order_repository.update_total(order.pk, total)
                corrected += 1
        return corrected

    def statistics(self, customer_id=None, start=None, end=None) -> Dict:
        """Order counts per status, revenue and average of non-cancelled orders."""
        stats = self.order_repository.summarize(customer_id=customer_id, start=start, end=end)
        stats['total_revenue'] = Decimal(stats['total_revenue'] or ZERO)
        stats['avg_order_value'] = Decimal(str(stats['avg_order_value'] or ZERO)).quantize(ZERO)
        return stats

    def count(self) -> int:
        return self.order_repository.count()

    def _validate_order(self, order: Order) -> None:
        if order is None:
            raise DomainValidationError("Order must not be null")
        if is_blank(order.order_number):
            raise DomainValidationError("Order number must not be empty")
        if self.order_repository.exists_by_order_number_excluding(order.order_number, order.pk):
            raise DomainValidationError(
                f"An order with number {order.order_number} already exists"
            )
        if order.customer_id is None:
            raise DomainValidationError("Order must belong to a customer")
        if not self.customer_repository.exists_by_id(order.customer_id):
            raise DomainValidationError(f"Customer {order.customer_id} does not exist")
        order.status = coerce_choice(Order.Status, order.status)


class OrderItemService:
    """Order lines: stock checks, subtotals and parent total upkeep."""

    def __init__(
        self,
        order_item_repository: OrderItemRepository,
        order_repository: OrderRepository,
        product_repository,
        order_service: OrderService,
    ):
        self.order_item_repository = order_item_repository
        self.order_repository = order_repository
        self.product_repository = product_repository
        self.order_service = order_service

    def find_all(self) -> List[OrderItem]:
        return self.order_item_repository.find_all()

    def find_by_id(self, pk) -> Optional[OrderItem]:
        return self.order_item_repository.find_by_id(pk)

    def find_by_order_id(self, order_id) -> List[OrderItem]:
        return self.order_item_repository.find_by_order_id(order_id)

    def find_by_product_id(self, product_id) -> List[OrderItem]:
        return self.order_item_repository.find_by_product_id(product_id)

    def calculate_subtotal(self, quantity: Optional[int], unit_price) -> Decimal:
        return calculate_subtotal(quantity, unit_price)

    @transaction.atomic
    def save(self, item: OrderItem) -> OrderItem:
        """
        Create or update an order item and refresh its order's total.

        Raises:
            DomainValidationError: If any item rule fails, including
                insufficient product stock
        """
        self._validate_item(item)

        previous_order_id = None
        if item.pk is not None:
            previous = self.order_item_repository.find_by_id(item.pk)
            if previous is not None:
                previous_order_id = previous.order_id

        item.subtotal = calculate_subtotal(item.quantity, item.unit_price)
        is_new = item.pk is None
        item = self.order_item_repository.save(item)
        logger.info(
            f"{'Added' if is_new else 'Updated'} item #{item.pk} on order #{item.order_id}: "
            f"{item.quantity} x ${item.unit_price} = ${item.subtotal}"
        )

        self._refresh_order_total(item)
        if previous_order_id is not None and previous_order_id != item.order_id:
            self.order_service.recalculate_total(previous_order_id)
        return item

    @transaction.atomic
    def update_quantity(self, pk, new_quantity: int) -> OrderItem:
        """
        Change an item's quantity, its subtotal and its order's total.

        Raises:
            DomainValidationError: Non-positive quantity or insufficient stock
            NotFoundError: If the item does not exist
        """
        if new_quantity is None or new_quantity <= 0:
            raise DomainValidationError("Quantity must be greater than zero")

        item = self.order_item_repository.find_by_id(pk)
        if item is None:
            raise NotFoundError('Order item', pk)

        product = self.product_repository.find_by_id(item.product_id)
        self._check_stock(product, new_quantity)

        item.quantity = new_quantity
        item.subtotal = calculate_subtotal(item.quantity, item.unit_price)
        item = self.order_item_repository.save(item)
        logger.info(f"Item #{pk} quantity set to {new_quantity}, subtotal ${item.subtotal}")

        self._refresh_order_total(item)
        return item

    @transaction.atomic
    def delete_by_id(self, pk) -> None:
        item = self.order_item_repository.find_by_id(pk)
        if item is None:
            raise NotFoundError('Order item', pk)

        order_id = item.order_id
        self.order_item_repository.delete_by_id(pk)
        logger.info(f"Removed item #{pk} from order #{order_id}")
        self.order_service.recalculate_total(order_id)

    def count(self) -> int:
        return self.order_item_repository.count()

    def count_by_order_id(self, order_id) -> int:
        return self.order_item_repository.count_by_order_id(order_id)

    def _refresh_order_total(self, item: OrderItem) -> None:
        total = self.order_service.recalculate_total(item.order_id)
        # keep an already loaded parent in step with the database
        if OrderItem.order.is_cached(item):
            item.order.total_amount = total

    def _check_stock(self, product, quantity: int) -> None:
        if product is not None and product.stock < quantity:
            logger.warning(
                f"Insufficient stock for product #{product.pk}: "
                f"requested {quantity}, available {product.stock}"
            )
            raise DomainValidationError(
                f"Insufficient stock for product '{product.name}': "
                f"available {product.stock}, requested {quantity}"
            )

    def _validate_item(self, item: OrderItem) -> None:
        if item is None:
            raise DomainValidationError("Order item must not be null")
        if item.order_id is None:
            raise DomainValidationError("Order item must belong to a valid order")
        if item.product_id is None:
            raise DomainValidationError("Order item must reference a valid product")
        if item.quantity is None or item.quantity <= 0:
            raise DomainValidationError("Quantity must be greater than zero")

        item.unit_price = to_decimal(item.unit_price, 'unit_price', UNIT_PRICE_PLACES)
        if item.unit_price is None or item.unit_price < 0:
            raise DomainValidationError("Unit price must not be negative")

        if not self.order_repository.exists_by_id(item.order_id):
            raise DomainValidationError(f"Order {item.order_id} does not exist")
        product = self.product_repository.find_by_id(item.product_id)
        if product is None:
            raise DomainValidationError(f"Product {item.product_id} does not exist")
        self._check_stock(product, item.quantity)
