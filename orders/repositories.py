"""
Persistence gateways for orders and order items.
"""
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set

from django.db.models import Avg, Count, Q, Sum

from core.repositories import Repository
from .models import Order, OrderItem


class OrderRepository(Repository[Order]):
    model = Order

    def get_queryset(self):
        return Order.objects.select_related('customer')

    def find_by_order_number(self, order_number: str) -> Optional[Order]:
        return self.get_queryset().filter(order_number=order_number).first()

    def exists_by_order_number_excluding(self, order_number: str, pk) -> bool:
        """True if an order other than `pk` already uses `order_number`."""
        return self.model.objects.filter(order_number=order_number).exclude(pk=pk).exists()

    def find_by_customer_id(self, customer_id) -> List[Order]:
        return list(self.get_queryset().filter(customer_id=customer_id))

    def find_by_status(self, status: Order.Status) -> List[Order]:
        return list(self.get_queryset().filter(status=status))

    def find_by_order_date_between(self, start: datetime, end: datetime) -> List[Order]:
        return list(self.get_queryset().filter(order_date__gte=start, order_date__lte=end))

    def find_with_items_by_customer(self, customer_id) -> List[Order]:
        """Orders of a customer with their items and products loaded."""
        return list(
            self.get_queryset()
            .filter(customer_id=customer_id)
            .prefetch_related('items__product')
        )

    def update_total(self, pk, total_amount: Decimal) -> None:
        self.model.objects.filter(pk=pk).update(total_amount=total_amount)

    def summarize(
        self,
        customer_id=None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Dict:
        """
        Order counts per status plus revenue of non-cancelled orders.

        `start` is inclusive, `end` exclusive.
        """
        queryset = self.model.objects.all()
        if customer_id is not None:
            queryset = queryset.filter(customer_id=customer_id)
        if start is not None:
            queryset = queryset.filter(order_date__gte=start)
        if end is not None:
            queryset = queryset.filter(order_date__lt=end)

        billable = ~Q(status=Order.Status.CANCELLED)
        per_status = {
            f"{value.lower()}_orders": Count('id', filter=Q(status=value))
            for value in Order.Status.values
        }
        return queryset.aggregate(
            total_orders=Count('id'),
            total_revenue=Sum('total_amount', filter=billable),
            avg_order_value=Avg('total_amount', filter=billable),
            **per_status
        )


class OrderItemRepository(Repository[OrderItem]):
    model = OrderItem

    def get_queryset(self):
        return OrderItem.objects.select_related('order', 'product')

    def find_by_order_id(self, order_id) -> List[OrderItem]:
        return list(self.get_queryset().filter(order_id=order_id))

    def find_by_product_id(self, product_id) -> List[OrderItem]:
        return list(self.get_queryset().filter(product_id=product_id))

    def count_by_order_id(self, order_id) -> int:
        return self.model.objects.filter(order_id=order_id).count()

    def subtotals_for_order(self, order_id) -> List[Decimal]:
        return list(
            self.model.objects.filter(order_id=order_id).values_list('subtotal', flat=True)
        )

    def order_ids_for_products(self, product_ids: Iterable[int]) -> Set[int]:
        return set(
            self.model.objects.filter(product_id__in=list(product_ids))
            .values_list('order_id', flat=True)
        )

    def delete_by_product_ids(self, product_ids: Iterable[int]) -> int:
        deleted, _ = self.model.objects.filter(product_id__in=list(product_ids)).delete()
        return deleted
