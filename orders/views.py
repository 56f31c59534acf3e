"""
Order API Views.

Implements:
- CRUD for orders and order items through OrderService / OrderItemService
- Order lookups by customer, status and order number
- Status changes and cancellation
- Item quantity updates and per-order item counts
- Order statistics
"""
import logging

from rest_framework.response import Response

from core.exceptions import NotFoundError
from core.views import ServiceAPIView, ServiceCountView, ServiceDetailView, ServiceListCreateView
from .models import Order, OrderItem
from .serializers import (
    OrderDetailSerializer,
    OrderItemSerializer,
    OrderSerializer,
    OrderStatusSerializer,
    QuantityUpdateSerializer,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Order Views
# =============================================================================

class OrderViewMixin:
    service_name = 'orders'
    model = Order
    serializer_class = OrderSerializer
    entity_label = 'Order'


class OrderListCreateView(OrderViewMixin, ServiceListCreateView):
    """
    GET: List all orders
    POST: Create an order; total_amount starts at 0 and follows its items

    Request Body (POST):
    {
        "order_number": "ORD-2024-006",
        "customer_id": 1,
        "shipping_address": "Main Street 1"
    }
    """


class OrderDetailView(OrderViewMixin, ServiceDetailView):
    """
    GET: Retrieve an order with its items
    PUT/PATCH: Update an order (total_amount is recomputed, never taken)
    DELETE: Delete an order with its items
    """
    serializer_class = OrderDetailSerializer


class OrdersByCustomerView(OrderViewMixin, ServiceAPIView):
    """GET: Orders of one customer."""

    def get(self, request, customer_id):
        return self.render(self.service.find_by_customer_id(customer_id), many=True)


class OrdersWithItemsByCustomerView(OrderViewMixin, ServiceAPIView):
    """GET: Orders of one customer with their items loaded."""
    serializer_class = OrderDetailSerializer

    def get(self, request, customer_id):
        return self.render(self.service.find_with_items_by_customer(customer_id), many=True)


class OrdersByStatusView(OrderViewMixin, ServiceAPIView):
    """GET: Orders in the given status (400 for unknown status)."""

    def get(self, request, status_value):
        return self.render(self.service.find_by_status(status_value), many=True)


class OrderByNumberView(OrderViewMixin, ServiceAPIView):
    """GET: Retrieve an order by its order number."""
    serializer_class = OrderDetailSerializer

    def get(self, request, order_number):
        order = self.service.find_by_order_number(order_number)
        if order is None:
            raise NotFoundError('Order', order_number, field='order number')
        return self.render(order)


class OrderStatusView(OrderViewMixin, ServiceAPIView):
    """
    PATCH: Set an order's status. Any status is accepted.

    Body or query: {"status": "SHIPPED"}
    """

    def patch(self, request, pk):
        params = OrderStatusSerializer(data=request.data or request.query_params)
        params.is_valid(raise_exception=True)
        return self.render(self.service.update_status(pk, params.validated_data['status']))


class OrderCancelView(OrderViewMixin, ServiceAPIView):
    """POST: Cancel an order (400 if already delivered)."""

    def post(self, request, pk):
        return self.render(self.service.cancel(pk))


class OrderCountView(OrderViewMixin, ServiceCountView):
    pass


class OrderStatsView(OrderViewMixin, ServiceAPIView):
    """
    GET: Order statistics overall or for one customer.

    Query Parameters:
        - customer_id: Filter stats by customer (optional)
    """

    def get(self, request):
        customer_id = request.query_params.get('customer_id') or None
        stats = self.service.statistics(customer_id=customer_id)
        stats['total_revenue'] = str(stats['total_revenue'])
        stats['avg_order_value'] = str(stats['avg_order_value'])
        return Response(stats)


# =============================================================================
# Order Item Views
# =============================================================================

class OrderItemViewMixin:
    service_name = 'order_items'
    model = OrderItem
    serializer_class = OrderItemSerializer
    entity_label = 'Order item'


class OrderItemListCreateView(OrderItemViewMixin, ServiceListCreateView):
    """
    GET: List all order items
    POST: Add an item to an order; refreshes the order total

    Request Body (POST):
    {
        "order_id": 1,
        "product_id": 2,
        "quantity": 2,
        "unit_price": "79.99"
    }
    """


class OrderItemDetailView(OrderItemViewMixin, ServiceDetailView):
    """
    GET: Retrieve an order item
    PUT/PATCH: Update an order item; refreshes the order total
    DELETE: Remove an order item; refreshes the order total
    """


class OrderItemsByOrderView(OrderItemViewMixin, ServiceAPIView):
    """GET: Items of one order."""

    def get(self, request, order_id):
        return self.render(self.service.find_by_order_id(order_id), many=True)


class OrderItemsByProductView(OrderItemViewMixin, ServiceAPIView):
    """GET: Items referencing one product."""

    def get(self, request, product_id):
        return self.render(self.service.find_by_product_id(product_id), many=True)


class OrderItemQuantityView(OrderItemViewMixin, ServiceAPIView):
    """
    PATCH: Change an item's quantity.

    Body or query: {"quantity": 3}
    """

    def patch(self, request, pk):
        params = QuantityUpdateSerializer(data=request.data or request.query_params)
        params.is_valid(raise_exception=True)
        return self.render(self.service.update_quantity(pk, params.validated_data['quantity']))


class OrderItemCountView(OrderItemViewMixin, ServiceCountView):
    pass


class OrderItemCountByOrderView(OrderItemViewMixin, ServiceAPIView):
    """GET: Number of items in one order."""

    def get(self, request, order_id):
        return Response({'order_id': order_id, 'count': self.service.count_by_order_id(order_id)})
