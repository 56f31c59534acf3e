"""
Serializers for order models.

total_amount and subtotal are always read-only: the services derive them.
"""
from rest_framework import serializers
from .models import Order, OrderItem
from catalog.serializers import ProductMinimalSerializer
from customers.serializers import CustomerMinimalSerializer


class OrderItemSerializer(serializers.ModelSerializer):
    """Serializer for OrderItem with product details."""
    product = ProductMinimalSerializer(read_only=True)
    order_id = serializers.IntegerField()
    product_id = serializers.IntegerField(write_only=True)

    class Meta:
        model = OrderItem
        fields = ['id', 'order_id', 'product', 'product_id', 'quantity', 'unit_price', 'subtotal']
        read_only_fields = ['id', 'subtotal']


class OrderLineSerializer(serializers.ModelSerializer):
    """Item representation nested inside an order."""
    product = ProductMinimalSerializer(read_only=True)

    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'quantity', 'unit_price', 'subtotal']


class OrderSerializer(serializers.ModelSerializer):
    """Serializer for Order model; used for create, update and list."""
    customer = CustomerMinimalSerializer(read_only=True)
    customer_id = serializers.IntegerField(write_only=True)
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'order_date', 'status', 'total_amount',
            'shipping_address', 'notes', 'customer', 'customer_id', 'item_count'
        ]
        read_only_fields = ['id', 'total_amount']
        # order number uniqueness is checked by OrderService
        extra_kwargs = {'order_number': {'validators': []}}

    def get_item_count(self, obj):
        # Use prefetched items count if available
        if hasattr(obj, '_prefetched_objects_cache') and 'items' in obj._prefetched_objects_cache:
            return len(obj.items.all())
        return obj.items.count()


class OrderDetailSerializer(OrderSerializer):
    """Order with its items."""
    items = OrderLineSerializer(many=True, read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ['items']


class OrderStatusSerializer(serializers.Serializer):
    # value is coerced (case-insensitively) by OrderService
    status = serializers.CharField()


class QuantityUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()
