"""
Serializers for customer models.
"""
from rest_framework import serializers
from .models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    """Serializer for Customer model."""
    order_count = serializers.SerializerMethodField()

    class Meta:
        model = Customer
        fields = [
            'id', 'first_name', 'last_name', 'email', 'phone', 'address',
            'birth_date', 'registration_date', 'status', 'order_count'
        ]
        read_only_fields = ['id']
        # email uniqueness is checked by CustomerService
        extra_kwargs = {'email': {'validators': []}}

    def get_order_count(self, obj):
        return obj.orders.count()


class CustomerMinimalSerializer(serializers.ModelSerializer):
    """Minimal serializer for nested customer representation."""
    class Meta:
        model = Customer
        fields = ['id', 'first_name', 'last_name', 'email']


class CustomerStatusSerializer(serializers.Serializer):
    # value is coerced (case-insensitively) by CustomerService
    status = serializers.CharField()
