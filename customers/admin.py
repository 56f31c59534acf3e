"""
Django Admin configuration for customers.
"""
from django.contrib import admin
from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['id', 'first_name', 'last_name', 'email', 'status', 'order_count', 'registration_date']
    list_filter = ['status', 'registration_date']
    search_fields = ['first_name', 'last_name', 'email']
    ordering = ['last_name', 'first_name']

    def order_count(self, obj):
        return obj.orders.count()
    order_count.short_description = 'Orders'
