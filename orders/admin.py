"""
Django Admin configuration for order models.

Amounts are read-only here: they are maintained by the order services and
repaired by the reconcile_order_totals task. Order items are created and
edited through the API; deleting them here goes through OrderItemService
so the parent order total is recomputed.
"""
from django.contrib import admin

from config.container import get_services
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ['product', 'quantity', 'unit_price', 'subtotal']
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'order_number', 'customer', 'status', 'total_amount', 'item_count', 'order_date']
    list_filter = ['status', 'order_date']
    search_fields = ['order_number', 'customer__email', 'customer__last_name']
    ordering = ['-order_date']
    readonly_fields = ['total_amount']
    raw_id_fields = ['customer']
    inlines = [OrderItemInline]

    def item_count(self, obj):
        return obj.items.count()
    item_count.short_description = 'Items'


@admin.register(OrderItem)
class OrderItemAdmin(admin.ModelAdmin):
    list_display = ['id', 'order', 'product', 'quantity', 'unit_price', 'subtotal']
    list_filter = ['order__status']
    search_fields = ['product__name', 'order__order_number']
    ordering = ['order', 'id']
    readonly_fields = ['order', 'product', 'quantity', 'unit_price', 'subtotal']

    def has_add_permission(self, request):
        return False

    def delete_model(self, request, obj):
        get_services().order_items.delete_by_id(obj.pk)

    def delete_queryset(self, request, queryset):
        service = get_services().order_items
        for pk in list(queryset.values_list('pk', flat=True)):
            service.delete_by_id(pk)
