"""
URL routing for order and order item API endpoints.
"""
from django.urls import path
from . import views

app_name = 'orders'

urlpatterns = [
    # Orders
    path('orders/', views.OrderListCreateView.as_view(), name='order-list'),
    path('orders/count/', views.OrderCountView.as_view(), name='order-count'),
    path('orders/stats/', views.OrderStatsView.as_view(), name='order-stats'),
    path('orders/customer/<int:customer_id>/', views.OrdersByCustomerView.as_view(), name='order-by-customer'),
    path(
        'orders/customer/<int:customer_id>/with-items/',
        views.OrdersWithItemsByCustomerView.as_view(),
        name='order-by-customer-with-items'
    ),
    path('orders/status/<str:status_value>/', views.OrdersByStatusView.as_view(), name='order-by-status'),
    path('orders/number/<str:order_number>/', views.OrderByNumberView.as_view(), name='order-by-number'),
    path('orders/<int:pk>/', views.OrderDetailView.as_view(), name='order-detail'),
    path('orders/<int:pk>/status/', views.OrderStatusView.as_view(), name='order-status'),
    path('orders/<int:pk>/cancel/', views.OrderCancelView.as_view(), name='order-cancel'),

    # Order items
    path('order-items/', views.OrderItemListCreateView.as_view(), name='order-item-list'),
    path('order-items/count/', views.OrderItemCountView.as_view(), name='order-item-count'),
    path('order-items/order/<int:order_id>/', views.OrderItemsByOrderView.as_view(), name='order-item-by-order'),
    path(
        'order-items/order/<int:order_id>/count/',
        views.OrderItemCountByOrderView.as_view(),
        name='order-item-count-by-order'
    ),
    path(
        'order-items/product/<int:product_id>/',
        views.OrderItemsByProductView.as_view(),
        name='order-item-by-product'
    ),
    path('order-items/<int:pk>/', views.OrderItemDetailView.as_view(), name='order-item-detail'),
    path('order-items/<int:pk>/quantity/', views.OrderItemQuantityView.as_view(), name='order-item-quantity'),
]
