"""
URL routing for customer API endpoints.
"""
from django.urls import path
from . import views

app_name = 'customers'

urlpatterns = [
    path('customers/', views.CustomerListCreateView.as_view(), name='customer-list'),
    path('customers/count/', views.CustomerCountView.as_view(), name='customer-count'),
    path('customers/active/', views.ActiveCustomersView.as_view(), name='customer-active'),
    path('customers/search/', views.CustomerSearchView.as_view(), name='customer-search'),
    path('customers/email/<str:email>/', views.CustomerByEmailView.as_view(), name='customer-by-email'),
    path('customers/status/<str:status_value>/', views.CustomersByStatusView.as_view(), name='customer-by-status'),
    path('customers/<int:pk>/', views.CustomerDetailView.as_view(), name='customer-detail'),
    path('customers/<int:pk>/status/', views.CustomerStatusView.as_view(), name='customer-status'),
    path('customers/<int:pk>/suspend/', views.CustomerSuspendView.as_view(), name='customer-suspend'),
    path('customers/<int:pk>/activate/', views.CustomerActivateView.as_view(), name='customer-activate'),
]
