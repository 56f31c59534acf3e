"""
URL routing for catalog API endpoints.
"""
from django.urls import path
from . import views

app_name = 'catalog'

urlpatterns = [
    # Categories
    path('categories/', views.CategoryListCreateView.as_view(), name='category-list'),
    path('categories/count/', views.CategoryCountView.as_view(), name='category-count'),
    path('categories/name/<str:name>/', views.CategoryByNameView.as_view(), name='category-by-name'),
    path('categories/<int:pk>/', views.CategoryDetailView.as_view(), name='category-detail'),

    # Products
    path('products/', views.ProductListCreateView.as_view(), name='product-list'),
    path('products/count/', views.ProductCountView.as_view(), name='product-count'),
    path('products/search/', views.ProductSearchView.as_view(), name='product-search'),
    path('products/price-range/', views.ProductPriceRangeView.as_view(), name='product-price-range'),
    path('products/available/', views.AvailableProductsView.as_view(), name='product-available'),
    path('products/top-selling/', views.TopSellingProductsView.as_view(), name='product-top-selling'),
    path('products/category/<int:category_id>/', views.ProductsByCategoryView.as_view(), name='product-by-category'),
    path('products/<int:pk>/', views.ProductDetailView.as_view(), name='product-detail'),
    path('products/<int:pk>/stock/', views.ProductStockView.as_view(), name='product-stock'),
    path('products/<int:pk>/price/', views.ProductPriceView.as_view(), name='product-price'),
]
