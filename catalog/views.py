"""
Catalog API Views.

Implements:
- CRUD operations for Category and Product through the catalog services
- Product queries: by category, name search, price range, availability,
  top sellers
- Stock and price updates
"""
from core.exceptions import DomainValidationError, NotFoundError
from core.rate_limiting import rate_limit
from core.views import ServiceAPIView, ServiceCountView, ServiceDetailView, ServiceListCreateView
from .models import Category, Product
from .serializers import (
    CategorySerializer,
    ProductSerializer,
    PriceRangeSerializer,
    PriceUpdateSerializer,
    StockUpdateSerializer,
    TopSellingProductSerializer,
)


# =============================================================================
# Category Views
# =============================================================================

class CategoryViewMixin:
    service_name = 'categories'
    model = Category
    serializer_class = CategorySerializer
    entity_label = 'Category'


class CategoryListCreateView(CategoryViewMixin, ServiceListCreateView):
    """
    GET: List all categories
    POST: Create a new category (name must be unique)
    """


class CategoryDetailView(CategoryViewMixin, ServiceDetailView):
    """
    GET: Retrieve a category
    PUT/PATCH: Update a category
    DELETE: Delete a category, its products and their order items
    """


class CategoryByNameView(CategoryViewMixin, ServiceAPIView):
    """GET: Retrieve a category by its exact name."""

    def get(self, request, name):
        category = self.service.find_by_name(name)
        if category is None:
            raise NotFoundError('Category', name, field='name')
        return self.render(category)


class CategoryCountView(CategoryViewMixin, ServiceCountView):
    pass


# =============================================================================
# Product Views
# =============================================================================

class ProductViewMixin:
    service_name = 'products'
    model = Product
    serializer_class = ProductSerializer
    entity_label = 'Product'


class ProductListCreateView(ProductViewMixin, ServiceListCreateView):
    """
    GET: List all products with category info
    POST: Create a new product
    """


class ProductDetailView(ProductViewMixin, ServiceDetailView):
    """
    GET: Retrieve a product
    PUT/PATCH: Update a product
    DELETE: Delete a product (409 while order items reference it)
    """


class ProductsByCategoryView(ProductViewMixin, ServiceAPIView):
    """GET: Products of one category."""

    def get(self, request, category_id):
        return self.render(self.service.find_by_category_id(category_id), many=True)


class ProductSearchView(ProductViewMixin, ServiceAPIView):
    """
    GET: Case-insensitive product name search.

    Query Parameters:
        - name: Substring to look for

    Rate limited to 20 requests per minute.
    """

    @rate_limit(max_requests=20, window_seconds=60)
    def get(self, request):
        name = request.query_params.get('name', '').strip()
        return self.render(self.service.find_by_name_containing(name), many=True)


class ProductPriceRangeView(ProductViewMixin, ServiceAPIView):
    """
    GET: Products with min_price <= price <= max_price.

    Query Parameters:
        - min_price, max_price: Inclusive bounds (required)
    """

    def get(self, request):
        params = PriceRangeSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        products = self.service.find_by_price_range(
            params.validated_data['min_price'],
            params.validated_data['max_price']
        )
        return self.render(products, many=True)


class AvailableProductsView(ProductViewMixin, ServiceAPIView):
    """GET: Products with stock > 0."""

    def get(self, request):
        return self.render(self.service.find_available(), many=True)


class TopSellingProductsView(ProductViewMixin, ServiceAPIView):
    """
    GET: Best-selling products by total quantity ordered.

    Query Parameters:
        - limit: Number of products (default 5)
    """
    serializer_class = TopSellingProductSerializer

    def get(self, request):
        try:
            limit = int(request.query_params.get('limit', 5))
        except ValueError:
            raise DomainValidationError("limit must be an integer")
        return self.render(self.service.find_top_selling(limit), many=True)


class ProductStockView(ProductViewMixin, ServiceAPIView):
    """
    PATCH: Set a product's stock.

    Body or query: {"stock": 25}
    """

    def patch(self, request, pk):
        params = StockUpdateSerializer(data=request.data or request.query_params)
        params.is_valid(raise_exception=True)
        product = self.service.update_stock(pk, params.validated_data['stock'])
        return self.render(product)


class ProductPriceView(ProductViewMixin, ServiceAPIView):
    """
    PATCH: Set a product's current price. Existing order items keep theirs.

    Body or query: {"price": "19.99"}
    """

    def patch(self, request, pk):
        params = PriceUpdateSerializer(data=request.data or request.query_params)
        params.is_valid(raise_exception=True)
        product = self.service.update_price(pk, params.validated_data['price'])
        return self.render(product)


class ProductCountView(ProductViewMixin, ServiceCountView):
    pass
