"""
Persistence gateways for catalog entities.
"""
from decimal import Decimal
from typing import List, Optional

from django.db.models import Sum, Value
from django.db.models.functions import Coalesce

from core.repositories import Repository
from .models import Category, Product


class CategoryRepository(Repository[Category]):
    model = Category

    def find_by_name(self, name: str) -> Optional[Category]:
        return self.get_queryset().filter(name=name).first()

    def exists_by_name(self, name: str) -> bool:
        return self.model.objects.filter(name=name).exists()

    def exists_by_name_excluding(self, name: str, pk) -> bool:
        """True if a category other than `pk` already uses `name`."""
        return self.model.objects.filter(name=name).exclude(pk=pk).exists()


class ProductRepository(Repository[Product]):
    model = Product

    def get_queryset(self):
        return Product.objects.select_related('category')

    def find_by_category_id(self, category_id) -> List[Product]:
        return list(self.get_queryset().filter(category_id=category_id))

    def find_ids_by_category_id(self, category_id) -> List[int]:
        return list(
            self.model.objects.filter(category_id=category_id).values_list('id', flat=True)
        )

    def find_by_name_containing(self, name: str) -> List[Product]:
        return list(self.get_queryset().filter(name__icontains=name))

    def find_by_price_between(self, min_price: Decimal, max_price: Decimal) -> List[Product]:
        return list(self.get_queryset().filter(price__gte=min_price, price__lte=max_price))

    def find_by_stock_greater_than(self, stock: int) -> List[Product]:
        return list(self.get_queryset().filter(stock__gt=stock))

    def find_top_selling(self, limit: int) -> List[Product]:
        """
        Products ordered by total quantity sold, descending.

        Products that never sold are included with units_sold = 0.
        Ties keep id order.
        """
        queryset = self.get_queryset().annotate(
            units_sold=Coalesce(Sum('order_items__quantity'), Value(0))
        ).order_by('-units_sold', 'id')
        return list(queryset[:limit])
