"""
Catalog Service Layer - Category and Product business rules.

Categories own their products: deleting a category deletes its products
and, transitively, every order item referencing them. Orders that lose
items get their totals recomputed in the same transaction.

Products referenced by order items cannot be deleted directly; the
persistence gateway raises ReferentialIntegrityError.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from django.db import transaction

from core.exceptions import DomainValidationError, NotFoundError
from core.validators import decimal_places_of, is_blank, to_decimal
from .models import Category, Product
from .repositories import CategoryRepository, ProductRepository

logger = logging.getLogger(__name__)

PRICE_PLACES = decimal_places_of(Product, 'price')


class CategoryService:
    """Category management: unique names and cascading deletes."""

    def __init__(
        self,
        category_repository: CategoryRepository,
        product_repository: ProductRepository,
        order_item_repository,
        order_service,
    ):
        self.category_repository = category_repository
        self.product_repository = product_repository
        self.order_item_repository = order_item_repository
        self.order_service = order_service

    def find_all(self) -> List[Category]:
        return self.category_repository.find_all()

    def find_by_id(self, pk) -> Optional[Category]:
        return self.category_repository.find_by_id(pk)

    def find_by_name(self, name: str) -> Optional[Category]:
        return self.category_repository.find_by_name(name)

    def exists_by_name(self, name: str) -> bool:
        return self.category_repository.exists_by_name(name)

    @transaction.atomic
    def save(self, category: Category) -> Category:
        """
        Create or update a category.

        Raises:
            DomainValidationError: Missing category, blank name or duplicate name
        """
        if category is None:
            raise DomainValidationError("Category must not be null")
        if is_blank(category.name):
            raise DomainValidationError("Category name must not be empty")

        if category.pk is None:
            if self.exists_by_name(category.name):
                raise DomainValidationError(
                    f"A category named '{category.name}' already exists"
                )
        elif self.category_repository.exists_by_name_excluding(category.name, category.pk):
            raise DomainValidationError(
                f"A category named '{category.name}' already exists"
            )

        is_new = category.pk is None
        category = self.category_repository.save(category)
        logger.info(f"{'Created' if is_new else 'Updated'} category #{category.pk} '{category.name}'")
        return category

    @transaction.atomic
    def delete_by_id(self, pk) -> None:
        """
        Delete a category with its products and their order items.

        Raises:
            NotFoundError: If the category does not exist
        """
        if not self.category_repository.exists_by_id(pk):
            raise NotFoundError('Category', pk)

        product_ids = self.product_repository.find_ids_by_category_id(pk)
        affected_orders = set()
        if product_ids:
            affected_orders = self.order_item_repository.order_ids_for_products(product_ids)
            removed = self.order_item_repository.delete_by_product_ids(product_ids)
            if removed:
                logger.info(
                    f"Category #{pk}: removed {removed} order items "
                    f"from {len(affected_orders)} orders"
                )

        self.category_repository.delete_by_id(pk)

        for order_id in sorted(affected_orders):
            self.order_service.recalculate_total(order_id)

        logger.info(f"Deleted category #{pk} with {len(product_ids)} products")

    def count(self) -> int:
        return self.category_repository.count()


class ProductService:
    """Product management: price/stock rules and catalogue queries."""

    def __init__(
        self,
        product_repository: ProductRepository,
        category_repository: CategoryRepository,
    ):
        self.product_repository = product_repository
        self.category_repository = category_repository

    def find_all(self) -> List[Product]:
        return self.product_repository.find_all()

    def find_by_id(self, pk) -> Optional[Product]:
        return self.product_repository.find_by_id(pk)

    def find_by_category_id(self, category_id) -> List[Product]:
        return self.product_repository.find_by_category_id(category_id)

    def find_by_name_containing(self, name: str) -> List[Product]:
        return self.product_repository.find_by_name_containing(name or '')

    def find_by_price_range(self, min_price, max_price) -> List[Product]:
        """Products priced within [min_price, max_price], bounds inclusive."""
        min_price = to_decimal(min_price, 'min_price')
        max_price = to_decimal(max_price, 'max_price')
        if min_price is None or max_price is None:
            raise DomainValidationError("Both min_price and max_price are required")
        return self.product_repository.find_by_price_between(min_price, max_price)

    def find_available(self) -> List[Product]:
        return self.product_repository.find_by_stock_greater_than(0)

    def find_top_selling(self, limit: int = 5) -> List[Product]:
        if limit is None or limit < 1:
            raise DomainValidationError("limit must be a positive integer")
        return self.product_repository.find_top_selling(limit)

    @transaction.atomic
    def save(self, product: Product) -> Product:
        """
        Create or update a product.

        Raises:
            DomainValidationError: If any product rule fails
        """
        self._validate_product(product)
        is_new = product.pk is None
        product = self.product_repository.save(product)
        logger.info(
            f"{'Created' if is_new else 'Updated'} product #{product.pk} "
            f"'{product.name}' (price {product.price}, stock {product.stock})"
        )
        return product

    @transaction.atomic
    def update_stock(self, pk, new_stock: int) -> Product:
        if new_stock is None or new_stock < 0:
            raise DomainValidationError("Stock must not be negative")

        product = self.product_repository.find_by_id(pk)
        if product is None:
            raise NotFoundError('Product', pk)

        product.stock = new_stock
        product = self.product_repository.save(product)
        logger.info(f"Product #{pk} stock set to {new_stock}")
        return product

    @transaction.atomic
    def update_price(self, pk, new_price) -> Product:
        new_price = to_decimal(new_price, 'price', PRICE_PLACES)
        if new_price is None or new_price <= 0:
            raise DomainValidationError("Price must be greater than zero")

        product = self.product_repository.find_by_id(pk)
        if product is None:
            raise NotFoundError('Product', pk)

        product.price = new_price
        product = self.product_repository.save(product)
        logger.info(f"Product #{pk} price set to {new_price}")
        return product

    @transaction.atomic
    def delete_by_id(self, pk) -> None:
        """
        Delete a product.

        Raises:
            NotFoundError: If the product does not exist
            ReferentialIntegrityError: If order items still reference it
        """
        if not self.product_repository.exists_by_id(pk):
            raise NotFoundError('Product', pk)
        self.product_repository.delete_by_id(pk)
        logger.info(f"Deleted product #{pk}")

    def count(self) -> int:
        return self.product_repository.count()

    def _validate_product(self, product: Product) -> None:
        if product is None:
            raise DomainValidationError("Product must not be null")
        if is_blank(product.name):
            raise DomainValidationError("Product name must not be empty")

        product.price = to_decimal(product.price, 'price', PRICE_PLACES)
        if product.price is None or product.price <= Decimal('0'):
            raise DomainValidationError("Price must be greater than zero")
        if product.stock is None or product.stock < 0:
            raise DomainValidationError("Stock must not be negative")

        if product.category_id is None:
            raise DomainValidationError("Product must belong to a valid category")
        if not self.category_repository.exists_by_id(product.category_id):
            raise DomainValidationError(
                f"Category {product.category_id} does not exist"
            )
