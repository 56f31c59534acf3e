"""
Catalog Models - Product catalogue entities.

Models:
    - Category: Product categorization (owns its products)
    - Product: Items available for sale, with stock on hand
"""
from django.db import models
from django.db.models import Q


class Category(models.Model):
    """
    Product category for organizing products.

    Deleting a category cascades to its products.
    """
    name = models.CharField(
        max_length=100,
        unique=True,
        help_text="Unique category name"
    )
    description = models.CharField(
        max_length=500,
        blank=True,
        null=True,
        help_text="Optional category description"
    )

    class Meta:
        db_table = 'categories'
        verbose_name = 'Category'
        verbose_name_plural = 'Categories'
        ordering = ['id']

    def __str__(self):
        return self.name


class Product(models.Model):
    """
    Product entity representing items available for sale.

    Price must be strictly positive on write; stock is never negative.
    """
    name = models.CharField(
        max_length=200,
        db_index=True,
        help_text="Product name for display and search"
    )
    description = models.TextField(
        blank=True,
        null=True,
        help_text="Optional product description"
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Current product price (must be positive)"
    )
    stock = models.IntegerField(
        default=0,
        help_text="Units in stock"
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.CASCADE,
        related_name='products',
        help_text="Owning category"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'products'
        verbose_name = 'Product'
        verbose_name_plural = 'Products'
        ordering = ['id']
        indexes = [
            models.Index(fields=['price'], name='idx_product_price'),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(price__gte=0), name='chk_product_price'),
            models.CheckConstraint(condition=Q(stock__gte=0), name='chk_product_stock'),
        ]

    def __str__(self):
        return f"{self.name} (${self.price})"

    @property
    def is_available(self) -> bool:
        return self.stock > 0
