"""
Tests for catalog rules.

Test Cases:
1. Category names are unique, also on update
2. Deleting a category removes its products and their order items,
   and recomputes the affected order totals
3. Products referenced by order items cannot be deleted directly
4. Product price/stock/category validation
5. Catalogue queries: price range, availability, top sellers
"""
from decimal import Decimal

from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from catalog.models import Category, Product
from config.container import build_services
from core.exceptions import DomainValidationError, NotFoundError, ReferentialIntegrityError
from customers.models import Customer
from orders.models import Order, OrderItem


class CategoryServiceTestCase(TestCase):
    """Category uniqueness and cascading deletes."""

    def setUp(self):
        self.services = build_services()
        self.electronics = self.services.categories.save(Category(name='Electronics'))
        self.books = self.services.categories.save(Category(name='Books'))

    def test_duplicate_name_is_rejected(self):
        with self.assertRaises(DomainValidationError) as ctx:
            self.services.categories.save(Category(name='Electronics'))
        self.assertIn('Electronics', str(ctx.exception))
        self.assertEqual(self.services.categories.count(), 2)

    def test_rename_to_existing_name_is_rejected(self):
        self.books.name = 'Electronics'
        with self.assertRaises(DomainValidationError):
            self.services.categories.save(self.books)

    def test_update_keeping_own_name(self):
        self.books.description = 'Printed books'
        category = self.services.categories.save(self.books)
        self.assertEqual(category.description, 'Printed books')

    def test_blank_name_is_rejected(self):
        with self.assertRaises(DomainValidationError):
            self.services.categories.save(Category(name='   '))

    def test_find_by_name(self):
        self.assertEqual(self.services.categories.find_by_name('Books'), self.books)
        self.assertIsNone(self.services.categories.find_by_name('Garden'))
        self.assertTrue(self.services.categories.exists_by_name('Books'))

    def test_delete_missing_category(self):
        with self.assertRaises(NotFoundError):
            self.services.categories.delete_by_id(99999)

    def test_delete_cascades_to_products_and_order_items(self):
        """
        Given: An order with one Electronics item and one Books item
        When: Deleting the Electronics category
        Then: Its products and their items are gone, the order total
              only counts the remaining Books item
        """
        mouse = Product.objects.create(
            name='Mouse', price=Decimal('79.99'), stock=10, category=self.electronics
        )
        book = Product.objects.create(
            name='Clean Code', price=Decimal('44.99'), stock=10, category=self.books
        )
        customer = Customer.objects.create(first_name='Ana', last_name='Ruiz', email='ana@email.com')
        order = self.services.orders.save(Order(order_number='ORD-CAT-001', customer=customer))
        self.services.order_items.save(OrderItem(order=order, product=mouse, quantity=2, unit_price=mouse.price))
        self.services.order_items.save(OrderItem(order=order, product=book, quantity=1, unit_price=book.price))

        self.services.categories.delete_by_id(self.electronics.pk)

        self.assertFalse(Category.objects.filter(pk=self.electronics.pk).exists())
        self.assertFalse(Product.objects.filter(pk=mouse.pk).exists())
        self.assertEqual(OrderItem.objects.filter(order=order).count(), 1)
        order.refresh_from_db()
        self.assertEqual(order.total_amount, Decimal('44.99'))


class ProductServiceTestCase(TestCase):
    """Product validation and catalogue queries."""

    def setUp(self):
        self.services = build_services()
        self.category = Category.objects.create(name='Sports')
        self.ball = self.services.products.save(Product(
            name='Adidas Soccer Ball', price=Decimal('49.99'), stock=80, category=self.category
        ))
        self.mat = self.services.products.save(Product(
            name='Yoga Mat', price=Decimal('39.99'), stock=0, category=self.category
        ))
        self.dumbbells = self.services.products.save(Product(
            name='Adjustable Dumbbells', price=Decimal('159.99'), stock=25, category=self.category
        ))

    def _product(self, **overrides):
        values = {'name': 'Tennis Racket', 'price': Decimal('89.99'), 'stock': 5, 'category': self.category}
        values.update(overrides)
        return Product(**values)

    def test_zero_price_is_rejected(self):
        with self.assertRaises(DomainValidationError):
            self.services.products.save(self._product(price=Decimal('0.00')))

    def test_negative_stock_is_rejected(self):
        with self.assertRaises(DomainValidationError):
            self.services.products.save(self._product(stock=-1))

    def test_missing_category_is_rejected(self):
        with self.assertRaises(DomainValidationError):
            self.services.products.save(self._product(category=None))

    def test_unknown_category_is_rejected(self):
        with self.assertRaises(DomainValidationError):
            self.services.products.save(Product(
                name='Tennis Racket', price=Decimal('89.99'), stock=5, category_id=99999
            ))

    def test_blank_name_is_rejected(self):
        with self.assertRaises(DomainValidationError):
            self.services.products.save(self._product(name=''))

    def test_price_with_three_decimals_is_rejected(self):
        with self.assertRaises(DomainValidationError):
            self.services.products.save(self._product(price='89.999'))
        with self.assertRaises(DomainValidationError):
            self.services.products.update_price(self.mat.pk, '34.505')

        self.mat.refresh_from_db()
        self.assertEqual(self.mat.price, Decimal('39.99'))

    def test_update_stock_and_price(self):
        product = self.services.products.update_stock(self.mat.pk, 12)
        self.assertEqual(product.stock, 12)
        self.assertTrue(product.is_available)

        product = self.services.products.update_price(self.mat.pk, '34.50')
        self.assertEqual(product.price, Decimal('34.50'))

        with self.assertRaises(DomainValidationError):
            self.services.products.update_stock(self.mat.pk, -3)
        with self.assertRaises(DomainValidationError):
            self.services.products.update_price(self.mat.pk, Decimal('0'))
        with self.assertRaises(NotFoundError):
            self.services.products.update_stock(99999, 1)

    def test_find_by_name_containing_is_case_insensitive(self):
        names = [p.name for p in self.services.products.find_by_name_containing('ADIDAS')]
        self.assertEqual(names, ['Adidas Soccer Ball'])

    def test_price_range_is_inclusive(self):
        products = self.services.products.find_by_price_range(Decimal('39.99'), Decimal('49.99'))
        self.assertEqual({p.pk for p in products}, {self.ball.pk, self.mat.pk})

    def test_price_range_requires_both_bounds(self):
        with self.assertRaises(DomainValidationError):
            self.services.products.find_by_price_range(None, Decimal('10.00'))

    def test_find_available(self):
        available = {p.pk for p in self.services.products.find_available()}
        self.assertEqual(available, {self.ball.pk, self.dumbbells.pk})

    def test_find_top_selling(self):
        customer = Customer.objects.create(first_name='Ana', last_name='Ruiz', email='ana@email.com')
        order = self.services.orders.save(Order(order_number='ORD-TOP-001', customer=customer))
        self.services.order_items.save(OrderItem(order=order, product=self.ball, quantity=5, unit_price=self.ball.price))
        self.services.order_items.save(
            OrderItem(order=order, product=self.dumbbells, quantity=2, unit_price=self.dumbbells.price)
        )

        top = self.services.products.find_top_selling(2)

        self.assertEqual([p.pk for p in top], [self.ball.pk, self.dumbbells.pk])
        self.assertEqual(top[0].units_sold, 5)

    def test_find_top_selling_requires_positive_limit(self):
        with self.assertRaises(DomainValidationError):
            self.services.products.find_top_selling(0)

    def test_delete_referenced_product_is_restricted(self):
        customer = Customer.objects.create(first_name='Ana', last_name='Ruiz', email='ana@email.com')
        order = self.services.orders.save(Order(order_number='ORD-DEL-001', customer=customer))
        self.services.order_items.save(OrderItem(order=order, product=self.ball, quantity=1, unit_price=self.ball.price))

        with self.assertRaises(ReferentialIntegrityError):
            self.services.products.delete_by_id(self.ball.pk)

        self.assertTrue(Product.objects.filter(pk=self.ball.pk).exists())

    def test_delete_unreferenced_product(self):
        self.services.products.delete_by_id(self.mat.pk)
        self.assertFalse(Product.objects.filter(pk=self.mat.pk).exists())


@override_settings(RATE_LIMIT_ENABLED=False)
class CatalogAPITestCase(APITestCase):
    """REST endpoints for categories and products."""

    def setUp(self):
        self.category = Category.objects.create(name='Electronics')
        self.mouse = Product.objects.create(
            name='Mouse Logitech', price=Decimal('79.99'), stock=50, category=self.category
        )

    def test_create_category(self):
        response = self.client.post(reverse('catalog:category-list'), {'name': 'Home'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['product_count'], 0)

    def test_create_duplicate_category(self):
        response = self.client.post(reverse('catalog:category-list'), {'name': 'Electronics'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Validation Error')

    def test_category_by_name(self):
        response = self.client.get(reverse('catalog:category-by-name', args=['Electronics']))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['product_count'], 1)

        response = self.client.get(reverse('catalog:category-by-name', args=['Garden']))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {
            'error': 'Not Found',
            'detail': 'Category not found with name: Garden'
        })

    def test_create_product_with_zero_price(self):
        response = self.client.post(reverse('catalog:product-list'), {
            'name': 'Free Sample',
            'price': '0.00',
            'stock': 1,
            'category_id': self.category.pk
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_product(self):
        response = self.client.post(reverse('catalog:product-list'), {
            'name': 'Keyboard',
            'price': '129.99',
            'stock': 30,
            'category_id': self.category.pk
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['category']['name'], 'Electronics')

    def test_product_not_found(self):
        response = self.client.get(reverse('catalog:product-detail', args=[99999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['detail'], 'Product not found with id: 99999')

    def test_delete_referenced_product_conflict(self):
        customer = Customer.objects.create(first_name='Ana', last_name='Ruiz', email='ana@email.com')
        order = Order.objects.create(order_number='ORD-API-001', customer=customer)
        OrderItem.objects.create(
            order=order, product=self.mouse, quantity=1,
            unit_price=Decimal('79.99'), subtotal=Decimal('79.99')
        )

        response = self.client.delete(reverse('catalog:product-detail', args=[self.mouse.pk]))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_search_and_price_range(self):
        response = self.client.get(reverse('catalog:product-search'), {'name': 'mouse'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

        response = self.client.get(
            reverse('catalog:product-price-range'), {'min_price': '10.00', 'max_price': '50.00'}
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 0)

    def test_patch_stock(self):
        response = self.client.patch(
            reverse('catalog:product-stock', args=[self.mouse.pk]), {'stock': -5}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch(
            reverse('catalog:product-stock', args=[self.mouse.pk]), {'stock': 0}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stock'], 0)

    def test_top_selling_invalid_limit(self):
        response = self.client.get(reverse('catalog:product-top-selling'), {'limit': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'Validation Error', 'detail': 'limit must be an integer'})

        response = self.client.get(reverse('catalog:product-top-selling'), {'limit': 0})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_counts(self):
        self.assertEqual(self.client.get(reverse('catalog:category-count')).data, {'count': 1})
        self.assertEqual(self.client.get(reverse('catalog:product-count')).data, {'count': 1})
