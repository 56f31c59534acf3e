"""
Management command to seed the database with sample data.

Generates:
- 5 categories
- 18 products
- 5 customers
- 5 orders with 14 order items

Records are created through the services, so subtotals and order totals
are derived exactly as they are for API requests. Records that already
exist (same category name, customer email or order number) are skipped.

Usage:
    python manage.py seed_data
    python manage.py seed_data --clear  # Clear existing data first
"""
from datetime import date, datetime
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from catalog.models import Category, Product
from config.container import build_services
from customers.models import Customer
from orders.models import Order, OrderItem


CATEGORIES = [
    ('Electronics', 'Electronic devices and tech accessories'),
    ('Clothing', 'Apparel for all ages'),
    ('Home', 'Household items and decoration'),
    ('Sports', 'Sports and fitness equipment'),
    ('Books', 'Printed and digital books of many genres'),
]

# (name, description, price, stock, category)
PRODUCTS = [
    ('Laptop HP Pavilion', 'Intel Core i5 laptop, 8GB RAM, 512GB SSD', '899.99', 15, 'Electronics'),
    ('Mouse Logitech MX Master', 'Ergonomic wireless mouse with high precision sensor', '79.99', 50, 'Electronics'),
    ('Mechanical Keyboard RGB', 'Backlit mechanical keyboard with Cherry MX switches', '129.99', 30, 'Electronics'),
    ('Sony WH-1000XM4 Headphones', 'Wireless noise cancelling headphones', '349.99', 20, 'Electronics'),
    ('Samsung Monitor 27"', '27 inch Full HD IPS LED monitor', '299.99', 25, 'Electronics'),
    ('Nike Dri-FIT T-Shirt', 'Moisture wicking sports shirt', '29.99', 100, 'Clothing'),
    ("Levi's 501 Jeans", 'Classic straight cut cotton denim jeans', '89.99', 75, 'Clothing'),
    ('Adidas Ultraboost Sneakers', 'Running shoes with Boost cushioning', '179.99', 40, 'Clothing'),
    ('The North Face Jacket', 'Waterproof jacket for outdoor activities', '199.99', 35, 'Clothing'),
    ('Nespresso Coffee Maker', 'Capsule coffee maker with automatic pressure system', '149.99', 45, 'Home'),
    ('Roomba Vacuum', 'Smart robot vacuum with room mapping', '399.99', 18, 'Home'),
    ('Queen Bed Sheet Set', '600 thread count Egyptian cotton sheets', '79.99', 60, 'Home'),
    ('Adidas Soccer Ball', 'FIFA certified official match ball', '49.99', 80, 'Sports'),
    ('Adjustable Dumbbells 20kg', 'Adjustable dumbbell set from 5 to 20 kg', '159.99', 25, 'Sports'),
    ('Yoga Mat', 'Non-slip 6mm yoga mat', '39.99', 70, 'Sports'),
    ('Don Quixote - Miguel de Cervantes', 'Complete illustrated edition of the Spanish classic', '24.99', 50, 'Books'),
    ('Clean Code - Robert C. Martin', 'A handbook of agile software craftsmanship', '44.99', 65, 'Books'),
    ('One Hundred Years of Solitude - Gabriel Garcia Marquez', 'Masterpiece of magical realism', '19.99', 90, 'Books'),
]

# (first_name, last_name, email, phone, address, birth_date, registration_date, status)
CUSTOMERS = [
    ('Juan', 'Perez Garcia', 'juan.perez@email.com', '+34 600 123 456',
     'Calle Mayor 15, Madrid', date(1985, 5, 15), date(2023, 1, 10), Customer.Status.ACTIVE),
    ('Maria', 'Lopez Fernandez', 'maria.lopez@email.com', '+34 611 234 567',
     'Avenida Libertad 42, Barcelona', date(1990, 8, 22), date(2023, 2, 14), Customer.Status.ACTIVE),
    ('Carlos', 'Martinez Sanchez', 'carlos.martinez@email.com', '+34 622 345 678',
     'Plaza Espana 8, Valencia', date(1988, 11, 30), date(2023, 3, 5), Customer.Status.ACTIVE),
    ('Ana', 'Gonzalez Ruiz', 'ana.gonzalez@email.com', '+34 633 456 789',
     'Calle Sol 23, Sevilla', date(1995, 3, 12), date(2023, 4, 20), Customer.Status.ACTIVE),
    ('Pedro', 'Rodriguez Torres', 'pedro.rodriguez@email.com', '+34 644 567 890',
     'Avenida Constitucion 67, Bilbao', date(1982, 7, 18), date(2023, 5, 15), Customer.Status.INACTIVE),
]

# (order_number, order_date, status, shipping_address, notes, customer email, [(product, quantity)])
ORDERS = [
    ('ORD-2024-001', datetime(2024, 1, 15, 10, 30), Order.Status.DELIVERED,
     'Calle Mayor 15, Madrid', 'Express delivery requested', 'juan.perez@email.com',
     [('Laptop HP Pavilion', 1), ('Mouse Logitech MX Master', 1),
      ('Mechanical Keyboard RGB', 1), ('Samsung Monitor 27"', 1)]),
    ('ORD-2024-002', datetime(2024, 2, 20, 14, 45), Order.Status.DELIVERED,
     'Avenida Libertad 42, Barcelona', None, 'maria.lopez@email.com',
     [('Nike Dri-FIT T-Shirt', 3), ("Levi's 501 Jeans", 2)]),
    ('ORD-2024-003', datetime(2024, 3, 10, 9, 15), Order.Status.SHIPPED,
     'Plaza Espana 8, Valencia', 'Birthday gift, please wrap', 'carlos.martinez@email.com',
     [('Sony WH-1000XM4 Headphones', 1), ('Adidas Ultraboost Sneakers', 1), ('Adidas Soccer Ball', 1)]),
    ('ORD-2024-004', datetime(2024, 4, 5, 16, 20), Order.Status.PROCESSING,
     'Calle Sol 23, Sevilla', None, 'ana.gonzalez@email.com',
     [('Don Quixote - Miguel de Cervantes', 2),
      ('One Hundred Years of Solitude - Gabriel Garcia Marquez', 2)]),
    ('ORD-2024-005', datetime(2024, 5, 12, 11, 0), Order.Status.PENDING,
     'Calle Mayor 15, Madrid', "Customer's second order", 'juan.perez@email.com',
     [('Nespresso Coffee Maker', 1), ('Roomba Vacuum', 1), ('Yoga Mat', 1)]),
]


class Command(BaseCommand):
    help = 'Seed the database with sample categories, products, customers and orders'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before seeding',
        )

    def handle(self, *args, **options):
        services = build_services()

        with transaction.atomic():
            if options['clear']:
                self.stdout.write('Clearing existing data...')
                self._clear_data()

            self.stdout.write('Starting database seeding...')
            categories = self._create_categories(services)
            products = self._create_products(services, categories)
            customers = self._create_customers(services)
            self._create_orders(services, customers, products)

        self.stdout.write(self.style.SUCCESS('Database seeding completed successfully!'))

    def _clear_data(self):
        """Clear all existing data, children first."""
        OrderItem.objects.all().delete()
        Order.objects.all().delete()
        Customer.objects.all().delete()
        Product.objects.all().delete()
        Category.objects.all().delete()

        self.stdout.write(self.style.WARNING('All existing data cleared.'))

    def _create_categories(self, services):
        categories = {}
        for name, description in CATEGORIES:
            category = services.categories.find_by_name(name)
            if category is None:
                category = services.categories.save(Category(name=name, description=description))
                self.stdout.write(f'  Created category: {name}')
            categories[name] = category

        self.stdout.write(self.style.SUCCESS(f'Created {len(categories)} categories'))
        return categories

    def _create_products(self, services, categories):
        products = {}
        for name, description, price, stock, category_name in PRODUCTS:
            category = categories[category_name]
            existing = [p for p in services.products.find_by_category_id(category.pk) if p.name == name]
            if existing:
                products[name] = existing[0]
                continue
            products[name] = services.products.save(Product(
                name=name,
                description=description,
                price=Decimal(price),
                stock=stock,
                category=category,
            ))

        self.stdout.write(self.style.SUCCESS(f'Created {len(products)} products'))
        return products

    def _create_customers(self, services):
        customers = {}
        for first, last, email, phone, address, birth, registered, status in CUSTOMERS:
            customer = services.customers.find_by_email(email)
            if customer is None:
                customer = services.customers.save(Customer(
                    first_name=first,
                    last_name=last,
                    email=email,
                    phone=phone,
                    address=address,
                    birth_date=birth,
                    registration_date=registered,
                    status=status,
                ))
                self.stdout.write(f'  Created customer: {customer.full_name}')
            customers[email] = customer

        self.stdout.write(self.style.SUCCESS(f'Created {len(customers)} customers'))
        return customers

    def _create_orders(self, services, customers, products):
        tz = timezone.get_current_timezone()
        created = 0

        for number, ordered_at, status, address, notes, email, lines in ORDERS:
            if services.orders.find_by_order_number(number) is not None:
                continue

            order = services.orders.save(Order(
                order_number=number,
                order_date=timezone.make_aware(ordered_at, tz),
                shipping_address=address,
                notes=notes,
                customer=customers[email],
            ))
            for product_name, quantity in lines:
                product = products[product_name]
                services.order_items.save(OrderItem(
                    order=order,
                    product=product,
                    quantity=quantity,
                    unit_price=product.price,
                ))
            order = services.orders.update_status(order.pk, status)
            created += 1
            self.stdout.write(
                f'  Created order {order.order_number} ({order.status}): ${order.total_amount}'
            )

        self.stdout.write(self.style.SUCCESS(f'Created {created} orders'))
