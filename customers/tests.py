"""
Tests for customer registration and status management.
"""
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from catalog.models import Category, Product
from config.container import build_services
from core.exceptions import DomainValidationError, NotFoundError
from customers.models import Customer
from orders.models import Order, OrderItem


class CustomerServiceTestCase(TestCase):

    def setUp(self):
        self.services = build_services()
        self.juan = self.services.customers.save(Customer(
            first_name='Juan', last_name='Perez Garcia', email='juan.perez@email.com'
        ))
        self.maria = self.services.customers.save(Customer(
            first_name='Maria', last_name='Lopez Fernandez', email='maria.lopez@email.com'
        ))

    def test_new_customer_defaults(self):
        self.assertEqual(self.juan.status, Customer.Status.ACTIVE)
        self.assertIsNotNone(self.juan.registration_date)
        self.assertEqual(self.juan.full_name, 'Juan Perez Garcia')

    def test_duplicate_email_is_rejected(self):
        with self.assertRaises(DomainValidationError):
            self.services.customers.save(Customer(
                first_name='Other', last_name='Juan', email='juan.perez@email.com'
            ))

    def test_changing_email_to_taken_one_is_rejected(self):
        self.maria.email = 'juan.perez@email.com'
        with self.assertRaises(DomainValidationError):
            self.services.customers.save(self.maria)

    def test_update_keeping_own_email(self):
        self.juan.phone = '+34 600 123 456'
        customer = self.services.customers.save(self.juan)
        self.assertEqual(customer.phone, '+34 600 123 456')

    def test_malformed_email_is_rejected(self):
        with self.assertRaises(DomainValidationError):
            self.services.customers.save(Customer(first_name='A', last_name='B', email='not-an-email'))

    def test_blank_names_are_rejected(self):
        with self.assertRaises(DomainValidationError):
            self.services.customers.save(Customer(first_name='', last_name='B', email='a@b.com'))
        with self.assertRaises(DomainValidationError):
            self.services.customers.save(Customer(first_name='A', last_name=' ', email='a@b.com'))

    def test_suspend_and_activate(self):
        customer = self.services.customers.suspend(self.juan.pk)
        self.assertEqual(customer.status, Customer.Status.SUSPENDED)
        self.assertNotIn(self.juan.pk, [c.pk for c in self.services.customers.find_active()])

        customer = self.services.customers.activate(self.juan.pk)
        self.assertTrue(customer.is_active)

    def test_update_status_of_missing_customer(self):
        with self.assertRaises(NotFoundError):
            self.services.customers.suspend(99999)

    def test_find_by_status_accepts_lowercase(self):
        self.services.customers.update_status(self.maria.pk, Customer.Status.INACTIVE)
        inactive = self.services.customers.find_by_status('inactive')
        self.assertEqual([c.pk for c in inactive], [self.maria.pk])

    def test_find_by_unknown_status(self):
        with self.assertRaises(DomainValidationError):
            self.services.customers.find_by_status('BANNED')

    def test_search_by_first_or_last_name(self):
        self.assertEqual([c.pk for c in self.services.customers.search_by_name('lopez')], [self.maria.pk])
        self.assertEqual([c.pk for c in self.services.customers.search_by_name('JUAN')], [self.juan.pk])

    def test_delete_cascades_to_orders_and_items(self):
        category = Category.objects.create(name='Books')
        book = Product.objects.create(name='Clean Code', price=Decimal('44.99'), stock=10, category=category)
        order = self.services.orders.save(Order(order_number='ORD-CUS-001', customer=self.juan))
        item = self.services.order_items.save(
            OrderItem(order=order, product=book, quantity=1, unit_price=book.price)
        )

        self.services.customers.delete_by_id(self.juan.pk)

        self.assertFalse(Order.objects.filter(pk=order.pk).exists())
        self.assertFalse(OrderItem.objects.filter(pk=item.pk).exists())
        self.assertTrue(Product.objects.filter(pk=book.pk).exists())

    def test_delete_missing_customer(self):
        with self.assertRaises(NotFoundError):
            self.services.customers.delete_by_id(99999)


class CustomerAPITestCase(APITestCase):

    def setUp(self):
        self.customer = Customer.objects.create(
            first_name='Carlos', last_name='Martinez', email='carlos.martinez@email.com'
        )

    def test_register_customer(self):
        response = self.client.post(reverse('customers:customer-list'), {
            'first_name': 'Ana',
            'last_name': 'Gonzalez',
            'email': 'ana.gonzalez@email.com'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], Customer.Status.ACTIVE)
        self.assertEqual(response.data['order_count'], 0)

    def test_register_duplicate_email(self):
        response = self.client.post(reverse('customers:customer-list'), {
            'first_name': 'Other',
            'last_name': 'Carlos',
            'email': 'carlos.martinez@email.com'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Validation Error')

    def test_customer_by_email(self):
        response = self.client.get(reverse('customers:customer-by-email', args=['carlos.martinez@email.com']))
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.get(reverse('customers:customer-by-email', args=['nobody@email.com']))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['detail'], 'Customer not found with email: nobody@email.com')

    def test_suspend_activate_and_status(self):
        response = self.client.post(reverse('customers:customer-suspend', args=[self.customer.pk]))
        self.assertEqual(response.data['status'], Customer.Status.SUSPENDED)

        response = self.client.post(reverse('customers:customer-activate', args=[self.customer.pk]))
        self.assertEqual(response.data['status'], Customer.Status.ACTIVE)

        response = self.client.patch(
            reverse('customers:customer-status', args=[self.customer.pk]), {'status': 'GONE'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_search(self):
        response = self.client.get(reverse('customers:customer-search'), {'q': 'mart'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_missing_customer(self):
        response = self.client.delete(reverse('customers:customer-detail', args=[99999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['detail'], 'Customer not found with id: 99999')
