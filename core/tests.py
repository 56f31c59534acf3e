"""
Tests for rate limiting and service error responses.
"""
from decimal import Decimal
from unittest.mock import MagicMock, patch

from django.test import SimpleTestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from catalog.models import Category, Product
from core.exceptions import (
    DomainValidationError,
    NotFoundError,
    ReferentialIntegrityError,
    api_exception_handler,
)
from core.rate_limiting import RateLimiter, limiter
from core.validators import coerce_choice, to_decimal
from orders.models import Order


class RateLimiterTestCase(SimpleTestCase):

    @override_settings(RATE_LIMIT_ENABLED=False)
    def test_disabled_limiter_does_not_count(self):
        rate_limiter = RateLimiter()
        rate_limiter._client = MagicMock()

        self.assertIsNone(rate_limiter.hit('key', 60))
        rate_limiter._client.incr.assert_not_called()

    @override_settings(RATE_LIMIT_ENABLED=True)
    def test_first_hit_sets_window(self):
        rate_limiter = RateLimiter()
        rate_limiter._client = MagicMock()
        rate_limiter._client.incr.return_value = 1
        rate_limiter._client.ttl.return_value = 60

        self.assertEqual(rate_limiter.hit('key', 60), (1, 60))
        rate_limiter._client.expire.assert_called_once_with('key', 60)

    @override_settings(RATE_LIMIT_ENABLED=True)
    def test_unavailable_redis_disables_limiting(self):
        rate_limiter = RateLimiter()
        rate_limiter._unavailable = True

        self.assertIsNone(rate_limiter.hit('key', 60))


class RateLimitedViewTestCase(APITestCase):

    def setUp(self):
        category = Category.objects.create(name='Books')
        Product.objects.create(name='Clean Code', price=Decimal('44.99'), stock=5, category=category)

    def test_over_limit_returns_429(self):
        with patch.object(limiter, 'hit', return_value=(21, 42)):
            response = self.client.get(reverse('catalog:product-search'), {'name': 'clean'})

        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(response['Retry-After'], '42')

    def test_under_limit_sets_headers(self):
        with patch.object(limiter, 'hit', return_value=(3, 50)):
            response = self.client.get(reverse('catalog:product-search'), {'name': 'clean'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['X-RateLimit-Remaining'], '17')
        self.assertEqual(len(response.data), 1)


class ExceptionHandlerTestCase(SimpleTestCase):

    def test_not_found_maps_to_404(self):
        response = api_exception_handler(NotFoundError('Order', 7), {})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': 'Not Found', 'detail': 'Order not found with id: 7'})

    def test_referential_integrity_maps_to_409(self):
        response = api_exception_handler(ReferentialIntegrityError('in use'), {})
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_other_exceptions_fall_through(self):
        self.assertIsNone(api_exception_handler(ValueError('boom'), {}))


class ValidatorsTestCase(SimpleTestCase):

    def test_coerce_choice_is_case_insensitive(self):
        self.assertEqual(coerce_choice(Order.Status, 'shipped'), Order.Status.SHIPPED)

    def test_coerce_choice_rejects_unknown(self):
        with self.assertRaises(DomainValidationError):
            coerce_choice(Order.Status, 'LOST')

    def test_to_decimal(self):
        self.assertEqual(to_decimal('19.99', 'price'), Decimal('19.99'))
        self.assertIsNone(to_decimal(None, 'price'))
        with self.assertRaises(DomainValidationError):
            to_decimal('abc', 'price')
        with self.assertRaises(DomainValidationError):
            to_decimal('NaN', 'price')

    def test_to_decimal_rejects_extra_decimal_places(self):
        self.assertEqual(to_decimal('79.99', 'price', 2), Decimal('79.99'))
        self.assertEqual(to_decimal('79.990', 'price', 2), Decimal('79.99'))
        self.assertEqual(to_decimal(80, 'price', 2), Decimal('80'))
        with self.assertRaises(DomainValidationError) as ctx:
            to_decimal('79.999', 'price', 2)
        self.assertEqual(str(ctx.exception), 'price must have at most 2 decimal places')

    def test_not_found_message_names_lookup_field(self):
        self.assertEqual(
            str(NotFoundError('Customer', 'a@b.com', field='email')),
            'Customer not found with email: a@b.com'
        )
