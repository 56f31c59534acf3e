"""
Customer Service Layer - registration rules and status management.

Deleting a customer removes all of their orders and order items through
the schema's cascade rules.
"""
import logging
from typing import List, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import transaction

from core.exceptions import DomainValidationError, NotFoundError
from core.validators import coerce_choice, is_blank
from .models import Customer
from .repositories import CustomerRepository

logger = logging.getLogger(__name__)


class CustomerService:

    def __init__(self, customer_repository: CustomerRepository):
        self.customer_repository = customer_repository

    def find_all(self) -> List[Customer]:
        return self.customer_repository.find_all()

    def find_by_id(self, pk) -> Optional[Customer]:
        return self.customer_repository.find_by_id(pk)

    def find_by_email(self, email: str) -> Optional[Customer]:
        return self.customer_repository.find_by_email(email)

    def find_by_status(self, status) -> List[Customer]:
        status = coerce_choice(Customer.Status, status)
        return self.customer_repository.find_by_status(status)

    def find_active(self) -> List[Customer]:
        return self.customer_repository.find_by_status(Customer.Status.ACTIVE)

    def search_by_name(self, term: str) -> List[Customer]:
        return self.customer_repository.search_by_name(term or '')

    def exists_by_email(self, email: str) -> bool:
        return self.customer_repository.exists_by_email(email)

    @transaction.atomic
    def save(self, customer: Customer) -> Customer:
        """
        Register or update a customer.

        Raises:
            DomainValidationError: Blank names/email, malformed or duplicate email
        """
        self._validate_customer(customer)
        is_new = customer.pk is None
        customer = self.customer_repository.save(customer)
        logger.info(f"{'Registered' if is_new else 'Updated'} customer #{customer.pk} <{customer.email}>")
        return customer

    @transaction.atomic
    def update_status(self, pk, new_status) -> Customer:
        new_status = coerce_choice(Customer.Status, new_status)
        customer = self.customer_repository.find_by_id(pk)
        if customer is None:
            raise NotFoundError('Customer', pk)

        customer.status = new_status
        customer = self.customer_repository.save(customer)
        logger.info(f"Customer #{pk} status set to {new_status}")
        return customer

    def suspend(self, pk) -> Customer:
        return self.update_status(pk, Customer.Status.SUSPENDED)

    def activate(self, pk) -> Customer:
        return self.update_status(pk, Customer.Status.ACTIVE)

    @transaction.atomic
    def delete_by_id(self, pk) -> None:
        if not self.customer_repository.exists_by_id(pk):
            raise NotFoundError('Customer', pk)
        self.customer_repository.delete_by_id(pk)
        logger.info(f"Deleted customer #{pk} with their orders")

    def count(self) -> int:
        return self.customer_repository.count()

    def _validate_customer(self, customer: Customer) -> None:
        if customer is None:
            raise DomainValidationError("Customer must not be null")
        if is_blank(customer.first_name):
            raise DomainValidationError("First name must not be empty")
        if is_blank(customer.last_name):
            raise DomainValidationError("Last name must not be empty")
        if is_blank(customer.email):
            raise DomainValidationError("Email must not be empty")

        try:
            validate_email(customer.email)
        except DjangoValidationError:
            raise DomainValidationError(f"Invalid email address: {customer.email}")

        customer.status = coerce_choice(Customer.Status, customer.status)

        if customer.pk is None:
            taken = self.customer_repository.exists_by_email(customer.email)
        else:
            taken = self.customer_repository.exists_by_email_excluding(customer.email, customer.pk)
        if taken:
            raise DomainValidationError(
                f"A customer with email {customer.email} already exists"
            )
