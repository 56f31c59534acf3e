"""
Persistence gateway for customers.
"""
from typing import List, Optional

from django.db.models import Q

from core.repositories import Repository
from .models import Customer


class CustomerRepository(Repository[Customer]):
    model = Customer

    def find_by_email(self, email: str) -> Optional[Customer]:
        return self.get_queryset().filter(email=email).first()

    def exists_by_email(self, email: str) -> bool:
        return self.model.objects.filter(email=email).exists()

    def exists_by_email_excluding(self, email: str, pk) -> bool:
        """True if a customer other than `pk` already uses `email`."""
        return self.model.objects.filter(email=email).exclude(pk=pk).exists()

    def find_by_status(self, status: Customer.Status) -> List[Customer]:
        return list(self.get_queryset().filter(status=status))

    def search_by_name(self, term: str) -> List[Customer]:
        """Case-insensitive substring match on first or last name."""
        return list(
            self.get_queryset().filter(
                Q(first_name__icontains=term) | Q(last_name__icontains=term)
            )
        )
