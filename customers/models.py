"""
Customer Models - Registered customers and their lifecycle status.
"""
from django.db import models
from django.db.models import Q
from django.utils import timezone


class Customer(models.Model):
    """
    Customer entity. Owns its orders; deleting a customer deletes them.

    Status:
        - ACTIVE: Default for new registrations
        - INACTIVE: Dormant account
        - SUSPENDED: Blocked by an operator
    """

    class Status(models.TextChoices):
        ACTIVE = 'ACTIVE', 'Active'
        INACTIVE = 'INACTIVE', 'Inactive'
        SUSPENDED = 'SUSPENDED', 'Suspended'

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(
        max_length=150,
        unique=True,
        help_text="Unique contact email"
    )
    phone = models.CharField(max_length=20, blank=True, null=True)
    address = models.CharField(max_length=500, blank=True, null=True)
    birth_date = models.DateField(blank=True, null=True)
    registration_date = models.DateField(default=timezone.localdate)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True,
        help_text="Current customer status"
    )

    class Meta:
        db_table = 'customers'
        verbose_name = 'Customer'
        verbose_name_plural = 'Customers'
        ordering = ['id']
        constraints = [
            models.CheckConstraint(
                condition=Q(status__in=['ACTIVE', 'INACTIVE', 'SUSPENDED']),
                name='chk_customer_status'
            ),
        ]

    def __str__(self):
        return f"{self.full_name} <{self.email}>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE
