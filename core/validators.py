"""
Small input checks shared by the domain services.
"""
from decimal import Decimal, InvalidOperation
from typing import Optional, Type

from django.db import models

from .exceptions import DomainValidationError


def is_blank(value) -> bool:
    """True for None, empty or whitespace-only strings."""
    return value is None or not str(value).strip()


def to_decimal(value, field: str, decimal_places: Optional[int] = None) -> Optional[Decimal]:
    """
    Coerce a numeric input to Decimal, keeping None as None.

    With `decimal_places`, values that would be rounded on storage
    (e.g. 79.999 for a 2-place column) are rejected; 79.990 is accepted.

    Raises:
        DomainValidationError: Not a finite number, or too many decimal places
    """
    if value is None:
        return None
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise DomainValidationError(f"{field} must be a decimal number")
    if not value.is_finite():
        raise DomainValidationError(f"{field} must be a decimal number")

    if decimal_places is not None:
        try:
            exact = value.quantize(Decimal(1).scaleb(-decimal_places)) == value
        except InvalidOperation:
            raise DomainValidationError(f"{field} is out of range")
        if not exact:
            raise DomainValidationError(
                f"{field} must have at most {decimal_places} decimal places"
            )
    return value


def decimal_places_of(model, field_name: str) -> int:
    """decimal_places declared on a model's DecimalField."""
    return model._meta.get_field(field_name).decimal_places


def coerce_choice(choices: Type[models.TextChoices], value, field: str = 'status'):
    """
    Resolve a TextChoices member from a member or its string value.

    Raises:
        DomainValidationError: If the value is not one of the choices
    """
    if isinstance(value, choices):
        return value
    try:
        return choices(str(value).upper())
    except ValueError:
        allowed = ', '.join(choices.values)
        raise DomainValidationError(f"Invalid {field} '{value}'. Allowed: {allowed}")
