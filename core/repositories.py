"""
Persistence gateway base - generic CRUD over a Django model manager.

Each app subclasses Repository with its model and predicate queries.
Services only talk to repositories, never to model managers directly.
"""
import logging
from typing import Generic, List, Optional, Type, TypeVar

from django.db import models
from django.db.models import ProtectedError

from .exceptions import ReferentialIntegrityError

logger = logging.getLogger(__name__)

ModelT = TypeVar('ModelT', bound=models.Model)


class Repository(Generic[ModelT]):
    """
    CRUD access to one entity table.

    Subclasses set `model` and may override `get_queryset()` to add
    select_related/prefetch_related defaults.
    """
    model: Type[ModelT] = None

    def get_queryset(self) -> models.QuerySet:
        return self.model.objects.all()

    def find_by_id(self, pk) -> Optional[ModelT]:
        if pk is None:
            return None
        return self.get_queryset().filter(pk=pk).first()

    def find_all(self) -> List[ModelT]:
        return list(self.get_queryset())

    def exists_by_id(self, pk) -> bool:
        if pk is None:
            return False
        return self.model.objects.filter(pk=pk).exists()

    def save(self, entity: ModelT) -> ModelT:
        entity.save()
        return entity

    def delete_by_id(self, pk) -> None:
        """
        Delete a row, letting the schema's cascade rules propagate.

        Raises:
            ReferentialIntegrityError: If a PROTECT foreign key blocks it
        """
        try:
            self.model.objects.filter(pk=pk).delete()
        except ProtectedError as e:
            blockers = sorted({str(obj._meta.verbose_name) for obj in e.protected_objects})
            raise ReferentialIntegrityError(
                f"Cannot delete {self.model._meta.verbose_name} {pk}: "
                f"still referenced by {', '.join(blockers)}"
            ) from e

    def count(self) -> int:
        return self.model.objects.count()
