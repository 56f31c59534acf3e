"""
Base API views that route requests through the domain services.

Serializers only parse and render; every write goes through the
service's save()/delete_by_id(), so business rules and derived fields
are applied in one place. Service errors become responses in
core.exceptions.api_exception_handler.
"""
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from config.container import get_services
from .exceptions import NotFoundError


class ServiceAPIView(APIView):
    """
    APIView bound to one domain service.

    Subclasses set:
        service_name: attribute of config.container.Services
        model: model class built from validated data on create
        serializer_class: serializer for input and output
        entity_label: name used in not-found messages
    """
    service_name = None
    model = None
    serializer_class = None
    entity_label = 'Entity'

    @property
    def service(self):
        return getattr(get_services(), self.service_name)

    def get_serializer(self, *args, **kwargs):
        return self.serializer_class(*args, **kwargs)

    def get_object(self, pk):
        obj = self.service.find_by_id(pk)
        if obj is None:
            raise NotFoundError(self.entity_label, pk)
        return obj

    def render(self, data, many=False, status_code=status.HTTP_200_OK):
        return Response(self.get_serializer(data, many=many).data, status=status_code)

    def build_entity(self, validated_data):
        return self.model(**validated_data)


class ServiceListCreateView(ServiceAPIView):
    """
    GET: List all entities
    POST: Create an entity through service.save()
    """

    def get(self, request):
        return self.render(self.service.find_all(), many=True)

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entity = self.service.save(self.build_entity(serializer.validated_data))
        return self.render(entity, status_code=status.HTTP_201_CREATED)


class ServiceDetailView(ServiceAPIView):
    """
    GET: Retrieve an entity
    PUT/PATCH: Update an entity through service.save()
    DELETE: Delete an entity through service.delete_by_id()
    """

    def get(self, request, pk):
        return self.render(self.get_object(pk))

    def put(self, request, pk):
        return self._update(request, pk, partial=False)

    def patch(self, request, pk):
        return self._update(request, pk, partial=True)

    def delete(self, request, pk):
        self.service.delete_by_id(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    def _update(self, request, pk, partial):
        entity = self.get_object(pk)
        serializer = self.get_serializer(entity, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        for attr, value in serializer.validated_data.items():
            setattr(entity, attr, value)
        entity = self.service.save(entity)
        return self.render(entity)


class ServiceCountView(ServiceAPIView):
    """GET: Number of stored entities."""

    def get(self, request):
        return Response({'count': self.service.count()})
