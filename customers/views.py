"""
Customer API Views.

Implements:
- CRUD operations for Customer through CustomerService
- Lookups by email and status, name search
- Status changes: set, suspend, activate
"""
from core.exceptions import NotFoundError
from core.views import ServiceAPIView, ServiceCountView, ServiceDetailView, ServiceListCreateView
from .models import Customer
from .serializers import CustomerSerializer, CustomerStatusSerializer


class CustomerViewMixin:
    service_name = 'customers'
    model = Customer
    serializer_class = CustomerSerializer
    entity_label = 'Customer'


class CustomerListCreateView(CustomerViewMixin, ServiceListCreateView):
    """
    GET: List all customers
    POST: Register a customer (email must be unique)
    """


class CustomerDetailView(CustomerViewMixin, ServiceDetailView):
    """
    GET: Retrieve a customer
    PUT/PATCH: Update a customer
    DELETE: Delete a customer with all of their orders
    """


class CustomerByEmailView(CustomerViewMixin, ServiceAPIView):
    """GET: Retrieve a customer by email."""

    def get(self, request, email):
        customer = self.service.find_by_email(email)
        if customer is None:
            raise NotFoundError('Customer', email, field='email')
        return self.render(customer)


class ActiveCustomersView(CustomerViewMixin, ServiceAPIView):
    """GET: Customers with status ACTIVE."""

    def get(self, request):
        return self.render(self.service.find_active(), many=True)


class CustomersByStatusView(CustomerViewMixin, ServiceAPIView):
    """GET: Customers with the given status (400 for unknown status)."""

    def get(self, request, status_value):
        return self.render(self.service.find_by_status(status_value), many=True)


class CustomerSearchView(CustomerViewMixin, ServiceAPIView):
    """
    GET: Case-insensitive search on first or last name.

    Query Parameters:
        - q: Substring to look for
    """

    def get(self, request):
        term = request.query_params.get('q', '').strip()
        return self.render(self.service.search_by_name(term), many=True)


class CustomerStatusView(CustomerViewMixin, ServiceAPIView):
    """
    PATCH: Set a customer's status.

    Body or query: {"status": "INACTIVE"}
    """

    def patch(self, request, pk):
        params = CustomerStatusSerializer(data=request.data or request.query_params)
        params.is_valid(raise_exception=True)
        return self.render(self.service.update_status(pk, params.validated_data['status']))


class CustomerSuspendView(CustomerViewMixin, ServiceAPIView):
    """POST: Suspend a customer."""

    def post(self, request, pk):
        return self.render(self.service.suspend(pk))


class CustomerActivateView(CustomerViewMixin, ServiceAPIView):
    """POST: Re-activate a customer."""

    def post(self, request, pk):
        return self.render(self.service.activate(pk))


class CustomerCountView(CustomerViewMixin, ServiceCountView):
    pass
