"""
Composition root - wires repositories into the domain services.

Views call get_services(); tests may build their own Services with
build_services().
"""
from dataclasses import dataclass
from functools import lru_cache

from catalog.repositories import CategoryRepository, ProductRepository
from catalog.services import CategoryService, ProductService
from customers.repositories import CustomerRepository
from customers.services import CustomerService
from orders.repositories import OrderItemRepository, OrderRepository
from orders.services import OrderItemService, OrderService


@dataclass(frozen=True)
class Services:
    categories: CategoryService
    products: ProductService
    customers: CustomerService
    orders: OrderService
    order_items: OrderItemService


def build_services() -> Services:
    category_repository = CategoryRepository()
    product_repository = ProductRepository()
    customer_repository = CustomerRepository()
    order_repository = OrderRepository()
    order_item_repository = OrderItemRepository()

    orders = OrderService(
        order_repository=order_repository,
        order_item_repository=order_item_repository,
        customer_repository=customer_repository,
        product_repository=product_repository,
    )
    return Services(
        categories=CategoryService(
            category_repository=category_repository,
            product_repository=product_repository,
            order_item_repository=order_item_repository,
            order_service=orders,
        ),
        products=ProductService(
            product_repository=product_repository,
            category_repository=category_repository,
        ),
        customers=CustomerService(customer_repository=customer_repository),
        orders=orders,
        order_items=OrderItemService(
            order_item_repository=order_item_repository,
            order_repository=order_repository,
            product_repository=product_repository,
            order_service=orders,
        ),
    )


@lru_cache(maxsize=1)
def get_services() -> Services:
    return build_services()
