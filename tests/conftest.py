import pytest

from erdiagram import DiagramHost


def entity(*names):
    return {"properties": [{"name": n, "type": "int" if n.endswith("id") or n.endswith("Id") else "str"} for n in names]}


def relation(source, target):
    source_entity, source_property = source.split(".")
    target_entity, target_property = target.split(".")
    return {
        "source": {"entity": source_entity, "property": source_property},
        "target": {"entity": target_entity, "property": target_property},
    }


@pytest.fixture
def customer_order():
    """Order.customerId -> Customer.id"""
    return {
        "entities": {
            "Customer": entity("id", "name"),
            "Order": entity("id", "customerId"),
        },
        "relationships": [relation("Order.customerId", "Customer.id")],
    }


@pytest.fixture
def shop():
    """A small schema with a self-reference and an entity on both sides of Order."""
    return {
        "entities": {
            "Customer": entity("id", "name", "referrerId"),
            "Order": entity("id", "customerId", "invoiceId"),
            "Invoice": entity("id", "orderId"),
            "Product": entity("id", "title"),
            "LineItem": entity("id", "orderId", "productId"),
        },
        "relationships": [
            relation("Order.customerId", "Customer.id"),
            relation("Customer.referrerId", "Customer.id"),
            relation("Order.invoiceId", "Invoice.id"),
            relation("Invoice.orderId", "Order.id"),
            relation("LineItem.orderId", "Order.id"),
            relation("LineItem.productId", "Product.id"),
        ],
    }


@pytest.fixture
def host():
    return DiagramHost(width=960, height=640, seed=7)
