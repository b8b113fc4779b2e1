"""Tests for customer order cancellation."""

import pytest

from conftest import order_request
from karigarverse.errors import InvalidStateError, NotFoundError, PermissionDeniedError
from karigarverse.models import Order, Product
from karigarverse.services.order_service import cancel_order, place_order


@pytest.fixture
def order(session, buyer, product):
    return place_order(session, buyer.id, order_request([(product, 2)]))


def set_status(session, order, status):
    order = session.get(Order, order.id)
    order.status = status
    session.add(order)
    session.commit()


def test_cancel_pending_order(session, buyer, order):
    created_at = order.updated_at

    cancelled = cancel_order(session, buyer.id, order.id)

    assert cancelled.status == "cancelled"
    assert cancelled.updated_at >= created_at
    assert session.get(Order, order.id).status == "cancelled"


def test_cancel_processing_order(session, buyer, order):
    set_status(session, order, "processing")

    assert cancel_order(session, buyer.id, order.id).status == "cancelled"


def test_status_compare_ignores_case(session, buyer, order):
    set_status(session, order, "Processing")

    assert cancel_order(session, buyer.id, order.id).status == "cancelled"


def test_cancel_twice(session, buyer, order):
    cancel_order(session, buyer.id, order.id)

    with pytest.raises(InvalidStateError):
        cancel_order(session, buyer.id, order.id)

    assert session.get(Order, order.id).status == "cancelled"


@pytest.mark.parametrize("status", ["shipped", "delivered"])
def test_cannot_cancel_after_shipping(session, buyer, order, status):
    set_status(session, order, status)

    with pytest.raises(InvalidStateError):
        cancel_order(session, buyer.id, order.id)

    assert session.get(Order, order.id).status == status


def test_other_customer_cannot_cancel(session, other_buyer, order):
    with pytest.raises(PermissionDeniedError):
        cancel_order(session, other_buyer.id, order.id)

    assert session.get(Order, order.id).status == "pending"


def test_missing_order(session, buyer):
    with pytest.raises(NotFoundError):
        cancel_order(session, buyer.id, 424242)


def test_stock_not_restored_by_default(session, buyer, product, order):
    cancel_order(session, buyer.id, order.id)

    assert session.get(Product, product.id).stock_quantity == 3


def test_stock_restored_when_enabled(session, buyer, product, order):
    cancel_order(session, buyer.id, order.id, restock=True)

    assert session.get(Product, product.id).stock_quantity == 5


@pytest.mark.parametrize("who, status, error", [
    ("other_buyer", "pending", PermissionDeniedError),
    ("buyer", "shipped", InvalidStateError),
])
def test_rejection_releases_the_row_lock(request, session, order, who, status, error):
    set_status(session, order, status)
    customer = request.getfixturevalue(who)

    with pytest.raises(error):
        cancel_order(session, customer.id, order.id)

    assert not session.in_transaction()


def test_missing_order_releases_the_transaction(session, buyer):
    with pytest.raises(NotFoundError):
        cancel_order(session, buyer.id, 424242)

    assert not session.in_transaction()
