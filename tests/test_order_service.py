"""Tests for order placement."""

import re

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from conftest import ADDRESS, add_cart_row, make_product, order_request
from karigarverse.errors import (
    ConflictError,
    InsufficientStockError,
    InvalidArgumentError,
    NotFoundError,
)
from karigarverse.models import CartItem, Order, OrderItem, Product
from karigarverse.schemas.order_schemas import OrderCreate, OrderItemCreate
from karigarverse.services.order_service import place_order
from karigarverse.utils.order_number import generate_order_number


def count(session, model):
    return len(session.exec(select(model)).all())


class TestPlaceOrder:
    def test_places_order_and_clears_cart(self, session, buyer, product):
        add_cart_row(session, buyer, product, 2)

        order = place_order(session, buyer.id, order_request([(product, 2)]))

        assert order.id is not None
        assert order.status == "pending"
        assert order.customer_id == buyer.id
        assert order.subtotal == 200
        assert order.total_amount == 250
        assert order.shipping_address == ADDRESS

        items = session.exec(select(OrderItem).where(OrderItem.order_id == order.id)).all()
        assert len(items) == 1
        assert items[0].product_id == product.id
        assert items[0].artisan_id == product.artisan_id
        assert items[0].quantity == 2
        assert items[0].unit_price == 100
        assert items[0].total_price == 200

        assert session.get(Product, product.id).stock_quantity == 3
        assert count(session, CartItem) == 0

    def test_clears_items_that_were_not_ordered(self, session, buyer, artisan, product):
        scarf = make_product(session, artisan, name="Pashmina Scarf", price=900.0)
        add_cart_row(session, buyer, product, 1)
        add_cart_row(session, buyer, scarf, 1)

        place_order(session, buyer.id, order_request([(product, 1)]))

        assert count(session, CartItem) == 0
        assert session.get(Product, scarf.id).stock_quantity == 5

    def test_leaves_other_users_carts_alone(self, session, buyer, other_buyer, product):
        add_cart_row(session, other_buyer, product, 1)

        place_order(session, buyer.id, order_request([(product, 1)]))

        rows = session.exec(select(CartItem)).all()
        assert [row.user_id for row in rows] == [other_buyer.id]

    def test_creates_one_item_per_line(self, session, buyer, artisan, product):
        lamp = make_product(session, artisan, name="Brass Lamp", price=450.0, stock=2)

        order = place_order(session, buyer.id, order_request([(product, 1), (lamp, 2)]))

        items = session.exec(select(OrderItem).where(OrderItem.order_id == order.id)).all()
        assert len(items) == 2
        assert count(session, Order) == 1
        assert session.get(Product, lamp.id).stock_quantity == 0

    def test_price_is_a_snapshot(self, session, buyer, product):
        order = place_order(session, buyer.id, order_request([(product, 1)]))

        product = session.get(Product, product.id)
        product.price = 999.0
        session.add(product)
        session.commit()

        item = session.exec(select(OrderItem).where(OrderItem.order_id == order.id)).one()
        assert item.unit_price == 100
        assert item.total_price == 100

    def test_order_for_all_remaining_stock(self, session, buyer, product):
        place_order(session, buyer.id, order_request([(product, 5)]))

        assert session.get(Product, product.id).stock_quantity == 0

    def test_same_product_on_two_lines_takes_both(self, session, buyer, product):
        place_order(session, buyer.id, order_request([(product, 2), (product, 3)]))

        assert session.get(Product, product.id).stock_quantity == 0

    def test_artisan_id_is_optional(self, session, buyer, product):
        request = order_request([(product, 1)])
        request.items[0].artisan_id = None

        order = place_order(session, buyer.id, request)

        item = session.exec(select(OrderItem).where(OrderItem.order_id == order.id)).one()
        assert item.artisan_id == product.artisan_id


class TestPlaceOrderAtomicity:
    def test_insufficient_stock_changes_nothing(self, session, buyer, artisan):
        product = make_product(session, artisan, stock=1)
        add_cart_row(session, buyer, product, 2)

        with pytest.raises(InsufficientStockError) as exc_info:
            place_order(session, buyer.id, order_request([(product, 2)]))

        assert exc_info.value.available == 1
        assert exc_info.value.requested == 2
        assert count(session, Order) == 0
        assert count(session, OrderItem) == 0
        assert session.get(Product, product.id).stock_quantity == 1
        assert session.exec(select(CartItem)).one().quantity == 2

    def test_missing_product_rolls_back_earlier_lines(self, session, buyer, artisan, product):
        add_cart_row(session, buyer, product, 1)
        missing = Product(id=9999, artisan_id=artisan.id, name="Ghost", price=10.0)

        with pytest.raises(NotFoundError):
            place_order(session, buyer.id, order_request([(product, 2), (missing, 1)]))

        assert count(session, Order) == 0
        assert count(session, OrderItem) == 0
        assert session.get(Product, product.id).stock_quantity == 5
        assert count(session, CartItem) == 1

    def test_second_line_short_of_stock_rolls_back_first(self, session, buyer, artisan, product):
        lamp = make_product(session, artisan, name="Brass Lamp", price=450.0, stock=1)

        with pytest.raises(InsufficientStockError):
            place_order(session, buyer.id, order_request([(product, 3), (lamp, 2)]))

        assert session.get(Product, product.id).stock_quantity == 5
        assert session.get(Product, lamp.id).stock_quantity == 1
        assert count(session, Order) == 0

    def test_session_usable_after_failure(self, session, buyer, artisan, product):
        scarce = make_product(session, artisan, name="Rare Print", stock=0)

        with pytest.raises(InsufficientStockError):
            place_order(session, buyer.id, order_request([(scarce, 1)]))

        order = place_order(session, buyer.id, order_request([(product, 1)]))
        assert order.id is not None
        assert count(session, Order) == 1


class TestPlaceOrderValidation:
    def test_empty_items(self, session, buyer):
        request = OrderCreate(
            subtotal=0, total_amount=0, shipping_address=ADDRESS, items=[]
        )

        with pytest.raises(InvalidArgumentError):
            place_order(session, buyer.id, request)

    def test_missing_shipping_address(self, session, buyer, product):
        with pytest.raises(InvalidArgumentError):
            place_order(session, buyer.id, order_request([(product, 1)], shipping_address={}))

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity(self, session, buyer, product, quantity):
        request = order_request([(product, 1)])
        request.items[0].quantity = quantity

        with pytest.raises(InvalidArgumentError):
            place_order(session, buyer.id, request)

        assert session.get(Product, product.id).stock_quantity == 5

    def test_non_positive_price(self, session, buyer, product):
        request = order_request([(product, 1)])
        request.items[0].unit_price = 0

        with pytest.raises(InvalidArgumentError):
            place_order(session, buyer.id, request)

    def test_negative_money_field(self, session, buyer, product):
        with pytest.raises(InvalidArgumentError):
            place_order(session, buyer.id, order_request([(product, 1)], discount=-10.0))

    def test_subtotal_must_match_lines(self, session, buyer, product):
        request = order_request([(product, 2)], subtotal=150.0, total_amount=200.0)

        with pytest.raises(InvalidArgumentError, match="Subtotal"):
            place_order(session, buyer.id, request)

        assert count(session, Order) == 0

    def test_total_must_add_up(self, session, buyer, product):
        request = order_request([(product, 2)], total_amount=1.0)

        with pytest.raises(InvalidArgumentError, match="Total"):
            place_order(session, buyer.id, request)

    def test_discount_is_subtracted(self, session, buyer, product):
        order = place_order(
            session, buyer.id, order_request([(product, 2)], tax=36.0, discount=20.0)
        )

        assert order.total_amount == 266.0

    def test_wrong_artisan(self, session, buyer, product):
        request = order_request([(product, 1)])
        request.items[0].artisan_id = product.artisan_id + 100

        with pytest.raises(InvalidArgumentError):
            place_order(session, buyer.id, request)

        assert session.get(Product, product.id).stock_quantity == 5

    def test_inactive_product(self, session, buyer, artisan):
        retired = make_product(session, artisan, name="Old Basket", is_active=False)

        with pytest.raises(InvalidArgumentError):
            place_order(session, buyer.id, order_request([(retired, 1)]))

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_unit_price(self, session, buyer, product, value):
        request = order_request([(product, 1)])
        request.items[0].unit_price = value
        request.subtotal = value
        request.total_amount = value

        with pytest.raises(InvalidArgumentError, match="finite"):
            place_order(session, buyer.id, request)

        assert count(session, Order) == 0
        assert session.get(Product, product.id).stock_quantity == 5

    @pytest.mark.parametrize("field", ["subtotal", "tax_amount", "shipping_cost", "discount_amount", "total_amount"])
    @pytest.mark.parametrize("value", [float("inf"), float("nan")])
    def test_non_finite_money_field(self, session, buyer, product, field, value):
        request = order_request([(product, 1)])
        setattr(request, field, value)

        with pytest.raises(InvalidArgumentError, match="finite"):
            place_order(session, buyer.id, request)

        assert count(session, Order) == 0

    @pytest.mark.parametrize("value", [float("inf"), float("nan")])
    def test_schema_rejects_non_finite_amounts(self, product, value):
        with pytest.raises(ValidationError):
            order_request([(product, 1)], total_amount=value)

        with pytest.raises(ValidationError):
            OrderItemCreate(product_id=product.id, quantity=1, unit_price=value)


class TestOrderNumbers:
    def test_format(self):
        number = generate_order_number()

        assert re.fullmatch(r"KV-\d{13}-[A-Z0-9]{9}", number)

    def test_custom_prefix(self):
        assert generate_order_number("TEST").startswith("TEST-")

    def test_numbers_are_unique(self):
        numbers = {generate_order_number() for _ in range(1000)}

        assert len(numbers) == 1000

    def test_collision_is_retried(self, session, buyer, product):
        first = place_order(session, buyer.id, order_request([(product, 1)]), number_factory=lambda: "KV-1-TAKEN0000")

        candidates = iter(["KV-1-TAKEN0000", "KV-1-TAKEN0000", "KV-2-FRESH0000"])
        second = place_order(
            session, buyer.id, order_request([(product, 1)]), number_factory=lambda: next(candidates)
        )

        assert first.order_number == "KV-1-TAKEN0000"
        assert second.order_number == "KV-2-FRESH0000"
        assert count(session, Order) == 2
        assert session.get(Product, product.id).stock_quantity == 3

    def test_gives_up_after_bounded_attempts(self, session, buyer, product):
        place_order(session, buyer.id, order_request([(product, 1)]), number_factory=lambda: "KV-1-TAKEN0000")
        calls = []

        def always_taken():
            calls.append(1)
            return "KV-1-TAKEN0000"

        with pytest.raises(ConflictError):
            place_order(
                session, buyer.id, order_request([(product, 1)]),
                number_factory=always_taken, max_attempts=3,
            )

        assert len(calls) == 3
        assert count(session, Order) == 1
        assert session.get(Product, product.id).stock_quantity == 4

    def test_other_integrity_errors_are_not_retried(self, session, product):
        calls = []

        def numbers():
            calls.append(1)
            return generate_order_number()

        # no such customer: the foreign key rejects the order row
        with pytest.raises(IntegrityError):
            place_order(session, 424242, order_request([(product, 1)]), number_factory=numbers)

        assert len(calls) == 1
        assert count(session, Order) == 0
        assert session.get(Product, product.id).stock_quantity == 5
