"""Tests for categories and the product catalog."""

import pytest

from conftest import make_product
from karigarverse.errors import NotFoundError
from karigarverse.models import Category
from karigarverse.schemas.product_schemas import ProductCreate, ProductUpdate
from karigarverse.services.category_service import get_category_by_slug, list_categories
from karigarverse.services.product_service import (
    create_product,
    get_product_detail,
    list_products,
    update_product,
)


def make_category(session, name, slug, sort_order=0, is_active=True):
    category = Category(name=name, slug=slug, sort_order=sort_order, is_active=is_active)
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@pytest.fixture
def pottery(session):
    return make_category(session, "Pottery", "pottery", sort_order=1)


@pytest.fixture
def textiles(session):
    return make_category(session, "Textiles", "textiles", sort_order=2)


class TestCategories:
    def test_ordered_by_sort_order_then_name(self, session, pottery, textiles):
        jewellery = make_category(session, "Jewellery", "jewellery", sort_order=1)

        names = [c.name for c in list_categories(session)]

        assert names == [jewellery.name, pottery.name, textiles.name]

    def test_hides_inactive(self, session, pottery):
        make_category(session, "Toys", "toys", is_active=False)

        assert [c.slug for c in list_categories(session)] == ["pottery"]
        assert len(list_categories(session, include_inactive=True)) == 2

    def test_by_slug(self, session, pottery):
        assert get_category_by_slug(session, "pottery").id == pottery.id

    def test_inactive_slug_is_not_found(self, session):
        make_category(session, "Toys", "toys", is_active=False)

        with pytest.raises(NotFoundError):
            get_category_by_slug(session, "toys")

    def test_unknown_slug(self, session):
        with pytest.raises(NotFoundError):
            get_category_by_slug(session, "woodwork")


class TestCatalog:
    def test_filter_by_category_slug(self, session, artisan, product, pottery, textiles):
        product.category_id = pottery.id
        session.add(product)
        session.commit()
        shawl = make_product(session, artisan, name="Pashmina Shawl")
        shawl.category_id = textiles.id
        session.add(shawl)
        session.commit()
        make_product(session, artisan, name="Uncategorised Box")

        rows = list_products(session, category="pottery")

        assert [row["name"] for row in rows] == ["Blue Pottery Vase"]
        assert rows[0]["category_name"] == "Pottery"
        assert rows[0]["category_slug"] == "pottery"
        assert rows[0]["artisan_shop_name"] == "Meera's Clay Studio"
        assert len(list_products(session)) == 3

    def test_detail_without_category(self, session, product):
        detail = get_product_detail(session, product.id)

        assert detail["id"] == product.id
        assert detail["category_name"] is None
        assert detail["artisan_shop_name"] == "Meera's Clay Studio"

    def test_detail_missing(self, session):
        with pytest.raises(NotFoundError):
            get_product_detail(session, 424242)

    def test_create_in_category(self, session, artisan_user, artisan, pottery):
        product = create_product(session, artisan_user, ProductCreate(
            name="Terracotta Lamp", price=250.0, stock_quantity=3, category_id=pottery.id,
        ))

        assert product.category_id == pottery.id

    def test_create_in_unknown_category(self, session, artisan_user, artisan):
        with pytest.raises(NotFoundError):
            create_product(session, artisan_user, ProductCreate(
                name="Terracotta Lamp", price=250.0, stock_quantity=3, category_id=424242,
            ))

        assert list_products(session) == []

    def test_move_to_unknown_category(self, session, artisan_user, product, pottery):
        with pytest.raises(NotFoundError):
            update_product(session, artisan_user, product.id, ProductUpdate(category_id=424242))

        moved = update_product(session, artisan_user, product.id, ProductUpdate(category_id=pottery.id))
        assert moved.category_id == pottery.id
