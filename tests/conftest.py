"""Pytest fixtures for KarigarVerse tests."""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URI", "sqlite://")
os.environ.setdefault("ENV", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from karigarverse.database import get_session
from karigarverse.main import app
from karigarverse.models import ArtisanProfile, CartItem, Product, User
from karigarverse.schemas.order_schemas import OrderCreate, OrderItemCreate
from karigarverse.utils.hash import hash_password
from karigarverse.utils.token import create_access_token

TEST_PASSWORD = "secret123"

ADDRESS = {"line1": "12 MI Road", "city": "Jaipur", "state": "Rajasthan", "zip_code": "302001"}


@pytest.fixture(scope="session")
def password_hash():
    return hash_password(TEST_PASSWORD)


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    def override_get_session():
        return session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(session, password_hash, email, first_name="Asha", last_name="Verma"):
    user = User(
        email=email,
        password_hash=password_hash,
        first_name=first_name,
        last_name=last_name,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def make_product(session, artisan, name="Blue Pottery Vase", price=100.0, stock=5, is_active=True):
    product = Product(
        artisan_id=artisan.id,
        name=name,
        description=f"Handmade {name.lower()}",
        price=price,
        images=[f"/images/{name.lower().replace(' ', '-')}.jpg"],
        stock_quantity=stock,
        is_active=is_active,
    )
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


def add_cart_row(session, user, product, quantity):
    session.add(CartItem(user_id=user.id, product_id=product.id, quantity=quantity))
    session.commit()


def auth_headers(user):
    token = create_access_token({"user_id": user.id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def buyer(session, password_hash):
    return make_user(session, password_hash, "buyer@example.com")


@pytest.fixture
def other_buyer(session, password_hash):
    return make_user(session, password_hash, "other@example.com", first_name="Ravi", last_name="Nair")


@pytest.fixture
def artisan_user(session, password_hash):
    return make_user(session, password_hash, "artisan@example.com", first_name="Meera", last_name="Das")


@pytest.fixture
def artisan(session, artisan_user):
    profile = ArtisanProfile(
        user_id=artisan_user.id,
        shop_name="Meera's Clay Studio",
        specialties=["pottery"],
        location="Jaipur",
    )
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile


@pytest.fixture
def product(session, artisan):
    return make_product(session, artisan)


def order_request(lines, shipping=50.0, tax=0.0, discount=0.0, **overrides):
    """Build a consistent order request from (product, quantity) pairs."""
    items = [
        OrderItemCreate(
            product_id=product.id,
            artisan_id=product.artisan_id,
            quantity=quantity,
            unit_price=product.price,
        )
        for product, quantity in lines
    ]
    subtotal = sum(item.quantity * item.unit_price for item in items)
    data = dict(
        subtotal=subtotal,
        tax_amount=tax,
        shipping_cost=shipping,
        discount_amount=discount,
        total_amount=subtotal + tax + shipping - discount,
        shipping_address=ADDRESS,
        payment_method="cod",
        items=items,
    )
    data.update(overrides)
    return OrderCreate(**data)
