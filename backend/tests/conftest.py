"""
Pytest fixtures and configuration for Kamioun Marketplace Backend tests

This file provides shared fixtures that can be used across all test modules:
an in-memory SQLite database per test, a fake storage service, a FastAPI
TestClient wired to both, and a seeded marketplace (customer, partner,
product offer with stock, payment method, order states, manufacturer).

Author: Kamioun
Date: 2025-03-02
"""
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from kamioun.core.auth import create_access_token, hash_password
from kamioun.core.database import get_db, init_db
from kamioun.core.rate_limit import rate_limiter
from kamioun.core.storage import StorageService, get_storage
from kamioun.main import app
from kamioun.models import (
    Brand,
    Customer,
    Manufacturer,
    OrderPayment,
    Partner,
    Product,
    ProductImage,
    SkuPartner,
    Source,
    State,
    Stock,
    Tax,
    Warehouse,
)

CUSTOMER_PHONE = "+21620123456"
CUSTOMER_PASSWORD = "secret123"
UPLOADED_URL = "https://demo.supabase.co/storage/v1/object/public/bucket/folder/file.png"


@pytest.fixture(scope="function")
def engine():
    """
    Provides a fresh in-memory SQLite engine with all tables

    Foreign keys are enforced as they are on PostgreSQL.

    Scope: function (new database per test)
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    """
    Provides a session on the test database

    The same session is handed to the application, so tests can inspect
    what a request committed.
    """
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def storage():
    """
    Provides a fake StorageService

    Uploads return UPLOADED_URL, removals succeed and product image paths
    are returned unchanged.
    """
    fake = MagicMock(spec=StorageService)
    fake.upload_file.return_value = UPLOADED_URL
    fake.remove_url.return_value = True
    fake.resolve_product_image.side_effect = lambda path: path
    return fake


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
def client(db_session, storage):
    """
    Provides a TestClient with database and storage dependencies overridden
    """
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def lenient_client(db_session, storage):
    """TestClient that answers unhandled errors with 500 instead of raising"""
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seed(db_session):
    """
    Provides a small marketplace

    - customer Amine Ben Salah (+21620123456 / secret123)
    - partner "fresh-dist" with source "Depot Tunis"
    - product "Huile Olive 1L" offered by the partner (SKU-OLV-1),
      stock_quantity 100, sealable 50, price 12.5
    - payment method "cash", order states "new" and "canceled"
    - manufacturer 1 and warehouse 1
    """
    customer = Customer(
        first_name="Amine",
        last_name="Ben Salah",
        email="amine@example.tn",
        telephone=CUSTOMER_PHONE,
        password=hash_password(CUSTOMER_PASSWORD),
        governorate="Tunis",
        address="12 Rue de Marseille",
        is_active=True,
    )
    partner = Partner(username="fresh-dist", email="contact@fresh.tn", minimum_amount=100)
    source = Source(name="Depot Tunis", partner=partner)
    brand = Brand(name="Zitouna")
    tax = Tax(value=19)
    manufacturer = Manufacturer(id=1, company_name="Huilerie du Sahel", city="Sfax", email="sales@sahel.tn")
    product = Product(
        name="Huile Olive 1L",
        sku="OLV-1",
        weight=1.0,
        image="/uploads/olive.png",
        accepted=True,
        brand=brand,
        tax=tax,
        supplier=manufacturer,
    )
    product.images = [ProductImage(url="/uploads/olive-front.png")]
    sku_partner = SkuPartner(product=product, partner=partner, sku_product="SKU-OLV-1", price=12.5)
    stock = Stock(sku_partner=sku_partner, source=source, stock_quantity=100, sealable=50, price=12.5)
    payment_method = OrderPayment(name="cash")
    state_new = State(name="new")
    state_canceled = State(name="canceled")
    warehouse = Warehouse(id=1, name="Main warehouse")

    db_session.add_all([
        customer, partner, source, brand, tax, manufacturer, product, sku_partner,
        stock, payment_method, state_new, state_canceled, warehouse,
    ])
    db_session.commit()

    return SimpleNamespace(
        customer=customer,
        partner=partner,
        source=source,
        brand=brand,
        product=product,
        sku_partner=sku_partner,
        stock=stock,
        payment_method=payment_method,
        state_new=state_new,
        state_canceled=state_canceled,
        manufacturer=manufacturer,
        warehouse=warehouse,
    )


@pytest.fixture
def auth_headers(seed):
    token = create_access_token(seed.customer.id, seed.customer.telephone, seed.customer.full_name)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def reservation_payload(seed):
    """Reservation of 5 units of the seeded offer"""
    return {
        "customer_id": seed.customer.id,
        "payment_method_id": seed.payment_method.id,
        "amount_ttc": 62.5,
        "amount_ordered": 62.5,
        "shipping_method": "delivery",
        "weight": 5,
        "reservation_items": [
            {
                "product_id": seed.product.id,
                "partner_id": seed.partner.id,
                "source_id": seed.source.id,
                "qte_reserved": 5,
                "price": 12.5,
                "discounted_price": 12.5,
                "weight": 1,
                "sku": "SKU-OLV-1",
            }
        ],
    }
