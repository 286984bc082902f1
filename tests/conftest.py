# tests/conftest.py
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["SCHEDULER_ENABLED"] = "0"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import akwaaba.models  # noqa: F401
from akwaaba.db import Base, get_db
from akwaaba.main import app
from akwaaba.schemas import Location, PropertyOut, Seller, Specifications


@pytest.fixture
def engine():
    # single shared in-memory database per test
    eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def listing_payload():
    return {
        "title": "Spacious 3 bedroom house in East Legon",
        "description": "Modern family home close to schools and the mall.",
        "price": 850000,
        "status": "for-sale",
        "type": "house",
        "location": {
            "address": "12 Lagos Avenue",
            "city": "Accra",
            "region": "Greater Accra",
            "coordinates": {"lat": 5.6350, "lng": -0.1540},
        },
        "specifications": {"bedrooms": 3, "bathrooms": 2, "size": 2400, "size_unit": "sqft"},
        "images": ["https://cdn.example.com/p1/front.jpg"],
        "features": ["Garden", "Parking"],
        "amenities": ["Schools"],
        "seller": {"id": "agent-1", "name": "Ama Mensah", "phone": "+233 24 123 4567"},
    }


@pytest.fixture
def make_property():
    def _make(**overrides):
        data = dict(
            id="p1",
            title="Spacious 3 bedroom house in East Legon",
            description="Modern family home close to schools and the mall.",
            price=850000,
            status="for-sale",
            type="house",
            location=Location(address="12 Lagos Avenue", city="Accra", region="Greater Accra"),
            specifications=Specifications(bedrooms=3, bathrooms=2, size=2400, size_unit="sqft"),
            images=["https://cdn.example.com/p1/front.jpg"],
            seller=Seller(id="agent-1", name="Ama Mensah", phone="+233 (24) 123-4567"),
        )
        data.update(overrides)
        return PropertyOut(**data)
    return _make
