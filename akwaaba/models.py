# akwaaba/models.py
"""SQLAlchemy ORM models for persisted entities.

Defines `Property` listings, `Agent` profiles and the key/value
`PlatformSetting` table holding admin-configured currency rates.
"""
from sqlalchemy import Column, Integer, Text, Numeric, Float, Boolean, TIMESTAMP, JSON, func, Index
from .db import Base

class Property(Base):
    __tablename__ = "properties"
    id = Column(Text, primary_key=True, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text)
    price = Column(Numeric, nullable=False)
    currency = Column(Text, nullable=False, default="GHS")
    status = Column(Text, nullable=False, default="for-sale")
    property_type = Column(Text, nullable=False, default="house")
    tier = Column(Text, nullable=False, default="normal")
    approval_status = Column(Text, nullable=False, default="pending")

    address = Column(Text)
    city = Column(Text)
    region = Column(Text)
    country = Column(Text, default="Ghana")
    latitude = Column(Float)
    longitude = Column(Float)

    bedrooms = Column(Integer)
    bathrooms = Column(Integer)
    size = Column(Float)
    size_unit = Column(Text, default="sqft")

    images = Column(JSON, default=list)
    features = Column(JSON, default=list)
    amenities = Column(JSON, default=list)

    seller_id = Column(Text, index=True)
    seller = Column(JSON)

    is_verified = Column(Boolean, default=False)
    documents_uploaded = Column(Boolean, default=False)
    verification_date = Column(TIMESTAMP(timezone=True))
    admin_notes = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())
    expires_at = Column(TIMESTAMP(timezone=True))

Index("idx_properties_price", Property.price)
Index("idx_properties_status", Property.status)
Index("idx_properties_city", Property.city)


class Agent(Base):
    __tablename__ = "agents"
    id = Column(Text, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    email = Column(Text)
    phone = Column(Text)
    whatsapp = Column(Text)
    company = Column(Text)
    license_number = Column(Text)
    experience_years = Column(Integer)
    specializations = Column(JSON, default=list)
    bio = Column(Text)
    avatar = Column(Text)
    rating = Column(Float)
    review_count = Column(Integer, default=0)
    is_verified = Column(Boolean, default=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())


class PlatformSetting(Base):
    __tablename__ = "platform_settings"
    key = Column(Text, primary_key=True)
    value = Column(JSON)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())
