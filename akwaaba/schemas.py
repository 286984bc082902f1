# akwaaba/schemas.py
import re
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

CurrencyCode = Literal["GHS", "USD", "GBP", "EUR"]
PropertyStatus = Literal["for-sale", "for-rent", "short-let", "sold", "rented"]
PropertyType = Literal["house", "apartment", "land", "commercial", "townhouse", "condo"]
ListingTier = Literal["normal", "premium"]
ApprovalStatus = Literal["pending", "approved", "rejected"]
SizeUnit = Literal["sqft", "sqm"]
SellerType = Literal["individual", "agent", "developer"]
SortOption = Literal[
    "newest",
    "oldest",
    "price-low-high",
    "price-high-low",
    "size-large-small",
    "size-small-large",
    "relevance",
]

MIN_PRICE = 1_000
MAX_PRICE = 100_000_000
# upper bound for integers taken from query strings; keeps offsets and price bounds inside SQL integer range
MAX_QUERY_INT = 2**31 - 1

_PLACEHOLDER_PATTERNS = [
    re.compile(r"^([acdefghiopqrstuwy])\1{2,}$", re.I),
    re.compile(r"test", re.I),
    re.compile(r"placeholder", re.I),
    re.compile(r"^.{1,2}$"),
]


def placeholder_error(value: str, field_name: str) -> Optional[str]:
    """Return an error message when `value` looks like filler text."""
    for pattern in _PLACEHOLDER_PATTERNS:
        if pattern.search(value.strip()):
            return f"{field_name} contains placeholder data. Please provide a real {field_name}."
    return None


class CurrencyRate(BaseModel):
    code: CurrencyCode
    rate: float = Field(..., gt=0, description="Units of this currency per 1 GHS")
    symbol: str
    name: str


class DiasporaAlternative(BaseModel):
    currency: CurrencyCode
    formatted: str


class DiasporaPrice(BaseModel):
    primary: str
    alternatives: List[DiasporaAlternative] = []


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class Location(BaseModel):
    address: str
    city: str
    region: str
    country: str = "Ghana"
    coordinates: Optional[Coordinates] = None


class Specifications(BaseModel):
    bedrooms: Optional[int] = Field(default=None, ge=0, le=20)
    bathrooms: Optional[int] = Field(default=None, ge=0, le=20)
    size: Optional[float] = Field(default=None, ge=0)
    size_unit: SizeUnit = "sqft"


class Seller(BaseModel):
    id: Optional[str] = None
    name: str
    type: SellerType = "agent"
    phone: str = ""
    email: Optional[str] = None
    whatsapp: Optional[str] = None
    is_verified: bool = False
    company: Optional[str] = None


class Verification(BaseModel):
    is_verified: bool = False
    documents_uploaded: bool = False
    verification_date: Optional[datetime] = None
    admin_notes: Optional[str] = None


class PropertyBase(BaseModel):
    title: str
    description: str = ""
    price: float = Field(..., ge=0)
    currency: Literal["GHS"] = "GHS"
    status: PropertyStatus = "for-sale"
    type: PropertyType = "house"
    location: Location
    specifications: Specifications = Specifications()
    images: List[str] = []
    features: List[str] = []
    amenities: List[str] = []
    seller: Seller
    tier: ListingTier = "normal"


def check_title(v: str) -> str:
    if len(v.strip()) < 3:
        raise ValueError("Title must be at least 3 characters")
    msg = placeholder_error(v, "title")
    if msg:
        raise ValueError(msg)
    return v.strip()


def check_description(v: str) -> str:
    if len(v.strip()) < 10:
        raise ValueError("Description must be at least 10 characters")
    msg = placeholder_error(v, "description")
    if msg:
        raise ValueError(msg)
    return v.strip()


def check_price(v: float) -> float:
    if v < MIN_PRICE:
        raise ValueError("Price must be at least ₵1,000")
    if v > MAX_PRICE:
        raise ValueError("Price cannot exceed ₵100,000,000")
    return v


def check_location(v: Location) -> Location:
    if len(v.address.strip()) < 5:
        raise ValueError("Address must be at least 5 characters")
    msg = placeholder_error(v.address, "address")
    if msg:
        raise ValueError(msg)
    if len(v.city.strip()) < 2:
        raise ValueError("City must be at least 2 characters")
    if len(v.region.strip()) < 2:
        raise ValueError("Region must be at least 2 characters")
    return v


def rooms_error(property_type: str, specs: Specifications) -> Optional[str]:
    if property_type in ("house", "apartment") and (not specs.bedrooms or not specs.bathrooms):
        return "Houses and apartments must have at least 1 bedroom and 1 bathroom"
    return None


class PropertyCreate(PropertyBase):
    """Listing submission, with the same rules the listing form enforces."""
    id: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return check_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        return check_description(v)

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        return check_price(v)

    @field_validator("location")
    @classmethod
    def validate_location(cls, v):
        return check_location(v)

    @model_validator(mode="after")
    def check_rooms(self):
        msg = rooms_error(self.type, self.specifications)
        if msg:
            raise ValueError(msg)
        return self


class PropertyUpdate(BaseModel):
    """Partial edit; supplied fields follow the listing-form rules and may not be null."""
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    status: Optional[PropertyStatus] = None
    type: Optional[PropertyType] = None
    location: Optional[Location] = None
    specifications: Optional[Specifications] = None
    images: Optional[List[str]] = None
    features: Optional[List[str]] = None
    amenities: Optional[List[str]] = None
    tier: Optional[ListingTier] = None

    @field_validator("*", mode="before")
    @classmethod
    def check_not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return check_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        return check_description(v)

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        return check_price(v)

    @field_validator("location")
    @classmethod
    def validate_location(cls, v):
        return check_location(v)


class PropertyOut(PropertyBase):
    id: str
    verification: Verification = Verification()
    approval_status: ApprovalStatus = "pending"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row):
        coordinates = None
        if row.latitude is not None and row.longitude is not None:
            coordinates = Coordinates(lat=row.latitude, lng=row.longitude)
        return cls(
            id=row.id,
            title=row.title,
            description=row.description or "",
            price=float(row.price),
            currency=row.currency or "GHS",
            status=row.status,
            type=row.property_type,
            location=Location(
                address=row.address or "",
                city=row.city or "",
                region=row.region or "",
                country=row.country or "Ghana",
                coordinates=coordinates,
            ),
            specifications=Specifications(
                bedrooms=row.bedrooms,
                bathrooms=row.bathrooms,
                size=row.size,
                size_unit=row.size_unit or "sqft",
            ),
            images=list(row.images or []),
            features=list(row.features or []),
            amenities=list(row.amenities or []),
            seller=Seller(**(row.seller or {"name": "Unknown seller"})),
            tier=row.tier,
            verification=Verification(
                is_verified=bool(row.is_verified),
                documents_uploaded=bool(row.documents_uploaded),
                verification_date=row.verification_date,
                admin_notes=row.admin_notes,
            ),
            approval_status=row.approval_status,
            created_at=row.created_at,
            updated_at=row.updated_at,
            expires_at=row.expires_at,
        )


class PriceRange(BaseModel):
    min: Optional[int] = Field(default=None, ge=0, le=MAX_QUERY_INT)
    max: Optional[int] = Field(default=None, ge=0, le=MAX_QUERY_INT)
    currency: CurrencyCode = "GHS"


class SearchFilters(BaseModel):
    location: Optional[str] = None
    type: Optional[List[PropertyType]] = None
    status: Optional[PropertyStatus] = None
    price_range: Optional[PriceRange] = None
    bedrooms: Optional[int] = Field(default=None, ge=0, le=MAX_QUERY_INT)
    keywords: Optional[str] = None
    added_to_site: Optional[str] = None
    page: Optional[int] = Field(default=None, ge=1, le=MAX_QUERY_INT)
    currency: Optional[CurrencyCode] = None
    sort: Optional[SortOption] = None
    verified_only: Optional[bool] = None
    tier: Optional[List[ListingTier]] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_more: bool


class AgentBase(BaseModel):
    name: str = Field(..., min_length=2)
    email: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    company: Optional[str] = None
    license_number: Optional[str] = None
    experience_years: Optional[int] = Field(default=None, ge=0, le=80)
    specializations: List[PropertyType] = []
    bio: Optional[str] = None
    avatar: Optional[str] = None


class AgentCreate(AgentBase):
    id: Optional[str] = None


class AgentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    email: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    company: Optional[str] = None
    license_number: Optional[str] = None
    experience_years: Optional[int] = Field(default=None, ge=0, le=80)
    specializations: Optional[List[PropertyType]] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None


class AgentOut(AgentBase):
    id: str
    rating: Optional[float] = None
    review_count: int = 0
    is_verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ApprovalRequest(BaseModel):
    admin_notes: Optional[str] = None


class AdminCurrencyRates(BaseModel):
    """Admin-entered rates, stored as units of GHS per foreign unit."""
    usd_to_ghs: float = Field(..., gt=0)
    gbp_to_ghs: float = Field(..., gt=0)
    eur_to_ghs: float = Field(..., gt=0)


class Badge(BaseModel):
    text: str
    class_name: str


class ContactAction(BaseModel):
    kind: Literal["call", "whatsapp"]
    url: Optional[str] = None
    warning: Optional[str] = None


class PropertyCard(BaseModel):
    id: str
    layout: Literal["grid", "list"]
    title: str
    href: str
    image: str
    image_alt: str
    image_count: int
    image_dots: List[int] = []
    more_images: int = 0
    status_badge: Badge
    tier_badge: Optional[Badge] = None
    pricing_context: Optional[str] = None
    price: DiasporaPrice
    location: str
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    size: Optional[str] = None
    seller_name: str
    seller_verified: bool = False
    listing_verified: bool = False
    highlight: bool = False


class AuditRequest(BaseModel):
    html: Optional[str] = None
    url: Optional[str] = None

    @model_validator(mode="after")
    def check_source(self):
        if not self.html and not self.url:
            raise ValueError("Either html or url is required")
        return self


class AuditIssue(BaseModel):
    id: str
    type: Literal["error", "warning", "info"]
    message: str
    element: Optional[str] = None
    severity: Literal["low", "medium", "high"]
