# akwaaba/cards.py
"""Property card views for the grid and list search layouts."""
from typing import List, Optional
from urllib.parse import quote

from .currency import RateTable, format_diaspora_price
from .filters import return_url
from .schemas import Badge, ContactAction, PropertyCard, PropertyOut
from .utils import clean_phone

PLACEHOLDER_IMAGE = "/placeholder-property.jpg"
MAX_IMAGE_DOTS = 4

CONTACT_UNAVAILABLE = (
    "Contact information not available for this property. Please use the inquiry "
    "form or contact the agent through the property details page."
)

STATUS_BADGES = {
    "for-sale": Badge(text="For Sale", class_name="property-status-sale"),
    "for-rent": Badge(text="For Rent", class_name="property-status-rent"),
    "short-let": Badge(text="Short Let", class_name="property-status-short-let"),
    "sold": Badge(text="Sold", class_name="bg-muted text-muted-foreground"),
    "rented": Badge(text="Rented", class_name="bg-muted text-muted-foreground"),
}
DEFAULT_BADGE = Badge(text="Available", class_name="property-status-sale")
PREMIUM_BADGE = Badge(text="Premium", class_name="bg-purple-600 text-white")

PRICING_CONTEXT = {"for-rent": "per year", "short-let": "per night"}


def valid_images(prop: PropertyOut) -> List[str]:
    return [img for img in (prop.images or []) if isinstance(img, str) and img.strip()]


def status_badge(status: str) -> Badge:
    return STATUS_BADGES.get(status, DEFAULT_BADGE)


def tier_badge(tier: str) -> Optional[Badge]:
    return PREMIUM_BADGE if tier == "premium" else None


def format_size(size: Optional[float], unit: str) -> Optional[str]:
    if size is None:
        return None
    return f"{size:,.0f} {unit}" if float(size).is_integer() else f"{size:,} {unit}"


def render_card(prop: PropertyOut, layout: str = "grid", currency: str = "GHS",
                rates: Optional[RateTable] = None, image_index: int = 0,
                query: Optional[str] = None) -> PropertyCard:
    if layout not in ("grid", "list"):
        raise ValueError(f"Unknown card layout: {layout}")
    images = valid_images(prop)
    index = min(max(image_index, 0), max(0, len(images) - 1))
    image = images[index] if images else PLACEHOLDER_IMAGE
    specs = prop.specifications
    loc = prop.location

    card = PropertyCard(
        id=prop.id,
        layout=layout,
        title=prop.title,
        href=return_url(prop.id, query),
        image=image,
        image_alt=prop.title,
        image_count=len(images),
        status_badge=status_badge(prop.status),
        tier_badge=tier_badge(prop.tier),
        pricing_context=PRICING_CONTEXT.get(prop.status),
        price=format_diaspora_price(prop.price, currency, rates),
        location=", ".join(part for part in (loc.address, loc.city, loc.region) if part),
        bedrooms=specs.bedrooms or None,
        bathrooms=specs.bathrooms or None,
        size=format_size(specs.size, specs.size_unit),
        seller_name=prop.seller.name,
        seller_verified=prop.seller.is_verified,
        listing_verified=prop.verification.is_verified,
        highlight=prop.tier == "premium",
    )
    # the list layout shows a single thumbnail
    if layout == "grid" and len(images) > 1:
        card.image_dots = list(range(min(len(images), MAX_IMAGE_DOTS)))
        card.more_images = max(0, len(images) - MAX_IMAGE_DOTS)
    return card


def call_action(prop: PropertyOut) -> ContactAction:
    phone = clean_phone(prop.seller.phone)
    if not phone:
        return ContactAction(kind="call", warning=CONTACT_UNAVAILABLE)
    return ContactAction(kind="call", url=f"tel:{phone}")


def whatsapp_message(prop: PropertyOut) -> str:
    return (
        f'Hi! I\'m interested in the property "{prop.title}" at {prop.location.address}, '
        f"{prop.location.city}. I found this listing on AkwaabaHomes. "
        "Could you please provide more information?"
    )


def whatsapp_action(prop: PropertyOut) -> ContactAction:
    phone = clean_phone(prop.seller.phone)
    if not phone:
        return ContactAction(kind="whatsapp", warning=CONTACT_UNAVAILABLE)
    return ContactAction(
        kind="whatsapp",
        url=f"https://wa.me/{phone}?text={quote(whatsapp_message(prop), safe='')}",
    )
