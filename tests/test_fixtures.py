"""
Shared test builders for the MealSync test suite.

Sellers, offerings and subscriptions are owned by other systems in production,
so tests create them directly through the ORM.
"""

import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from domain.models import MealConfiguration, Offering, Seller, Subscription
from domain.schemas import EditMealCommand, MealItemIn
from main import app
from services.snapshot_writer import today_midnight, utc_now

# Lifespan is not entered, so no database initialization runs at import.
client = TestClient(app)

ACTOR_ID = uuid.UUID("00000000-0000-0000-0000-0000000000a1")

REALISTIC_CUSTOMERS = [
    ("Aarav Sharma", "+91-98100-00001"),
    ("Priya Nair", "+91-98100-00002"),
    ("Rohan Gupta", "+91-98100-00003"),
    ("Meera Iyer", "+91-98100-00004"),
    ("Kabir Singh", "+91-98100-00005"),
    ("Ananya Rao", "+91-98100-00006"),
]


def make_seller(db: Session, name: str = "Anita Desai", business_name: str = "Anita's Tiffin Co.") -> Seller:
    seller = Seller(
        seller_id=uuid.uuid4(),
        name=name,
        business_name=business_name,
        email=f"kitchen-{uuid.uuid4().hex[:8]}@example.com",
    )
    db.add(seller)
    db.commit()
    db.refresh(seller)
    return seller


def make_offering(db: Session, seller: Seller, tier: str = "basic", title: Optional[str] = None) -> Offering:
    offering = Offering(
        offering_id=uuid.uuid4(),
        seller_id=seller.seller_id,
        tier=tier,
        title=title or f"{tier.title()} Tiffin",
        description=f"Daily home-style meals ({tier})",
        price=Decimal("2499.00"),
    )
    db.add(offering)
    db.commit()
    db.refresh(offering)
    return offering


def make_subscription(
    db: Session,
    offering: Offering,
    shift: str = "morning",
    status: str = "active",
    start_shift: Optional[str] = None,
    customer_index: int = 0,
    today_meal: Optional[dict] = None,
) -> Subscription:
    name, phone = REALISTIC_CUSTOMERS[customer_index % len(REALISTIC_CUSTOMERS)]
    subscription = Subscription(
        subscription_id=uuid.uuid4(),
        seller_id=offering.seller_id,
        offering_id=offering.offering_id,
        customer_id=uuid.uuid4(),
        customer_name=name,
        customer_phone=phone,
        status=status,
        shift=shift,
        start_shift=start_shift,
        today_meal=today_meal,
    )
    db.add(subscription)
    db.commit()
    db.refresh(subscription)
    return subscription


def make_subscriptions(db: Session, offering: Offering, shifts: Iterable[str], **kwargs) -> List[Subscription]:
    return [
        make_subscription(db, offering, shift=shift, customer_index=i, **kwargs)
        for i, shift in enumerate(shifts)
    ]


def make_items(*names: str) -> List[MealItemIn]:
    return [MealItemIn(name=name) for name in names]


def make_command(seller: Seller, tier: Optional[str] = "basic", **overrides) -> EditMealCommand:
    fields = dict(
        seller_id=seller.seller_id,
        tier=tier,
        items=make_items("Dal Tadka", "Jeera Rice"),
        actor_id=ACTOR_ID,
    )
    fields.update(overrides)
    return EditMealCommand(**fields)


def snapshot_dict(
    names: Iterable[str] = ("Khichdi",),
    day: Optional[datetime] = None,
    is_available: bool = True,
    meal_type: str = "lunch",
) -> dict:
    """A stored today_meal document, dated ``day`` (default: today)"""
    day = day or today_midnight()
    return {
        "items": [{"name": n, "description": "", "quantity": "1 serving"} for n in names],
        "meal_type": meal_type,
        "date": day.isoformat(),
        "is_available": is_available,
        "last_updated": utc_now().isoformat(),
        "updated_by": None,
        "seller_id": None,
        "tier": None,
        "shift": None,
        "update_reason": None,
    }


def yesterday() -> datetime:
    return today_midnight() - timedelta(days=1)


def get_configuration(db: Session, seller: Seller, tier: str) -> Optional[MealConfiguration]:
    db.expire_all()
    return (
        db.query(MealConfiguration)
        .filter(MealConfiguration.seller_id == seller.seller_id, MealConfiguration.tier == tier)
        .first()
    )


def reload(db: Session, subscription: Subscription) -> Subscription:
    db.expire_all()
    return db.get(Subscription, subscription.subscription_id)
