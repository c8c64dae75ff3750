# Overview: Sample data set for demos and tests (four Seattle vendors, one
# catalog item, two orders).

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from ..extensions import db
from ..models import Availability, Item, Location, LocationItem, Order, OrderItem, OrderStatus, User, UserRole
from . import user_service
from .concurrency import run_in_transaction

logger = logging.getLogger(__name__)

SAMPLE_USERS = [
    ("Todd", "Carpenter", "example1@gmail.com", "1234"),
    ("Ted", "Miller", "example2@gmail.com", "2222"),
    ("Tom", "Fischer", "example3@gmail.com", "9992"),
    ("Tim", "Wilson", "example4@gmail.com", "5352"),
]

SAMPLE_LOCATIONS = [
    ("Vendor1", "95 Aurora Ave N, Seattle WA", "47.608420", "-122.332077"),
    ("Vendor2", "105 Greenwood Ave N, Seattle WA", "47.610410", "-122.335329"),
    ("Vendor3", "120 Greenwood Ave N, Seattle WA", "47.611574", "-122.334909"),
    ("Vendor4", "132 Greenwood Ave N, Seattle WA", "47.608078", "-122.335232"),
]

SAMPLE_HOURS = "10am - 11pm"
SAMPLE_PHONE = "206-234-5678"

# (location index, quantity) for the single catalog item
SAMPLE_MENU = [(0, 32), (1, 53), (2, 12)]

# (time, quantity) of orders at the first location
SAMPLE_ORDERS = [
    (datetime(2020, 1, 31, 23, 59, 59), 2),
    (datetime(2020, 2, 2, 23, 59, 59), 3),
]


def seed_sample_data() -> bool:
    """
    Load the sample data set in a single transaction.

    Idempotent: returns False without writing anything if any user exists.
    A failure part way rolls everything back, so a later run starts clean.
    Each location insert also produces its LOCATION_ADD change log row.
    """
    if db.session.query(User).first() is not None:
        logger.info("Sample data skipped: users already exist")
        return False

    def _op():
        users = [
            User(
                first_name=first,
                last_name=last,
                email=email,
                password_hash=user_service.hash_password(password),
                role=UserRole.VENDOR,
            )
            for first, last, email, password in SAMPLE_USERS
        ]
        db.session.add_all(users)
        db.session.flush()

        locations = [
            Location(
                user_id=user.id,
                vendor_name=name,
                availability=Availability.YES,
                address=address,
                lat=Decimal(lat),
                long=Decimal(long),
                hours=SAMPLE_HOURS,
                phone=SAMPLE_PHONE,
            )
            for user, (name, address, lat, long) in zip(users, SAMPLE_LOCATIONS)
        ]
        db.session.add_all(locations)

        burger = Item(name="Vegan Burger")
        db.session.add(burger)
        db.session.flush()

        for index, quantity in SAMPLE_MENU:
            db.session.add(LocationItem(
                location_id=locations[index].id,
                item_id=burger.id,
                availability=Availability.YES,
                quantity=quantity,
            ))

        for order_id, (placed_at, quantity) in enumerate(SAMPLE_ORDERS, start=1):
            order = Order(
                id=order_id,
                location_id=locations[0].id,
                status=OrderStatus.RECEIVED,
                time=placed_at,
            )
            order.order_items.append(OrderItem(item_id=burger.id, quantity=quantity))
            db.session.add(order)

        db.session.flush()
        return len(users), len(locations)

    user_count, location_count = run_in_transaction(_op, operation="insert")
    logger.info("Sample data loaded: %d users, %d locations", user_count, location_count)
    return True
