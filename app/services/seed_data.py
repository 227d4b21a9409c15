"""
Database Seed Script.

Generates a deterministic population of retail sales so the dashboard has
something to show on a fresh database. The rows deliberately reproduce the
storage quirks of real imports:
- age stored as an integer on some rows and as a numeric string on others
- phone number stored as an integer on some rows and as a string on others
- tags given either as a list or as a comma-joined string
"""

import random
import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.models.transaction import Transaction
from app.services.coercion import join_tags

logger = logging.getLogger(__name__)

FIRST_NAMES = [
    "Aarav", "Vivaan", "Aditya", "Ishaan", "Rohan", "Arjun", "Kabir", "Neha",
    "Priya", "Ananya", "Diya", "Kavya", "Meera", "Sneha", "Pooja", "Riya",
]
LAST_NAMES = [
    "Sharma", "Verma", "Patel", "Reddy", "Iyer", "Nair", "Gupta", "Mehta",
    "Singh", "Khan", "Joshi", "Das",
]
FEMALE_NAMES = {"Neha", "Priya", "Ananya", "Diya", "Kavya", "Meera", "Sneha", "Pooja", "Riya"}

REGIONS = ["East", "West", "North", "South", "Central"]
CUSTOMER_TYPES = ["New", "Returning", "Loyal"]
PAYMENT_METHODS = ["UPI", "Credit Card", "Debit Card", "Cash", "Wallet", "Net Banking"]
ORDER_STATUSES = ["Completed", "Completed", "Completed", "Pending", "Cancelled", "Returned"]
DELIVERY_TYPES = ["Standard", "Express", "Store Pickup"]

# category -> (brands, tag pool, unit price range)
CATALOG = {
    "Electronics": (["Sony", "Samsung", "Boat", "Apple"], ["wireless", "gadgets", "smart", "portable"], (499, 45000)),
    "Clothing": (["Zara", "H&M", "Levis", "FabIndia"], ["casual", "formal", "cotton", "semi-casual"], (299, 4999)),
    "Beauty": (["Lakme", "Nykaa", "Maybelline"], ["skincare", "makeup", "organic", "fragrance-free"], (149, 2999)),
    "Home": (["Ikea", "Prestige", "Milton"], ["kitchen", "decor", "eco-friendly"], (199, 15999)),
    "Sports": (["Nike", "Adidas", "Puma", "Decathlon"], ["fitness", "outdoor", "casual", "running"], (399, 9999)),
}

STORES = [
    ("ST001", "Mumbai"), ("ST002", "Delhi"), ("ST003", "Bengaluru"),
    ("ST004", "Kolkata"), ("ST005", "Chennai"), ("ST006", "Hyderabad"),
]
EMPLOYEES = [
    ("EMP01", "Harsh Agarwal"), ("EMP02", "Sakshi Kapoor"), ("EMP03", "Vikram Rao"),
    ("EMP04", "Isha Malhotra"), ("EMP05", "Manoj Pillai"),
]


def seed_database(db: Session, count: int = 500, seed: int = 42) -> int:
    """
    Seeds the sales table with `count` generated transactions.
    Skips seeding if transactions already exist. Returns the number inserted.
    """
    existing = db.query(Transaction).count()
    if existing > 0:
        logger.info(f"Database already has {existing} transactions, skipping seed")
        return 0

    logger.info(f"Seeding database with {count} transactions...")
    rng = random.Random(seed)  # Deterministic for demo reproducibility
    start = datetime(2023, 1, 1)

    for i in range(count):
        db.add(_generate_transaction(rng, 1000 + i, start))

    db.commit()
    logger.info(f"Database seeded successfully with {count} transactions")
    return count


def _generate_transaction(rng: random.Random, transaction_id: int, start: datetime) -> Transaction:
    """Build one realistic sale; alternates the storage type of loose columns."""
    first = rng.choice(FIRST_NAMES)
    category = rng.choice(list(CATALOG))
    brands, tag_pool, (price_min, price_max) = CATALOG[category]
    store_id, store_location = rng.choice(STORES)
    salesperson_id, employee_name = rng.choice(EMPLOYEES)

    quantity = rng.randint(1, 5)
    price = round(rng.uniform(price_min, price_max), 2)
    discount = rng.choice([0, 0, 5, 10, 15, 20, 25])
    total = round(price * quantity, 2)

    age = rng.randint(18, 70)
    phone = rng.randint(7000000000, 9999999999)
    tags = rng.sample(tag_pool, k=rng.randint(1, min(3, len(tag_pool))))
    mixed = transaction_id % 2 == 0

    return Transaction(
        transaction_id=transaction_id,
        date=start + timedelta(days=rng.randint(0, 365), minutes=rng.randint(0, 24 * 60 - 1)),
        customer_id=f"CUST{rng.randint(1, 300):04d}",
        customer_name=f"{first} {rng.choice(LAST_NAMES)}",
        phone_number=phone if mixed else str(phone),
        gender="Female" if first in FEMALE_NAMES else "Male",
        age=age if mixed else str(age),
        customer_region=rng.choice(REGIONS),
        customer_type=rng.choice(CUSTOMER_TYPES),
        product_id=f"PROD{rng.randint(1, 200):04d}",
        product_name=f"{rng.choice(brands)} {category} Item",
        brand=rng.choice(brands),
        product_category=category,
        tags=join_tags(tags if mixed else ", ".join(tags)),
        quantity=quantity,
        price_per_unit=price,
        discount_percentage=float(discount),
        total_amount=total,
        final_amount=round(total * (1 - discount / 100), 2),
        payment_method=rng.choice(PAYMENT_METHODS),
        order_status=rng.choice(ORDER_STATUSES),
        delivery_type=rng.choice(DELIVERY_TYPES),
        store_id=store_id,
        store_location=store_location,
        salesperson_id=salesperson_id,
        employee_name=employee_name,
    )
