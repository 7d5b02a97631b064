"""Seed demo reference data: a registered customer with an order, and a guest order."""

from models import db, Customer, Order, Profile

DEMO_CUSTOMER_ID = "8f14e45f-ceea-467f-a0e6-c1a2b3c4d5e6"
DEMO_ORDER_ID = "3c59dc04-8d2a-4f1b-9b7e-a1b2c3d4e5f6"
GUEST_ORDER_ID = "6512bd43-d9ca-4a6e-8f1d-0a1b2c3d4e5f"


def seed_demo_data():
    if db.session.get(Profile, DEMO_CUSTOMER_ID) is None:
        db.session.add(Profile(id=DEMO_CUSTOMER_ID, first_name="Ada", last_name="Lovelace", email="ada@example.com", phone="+1 555 0100"))

    if db.session.get(Customer, DEMO_CUSTOMER_ID) is None:
        db.session.add(Customer(id=DEMO_CUSTOMER_ID, name="Ada Lovelace", email="ada@example.com", phone="+1 555 0100"))

    if Order.query.count() == 0:
        db.session.add_all([
            Order(id=DEMO_ORDER_ID, customer_id=DEMO_CUSTOMER_ID, total_amount=33.74, status="preparing", table_number="T1", customer_name="Ada Lovelace"),
            Order(id=GUEST_ORDER_ID, total_amount=11.99, status="served", table_number="T2", customer_name="Walk-in"),
        ])

    db.session.commit()


if __name__ == "__main__":
    from app import create_app

    app = create_app()
    with app.app_context():
        db.create_all()
        seed_demo_data()
        print(f"Seeded. Customer token={DEMO_CUSTOMER_ID}, order={DEMO_ORDER_ID}")
