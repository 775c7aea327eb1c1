#!/usr/bin/env python3
"""
Sample data population script for the Grocery POS register.
Creates an approved admin, a cashier awaiting approval, a product catalog and
a month of cash sales for the analytics tab.
"""
import asyncio
import os
import random
import sys
from datetime import datetime, timedelta, timezone

from grocerypos.backend.client import BackendClient
from grocerypos.backend.errors import BackendError
from grocerypos.core.database import init_db
from grocerypos.models.profiles import UserRole

ADMIN_EMAIL = os.environ.get("POS_ADMIN_EMAIL", "admin@grocerypos.local")
ADMIN_PASSWORD = os.environ.get("POS_ADMIN_PASSWORD", "admin123")

SAMPLE_PRODUCTS = [
    {"name": "Piattos Cheese", "price": 18.00, "category": "Snacks", "stock": 60},
    {"name": "Nova Multigrain", "price": 20.00, "category": "Snacks", "stock": 45},
    {"name": "Coca-Cola 1.5L", "price": 75.00, "category": "Beverages", "stock": 30},
    {"name": "C2 Green Tea", "price": 25.00, "category": "Beverages", "stock": 48},
    {"name": "Choc Nut", "price": 2.00, "category": "Candies", "stock": 200},
    {"name": "Lucky Me Pancit Canton", "price": 16.00, "category": "Instant Noodles", "stock": 120},
    {"name": "Nissin Cup Noodles", "price": 32.00, "category": "Instant Noodles", "stock": 40},
    {"name": "Century Tuna Flakes", "price": 38.00, "category": "Canned Goods", "stock": 50},
    {"name": "Argentina Corned Beef", "price": 45.00, "category": "Canned Goods", "stock": 35},
    {"name": "Colgate Toothpaste", "price": 65.00, "category": "Personal Care", "stock": 25},
    {"name": "Safeguard Bar", "price": 48.00, "category": "Soap", "stock": 40},
    {"name": "Candle", "price": 10.00, "category": "Others", "stock": 80},
]


async def create_account(backend: BackendClient, email: str, password: str, full_name: str,
                         role: UserRole, approved: bool) -> str:
    """Create an identity with its profile; returns the user id."""
    user = await backend.auth.sign_up(email, password)
    await backend.insert_profile(
        {
            "id": user.id,
            "full_name": full_name,
            "role": role.value,
            "approved": approved,
            "active_session_token": None,
        }
    )
    print(f"✅ Created {role.value} account {email} (approved={approved})")
    return user.id


async def create_sample_products(backend: BackendClient) -> list:
    """Create sample products in the catalog."""
    products = []
    for values in SAMPLE_PRODUCTS:
        products.append(await backend.upsert_product({**values, "image": None}))
    print(f"✅ Created {len(products)} sample products")
    return products


async def create_sample_sales(backend: BackendClient, products: list, cashier_id: str, cashier_name: str):
    """Create cash sales spread over the last 30 days."""
    now = datetime.now(timezone.utc)
    total_sales = 0

    for days_ago in range(30):
        for _ in range(random.randint(2, 8)):
            created_at = now - timedelta(days=days_ago, hours=random.randint(0, 10), minutes=random.randint(0, 59))
            lines = random.sample(products, random.randint(1, 4))
            items = [
                {"product": product, "quantity": random.randint(1, 3)}
                for product in lines
            ]
            total = sum(item["product"]["price"] * item["quantity"] for item in items)
            cash_received = float(((int(total) // 100) + 1) * 100)

            header = await backend.insert_transaction(
                {
                    "total": total,
                    "payment_method": "cash",
                    "cash_received": cash_received,
                    "change_amount": round(cash_received - total, 2),
                    "status": "completed",
                    "cashier_id": cashier_id,
                    "cashier_name": cashier_name,
                    "created_at": created_at,
                }
            )
            await backend.insert_transaction_items(
                [
                    {
                        "transaction_id": header["id"],
                        "product_id": item["product"]["id"],
                        "quantity": item["quantity"],
                        "price_at_time": item["product"]["price"],
                    }
                    for item in items
                ]
            )
            total_sales += 1

    print(f"✅ Created {total_sales} sample sales over the last 30 days")


async def main():
    """Main function to populate sample data."""
    print("🛒 Grocery POS Sample Data Population")
    print("=" * 50)

    backend = BackendClient()
    try:
        print("📊 Initializing database...")
        init_db()

        print("\n👤 Creating accounts...")
        admin_id = await create_account(backend, ADMIN_EMAIL, ADMIN_PASSWORD, "Store Admin", UserRole.ADMIN, True)
        await create_account(backend, "cashier@grocerypos.local", "cashier123", "New Cashier", UserRole.CASHIER, False)

        print("\n🛍️  Creating sample products...")
        products = await create_sample_products(backend)

        print("\n💰 Creating sample sales...")
        await create_sample_sales(backend, products, admin_id, "Store Admin")

        print("\n🎉 Sample data population completed successfully!")
        print(f"\n🔑 Sign in as {ADMIN_EMAIL} / {ADMIN_PASSWORD}")
        print("   - Dashboard at http://localhost:8050")
        print("   - API at http://localhost:8000/docs (with DEBUG=true)")

    except BackendError as e:
        print(f"❌ Error populating sample data: {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
