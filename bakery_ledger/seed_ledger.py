"""
Database seeding script for demo ledgers.

Creates a few customers and suppliers and records sample transactions so
the statements and supplier view have something to show.
Run this script after database is set up but before first use.
"""

import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from bakery_ledger.app.db.session import AsyncSessionLocal, engine, Base
from bakery_ledger.app.models.customer import Customer
from bakery_ledger.app.models.ledger_enums import EntityType, PartyType
from bakery_ledger.app.domain.ledger.entities import create_entity
from bakery_ledger.app.domain.ledger.ledger_service import LedgerService
from bakery_ledger.app.domain.ledger.records import EntityKey
from bakery_ledger.app.services.summary_cache import SummaryCache
from sqlalchemy import select


async def seed_ledger():
    """
    Seed demo account holders and transactions.

    Creates:
    - 2 customers with a sale and a payment each
    - 1 supplier with one purchase on credit and one paid on the spot
    - 1 creditor with an opening balance only
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting ledger seeding...")

        result = await db.execute(select(Customer).where(Customer.name == "Sunrise Cafe"))
        if result.scalar_one_or_none():
            print("ℹ️  Demo ledgers already exist, skipping seeding")
            return

        service = LedgerService(db, cache=SummaryCache(enabled=False))
        today = date.today()

        for name, sale, paid in (("Sunrise Cafe", "1250.00", "1000.00"), ("Corner Deli", "480.50", "480.50")):
            customer = await create_entity(db, EntityType.CUSTOMER, name, phone="555-0100")
            key = EntityKey(entity_type=EntityType.CUSTOMER, entity_id=customer.id)
            await service.record_transaction(
                key, transaction_date=today - timedelta(days=14), description="Weekly bread order",
                transaction_type="sale", amount=sale, reference_number=f"SO-{customer.id:04d}",
            )
            await service.record_transaction(
                key, transaction_date=today - timedelta(days=7), description="Payment received",
                transaction_type="payment_received", amount=paid, payment_method="bank_transfer",
            )
            print(f"✅ Created customer {name}")

        supplier = await create_entity(
            db, EntityType.PARTY, "Golden Mills", party_type=PartyType.SUPPLIER, contact_person="R. Patel"
        )
        await service.record_purchase(
            supplier.id, transaction_date=today - timedelta(days=20), description="Flour 50kg x 10",
            amount="3200.00", reference_number="GM-1001",
        )
        await service.record_purchase(
            supplier.id, transaction_date=today - timedelta(days=3), description="Butter 10kg",
            amount="950.00", reference_number="GM-1002", payment_method="cash", paid_in_full=True,
        )
        print("✅ Created supplier Golden Mills")

        await create_entity(
            db, EntityType.PARTY, "City Bank", opening_balance=Decimal("15000.00"), party_type=PartyType.CREDITOR
        )
        print("✅ Created creditor City Bank")

        print("\n🎉 Ledger seeding completed successfully!")


if __name__ == "__main__":
    asyncio.run(seed_ledger())
