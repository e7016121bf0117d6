#!/usr/bin/env python3
"""Seed a development database with a demo tenant and three published opportunities.

Usage:
    python scripts/seed_dev_data.py

Reads VH_DATABASE_URL (or defaults to localhost). Safe to run repeatedly.
"""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone

from app.core.database import get_session_context, init_db
from app.core.logging import setup_logging
from app.models.opportunity import Opportunity
from app.models.tenant import Tenant

# Deterministic UUIDs for reproducibility
TENANT_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
EVENT_ID = uuid.UUID("00000000-0000-0000-0000-000000000101")
SHIFT_ID = uuid.UUID("00000000-0000-0000-0000-000000000102")
PROJECT_ID = uuid.UUID("00000000-0000-0000-0000-000000000103")


def demo_opportunities(now: datetime) -> list[Opportunity]:
    tomorrow = now + timedelta(days=1)
    next_week = now + timedelta(days=7)
    return [
        Opportunity(
            id=EVENT_ID,
            tenant_id=TENANT_ID,
            title="Community Garden Cleanup",
            description=(
                "Help us prepare the community garden for spring planting! We'll be "
                "clearing debris, turning soil, and setting up new garden beds."
            ),
            type="EVENT",
            status="PUBLISHED",
            location="Community Garden",
            address="123 Garden Lane, Springfield",
            start_date=tomorrow,
            end_date=tomorrow + timedelta(hours=3),
            capacity=20,
            spots_remaining=20,
            tags=["outdoor", "gardening"],
            requirements={"min_age": 14, "skills": ["gardening"]},
        ),
        Opportunity(
            id=SHIFT_ID,
            tenant_id=TENANT_ID,
            title="Food Bank Weekly Shift",
            description=(
                "Sort and package food donations at our local food bank. "
                "This is a recurring weekly shift."
            ),
            type="SHIFT",
            status="PUBLISHED",
            location="Springfield Food Bank",
            address="456 Helping Hand Ave",
            start_date=next_week,
            end_date=next_week + timedelta(hours=4),
            recurrence="weekly",
            capacity=10,
            spots_remaining=10,
            tags=["food bank", "sorting"],
        ),
        Opportunity(
            id=PROJECT_ID,
            tenant_id=TENANT_ID,
            title="Website Redesign Project",
            description=(
                "Help our nonprofit redesign their website. Looking for volunteers "
                "with web development or design skills."
            ),
            type="PROJECT",
            status="PUBLISHED",
            is_virtual=True,
            start_date=tomorrow,
            capacity=5,
            spots_remaining=5,
            tags=["tech", "design", "remote"],
            requirements={"skills": ["web development", "design"]},
        ),
    ]


async def seed():
    await init_db()

    async with get_session_context() as session:
        if await session.get(Tenant, TENANT_ID) is None:
            session.add(
                Tenant(
                    id=TENANT_ID,
                    slug="demo-org",
                    name="Demo Organization",
                    terminology={
                        "volunteer": "Helper",
                        "volunteers": "Helpers",
                        "opportunity": "Service",
                        "opportunities": "Services",
                    },
                )
            )
            await session.flush()
            print("Created tenant: Demo Organization (demo-org)")

        created = 0
        for opportunity in demo_opportunities(datetime.now(timezone.utc)):
            if await session.get(Opportunity, opportunity.id) is None:
                session.add(opportunity)
                created += 1
        print(f"Created {created} opportunities")

    print("Seed complete.")


if __name__ == "__main__":
    setup_logging()
    asyncio.run(seed())
