#!/usr/bin/env python3
"""
RentRoll Occupancy Check
Prints leased vs rentable area per building for every company in the
configured database.

    python check_occupancy.py [YYYY-MM-DD]
"""
import asyncio
import sys
from datetime import date

from sqlalchemy import select

from rentroll.database import AsyncSessionLocal, close_db_connection
from rentroll.models import Company
from rentroll.services.occupancy_service import OccupancyService


async def check_occupancy(as_of: date) -> None:
    print("\n" + "=" * 60)
    print(f"OCCUPANCY REPORT as of {as_of.isoformat()}")
    print("=" * 60)

    async with AsyncSessionLocal() as session:
        companies = (await session.execute(
            select(Company).where(Company.deleted_at.is_(None)).order_by(Company.name)
        )).scalars().all()

    if not companies:
        print("\nNo companies found.")
        return

    service = OccupancyService(AsyncSessionLocal)
    for company in companies:
        summary = await service.get_occupancy(company.id, as_of=as_of)
        print(f"\n{company.name}")
        for b in summary.buildings:
            print(
                f"   {b.code:<10} {b.building_name:<30} "
                f"{b.rented_area:>10.1f} / {b.total_area:<10.1f} sqm  {b.occupancy_rate:>3}%"
            )
        print(
            f"   {'TOTAL':<41} {summary.rented_area:>10.1f} / {summary.total_area:<10.1f} sqm  "
            f"{summary.occupancy_rate:>3}%"
        )
    print()


async def main() -> None:
    as_of = date.fromisoformat(sys.argv[1]) if len(sys.argv) > 1 else date.today()
    try:
        await check_occupancy(as_of)
    finally:
        await close_db_connection()


if __name__ == "__main__":
    asyncio.run(main())
