from datetime import date

import pytest

from rentroll.core.exceptions import NotFound, ValidationError
from rentroll.models.contract import ContractUnit, RentPeriod
from rentroll.services.occupancy_service import (
    current_period,
    current_rent,
    current_service_fee,
    occupancy_rate,
)

from conftest import tier


def _space(*periods):
    space = ContractUnit(area_sqm=100.0, floor="1")
    space.rent_periods = [
        RentPeriod(start_date=s, end_date=e, rent_amount=r, service_fee=10.0, period_order=i)
        for i, (s, e, r) in enumerate(periods, start=1)
    ]
    return space


# ─────────────────────── Current rent ───────────────────────

def test_current_rent_picks_covering_tier():
    space = _space(
        (date(2024, 1, 1), date(2024, 7, 1), 1000.0),
        (date(2024, 7, 1), date(2025, 1, 1), 1200.0),
    )
    assert current_rent(space, date(2024, 3, 15)) == 1000.0
    assert current_rent(space, date(2024, 8, 1)) == 1200.0
    assert current_service_fee(space, date(2024, 8, 1)) == 10.0
    # shared boundary resolves to the first matching tier
    assert current_rent(space, date(2024, 7, 1)) == 1000.0


def test_current_rent_falls_back_to_first_tier():
    space = _space(
        (date(2024, 1, 1), date(2024, 7, 1), 1000.0),
        (date(2024, 7, 1), date(2025, 1, 1), 1200.0),
    )
    assert current_period(space, date(2026, 1, 1)).period_order == 1
    assert current_rent(space, date(2023, 6, 1)) == 1000.0


def test_space_without_tiers_resolves_to_zero():
    space = _space()
    assert current_period(space, date(2024, 1, 1)) is None
    assert current_rent(space, date(2024, 1, 1)) == 0.0
    assert current_service_fee(space, date(2024, 1, 1)) == 0.0


def test_occupancy_rate_rounding():
    assert occupancy_rate(400, 1000) == 40
    assert occupancy_rate(1, 8) == 13
    assert occupancy_rate(5, 1000) == 1
    assert occupancy_rate(100, 0) == 0


# ─────────────────────── Occupancy ───────────────────────

async def test_scenario_occupancy(occupancy_service, contract_service, tenant, make_spec, create_active):
    contract = await create_active(make_spec())

    summary = await occupancy_service.get_occupancy(tenant.company.id, as_of=date(2024, 8, 1))

    assert summary.total_area == 1000.0
    assert summary.rented_area == 400.0
    assert summary.vacant_area == 600.0
    assert summary.occupancy_rate == 40
    assert summary.buildings[0].code == "TA"

    assert current_rent(contract.contract_units[0], date(2024, 8, 1)) == 1200.0


async def test_occupancy_ignores_drafts_and_out_of_window(
    occupancy_service, contract_service, tenant, make_spec, create_active
):
    await contract_service.create_contract(make_spec("RC-DRAFT"), tenant.actor)
    await create_active(make_spec("RC-ACTIVE"))

    during = await occupancy_service.get_occupancy(tenant.company.id, as_of=date(2024, 8, 1))
    assert during.rented_area == 400.0

    after = await occupancy_service.get_occupancy(tenant.company.id, as_of=date(2025, 6, 1))
    assert after.rented_area == 0.0
    assert after.occupancy_rate == 0


async def test_overlapping_contracts_are_capped(occupancy_service, tenant, make_spec, create_active):
    await create_active(make_spec("RC-1", area=700.0))
    await create_active(make_spec("RC-2", area=600.0))

    summary = await occupancy_service.get_occupancy(
        tenant.company.id, building_id=tenant.building.id, as_of=date(2024, 8, 1)
    )

    building = summary.buildings[0]
    assert building.rented_area == 1000.0
    assert building.vacant_area == 0.0
    assert building.occupancy_rate == 100
    assert summary.occupancy_rate <= 100


async def test_occupancy_is_company_scoped(occupancy_service, tenant, other_tenant, make_spec, create_active):
    await create_active(make_spec())

    other = await occupancy_service.get_occupancy(other_tenant.company.id, as_of=date(2024, 8, 1))
    assert other.rented_area == 0.0
    assert [b.code for b in other.buildings] == ["TB"]

    with pytest.raises(NotFound):
        await occupancy_service.get_occupancy(
            other_tenant.company.id, building_id=tenant.building.id
        )


# ─────────────────────── Revenue ───────────────────────

async def test_revenue_report(occupancy_service, contract_service, tenant, make_spec, create_active):
    await create_active(make_spec("RC-1"))  # tiers 1000 (Jan) + 1200 (Jul)
    await create_active(make_spec(
        "RC-2",
        start=date(2024, 3, 1),
        end=date(2024, 9, 1),
        area=100.0,
        periods=[tier(date(2024, 3, 1), date(2024, 9, 1), 500)],
    ))
    await contract_service.create_contract(make_spec("RC-DRAFT"), tenant.actor)

    report = await occupancy_service.get_revenue_report(
        tenant.company.id, date(2024, 1, 1), date(2024, 12, 31)
    )

    assert report.total_revenue == 2700.0
    assert report.active_contract_count == 2
    assert report.average_rent == 1350.0

    assert len(report.revenue_by_building) == 1
    assert report.revenue_by_building[0].total_rent == 2700.0
    assert report.revenue_by_building[0].contract_count == 2

    assert len(report.top_customers) == 1
    assert report.top_customers[0].customer_name == "Customer A"
    assert report.top_customers[0].contract_count == 2


async def test_revenue_range_filters_tiers(occupancy_service, tenant, make_spec, create_active):
    await create_active(make_spec())

    report = await occupancy_service.get_revenue_report(
        tenant.company.id, date(2024, 8, 1), date(2024, 8, 31)
    )
    assert report.total_revenue == 1200.0
    assert report.active_contract_count == 1


async def test_monthly_trend_is_zero_filled(occupancy_service, contract_service, tenant, make_spec):
    # draft contracts still count toward the trend
    await contract_service.create_contract(make_spec(), tenant.actor)

    report = await occupancy_service.get_revenue_report(
        tenant.company.id, date(2024, 1, 1), date(2024, 12, 31)
    )

    months = [m.month for m in report.monthly_trend]
    assert len(months) == 12
    assert months[0] == "2023-09"
    assert months[-1] == "2024-08"
    by_month = {m.month: m.revenue for m in report.monthly_trend}
    assert by_month["2024-01"] == 1000.0
    assert by_month["2024-07"] == 1200.0
    assert by_month["2024-02"] == 0.0


async def test_revenue_rejects_inverted_range(occupancy_service, tenant):
    with pytest.raises(ValidationError):
        await occupancy_service.get_revenue_report(
            tenant.company.id, date(2024, 12, 1), date(2024, 1, 1)
        )


# ─────────────────────── Expiring ───────────────────────

async def test_expiring_report(occupancy_service, tenant, make_spec, create_active):
    await create_active(make_spec(
        "RC-SOON",
        start=date(2024, 1, 1),
        end=date(2024, 8, 21),
        periods=[
            tier(date(2024, 1, 1), date(2024, 5, 1), 900),
            tier(date(2024, 5, 1), date(2024, 8, 21), 950),
        ],
    ))

    items = await occupancy_service.get_expiring_report(tenant.company.id, 30)

    assert len(items) == 1
    item = items[0]
    assert item.contract_no == "RC-SOON"
    assert item.days_remaining == 20
    assert item.customer_name == "Customer A"
    assert item.customer_phone == "021234567"
    assert item.spaces == "Tower A - Floor 5"
    assert item.total_rent == 950.0
