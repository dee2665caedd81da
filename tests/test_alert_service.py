import uuid
from datetime import date

import pytest

from rentroll.core.exceptions import NotFound
from rentroll.models.alert import AlertType
from rentroll.models.contract import ContractStatus

from conftest import tier


def _ending(make_spec, contract_no, end):
    return make_spec(
        contract_no,
        start=date(2024, 1, 1),
        end=end,
        periods=[tier(date(2024, 1, 1), end, 700)],
    )


async def test_threshold_and_expired_alerts(
    alert_service, contract_service, tenant, make_spec, create_active
):
    # today is 2024-08-01
    in_30 = await create_active(_ending(make_spec, "RC-30", date(2024, 8, 31)))
    in_90 = await create_active(_ending(make_spec, "RC-90", date(2024, 10, 30)))
    overdue = await create_active(_ending(make_spec, "RC-OLD", date(2024, 7, 15)))
    await create_active(_ending(make_spec, "RC-45", date(2024, 9, 15)))

    result = await alert_service.check_expiring_contracts()

    assert result.as_of == date(2024, 8, 1)
    assert result.alerts_created == 3
    assert result.contracts_expired == 1

    alerts = await alert_service.list_alerts(tenant.company.id)
    by_contract = {a.contract_id: a.type for a in alerts}
    assert by_contract == {
        in_30.id: AlertType.EXPIRY_30,
        in_90.id: AlertType.EXPIRY_90,
        overdue.id: AlertType.EXPIRED,
    }
    expired = await contract_service.get_contract(overdue.id, tenant.company.id)
    assert expired.status == ContractStatus.EXPIRED


async def test_check_is_deduplicated(alert_service, tenant, make_spec, create_active):
    await create_active(_ending(make_spec, "RC-30", date(2024, 8, 31)))
    await create_active(_ending(make_spec, "RC-OLD", date(2024, 7, 15)))

    first = await alert_service.check_expiring_contracts()
    second = await alert_service.check_expiring_contracts()

    assert first.alerts_created == 2
    assert second.alerts_created == 0
    assert second.contracts_expired == 0
    assert len(await alert_service.list_alerts(tenant.company.id)) == 2


async def test_draft_contracts_get_no_alerts(alert_service, contract_service, tenant, make_spec):
    await contract_service.create_contract(_ending(make_spec, "RC-30", date(2024, 8, 31)), tenant.actor)

    result = await alert_service.check_expiring_contracts()
    assert result.alerts_created == 0


async def test_read_flags(alert_service, tenant, other_tenant, make_spec, create_active):
    await create_active(_ending(make_spec, "RC-30", date(2024, 8, 31)))
    await create_active(_ending(make_spec, "RC-OLD", date(2024, 7, 15)))
    await alert_service.check_expiring_contracts()

    assert await alert_service.unread_count(tenant.company.id) == 2
    assert await alert_service.unread_count(other_tenant.company.id) == 0

    first = (await alert_service.list_alerts(tenant.company.id))[0]
    marked = await alert_service.mark_as_read(first.id, tenant.company.id)
    assert marked.is_read is True
    assert await alert_service.unread_count(tenant.company.id) == 1
    assert len(await alert_service.list_alerts(tenant.company.id, unread_only=True)) == 1

    with pytest.raises(NotFound):
        await alert_service.mark_as_read(first.id, other_tenant.company.id)
    with pytest.raises(NotFound):
        await alert_service.mark_as_read(uuid.uuid4(), tenant.company.id)

    assert await alert_service.mark_all_as_read(tenant.company.id) == 1
    assert await alert_service.unread_count(tenant.company.id) == 0


async def test_company_scoped_check_leaves_other_companies_alone(
    alert_service, contract_service, tenant, other_tenant, make_spec, create_active
):
    own = await create_active(_ending(make_spec, "RC-OLD", date(2024, 7, 15)))
    foreign = await contract_service.create_contract(
        make_spec(
            "RC-B",
            start=date(2024, 1, 1),
            end=date(2024, 7, 15),
            periods=[tier(date(2024, 1, 1), date(2024, 7, 15), 700)],
            customer_id=other_tenant.customer.id,
            building_id=other_tenant.building.id,
        ),
        other_tenant.actor,
    )
    await contract_service.activate_contract(foreign.id, other_tenant.company.id)

    result = await alert_service.check_expiring_contracts(company_id=tenant.company.id)

    assert result.contracts_expired == 1
    assert (await contract_service.get_contract(own.id, tenant.company.id)).status == (
        ContractStatus.EXPIRED
    )
    untouched = await contract_service.get_contract(foreign.id, other_tenant.company.id)
    assert untouched.status == ContractStatus.ACTIVE
    assert await alert_service.list_alerts(other_tenant.company.id) == []
