from datetime import date

import pytest

from rentroll.models.contract import ContractStatus

from conftest import tier

AS_OF = date(2024, 8, 1)


def _ended(make_spec, contract_no, end):
    return make_spec(
        contract_no,
        start=date(2024, 1, 1),
        end=end,
        periods=[tier(date(2024, 1, 1), end, 800)],
    )


async def test_sweep_expires_overdue_active_contracts(
    contract_service, tenant, make_spec, create_active
):
    overdue_a = await create_active(_ended(make_spec, "RC-A", date(2024, 6, 30)))
    overdue_b = await create_active(_ended(make_spec, "RC-B", date(2024, 7, 31)))
    ends_today = await create_active(_ended(make_spec, "RC-C", AS_OF))
    current = await create_active(make_spec("RC-D"))
    draft = await contract_service.create_contract(
        _ended(make_spec, "RC-E", date(2024, 3, 1)), tenant.actor
    )

    assert await contract_service.run_expiry_sweep(AS_OF) == 2

    statuses = {
        c.contract_no: c.status for c in await contract_service.list_contracts(tenant.company.id)
    }
    assert statuses[overdue_a.contract_no] == ContractStatus.EXPIRED
    assert statuses[overdue_b.contract_no] == ContractStatus.EXPIRED
    assert statuses[ends_today.contract_no] == ContractStatus.ACTIVE
    assert statuses[current.contract_no] == ContractStatus.ACTIVE
    assert statuses[draft.contract_no] == ContractStatus.DRAFT


async def test_second_sweep_is_a_noop(contract_service, tenant, make_spec, create_active):
    contract = await create_active(_ended(make_spec, "RC-A", date(2024, 6, 30)))

    assert await contract_service.run_expiry_sweep(AS_OF) == 1
    after_first = await contract_service.get_contract(contract.id, tenant.company.id)

    assert await contract_service.run_expiry_sweep(AS_OF) == 0
    after_second = await contract_service.get_contract(contract.id, tenant.company.id)

    assert after_second.status == ContractStatus.EXPIRED
    assert after_second.version == after_first.version


async def test_sweep_defaults_to_clock_and_can_be_scoped(
    contract_service, tenant, other_tenant, make_spec, create_active
):
    await create_active(_ended(make_spec, "RC-A", date(2024, 6, 30)))

    assert await contract_service.run_expiry_sweep(company_id=other_tenant.company.id) == 0
    assert await contract_service.run_expiry_sweep() == 1


async def test_deleted_contracts_are_skipped(contract_service, tenant, make_spec, create_active):
    contract = await create_active(_ended(make_spec, "RC-A", date(2024, 6, 30)))
    await contract_service.delete_contract(contract.id, tenant.company.id)

    assert await contract_service.run_expiry_sweep(AS_OF) == 0


async def test_on_expired_failure_rolls_back_the_sweep(
    contract_service, tenant, make_spec, create_active
):
    overdue = await create_active(_ended(make_spec, "RC-A", date(2024, 6, 30)))

    def fail(session, expired):
        raise RuntimeError("alert write failed")

    with pytest.raises(RuntimeError):
        await contract_service.expire_overdue(AS_OF, on_expired=fail)

    reloaded = await contract_service.get_contract(overdue.id, tenant.company.id)
    assert reloaded.status == ContractStatus.ACTIVE
    assert await contract_service.run_expiry_sweep(AS_OF) == 1
