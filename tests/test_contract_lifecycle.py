import pytest

from rentroll.core.exceptions import ConcurrentModification, InvalidStateTransition
from rentroll.models.contract import ContractStatus, RentContract
from rentroll.services.contract_lifecycle import (
    can_transition,
    check_version,
    ensure_renewable,
    transition,
)

S = ContractStatus


@pytest.mark.parametrize(
    "current,target",
    [
        (S.DRAFT, S.ACTIVE),
        (S.DRAFT, S.CANCELLED),
        (S.ACTIVE, S.EXPIRED),
        (S.ACTIVE, S.TERMINATED),
    ],
)
def test_allowed_transitions(current, target):
    contract = RentContract(status=current)
    transition(contract, target)
    assert contract.status == target


@pytest.mark.parametrize("current", [S.ACTIVE, S.EXPIRED, S.TERMINATED, S.CANCELLED])
def test_activate_requires_draft(current):
    contract = RentContract(status=current)
    with pytest.raises(InvalidStateTransition, match="only draft contracts can be activated"):
        transition(contract, S.ACTIVE)
    assert contract.status == current


@pytest.mark.parametrize("current", [S.DRAFT, S.EXPIRED, S.TERMINATED, S.CANCELLED])
def test_terminate_requires_active(current):
    with pytest.raises(InvalidStateTransition, match="only active contracts can be terminated"):
        transition(RentContract(status=current), S.TERMINATED)


@pytest.mark.parametrize("current", [S.ACTIVE, S.EXPIRED, S.TERMINATED, S.CANCELLED])
def test_cancel_requires_draft(current):
    with pytest.raises(InvalidStateTransition, match="only draft contracts can be cancelled"):
        transition(RentContract(status=current), S.CANCELLED)


def test_terminal_states_have_no_exits():
    for terminal in (S.EXPIRED, S.TERMINATED, S.CANCELLED):
        assert not any(can_transition(terminal, target) for target in S)


def test_renewal_requires_active():
    ensure_renewable(RentContract(status=S.ACTIVE))
    for status in (S.DRAFT, S.EXPIRED, S.TERMINATED, S.CANCELLED):
        with pytest.raises(InvalidStateTransition, match="only active contracts can be renewed"):
            ensure_renewable(RentContract(status=status))


def test_version_check():
    contract = RentContract(status=S.DRAFT, version=3)
    check_version(contract, None)
    check_version(contract, 3)
    with pytest.raises(ConcurrentModification):
        check_version(contract, 2)
