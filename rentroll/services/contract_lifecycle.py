"""
Contract Lifecycle
draft -> active -> {expired, terminated}
draft -> cancelled

expired, terminated and cancelled are terminal.
"""
import logging
from typing import Dict, FrozenSet, Optional

from rentroll.core.exceptions import ConcurrentModification, InvalidStateTransition
from rentroll.models.contract import ContractStatus, RentContract

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[ContractStatus, FrozenSet[ContractStatus]] = {
    ContractStatus.DRAFT: frozenset({ContractStatus.ACTIVE, ContractStatus.CANCELLED}),
    ContractStatus.ACTIVE: frozenset({ContractStatus.EXPIRED, ContractStatus.TERMINATED}),
    ContractStatus.EXPIRED: frozenset(),
    ContractStatus.TERMINATED: frozenset(),
    ContractStatus.CANCELLED: frozenset(),
}

_REJECTIONS = {
    ContractStatus.ACTIVE: "only draft contracts can be activated",
    ContractStatus.TERMINATED: "only active contracts can be terminated",
    ContractStatus.CANCELLED: "only draft contracts can be cancelled",
    ContractStatus.EXPIRED: "only active contracts can be expired",
}

RENEWAL_REJECTION = "only active contracts can be renewed"


def can_transition(current: ContractStatus, target: ContractStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def check_version(contract: RentContract, expected_version: Optional[int]) -> None:
    """Fail fast when the caller acted on a stale read of *contract*."""
    if expected_version is not None and contract.version != expected_version:
        raise ConcurrentModification(
            "contract was modified by another transaction",
            detail={"expected_version": expected_version, "current_version": contract.version},
        )


def transition(contract: RentContract, target: ContractStatus) -> RentContract:
    current = ContractStatus(contract.status)
    if not can_transition(current, target):
        logger.warning(
            f"[LIFECYCLE] Rejected {current.value} -> {target.value} for contract {contract.id}"
        )
        raise InvalidStateTransition(
            _REJECTIONS[target],
            detail={"status": current.value, "target": target.value},
        )
    contract.status = target
    logger.info(f"[LIFECYCLE] Contract {contract.id}: {current.value} -> {target.value}")
    return contract


def ensure_renewable(contract: RentContract) -> None:
    if ContractStatus(contract.status) != ContractStatus.ACTIVE:
        raise InvalidStateTransition(
            RENEWAL_REJECTION, detail={"status": ContractStatus(contract.status).value}
        )
